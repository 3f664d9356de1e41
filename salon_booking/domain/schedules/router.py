"""Schedule router - FastAPI endpoints for schedules and time slots"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Admin
from ...rate_limiter import schedule_rate_limit
from ...shared.envelope import envelope, envelope_response
from .schemas import (
    DeleteScheduleRequest,
    RemoveSlotRequest,
    ScheduleByDateRequest,
    ScheduleCreate,
    ScheduleUpdate,
)
from .service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["Schedules"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


@router.post("/create", status_code=201)
async def create_schedule(
    data: ScheduleCreate,
    admin: Admin = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
    _: None = Depends(schedule_rate_limit),
):
    """Open a working day; its hourly slots are generated from startTime to endTime"""
    return envelope(True, service.create_schedule(data).to_dict())


@router.post("/update")
async def update_schedule(
    data: ScheduleUpdate,
    admin: Admin = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
    _: None = Depends(schedule_rate_limit),
):
    return envelope(True, service.update_schedule(data).to_dict())


@router.post("/remove-slot")
async def remove_slot(
    data: RemoveSlotRequest,
    admin: Admin = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
    _: None = Depends(schedule_rate_limit),
):
    return envelope(True, service.remove_slot(data).to_dict())


@router.post("/delete")
async def delete_schedule(
    data: DeleteScheduleRequest,
    admin: Admin = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
    _: None = Depends(schedule_rate_limit),
):
    if not service.delete_schedule(data):
        return envelope_response(False, "No schedule deleted")
    return envelope(True, "Schedule deleted successfully")


@router.post("/date")
async def get_schedule_by_date(
    data: ScheduleByDateRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Schedule for a calendar day, or null when the salon isn't open that day"""
    schedule = service.get_by_date(data)
    return envelope(True, schedule.to_dict() if schedule else None)


@router.get("")
async def get_all_schedules(service: ScheduleService = Depends(get_schedule_service)):
    return envelope(True, [s.to_dict() for s in service.get_all_schedules()])


@router.get("/{schedule_id}")
async def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    return envelope(True, service.get_schedule(schedule_id).to_dict())
