"""Booking router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Admin
from ...rate_limiter import booking_rate_limit
from ...services.email_service import send_new_booking_notification
from ...shared.envelope import envelope
from .schemas import (
    BookingCreate,
    CancelBookingRequest,
    FindUserBookingsRequest,
    GetBookingsRequest,
    IncomeReportRequest,
    UpdateBookingRequest,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/booking", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.post("", status_code=201)
async def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(booking_rate_limit),
):
    """Book a time slot; the admin is notified by email in the background"""
    booking = service.create_booking(data)
    schedule = booking.schedule
    appointment_date = f"{schedule.month} {schedule.day}, {schedule.year}" if schedule else ""
    background_tasks.add_task(send_new_booking_notification, booking.to_dict(), appointment_date)
    return envelope(True, "Booking created")


@router.post("/find-user-bookings")
async def find_user_bookings(
    data: FindUserBookingsRequest,
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.find_user_bookings(data)
    return envelope(True, [b.to_dict() for b in bookings])


@router.post("/get-bookings")
async def get_bookings(
    data: Optional[GetBookingsRequest] = None,
    admin: Admin = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Filtered, paginated bookings for the dashboard"""
    return envelope(True, service.get_bookings(data or GetBookingsRequest()))


@router.get("/summary")
async def get_booking_summary(
    admin: Admin = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return envelope(True, service.get_summary())


@router.post("/update")
async def update_booking(
    data: UpdateBookingRequest,
    admin: Admin = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(booking_rate_limit),
):
    """Change a booking's status and/or its charged total"""
    return envelope(True, service.update_booking(data))


@router.post("/cancel")
async def cancel_booking(
    data: CancelBookingRequest,
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(booking_rate_limit),
):
    return envelope(True, service.cancel_booking(data))


@router.post("/income-report")
async def get_income_report(
    data: Optional[IncomeReportRequest] = None,
    admin: Admin = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return envelope(True, service.get_income_report(data or IncomeReportRequest()))


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
):
    return envelope(True, service.get_booking(booking_id).to_dict())
