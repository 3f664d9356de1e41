"""Schedule service - Working days and their open time slots"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Schedule
from ...shared.timeslots import (
    date_parts,
    generate_available_slots,
    normalize_day,
    normalize_month,
    parse_hour,
    schedule_date,
    total_duration,
    update_available_slots_after_booking,
)
from .repository import ScheduleRepository
from .schemas import (
    DeleteScheduleRequest,
    RemoveSlotRequest,
    ScheduleByDateRequest,
    ScheduleCreate,
    ScheduleUpdate,
)

logger = logging.getLogger(__name__)


def _normalize_date(year, month, day) -> tuple[str, str, str]:
    """("2025", "August", "07") from loose parts; raises 400 when they don't form a real date"""
    try:
        parts = (str(int(str(year).strip())), normalize_month(month), normalize_day(day))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail="Invalid schedule date") from e
    if schedule_date(*parts) is None:
        raise HTTPException(status_code=400, detail="Invalid schedule date")
    return parts


def _check_hours(start_time: str, end_time: str, require_order: bool = False) -> None:
    try:
        start, end = parse_hour(start_time), parse_hour(end_time)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid start time {start_time} and end time {end_time}") from e
    if require_order and start >= end:
        raise HTTPException(status_code=400, detail=f"Invalid start time {start_time} and end time {end_time}")


class ScheduleService:
    """Service layer for schedule business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
        if not schedule:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return schedule

    def create_schedule(self, data: ScheduleCreate) -> Schedule:
        if not data.year or not data.month or not data.day or not data.startTime or not data.endTime:
            raise HTTPException(status_code=400, detail="Schedule date argument is incomplete")

        year, month, day = _normalize_date(data.year, data.month, data.day)
        if schedule_date(year, month, day) < date.today():
            raise HTTPException(status_code=400, detail="Invalid schedule date")

        _check_hours(data.startTime, data.endTime)

        if self.repo.get_schedule_by_date(self.db, year, month, day):
            raise HTTPException(status_code=400, detail="Schedule already exists for this date")

        logger.info(f"📥 Creating schedule for {month} {day}, {year} ({data.startTime}-{data.endTime})")
        return self.repo.create_schedule(
            self.db,
            year=year,
            month=month,
            day=day,
            start_time=data.startTime.strip(),
            end_time=data.endTime.strip(),
            available_slots=generate_available_slots(data.startTime, data.endTime),
        )

    def update_schedule(self, data: ScheduleUpdate) -> Schedule:
        """Partial update; slots are rebuilt from the hours and existing bookings keep theirs"""
        if not data.scheduleId:
            raise HTTPException(status_code=400, detail="Invalid request argument")
        schedule = self.get_schedule(data.scheduleId)

        if data.year or data.month or data.day:
            year, month, day = _normalize_date(
                data.year or schedule.year, data.month or schedule.month, data.day or schedule.day
            )
            if (year, month, day) != (schedule.year, schedule.month, schedule.day):
                if schedule_date(year, month, day) < date.today():
                    raise HTTPException(status_code=400, detail="Invalid schedule date")
                if self.repo.get_schedule_by_date(self.db, year, month, day):
                    raise HTTPException(status_code=400, detail="Schedule already exists for this date")
                schedule.year, schedule.month, schedule.day = year, month, day

        start_time = (data.startTime or schedule.start_time).strip()
        end_time = (data.endTime or schedule.end_time).strip()
        _check_hours(start_time, end_time, require_order=True)

        slots = generate_available_slots(start_time, end_time)
        for booking in self.repo.get_active_bookings(self.db, schedule.id):
            slots = update_available_slots_after_booking(booking.start_time, total_duration(booking.service), slots)

        schedule.start_time = start_time
        schedule.end_time = end_time
        schedule.available_slots = slots
        logger.info(f"🗓️ Schedule {schedule.id} updated: {start_time}-{end_time}, {len(slots)} open slots")
        return self.repo.save(self.db, schedule)

    def remove_slot(self, data: RemoveSlotRequest) -> Schedule:
        if not data.scheduleId or not data.slot:
            raise HTTPException(status_code=400, detail="Invalid request argument")
        schedule = self.get_schedule(data.scheduleId)

        try:
            hour = parse_hour(data.slot)
        except ValueError as e:
            raise HTTPException(status_code=404, detail="Timeslot not found in schedule") from e

        current = list(schedule.available_slots or [])
        remaining = [slot for slot in current if parse_hour(slot) != hour]
        if len(remaining) == len(current):
            raise HTTPException(status_code=404, detail="Timeslot not found in schedule")

        schedule.available_slots = remaining
        return self.repo.save(self.db, schedule)

    def delete_schedule(self, data: DeleteScheduleRequest) -> bool:
        if not data.scheduleId:
            raise HTTPException(status_code=400, detail="Invalid request argument")
        deleted = self.repo.delete_schedule(self.db, data.scheduleId)
        if deleted:
            logger.info(f"🗑️ Schedule {data.scheduleId} deleted")
        return bool(deleted)

    def get_all_schedules(self) -> list[Schedule]:
        schedules = self.repo.get_all_schedules(self.db)
        return sorted(schedules, key=lambda s: schedule_date(s.year, s.month, s.day) or date.max)

    def get_by_date(self, data: ScheduleByDateRequest) -> Optional[Schedule]:
        if not data.date:
            raise HTTPException(status_code=400, detail="Date is required")
        try:
            year, month, day = date_parts(data.date)
        except (ValueError, OverflowError) as e:
            raise HTTPException(status_code=400, detail="Invalid date") from e
        return self.repo.get_schedule_by_date(self.db, year, month, day)
