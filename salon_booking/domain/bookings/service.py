"""Booking service - Business logic for booking operations"""

import logging
from collections import defaultdict
from datetime import date, datetime, time
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...enums import ACTIVE_BOOKING_STATUSES, BookingStatus
from ...models import Booking, Schedule, utcnow
from ...services.customer_service import block_user, get_customer_for_booking
from ...shared.timeslots import (
    blocked_hours,
    format_slot,
    parse_date,
    parse_hour,
    restore_slots_after_cancellation,
    schedule_date,
    total_duration,
    update_available_slots_after_booking,
)
from .repository import BookingRepository
from .schemas import (
    BookingCreate,
    CancelBookingRequest,
    FindUserBookingsRequest,
    GetBookingsRequest,
    IncomeReportRequest,
    UpdateBookingRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 200
# A customer is blocked when a booking is marked missed while this many others already are
MISSED_BOOKINGS_BEFORE_BLOCK = 2

BLOCKED_CUSTOMER_MESSAGE = (
    "Cannot proceed with booking, due to missed appointments in the past. "
    "Contact directly to proceed with booking."
)
SLOT_TAKEN_MESSAGE = "Selected time slot is no longer available"


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _parse_bound(value: Optional[str], field: str) -> Optional[datetime]:
    try:
        return parse_date(value)
    except (ValueError, OverflowError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid {field} date") from e


def _parse_day(value: Optional[str], field: str) -> Optional[date]:
    try:
        parsed = parse_date(value, to_utc=False)
    except (ValueError, OverflowError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid {field} date") from e
    return parsed.date() if parsed else None


def appointment_datetime(booking: Booking) -> datetime:
    """Midnight of the scheduled day, or the creation time for bookings without a schedule"""
    schedule = booking.schedule
    if schedule:
        day = schedule_date(schedule.year, schedule.month, schedule.day)
        if day:
            return datetime.combine(day, time.min)
    return booking.created_at or utcnow()


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    # ------------------------------------------------------------------
    # Customer-facing
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate) -> Booking:
        """Create a booking and take its hours out of the schedule in one transaction"""
        service = data.service
        if (
            not data.firstName
            or not data.lastName
            or not data.phone
            or not data.email
            or not data.startTime
            or not data.scheduleId
            or not service
            or not service.duration
            or not service.title
        ):
            logger.warning("⚠️ Booking rejected: missing required fields")
            raise HTTPException(status_code=400, detail="Invalid request argument")

        try:
            start_hour = parse_hour(data.startTime)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Invalid request argument") from e

        logger.info(f"📥 Creating booking on schedule {data.scheduleId} at {data.startTime}")

        service_data = service.model_dump()
        duration = total_duration(service_data)

        try:
            # A new customer row is only flushed, so a rejected booking leaves nothing behind
            customer = get_customer_for_booking(self.db, data.firstName, data.lastName, data.phone, data.email)
            if customer.is_blocked:
                logger.warning(f"🚫 Blocked customer {customer.id} attempted to book")
                raise HTTPException(status_code=400, detail=BLOCKED_CUSTOMER_MESSAGE)

            schedule = self.repo.get_schedule_for_update(self.db, data.scheduleId)
            if not schedule:
                raise HTTPException(status_code=404, detail="Schedule not found")

            self._ensure_hours_free(schedule, start_hour, duration)

            booking = self.repo.add_booking(
                self.db,
                first_name=data.firstName,
                last_name=data.lastName,
                phone=data.phone,
                email=data.email,
                start_time=format_slot(start_hour),
                additional_notes=data.AdditionalNotes,
                custom_service_detail=data.customServiceDetail,
                schedule_id=schedule.id,
                user_id=customer.id,
                service=service_data,
                status=BookingStatus.UPCOMING.value,
                total=0,
            )
            schedule.available_slots = update_available_slots_after_booking(
                start_hour, duration, list(schedule.available_slots or [])
            )
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error while creating booking: {e}")
            raise HTTPException(status_code=400, detail="Error while creating booking") from e

        self.db.refresh(booking)
        logger.info(f"✅ Booking {booking.id} created for customer {customer.id}")
        return booking

    def find_user_bookings(self, data: FindUserBookingsRequest) -> list[Booking]:
        if not data.phone and not data.email:
            raise HTTPException(status_code=400, detail="Missing customers phone or email")
        if not data.firstName or not data.lastName:
            raise HTTPException(status_code=400, detail="Missing customers name")
        return self.repo.find_user_bookings(self.db, data.firstName, data.lastName, data.phone, data.email)

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def cancel_booking(self, data: CancelBookingRequest) -> str:
        if not data.bookingId:
            raise HTTPException(status_code=400, detail="Invalid request arguments")

        booking = self.get_booking(data.bookingId)
        if booking.status == BookingStatus.CANCELLED.value:
            return "Booking already cancelled"

        booking.status = BookingStatus.CANCELLED.value
        self._release_slots(booking)
        self.db.commit()
        logger.info(f"🗓️ Booking {booking.id} cancelled")
        return "Booking cancelled"

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def get_bookings(self, data: GetBookingsRequest) -> dict:
        page = _positive_int(data.page) or 1
        page_size = _positive_int(data.pageSize)
        if not page_size or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE

        bookings = self.repo.list_bookings(
            self.db,
            status=data.status,
            created_from=_parse_bound(data.from_, "from"),
            created_to=_parse_bound(data.to, "to"),
        )

        day_from = _parse_day(data.appointmentDateFrom, "appointmentDateFrom")
        day_to = _parse_day(data.appointmentDateTo, "appointmentDateTo")

        rows = []
        for booking in bookings:
            when = appointment_datetime(booking)
            if day_from and when.date() < day_from:
                continue
            if day_to and when.date() > day_to:
                continue
            rows.append((when, booking))

        now = datetime.now()
        # Upcoming appointments first, then past ones; each group oldest first
        rows.sort(key=lambda row: (0 if row[0] > now else 1, row[0]))

        total = len(rows)
        start = (page - 1) * page_size
        items = []
        for _, booking in rows[start : start + page_size]:
            item = booking.to_dict()
            schedule = booking.schedule
            item["schedule"] = (
                {"year": schedule.year, "month": schedule.month, "day": schedule.day} if schedule else None
            )
            items.append(item)

        return {"items": items, "total": total, "page": page, "pageSize": page_size}

    def get_summary(self) -> dict:
        counts = self.repo.count_by_status(self.db)
        return {
            "completed": counts.get(BookingStatus.COMPLETED.value, 0),
            "upcoming": counts.get(BookingStatus.UPCOMING.value, 0),
            "cancelled": counts.get(BookingStatus.CANCELLED.value, 0),
            "missed": counts.get(BookingStatus.MISSED.value, 0),
            "total": sum(counts.values()),
        }

    def update_booking(self, data: UpdateBookingRequest) -> str:
        if not data.bookingId or (not data.status and data.price is None):
            raise HTTPException(status_code=400, detail="Invalid request arguments")
        if data.status and data.status not in {s.value for s in BookingStatus}:
            raise HTTPException(status_code=400, detail=f"Invalid booking status {data.status}")

        booking = self.get_booking(data.bookingId)
        previous_status = booking.status
        logger.info(f"📥 Updating booking {booking.id}: status={data.status}, price={data.price}")

        try:
            # Reactivation rechecks the hours before anything else changes
            if previous_status == BookingStatus.CANCELLED.value and data.status in ACTIVE_BOOKING_STATUSES:
                self._retake_slots(booking)

            if data.status == BookingStatus.MISSED.value and previous_status != BookingStatus.MISSED.value:
                self._block_repeat_no_show(booking)

            if data.status:
                booking.status = data.status
            if data.price is not None:
                booking.total = data.price

            if data.status == BookingStatus.CANCELLED.value and previous_status != BookingStatus.CANCELLED.value:
                self._release_slots(booking)

            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        return "Booking status updated"

    def get_income_report(self, data: IncomeReportRequest) -> dict:
        bookings = self.repo.get_completed_bookings(
            self.db,
            created_from=_parse_bound(data.from_, "from"),
            created_to=_parse_bound(data.to, "to"),
        )

        now = utcnow()
        start_of_month = datetime(now.year, now.month, 1)
        start_of_year = datetime(now.year, 1, 1)

        def empty():
            return {"totalRevenue": 0, "totalCompleted": 0}

        overall, month, year = empty(), empty(), empty()
        per_year = defaultdict(empty)
        per_month = defaultdict(empty)

        for booking in bookings:
            amount = booking.total or 0
            created = booking.created_at or now
            buckets = [overall, per_year[created.year]]
            if start_of_year <= created <= now:
                buckets += [year, per_month[created.month]]
                if created >= start_of_month:
                    buckets.append(month)
            for bucket in buckets:
                bucket["totalRevenue"] += amount
                bucket["totalCompleted"] += 1

        return {
            "totalRevenue": overall["totalRevenue"],
            "totalCompleted": overall["totalCompleted"],
            "currentMonth": month,
            "currentYear": year,
            "statsPerYear": [{"year": y, **per_year[y]} for y in sorted(per_year, reverse=True)],
            "statsPerMonth": [{"month": m, **per_month[m]} for m in sorted(per_month)],
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _block_repeat_no_show(self, booking: Booking) -> None:
        customer = get_customer_for_booking(
            self.db, booking.first_name, booking.last_name, booking.phone, booking.email
        )
        missed = self.repo.count_missed_bookings(
            self.db, customer.email, customer.first_name, customer.last_name, exclude_id=booking.id
        )
        if missed >= MISSED_BOOKINGS_BEFORE_BLOCK:
            logger.warning(f"🚫 Customer {customer.id} has {missed} missed bookings, blocking")
            block_user(self.db, customer.id)

    def _release_slots(self, booking: Booking) -> None:
        schedule = booking.schedule
        if not schedule:
            return
        schedule.available_slots = restore_slots_after_cancellation(
            booking.start_time,
            total_duration(booking.service),
            list(schedule.available_slots or []),
            schedule.start_time,
            schedule.end_time,
        )

    def _ensure_hours_free(
        self, schedule: Schedule, start_hour: int, duration: float, exclude_id: Optional[int] = None
    ) -> None:
        """409 unless the start slot is open and no other active booking overlaps the hours"""
        available_hours = {parse_hour(slot) for slot in schedule.available_slots or []}
        if start_hour not in available_hours:
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

        requested = set(blocked_hours(start_hour, duration))
        for existing in self.repo.get_active_bookings_for_schedule(self.db, schedule.id):
            if existing.id == exclude_id:
                continue
            taken = set(blocked_hours(existing.start_time, total_duration(existing.service)))
            if requested & taken:
                raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

    def _retake_slots(self, booking: Booking) -> None:
        if not booking.schedule_id:
            return
        schedule = self.repo.get_schedule_for_update(self.db, booking.schedule_id)
        if not schedule:
            return

        duration = total_duration(booking.service)
        self._ensure_hours_free(schedule, parse_hour(booking.start_time), duration, exclude_id=booking.id)
        schedule.available_slots = update_available_slots_after_booking(
            booking.start_time, duration, list(schedule.available_slots or [])
        )
