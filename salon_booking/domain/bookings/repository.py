"""Booking repository - Database operations for bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...enums import ACTIVE_BOOKING_STATUSES, BookingStatus
from ...models import Booking, Schedule


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_schedule_for_update(db: Session, schedule_id: int) -> Optional[Schedule]:
        """Lock the schedule row so concurrent bookings can't take the same slots"""
        return db.query(Schedule).filter(Schedule.id == schedule_id).with_for_update().first()

    @staticmethod
    def add_booking(db: Session, **booking_data) -> Booking:
        """Stage a booking in the current transaction; the caller commits"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def get_active_bookings_for_schedule(db: Session, schedule_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.schedule_id == schedule_id, Booking.status.in_(ACTIVE_BOOKING_STATUSES))
            .all()
        )

    @staticmethod
    def find_user_bookings(
        db: Session, first_name: str, last_name: str, phone: Optional[str] = None, email: Optional[str] = None
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.first_name == first_name, Booking.last_name == last_name)
        if phone:
            query = query.filter(Booking.phone == phone)
        else:
            query = query.filter(Booking.email == email)
        return query.order_by(Booking.created_at.desc()).all()

    @staticmethod
    def list_bookings(
        db: Session,
        status: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> list[Booking]:
        query = db.query(Booking).options(joinedload(Booking.schedule))
        if status:
            query = query.filter(Booking.status == status)
        if created_from:
            query = query.filter(Booking.created_at >= created_from)
        if created_to:
            query = query.filter(Booking.created_at <= created_to)
        return query.all()

    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        rows = db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
        return {status: count for status, count in rows}

    @staticmethod
    def count_missed_bookings(
        db: Session, email: str, first_name: str, last_name: str, exclude_id: Optional[int] = None
    ) -> int:
        query = db.query(func.count(Booking.id)).filter(
            Booking.email == email,
            Booking.first_name == first_name,
            Booking.last_name == last_name,
            Booking.status == BookingStatus.MISSED.value,
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.scalar() or 0

    @staticmethod
    def get_completed_bookings(
        db: Session, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.status == BookingStatus.COMPLETED.value)
        if created_from:
            query = query.filter(Booking.created_at >= created_from)
        if created_to:
            query = query.filter(Booking.created_at <= created_to)
        return query.all()
