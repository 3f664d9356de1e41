"""Schedule repository - Database operations for schedules"""

from typing import Optional

from sqlalchemy.orm import Session

from ...enums import ACTIVE_BOOKING_STATUSES
from ...models import Booking, Schedule


class ScheduleRepository:
    """Repository for schedule database operations"""

    @staticmethod
    def get_schedule_by_id(db: Session, schedule_id: int) -> Optional[Schedule]:
        return db.query(Schedule).filter(Schedule.id == schedule_id).first()

    @staticmethod
    def get_schedule_by_date(db: Session, year: str, month: str, day: str) -> Optional[Schedule]:
        return (
            db.query(Schedule)
            .filter(Schedule.year == year, Schedule.month == month, Schedule.day == day)
            .first()
        )

    @staticmethod
    def get_all_schedules(db: Session) -> list[Schedule]:
        return db.query(Schedule).all()

    @staticmethod
    def create_schedule(db: Session, **schedule_data) -> Schedule:
        schedule = Schedule(**schedule_data)
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def save(db: Session, schedule: Schedule) -> Schedule:
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def delete_schedule(db: Session, schedule_id: int) -> int:
        """Returns the number of deleted rows"""
        schedule = db.query(Schedule).filter(Schedule.id == schedule_id).first()
        if not schedule:
            return 0
        db.delete(schedule)
        db.commit()
        return 1

    @staticmethod
    def get_active_bookings(db: Session, schedule_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.schedule_id == schedule_id, Booking.status.in_(ACTIVE_BOOKING_STATUSES))
            .all()
        )
