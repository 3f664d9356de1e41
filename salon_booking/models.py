from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .enums import BookingStatus, MediaType, UserRoles


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class Admin(Base):
    """Salon staff who sign in to the dashboard with Google"""

    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    google_id = Column(String(255), unique=True, index=True, nullable=False)
    google_email = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    role = Column(String(50), nullable=False, default=UserRoles.EMPLOYEE.value)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    auth_codes = relationship("AuthCode", back_populates="admin", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "googleId": self.google_id,
            "googleEmail": self.google_email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role,
        }


class AuthCode(Base):
    """One login session of an admin; the CSRF token is bound to its id"""

    __tablename__ = "auth_codes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False, index=True)
    refresh_token = Column(Text, nullable=False)
    refresh_token_expiry = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    admin = relationship("Admin", back_populates="auth_codes")


class User(Base):
    """A booking customer"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    phone = Column(String(32), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(50), nullable=False, default=UserRoles.CUSTOMER.value)
    is_blocked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship("Booking", back_populates="user")

    def to_dict(self, include_bookings: bool = True) -> dict:
        data = {
            "_id": self.id,
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "email": self.email,
            "role": self.role,
            "isBlocked": self.is_blocked,
            "createdAt": _iso(self.created_at),
        }
        if include_bookings:
            data["bookings"] = [b.to_dict() for b in self.bookings]
        return data


class Schedule(Base):
    """A working day: its hours and the hourly slots still open for booking"""

    __tablename__ = "schedules"
    __table_args__ = (UniqueConstraint("year", "month", "day", name="uq_schedule_date"),)

    id = Column(Integer, primary_key=True, index=True)
    year = Column(String(4), nullable=False)
    month = Column(String(20), nullable=False)  # Long month name, e.g. "August"
    day = Column(String(2), nullable=False)  # Zero-padded, e.g. "07"
    start_time = Column(String(10), nullable=False)
    end_time = Column(String(10), nullable=False)
    available_slots = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship("Booking", back_populates="schedule")

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "availableSlots": list(self.available_slots or []),
            "bookings": [b.id for b in self.bookings],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    start_time = Column(String(10), nullable=False)
    additional_notes = Column(Text, nullable=True)
    custom_service_detail = Column(Text, nullable=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    # Snapshot of the booked service: title, price, category, duration, AddOns, hairServiceId
    service = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.UPCOMING.value, index=True)
    total = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    schedule = relationship("Schedule", back_populates="bookings")
    user = relationship("User", back_populates="bookings")

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "email": self.email,
            "startTime": self.start_time,
            "AdditionalNotes": self.additional_notes,
            "customServiceDetail": self.custom_service_detail,
            "scheduleId": self.schedule_id,
            "service": self.service,
            "status": self.status,
            "total": self.total,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class HairCategory(Base):
    __tablename__ = "hair_categories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), unique=True, nullable=False)
    cover_link = Column(String(1000), nullable=False)
    drive_id = Column(String(255), nullable=False)

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "coverLink": self.cover_link,
            "driveId": self.drive_id,
        }


class HairService(Base):
    __tablename__ = "hair_services"
    __table_args__ = (UniqueConstraint("title", "category", name="uq_service_title_category"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String(255), nullable=False, index=True)
    duration = Column(Float, nullable=False)  # Hours

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "category": self.category,
            "duration": self.duration,
        }


class ServiceAddOn(Base):
    __tablename__ = "service_add_ons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    service = Column(String(255), nullable=True, index=True)  # Title of the hair service, if tied to one
    duration = Column(Float, nullable=False)

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "service": self.service,
            "duration": self.duration,
        }


class Media(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True)
    link = Column(String(1000), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    type = Column(String(20), nullable=False, default=MediaType.IMAGE.value)
    drive_id = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "link": self.link,
            "tag": list(self.tags or []),
            "type": self.type,
            "driveId": self.drive_id,
            "createdAt": _iso(self.created_at),
        }


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    cover_image_url = Column(String(1000), nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content,
            "coverImageUrl": self.cover_image_url,
            "isPublished": self.is_published,
            "publishedAt": _iso(self.published_at),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class EmailTransport(Base):
    """One outbound email, kept to enforce the rolling 24h recipient quota"""

    __tablename__ = "email_transports"

    id = Column(Integer, primary_key=True, index=True)
    recipient_count = Column(Integer, nullable=False, default=1)
    email_type = Column(String(50), nullable=False, default="general")
    sent_at = Column(DateTime, nullable=False, default=utcnow, index=True)
