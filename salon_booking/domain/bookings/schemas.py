"""Booking domain schemas - Pydantic models for validation"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...security_utils import sanitize_text
from ...shared.validators import validate_email, validate_phone


class SelectedAddOn(BaseModel):
    title: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[float] = None


class SelectedService(BaseModel):
    """Snapshot of the service a customer picked, stored on the booking as-is"""

    title: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    duration: Optional[float] = None
    AddOns: list[SelectedAddOn] = []
    hairServiceId: Optional[Any] = None

    @field_validator("title", "category")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v, max_length=255)


class BookingCreate(BaseModel):
    """
    Required fields are checked by the service so a missing one yields
    "Invalid request argument" instead of a field-level validation error.
    """

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    startTime: Optional[str] = None
    AdditionalNotes: Optional[str] = None
    customServiceDetail: Optional[str] = None
    scheduleId: Optional[int] = None
    service: Optional[SelectedService] = None

    @field_validator("firstName", "lastName")
    @classmethod
    def clean_names(cls, v):
        return sanitize_text(v, max_length=255)

    @field_validator("AdditionalNotes", "customServiceDetail")
    @classmethod
    def clean_notes(cls, v):
        return sanitize_text(v, max_length=2000)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class FindUserBookingsRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("firstName", "lastName")
    @classmethod
    def clean_names(cls, v):
        return sanitize_text(v, max_length=255)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class GetBookingsRequest(BaseModel):
    """Admin listing filters; `from`/`to` bound createdAt, the appointment bounds are whole days"""

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    appointmentDateFrom: Optional[str] = None
    appointmentDateTo: Optional[str] = None
    page: Optional[Any] = None
    pageSize: Optional[Any] = None


class UpdateBookingRequest(BaseModel):
    bookingId: Optional[int] = None
    status: Optional[str] = None
    price: Optional[float] = None


class CancelBookingRequest(BaseModel):
    bookingId: Optional[int] = None


class IncomeReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
