"""
Booking wizard state and the guards around it

The wizard runs /booking/create -> /booking/select-service -> /booking/select-add-ons
-> /booking/customer-info -> confirm. Each step reads the draft built by the previous ones.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..shared.timeslots import compute_end_time, total_duration, total_price
from ..shared.validators import validate_email, validate_phone
from .persistence import CSRF_TOKEN_KEY, USER_KEY, PersistStore

BOOKING_START = "/booking/create"
ADMIN_LOGIN = "/admin/login"
ADMIN_HOME = "/admin/dashboard"


class BookingDraft(BaseModel):
    scheduleId: Optional[Any] = None
    startTime: Optional[str] = None
    service: Optional[dict] = None
    addOns: list[dict] = Field(default_factory=list)
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    AdditionalNotes: Optional[str] = None
    customServiceDetail: Optional[str] = None

    def selected_service(self) -> Optional[dict]:
        """The chosen service with its add-ons attached, as the API expects it"""
        if not self.service:
            return None
        return {**self.service, "AddOns": [dict(a) for a in self.addOns]}

    @property
    def total_price(self) -> float:
        return total_price(self.selected_service())

    @property
    def total_duration(self) -> float:
        return total_duration(self.selected_service())

    @property
    def end_time(self) -> Optional[str]:
        if not self.startTime or not self.service:
            return None
        return compute_end_time(self.startTime, self.selected_service())

    def to_payload(self) -> dict:
        return {
            "firstName": self.firstName,
            "lastName": self.lastName,
            "phone": self.phone,
            "email": self.email,
            "startTime": self.startTime,
            "scheduleId": self.scheduleId,
            "AdditionalNotes": self.AdditionalNotes or "",
            "customServiceDetail": self.customServiceDetail or "",
            "service": self.selected_service(),
        }


def validate_booking_state(path: str, draft: Optional[BookingDraft]) -> Optional[str]:
    """Where to send the customer when the draft can't support the page, else None"""
    draft = draft or BookingDraft()
    if path.rstrip("/") == BOOKING_START:
        return None

    if not draft.scheduleId or not draft.startTime:
        return BOOKING_START

    needs_service = "/booking/select-add-ons" in path or "/booking/customer-info" in path
    if needs_service and not (draft.service and draft.service.get("title")):
        return BOOKING_START
    return None


def validate_admin(path: str, store: PersistStore) -> Optional[str]:
    """Redirect target for the admin area, or None to stay"""
    user = store.get(USER_KEY) or {}
    token = store.get(CSRF_TOKEN_KEY)
    is_authorized = bool(isinstance(user, dict) and user.get("_id") and token)

    if not is_authorized and path != ADMIN_LOGIN:
        return ADMIN_LOGIN
    if path.rstrip("/") == "/admin":
        return ADMIN_HOME
    return None


def validate_customer_info(data: dict) -> dict[str, str]:
    """Field -> message for the customer details form; empty when valid"""
    errors: dict[str, str] = {}

    if not (data.get("firstName") or "").strip():
        errors["firstName"] = "First name is required"
    if not (data.get("lastName") or "").strip():
        errors["lastName"] = "Last name is required"

    phone = (data.get("phone") or "").strip()
    if not phone:
        errors["phone"] = "Phone is required"
    else:
        try:
            validate_phone(phone)
        except ValueError:
            errors["phone"] = "Invalid phone number"

    email = (data.get("email") or "").strip()
    if not email:
        errors["email"] = "Email is required"
    else:
        try:
            validate_email(email)
        except ValueError:
            errors["email"] = "Invalid email entered"

    return errors
