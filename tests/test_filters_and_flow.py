import pytest

from salon_booking.client.booking_flow import (
    BookingDraft,
    validate_admin,
    validate_booking_state,
    validate_customer_info,
)
from salon_booking.client.filters import booking_counts, booking_date, filter_bookings, paginate
from salon_booking.client.persistence import CSRF_TOKEN_KEY, USER_KEY, PersistStore

BOOKINGS = [
    {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
        "phone": "+15551234567",
        "status": "Upcoming",
        "service": {"title": "Cornrows"},
        "schedule": {"year": "2030", "month": "August", "day": "07"},
    },
    {
        "firstName": "Amara",
        "lastName": "Obi",
        "email": "amara@example.com",
        "phone": "+15559876543",
        "status": "Completed",
        "service": {"title": "Box Braids"},
        "schedule": {"year": "2030", "month": "August", "day": "08"},
    },
    {
        "firstName": "Lee",
        "lastName": "Park",
        "email": "lee@example.com",
        "phone": "+15550001111",
        "status": "Cancelled",
        "service": None,
        "schedule": None,
    },
]


class TestFilterBookings:
    def test_booking_date(self):
        assert booking_date(BOOKINGS[0]) == "2030-08-07"
        assert booking_date(BOOKINGS[2]) is None

    @pytest.mark.parametrize(
        "search,expected",
        [
            ("jane doe", ["Jane"]),
            ("AMARA@", ["Amara"]),
            ("0001111", ["Lee"]),
            ("braids", ["Amara"]),
            ("", ["Jane", "Amara", "Lee"]),
        ],
    )
    def test_search(self, search, expected):
        assert [b["firstName"] for b in filter_bookings(BOOKINGS, search=search)] == expected

    def test_status_and_date(self):
        assert [b["firstName"] for b in filter_bookings(BOOKINGS, status="Completed")] == ["Amara"]
        assert [b["firstName"] for b in filter_bookings(BOOKINGS, status="All", date="2030-08-07")] == ["Jane"]
        assert filter_bookings(BOOKINGS, search="jane", status="Completed") == []

    def test_paginate(self):
        items = list(range(7))
        assert paginate(items, 1, 3) == ([0, 1, 2], 3)
        assert paginate(items, 3, 3) == ([6], 3)
        assert paginate(items, 4, 3) == ([], 3)
        assert paginate([], 1, 10) == ([], 0)
        with pytest.raises(ValueError):
            paginate(items, 1, 0)

    def test_counts(self):
        assert booking_counts(BOOKINGS) == {
            "Upcoming": 1,
            "Completed": 1,
            "Missed": 0,
            "Cancelled": 1,
            "total": 3,
        }


class TestBookingDraft:
    def _draft(self, **overrides):
        values = {
            "scheduleId": 1,
            "startTime": "10:00am",
            "service": {"title": "Cornrows", "price": 60, "duration": 2},
            "addOns": [{"title": "Beads", "price": 10, "duration": 0.5}],
        }
        values.update(overrides)
        return BookingDraft(**values)

    def test_totals_and_end_time(self):
        draft = self._draft()
        assert draft.total_price == 70
        assert draft.total_duration == 2.5
        assert draft.end_time == "12:00 pm"

    def test_end_time_needs_service(self):
        assert self._draft(service=None).end_time is None

    def test_payload_attaches_add_ons(self):
        payload = self._draft(firstName="Jane").to_payload()
        assert payload["service"]["AddOns"] == [{"title": "Beads", "price": 10, "duration": 0.5}]
        assert payload["firstName"] == "Jane"
        assert payload["AdditionalNotes"] == ""


class TestRouteGuards:
    def test_booking_start_is_always_allowed(self):
        assert validate_booking_state("/booking/create", None) is None

    def test_missing_time_goes_back_to_start(self):
        assert validate_booking_state("/booking/select-service", BookingDraft(scheduleId=1)) == "/booking/create"

    def test_add_ons_need_a_service(self):
        draft = BookingDraft(scheduleId=1, startTime="10:00am")
        assert validate_booking_state("/booking/select-service", draft) is None
        assert validate_booking_state("/booking/select-add-ons", draft) == "/booking/create"
        draft.service = {"title": "Cornrows"}
        assert validate_booking_state("/booking/customer-info", draft) is None

    def test_admin_guard(self):
        store = PersistStore()
        assert validate_admin("/admin/appointments", store) == "/admin/login"
        assert validate_admin("/admin/login", store) is None

        store.set(USER_KEY, {"_id": 1})
        store.set(CSRF_TOKEN_KEY, "token")
        assert validate_admin("/admin", store) == "/admin/dashboard"
        assert validate_admin("/admin/appointments", store) is None


class TestCustomerInfo:
    def test_valid(self):
        data = {"firstName": "Jane", "lastName": "Doe", "phone": "555-123-4567", "email": "jane@example.com"}
        assert validate_customer_info(data) == {}

    def test_all_missing(self):
        assert validate_customer_info({}) == {
            "firstName": "First name is required",
            "lastName": "Last name is required",
            "phone": "Phone is required",
            "email": "Email is required",
        }

    def test_malformed(self):
        errors = validate_customer_info({"firstName": "J", "lastName": "D", "phone": "12", "email": "nope"})
        assert errors == {"phone": "Invalid phone number", "email": "Invalid email entered"}
