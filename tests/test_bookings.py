from conftest import API, booking_payload, future_day

from salon_booking.models import Booking, Schedule, User
from salon_booking.domain.bookings.service import BLOCKED_CUSTOMER_MESSAGE, SLOT_TAKEN_MESSAGE


def _create(client, schedule_id, **overrides):
    return client.post(f"{API}/booking", json=booking_payload(schedule_id, **overrides))


def _slots(db, schedule_id):
    db.expire_all()
    return db.get(Schedule, schedule_id).available_slots


class TestCreateBooking:
    def test_creates_booking_and_takes_slots(self, client, db, schedule):
        response = _create(client, schedule.id)

        assert response.status_code == 201
        assert response.json() == {"isSuccess": True, "content": "Booking created"}

        booking = db.query(Booking).one()
        assert booking.status == "Upcoming"
        assert booking.total == 0
        assert booking.phone == "+15551234567"
        assert booking.email == "jane.doe@example.com"
        assert booking.start_time == "10:00am"
        assert booking.service["AddOns"][0]["title"] == "Beads"

        # 2h service + 0.5h add-on rounds up to three hours
        slots = _slots(db, schedule.id)
        assert "09:00am" in slots
        assert not {"10:00am", "11:00am", "12:00pm"} & set(slots)
        assert "13:00pm" in slots

    def test_creates_customer_once(self, client, db, schedule):
        _create(client, schedule.id)
        _create(client, schedule.id, startTime="14:00pm")

        customers = db.query(User).all()
        assert len(customers) == 1
        assert customers[0].role == "Customer"
        assert len(customers[0].bookings) == 2

    def test_missing_fields(self, client, schedule):
        payload = booking_payload(schedule.id)
        del payload["firstName"]
        response = client.post(f"{API}/booking", json=payload)

        assert response.status_code == 400
        assert response.json() == {"isSuccess": False, "content": "Invalid request argument"}

    def test_service_without_duration(self, client, schedule):
        response = _create(client, schedule.id, service={"title": "Cornrows", "price": 60})
        assert response.status_code == 400

    def test_invalid_phone(self, client, schedule):
        response = _create(client, schedule.id, phone="call me")
        assert response.status_code == 400
        assert response.json()["content"] == "Invalid phone number"

    def test_unknown_schedule(self, client, schedule):
        response = _create(client, schedule.id + 100)
        assert response.status_code == 404
        assert response.json()["content"] == "Schedule not found"

    def test_taken_start_slot(self, client, schedule):
        _create(client, schedule.id)
        response = _create(client, schedule.id, email="other@example.com", phone="555-987-6543")

        assert response.status_code == 409
        assert response.json()["content"] == SLOT_TAKEN_MESSAGE

    def test_overlapping_hours(self, client, schedule):
        _create(client, schedule.id, startTime="13:00pm")
        # 09:00 + 5h would run into the 13:00 booking
        long_service = {"title": "Box Braids", "price": 150, "duration": 5}
        response = _create(client, schedule.id, startTime="09:00am", service=long_service, email="b@example.com")

        assert response.status_code == 409

    def test_rejected_booking_leaves_no_customer(self, client, db, schedule):
        assert _create(client, schedule.id + 100).status_code == 404
        assert db.query(User).count() == 0

        _create(client, schedule.id)
        response = _create(client, schedule.id, email="other@example.com", phone="555-987-6543")
        assert response.status_code == 409
        db.expire_all()
        assert [u.email for u in db.query(User)] == ["jane.doe@example.com"]

    def test_blocked_customer(self, client, db, schedule):
        _create(client, schedule.id)
        customer = db.query(User).one()
        customer.is_blocked = True
        db.commit()

        response = _create(client, schedule.id, startTime="14:00pm")
        assert response.status_code == 400
        assert response.json()["content"] == BLOCKED_CUSTOMER_MESSAGE


class TestCustomerLookups:
    def test_find_user_bookings(self, client, schedule):
        _create(client, schedule.id)

        response = client.post(
            f"{API}/booking/find-user-bookings",
            json={"firstName": "Jane", "lastName": "Doe", "phone": "(555) 123-4567"},
        )
        body = response.json()
        assert body["isSuccess"] is True
        assert len(body["content"]) == 1
        assert body["content"][0]["startTime"] == "10:00am"

    def test_find_by_email_when_no_phone(self, client, schedule):
        _create(client, schedule.id)
        response = client.post(
            f"{API}/booking/find-user-bookings",
            json={"firstName": "Jane", "lastName": "Doe", "email": "JANE.DOE@example.com"},
        )
        assert len(response.json()["content"]) == 1

    def test_find_requires_contact(self, client):
        response = client.post(f"{API}/booking/find-user-bookings", json={"firstName": "Jane", "lastName": "Doe"})
        assert response.status_code == 400
        assert response.json()["content"] == "Missing customers phone or email"

    def test_find_requires_name(self, client):
        response = client.post(f"{API}/booking/find-user-bookings", json={"phone": "555-123-4567"})
        assert response.json()["content"] == "Missing customers name"

    def test_get_booking(self, client, db, schedule):
        _create(client, schedule.id)
        booking_id = db.query(Booking).one().id

        response = client.get(f"{API}/booking/{booking_id}")
        assert response.json()["content"]["firstName"] == "Jane"

    def test_get_missing_booking(self, client):
        response = client.get(f"{API}/booking/999")
        assert response.status_code == 404
        assert response.json() == {"isSuccess": False, "content": "Booking not found"}


class TestCancelBooking:
    def test_cancel_restores_slots(self, client, db, schedule):
        _create(client, schedule.id)
        booking_id = db.query(Booking).one().id

        response = client.post(f"{API}/booking/cancel", json={"bookingId": booking_id})
        assert response.json() == {"isSuccess": True, "content": "Booking cancelled"}

        slots = _slots(db, schedule.id)
        assert slots[:4] == ["09:00am", "10:00am", "11:00am", "12:00pm"]
        assert len(slots) == 9

    def test_cancel_twice(self, client, db, schedule):
        _create(client, schedule.id)
        booking_id = db.query(Booking).one().id
        client.post(f"{API}/booking/cancel", json={"bookingId": booking_id})

        response = client.post(f"{API}/booking/cancel", json={"bookingId": booking_id})
        assert response.json()["content"] == "Booking already cancelled"

    def test_cancel_requires_id(self, client):
        response = client.post(f"{API}/booking/cancel", json={})
        assert response.status_code == 400
        assert response.json()["content"] == "Invalid request arguments"


class TestAdminBookings:
    def test_requires_admin(self, client):
        response = client.get(f"{API}/booking/summary")
        assert response.status_code == 401
        assert response.json()["isSuccess"] is False

    def test_list_paginates(self, client, as_admin, schedule):
        _create(client, schedule.id, startTime="09:00am", service={"title": "Trim", "duration": 1})
        _create(client, schedule.id, startTime="11:00am", service={"title": "Trim", "duration": 1})
        _create(client, schedule.id, startTime="13:00pm", service={"title": "Trim", "duration": 1})

        response = client.post(f"{API}/booking/get-bookings", json={"page": 2, "pageSize": 2})
        content = response.json()["content"]

        assert content["total"] == 3
        assert content["page"] == 2
        assert content["pageSize"] == 2
        assert len(content["items"]) == 1
        assert content["items"][0]["schedule"] == {
            "year": schedule.year,
            "month": schedule.month,
            "day": schedule.day,
        }

    def test_list_filters_by_status(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        _create(client, schedule.id, startTime="14:00pm")
        first = db.query(Booking).order_by(Booking.id).first()
        client.post(f"{API}/booking/cancel", json={"bookingId": first.id})

        response = client.post(f"{API}/booking/get-bookings", json={"status": "Cancelled"})
        content = response.json()["content"]
        assert content["total"] == 1
        assert content["items"][0]["id"] == first.id

    def test_list_filters_by_appointment_day(self, client, as_admin, schedule):
        _create(client, schedule.id)
        day = future_day().isoformat()

        before = client.post(f"{API}/booking/get-bookings", json={"appointmentDateTo": "2000-01-01"})
        assert before.json()["content"]["total"] == 0

        around = client.post(
            f"{API}/booking/get-bookings", json={"appointmentDateFrom": day, "appointmentDateTo": day}
        )
        assert around.json()["content"]["total"] == 1

    def test_list_rejects_bad_dates(self, client, as_admin):
        response = client.post(f"{API}/booking/get-bookings", json={"from": "not a date"})
        assert response.status_code == 400
        assert response.json()["content"] == "Invalid from date"

    def test_summary_counts(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        _create(client, schedule.id, startTime="14:00pm")
        first = db.query(Booking).order_by(Booking.id).first()
        client.post(f"{API}/booking/update", json={"bookingId": first.id, "status": "Completed"})

        response = client.get(f"{API}/booking/summary")
        assert response.json()["content"] == {
            "completed": 1,
            "upcoming": 1,
            "cancelled": 0,
            "missed": 0,
            "total": 2,
        }


class TestUpdateBooking:
    def test_updates_status_and_total(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        booking_id = db.query(Booking).one().id

        response = client.post(
            f"{API}/booking/update", json={"bookingId": booking_id, "status": "Completed", "price": 85}
        )
        assert response.json() == {"isSuccess": True, "content": "Booking status updated"}

        db.expire_all()
        booking = db.get(Booking, booking_id)
        assert booking.status == "Completed"
        assert booking.total == 85

    def test_rejects_unknown_status(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        booking_id = db.query(Booking).one().id

        response = client.post(f"{API}/booking/update", json={"bookingId": booking_id, "status": "Lost"})
        assert response.status_code == 400
        assert response.json()["content"] == "Invalid booking status Lost"

    def test_requires_status_or_price(self, client, as_admin):
        response = client.post(f"{API}/booking/update", json={"bookingId": 1})
        assert response.json()["content"] == "Invalid request arguments"

    def test_cancel_then_reactivate_moves_slots(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        booking_id = db.query(Booking).one().id

        client.post(f"{API}/booking/update", json={"bookingId": booking_id, "status": "Cancelled"})
        assert "10:00am" in _slots(db, schedule.id)

        client.post(f"{API}/booking/update", json={"bookingId": booking_id, "status": "Upcoming"})
        assert "10:00am" not in _slots(db, schedule.id)

    def test_reactivation_rejected_when_slot_rebooked(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        first_id = db.query(Booking).one().id
        client.post(f"{API}/booking/update", json={"bookingId": first_id, "status": "Cancelled"})

        rebooked = _create(client, schedule.id, email="other@example.com", phone="555-987-6543")
        assert rebooked.status_code == 201
        slots_before = _slots(db, schedule.id)

        response = client.post(f"{API}/booking/update", json={"bookingId": first_id, "status": "Upcoming"})

        assert response.status_code == 409
        assert response.json() == {"isSuccess": False, "content": SLOT_TAKEN_MESSAGE}
        assert _slots(db, schedule.id) == slots_before
        assert db.get(Booking, first_id).status == "Cancelled"
        active = db.query(Booking).filter(Booking.start_time == "10:00am", Booking.status == "Upcoming").count()
        assert active == 1

    def test_reactivation_rejected_when_hours_overlap(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        first_id = db.query(Booking).one().id
        client.post(f"{API}/booking/update", json={"bookingId": first_id, "status": "Cancelled"})

        trim = {"title": "Trim", "duration": 1}
        assert _create(client, schedule.id, startTime="11:00am", service=trim, email="b@example.com").status_code == 201

        response = client.post(f"{API}/booking/update", json={"bookingId": first_id, "status": "Completed"})
        assert response.status_code == 409
        db.expire_all()
        assert db.get(Booking, first_id).status == "Cancelled"

    def test_third_missed_booking_blocks_customer(self, client, db, as_admin, schedule):
        for start in ("09:00am", "11:00am", "13:00pm"):
            _create(client, schedule.id, startTime=start, service={"title": "Trim", "duration": 1})
        ids = [b.id for b in db.query(Booking).order_by(Booking.id)]

        for booking_id in ids[:2]:
            client.post(f"{API}/booking/update", json={"bookingId": booking_id, "status": "Missed"})
        db.expire_all()
        assert db.query(User).one().is_blocked is False

        client.post(f"{API}/booking/update", json={"bookingId": ids[2], "status": "Missed"})
        db.expire_all()
        assert db.query(User).one().is_blocked is True

        response = _create(client, schedule.id, startTime="15:00pm")
        assert response.json()["content"] == BLOCKED_CUSTOMER_MESSAGE


class TestIncomeReport:
    def test_sums_completed_bookings(self, client, db, as_admin, schedule):
        _create(client, schedule.id)
        _create(client, schedule.id, startTime="14:00pm")
        first, second = db.query(Booking).order_by(Booking.id).all()
        client.post(f"{API}/booking/update", json={"bookingId": first.id, "status": "Completed", "price": 80})
        client.post(f"{API}/booking/update", json={"bookingId": second.id, "price": 40})

        content = client.post(f"{API}/booking/income-report", json={}).json()["content"]

        assert content["totalRevenue"] == 80
        assert content["totalCompleted"] == 1
        assert content["currentYear"] == {"totalRevenue": 80, "totalCompleted": 1}
        assert len(content["statsPerYear"]) == 1
        assert content["statsPerYear"][0]["totalRevenue"] == 80
