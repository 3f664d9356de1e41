"""Shared fixtures: in-memory database, test client, fake storage and a signed-in admin"""

import os

# Must be set before the application modules read their configuration
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["SIGNUP_SECRET"] = "let-me-in"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["CRM_FRONTEND_URL"] = "http://crm.test"
os.environ["SITE_URL"] = "https://salon.test"
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_HOST", None)

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from fastapi import HTTPException  # noqa: E402

from salon_booking.auth import get_current_admin  # noqa: E402
from salon_booking.database import Base, SessionLocal, engine  # noqa: E402
from salon_booking.enums import UserRoles  # noqa: E402
from salon_booking.main import app  # noqa: E402
from salon_booking.models import Admin, HairCategory, HairService, Schedule  # noqa: E402
from salon_booking.rate_limiter import reset_rate_limits  # noqa: E402
from salon_booking.services.storage_service import get_storage  # noqa: E402
from salon_booking.shared.timeslots import MONTHS, generate_available_slots  # noqa: E402

API = "/api/v1"


class FakeStorage:
    """In-memory stand-in for the S3 bucket"""

    def __init__(self):
        self.files: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []
        self._counter = 0

    def upload_file(self, data: bytes, content_type, folder: str = "media") -> dict:
        self._counter += 1
        drive_id = f"{folder}-{self._counter}"
        self.files[drive_id] = (data, content_type or "application/octet-stream")
        return {"driveId": drive_id, "publicUrl": f"https://cdn.test/{drive_id}"}

    def delete_file(self, drive_id: str) -> None:
        self.deleted.append(drive_id)
        self.files.pop(drive_id, None)

    def get_file(self, drive_id: str):
        if drive_id not in self.files:
            raise HTTPException(status_code=404, detail="File not found")
        return self.files[drive_id]


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    reset_rate_limits()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    fake = FakeStorage()
    app.dependency_overrides[get_storage] = lambda: fake
    return fake


@pytest.fixture
def client(storage):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(db):
    user = Admin(
        google_id="google-123",
        google_email="owner@salon.test",
        first_name="Ada",
        last_name="Stylist",
        role=UserRoles.EMPLOYEE.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def as_admin(admin):
    """Bypass the cookie/CSRF guard for endpoints that only need *an* admin"""
    app.dependency_overrides[get_current_admin] = lambda: admin
    return admin


def future_day(days: int = 7) -> date:
    return date.today() + timedelta(days=days)


@pytest.fixture
def schedule(db):
    """Open 09:00-17:00 a week from today"""
    day = future_day()
    record = Schedule(
        year=str(day.year),
        month=MONTHS[day.month - 1],
        day=f"{day.day:02d}",
        start_time="09:00",
        end_time="17:00",
        available_slots=generate_available_slots("09:00", "17:00"),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture
def catalog(db):
    category = HairCategory(title="Braids", cover_link="https://cdn.test/category-0", drive_id="category-0")
    db.add(category)
    db.add_all(
        [
            HairService(title="Box Braids", price=150, category="Braids", duration=4),
            HairService(title="Cornrows", price=60, category="Braids", duration=2),
            HairService(title="Micro Braids", price=300, category="Braids", duration=9),
        ]
    )
    db.commit()
    return category


def booking_payload(schedule_id: int, **overrides) -> dict:
    payload = {
        "firstName": "Jane",
        "lastName": "Doe",
        "phone": "555-123-4567",
        "email": "Jane.Doe@example.com",
        "startTime": "10:00am",
        "scheduleId": schedule_id,
        "AdditionalNotes": "First visit",
        "service": {
            "title": "Cornrows",
            "price": 60,
            "category": "Braids",
            "duration": 2,
            "AddOns": [{"title": "Beads", "price": 10, "duration": 0.5}],
        },
    }
    payload.update(overrides)
    return payload
