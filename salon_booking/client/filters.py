"""Filtering, paging and counting of booking lists on the dashboard"""

import math
from typing import Optional

from ..enums import BookingStatus
from ..shared.timeslots import month_to_number

ALL_STATUSES = "All"


def booking_date(booking: dict) -> Optional[str]:
    """YYYY-MM-DD of the booking's schedule, None when it has no schedule"""
    schedule = booking.get("schedule")
    if not schedule:
        return None
    month = month_to_number(schedule.get("month"))
    return f"{schedule.get('year')}-{month:02d}-{int(schedule.get('day') or 0):02d}"


def _matches_search(booking: dict, term: str) -> bool:
    full_name = f"{booking.get('firstName') or ''} {booking.get('lastName') or ''}".lower()
    service_title = ((booking.get("service") or {}).get("title") or "").lower()
    return any(
        term in value
        for value in (
            full_name,
            (booking.get("email") or "").lower(),
            (booking.get("phone") or "").lower(),
            service_title,
        )
    )


def filter_bookings(
    bookings: list[dict],
    search: str = "",
    status: Optional[str] = ALL_STATUSES,
    date: Optional[str] = None,
) -> list[dict]:
    """Case-insensitive text search, exact status, and appointment day; empty filters match all"""
    filtered = list(bookings)

    term = (search or "").strip().lower()
    if term:
        filtered = [b for b in filtered if _matches_search(b, term)]

    if status and status != ALL_STATUSES:
        filtered = [b for b in filtered if b.get("status") == status]

    if date:
        filtered = [b for b in filtered if booking_date(b) == date]

    return filtered


def paginate(items: list, page: int, page_size: int) -> tuple[list, int]:
    """(items on the page, total pages); pages are 1-based"""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    total_pages = math.ceil(len(items) / page_size)
    page = max(page, 1)
    start = (page - 1) * page_size
    return items[start : start + page_size], total_pages


def booking_counts(bookings: list[dict]) -> dict[str, int]:
    counts = {status.value: 0 for status in BookingStatus}
    for booking in bookings:
        status = booking.get("status")
        if status in counts:
            counts[status] += 1
    counts["total"] = len(bookings)
    return counts
