"""
Time slot and calendar helpers.

Slots are hourly strings such as "09:00am" or "14:00pm": the hour keeps its
24-hour value (zero-padded) and only the suffix says am/pm. Durations are in
hours and may be fractional; a booking blocks ceil(duration) slots.
"""

import math
from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
MONTH_NUMBERS = {name: index + 1 for index, name in enumerate(MONTHS)}


def parse_hour(value: Union[str, int]) -> int:
    """Hour of "10:00", "10:00am", "10" or 10. Raises ValueError outside 0..24."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value}")
    if isinstance(value, int):
        hour = value
    else:
        head = str(value).strip().split(":")[0]
        digits = "".join(ch for ch in head if ch.isdigit())
        if not digits:
            raise ValueError(f"Invalid time value: {value}")
        hour = int(digits)
    if hour < 0 or hour > 24:
        raise ValueError(f"Invalid time value: {value}")
    return hour


def format_slot(hour: int) -> str:
    postfix = "am" if hour < 12 else "pm"
    return f"{hour:02d}:00{postfix}"


def generate_available_slots(start_time, end_time) -> list[str]:
    """Hourly slots from start to end inclusive; hour 24 wraps to midnight."""
    start = parse_hour(start_time)
    end = parse_hour(end_time)

    slots = []
    current = start
    while True:
        if current == 24:
            current = 0
        slots.append(format_slot(current))
        if current >= end:
            break
        current += 1
    return slots


def blocked_hours(start_time, duration) -> list[int]:
    start = parse_hour(start_time)
    return [start + i for i in range(math.ceil(float(duration)))]


def update_available_slots_after_booking(start_time, duration, available_slots: list[str]) -> list[str]:
    """Drop the ceil(duration) hours that a booking starting at start_time occupies."""
    taken = set(blocked_hours(start_time, duration))
    return [slot for slot in available_slots if parse_hour(slot) not in taken]


def restore_slots_after_cancellation(
    start_time, duration, available_slots: list[str], window_start, window_end
) -> list[str]:
    """Give back the hours of a cancelled booking that lie inside the schedule window."""
    window = generate_available_slots(window_start, window_end)
    freed = {h % 24 for h in blocked_hours(start_time, duration)}
    current = set(available_slots)
    for slot in window:
        if parse_hour(slot) in freed:
            current.add(slot)
    return [slot for slot in window if slot in current]


def get_slots_after_start_time(available_slots: list[str], start_time) -> list[str]:
    start = parse_hour(start_time)
    return [slot for slot in available_slots if parse_hour(slot) >= start]


def get_longest_consecutive_time(available_slots: list[str]) -> int:
    """Length of the first unbroken run of hours, so a gap ends the count."""
    if not available_slots:
        return 0
    if len(available_slots) == 1:
        return 1

    hours = [parse_hour(slot) for slot in available_slots]
    longest = 1
    for previous, current in zip(hours, hours[1:]):
        if current - previous != 1:
            return longest
        longest += 1
    return longest


def total_duration(service: Optional[dict]) -> float:
    """Service duration plus the duration of every selected add-on"""
    if not service:
        return 0.0
    total = float(service.get("duration") or 0)
    for add_on in service.get("AddOns") or []:
        total += float((add_on or {}).get("duration") or 0)
    return total


def total_price(service: Optional[dict]) -> float:
    if not service:
        return 0.0
    total = float(service.get("price") or 0)
    for add_on in service.get("AddOns") or []:
        total += float((add_on or {}).get("price") or 0)
    return total


def compute_end_time(start_time, service: Optional[dict]) -> str:
    """End of a booking as shown to customers, e.g. "13:00 pm"."""
    end = int(parse_hour(start_time) + total_duration(service)) % 24
    postfix = "am" if end < 12 else "pm"
    return f"{end:02d}:00 {postfix}"


def month_to_number(month: Optional[str]) -> int:
    return MONTH_NUMBERS.get(month or "", 1)


def number_to_month(number: int) -> str:
    if number < 1 or number > 12:
        raise ValueError(f"Invalid month number: {number}")
    return MONTHS[number - 1]


def normalize_month(value: Union[str, int]) -> str:
    """Long month name from "August", "aug", "8" or 8."""
    if isinstance(value, int):
        return number_to_month(value)
    text = str(value).strip()
    if text.isdigit():
        return number_to_month(int(text))
    for name in MONTHS:
        if name.lower() == text.lower() or (len(text) >= 3 and name.lower().startswith(text.lower())):
            return name
    raise ValueError(f"Invalid month: {value}")


def normalize_day(value: Union[str, int]) -> str:
    day = int(str(value).strip())
    if day < 1 or day > 31:
        raise ValueError(f"Invalid day: {value}")
    return f"{day:02d}"


def schedule_date(year, month, day) -> Optional[date]:
    """Calendar date of a schedule record, or None if the parts don't form one"""
    try:
        return date(int(year), month_to_number(normalize_month(month)), int(day))
    except (TypeError, ValueError):
        return None


def parse_date(value, to_utc: bool = True) -> Optional[datetime]:
    """Parse an ISO-ish date/datetime string into a naive datetime (UTC unless to_utc is False)"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    parsed = date_parser.parse(str(value))
    if parsed.tzinfo is not None:
        if to_utc:
            parsed = parsed.astimezone(timezone.utc)
        parsed = parsed.replace(tzinfo=None)
    return parsed


def date_parts(value) -> tuple[str, str, str]:
    """(year, long month name, zero-padded day) for a date string"""
    parsed = parse_date(value, to_utc=False)
    if parsed is None:
        raise ValueError("Date is required")
    return str(parsed.year), MONTHS[parsed.month - 1], f"{parsed.day:02d}"
