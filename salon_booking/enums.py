from enum import Enum


class BookingStatus(str, Enum):
    UPCOMING = "Upcoming"
    COMPLETED = "Completed"
    MISSED = "Missed"
    CANCELLED = "Cancelled"


class MediaType(str, Enum):
    IMAGE = "Image"
    VIDEO = "Video"


class UserRoles(str, Enum):
    OWNER = "Owner"
    EMPLOYEE = "Employee"
    CUSTOMER = "Customer"


# Bookings in these states hold their time slots on the schedule
ACTIVE_BOOKING_STATUSES = (BookingStatus.UPCOMING.value, BookingStatus.COMPLETED.value)
