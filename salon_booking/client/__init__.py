"""Async wrappers around the salon booking API plus the dashboard's list and wizard helpers"""

from .auth import AuthAPI
from .base import ApiClient, ApiError, handle_api_error
from .blog import BlogAPI
from .bookings import BookingAPI
from .hair_services import HairServiceAPI
from .media import MediaAPI
from .schedule import ScheduleAPI

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthAPI",
    "BlogAPI",
    "BookingAPI",
    "HairServiceAPI",
    "MediaAPI",
    "ScheduleAPI",
    "handle_api_error",
]
