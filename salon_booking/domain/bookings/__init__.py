"""Bookings domain - Appointments, cancellations and income reporting"""

from .router import router

__all__ = ["router"]
