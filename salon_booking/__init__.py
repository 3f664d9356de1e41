"""Salon booking API - bookings, schedules, hair services, media and blog"""

__version__ = "1.0.0"
