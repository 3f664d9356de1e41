"""Schedules domain - Working days and their open time slots"""

from .router import router

__all__ = ["router"]
