"""Schedule domain schemas"""

from typing import Optional, Union

from pydantic import BaseModel

# Date parts arrive as numbers or strings ("2025", "August", "7")
DatePart = Union[int, str]


class ScheduleCreate(BaseModel):
    year: Optional[DatePart] = None
    month: Optional[DatePart] = None
    day: Optional[DatePart] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None


class ScheduleUpdate(BaseModel):
    scheduleId: Optional[int] = None
    year: Optional[DatePart] = None
    month: Optional[DatePart] = None
    day: Optional[DatePart] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None


class RemoveSlotRequest(BaseModel):
    scheduleId: Optional[int] = None
    slot: Optional[str] = None


class DeleteScheduleRequest(BaseModel):
    scheduleId: Optional[int] = None


class ScheduleByDateRequest(BaseModel):
    date: Optional[str] = None
