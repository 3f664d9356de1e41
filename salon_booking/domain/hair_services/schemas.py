"""Hair service domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...security_utils import sanitize_text


class _TitledModel(BaseModel):
    @field_validator("title", "category", "service", check_fields=False)
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v, max_length=255)


class HairServiceCreate(_TitledModel):
    title: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    duration: Optional[float] = None


class HairServiceUpdate(_TitledModel):
    id: Optional[int] = None
    title: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    duration: Optional[float] = None


class AddOnCreate(_TitledModel):
    title: Optional[str] = None
    price: Optional[float] = None
    service: Optional[str] = None
    duration: Optional[float] = None


class AddOnUpdate(_TitledModel):
    id: Optional[int] = None
    title: Optional[str] = None
    price: Optional[float] = None
    service: Optional[str] = None
    duration: Optional[float] = None


class AvailableServicesRequest(BaseModel):
    scheduleId: Optional[int] = None
    startTime: Optional[str] = None
