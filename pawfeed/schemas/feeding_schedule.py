"""
Feeding schedule API schemas.
"""

import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from pawfeed.schemas.week_day import day_codes

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class _DayListsMixin(BaseModel):
    @field_validator("repeat_days", "skipped_days", mode="before", check_fields=False)
    @classmethod
    def parse_days(cls, value: Any) -> Any:
        if value is None:
            return value
        return day_codes(value)


class FeedingScheduleCreate(_DayListsMixin):
    """Schema for creating a feeding schedule."""

    name: str = Field(..., min_length=1, max_length=100)
    time: str = Field(..., pattern=_TIME_PATTERN, description="Time of day, HH:MM")
    bowl_number: int = Field(1, ge=1, le=2)
    repeat_days: list[str] = Field(..., min_length=1, description="Days the meal recurs on, e.g. ['Mon', 'Wed']")
    skipped_days: list[str] = Field(default_factory=list)
    addon_grams: int = Field(0, ge=0, le=1000, description="Fixed extra grams on top of the fair share")
    is_enabled: bool = True


class FeedingScheduleUpdate(_DayListsMixin):
    """Schema for updating a feeding schedule.  Unset fields are left alone."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    time: Optional[str] = Field(None, pattern=_TIME_PATTERN)
    bowl_number: Optional[int] = Field(None, ge=1, le=2)
    repeat_days: Optional[list[str]] = Field(None, min_length=1)
    skipped_days: Optional[list[str]] = None
    addon_grams: Optional[int] = Field(None, ge=0, le=1000)
    is_enabled: Optional[bool] = None


class FeedingScheduleResponse(BaseModel):
    """Schema for a feeding schedule in API responses."""

    id: int
    pet_id: int
    feeder_id: str
    name: str
    time: str
    bowl_number: int
    is_enabled: bool
    repeat_days: list[str]
    skipped_days: list[str]
    addon_grams: int
    portion_grams: int
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @field_validator("is_enabled", mode="before")
    @classmethod
    def legacy_enabled(cls, value: Any) -> Any:
        return True if value is None else value

    class Config:
        from_attributes = True


class PortionPreviewRequest(BaseModel):
    """A schedule edit to preview without saving it."""

    schedule_id: Optional[int] = None
    changes: dict[str, Any] = Field(default_factory=dict)
