"""Pydantic schemas for request/response validation."""

from pawfeed.schemas.week_day import WeekDay, WEEK_DAYS
from pawfeed.schemas.portion import (
    PendingEdit,
    RecalcResult,
    ScheduleInsert,
    ScheduleSnapshot,
    ScheduleUpdate,
)
from pawfeed.schemas.pet import PetCreate, PetResponse, PetUpdate
from pawfeed.schemas.feeding_schedule import (
    FeedingScheduleCreate,
    FeedingScheduleResponse,
    FeedingScheduleUpdate,
    PortionPreviewRequest,
)

__all__ = [
    "WeekDay",
    "WEEK_DAYS",
    "PendingEdit",
    "RecalcResult",
    "ScheduleInsert",
    "ScheduleSnapshot",
    "ScheduleUpdate",
    "PetCreate",
    "PetResponse",
    "PetUpdate",
    "FeedingScheduleCreate",
    "FeedingScheduleResponse",
    "FeedingScheduleUpdate",
    "PortionPreviewRequest",
]
