"""SQLModel database models."""

from pawfeed.models.pet import Pet
from pawfeed.models.feeding_schedule import FeedingSchedule

__all__ = [
    "Pet",
    "FeedingSchedule",
]
