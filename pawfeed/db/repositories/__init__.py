"""Database repositories."""

from pawfeed.db.repositories.pet import PetRepository
from pawfeed.db.repositories.feeding_schedule import FeedingScheduleRepository

__all__ = [
    "PetRepository",
    "FeedingScheduleRepository",
]
