"""Business logic services."""

from pawfeed.services.feeding_schedule_service import FeedingScheduleService
from pawfeed.services.pet_service import PetService

__all__ = [
    "FeedingScheduleService",
    "PetService",
]
