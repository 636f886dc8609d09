"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from pawfeed.models.pet import Pet  # noqa: F401
from pawfeed.models.feeding_schedule import FeedingSchedule  # noqa: F401
