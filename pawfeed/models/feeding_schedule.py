"""
Feeding schedule database model.

One row per recurring feeding event.  Day sets are stored as JSON lists
of ``Mon``..``Sun`` codes.  ``portion_grams`` is derived: it is
rewritten by every portion recalculation for the pet.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class FeedingSchedule(SQLModel, table=True):
    """A recurring meal for one pet."""

    __tablename__ = "feeding_schedules"

    id: Optional[int] = Field(default=None, primary_key=True)
    pet_id: int = Field(foreign_key="pets.id", nullable=False, index=True)
    feeder_id: str = Field(nullable=False, max_length=64, index=True)

    # Descriptive fields, copied unchanged when a schedule is split
    name: str = Field(nullable=False, max_length=100)
    time: str = Field(nullable=False, max_length=5, index=True)  # HH:MM
    bowl_number: int = Field(default=1, ge=1, le=2)

    # NULL on legacy rows; treated as enabled
    is_enabled: Optional[bool] = Field(default=True)

    repeat_days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    skipped_days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    addon_grams: int = Field(default=0, ge=0, nullable=False)
    portion_grams: int = Field(default=0, nullable=False)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
