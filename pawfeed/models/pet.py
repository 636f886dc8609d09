"""
Pet database model.

A pet belongs to one feeder and carries the daily food allowance that
the portion engine distributes across the pet's feeding schedules.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Pet(SQLModel, table=True):
    """A pet fed by a feeder.

    ``daily_allowance_grams`` is either entered directly or derived from
    the profile fields by :func:`pawfeed.feeding.allowance.daily_allowance_grams`.
    """

    __tablename__ = "pets"

    id: Optional[int] = Field(default=None, primary_key=True)
    feeder_id: str = Field(nullable=False, max_length=64, index=True)
    name: str = Field(nullable=False, max_length=100)

    # Total grams per day, split across enabled meals
    daily_allowance_grams: int = Field(default=0, ge=0, nullable=False)

    # Profile used to derive the allowance
    weight_kg: Optional[float] = Field(default=None)
    food_kcal_per_100g: Optional[float] = Field(default=None)
    neuter_status: str = Field(default="neutered", max_length=20)
    activity_level: str = Field(default="normal", max_length=20)

    bowl_number: int = Field(default=1, ge=1, le=2)
    rfid_tag_id: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
