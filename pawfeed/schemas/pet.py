"""
Pet API schemas.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pawfeed.feeding.allowance import ActivityLevel, NeuterStatus


class PetCreate(BaseModel):
    """Schema for creating a pet.

    When ``daily_allowance_grams`` is omitted it is derived from weight,
    food energy density, neuter status and activity level.
    """

    name: str = Field(..., min_length=1, max_length=100)
    daily_allowance_grams: Optional[int] = Field(None, ge=0, le=5000)
    weight_kg: Optional[float] = Field(None, gt=0, le=150)
    food_kcal_per_100g: Optional[float] = Field(None, gt=0, le=1000)
    neuter_status: NeuterStatus = NeuterStatus.NEUTERED
    activity_level: ActivityLevel = ActivityLevel.NORMAL
    bowl_number: int = Field(1, ge=1, le=2)
    rfid_tag_id: Optional[str] = Field(None, max_length=64)


class PetUpdate(BaseModel):
    """Schema for updating a pet."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    daily_allowance_grams: Optional[int] = Field(None, ge=0, le=5000)
    weight_kg: Optional[float] = Field(None, gt=0, le=150)
    food_kcal_per_100g: Optional[float] = Field(None, gt=0, le=1000)
    neuter_status: Optional[NeuterStatus] = None
    activity_level: Optional[ActivityLevel] = None
    bowl_number: Optional[int] = Field(None, ge=1, le=2)
    rfid_tag_id: Optional[str] = Field(None, max_length=64)


class PetResponse(BaseModel):
    """Schema for a pet in API responses."""

    id: int
    feeder_id: str
    name: str
    daily_allowance_grams: int
    weight_kg: Optional[float]
    food_kcal_per_100g: Optional[float]
    neuter_status: str
    activity_level: str
    bowl_number: int
    rfid_tag_id: Optional[str]
    created_at: datetime.datetime
    updated_at: datetime.datetime

    class Config:
        from_attributes = True
