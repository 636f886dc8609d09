"""
Daily food allowance: how many grams a pet should eat per day.

Model
-----
Resting energy requirement (kcal/day) from body weight:

    RER = 70 × weight_kg ^ 0.75

Maintenance energy requirement scales RER by a life-stage factor that
depends on neuter status and activity level:

    MER = RER × factor

Grams of food then follow from the food's energy density:

    grams = MER / kcal_per_100g × 100

The result is rounded to whole grams and becomes the pet's
``daily_allowance_grams``, the input of the portion engine.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional


class NeuterStatus(str, Enum):
    INTACT = "intact"
    NEUTERED = "neutered"


class ActivityLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


# MER multipliers.
_MER_FACTORS: dict[tuple[NeuterStatus, ActivityLevel], float] = {
    (NeuterStatus.NEUTERED, ActivityLevel.LOW): 1.2,
    (NeuterStatus.NEUTERED, ActivityLevel.NORMAL): 1.6,
    (NeuterStatus.NEUTERED, ActivityLevel.HIGH): 1.8,
    (NeuterStatus.INTACT, ActivityLevel.LOW): 1.4,
    (NeuterStatus.INTACT, ActivityLevel.NORMAL): 1.8,
    (NeuterStatus.INTACT, ActivityLevel.HIGH): 3.0,
}

_RER_COEFFICIENT = 70.0
_RER_EXPONENT = 0.75


def resting_energy_kcal(weight_kg: float) -> float:
    """RER in kcal/day."""
    return _RER_COEFFICIENT * weight_kg ** _RER_EXPONENT


def mer_factor(neuter_status: NeuterStatus | str, activity_level: ActivityLevel | str) -> float:
    """Look up the MER multiplier.

    Raises :class:`ValueError` for unknown status or activity values.
    """
    return _MER_FACTORS[(NeuterStatus(neuter_status), ActivityLevel(activity_level))]


def daily_allowance_grams(
    weight_kg: Optional[float],
    food_kcal_per_100g: Optional[float],
    neuter_status: NeuterStatus | str = NeuterStatus.NEUTERED,
    activity_level: ActivityLevel | str = ActivityLevel.NORMAL,
) -> int:
    """Recommended grams of food per day.

    Missing or non-positive weight / energy density yield ``0`` so that a
    half-filled pet profile never produces a portion.
    """
    if not weight_kg or not food_kcal_per_100g or weight_kg <= 0 or food_kcal_per_100g <= 0:
        return 0

    mer = resting_energy_kcal(weight_kg) * mer_factor(neuter_status, activity_level)
    return int(math.floor(mer / food_kcal_per_100g * 100 + 0.5))
