"""Feeding core: portion recalculation and daily allowance."""

from pawfeed.feeding.allowance import daily_allowance_grams
from pawfeed.feeding.portions import PortionValidationError, prune_noops, recalculate

__all__ = ["PortionValidationError", "daily_allowance_grams", "prune_noops", "recalculate"]
