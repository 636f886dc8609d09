"""
Week-day codes used by feeding schedules.

Declaration order of :class:`WeekDay` is the canonical order: it is used
for sorting stored day lists and as the tie-break when a schedule has
to be split into several records.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class WeekDay(str, Enum):
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"


WEEK_DAYS: list[WeekDay] = list(WeekDay)

_DAY_INDEX: dict[WeekDay, int] = {d: i for i, d in enumerate(WEEK_DAYS)}

# Single-letter codes written by the mobile app (Sunday first).
_STORAGE_LETTERS: dict[str, WeekDay] = {
    "U": WeekDay.SUN,
    "M": WeekDay.MON,
    "T": WeekDay.TUE,
    "W": WeekDay.WED,
    "R": WeekDay.THU,
    "F": WeekDay.FRI,
    "S": WeekDay.SAT,
}

_FULL_NAMES: dict[str, WeekDay] = {
    "monday": WeekDay.MON,
    "tuesday": WeekDay.TUE,
    "wednesday": WeekDay.WED,
    "thursday": WeekDay.THU,
    "friday": WeekDay.FRI,
    "saturday": WeekDay.SAT,
    "sunday": WeekDay.SUN,
}


def parse_day(value: WeekDay | str) -> WeekDay:
    """Parse a day code.

    Accepts ``Mon``..``Sun`` (any case), the app's storage letters
    ``U M T W R F S`` and full English day names.

    Raises:
        ValueError: if *value* is not a recognised day.
    """
    if isinstance(value, WeekDay):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid day code: {value!r}")

    raw = value.strip()
    if raw in _STORAGE_LETTERS:
        return _STORAGE_LETTERS[raw]

    lowered = raw.lower()
    if lowered in _FULL_NAMES:
        return _FULL_NAMES[lowered]
    for day in WEEK_DAYS:
        if day.value.lower() == lowered:
            return day

    raise ValueError(f"Invalid day code: {value!r}")


def day_index(day: WeekDay) -> int:
    return _DAY_INDEX[day]


def sort_days(days: Iterable[WeekDay | str]) -> list[WeekDay]:
    """Parse, de-duplicate and sort *days* in week order."""
    return sorted({parse_day(d) for d in days}, key=day_index)


def day_codes(days: Iterable[WeekDay | str]) -> list[str]:
    """Canonical storage form: sorted list of ``Mon``..``Sun`` strings."""
    return [d.value for d in sort_days(days)]
