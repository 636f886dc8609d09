"""Tests for week-day parsing and ordering."""

import pytest

from pawfeed.schemas.week_day import WeekDay, day_codes, day_index, parse_day, sort_days


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Mon", WeekDay.MON),
        ("sun", WeekDay.SUN),
        ("THU", WeekDay.THU),
        ("U", WeekDay.SUN),
        ("R", WeekDay.THU),
        ("S", WeekDay.SAT),
        ("Wednesday", WeekDay.WED),
        (" Fri ", WeekDay.FRI),
        (WeekDay.TUE, WeekDay.TUE),
    ],
)
def test_parse_day(raw, expected):
    assert parse_day(raw) is expected


@pytest.mark.parametrize("raw", ["", "Mo", "Xyz", "u", 3, None])
def test_parse_day_rejects(raw):
    with pytest.raises(ValueError):
        parse_day(raw)


def test_week_starts_on_monday():
    assert day_index(WeekDay.MON) == 0
    assert day_index(WeekDay.SUN) == 6


def test_sort_days_deduplicates():
    assert sort_days(["Sun", "Mon", "mon", "W"]) == [WeekDay.MON, WeekDay.WED, WeekDay.SUN]


def test_day_codes_storage_form():
    assert day_codes(["friday", WeekDay.TUE, "Tue"]) == ["Tue", "Fri"]
    assert day_codes([]) == []
