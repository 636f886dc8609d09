"""Simulate a week of portions for a sample pet and print the result.

Runs the portion engine twice: once on the raw schedules, once on the
engine's own output, to show the split and the fixed point.

Usage:
    python scripts/simulate_week.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pawfeed.feeding.portions import prune_noops, recalculate, tally_meals
from pawfeed.schemas.portion import RecalcResult, ScheduleSnapshot
from pawfeed.schemas.week_day import WEEK_DAYS

DAILY_ALLOWANCE = 100

# (id, name, repeat days, skipped days, addon grams)
RAW_SCHEDULES = [
    (1, "Breakfast", ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"], [], 0),
    (2, "Lunch", ["Mon", "Wed", "Fri"], [], 0),
    (3, "Dinner", ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"], ["Sun"], 10),
    (4, "Late snack", ["Sat"], [], 0),
]


def apply(schedules: list[ScheduleSnapshot], result: RecalcResult) -> list[ScheduleSnapshot]:
    """Apply a result in memory, allocating ids for inserts."""
    by_id = {s.id: s.model_dump() for s in schedules}
    for update in result.updates:
        by_id[update.id].update(update.fields)
    next_id = max(by_id) + 1
    for insert in result.inserts:
        by_id[next_id] = {**insert.fields, "id": next_id}
        next_id += 1
    return [ScheduleSnapshot.model_validate(v) for v in by_id.values()]


def print_table(schedules: list[ScheduleSnapshot]) -> None:
    header = f"{'id':>3} {'name':<12}" + "".join(f"{d.value:>6}" for d in WEEK_DAYS)
    print(header)
    print("-" * len(header))
    for s in schedules:
        cells = "".join(f"{s.portion_grams if d in s.active_days else '.':>6}" for d in WEEK_DAYS)
        print(f"{s.id:>3} {s.name:<12}{cells}")

    counts = tally_meals(schedules)
    print("-" * len(header))
    print(f"{'':>3} {'meals':<12}" + "".join(f"{counts[d]:>6}" for d in WEEK_DAYS))


def main():
    schedules = [
        ScheduleSnapshot(id=i, name=name, repeat_days=days, skipped_days=skipped, addon_grams=addon)
        for i, name, days, skipped, addon in RAW_SCHEDULES
    ]

    print("=" * 60)
    print(f"Daily allowance: {DAILY_ALLOWANCE}g")
    print("=" * 60)

    first = recalculate(DAILY_ALLOWANCE, schedules)
    print(f"First pass: {len(first.updates)} updates, {len(first.inserts)} inserts")
    schedules = apply(schedules, first)
    print()
    print_table(schedules)

    second = prune_noops(recalculate(DAILY_ALLOWANCE, schedules), schedules)
    print()
    print(f"Second pass: {len(second.updates)} updates, {len(second.inserts)} inserts "
          f"({'fixed point' if second.is_empty else 'NOT a fixed point'})")


if __name__ == "__main__":
    main()
