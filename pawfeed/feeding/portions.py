"""
Feeding-portion recalculation engine.

Given a pet's daily food allowance and the pet's full set of weekly
feeding schedules, the engine splits the allowance fairly across the
meals of every day and returns the record mutations needed to store the
result.

Pipeline
--------

1. **Overlay**: an optional pending edit (not yet written) is merged
   into the matching schedule, so the recalculation sees the post-edit
   world and the edit itself can ride in the same batch.
2. **Tally**: for every week day, count the enabled schedules whose
   active days (repeat days minus skipped days) include that day.
3. **Ideal portion**: ``allowance / count[day]`` for every day with at
   least one meal.  Kept real-valued; rounding happens per schedule.
4. **Assign / split**: each schedule's active days are grouped by
   their rounded ideal portion:

   - one group: the record gets ``base + addon``;
   - several groups: the record cannot hold one portion for all of its
     days.  The biggest group (ties: earliest week day) keeps the
     record, every other group becomes a new record copied from it.

The engine is a pure function.  It never touches the store; the caller
commits :class:`RecalcResult` atomically (see
:mod:`pawfeed.services.feeding_schedule_service`).
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from pawfeed.core.logging import get_logger
from pawfeed.schemas.portion import (
    PendingEdit,
    RecalcResult,
    ScheduleInsert,
    ScheduleSnapshot,
    ScheduleUpdate,
)
from pawfeed.schemas.week_day import WEEK_DAYS, WeekDay, day_codes, day_index

logger = get_logger(__name__)

ScheduleInput = Union[ScheduleSnapshot, Mapping[str, Any]]

_DAY_FIELDS = ("repeat_days", "skipped_days")
_ENGINE_FIELDS = ("is_enabled", "repeat_days", "skipped_days", "addon_grams", "portion_grams")


class PortionValidationError(ValueError):
    """Engine input violates its invariants (negative allowance, bad day code, ...)."""


def _round_grams(value: float) -> int:
    """Round half up (``22.5 -> 23``), matching the feeder app."""
    return int(math.floor(value + 0.5))


# ======================================================================
# Input validation
# ======================================================================


def _validate_allowance(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PortionValidationError(f"Daily allowance must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise PortionValidationError(f"Daily allowance must be >= 0, got {value!r}")
    return float(value)


def _coerce_schedules(schedules: Iterable[ScheduleInput]) -> list[ScheduleSnapshot]:
    snapshots: list[ScheduleSnapshot] = []
    seen: set[int] = set()

    for raw in schedules:
        if isinstance(raw, ScheduleSnapshot):
            snap = raw
        else:
            try:
                snap = ScheduleSnapshot.model_validate(raw)
            except ValidationError as e:
                raise PortionValidationError(f"Invalid schedule record: {e}") from e

        if snap.id is not None:
            if snap.id in seen:
                raise PortionValidationError(f"Duplicate schedule id: {snap.id}")
            seen.add(snap.id)
        snapshots.append(snap)

    return snapshots


def _normalise_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Validate pending field changes and put day lists in storage form."""
    if "id" in changes:
        raise PortionValidationError("A pending edit cannot change the schedule id")

    normalised = dict(changes)
    for key in _DAY_FIELDS:
        if key in normalised:
            try:
                normalised[key] = day_codes(normalised[key] or [])
            except (TypeError, ValueError) as e:
                raise PortionValidationError(f"Invalid {key}: {e}") from e
    return normalised


# ======================================================================
# Stage 1: overlay
# ======================================================================


def _overlay(
    snapshots: list[ScheduleSnapshot],
    pending_edit: Optional[PendingEdit],
) -> tuple[list[ScheduleSnapshot], dict[str, Any]]:
    """Return the working set and the normalised pending changes."""
    if pending_edit is None:
        return snapshots, {}

    changes = _normalise_changes(pending_edit.changes)
    working: list[ScheduleSnapshot] = []
    found = False

    for snap in snapshots:
        if snap.id is not None and snap.id == pending_edit.schedule_id:
            try:
                snap = ScheduleSnapshot.model_validate({**snap.model_dump(), **changes})
            except ValidationError as e:
                raise PortionValidationError(f"Invalid pending edit for schedule {snap.id}: {e}") from e
            # Write back the validated values for fields the engine owns.
            validated = _record_fields(snap)
            for key in _ENGINE_FIELDS:
                if key in changes:
                    changes[key] = validated[key]
            found = True
        working.append(snap)

    if not found:
        raise PortionValidationError(f"Pending edit targets unknown schedule {pending_edit.schedule_id}")

    return working, changes


# ======================================================================
# Stages 2 and 3: per-day tally and ideal portion
# ======================================================================


def tally_meals(schedules: Iterable[ScheduleSnapshot]) -> dict[WeekDay, int]:
    """Count enabled schedules active on each week day."""
    counts = {d: 0 for d in WEEK_DAYS}
    for snap in schedules:
        if not snap.is_enabled:
            continue
        for day in snap.active_days:
            counts[day] += 1
    return counts


def ideal_portions(daily_allowance_grams: float, counts: Mapping[WeekDay, int]) -> dict[WeekDay, float]:
    """Fair per-meal share for every day that has at least one meal."""
    return {day: daily_allowance_grams / n for day, n in counts.items() if n > 0}


# ======================================================================
# Stage 4: per-schedule assignment and split
# ======================================================================


def _group_days(active_days: list[WeekDay], ideals: Mapping[WeekDay, float]) -> list[tuple[int, list[WeekDay]]]:
    """Group days by rounded base portion.

    Ordered by descending day count, then by the week position of each
    group's first day.
    """
    groups: dict[int, list[WeekDay]] = {}
    for day in active_days:
        groups.setdefault(_round_grams(ideals[day]), []).append(day)

    return sorted(groups.items(), key=lambda item: (-len(item[1]), day_index(item[1][0])))


def _record_fields(snap: ScheduleSnapshot) -> dict[str, Any]:
    """Full field set of a record, as needed to insert a copy of it."""
    fields = snap.opaque_fields()
    fields.update(
        is_enabled=snap.is_enabled,
        repeat_days=day_codes(snap.repeat_days),
        skipped_days=day_codes(snap.skipped_days),
        addon_grams=snap.addon_grams,
        portion_grams=snap.portion_grams,
    )
    return fields


def _emit_primary(
    snap: ScheduleSnapshot,
    fields: dict[str, Any],
    pending_changes: dict[str, Any],
) -> Union[ScheduleUpdate, ScheduleInsert]:
    if snap.id is None:
        return ScheduleInsert(source_id=None, fields={**_record_fields(snap), **fields})
    return ScheduleUpdate(id=snap.id, fields={**pending_changes, **fields})


def _assign(
    snap: ScheduleSnapshot,
    ideals: Mapping[WeekDay, float],
    pending_changes: dict[str, Any],
) -> list[Union[ScheduleUpdate, ScheduleInsert]]:
    active = snap.active_days
    if not snap.is_enabled or not active:
        return [_emit_primary(snap, {"portion_grams": 0}, pending_changes)]

    groups = _group_days(active, ideals)
    (base, kept_days), *others = groups

    if not others:
        return [_emit_primary(snap, {"portion_grams": base + snap.addon_grams}, pending_changes)]

    logger.info(
        "Splitting schedule %s into %d records (portions %s)",
        snap.id, len(groups), [g[0] + snap.addon_grams for g in groups],
    )

    mutations: list[Union[ScheduleUpdate, ScheduleInsert]] = [
        _emit_primary(
            snap,
            {
                "repeat_days": day_codes(kept_days),
                "skipped_days": [],
                "portion_grams": base + snap.addon_grams,
            },
            pending_changes,
        )
    ]

    template = _record_fields(snap)
    for other_base, days in others:
        mutations.append(ScheduleInsert(
            source_id=snap.id,
            fields={
                **template,
                "repeat_days": day_codes(days),
                "skipped_days": [],
                "portion_grams": other_base + snap.addon_grams,
            },
        ))

    return mutations


# ======================================================================
# Main entry point
# ======================================================================


def recalculate(
    daily_allowance_grams: float,
    schedules: Iterable[ScheduleInput],
    pending_edit: Optional[PendingEdit] = None,
) -> RecalcResult:
    """Recompute per-meal portions for one pet.

    Args:
        daily_allowance_grams: The pet's total grams per day (>= 0).
        schedules: Every schedule record of the pet, in store order.
            Records with ``id=None`` are not created yet and come back as
            inserts.
        pending_edit: Optional uncommitted edit of one existing schedule.
            Its changes are applied before tallying and included in that
            schedule's update payload.

    Returns:
        :class:`RecalcResult` holding the updates and inserts to commit
        as one atomic batch.

    Raises:
        PortionValidationError: on a negative allowance, malformed
            records or day codes, or a pending edit for an unknown id.
    """
    allowance = _validate_allowance(daily_allowance_grams)
    snapshots = _coerce_schedules(schedules)
    working, pending_changes = _overlay(snapshots, pending_edit)

    counts = tally_meals(working)
    ideals = ideal_portions(allowance, counts)
    logger.debug("Meal tally %s for allowance %sg", {d.value: n for d, n in counts.items()}, allowance)

    result = RecalcResult()
    for snap in working:
        targeted = pending_edit is not None and snap.id == pending_edit.schedule_id
        for mutation in _assign(snap, ideals, pending_changes if targeted else {}):
            if isinstance(mutation, ScheduleUpdate):
                result.updates.append(mutation)
            else:
                result.inserts.append(mutation)

    return result


# ======================================================================
# Helpers for callers
# ======================================================================


def _comparable(key: str, value: Any) -> Any:
    if key in _DAY_FIELDS:
        return day_codes(value or [])
    return value


def prune_noops(result: RecalcResult, schedules: Iterable[ScheduleInput]) -> RecalcResult:
    """Drop update fields that already match the stored records.

    Updates left with no changed field are removed entirely; inserts are
    always kept.  Running the engine on its own committed output then
    yields an empty result.
    """
    current = {s.id: s for s in _coerce_schedules(schedules) if s.id is not None}

    updates: list[ScheduleUpdate] = []
    for update in result.updates:
        snap = current.get(update.id)
        if snap is None:
            updates.append(update)
            continue

        stored = snap.model_dump()
        changed = {
            key: value
            for key, value in update.fields.items()
            if key not in stored or _comparable(key, stored[key]) != _comparable(key, value)
        }
        if changed:
            updates.append(ScheduleUpdate(id=update.id, fields=changed))

    return RecalcResult(updates=updates, inserts=list(result.inserts))
