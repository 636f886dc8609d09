"""
Feeding schedule service.

Every mutating operation follows the same sequence inside one database
transaction:

1. lock the pet row (one recalculation in flight per pet),
2. read the pet's schedules,
3. run the portion engine with the edit as a pending overlay,
4. commit the engine's updates / inserts (and any delete) as one batch.

The edit and the recalculated portions therefore land in a single write
per record, and a failed commit leaves the previous portions untouched.
"""

import re
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from pawfeed.core.errors import ScheduleCommitError
from pawfeed.core.logging import get_logger
from pawfeed.db.repositories.feeding_schedule import FeedingScheduleRepository
from pawfeed.db.repositories.pet import PetRepository
from pawfeed.feeding.portions import PortionValidationError, prune_noops, recalculate
from pawfeed.models.feeding_schedule import FeedingSchedule
from pawfeed.models.pet import Pet
from pawfeed.schemas.feeding_schedule import (
    FeedingScheduleCreate,
    FeedingScheduleResponse,
    FeedingScheduleUpdate,
)
from pawfeed.schemas.portion import PendingEdit, RecalcResult, ScheduleSnapshot
from pawfeed.schemas.week_day import WeekDay, day_codes, parse_day

logger = get_logger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Row fields that never travel into the engine or into split copies.
_BOOKKEEPING_FIELDS = {"created_at", "updated_at"}


def to_snapshot(entry: FeedingSchedule) -> ScheduleSnapshot:
    """Engine view of a stored schedule."""
    return ScheduleSnapshot.model_validate(entry.model_dump(exclude=_BOOKKEEPING_FIELDS))


class FeedingScheduleService:
    """Service for feeding schedules and their portions."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = FeedingScheduleRepository(session)
        self.pet_repository = PetRepository(session)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, feeder_id: str, schedule_id: int) -> FeedingScheduleResponse:
        return self._to_response(self._get_owned_schedule(feeder_id, schedule_id))

    def get_by_pet(self, feeder_id: str, pet_id: int) -> list[FeedingScheduleResponse]:
        self._get_owned_pet(feeder_id, pet_id)
        return [self._to_response(e) for e in self.repository.get_all_by_pet(pet_id)]

    def preview(self, feeder_id: str, pet_id: int, pending: Optional[PendingEdit] = None) -> RecalcResult:
        """Engine output for the pet, optionally with an edit overlaid.  Nothing is saved."""
        pet = self._get_owned_pet(feeder_id, pet_id)
        existing = self.repository.get_all_by_pet(pet_id)
        result = self._run_engine(pet, [to_snapshot(e) for e in existing], pending)
        return prune_noops(result, [to_snapshot(e) for e in existing])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, feeder_id: str, pet_id: int, data: FeedingScheduleCreate) -> list[FeedingScheduleResponse]:
        """Create a schedule.  Returns the pet's schedules after recalculation."""
        pet = self._lock_pet(feeder_id, pet_id)
        self._check_time_slot(feeder_id, pet_id, data.time, data.bowl_number, data.repeat_days)

        existing = self.repository.get_all_by_pet(pet_id)
        new_schedule = ScheduleSnapshot(
            id=None,
            pet_id=pet_id,
            feeder_id=feeder_id,
            name=data.name,
            time=data.time,
            bowl_number=data.bowl_number,
            is_enabled=data.is_enabled,
            repeat_days=data.repeat_days,
            skipped_days=self._checked_skips(data.repeat_days, data.skipped_days),
            addon_grams=data.addon_grams,
        )

        result = self._run_engine(pet, [*map(to_snapshot, existing), new_schedule])
        self._commit(pet, existing, result)
        return self.get_by_pet(feeder_id, pet_id)

    def update(self, feeder_id: str, schedule_id: int, data: FeedingScheduleUpdate) -> list[FeedingScheduleResponse]:
        """Apply field edits and recalculate in the same batch."""
        pet, entry, existing = self._lock_schedule(feeder_id, schedule_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        return self._apply_edit(pet, entry, existing, changes)

    def set_enabled(self, feeder_id: str, schedule_id: int, enabled: bool) -> list[FeedingScheduleResponse]:
        pet, entry, existing = self._lock_schedule(feeder_id, schedule_id)
        return self._apply_edit(pet, entry, existing, {"is_enabled": enabled})

    def toggle_skip(self, feeder_id: str, schedule_id: int, day: str) -> list[FeedingScheduleResponse]:
        """Skip *day* for this cycle, or un-skip it if already skipped."""
        target = self._parse_day(day)
        pet, entry, existing = self._lock_schedule(feeder_id, schedule_id)
        self._require_repeat_day(entry, target)

        skipped = set(day_codes(entry.skipped_days or [])) ^ {target.value}
        return self._apply_edit(pet, entry, existing, {"skipped_days": day_codes(skipped)})

    def edit_single_day(self, feeder_id: str, schedule_id: int, day: str,
                        data: FeedingScheduleUpdate) -> list[FeedingScheduleResponse]:
        """Change one day of a recurring schedule.

        The day is moved out of the original record into a new record
        carrying the edited fields.  A schedule that only has that day is
        simply updated.
        """
        target = self._parse_day(day)
        pet, entry, existing = self._lock_schedule(feeder_id, schedule_id)
        repeat = self._require_repeat_day(entry, target)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        changes.pop("repeat_days", None)
        changes.pop("skipped_days", None)

        if len(repeat) == 1:
            return self._apply_edit(pet, entry, existing, changes)

        self._check_time_slot(feeder_id, entry.pet_id, changes.get("time", entry.time),
                              changes.get("bowl_number", entry.bowl_number), [target.value],
                              exclude_id=entry.id)

        pending = PendingEdit(schedule_id=entry.id, changes=self._without_day(entry, target))
        single_day = ScheduleSnapshot.model_validate({
            **to_snapshot(entry).model_dump(exclude={"id", "portion_grams"}),
            **changes,
            "id": None,
            "repeat_days": [target.value],
            "skipped_days": [],
        })

        result = self._run_engine(pet, [*map(to_snapshot, existing), single_day], pending)
        self._commit(pet, existing, result)
        return self.get_by_pet(feeder_id, entry.pet_id)

    def delete(self, feeder_id: str, schedule_id: int, day: Optional[str] = None) -> None:
        """Delete a schedule, or only one of its days when *day* is given.

        Removing the last remaining day deletes the record.
        """
        target = self._parse_day(day) if day is not None else None
        pet, entry, existing = self._lock_schedule(feeder_id, schedule_id)

        if target is not None:
            repeat = self._require_repeat_day(entry, target)
            if len(repeat) > 1:
                self._apply_edit(pet, entry, existing, self._without_day(entry, target))
                return

        remaining = [e for e in existing if e.id != entry.id]
        result = self._run_engine(pet, [to_snapshot(e) for e in remaining])
        self._commit(pet, remaining, result, deletes=[entry])

    def recalculate_pet(self, feeder_id: str, pet_id: int) -> RecalcResult:
        """Recompute and store portions for a pet without any edit."""
        pet = self._lock_pet(feeder_id, pet_id)
        existing = self.repository.get_all_by_pet(pet_id)
        result = self._run_engine(pet, [to_snapshot(e) for e in existing])
        return self._commit(pet, existing, result)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _apply_edit(self, pet: Pet, entry: FeedingSchedule, existing: list[FeedingSchedule],
                    changes: dict[str, Any]) -> list[FeedingScheduleResponse]:
        if "repeat_days" in changes or "skipped_days" in changes:
            repeat = changes.get("repeat_days", entry.repeat_days or [])
            if "skipped_days" in changes:
                changes["skipped_days"] = self._checked_skips(repeat, changes["skipped_days"])
            else:
                # Skips on days that are no longer repeat days are dropped.
                changes["skipped_days"] = [d for d in day_codes(entry.skipped_days or []) if d in repeat]

        if {"time", "bowl_number", "repeat_days"} & changes.keys():
            self._check_time_slot(pet.feeder_id, entry.pet_id, changes.get("time", entry.time),
                                  changes.get("bowl_number", entry.bowl_number),
                                  changes.get("repeat_days", entry.repeat_days or []), exclude_id=entry.id)

        pending = PendingEdit(schedule_id=entry.id, changes=changes)
        result = self._run_engine(pet, [to_snapshot(e) for e in existing], pending)
        self._commit(pet, existing, result)
        return self.get_by_pet(pet.feeder_id, entry.pet_id)

    def _run_engine(self, pet: Pet, schedules: list[ScheduleSnapshot],
                    pending: Optional[PendingEdit] = None) -> RecalcResult:
        try:
            return recalculate(pet.daily_allowance_grams, schedules, pending)
        except PortionValidationError as e:
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e), ) from e

    def _commit(self, pet: Pet, existing: list[FeedingSchedule], result: RecalcResult,
                deletes: Optional[list[FeedingSchedule]] = None) -> RecalcResult:
        """Write only what changed; the whole batch or nothing."""
        batch = prune_noops(result, [to_snapshot(e) for e in existing])
        try:
            self.repository.apply_batch(batch, deletes=deletes or [])
        except ScheduleCommitError:
            logger.warning("Portions for pet %s not saved; retry from a fresh read", pet.id)
            raise
        if batch.split_count:
            logger.info("Pet %s: %d schedule record(s) split off to keep one portion per record",
                        pet.id, batch.split_count)
        return batch

    def _lock_pet(self, feeder_id: str, pet_id: int) -> Pet:
        pet = self.pet_repository.lock_for_update(pet_id)
        if not pet or pet.feeder_id != feeder_id:
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pet not found", )
        return pet

    def _lock_schedule(self, feeder_id: str, schedule_id: int) -> tuple[Pet, FeedingSchedule, list[FeedingSchedule]]:
        """Lock the schedule's pet, then read the pet's schedules fresh."""
        entry = self._get_owned_schedule(feeder_id, schedule_id)
        pet = self._lock_pet(feeder_id, entry.pet_id)
        existing = self.repository.get_all_by_pet(entry.pet_id)
        if not any(e.id == schedule_id for e in existing):
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feeding schedule not found", )
        return pet, entry, existing

    def _check_time_slot(self, feeder_id: str, pet_id: int, time: str, bowl_number: int,
                         days: list[str], exclude_id: Optional[int] = None) -> None:
        """Reject a meal that collides with another at the same time.

        Same pet or same bowl on any shared day is a conflict.
        """
        if not _TIME_RE.match(time):
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail=f"Invalid time '{time}', expected HH:MM", )
        wanted = set(day_codes(days))
        for other in self.repository.get_by_feeder_and_time(feeder_id, time):
            if other.id == exclude_id or not wanted & set(day_codes(other.repeat_days or [])):
                continue
            if other.pet_id == pet_id:
                detail = "Pet already eats then."
            elif other.bowl_number == bowl_number:
                detail = "Bowl is busy then."
            else:
                continue
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail, )

    def _checked_skips(self, repeat_days: list[str], skipped_days: Optional[list[str]]) -> list[str]:
        repeat = set(day_codes(repeat_days))
        skipped = day_codes(skipped_days or [])
        stray = [d for d in skipped if d not in repeat]
        if stray:
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail=f"Skipped days {stray} are not repeat days", )
        return skipped

    def _require_repeat_day(self, entry: FeedingSchedule, day: WeekDay) -> list[str]:
        repeat = day_codes(entry.repeat_days or [])
        if day.value not in repeat:
            self.session.rollback()
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail=f"{day.value} is not a repeat day of this schedule", )
        return repeat

    @staticmethod
    def _without_day(entry: FeedingSchedule, day: WeekDay) -> dict[str, list[str]]:
        return {
            "repeat_days": [d for d in day_codes(entry.repeat_days or []) if d != day.value],
            "skipped_days": [d for d in day_codes(entry.skipped_days or []) if d != day.value],
        }

    @staticmethod
    def _parse_day(day: str) -> WeekDay:
        try:
            return parse_day(day)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e), ) from e

    def _get_owned_pet(self, feeder_id: str, pet_id: int) -> Pet:
        pet = self.pet_repository.get_by_id(pet_id)
        if not pet or pet.feeder_id != feeder_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pet not found", )
        return pet

    def _get_owned_schedule(self, feeder_id: str, schedule_id: int) -> FeedingSchedule:
        entry = self.repository.get_by_id(schedule_id)
        if not entry or entry.feeder_id != feeder_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feeding schedule not found", )
        return entry

    @staticmethod
    def _to_response(entry: FeedingSchedule) -> FeedingScheduleResponse:
        return FeedingScheduleResponse.model_validate(entry)
