"""
Feeding schedule repository.

Handles database operations for :class:`FeedingSchedule`, including the
all-or-nothing batch write used to store portion recalculations.
"""

import datetime
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from pawfeed.core.errors import ScheduleCommitError
from pawfeed.core.logging import get_logger
from pawfeed.models.feeding_schedule import FeedingSchedule
from pawfeed.schemas.portion import RecalcResult

logger = get_logger(__name__)


class FeedingScheduleRepository:
    """Repository for FeedingSchedule database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, schedule_id: int) -> Optional[FeedingSchedule]:
        return self.session.get(FeedingSchedule, schedule_id)

    def get_all_by_pet(self, pet_id: int) -> list[FeedingSchedule]:
        """All schedules of a pet in creation order.

        Always reloads rows so a read taken after locking the pet is fresh.
        """
        statement = (select(FeedingSchedule)
                     .where(FeedingSchedule.pet_id == pet_id)
                     .order_by(FeedingSchedule.id)
                     .execution_options(populate_existing=True))
        return list(self.session.exec(statement).all())

    def get_by_feeder_and_time(self, feeder_id: str, time: str) -> list[FeedingSchedule]:
        statement = (select(FeedingSchedule)
                     .where(FeedingSchedule.feeder_id == feeder_id, FeedingSchedule.time == time)
                     .order_by(FeedingSchedule.id))
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Atomic batch
    # ------------------------------------------------------------------

    def apply_batch(self, result: RecalcResult,
                    deletes: Sequence[FeedingSchedule] = ()) -> list[FeedingSchedule]:
        """Apply updates, inserts and deletes in a single transaction.

        Anything already staged on the session (e.g. pet edits) is
        committed together with the batch.

        Returns:
            The newly inserted schedules, with ids assigned.

        Raises:
            ScheduleCommitError: if any part fails.  The session is rolled
                back and no change is persisted.
        """
        now = datetime.datetime.utcnow()
        created: list[FeedingSchedule] = []

        try:
            for entry in deletes:
                self.session.delete(entry)

            for update in result.updates:
                entry = self.session.get(FeedingSchedule, update.id)
                if entry is None:
                    self.session.rollback()
                    raise ScheduleCommitError(detail=f"Schedule {update.id} no longer exists")
                for key, value in update.fields.items():
                    if key in FeedingSchedule.model_fields and key != "id":
                        setattr(entry, key, value)
                entry.updated_at = now
                self.session.add(entry)

            for insert in result.inserts:
                fields = {k: v for k, v in insert.fields.items() if k in FeedingSchedule.model_fields and k != "id"}
                entry = FeedingSchedule(**fields)
                self.session.add(entry)
                created.append(entry)

            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Schedule batch failed, rolled back: %s", e)
            raise ScheduleCommitError(detail=str(e)) from e

        for entry in created:
            self.session.refresh(entry)

        logger.info("Committed schedule batch: %d updates, %d inserts, %d deletes",
                    len(result.updates), len(created), len(deletes))
        return created
