"""
Portion engine data contracts.

The engine works on plain snapshots of schedule records and returns a
declarative list of mutations (``update`` / ``insert``) for the caller
to commit in a single atomic batch.

Any field of a schedule record that the engine does not know about
(name, time, bowl, pet linkage, ...) is kept as a pydantic *extra* on
:class:`ScheduleSnapshot` and copied verbatim into split offspring.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pawfeed.schemas.week_day import WeekDay, sort_days


class ScheduleSnapshot(BaseModel):
    """In-memory view of one feeding schedule record."""

    model_config = ConfigDict(extra="allow")

    id: Optional[int] = Field(None, description="Store id; None for records not yet created")
    is_enabled: bool = True
    repeat_days: list[WeekDay] = Field(default_factory=list)
    skipped_days: list[WeekDay] = Field(default_factory=list)
    addon_grams: int = Field(0, ge=0, description="Fixed extra grams on top of the fair share")
    portion_grams: int = Field(0, description="Derived; overwritten by every recalculation")

    @field_validator("is_enabled", mode="before")
    @classmethod
    def legacy_enabled(cls, value: Any) -> Any:
        # Rows written before the flag existed count as enabled.
        return True if value is None else value

    @field_validator("repeat_days", "skipped_days", mode="before")
    @classmethod
    def parse_days(cls, value: Any) -> Any:
        if value is None:
            return []
        return sort_days(value)

    @property
    def active_days(self) -> list[WeekDay]:
        """Repeat days minus skipped days, in week order."""
        skipped = set(self.skipped_days)
        return [d for d in self.repeat_days if d not in skipped]

    def opaque_fields(self) -> dict[str, Any]:
        """Pass-through fields the engine does not interpret."""
        return dict(self.model_extra or {})


class PendingEdit(BaseModel):
    """An edit not yet written, overlaid on one schedule before tallying."""

    schedule_id: int
    changes: dict[str, Any] = Field(default_factory=dict)


class ScheduleUpdate(BaseModel):
    """Set ``fields`` on the existing record ``id``."""

    kind: Literal["update"] = "update"
    id: int
    fields: dict[str, Any]


class ScheduleInsert(BaseModel):
    """Create a new record; the store allocates its id.

    ``source_id`` is the record this one was split from, or ``None`` for a
    brand-new schedule.
    """

    kind: Literal["insert"] = "insert"
    source_id: Optional[int] = None
    fields: dict[str, Any]


class RecalcResult(BaseModel):
    """Mutations to submit as one all-or-nothing batch."""

    updates: list[ScheduleUpdate] = Field(default_factory=list)
    inserts: list[ScheduleInsert] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.updates and not self.inserts

    @property
    def split_count(self) -> int:
        """Number of offspring records created by conflict splits."""
        return sum(1 for i in self.inserts if i.source_id is not None)
