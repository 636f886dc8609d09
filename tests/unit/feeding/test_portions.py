"""Tests for the portion recalculation engine.

These are *pure unit tests*: schedules are in-memory snapshots and the
engine's mutations are applied to them with a small helper instead of a
database.
"""

import pytest
from pydantic import ValidationError

from pawfeed.feeding.portions import (
    PortionValidationError,
    ideal_portions,
    prune_noops,
    recalculate,
    tally_meals,
)
from pawfeed.schemas.portion import PendingEdit, RecalcResult, ScheduleSnapshot
from pawfeed.schemas.week_day import WEEK_DAYS, WeekDay

ALL_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


# ======================================================================
# Helpers
# ======================================================================


def _sched(schedule_id, days, skipped=(), enabled=True, addon=0, portion=0, **extra) -> ScheduleSnapshot:
    return ScheduleSnapshot(
        id=schedule_id,
        repeat_days=list(days),
        skipped_days=list(skipped),
        is_enabled=enabled,
        addon_grams=addon,
        portion_grams=portion,
        **extra,
    )


def _apply(schedules: list[ScheduleSnapshot], result: RecalcResult) -> list[ScheduleSnapshot]:
    """Apply a result the way the store would, allocating ids for inserts."""
    records = {s.id: s.model_dump() for s in schedules}
    for update in result.updates:
        records[update.id].update(update.fields)
    next_id = max(records, default=0) + 1
    for insert in result.inserts:
        records[next_id] = {**insert.fields, "id": next_id}
        next_id += 1
    return [ScheduleSnapshot.model_validate(r) for r in records.values()]


def _portions(result: RecalcResult) -> dict[int, int]:
    return {u.id: u.fields["portion_grams"] for u in result.updates}


def _base_sums(schedules: list[ScheduleSnapshot]) -> dict[WeekDay, tuple[int, int]]:
    """Per day: (sum of portion - addon, number of meals)."""
    sums = {}
    for day in WEEK_DAYS:
        active = [s for s in schedules if s.is_enabled and day in s.active_days]
        sums[day] = (sum(s.portion_grams - s.addon_grams for s in active), len(active))
    return sums


# ======================================================================
# Input validation
# ======================================================================


class TestValidation:
    def test_empty_schedule_set(self):
        result = recalculate(100, [])
        assert result.is_empty
        assert result.updates == []
        assert result.inserts == []

    @pytest.mark.parametrize("allowance", [-1, -0.5, float("nan"), float("inf"), True, "100", None])
    def test_rejects_bad_allowance(self, allowance):
        with pytest.raises(PortionValidationError):
            recalculate(allowance, [_sched(1, ["Mon"])])

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            recalculate(-10, [])

    def test_rejects_malformed_day_code_in_record(self):
        with pytest.raises(PortionValidationError):
            recalculate(100, [{"id": 1, "repeat_days": ["Mon", "Someday"]}])

    def test_snapshot_rejects_malformed_day_code(self):
        with pytest.raises(ValidationError):
            ScheduleSnapshot(id=1, repeat_days=["Funday"])

    def test_rejects_negative_addon(self):
        with pytest.raises(PortionValidationError):
            recalculate(100, [{"id": 1, "repeat_days": ["Mon"], "addon_grams": -5}])

    def test_rejects_duplicate_ids(self):
        with pytest.raises(PortionValidationError):
            recalculate(100, [_sched(1, ["Mon"]), _sched(1, ["Tue"])])

    def test_rejects_pending_edit_for_unknown_schedule(self):
        with pytest.raises(PortionValidationError):
            recalculate(100, [_sched(1, ["Mon"])], PendingEdit(schedule_id=99, changes={"is_enabled": False}))

    def test_rejects_pending_edit_changing_id(self):
        with pytest.raises(PortionValidationError):
            recalculate(100, [_sched(1, ["Mon"])], PendingEdit(schedule_id=1, changes={"id": 2}))

    def test_rejects_pending_edit_with_bad_day(self):
        with pytest.raises(PortionValidationError):
            recalculate(100, [_sched(1, ["Mon"])], PendingEdit(schedule_id=1, changes={"repeat_days": ["Xyz"]}))

    def test_accepts_plain_dict_records(self):
        result = recalculate(80, [{"id": 1, "repeat_days": ["Mon"], "name": "Breakfast"}])
        assert _portions(result) == {1: 80}

    def test_legacy_record_without_enabled_flag_counts_as_enabled(self):
        result = recalculate(80, [{"id": 1, "repeat_days": ["Mon"], "is_enabled": None}])
        assert _portions(result) == {1: 80}


# ======================================================================
# Tally and ideal portion
# ======================================================================


class TestTally:
    def test_counts_only_enabled_active_days(self):
        schedules = [
            _sched(1, ["Mon", "Tue", "Wed"]),
            _sched(2, ["Mon"], skipped=["Mon"]),
            _sched(3, ["Mon", "Thu"], enabled=False),
        ]
        counts = tally_meals(schedules)
        assert counts[WeekDay.MON] == 1
        assert counts[WeekDay.TUE] == 1
        assert counts[WeekDay.WED] == 1
        assert counts[WeekDay.THU] == 0
        assert set(counts) == set(WEEK_DAYS)

    def test_ideal_only_for_days_with_meals(self):
        counts = {d: 0 for d in WEEK_DAYS}
        counts[WeekDay.MON] = 3
        counts[WeekDay.FRI] = 1
        ideals = ideal_portions(100, counts)
        assert set(ideals) == {WeekDay.MON, WeekDay.FRI}
        assert ideals[WeekDay.MON] == pytest.approx(33.333, abs=0.001)
        assert ideals[WeekDay.FRI] == 100


# ======================================================================
# Assignment without conflicts
# ======================================================================


class TestAssignment:
    def test_shared_days_and_solo_day(self):
        """90g, two meals Mon-Wed and one meal on Thu."""
        schedules = [
            _sched(1, ["Mon", "Tue", "Wed"]),
            _sched(2, ["Mon", "Tue", "Wed"]),
            _sched(3, ["Thu"]),
        ]
        result = recalculate(90, schedules)
        assert _portions(result) == {1: 45, 2: 45, 3: 90}
        assert result.inserts == []

    def test_addon_added_on_top_of_base(self):
        result = recalculate(40, [_sched(1, ALL_DAYS, addon=10)])
        assert _portions(result) == {1: 50}

    def test_addon_does_not_change_other_meals(self):
        result = recalculate(100, [_sched(1, ["Mon"], addon=20), _sched(2, ["Mon"])])
        assert _portions(result) == {1: 70, 2: 50}

    @pytest.mark.parametrize("addon, days", [(0, ALL_DAYS), (15, ["Mon"]), (30, ["Sat", "Sun"])])
    def test_disabled_schedule_gets_zero(self, addon, days):
        schedules = [_sched(1, days, enabled=False, addon=addon, portion=80), _sched(2, ALL_DAYS)]
        result = recalculate(100, schedules)
        assert _portions(result) == {1: 0, 2: 100}

    def test_fully_skipped_schedule_gets_zero_and_frees_its_share(self):
        schedules = [_sched(1, ["Mon"], skipped=["Mon"], addon=5), _sched(2, ["Mon"])]
        result = recalculate(60, schedules)
        assert _portions(result) == {1: 0, 2: 60}

    def test_rounds_half_up(self):
        result = recalculate(45, [_sched(1, ["Mon"]), _sched(2, ["Mon"])])
        assert _portions(result) == {1: 23, 2: 23}

    def test_zero_allowance(self):
        result = recalculate(0, [_sched(1, ALL_DAYS, addon=5), _sched(2, ["Mon"])])
        assert _portions(result) == {1: 5, 2: 0}
        assert result.inserts == []

    def test_update_payload_is_portion_only_without_pending_edit(self):
        result = recalculate(90, [_sched(1, ["Mon"], name="Breakfast")])
        assert result.updates[0].fields == {"portion_grams": 90}

    def test_output_follows_input_order(self):
        schedules = [_sched(7, ["Mon"]), _sched(3, ["Mon"]), _sched(5, ["Tue"])]
        result = recalculate(100, schedules)
        assert [u.id for u in result.updates] == [7, 3, 5]


# ======================================================================
# Pending edit overlay
# ======================================================================


class TestPendingEdit:
    def test_toggle_enabled_scenario(self):
        """300g, one schedule every day: disable then enable again."""
        schedules = [_sched(1, ALL_DAYS)]

        schedules = _apply(schedules, recalculate(300, schedules))
        assert schedules[0].portion_grams == 300

        disabled = recalculate(300, schedules, PendingEdit(schedule_id=1, changes={"is_enabled": False}))
        assert disabled.updates[0].fields == {"is_enabled": False, "portion_grams": 0}
        schedules = _apply(schedules, disabled)
        assert schedules[0].portion_grams == 0

        enabled = recalculate(300, schedules, PendingEdit(schedule_id=1, changes={"is_enabled": True}))
        assert enabled.updates[0].fields == {"is_enabled": True, "portion_grams": 300}
        schedules = _apply(schedules, enabled)
        assert schedules[0].portion_grams == 300

    def test_overlay_applies_before_tally(self):
        schedules = [_sched(1, ["Mon"]), _sched(2, ["Mon"])]
        result = recalculate(90, schedules, PendingEdit(schedule_id=2, changes={"repeat_days": ["Tue"]}))
        assert _portions(result) == {1: 90, 2: 90}
        assert result.updates[1].fields == {"repeat_days": ["Tue"], "portion_grams": 90}

    def test_pending_changes_only_on_target(self):
        schedules = [_sched(1, ["Mon"]), _sched(2, ["Mon"])]
        result = recalculate(90, schedules, PendingEdit(schedule_id=1, changes={"name": "Breakfast"}))
        assert result.updates[0].fields == {"name": "Breakfast", "portion_grams": 45}
        assert result.updates[1].fields == {"portion_grams": 45}

    def test_pending_day_lists_are_normalised(self):
        schedules = [_sched(1, ["Mon"])]
        edit = PendingEdit(schedule_id=1, changes={"repeat_days": ["friday", "M", "Wed", "Wed"]})
        result = recalculate(60, schedules, edit)
        assert result.updates[0].fields["repeat_days"] == ["Mon", "Wed", "Fri"]

    def test_skip_via_pending_edit(self):
        schedules = [_sched(1, ["Mon", "Tue"]), _sched(2, ["Mon", "Tue"])]
        result = recalculate(100, schedules, PendingEdit(schedule_id=2, changes={"skipped_days": ["Tue"]}))
        # Schedule 1 is now alone on Tue (100) but shares Mon (50).
        kept = result.updates[0]
        assert kept.fields["repeat_days"] == ["Mon"]
        assert kept.fields["portion_grams"] == 50
        assert result.inserts[0].fields["repeat_days"] == ["Tue"]
        assert result.inserts[0].fields["portion_grams"] == 100
        assert result.updates[1].fields == {"skipped_days": ["Tue"], "portion_grams": 50}

    def test_input_snapshots_are_not_mutated(self):
        schedules = [_sched(1, ["Mon"])]
        recalculate(50, schedules, PendingEdit(schedule_id=1, changes={"is_enabled": False}))
        assert schedules[0].is_enabled is True
        assert schedules[0].portion_grams == 0


# ======================================================================
# Conflict split
# ======================================================================


class TestSplit:
    def _competing_week(self, addon=0):
        """Mon/Wed/Fri shared by four meals (25g), Tue/Thu only schedule 1 (100g)."""
        return [
            _sched(1, ["Mon", "Tue", "Wed", "Thu", "Fri"], addon=addon,
                   name="Breakfast", time="07:30", bowl_number=2, pet_id=4),
            _sched(2, ["Mon", "Wed", "Fri"]),
            _sched(3, ["Mon", "Wed", "Fri"]),
            _sched(4, ["Mon", "Wed", "Fri"]),
        ]

    def test_one_insert_per_extra_portion_group(self):
        result = recalculate(100, self._competing_week())

        kept = result.updates[0]
        assert kept.id == 1
        assert kept.fields == {"repeat_days": ["Mon", "Wed", "Fri"], "skipped_days": [], "portion_grams": 25}

        assert len(result.inserts) == 1
        offspring = result.inserts[0]
        assert offspring.source_id == 1
        assert offspring.fields["repeat_days"] == ["Tue", "Thu"]
        assert offspring.fields["skipped_days"] == []
        assert offspring.fields["portion_grams"] == 100
        assert result.split_count == 1

        assert _portions(result) == {1: 25, 2: 25, 3: 25, 4: 25}

    def test_split_days_are_disjoint_and_complete(self):
        result = recalculate(100, self._competing_week())
        kept_days = set(result.updates[0].fields["repeat_days"])
        new_days = set(result.inserts[0].fields["repeat_days"])
        assert kept_days.isdisjoint(new_days)
        assert kept_days | new_days == {"Mon", "Tue", "Wed", "Thu", "Fri"}

    def test_offspring_copies_opaque_fields(self):
        result = recalculate(100, self._competing_week(addon=5))
        fields = result.inserts[0].fields
        assert fields["name"] == "Breakfast"
        assert fields["time"] == "07:30"
        assert fields["bowl_number"] == 2
        assert fields["pet_id"] == 4
        assert fields["is_enabled"] is True
        assert fields["addon_grams"] == 5
        assert "id" not in fields

    def test_addon_applied_to_every_split_record(self):
        result = recalculate(100, self._competing_week(addon=10))
        assert result.updates[0].fields["portion_grams"] == 35
        assert result.inserts[0].fields["portion_grams"] == 110

    def test_three_way_split(self):
        # Mon: 1 meal (60), Tue: 2 meals (30), Wed: 3 meals (20)
        schedules = [
            _sched(1, ["Mon", "Tue", "Wed"]),
            _sched(2, ["Tue", "Wed"]),
            _sched(3, ["Wed"]),
        ]
        result = recalculate(60, schedules)
        assert result.updates[0].fields["repeat_days"] == ["Mon"]
        assert result.updates[0].fields["portion_grams"] == 60
        offspring = [i for i in result.inserts if i.source_id == 1]
        assert [(i.fields["repeat_days"], i.fields["portion_grams"]) for i in offspring] == [
            (["Tue"], 30),
            (["Wed"], 20),
        ]
        # Schedule 2 straddles Tue (30g) and Wed (20g) as well.
        assert result.split_count == 3

    def test_largest_group_keeps_record(self):
        # Sat/Sun alone (80g), Mon shared (40g): the weekend group is bigger.
        schedules = [_sched(1, ["Mon", "Sat", "Sun"]), _sched(2, ["Mon"])]
        result = recalculate(80, schedules)
        assert result.updates[0].fields["repeat_days"] == ["Sat", "Sun"]
        assert result.updates[0].fields["portion_grams"] == 80
        assert result.inserts[0].fields["repeat_days"] == ["Mon"]
        assert result.inserts[0].fields["portion_grams"] == 40

    @pytest.mark.parametrize(
        "other_days, kept_portion, new_portion",
        [
            (["Tue"], 60, 30),  # Mon alone -> Mon group (60g) first
            (["Mon"], 30, 60),  # Mon shared -> Mon group (30g) first
        ],
    )
    def test_equal_groups_broken_by_week_order(self, other_days, kept_portion, new_portion):
        schedules = [_sched(1, ["Mon", "Tue"]), _sched(2, other_days)]
        result = recalculate(60, schedules)
        assert result.updates[0].fields["repeat_days"] == ["Mon"]
        assert result.updates[0].fields["portion_grams"] == kept_portion
        assert result.inserts[0].fields["repeat_days"] == ["Tue"]
        assert result.inserts[0].fields["portion_grams"] == new_portion

    def test_skipped_days_are_dropped_from_split_records(self):
        schedules = [_sched(1, ["Mon", "Tue", "Wed", "Thu", "Fri"], skipped=["Thu"]), _sched(2, ["Mon"])]
        result = recalculate(100, schedules)
        assert result.updates[0].fields == {
            "repeat_days": ["Tue", "Wed", "Fri"],
            "skipped_days": [],
            "portion_grams": 100,
        }
        assert result.inserts[0].fields["repeat_days"] == ["Mon"]
        assert result.inserts[0].fields["portion_grams"] == 50

    def test_rounding_can_prevent_split(self):
        # Mon 3 meals -> 3.33g, Tue 4 meals -> 2.5g: both round to 3.
        schedules = [
            _sched(1, ["Mon", "Tue"]),
            _sched(2, ["Mon", "Tue"]),
            _sched(3, ["Mon", "Tue"]),
            _sched(4, ["Tue"]),
        ]
        result = recalculate(10, schedules)
        assert result.inserts == []
        assert _portions(result) == {1: 3, 2: 3, 3: 3, 4: 3}

    def test_pending_edit_merged_into_kept_record(self):
        schedules = [_sched(1, ["Mon"]), _sched(2, ["Mon", "Tue"], name="Old")]
        result = recalculate(100, schedules, PendingEdit(schedule_id=2, changes={"name": "Dinner"}))
        kept = result.updates[1]
        assert kept.id == 2
        assert kept.fields == {"name": "Dinner", "repeat_days": ["Mon"], "skipped_days": [], "portion_grams": 50}
        assert result.inserts[0].fields["name"] == "Dinner"
        assert result.inserts[0].fields["portion_grams"] == 100


# ======================================================================
# Records not created yet
# ======================================================================


class TestNewRecords:
    def test_new_record_comes_back_as_insert(self):
        schedules = [_sched(1, ["Mon"]), _sched(None, ["Mon"], name="Lunch")]
        result = recalculate(50, schedules)
        assert _portions(result) == {1: 25}
        assert len(result.inserts) == 1
        insert = result.inserts[0]
        assert insert.source_id is None
        assert insert.fields["name"] == "Lunch"
        assert insert.fields["portion_grams"] == 25
        assert result.split_count == 0

    def test_new_record_split_gives_two_inserts(self):
        schedules = [_sched(1, ["Mon"]), _sched(None, ["Mon", "Tue", "Wed"])]
        result = recalculate(50, schedules)
        assert [(i.fields["repeat_days"], i.fields["portion_grams"]) for i in result.inserts] == [
            (["Tue", "Wed"], 50),
            (["Mon"], 25),
        ]


# ======================================================================
# Properties
# ======================================================================


def _mixed_week() -> list[ScheduleSnapshot]:
    return [
        _sched(1, ALL_DAYS),
        _sched(2, ["Mon", "Tue", "Wed", "Thu", "Fri"], skipped=["Wed"]),
        _sched(3, ["Sat", "Sun"], addon=15),
        _sched(4, ["Mon", "Thu"]),
        _sched(5, ALL_DAYS, enabled=False, addon=20),
        _sched(6, ["Sun"], skipped=["Sun"]),
    ]


class TestProperties:
    @pytest.mark.parametrize("allowance", [0, 1, 7, 90, 100, 333, 1000])
    def test_conservation(self, allowance):
        schedules = _apply(_mixed_week(), recalculate(allowance, _mixed_week()))
        for day, (base_sum, meals) in _base_sums(schedules).items():
            assert meals > 0, day
            assert abs(base_sum - allowance) <= meals - 1, day

    def test_day_without_meals_sums_to_zero(self):
        schedules = _apply([_sched(1, ["Mon"])], recalculate(100, [_sched(1, ["Mon"])]))
        sums = _base_sums(schedules)
        assert sums[WeekDay.MON] == (100, 1)
        assert sums[WeekDay.TUE] == (0, 0)

    @pytest.mark.parametrize("allowance", [0, 7, 100, 333])
    def test_idempotence(self, allowance):
        schedules = _apply(_mixed_week(), recalculate(allowance, _mixed_week()))
        second = recalculate(allowance, schedules)
        assert second.inserts == []
        assert prune_noops(second, schedules).is_empty

    def test_day_coverage_preserved_by_split(self):
        before = tally_meals(_mixed_week())
        after = tally_meals(_apply(_mixed_week(), recalculate(100, _mixed_week())))
        assert before == after

    def test_disabled_always_zero(self):
        schedules = _apply(_mixed_week(), recalculate(100, _mixed_week()))
        disabled = [s for s in schedules if not s.is_enabled]
        assert disabled and all(s.portion_grams == 0 for s in disabled)


# ======================================================================
# prune_noops
# ======================================================================


class TestPruneNoops:
    def test_drops_unchanged_updates(self):
        schedules = [_sched(1, ["Mon"], portion=50), _sched(2, ["Mon"], portion=10)]
        pruned = prune_noops(recalculate(100, schedules), schedules)
        assert [u.id for u in pruned.updates] == [2]
        assert pruned.updates[0].fields == {"portion_grams": 50}

    def test_keeps_only_changed_fields(self):
        schedules = [_sched(1, ["Mon"], portion=90, name="Breakfast")]
        edit = PendingEdit(schedule_id=1, changes={"name": "Breakfast", "repeat_days": ["Tue"]})
        pruned = prune_noops(recalculate(90, schedules, edit), schedules)
        assert pruned.updates[0].fields == {"repeat_days": ["Tue"]}

    def test_keeps_inserts(self):
        schedules = [_sched(1, ["Mon", "Tue"], portion=50), _sched(2, ["Mon"], portion=50)]
        result = recalculate(100, schedules)
        pruned = prune_noops(result, schedules)
        assert pruned.inserts == result.inserts
