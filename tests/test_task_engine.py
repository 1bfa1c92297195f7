"""Tests for TaskEngine - pure logic, no fixtures needed.

These tests validate task exp values and the complete/undo transition
planning without any coordinator setup.
"""

from __future__ import annotations

from datetime import date, timedelta

from cursebreaker import const
from cursebreaker.engines.history_engine import HistoryEngine
from cursebreaker.engines.task_engine import (
    REASON_ALREADY_COMPLETED,
    REASON_NOT_DUE,
    TASK_ACTION_COMPLETE,
    TASK_ACTION_UNDO,
    TaskEngine,
)

TODAY = date(2025, 6, 1)


def _task(**overrides) -> dict:
    task = {
        const.DATA_TASK_ID: "task-1",
        const.DATA_TASK_NAME: "Practice scales",
        const.DATA_TASK_DIFFICULTY: const.DIFFICULTY_MODERATE,
        const.DATA_TASK_ATTRIBUTE: const.ATTRIBUTE_CREATIVITY,
        const.DATA_TASK_TYPE: const.TASK_TYPE_DAILY,
        const.DATA_TASK_IS_COMPLETED: False,
        const.DATA_TASK_DATE_ADDED: TODAY.isoformat(),
        const.DATA_TASK_DATE_COMPLETED: None,
        const.DATA_TASK_BASE_EXP: 15,
    }
    task.update(overrides)
    return task


# =============================================================================
# TEST: EXPERIENCE VALUES
# =============================================================================


class TestBaseExp:
    """Test calculate_base_exp."""

    def test_moderate_at_first_rank(self) -> None:
        """floor(10 * 1.5 * 1.0) = 15."""
        assert (
            TaskEngine.calculate_base_exp(
                const.DIFFICULTY_MODERATE, const.RANK_NAMES_LIST[0]
            )
            == 15
        )

    def test_hard_at_third_rank(self) -> None:
        """floor(10 * 2.5 * 1.2) = 30."""
        assert (
            TaskEngine.calculate_base_exp(const.DIFFICULTY_HARD, const.RANK_NAMES_LIST[2])
            == 30
        )

    def test_easy_scales_with_rank(self) -> None:
        low = TaskEngine.calculate_base_exp(
            const.DIFFICULTY_EASY, const.RANK_NAMES_LIST[0]
        )
        high = TaskEngine.calculate_base_exp(
            const.DIFFICULTY_EASY, const.RANK_NAMES_LIST[5]
        )
        assert low == 10
        assert high == 15

    def test_stat_exp_is_half(self) -> None:
        assert TaskEngine.calculate_stat_exp(15, const.ATTRIBUTE_STRENGTH, True) == (
            7,
            const.ATTRIBUTE_STRENGTH,
        )

    def test_stat_exp_skipped_for_none_attribute(self) -> None:
        assert TaskEngine.calculate_stat_exp(15, const.ATTRIBUTE_NONE, True) == (
            None,
            None,
        )

    def test_stat_exp_skipped_when_auto_assign_off(self) -> None:
        assert TaskEngine.calculate_stat_exp(15, const.ATTRIBUTE_STRENGTH, False) == (
            None,
            None,
        )

    def test_focus_exp_is_one_per_five_minutes(self) -> None:
        assert TaskEngine.calculate_focus_exp(25) == 5
        assert TaskEngine.calculate_focus_exp(29) == 5
        assert TaskEngine.calculate_focus_exp(4) == 0


# =============================================================================
# TEST: ELIGIBILITY
# =============================================================================


class TestCompletionBlockReason:
    """Test completion_block_reason."""

    def test_pending_daily_is_completable(self) -> None:
        assert TaskEngine.completion_block_reason(_task(), TODAY) is None

    def test_completed_daily(self) -> None:
        task = _task(**{const.DATA_TASK_IS_COMPLETED: True})
        assert TaskEngine.completion_block_reason(task, TODAY) == REASON_ALREADY_COMPLETED

    def test_daily_from_another_day(self) -> None:
        task = _task(**{const.DATA_TASK_DATE_ADDED: "2025-05-31"})
        assert TaskEngine.completion_block_reason(task, TODAY) == REASON_NOT_DUE


# =============================================================================
# TEST: TRANSITION PLANNING
# =============================================================================


class TestPlanCompletion:
    """Test plan_completion."""

    def test_daily_completion(self) -> None:
        effect = TaskEngine.plan_completion(_task(), TODAY)

        assert effect.action == TASK_ACTION_COMPLETE
        assert effect.exp_delta == 15
        assert effect.stat_exp_delta == 7
        assert effect.stat_attribute == const.ATTRIBUTE_CREATIVITY
        assert effect.task_updates == {
            const.DATA_TASK_IS_COMPLETED: True,
            const.DATA_TASK_DATE_COMPLETED: TODAY.isoformat(),
        }

    def test_ritual_completion_advances_one_step(self) -> None:
        task = _task(
            **{
                const.DATA_TASK_TYPE: const.TASK_TYPE_RITUAL,
                const.DATA_TASK_REPEAT_INTERVAL: 2,
                const.DATA_TASK_NEXT_DUE_DATE: TODAY.isoformat(),
                const.DATA_TASK_LAST_COMPLETED_DATE: None,
            }
        )
        effect = TaskEngine.plan_completion(task, TODAY)
        updated = TaskEngine.apply_effect(task, effect)

        assert updated[const.DATA_TASK_LAST_COMPLETED_DATE] == TODAY.isoformat()
        assert updated[const.DATA_TASK_NEXT_DUE_DATE] == (
            TODAY + timedelta(days=2)
        ).isoformat()
        assert updated[const.DATA_TASK_DATE_COMPLETED] is None

    def test_apply_effect_does_not_modify_input(self) -> None:
        task = _task()
        TaskEngine.apply_effect(task, TaskEngine.plan_completion(task, TODAY))
        assert task[const.DATA_TASK_IS_COMPLETED] is False


class TestPlanUndo:
    """Test plan_undo."""

    def test_undo_negates_recorded_values(self) -> None:
        task = _task()
        completed = TaskEngine.apply_effect(
            task, TaskEngine.plan_completion(task, TODAY)
        )
        entry = HistoryEngine.create_entry(
            completed, TODAY, 15, 7, const.ATTRIBUTE_CREATIVITY
        )

        effect = TaskEngine.plan_undo(completed, entry, TODAY)

        assert effect.action == TASK_ACTION_UNDO
        assert effect.exp_delta == -15
        assert effect.stat_exp_delta == -7
        assert effect.stat_attribute == const.ATTRIBUTE_CREATIVITY
        assert TaskEngine.apply_effect(completed, effect) == task

    def test_undo_ritual_rolls_due_date_back_to_today(self) -> None:
        task = _task(
            **{
                const.DATA_TASK_TYPE: const.TASK_TYPE_RITUAL,
                const.DATA_TASK_IS_COMPLETED: True,
                const.DATA_TASK_REPEAT_INTERVAL: 3,
                const.DATA_TASK_NEXT_DUE_DATE: (TODAY + timedelta(days=3)).isoformat(),
                const.DATA_TASK_LAST_COMPLETED_DATE: TODAY.isoformat(),
            }
        )
        entry = HistoryEngine.create_entry(task, TODAY, 15)

        undone = TaskEngine.apply_effect(task, TaskEngine.plan_undo(task, entry, TODAY))

        assert undone[const.DATA_TASK_NEXT_DUE_DATE] == TODAY.isoformat()
        assert undone[const.DATA_TASK_LAST_COMPLETED_DATE] is None
        assert undone[const.DATA_TASK_IS_COMPLETED] is False

    def test_undo_without_stat_exp(self) -> None:
        entry = HistoryEngine.create_entry(_task(), TODAY, 15)
        effect = TaskEngine.plan_undo(_task(), entry, TODAY)
        assert effect.stat_exp_delta is None
        assert effect.stat_attribute is None
