"""Task Engine - Pure logic for task completion transitions and exp values.

This engine provides stateless, pure Python functions for:
- Task experience values (difficulty x rank scaling, frozen at creation)
- Stat experience derived from a completion
- Completion eligibility checks
- TransitionEffect planning for complete and undo
- Applying a planned effect to a task

ARCHITECTURE: This is a pure logic engine with NO persistence.
All functions are static methods that operate on passed-in data.
State management belongs in TaskManager.

Conceptual task states: PENDING -> COMPLETED -> (undo) -> PENDING.
The state is derived from the task fields, never stored separately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import apply_multiplier, floor_exp
from .rank_engine import RankEngine
from .schedule_engine import ScheduleEngine
from .stat_engine import StatEngine

if TYPE_CHECKING:
    from datetime import date

    from ..type_defs import HistoryEntry, TaskData


# =============================================================================
# TASK ACTION CONSTANTS
# =============================================================================

TASK_ACTION_COMPLETE = "complete"
TASK_ACTION_UNDO = "undo"

# Reasons reported when a completion is declined
REASON_NOT_DUE = "not_due_today"
REASON_ALREADY_COMPLETED = "already_completed"


# =============================================================================
# TRANSITION EFFECT DATA STRUCTURE
# =============================================================================


@dataclass
class TransitionEffect:
    """Effect of a task transition.

    Returned by TaskEngine.plan_completion() / plan_undo() to describe
    what should happen to the task and the ledgers.

    Attributes:
        task_id: The task affected by this transition
        action: One of TASK_ACTION_* values
        exp_delta: Rank experience to apply (negative for undo)
        stat_exp_delta: Stat experience to apply, None when no stat is touched
        stat_attribute: Attribute receiving the stat experience
        task_updates: Field values to write onto the task
    """

    task_id: str
    action: str
    exp_delta: int = 0
    stat_exp_delta: int | None = None
    stat_attribute: str | None = None
    task_updates: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# TASK ENGINE
# =============================================================================


class TaskEngine:
    """Pure logic engine for task transitions and calculations."""

    # =========================================================================
    # EXPERIENCE VALUES
    # =========================================================================

    @staticmethod
    def calculate_base_exp(difficulty: str, rank_name: str) -> int:
        """Experience a task is worth, frozen at creation time.

        floor(BASE_TASK_EXP * difficulty_multiplier * (1 + rank_index * RANK_SCALING))

        Unknown difficulties fall back to the Easy multiplier.
        """
        multiplier = const.TASK_DIFFICULTY_EXP_MULTIPLIER.get(
            difficulty, const.TASK_DIFFICULTY_EXP_MULTIPLIER[const.DIFFICULTY_EASY]
        )
        rank_multiplier = (
            1 + RankEngine.rank_index(rank_name) * const.RANK_EXP_SCALING_FACTOR
        )
        return floor_exp(const.BASE_TASK_EXP * multiplier * rank_multiplier)

    @staticmethod
    def calculate_stat_exp(
        exp_awarded: int, attribute: str | None, auto_assign: bool
    ) -> tuple[int | None, str | None]:
        """Return (stat_exp, attribute) for a completion, or (None, None)."""
        if not auto_assign or not StatEngine.is_tracked(attribute):
            return None, None
        return apply_multiplier(exp_awarded, const.STAT_EXP_SHARE), attribute

    @staticmethod
    def calculate_focus_exp(focus_minutes: int) -> int:
        """Experience for a finished focus session: one per 5 minutes, floored."""
        return max(0, focus_minutes) // const.FOCUS_EXP_MINUTES_PER_POINT

    # =========================================================================
    # ELIGIBILITY
    # =========================================================================

    @staticmethod
    def completion_block_reason(
        task: TaskData | dict[str, Any], today: date
    ) -> str | None:
        """Return why a task cannot be completed today, or None if it can."""
        if ScheduleEngine.can_complete(task, today):
            return None
        if ScheduleEngine.is_actionable_today(task, today):
            return REASON_ALREADY_COMPLETED
        return REASON_NOT_DUE

    # =========================================================================
    # TRANSITION PLANNING
    # =========================================================================

    @staticmethod
    def plan_completion(
        task: TaskData | dict[str, Any],
        today: date,
        auto_assign_stat_exp: bool = True,
    ) -> TransitionEffect:
        """Plan the effect of completing a task today.

        Caller must check completion_block_reason() first.
        """
        exp_awarded = int(task.get(const.DATA_TASK_BASE_EXP, 0))
        stat_exp, attribute = TaskEngine.calculate_stat_exp(
            exp_awarded, task.get(const.DATA_TASK_ATTRIBUTE), auto_assign_stat_exp
        )

        updates: dict[str, Any] = {const.DATA_TASK_IS_COMPLETED: True}
        if task.get(const.DATA_TASK_TYPE) == const.TASK_TYPE_RITUAL:
            updates[const.DATA_TASK_LAST_COMPLETED_DATE] = today.isoformat()
            updates[const.DATA_TASK_NEXT_DUE_DATE] = ScheduleEngine.next_ritual_due_date(
                task, today
            ).isoformat()
        else:
            updates[const.DATA_TASK_DATE_COMPLETED] = today.isoformat()

        return TransitionEffect(
            task_id=task[const.DATA_TASK_ID],
            action=TASK_ACTION_COMPLETE,
            exp_delta=exp_awarded,
            stat_exp_delta=stat_exp,
            stat_attribute=attribute,
            task_updates=updates,
        )

    @staticmethod
    def plan_undo(
        task: TaskData | dict[str, Any],
        entry: HistoryEntry | dict[str, Any],
        today: date,
    ) -> TransitionEffect:
        """Plan the inverse of a recorded completion.

        Exp values come from the history entry, so an undo always removes
        exactly what the completion granted.
        """
        stat_exp = entry.get(const.DATA_HISTORY_STAT_EXP)
        attribute = entry.get(const.DATA_HISTORY_STAT_ATTRIBUTE)

        updates: dict[str, Any] = {const.DATA_TASK_IS_COMPLETED: False}
        if task.get(const.DATA_TASK_TYPE) == const.TASK_TYPE_RITUAL:
            updates[const.DATA_TASK_LAST_COMPLETED_DATE] = None
            updates[const.DATA_TASK_NEXT_DUE_DATE] = today.isoformat()
        else:
            updates[const.DATA_TASK_DATE_COMPLETED] = None

        return TransitionEffect(
            task_id=task[const.DATA_TASK_ID],
            action=TASK_ACTION_UNDO,
            exp_delta=-int(entry.get(const.DATA_HISTORY_EXP_AWARDED, 0)),
            stat_exp_delta=-int(stat_exp) if stat_exp and attribute else None,
            stat_attribute=attribute if stat_exp else None,
            task_updates=updates,
        )

    @staticmethod
    def apply_effect(
        task: TaskData | dict[str, Any], effect: TransitionEffect
    ) -> dict[str, Any]:
        """Return a new task dict with the effect's field updates applied."""
        updated = dict(task)
        updated.update(effect.task_updates)
        return updated
