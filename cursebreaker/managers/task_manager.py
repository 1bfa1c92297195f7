"""Task Manager - Task lifecycle and the complete/undo workflows.

This manager handles:
- Task CRUD through data_builders (validation before the engine)
- complete / undo transactions (TaskEngine plans, this manager applies)
- History entries for undo and the rival simulation
- The once-per-day ritual rollover, guarded by the meta marker

ARCHITECTURE:
- TaskManager = STATEFUL workflow orchestration over the working snapshot
- TaskEngine / ScheduleEngine / HistoryEngine = pure logic (STATELESS)
- Ledger writes are delegated to GamificationManager
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.history_engine import HistoryEngine
from ..engines.schedule_engine import RolloverResult, ScheduleEngine
from ..engines.task_engine import TaskEngine
from ..exceptions import NotCompletableError, NotUndoableError, TaskNotFoundError
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import date, datetime

    from ..coordinator import CodexCoordinator
    from ..type_defs import TaskData
    from .gamification_manager import GamificationManager


__all__ = ["TaskManager"]


class TaskManager(BaseManager):
    """Manager for task state transitions and workflow orchestration.

    Responsibilities:
    - Add, update and delete tasks
    - Execute complete/undo workflows
    - Roll rituals over to their next due date once per day

    NOT responsible for:
    - Pure transition logic (delegated to TaskEngine)
    - Experience, stats and streak (delegated to GamificationManager)
    """

    def __init__(
        self, coordinator: CodexCoordinator, gamification: GamificationManager
    ) -> None:
        super().__init__(coordinator)
        self._gamification = gamification

    @property
    def tasks(self) -> list[dict[str, Any]]:
        return self.data[const.DATA_TASKS]

    def _index_of(self, task_id: str) -> int:
        for index, task in enumerate(self.tasks):
            if task.get(const.DATA_TASK_ID) == task_id:
                return index
        raise TaskNotFoundError(task_id)

    def get_task(self, task_id: str) -> dict[str, Any]:
        """Return the task with the given id.

        Raises:
            TaskNotFoundError: If no such task exists
        """
        return self.tasks[self._index_of(task_id)]

    def _replace_task(self, task: dict[str, Any]) -> None:
        tasks = list(self.tasks)
        tasks[self._index_of(task[const.DATA_TASK_ID])] = task
        self.data[const.DATA_TASKS] = tasks

    def _history(self) -> list[dict[str, Any]]:
        return self.data[const.DATA_PROFILE].get(const.DATA_PROFILE_HISTORY) or []

    def _set_history(self, history: list[dict[str, Any]]) -> None:
        profile = dict(self.data[const.DATA_PROFILE])
        profile[const.DATA_PROFILE_HISTORY] = history
        self.data[const.DATA_PROFILE] = profile

    # =========================================================================
    # §1 CRUD
    # =========================================================================

    def add_task(self, user_input: dict[str, Any], today: date) -> TaskData:
        """Build, validate and append a new task.

        Raises:
            TaskValidationError: If the input fails validation
        """
        rank_name = self.data[const.DATA_PROFILE][const.DATA_PROFILE_TRACK][
            const.DATA_TRACK_RANK_NAME
        ]
        task = db.build_task(user_input, rank_name=rank_name, today=today)
        self.data[const.DATA_TASKS] = [*self.tasks, task]

        const.LOGGER.info(
            "INFO: Added %s task '%s' worth %s exp",
            task[const.DATA_TASK_TYPE],
            task[const.DATA_TASK_NAME],
            task[const.DATA_TASK_BASE_EXP],
        )
        self.emit(
            const.EVENT_TASK_ADDED,
            task_id=task[const.DATA_TASK_ID],
            task_type=task[const.DATA_TASK_TYPE],
        )
        self._gamification.refresh_completion_percentage(today)
        return task

    def update_task(
        self, task_id: str, changes: dict[str, Any], today: date
    ) -> TaskData:
        """Apply edits to an existing task through the builder.

        Raises:
            TaskNotFoundError: If no such task exists
            TaskValidationError: If the merged task fails validation
        """
        existing = self.get_task(task_id)
        rank_name = self.data[const.DATA_PROFILE][const.DATA_PROFILE_TRACK][
            const.DATA_TRACK_RANK_NAME
        ]
        task = db.build_task(changes, existing, rank_name=rank_name, today=today)
        self._replace_task(task)
        const.LOGGER.debug("DEBUG: Updated task '%s'", task[const.DATA_TASK_NAME])
        self._gamification.refresh_completion_percentage(today)
        return task

    def delete_task(self, task_id: str, today: date) -> None:
        """Remove a task; its history entries are kept.

        Raises:
            TaskNotFoundError: If no such task exists
        """
        task = self.get_task(task_id)
        self.data[const.DATA_TASKS] = [
            t for t in self.tasks if t.get(const.DATA_TASK_ID) != task_id
        ]
        const.LOGGER.info("INFO: Deleted task '%s'", task[const.DATA_TASK_NAME])
        self.emit(const.EVENT_TASK_DELETED, task_id=task_id)
        self._gamification.refresh_completion_percentage(today)

    # =========================================================================
    # §2 COMPLETE / UNDO WORKFLOWS
    # =========================================================================

    def complete_task(self, task_id: str, now: datetime, today: date) -> int:
        """Complete a task today and grant its experience.

        Returns:
            The experience awarded

        Raises:
            NotCompletableError: If the task is unknown or not completable today
        """
        try:
            task = self.get_task(task_id)
        except TaskNotFoundError as err:
            raise NotCompletableError(task_id, "unknown_task") from err

        reason = TaskEngine.completion_block_reason(task, today)
        if reason is not None:
            raise NotCompletableError(task_id, reason)

        auto_assign = bool(
            self.data[const.DATA_SETTINGS].get(
                const.CONF_AUTO_ASSIGN_STAT_EXP,
                const.DEFAULT_APP_SETTINGS[const.CONF_AUTO_ASSIGN_STAT_EXP],
            )
        )
        effect = TaskEngine.plan_completion(task, today, auto_assign)
        updated = TaskEngine.apply_effect(task, effect)
        self._replace_task(updated)

        entry = HistoryEngine.create_entry(
            updated,
            today,
            effect.exp_delta,
            effect.stat_exp_delta,
            effect.stat_attribute,
            now_utc=now,
        )
        self._set_history(HistoryEngine.upsert_entry(self._history(), entry))

        self._gamification.apply_exp(effect.exp_delta, today, source="task_completed")
        self._gamification.apply_stat_exp(effect.stat_attribute, effect.stat_exp_delta)

        self.emit(
            const.EVENT_TASK_COMPLETED,
            task_id=task_id,
            task_name=updated[const.DATA_TASK_NAME],
            exp_awarded=effect.exp_delta,
            stat_exp_gained=effect.stat_exp_delta,
            attribute=effect.stat_attribute,
        )
        self._gamification.record_day_progress(today)
        self._gamification.refresh_completion_percentage(today)
        return effect.exp_delta

    def undo_complete_task(self, task_id: str, today: date) -> int:
        """Revert today's completion of a task.

        Returns:
            The experience removed (positive number)

        Raises:
            NotUndoableError: If no completion of the task is recorded today
        """
        entry = HistoryEngine.find_entry(self._history(), task_id, today)
        if entry is None:
            raise NotUndoableError(task_id, today.isoformat())
        try:
            task = self.get_task(task_id)
        except TaskNotFoundError as err:
            raise NotUndoableError(task_id, today.isoformat()) from err

        effect = TaskEngine.plan_undo(task, entry, today)
        self._replace_task(TaskEngine.apply_effect(task, effect))
        self._set_history(HistoryEngine.remove_entry(self._history(), task_id, today))

        self._gamification.apply_exp(effect.exp_delta, today, source="task_undone")
        self._gamification.apply_stat_exp(effect.stat_attribute, effect.stat_exp_delta)

        self.emit(
            const.EVENT_TASK_UNDONE,
            task_id=task_id,
            exp_removed=-effect.exp_delta,
        )
        self._gamification.revert_day_progress(today)
        self._gamification.refresh_completion_percentage(today)
        return -effect.exp_delta

    # =========================================================================
    # §3 DAILY ROLLOVER
    # =========================================================================

    def rollover_rituals(self, today: date) -> RolloverResult:
        """Advance ritual due dates once per calendar day."""
        meta = self.data[const.DATA_META]
        result = ScheduleEngine.rollover_rituals(
            self.tasks, today, meta.get(const.DATA_META_LAST_RITUAL_ROLLOVER)
        )
        if not result.processed:
            const.LOGGER.debug("DEBUG: Ritual rollover already done for %s", today)
            return result

        self.data[const.DATA_TASKS] = result.tasks
        updated_meta = dict(meta)
        updated_meta[const.DATA_META_LAST_RITUAL_ROLLOVER] = today.isoformat()
        self.data[const.DATA_META] = updated_meta
        return result

    # =========================================================================
    # §4 VIEWS
    # =========================================================================

    def get_actionable_tasks(
        self, today: date, task_type: str | None = None
    ) -> list[dict[str, Any]]:
        return ScheduleEngine.get_actionable_tasks(self.tasks, today, task_type)

    def get_past_due_tasks(self, today: date) -> list[dict[str, Any]]:
        return [dict(t) for t in self.tasks if ScheduleEngine.is_past_due(t, today)]
