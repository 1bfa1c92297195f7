"""Schedule Engine for Cursebreaker Codex.

Decides which tasks are actionable on a given day for each task kind,
whether a task can be completed, and when a ritual is next due:
- daily: actionable only on the day it was added
- event: actionable on its scheduled date
- ritual: actionable on its next due date, and for the rest of the day it
  was completed on (so a finished ritual stays visible as done)

Ritual due dates form a daily series stepping by `repeat_interval_days`,
anchored at `series_anchor_date` (the add date, moved to the pending due
date whenever the interval is edited). Recurrence uses dateutil.rrule.

IMPORTANT: This module must NOT import from coordinator.py or the managers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any

from dateutil.rrule import DAILY, rrule

from .. import const
from ..utils.dt_utils import dt_add_days, dt_to_date

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import TaskData


@dataclass
class RolloverResult:
    """Outcome of the once-per-day ritual rollover.

    Attributes:
        tasks: The task list after rollover (new dicts for changed rituals)
        processed: False when the day had already been processed
        advanced: Number of rituals whose due date moved
        reopened: Number of rituals whose completion flag was cleared
    """

    tasks: list[dict[str, Any]] = field(default_factory=list)
    processed: bool = False
    advanced: int = 0
    reopened: int = 0


class ScheduleEngine:
    """Stateless scheduling rules for daily tasks, rituals and events."""

    @staticmethod
    def _date(task: TaskData | dict[str, Any], key: str) -> date | None:
        """Return a task date field as a `datetime.date`."""
        return dt_to_date(task.get(key))

    @staticmethod
    def _interval(task: TaskData | dict[str, Any]) -> int:
        """Return the ritual repeat interval, coerced to at least one day."""
        try:
            interval = int(task.get(const.DATA_TASK_REPEAT_INTERVAL) or 1)
        except (TypeError, ValueError):
            interval = 1
        return max(1, interval)

    @staticmethod
    def _series_anchor(task: TaskData | dict[str, Any]) -> date | None:
        """Return the first day of the ritual's current series."""
        return ScheduleEngine._date(
            task, const.DATA_TASK_SERIES_ANCHOR
        ) or ScheduleEngine._date(task, const.DATA_TASK_DATE_ADDED)

    @staticmethod
    def _ritual_rule(start: date, interval: int) -> rrule:
        """Build the daily recurrence starting at `start`."""
        return rrule(
            DAILY, interval=interval, dtstart=datetime.combine(start, time.min)
        )

    @staticmethod
    def _first_on_or_after(start: date, interval: int, day: date) -> date:
        """Return the first occurrence of the series on or after `day`."""
        occurrence = ScheduleEngine._ritual_rule(start, interval).after(
            datetime.combine(day, time.min), inc=True
        )
        return occurrence.date()

    # =========================================================================
    # Actionability
    # =========================================================================

    @staticmethod
    def is_actionable_today(task: TaskData | dict[str, Any], today: date) -> bool:
        """Return True when the task belongs on today's list."""
        task_type = task.get(const.DATA_TASK_TYPE)
        if task_type == const.TASK_TYPE_DAILY:
            return ScheduleEngine._date(task, const.DATA_TASK_DATE_ADDED) == today
        if task_type == const.TASK_TYPE_EVENT:
            return ScheduleEngine._date(task, const.DATA_TASK_SCHEDULED_DATE) == today
        if task_type == const.TASK_TYPE_RITUAL:
            return (
                ScheduleEngine._date(task, const.DATA_TASK_NEXT_DUE_DATE) == today
                or ScheduleEngine._date(task, const.DATA_TASK_LAST_COMPLETED_DATE)
                == today
            )
        return False

    @staticmethod
    def is_completed_on(task: TaskData | dict[str, Any], day: date) -> bool:
        """Return True when the task counts as done for the given day."""
        if task.get(const.DATA_TASK_TYPE) == const.TASK_TYPE_RITUAL:
            return ScheduleEngine._date(task, const.DATA_TASK_LAST_COMPLETED_DATE) == day
        return bool(task.get(const.DATA_TASK_IS_COMPLETED))

    @staticmethod
    def can_complete(task: TaskData | dict[str, Any], today: date) -> bool:
        """Return True when completing the task today is allowed."""
        if task.get(const.DATA_TASK_TYPE) == const.TASK_TYPE_RITUAL:
            return (
                ScheduleEngine._date(task, const.DATA_TASK_NEXT_DUE_DATE) == today
                and ScheduleEngine._date(task, const.DATA_TASK_LAST_COMPLETED_DATE)
                != today
            )
        return ScheduleEngine.is_actionable_today(task, today) and not task.get(
            const.DATA_TASK_IS_COMPLETED, False
        )

    @staticmethod
    def was_due_on(task: TaskData | dict[str, Any], day: date) -> bool:
        """Return True when the task was actionable on a (possibly past) day.

        Unlike is_actionable_today, this does not depend on a ritual's
        current due date, so it stays correct after the ritual has rolled
        over past that day.
        """
        if task.get(const.DATA_TASK_TYPE) != const.TASK_TYPE_RITUAL:
            return ScheduleEngine.is_actionable_today(task, day)
        if ScheduleEngine._date(task, const.DATA_TASK_LAST_COMPLETED_DATE) == day:
            return True
        anchor = ScheduleEngine._series_anchor(task)
        if anchor is None or day < anchor:
            return False
        return (
            ScheduleEngine._first_on_or_after(
                anchor, ScheduleEngine._interval(task), day
            )
            == day
        )

    @staticmethod
    def is_past_due(task: TaskData | dict[str, Any], today: date) -> bool:
        """Return True for an event or ritual left undone after its date."""
        task_type = task.get(const.DATA_TASK_TYPE)
        if task_type == const.TASK_TYPE_EVENT:
            scheduled = ScheduleEngine._date(task, const.DATA_TASK_SCHEDULED_DATE)
            return (
                scheduled is not None
                and scheduled < today
                and not task.get(const.DATA_TASK_IS_COMPLETED, False)
            )
        if task_type == const.TASK_TYPE_RITUAL:
            due = ScheduleEngine._date(task, const.DATA_TASK_NEXT_DUE_DATE)
            last_done = ScheduleEngine._date(task, const.DATA_TASK_LAST_COMPLETED_DATE)
            return (
                due is not None
                and due < today
                and last_done not in (due, today)
                and not task.get(const.DATA_TASK_IS_COMPLETED, False)
            )
        return False

    @staticmethod
    def get_actionable_tasks(
        tasks: Iterable[TaskData | dict[str, Any]],
        today: date,
        task_type: str | None = None,
    ) -> list[dict[str, Any]]:
        """Return the tasks actionable today, optionally of one kind only."""
        return [
            dict(task)
            for task in tasks
            if (task_type is None or task.get(const.DATA_TASK_TYPE) == task_type)
            and ScheduleEngine.is_actionable_today(task, today)
        ]

    # =========================================================================
    # Ritual due dates
    # =========================================================================

    @staticmethod
    def advance_ritual_due_date(task: TaskData | dict[str, Any], today: date) -> date:
        """Catch a ritual's due date up to the first one on or after today.

        Walks the series from the current due date (or the series anchor if
        none is set) to its first occurrence on or after today. A due date
        already on or after today is returned unchanged, so calling this
        repeatedly with the same `today` is idempotent.
        """
        start = ScheduleEngine._date(
            task, const.DATA_TASK_NEXT_DUE_DATE
        ) or ScheduleEngine._series_anchor(task)
        if start is None:
            return today
        if start >= today:
            return start
        return ScheduleEngine._first_on_or_after(
            start, ScheduleEngine._interval(task), today
        )

    @staticmethod
    def next_ritual_due_date(task: TaskData | dict[str, Any], completed_on: date) -> date:
        """Return the due date following a completion (a single step)."""
        current_due = (
            ScheduleEngine._date(task, const.DATA_TASK_NEXT_DUE_DATE) or completed_on
        )
        return dt_add_days(current_due, ScheduleEngine._interval(task))

    @staticmethod
    def rollover_rituals(
        tasks: Iterable[TaskData | dict[str, Any]],
        today: date,
        last_processed: date | str | None = None,
    ) -> RolloverResult:
        """Advance every ritual's due date and reopen rituals due today.

        Runs at most once per calendar day: when `last_processed` is already
        today the tasks are returned untouched with processed=False.
        """
        task_list = [dict(task) for task in tasks]
        if dt_to_date(last_processed) == today:
            return RolloverResult(tasks=task_list, processed=False)

        result = RolloverResult(processed=True)
        for task in task_list:
            if task.get(const.DATA_TASK_TYPE) != const.TASK_TYPE_RITUAL:
                result.tasks.append(task)
                continue

            new_due = ScheduleEngine.advance_ritual_due_date(task, today)
            updated = dict(task)
            if ScheduleEngine._date(task, const.DATA_TASK_NEXT_DUE_DATE) != new_due:
                updated[const.DATA_TASK_NEXT_DUE_DATE] = new_due.isoformat()
                result.advanced += 1

            done_today = (
                ScheduleEngine._date(task, const.DATA_TASK_LAST_COMPLETED_DATE) == today
            )
            if new_due == today and not done_today and updated.get(
                const.DATA_TASK_IS_COMPLETED
            ):
                updated[const.DATA_TASK_IS_COMPLETED] = False
                result.reopened += 1
            result.tasks.append(updated)

        const.LOGGER.debug(
            "ScheduleEngine: Ritual rollover for %s advanced=%s reopened=%s",
            today,
            result.advanced,
            result.reopened,
        )
        return result
