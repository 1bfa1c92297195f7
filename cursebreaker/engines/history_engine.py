"""History Engine - Pure logic for the bounded completion history.

This engine provides stateless, pure Python functions for:
- Creating immutable HistoryEntry snapshots of completed tasks
- Upserting entries keyed by (task id, completion date)
- Locating and removing entries for undo
- Pruning the trailing window
- Aggregating exp per day for the rival simulation

Newest entries are at the END of the list (append order). Every function
returns a new list; the input list is never modified.
"""

from __future__ import annotations

import copy
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_now_utc, dt_to_date

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import HistoryEntry, TaskData


def _as_iso(day: date | datetime | str) -> str:
    """Return a date key as an ISO string (datetimes by their local day)."""
    normalized = dt_to_date(day)
    return normalized.isoformat() if normalized is not None else str(day)


class HistoryEngine:
    """Pure logic engine for the per-user completion history."""

    DEFAULT_MAX_ENTRIES: int = const.MAX_TASK_HISTORY_ENTRIES

    @staticmethod
    def create_entry(
        task: TaskData | dict[str, Any],
        completion_date: date | str,
        exp_awarded: int,
        stat_exp_gained: int | None = None,
        attribute: str | None = None,
        now_utc: datetime | None = None,
    ) -> HistoryEntry:
        """Create an immutable snapshot of a task at completion time.

        Args:
            task: The task as it looks after the completion was applied
            completion_date: Day the completion counts for (undo lookup key)
            exp_awarded: Rank experience granted
            stat_exp_gained: Optional stat experience granted
            attribute: Attribute that received the stat experience
            now_utc: Optional timestamp override for deterministic tests

        Returns:
            HistoryEntry TypedDict
        """
        return {
            const.DATA_HISTORY_TASK_ID: task[const.DATA_TASK_ID],
            const.DATA_HISTORY_COMPLETION_DATE: _as_iso(completion_date),
            const.DATA_HISTORY_EXP_AWARDED: int(exp_awarded),
            const.DATA_HISTORY_STAT_EXP: stat_exp_gained,
            const.DATA_HISTORY_STAT_ATTRIBUTE: attribute,
            const.DATA_HISTORY_RECORDED_AT: (now_utc or dt_now_utc()).isoformat(),
            const.DATA_HISTORY_TASK: copy.deepcopy(dict(task)),
        }

    @staticmethod
    def _matches(entry: HistoryEntry | dict[str, Any], task_id: str, day_iso: str) -> bool:
        return (
            entry.get(const.DATA_HISTORY_TASK_ID) == task_id
            and entry.get(const.DATA_HISTORY_COMPLETION_DATE) == day_iso
        )

    @staticmethod
    def find_entry(
        history: Iterable[HistoryEntry | dict[str, Any]],
        task_id: str,
        completion_date: date | str,
    ) -> HistoryEntry | dict[str, Any] | None:
        """Return the entry for a task completed on a day, or None."""
        day_iso = _as_iso(completion_date)
        for entry in history:
            if HistoryEngine._matches(entry, task_id, day_iso):
                return entry
        return None

    @staticmethod
    def upsert_entry(
        history: Iterable[HistoryEntry | dict[str, Any]],
        entry: HistoryEntry,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> list[dict[str, Any]]:
        """Append an entry, replacing one for the same task and day.

        Replacing in place keeps a repeated completion from being counted
        twice. The result is pruned to `max_entries`.
        """
        task_id = entry[const.DATA_HISTORY_TASK_ID]
        day_iso = entry[const.DATA_HISTORY_COMPLETION_DATE]
        new_history: list[dict[str, Any]] = []
        replaced = False
        for existing in history:
            if HistoryEngine._matches(existing, task_id, day_iso):
                new_history.append(dict(entry))
                replaced = True
            else:
                new_history.append(existing)
        if not replaced:
            new_history.append(dict(entry))
        return HistoryEngine.prune(new_history, max_entries)

    @staticmethod
    def remove_entry(
        history: Iterable[HistoryEntry | dict[str, Any]],
        task_id: str,
        completion_date: date | str,
    ) -> list[dict[str, Any]]:
        """Return the history without the entry for a task and day."""
        day_iso = _as_iso(completion_date)
        return [
            entry
            for entry in history
            if not HistoryEngine._matches(entry, task_id, day_iso)
        ]

    @staticmethod
    def prune(
        history: list[dict[str, Any]], max_entries: int = DEFAULT_MAX_ENTRIES
    ) -> list[dict[str, Any]]:
        """Keep only the most recent `max_entries` entries."""
        if len(history) > max_entries:
            return history[len(history) - max_entries :]
        return history

    @staticmethod
    def exp_awarded_on(
        history: Iterable[HistoryEntry | dict[str, Any]], day: date | str
    ) -> int:
        """Sum exp awarded by completions recorded for a day."""
        day_iso = _as_iso(day)
        return sum(
            int(entry.get(const.DATA_HISTORY_EXP_AWARDED, 0))
            for entry in history
            if entry.get(const.DATA_HISTORY_COMPLETION_DATE) == day_iso
        )

    @staticmethod
    def completed_task_ids_on(
        history: Iterable[HistoryEntry | dict[str, Any]], day: date | str
    ) -> set[str]:
        """Return ids of tasks with a completion recorded for a day."""
        day_iso = _as_iso(day)
        return {
            entry[const.DATA_HISTORY_TASK_ID]
            for entry in history
            if entry.get(const.DATA_HISTORY_COMPLETION_DATE) == day_iso
        }
