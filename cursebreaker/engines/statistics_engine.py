"""Statistics Engine - Daily streak state machine and completion rates.

Streak state is a counter plus the last day on which every actionable task
was completed. The counter is zero exactly when that marker is empty.

Design Principles:
    - Stateless: operates on passed data structures
    - Non-mutating: every update returns a new container dict
    - Explicit reference dates: "today" is always passed or derived locally
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_to_date, dt_today_local
from ..utils.math_utils import calculate_percentage
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class StatisticsEngine:
    """Engine for the daily completion streak and completion percentage.

    Example:
        stats = StatisticsEngine()
        if stats.is_day_fully_completed(tasks, today):
            profile = stats.update_streak(profile, reference_date=today)
    """

    @staticmethod
    def _resolve_today(reference_date: date | datetime | None) -> date:
        if reference_date is None:
            return dt_today_local()
        if isinstance(reference_date, datetime):
            return reference_date.date()
        return reference_date

    # ────────────────────────────────────────────────────────────────
    # Daily Completion
    # ────────────────────────────────────────────────────────────────

    def is_day_fully_completed(
        self, tasks: Iterable[Mapping[str, Any]], day: date
    ) -> bool:
        """Return True when the day has actionable tasks and all are done."""
        actionable = [t for t in tasks if ScheduleEngine.is_actionable_today(t, day)]
        return bool(actionable) and all(
            ScheduleEngine.is_completed_on(task, day) for task in actionable
        )

    def completion_percentage(
        self, tasks: Iterable[Mapping[str, Any]], day: date
    ) -> float:
        """Percentage (one decimal) of the day's actionable tasks completed."""
        actionable = [t for t in tasks if ScheduleEngine.is_actionable_today(t, day)]
        done = sum(1 for task in actionable if ScheduleEngine.is_completed_on(task, day))
        return calculate_percentage(done, len(actionable))

    # ────────────────────────────────────────────────────────────────
    # Streak Management
    # ────────────────────────────────────────────────────────────────

    def update_streak(
        self,
        container: Mapping[str, Any],
        streak_key: str = const.DATA_PROFILE_STREAK,
        last_date_key: str = const.DATA_PROFILE_LAST_FULL_DAY,
        reference_date: date | datetime | None = None,
    ) -> dict[str, Any]:
        """Record today as a fully completed day.

        Streak logic:
        - Same day as the last full day: No change (already counted)
        - Day after the last full day: Increment streak
        - Any other case: Reset streak to 1

        Returns:
            A copy of `container` with the updated streak and marker.
        """
        today = self._resolve_today(reference_date)
        yesterday = today - timedelta(days=1)
        last_day = dt_to_date(container.get(last_date_key))
        current_streak = int(container.get(streak_key, 0))

        if last_day == today:
            new_streak = current_streak
        elif last_day == yesterday:
            new_streak = current_streak + 1
        else:
            new_streak = 1

        updated = dict(container)
        updated[streak_key] = new_streak
        updated[last_date_key] = today.isoformat()
        return updated

    def revert_streak(
        self,
        container: Mapping[str, Any],
        streak_key: str = const.DATA_PROFILE_STREAK,
        last_date_key: str = const.DATA_PROFILE_LAST_FULL_DAY,
        reference_date: date | datetime | None = None,
    ) -> dict[str, Any]:
        """Undo today's streak credit after a completion is undone.

        Only applies when today was recorded as fully completed. The marker
        moves back to yesterday while the streak stays positive and is
        cleared when it reaches zero.
        """
        today = self._resolve_today(reference_date)
        if dt_to_date(container.get(last_date_key)) != today:
            return dict(container)

        new_streak = max(0, int(container.get(streak_key, 0)) - 1)
        updated = dict(container)
        updated[streak_key] = new_streak
        updated[last_date_key] = (
            (today - timedelta(days=1)).isoformat() if new_streak > 0 else None
        )
        return updated

    def expire_streak(
        self,
        container: Mapping[str, Any],
        streak_key: str = const.DATA_PROFILE_STREAK,
        last_date_key: str = const.DATA_PROFILE_LAST_FULL_DAY,
        reference_date: date | datetime | None = None,
    ) -> dict[str, Any]:
        """Reset a streak broken by a missed day.

        - Marker before yesterday: a full day was missed, reset to 0
        - No marker but a non-zero streak: inconsistent, reset to 0
        - A marker with a zero streak: inconsistent, clear the marker
        """
        today = self._resolve_today(reference_date)
        last_day = dt_to_date(container.get(last_date_key))
        current_streak = int(container.get(streak_key, 0))
        updated = dict(container)

        if last_day is not None and last_day < today - timedelta(days=1):
            const.LOGGER.debug(
                "StatisticsEngine: Streak of %s broken (last full day %s)",
                current_streak,
                last_day,
            )
            updated[streak_key] = 0
            updated[last_date_key] = None
        elif last_day is None and current_streak != 0:
            const.LOGGER.debug(
                "StatisticsEngine: Streak %s without a full day, resetting",
                current_streak,
            )
            updated[streak_key] = 0
        elif last_day is not None and current_streak <= 0:
            updated[streak_key] = 0
            updated[last_date_key] = None
        return updated

    def get_streak(
        self,
        container: Mapping[str, Any],
        streak_key: str = const.DATA_PROFILE_STREAK,
    ) -> int:
        """Get current streak value without modifying container."""
        return int(container.get(streak_key, 0))
