"""Gamification Manager - Experience, stats, streak and daily completion.

This manager owns every write to the profile's ledgers:
- Rank experience (grant_exp / apply_exp) via RankEngine
- Focus session rewards (complete_focus_session)
- Stat experience via StatEngine
- The daily streak via StatisticsEngine
- The daily completion percentage and exp gained today

ARCHITECTURE:
- GamificationManager = STATEFUL orchestration over the working snapshot
- RankEngine / StatEngine / StatisticsEngine = pure logic (STATELESS)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.rank_engine import LedgerResult, RankEngine
from ..engines.stat_engine import StatEngine
from ..engines.statistics_engine import StatisticsEngine
from ..engines.task_engine import TaskEngine
from ..exceptions import TaskValidationError
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import date

    from ..coordinator import CodexCoordinator


class GamificationManager(BaseManager):
    """Manager for the user's experience, stats and streak.

    Responsibilities:
    - Apply signed rank/stat deltas and emit level-up events
    - Track exp gained today
    - Recompute streak and completion percentage after each transaction

    NOT responsible for:
    - Deciding how much a task is worth (TaskEngine)
    - Task state (TaskManager)
    """

    def __init__(self, coordinator: CodexCoordinator) -> None:
        super().__init__(coordinator)
        self.stats_engine = StatisticsEngine()

    @property
    def profile(self) -> dict[str, Any]:
        return self.data[const.DATA_PROFILE]

    def _set_profile(self, profile: dict[str, Any]) -> None:
        self.data[const.DATA_PROFILE] = profile

    # =========================================================================
    # Experience
    # =========================================================================

    def _reset_daily_exp_if_needed(
        self, profile: dict[str, Any], today: date
    ) -> dict[str, Any]:
        if profile.get(const.DATA_PROFILE_LAST_EXP_RESET) == today.isoformat():
            return profile
        updated = dict(profile)
        updated[const.DATA_PROFILE_EXP_GAINED_TODAY] = 0
        updated[const.DATA_PROFILE_LAST_EXP_RESET] = today.isoformat()
        return updated

    def apply_exp(self, delta: int, today: date, source: str) -> LedgerResult:
        """Apply a signed rank experience delta to the profile.

        Emits EVENT_LEVEL_UP when a positive delta crossed at least one level.
        """
        profile = self._reset_daily_exp_if_needed(self.profile, today)
        old_track = profile[const.DATA_PROFILE_TRACK]
        result = RankEngine.apply_delta(old_track, delta)

        updated = dict(profile)
        updated[const.DATA_PROFILE_TRACK] = result.track
        updated[const.DATA_PROFILE_EXP_GAINED_TODAY] = max(
            0, int(profile.get(const.DATA_PROFILE_EXP_GAINED_TODAY, 0)) + delta
        )
        self._set_profile(updated)

        const.LOGGER.debug(
            "DEBUG: Exp %+d from %s - total %s, %s",
            delta,
            source,
            result.track[const.DATA_TRACK_TOTAL_EXP],
            RankEngine.format_rank_label(result.track),
        )
        if delta > 0 and result.leveled_up:
            self.emit(
                const.EVENT_LEVEL_UP,
                rank_name=result.track[const.DATA_TRACK_RANK_NAME],
                sub_rank=result.track[const.DATA_TRACK_SUB_RANK],
                levels_gained=result.levels_changed,
                source=source,
            )
        return result

    def complete_focus_session(self, focus_minutes: int, today: date) -> int:
        """Award experience for a finished focus session.

        Raises:
            TaskValidationError: If the duration is not a positive whole
                number of minutes
        """
        if (
            isinstance(focus_minutes, bool)
            or not isinstance(focus_minutes, int)
            or focus_minutes < 1
        ):
            raise TaskValidationError(
                field="focus_minutes",
                translation_key=const.TRANS_KEY_INVALID_FOCUS_DURATION,
            )
        exp = TaskEngine.calculate_focus_exp(focus_minutes)
        if exp > 0:
            self.apply_exp(exp, today, source="focus_session")
        self.emit(
            const.EVENT_FOCUS_SESSION_COMPLETED,
            focus_minutes=focus_minutes,
            exp_awarded=exp,
        )
        return exp

    def apply_stat_exp(self, attribute: str | None, delta: int | None) -> None:
        """Apply a signed stat delta; no-op for the "None" attribute."""
        if not delta or not StatEngine.is_tracked(attribute):
            return
        stats = dict(self.profile.get(const.DATA_PROFILE_STATS) or {})
        result = StatEngine.apply_delta(
            stats.get(attribute) or StatEngine.new_stat(), delta
        )
        stats[attribute] = result.track

        updated = dict(self.profile)
        updated[const.DATA_PROFILE_STATS] = stats
        self._set_profile(updated)

        if delta > 0 and result.leveled_up:
            self.emit(
                const.EVENT_STAT_LEVEL_UP,
                attribute=attribute,
                level=result.track[const.DATA_STAT_LEVEL],
            )

    # =========================================================================
    # Streak and completion
    # =========================================================================

    def _emit_streak_change(self, before: dict[str, Any], after: dict[str, Any]) -> None:
        old = self.stats_engine.get_streak(before)
        new = self.stats_engine.get_streak(after)
        if old != new:
            self.emit(const.EVENT_STREAK_CHANGED, old_streak=old, new_streak=new)

    def record_day_progress(self, today: date) -> None:
        """Credit today to the streak if every actionable task is done."""
        tasks = self.data[const.DATA_TASKS]
        if not self.stats_engine.is_day_fully_completed(tasks, today):
            return
        before = self.profile
        after = self.stats_engine.update_streak(before, reference_date=today)
        self._set_profile(after)
        self._emit_streak_change(before, after)

    def revert_day_progress(self, today: date) -> None:
        """Remove today's streak credit after an undo."""
        tasks = self.data[const.DATA_TASKS]
        if self.stats_engine.is_day_fully_completed(tasks, today):
            return
        before = self.profile
        after = self.stats_engine.revert_streak(before, reference_date=today)
        self._set_profile(after)
        self._emit_streak_change(before, after)

    def expire_streak(self, today: date) -> None:
        """Break the streak if a full day was missed and start today's exp tally."""
        before = self._reset_daily_exp_if_needed(self.profile, today)
        after = self.stats_engine.expire_streak(before, reference_date=today)
        self._set_profile(after)
        self._emit_streak_change(before, after)

    def refresh_completion_percentage(self, today: date) -> float:
        """Recompute and store today's completion percentage."""
        percentage = self.stats_engine.completion_percentage(
            self.data[const.DATA_TASKS], today
        )
        if self.profile.get(const.DATA_PROFILE_COMPLETION_PERCENTAGE) != percentage:
            updated = dict(self.profile)
            updated[const.DATA_PROFILE_COMPLETION_PERCENTAGE] = percentage
            self._set_profile(updated)
        return percentage

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_rank_label(self) -> str:
        return RankEngine.format_rank_label(self.profile[const.DATA_PROFILE_TRACK])

    def get_total_exp(self) -> int:
        return int(self.profile[const.DATA_PROFILE_TRACK][const.DATA_TRACK_TOTAL_EXP])

    def get_streak(self) -> int:
        return self.stats_engine.get_streak(self.profile)
