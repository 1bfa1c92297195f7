"""Rival Engine - Pure logic for the rival's daily progression simulation.

Once per rival day boundary, the rival gains experience computed from the
user's already-recorded activity on the previous day:

    raw = user_exp_yesterday * RIVAL_USER_DAILY_EXP_PERCENTAGE + uncompleted_exp
    gain = floor(raw * difficulty_multiplier [* catch_up_boost])

where `uncompleted_exp` is the value of every task that was actionable that
day without a recorded completion. The simulation only ever looks backward
at recorded history; it never races task completions.

The boundary (`next_exp_gain_time`) is the persisted marker: each tick
applies at most one day and then moves the boundary forward.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    as_local,
    as_utc,
    dt_add_hours,
    dt_parse_datetime,
    start_of_local_day,
)
from ..utils.math_utils import floor_exp
from .history_engine import HistoryEngine
from .rank_engine import RankEngine
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import RivalData


@dataclass
class RivalTickResult:
    """Outcome of one rival simulation check.

    Attributes:
        rival: Rival data after the check (a new dict when applied)
        applied: True when a day was processed
        day: The user day the gain was computed from
        exp_gained: Experience granted to the rival
        levels_changed: Rival levels crossed by the gain
    """

    rival: dict[str, Any] = field(default_factory=dict)
    applied: bool = False
    day: date | None = None
    exp_gained: int = 0
    levels_changed: int = 0


class RivalEngine:
    """Stateless rival simulation."""

    @staticmethod
    def new_rival(name: str = const.DEFAULT_RIVAL_NAME) -> RivalData:
        """Return a rival at the first position with no gain boundary yet."""
        return {
            const.DATA_RIVAL_NAME: name,
            const.DATA_RIVAL_TRACK: RankEngine.new_track(),
            const.DATA_RIVAL_NEXT_GAIN_TIME: None,
            const.DATA_RIVAL_EXP_HISTORY: [],
            const.DATA_RIVAL_LAST_TAUNT: None,
        }

    # =========================================================================
    # Boundaries
    # =========================================================================

    @staticmethod
    def initial_gain_time(now: datetime) -> datetime:
        """Return the next local midnight after `now` (UTC-aware)."""
        return as_utc(start_of_local_day(dt_add_hours(now, 24)))

    @staticmethod
    def following_gain_time(boundary: datetime) -> datetime:
        """Return the boundary after `boundary`: start of day of boundary + 25h."""
        return as_utc(
            start_of_local_day(dt_add_hours(boundary, const.RIVAL_GAIN_INTERVAL_HOURS))
        )

    @staticmethod
    def gain_boundary(rival: RivalData | dict[str, Any]) -> datetime | None:
        """Return the stored gain boundary as a UTC datetime."""
        return dt_parse_datetime(rival.get(const.DATA_RIVAL_NEXT_GAIN_TIME))

    @staticmethod
    def gain_day(boundary: datetime) -> date:
        """Return the user day a boundary settles: the local day before it."""
        return as_local(boundary).date() - timedelta(days=1)

    # =========================================================================
    # Gain Calculation
    # =========================================================================

    @staticmethod
    def calculate_uncompleted_exp(
        tasks: Iterable[dict[str, Any]],
        history: Iterable[dict[str, Any]],
        day: date,
    ) -> int:
        """Sum the value of tasks actionable on `day` with no recorded completion."""
        completed_ids = HistoryEngine.completed_task_ids_on(history, day)
        return sum(
            int(task.get(const.DATA_TASK_BASE_EXP, 0))
            for task in tasks
            if ScheduleEngine.was_due_on(task, day)
            and task.get(const.DATA_TASK_ID) not in completed_ids
        )

    @staticmethod
    def calculate_gain(
        user_exp_yesterday: int,
        uncompleted_exp: int,
        difficulty: str,
        user_total_exp: int,
        rival_total_exp: int,
    ) -> int:
        """Return the rival's gain for one day, floored at 0."""
        raw_gain = (
            user_exp_yesterday * const.RIVAL_USER_DAILY_EXP_PERCENTAGE + uncompleted_exp
        )
        raw_gain *= const.RIVAL_DIFFICULTY_MULTIPLIERS.get(
            difficulty,
            const.RIVAL_DIFFICULTY_MULTIPLIERS[const.RIVAL_DIFFICULTY_NORMAL],
        )
        if user_total_exp - rival_total_exp > const.RIVAL_CATCH_UP_EXP_DIFFERENCE:
            raw_gain *= const.RIVAL_CATCH_UP_BOOST_MULTIPLIER
        return max(0, floor_exp(raw_gain))

    # =========================================================================
    # Simulation Tick
    # =========================================================================

    @staticmethod
    def simulate_tick(
        rival: RivalData | dict[str, Any],
        tasks: Iterable[dict[str, Any]],
        history: Iterable[dict[str, Any]],
        user_total_exp: int,
        difficulty: str,
        now: datetime,
    ) -> RivalTickResult:
        """Apply at most one rival day if its boundary has passed.

        A rival without a boundary gets one (next local midnight) and no
        gain. A day already present in the rival's exp history is never
        applied twice; its boundary is only moved forward.
        """
        current = dict(rival)
        boundary = RivalEngine.gain_boundary(current)
        if boundary is None:
            current[const.DATA_RIVAL_NEXT_GAIN_TIME] = RivalEngine.initial_gain_time(
                now
            ).isoformat()
            return RivalTickResult(rival=current)

        if as_utc(now) < boundary:
            return RivalTickResult(rival=current)

        day = RivalEngine.gain_day(boundary)
        day_iso = day.isoformat()
        exp_history = list(current.get(const.DATA_RIVAL_EXP_HISTORY) or [])
        next_boundary = RivalEngine.following_gain_time(boundary).isoformat()

        if any(e.get(const.DATA_RIVAL_HISTORY_DATE) == day_iso for e in exp_history):
            const.LOGGER.debug("RivalEngine: Day %s already settled, skipping", day)
            current[const.DATA_RIVAL_NEXT_GAIN_TIME] = next_boundary
            return RivalTickResult(rival=current)

        history_list = list(history)
        track = current.get(const.DATA_RIVAL_TRACK) or RankEngine.new_track()
        gain = RivalEngine.calculate_gain(
            HistoryEngine.exp_awarded_on(history_list, day),
            RivalEngine.calculate_uncompleted_exp(tasks, history_list, day),
            difficulty,
            user_total_exp,
            int(track.get(const.DATA_TRACK_TOTAL_EXP, 0)),
        )
        ledger = RankEngine.apply_delta(track, gain)

        exp_history.append(
            {
                const.DATA_RIVAL_HISTORY_DATE: day_iso,
                const.DATA_RIVAL_HISTORY_EXP_GAINED: gain,
                const.DATA_RIVAL_HISTORY_TOTAL_EXP: ledger.track[
                    const.DATA_TRACK_TOTAL_EXP
                ],
            }
        )
        current[const.DATA_RIVAL_TRACK] = ledger.track
        current[const.DATA_RIVAL_EXP_HISTORY] = exp_history[
            -const.MAX_RIVAL_HISTORY_ENTRIES :
        ]
        current[const.DATA_RIVAL_NEXT_GAIN_TIME] = next_boundary

        const.LOGGER.debug(
            "RivalEngine: Settled %s, rival gained %s exp (next boundary %s)",
            day,
            gain,
            next_boundary,
        )
        return RivalTickResult(
            rival=current,
            applied=True,
            day=day,
            exp_gained=gain,
            levels_changed=ledger.levels_changed,
        )
