"""Tests for RivalEngine - daily gain simulation."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from cursebreaker import const
from cursebreaker.engines.history_engine import HistoryEngine
from cursebreaker.engines.rival_engine import RivalEngine

BOUNDARY = datetime(2025, 4, 10, 0, 0, tzinfo=UTC)
GAIN_DAY = date(2025, 4, 9)


def _daily(task_id: str, added: date, base_exp: int) -> dict:
    return {
        const.DATA_TASK_ID: task_id,
        const.DATA_TASK_TYPE: const.TASK_TYPE_DAILY,
        const.DATA_TASK_DATE_ADDED: added.isoformat(),
        const.DATA_TASK_IS_COMPLETED: False,
        const.DATA_TASK_BASE_EXP: base_exp,
    }


def _rival(boundary: datetime | None = BOUNDARY, total_exp: int = 0) -> dict:
    rival = RivalEngine.new_rival("Kairos")
    rival[const.DATA_RIVAL_NEXT_GAIN_TIME] = boundary.isoformat() if boundary else None
    rival[const.DATA_RIVAL_TRACK] = dict(
        rival[const.DATA_RIVAL_TRACK], **{const.DATA_TRACK_TOTAL_EXP: total_exp}
    )
    return rival


# =============================================================================
# TEST: GAIN FORMULA
# =============================================================================


class TestCalculateGain:
    """Test calculate_gain."""

    def test_normal_difficulty(self) -> None:
        """100 * 0.3 + 20 = 50."""
        assert (
            RivalEngine.calculate_gain(100, 20, const.RIVAL_DIFFICULTY_NORMAL, 0, 0)
            == 50
        )

    def test_hard_difficulty(self) -> None:
        assert (
            RivalEngine.calculate_gain(100, 20, const.RIVAL_DIFFICULTY_HARD, 0, 0)
            == 65
        )

    def test_catch_up_boost(self) -> None:
        assert (
            RivalEngine.calculate_gain(
                100, 20, const.RIVAL_DIFFICULTY_NORMAL, 5000, 1000
            )
            == 75
        )

    def test_no_boost_at_exact_threshold(self) -> None:
        assert (
            RivalEngine.calculate_gain(
                100, 20, const.RIVAL_DIFFICULTY_NORMAL, 2000, 1000
            )
            == 50
        )

    def test_idle_day_gains_nothing(self) -> None:
        assert RivalEngine.calculate_gain(0, 0, const.RIVAL_DIFFICULTY_HARD, 0, 0) == 0


class TestUncompletedExp:
    """Test calculate_uncompleted_exp."""

    def test_counts_only_missed_tasks_of_the_day(self) -> None:
        done = _daily("done", GAIN_DAY, 15)
        missed = _daily("missed", GAIN_DAY, 25)
        other_day = _daily("other", GAIN_DAY - timedelta(days=1), 40)
        history = [HistoryEngine.create_entry(done, GAIN_DAY, 15)]

        assert (
            RivalEngine.calculate_uncompleted_exp(
                [done, missed, other_day], history, GAIN_DAY
            )
            == 25
        )

    def test_ritual_due_that_day_counts(self) -> None:
        ritual = {
            const.DATA_TASK_ID: "r",
            const.DATA_TASK_TYPE: const.TASK_TYPE_RITUAL,
            const.DATA_TASK_DATE_ADDED: (GAIN_DAY - timedelta(days=2)).isoformat(),
            const.DATA_TASK_REPEAT_INTERVAL: 2,
            # Already rolled over past the gain day
            const.DATA_TASK_NEXT_DUE_DATE: (GAIN_DAY + timedelta(days=2)).isoformat(),
            const.DATA_TASK_LAST_COMPLETED_DATE: None,
            const.DATA_TASK_BASE_EXP: 12,
        }
        assert RivalEngine.calculate_uncompleted_exp([ritual], [], GAIN_DAY) == 12


# =============================================================================
# TEST: BOUNDARIES
# =============================================================================


class TestBoundaries:
    """Test gain boundary helpers."""

    def test_initial_is_next_midnight(self) -> None:
        now = datetime(2025, 4, 9, 15, 45, tzinfo=UTC)
        assert RivalEngine.initial_gain_time(now) == BOUNDARY

    def test_following_is_next_day_start(self) -> None:
        assert RivalEngine.following_gain_time(BOUNDARY) == BOUNDARY + timedelta(
            days=1
        )

    def test_gain_day_is_day_before_boundary(self) -> None:
        assert RivalEngine.gain_day(BOUNDARY) == GAIN_DAY


# =============================================================================
# TEST: SIMULATION TICK
# =============================================================================


class TestSimulateTick:
    """Test simulate_tick."""

    def _history(self) -> list[dict]:
        task = _daily("t", GAIN_DAY, 100)
        return [HistoryEngine.create_entry(task, GAIN_DAY, 100)]

    def test_before_boundary_does_nothing(self) -> None:
        rival = _rival()
        result = RivalEngine.simulate_tick(
            rival, [], self._history(), 0, const.RIVAL_DIFFICULTY_NORMAL,
            BOUNDARY - timedelta(minutes=1),
        )
        assert not result.applied
        assert result.rival == rival

    def test_due_tick_applies_gain(self) -> None:
        result = RivalEngine.simulate_tick(
            _rival(), [], self._history(), 0, const.RIVAL_DIFFICULTY_NORMAL,
            BOUNDARY + timedelta(hours=2),
        )

        assert result.applied
        assert result.day == GAIN_DAY
        assert result.exp_gained == 30
        assert result.rival[const.DATA_RIVAL_TRACK][const.DATA_TRACK_TOTAL_EXP] == 30
        assert result.rival[const.DATA_RIVAL_EXP_HISTORY] == [
            {
                const.DATA_RIVAL_HISTORY_DATE: GAIN_DAY.isoformat(),
                const.DATA_RIVAL_HISTORY_EXP_GAINED: 30,
                const.DATA_RIVAL_HISTORY_TOTAL_EXP: 30,
            }
        ]
        assert result.rival[const.DATA_RIVAL_NEXT_GAIN_TIME] == (
            BOUNDARY + timedelta(days=1)
        ).isoformat()

    def test_second_check_same_window_never_double_applies(self) -> None:
        now = BOUNDARY + timedelta(hours=2)
        first = RivalEngine.simulate_tick(
            _rival(), [], self._history(), 0, const.RIVAL_DIFFICULTY_NORMAL, now
        )
        second = RivalEngine.simulate_tick(
            first.rival, [], self._history(), 0, const.RIVAL_DIFFICULTY_NORMAL, now
        )

        assert first.applied
        assert not second.applied
        assert second.rival == first.rival

    def test_replaying_stale_boundary_skips_settled_day(self) -> None:
        """A boundary restored without advancing never re-applies its day."""
        now = BOUNDARY + timedelta(hours=2)
        first = RivalEngine.simulate_tick(
            _rival(), [], self._history(), 0, const.RIVAL_DIFFICULTY_NORMAL, now
        )
        stale = dict(first.rival)
        stale[const.DATA_RIVAL_NEXT_GAIN_TIME] = BOUNDARY.isoformat()

        replay = RivalEngine.simulate_tick(
            stale, [], self._history(), 0, const.RIVAL_DIFFICULTY_NORMAL, now
        )

        assert not replay.applied
        assert replay.rival[const.DATA_RIVAL_TRACK] == first.rival[const.DATA_RIVAL_TRACK]

    def test_missed_days_apply_one_per_check(self) -> None:
        rival = _rival(BOUNDARY - timedelta(days=3))
        now = BOUNDARY + timedelta(hours=1)
        applied_days = []
        for _ in range(6):
            result = RivalEngine.simulate_tick(
                rival, [], [], 0, const.RIVAL_DIFFICULTY_NORMAL, now
            )
            if result.applied:
                applied_days.append(result.day)
            rival = result.rival

        assert applied_days == [
            GAIN_DAY - timedelta(days=3),
            GAIN_DAY - timedelta(days=2),
            GAIN_DAY - timedelta(days=1),
            GAIN_DAY,
        ]

    def test_missing_boundary_is_initialized(self) -> None:
        now = datetime(2025, 4, 9, 15, 0, tzinfo=UTC)
        result = RivalEngine.simulate_tick(
            _rival(None), [], [], 0, const.RIVAL_DIFFICULTY_NORMAL, now
        )
        assert not result.applied
        assert result.rival[const.DATA_RIVAL_NEXT_GAIN_TIME] == BOUNDARY.isoformat()

    def test_history_is_bounded(self) -> None:
        rival = _rival()
        rival[const.DATA_RIVAL_EXP_HISTORY] = [
            {
                const.DATA_RIVAL_HISTORY_DATE: f"2024-01-{day:02d}",
                const.DATA_RIVAL_HISTORY_EXP_GAINED: 1,
                const.DATA_RIVAL_HISTORY_TOTAL_EXP: day,
            }
            for day in range(1, const.MAX_RIVAL_HISTORY_ENTRIES + 1)
        ]
        result = RivalEngine.simulate_tick(
            rival, [], [], 0, const.RIVAL_DIFFICULTY_NORMAL, BOUNDARY
        )
        history = result.rival[const.DATA_RIVAL_EXP_HISTORY]
        assert len(history) == const.MAX_RIVAL_HISTORY_ENTRIES
        assert history[-1][const.DATA_RIVAL_HISTORY_DATE] == GAIN_DAY.isoformat()
