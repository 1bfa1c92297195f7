"""Tests for ScheduleEngine - actionability, completability, ritual due dates."""

from __future__ import annotations

from datetime import date, timedelta

from cursebreaker import const
from cursebreaker.engines.schedule_engine import ScheduleEngine

TODAY = date(2025, 3, 12)


def _daily(added: date, completed: bool = False) -> dict:
    return {
        const.DATA_TASK_ID: "daily-1",
        const.DATA_TASK_TYPE: const.TASK_TYPE_DAILY,
        const.DATA_TASK_DATE_ADDED: added.isoformat(),
        const.DATA_TASK_IS_COMPLETED: completed,
        const.DATA_TASK_BASE_EXP: 10,
    }


def _event(scheduled: date, completed: bool = False) -> dict:
    return {
        const.DATA_TASK_ID: "event-1",
        const.DATA_TASK_TYPE: const.TASK_TYPE_EVENT,
        const.DATA_TASK_DATE_ADDED: (scheduled - timedelta(days=5)).isoformat(),
        const.DATA_TASK_SCHEDULED_DATE: scheduled.isoformat(),
        const.DATA_TASK_IS_COMPLETED: completed,
        const.DATA_TASK_BASE_EXP: 10,
    }


def _ritual(
    added: date,
    interval: int,
    next_due: date | None,
    last_completed: date | None = None,
    completed: bool = False,
) -> dict:
    return {
        const.DATA_TASK_ID: "ritual-1",
        const.DATA_TASK_TYPE: const.TASK_TYPE_RITUAL,
        const.DATA_TASK_DATE_ADDED: added.isoformat(),
        const.DATA_TASK_REPEAT_INTERVAL: interval,
        const.DATA_TASK_NEXT_DUE_DATE: next_due.isoformat() if next_due else None,
        const.DATA_TASK_LAST_COMPLETED_DATE: (
            last_completed.isoformat() if last_completed else None
        ),
        const.DATA_TASK_IS_COMPLETED: completed,
        const.DATA_TASK_BASE_EXP: 10,
    }


# =============================================================================
# TEST: ACTIONABILITY
# =============================================================================


class TestActionability:
    """Test is_actionable_today per task kind."""

    def test_daily_only_on_day_added(self) -> None:
        assert ScheduleEngine.is_actionable_today(_daily(TODAY), TODAY)
        assert not ScheduleEngine.is_actionable_today(
            _daily(TODAY - timedelta(days=1)), TODAY
        )

    def test_event_on_scheduled_date(self) -> None:
        assert ScheduleEngine.is_actionable_today(_event(TODAY), TODAY)
        assert not ScheduleEngine.is_actionable_today(
            _event(TODAY + timedelta(days=1)), TODAY
        )

    def test_ritual_due_today(self) -> None:
        task = _ritual(TODAY - timedelta(days=3), 3, TODAY)
        assert ScheduleEngine.is_actionable_today(task, TODAY)

    def test_ritual_completed_today_stays_visible(self) -> None:
        task = _ritual(
            TODAY - timedelta(days=3), 3, TODAY + timedelta(days=3), TODAY, True
        )
        assert ScheduleEngine.is_actionable_today(task, TODAY)

    def test_ritual_not_due(self) -> None:
        task = _ritual(TODAY, 3, TODAY + timedelta(days=1))
        assert not ScheduleEngine.is_actionable_today(task, TODAY)

    def test_get_actionable_filters_by_kind(self) -> None:
        tasks = [_daily(TODAY), _event(TODAY), _ritual(TODAY, 1, TODAY)]
        rituals = ScheduleEngine.get_actionable_tasks(
            tasks, TODAY, const.TASK_TYPE_RITUAL
        )
        assert [t[const.DATA_TASK_ID] for t in rituals] == ["ritual-1"]
        assert len(ScheduleEngine.get_actionable_tasks(tasks, TODAY)) == 3


# =============================================================================
# TEST: COMPLETABILITY
# =============================================================================


class TestCanComplete:
    """Test can_complete per task kind."""

    def test_daily_pending(self) -> None:
        assert ScheduleEngine.can_complete(_daily(TODAY), TODAY)

    def test_daily_already_completed(self) -> None:
        assert not ScheduleEngine.can_complete(_daily(TODAY, completed=True), TODAY)

    def test_daily_from_yesterday(self) -> None:
        assert not ScheduleEngine.can_complete(
            _daily(TODAY - timedelta(days=1)), TODAY
        )

    def test_ritual_completed_today_cannot_repeat(self) -> None:
        task = _ritual(TODAY, 1, TODAY + timedelta(days=1), TODAY, True)
        assert not ScheduleEngine.can_complete(task, TODAY)

    def test_ritual_due_today(self) -> None:
        task = _ritual(TODAY - timedelta(days=2), 2, TODAY)
        assert ScheduleEngine.can_complete(task, TODAY)


# =============================================================================
# TEST: RITUAL DUE DATES
# =============================================================================


class TestRitualDueDates:
    """Test advance_ritual_due_date, next_ritual_due_date and was_due_on."""

    def test_catch_up_skips_missed_cycles(self) -> None:
        """Interval 3, due 10 days ago: three cycles land 1 day before today,
        so four steps land on the first due date on or after today."""
        day0 = TODAY - timedelta(days=10)
        task = _ritual(day0 - timedelta(days=3), 3, day0)

        new_due = ScheduleEngine.advance_ritual_due_date(task, TODAY)

        assert new_due == day0 + timedelta(days=12)
        assert new_due >= TODAY
        assert new_due - timedelta(days=3) < TODAY

    def test_catch_up_lands_on_today(self) -> None:
        task = _ritual(TODAY - timedelta(days=9), 3, TODAY - timedelta(days=9))
        assert ScheduleEngine.advance_ritual_due_date(task, TODAY) == TODAY

    def test_idempotent(self) -> None:
        task = _ritual(TODAY - timedelta(days=20), 4, TODAY - timedelta(days=20))
        once = ScheduleEngine.advance_ritual_due_date(task, TODAY)
        task[const.DATA_TASK_NEXT_DUE_DATE] = once.isoformat()
        twice = ScheduleEngine.advance_ritual_due_date(task, TODAY)
        assert once == twice

    def test_future_due_date_unchanged(self) -> None:
        future = TODAY + timedelta(days=2)
        task = _ritual(TODAY, 5, future)
        assert ScheduleEngine.advance_ritual_due_date(task, TODAY) == future

    def test_missing_due_date_uses_date_added(self) -> None:
        task = _ritual(TODAY - timedelta(days=4), 2, None)
        assert ScheduleEngine.advance_ritual_due_date(task, TODAY) == TODAY

    def test_next_due_after_completion_is_one_step(self) -> None:
        task = _ritual(TODAY, 7, TODAY)
        assert ScheduleEngine.next_ritual_due_date(task, TODAY) == TODAY + timedelta(
            days=7
        )

    def test_was_due_on_follows_series(self) -> None:
        added = TODAY - timedelta(days=6)
        task = _ritual(added, 3, TODAY + timedelta(days=3))
        assert ScheduleEngine.was_due_on(task, TODAY - timedelta(days=3))
        assert not ScheduleEngine.was_due_on(task, TODAY - timedelta(days=2))
        assert not ScheduleEngine.was_due_on(task, added - timedelta(days=3))


# =============================================================================
# TEST: ROLLOVER
# =============================================================================


class TestRollover:
    """Test the once-per-day ritual rollover."""

    def test_reopens_ritual_due_today(self) -> None:
        yesterday = TODAY - timedelta(days=1)
        task = _ritual(yesterday, 1, TODAY, yesterday, completed=True)

        result = ScheduleEngine.rollover_rituals([task], TODAY)

        assert result.processed
        assert result.reopened == 1
        assert result.tasks[0][const.DATA_TASK_IS_COMPLETED] is False

    def test_advances_overdue_ritual(self) -> None:
        task = _ritual(TODAY - timedelta(days=8), 4, TODAY - timedelta(days=4))

        result = ScheduleEngine.rollover_rituals([task], TODAY)

        assert result.advanced == 1
        assert result.tasks[0][const.DATA_TASK_NEXT_DUE_DATE] == TODAY.isoformat()

    def test_guarded_once_per_day(self) -> None:
        task = _ritual(TODAY - timedelta(days=8), 4, TODAY - timedelta(days=4))

        result = ScheduleEngine.rollover_rituals([task], TODAY, TODAY.isoformat())

        assert not result.processed
        assert result.tasks[0] == task

    def test_non_rituals_untouched(self) -> None:
        daily = _daily(TODAY - timedelta(days=1), completed=True)
        result = ScheduleEngine.rollover_rituals([daily], TODAY)
        assert result.tasks == [daily]

    def test_input_not_modified(self) -> None:
        task = _ritual(TODAY - timedelta(days=8), 4, TODAY - timedelta(days=4))
        snapshot = dict(task)
        ScheduleEngine.rollover_rituals([task], TODAY)
        assert task == snapshot


# =============================================================================
# TEST: PAST DUE
# =============================================================================


class TestPastDue:
    """Test is_past_due."""

    def test_event_past_and_open(self) -> None:
        assert ScheduleEngine.is_past_due(_event(TODAY - timedelta(days=1)), TODAY)

    def test_event_past_and_done(self) -> None:
        assert not ScheduleEngine.is_past_due(
            _event(TODAY - timedelta(days=1), completed=True), TODAY
        )

    def test_ritual_missed(self) -> None:
        task = _ritual(TODAY - timedelta(days=4), 2, TODAY - timedelta(days=2))
        assert ScheduleEngine.is_past_due(task, TODAY)

    def test_daily_never_past_due(self) -> None:
        assert not ScheduleEngine.is_past_due(_daily(TODAY - timedelta(days=3)), TODAY)


# =============================================================================
# TEST: SERIES ANCHOR
# =============================================================================


class TestSeriesAnchor:
    """Test that ritual recurrence follows the stored series anchor."""

    def test_anchor_overrides_date_added(self) -> None:
        added = TODAY - timedelta(days=6)
        task = _ritual(added, 3, TODAY + timedelta(days=1))
        task[const.DATA_TASK_SERIES_ANCHOR] = (TODAY - timedelta(days=2)).isoformat()

        assert ScheduleEngine.was_due_on(task, TODAY - timedelta(days=2))
        assert ScheduleEngine.was_due_on(task, TODAY + timedelta(days=1))
        assert not ScheduleEngine.was_due_on(task, TODAY - timedelta(days=3))
        # Days of the old series before the anchor no longer count
        assert not ScheduleEngine.was_due_on(task, added)

    def test_completion_day_counts_before_anchor(self) -> None:
        done = TODAY - timedelta(days=2)
        task = _ritual(done, 3, TODAY + timedelta(days=2), done)
        task[const.DATA_TASK_SERIES_ANCHOR] = (TODAY + timedelta(days=2)).isoformat()
        assert ScheduleEngine.was_due_on(task, TODAY - timedelta(days=2))
        assert not ScheduleEngine.was_due_on(task, TODAY)

    def test_catch_up_stays_on_series_after_reanchor(self) -> None:
        """Due five days ago with interval 3: one step lands two days back,
        so catch-up takes the step after that."""
        anchor = TODAY - timedelta(days=5)
        task = _ritual(TODAY - timedelta(days=30), 3, anchor)
        task[const.DATA_TASK_SERIES_ANCHOR] = anchor.isoformat()

        new_due = ScheduleEngine.advance_ritual_due_date(task, TODAY)

        assert new_due == anchor + timedelta(days=6)
        assert ScheduleEngine.was_due_on(task, new_due)

    def test_long_gap_catch_up(self) -> None:
        due = TODAY - timedelta(days=365)
        task = _ritual(due, 7, due)
        new_due = ScheduleEngine.advance_ritual_due_date(task, TODAY)
        assert (new_due - due).days % 7 == 0
        assert TODAY <= new_due < TODAY + timedelta(days=7)
