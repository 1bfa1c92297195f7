# File: coordinator.py
"""Coordinator for Cursebreaker Codex.

The host-facing facade: owns the committed state snapshot, runs every
operation as a transaction on a deep copy, and swaps the copy in (then
persists it and delivers queued events) only when the whole transaction
succeeded. Declined operations leave the committed state untouched.
"""

# pylint: disable=too-many-public-methods

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
import copy
from datetime import date, datetime
import random
from typing import Any

from . import const
from .engines.rank_engine import RankEngine
from .exceptions import (
    CodexError,
    ImportFormatError,
    NotCompletableError,
    NotUndoableError,
    TaskNotFoundError,
)
from .helpers import backup_helpers
from .helpers.settings_helpers import is_sound_enabled, merge_settings
from .helpers.taunt_helpers import TauntProvider
from .managers.gamification_manager import GamificationManager
from .managers.profile_manager import ProfileManager
from .managers.rival_manager import RivalManager
from .managers.task_manager import TaskManager
from .store import CodexStore, InMemoryKeyValueStore, KeyValueStore
from .type_defs import TaskData
from .utils.dt_utils import as_local, as_utc, dt_now_utc

EventSink = Callable[[str, dict[str, Any]], None]
SoundPlayer = Callable[[str], None]


class CodexCoordinator:
    """Coordinator for the progression engine.

    All state lives in one snapshot dict (profile, tasks, rival, settings,
    meta). Managers read and write `data`, which points at the working copy
    while a transaction runs.
    """

    def __init__(
        self,
        backend: KeyValueStore | None = None,
        *,
        event_sink: EventSink | None = None,
        sound_player: SoundPlayer | None = None,
        taunt_provider: TauntProvider | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            backend: Key-value persistence port (in-memory when omitted)
            event_sink: Receives (event, payload) after each commit
            sound_player: Receives a sound name for sound-mapped events
            taunt_provider: External taunt text source
            rng: Random source for rival names and completion rates
            clock: Returns the current UTC datetime
        """
        self.store = CodexStore(backend or InMemoryKeyValueStore())
        self._event_sink = event_sink
        self._sound_player = sound_player
        self._clock = clock or dt_now_utc
        self._rng = rng or random.Random()

        self._data: dict[str, Any] = CodexStore.get_default_structure()
        self._working: dict[str, Any] | None = None
        self._pending_events: list[tuple[str, dict[str, Any]]] = []
        self._subscribers: dict[str, list[Callable[[dict[str, Any]], None]]] = {}

        self.gamification_manager = GamificationManager(self)
        self.profile_manager = ProfileManager(self)
        self.task_manager = TaskManager(self, self.gamification_manager)
        self.rival_manager = RivalManager(self, self._rng, taunt_provider)

    # -------------------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------------------

    def setup(self, now: datetime | None = None) -> None:
        """Load persisted state and run the startup checks."""
        self._data = self.store.load()
        now = self._now(now)
        with self._transaction():
            self.rival_manager.ensure_initialized(now)
            self.profile_manager.ensure_custom_quote()
            self._run_daily_checks(now)
        const.LOGGER.info(
            "INFO: Cursebreaker Codex ready - %s, %s tasks",
            self.gamification_manager.get_rank_label(),
            len(self._data[const.DATA_TASKS]),
        )

    @property
    def data(self) -> dict[str, Any]:
        """Working snapshot inside a transaction, committed state otherwise."""
        return self._working if self._working is not None else self._data

    def _now(self, now: datetime | None) -> datetime:
        return as_utc(now) if now is not None else self._clock()

    def _today(self, now: datetime | None) -> date:
        return as_local(self._now(now)).date()

    # -------------------------------------------------------------------------------------
    # Transactions and events
    # -------------------------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[dict[str, Any]]:
        """Run a block against a deep copy; commit only if it succeeds."""
        if self._working is not None:
            raise CodexError("Nested transactions are not supported")
        self._working = copy.deepcopy(self._data)
        self._pending_events = []
        try:
            yield self._working
        except BaseException:
            self._working = None
            self._pending_events = []
            raise

        committed, events = self._working, self._pending_events
        self._working = None
        self._pending_events = []
        self._data = committed
        self.store.save(committed)
        self._dispatch(events)

    def queue_event(self, event: str, payload: dict[str, Any]) -> None:
        """Queue an event for delivery once the running transaction commits."""
        self._pending_events.append((event, payload))

    def subscribe(
        self, event: str, callback: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        """Register a callback for one event name; returns an unsubscribe."""
        self._subscribers.setdefault(event, []).append(callback)

        def _unsubscribe() -> None:
            self._subscribers[event].remove(callback)

        return _unsubscribe

    def _dispatch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        sound_on = is_sound_enabled(self._data.get(const.DATA_SETTINGS))
        for event, payload in events:
            receivers: list[Callable[..., None]] = list(
                self._subscribers.get(event, [])
            )
            if self._event_sink is not None:
                receivers.append(lambda p, e=event: self._event_sink(e, p))
            sound = const.EVENT_SOUND_MAP.get(event)
            if sound_on and sound and self._sound_player is not None:
                receivers.append(lambda _p, s=sound: self._sound_player(s))

            for receiver in receivers:
                try:
                    receiver(payload)
                except Exception as err:  # pylint: disable=broad-except
                    const.LOGGER.warning(
                        "WARNING: Event receiver for '%s' failed: %s", event, err
                    )

    # -------------------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------------------

    def add_task(
        self, user_input: dict[str, Any], now: datetime | None = None
    ) -> TaskData:
        """Create a task. Raises TaskValidationError on invalid input."""
        today = self._today(now)
        with self._transaction():
            task = self.task_manager.add_task(user_input, today)
        return copy.deepcopy(task)

    def update_task(
        self, task_id: str, changes: dict[str, Any], now: datetime | None = None
    ) -> TaskData | None:
        """Edit a task; returns None when the id is unknown.

        Raises TaskValidationError on invalid changes.
        """
        today = self._today(now)
        try:
            with self._transaction():
                task = self.task_manager.update_task(task_id, changes, today)
        except TaskNotFoundError as err:
            const.LOGGER.warning("WARNING: Update declined: %s", err)
            return None
        return copy.deepcopy(task)

    def delete_task(self, task_id: str, now: datetime | None = None) -> bool:
        """Delete a task; returns False when the id is unknown."""
        today = self._today(now)
        try:
            with self._transaction():
                self.task_manager.delete_task(task_id, today)
        except TaskNotFoundError as err:
            const.LOGGER.warning("WARNING: Delete declined: %s", err)
            return False
        return True

    def complete_task(self, task_id: str, now: datetime | None = None) -> bool:
        """Complete a task; a non-completable task is a silent no-op (False)."""
        now = self._now(now)
        today = as_local(now).date()
        try:
            with self._transaction():
                self.task_manager.complete_task(task_id, now, today)
        except NotCompletableError as err:
            const.LOGGER.debug("DEBUG: Completion ignored: %s", err)
            return False
        return True

    def undo_complete_task(self, task_id: str, now: datetime | None = None) -> bool:
        """Undo today's completion of a task; False when nothing to undo."""
        today = self._today(now)
        try:
            with self._transaction():
                self.task_manager.undo_complete_task(task_id, today)
        except NotUndoableError as err:
            const.LOGGER.warning("WARNING: Undo declined: %s", err)
            return False
        return True

    def get_actionable_tasks_for_today(
        self, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        return self.task_manager.get_actionable_tasks(self._today(now))

    def get_daily_tasks(self, now: datetime | None = None) -> list[dict[str, Any]]:
        return self.task_manager.get_actionable_tasks(
            self._today(now), const.TASK_TYPE_DAILY
        )

    def get_rituals(self, now: datetime | None = None) -> list[dict[str, Any]]:
        return self.task_manager.get_actionable_tasks(
            self._today(now), const.TASK_TYPE_RITUAL
        )

    def get_events_for_today(self, now: datetime | None = None) -> list[dict[str, Any]]:
        return self.task_manager.get_actionable_tasks(
            self._today(now), const.TASK_TYPE_EVENT
        )

    def get_past_due_tasks(self, now: datetime | None = None) -> list[dict[str, Any]]:
        return self.task_manager.get_past_due_tasks(self._today(now))

    def get_tasks(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._data[const.DATA_TASKS])

    # -------------------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------------------

    def grant_exp(
        self, amount: int, now: datetime | None = None, source: str = "manual"
    ) -> bool:
        """Grant (or remove) rank experience directly.

        Returns:
            True if the grant crossed at least one level upward
        """
        today = self._today(now)
        with self._transaction():
            result = self.gamification_manager.apply_exp(int(amount), today, source)
        return amount > 0 and result.leveled_up

    def get_profile(self) -> dict[str, Any]:
        return copy.deepcopy(self._data[const.DATA_PROFILE])

    def get_rank_label(self) -> str:
        return self.gamification_manager.get_rank_label()

    def get_stats(self) -> dict[str, Any]:
        return copy.deepcopy(self._data[const.DATA_PROFILE][const.DATA_PROFILE_STATS])

    def get_streak(self) -> int:
        return self.gamification_manager.get_streak()

    def get_task_history(self) -> list[dict[str, Any]]:
        return copy.deepcopy(
            self._data[const.DATA_PROFILE].get(const.DATA_PROFILE_HISTORY) or []
        )

    def complete_focus_session(
        self, focus_minutes: int, now: datetime | None = None
    ) -> int:
        """Reward a finished focus session; returns the exp awarded.

        Raises TaskValidationError when the duration is not positive.
        """
        today = self._today(now)
        with self._transaction():
            exp = self.gamification_manager.complete_focus_session(
                focus_minutes, today
            )
        return exp

    # -------------------------------------------------------------------------------------
    # Journal and quote
    # -------------------------------------------------------------------------------------

    def set_journal_entry(self, day: date | str, text: str) -> str:
        """Save (or clear, with empty text) the journal entry for a day."""
        with self._transaction():
            key = self.profile_manager.set_journal_entry(day, text)
        return key

    def get_journal_entry(self, day: date | str) -> str:
        return self.profile_manager.get_journal_entry(day)

    def get_journal_entries(self) -> dict[str, str]:
        return self.profile_manager.get_journal_entries()

    def set_custom_quote(self, quote: str | None) -> str:
        """Store the motivational quote; blank or blocked text resets it."""
        with self._transaction():
            stored = self.profile_manager.set_custom_quote(quote)
        return stored

    def reset_custom_quote(self) -> str:
        return self.set_custom_quote(None)

    def get_custom_quote(self) -> str:
        return self.profile_manager.get_custom_quote()

    # -------------------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------------------

    def get_settings(self) -> dict[str, Any]:
        return dict(self._data[const.DATA_SETTINGS])

    def update_settings(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Validate and merge settings. Raises TaskValidationError if invalid."""
        with self._transaction() as working:
            working[const.DATA_SETTINGS] = merge_settings(
                working.get(const.DATA_SETTINGS), changes
            )
        const.LOGGER.debug("DEBUG: Settings updated: %s", list(changes))
        return self.get_settings()

    # -------------------------------------------------------------------------------------
    # Background checks
    # -------------------------------------------------------------------------------------

    def _run_daily_checks(self, now: datetime) -> bool:
        today = as_local(now).date()
        rollover = self.task_manager.rollover_rituals(today)

        meta = self.data[const.DATA_META]
        if meta.get(const.DATA_META_LAST_STREAK_CHECK) != today.isoformat():
            self.gamification_manager.expire_streak(today)
            updated_meta = dict(self.data[const.DATA_META])
            updated_meta[const.DATA_META_LAST_STREAK_CHECK] = today.isoformat()
            self.data[const.DATA_META] = updated_meta

        self.gamification_manager.refresh_completion_percentage(today)
        return rollover.processed

    def run_daily_checks(self, now: datetime | None = None) -> bool:
        """Run the ritual rollover and streak expiry for today.

        Safe to call any number of times; both steps are guarded by the
        persisted meta markers.

        Returns:
            True if the ritual rollover ran (first call of the day)
        """
        now = self._now(now)
        with self._transaction():
            processed = self._run_daily_checks(now)
        return processed

    def check_rival_gain(self, now: datetime | None = None) -> bool:
        """Apply at most one rival day; True if a gain was applied."""
        now = self._now(now)
        with self._transaction():
            self.rival_manager.ensure_initialized(now)
            result = self.rival_manager.check_gain(now)
        return result.applied

    # -------------------------------------------------------------------------------------
    # Rival
    # -------------------------------------------------------------------------------------

    def refresh_rival_taunt(self) -> str:
        """Fetch a new rival taunt (fallback text on provider failure)."""
        with self._transaction():
            taunt = self.rival_manager.refresh_taunt()
        return taunt

    def get_rival(self) -> dict[str, Any]:
        return copy.deepcopy(self._data[const.DATA_RIVAL])

    def get_rival_rank_label(self) -> str:
        return RankEngine.format_rank_label(
            self._data[const.DATA_RIVAL][const.DATA_RIVAL_TRACK]
        )

    def get_rival_exp_history(self) -> list[dict[str, Any]]:
        return self.rival_manager.get_exp_history()

    # -------------------------------------------------------------------------------------
    # Save / load
    # -------------------------------------------------------------------------------------

    def export_save(self, now: datetime | None = None) -> dict[str, Any]:
        """Return the full state wrapped in the versioned save envelope."""
        return backup_helpers.build_save_blob(self._data, self._now(now))

    def import_save(self, blob: dict[str, Any] | str) -> bool:
        """Replace all state with a save blob, or reject it wholesale."""
        try:
            imported = backup_helpers.parse_save_blob(blob)
        except ImportFormatError as err:
            const.LOGGER.warning("WARNING: Import rejected: %s", err.reason)
            return False

        with self._transaction() as working:
            working.clear()
            working.update(CodexStore.merge_defaults(imported))
            self.profile_manager.ensure_custom_quote()
        const.LOGGER.info(
            "INFO: Save imported - %s tasks",
            len(self._data[const.DATA_TASKS]),
        )
        return True
