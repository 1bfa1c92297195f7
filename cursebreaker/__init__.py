# File: __init__.py
"""Initialization file for the Cursebreaker Codex progression engine.

Turns task completions into experience, rank progression, stat levels and a
daily streak, and simulates a rival who progresses from the user's own
recorded activity.

Key Features:
- CodexCoordinator: the host-facing facade (tasks, profile, rival, save/load).
- Pure engines for leveling, scheduling, streaks and the rival simulation.
- Injected persistence, taunt text, event and sound side channels.

Usage:
    from cursebreaker import CodexCoordinator

    codex = CodexCoordinator(backend, event_sink=on_event)
    codex.setup()
    task = codex.add_task({"name": "Read", "task_type": "daily"})
    codex.complete_task(task["id"])
"""

from __future__ import annotations

from .coordinator import CodexCoordinator
from .exceptions import (
    CodexError,
    ImportFormatError,
    NotCompletableError,
    NotUndoableError,
    TaskNotFoundError,
    TaskValidationError,
)
from .helpers.taunt_helpers import PregeneratedTauntProvider, TauntProvider
from .store import CodexStore, InMemoryKeyValueStore, KeyValueStore

__all__ = [
    "CodexCoordinator",
    "CodexError",
    "CodexStore",
    "ImportFormatError",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "NotCompletableError",
    "NotUndoableError",
    "PregeneratedTauntProvider",
    "TaskNotFoundError",
    "TaskValidationError",
    "TauntProvider",
]
