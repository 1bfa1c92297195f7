"""Shared fixtures for Cursebreaker Codex tests."""

from __future__ import annotations

from datetime import UTC, datetime
import random
from typing import Any

import pytest

from cursebreaker import CodexCoordinator, InMemoryKeyValueStore

# Monday morning; the default timezone is UTC so the local day is 2025-06-02
NOW = datetime(2025, 6, 2, 9, 0, tzinfo=UTC)


class EventRecorder:
    """Collects (event, payload) pairs and played sounds."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.sounds: list[str] = []

    def sink(self, event: str, payload: dict[str, Any]) -> None:
        self.events.append((event, payload))

    def play(self, sound: str) -> None:
        self.sounds.append(sound)

    def names(self) -> list[str]:
        return [event for event, _ in self.events]

    def clear(self) -> None:
        self.events.clear()
        self.sounds.clear()


@pytest.fixture
def backend() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def coordinator(
    backend: InMemoryKeyValueStore, recorder: EventRecorder
) -> CodexCoordinator:
    """A coordinator on an empty store, set up at NOW."""
    codex = CodexCoordinator(
        backend,
        event_sink=recorder.sink,
        sound_player=recorder.play,
        rng=random.Random(0),
        clock=lambda: NOW,
    )
    codex.setup()
    recorder.clear()
    return codex
