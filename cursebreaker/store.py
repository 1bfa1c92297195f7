# File: store.py
"""Handles persistent data storage for Cursebreaker Codex.

The persistence mechanism itself is injected: anything with `load(key,
default)` and `save(key, value)` works. Each state bucket (profile, tasks,
rival, settings, meta) lives under its own storage key.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol

from . import const
from .engines.rival_engine import RivalEngine
from .engines.rank_engine import RankEngine
from .engines.stat_engine import StatEngine

# Bucket -> storage key
_BUCKET_KEYS: dict[str, str] = {
    const.DATA_PROFILE: const.STORAGE_KEY_PROFILE,
    const.DATA_TASKS: const.STORAGE_KEY_TASKS,
    const.DATA_RIVAL: const.STORAGE_KEY_RIVAL,
    const.DATA_SETTINGS: const.STORAGE_KEY_SETTINGS,
    const.DATA_META: const.STORAGE_KEY_META,
}


class KeyValueStore(Protocol):
    """Persistence port consumed by the engine."""

    def load(self, key: str, default: Any = None) -> Any:
        """Return the value stored under `key`, or `default`."""

    def save(self, key: str, value: Any) -> None:
        """Store `value` under `key`."""


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore, used for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    def save(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    def keys(self) -> list[str]:
        return list(self._values)


class CodexStore:
    """Handles persistent storage operations for Cursebreaker Codex data.

    Thin wrapper around the injected key-value store for loading and saving
    the full engine state.
    """

    def __init__(self, backend: KeyValueStore) -> None:
        """Initialize the store.

        Args:
            backend: The key-value persistence port.
        """
        self._backend = backend

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations.

        This is the SINGLE SOURCE OF TRUTH for the storage schema.

        Returns:
            dict: Default structure with all buckets and meta initialized.
        """
        return {
            const.DATA_PROFILE: {
                const.DATA_PROFILE_TRACK: RankEngine.new_track(),
                const.DATA_PROFILE_STATS: StatEngine.new_stats(),
                const.DATA_PROFILE_STREAK: 0,
                const.DATA_PROFILE_LAST_FULL_DAY: None,
                const.DATA_PROFILE_COMPLETION_PERCENTAGE: 0.0,
                const.DATA_PROFILE_EXP_GAINED_TODAY: 0,
                const.DATA_PROFILE_LAST_EXP_RESET: None,
                const.DATA_PROFILE_HISTORY: [],
                const.DATA_PROFILE_JOURNAL: {},
                const.DATA_PROFILE_CUSTOM_QUOTE: const.DEFAULT_CUSTOM_QUOTE,
            },
            const.DATA_TASKS: [],
            const.DATA_RIVAL: RivalEngine.new_rival(),
            const.DATA_SETTINGS: dict(const.DEFAULT_APP_SETTINGS),
            const.DATA_META: {
                const.DATA_META_LAST_RITUAL_ROLLOVER: None,
                const.DATA_META_LAST_STREAK_CHECK: None,
            },
        }

    @staticmethod
    def merge_defaults(data: dict[str, Any]) -> dict[str, Any]:
        """Fill keys missing from loaded data with their defaults.

        Only dict buckets are merged key by key (one level deep); stored
        values always win.
        """
        merged = CodexStore.get_default_structure()
        for bucket, default in merged.items():
            stored = data.get(bucket)
            if stored is None:
                continue
            if isinstance(default, dict) and isinstance(stored, dict):
                default.update(copy.deepcopy(stored))
            else:
                merged[bucket] = copy.deepcopy(stored)
        return merged

    def load(self) -> dict[str, Any]:
        """Load every bucket, initializing missing ones with defaults."""
        const.LOGGER.debug("DEBUG: CodexStore: Loading data from storage")
        loaded = {
            bucket: self._backend.load(key) for bucket, key in _BUCKET_KEYS.items()
        }
        if all(value is None for value in loaded.values()):
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            return CodexStore.get_default_structure()

        data = CodexStore.merge_defaults(loaded)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s tasks, %s history entries",
            len(data[const.DATA_TASKS]),
            len(data[const.DATA_PROFILE].get(const.DATA_PROFILE_HISTORY, [])),
        )
        return data

    def save(self, data: dict[str, Any]) -> None:
        """Persist every bucket of the given state."""
        for bucket, key in _BUCKET_KEYS.items():
            self._backend.save(key, data[bucket])
        const.LOGGER.debug("DEBUG: CodexStore: Saved %s buckets", len(_BUCKET_KEYS))
