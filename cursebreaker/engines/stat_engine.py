"""Stat Engine - Pure logic for per-attribute experience tracks.

Same leveling mechanics as RankEngine, scoped to a single attribute with
plain integer levels (floor 1, no ceiling) and its own geometric curve:
floor(STAT_BASE_EXP * STAT_SCALING_FACTOR ** (level - 1)).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import geometric_threshold
from .rank_engine import LedgerResult

if TYPE_CHECKING:
    from ..type_defs import StatTrack


class StatEngine:
    """Pure logic engine for attribute stat tracks."""

    @staticmethod
    def threshold(level: int) -> int:
        """Experience required to advance from the given level."""
        return geometric_threshold(
            const.STAT_BASE_EXP, const.STAT_SCALING_FACTOR, level - 1
        )

    @staticmethod
    def new_stat() -> StatTrack:
        """Return a level 1 stat with no experience."""
        return {
            const.DATA_STAT_LEVEL: const.STAT_MIN_LEVEL,
            const.DATA_STAT_EXP: 0,
            const.DATA_STAT_EXP_TO_NEXT: StatEngine.threshold(const.STAT_MIN_LEVEL),
        }

    @staticmethod
    def new_stats() -> dict[str, StatTrack]:
        """Return fresh stat tracks for every attribute."""
        return {attribute: StatEngine.new_stat() for attribute in const.ATTRIBUTES_LIST}

    @staticmethod
    def is_tracked(attribute: str | None) -> bool:
        """True when the attribute owns a stat track (i.e. not the "None" sentinel)."""
        return attribute in const.ATTRIBUTES_LIST

    @staticmethod
    def apply_delta(stat: StatTrack | dict[str, Any], delta: int) -> LedgerResult:
        """Apply a signed experience delta to a stat track.

        Args:
            stat: Current stat track (not modified)
            delta: Experience to add (positive) or remove (negative)

        Returns:
            LedgerResult with the new stat track and net levels crossed
        """
        level = max(int(stat.get(const.DATA_STAT_LEVEL, const.STAT_MIN_LEVEL)), 1)
        exp = int(stat.get(const.DATA_STAT_EXP, 0)) + delta
        threshold = StatEngine.threshold(level)
        levels_changed = 0

        while exp >= threshold and threshold > 0:
            exp -= threshold
            level += 1
            levels_changed += 1
            threshold = StatEngine.threshold(level)

        while exp < 0:
            if level <= const.STAT_MIN_LEVEL:
                exp = 0
                break
            level -= 1
            levels_changed -= 1
            threshold = StatEngine.threshold(level)
            exp += threshold

        new_stat: StatTrack = {
            const.DATA_STAT_LEVEL: level,
            const.DATA_STAT_EXP: exp,
            const.DATA_STAT_EXP_TO_NEXT: threshold,
        }
        return LedgerResult(track=dict(new_stat), levels_changed=levels_changed)
