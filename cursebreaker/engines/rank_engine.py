"""Rank Engine - Pure logic for rank/sub-rank experience tracks.

This engine provides stateless, pure Python functions for:
- Experience-to-next-level thresholds from a rank position
- Applying signed experience deltas with cascading level-up/level-down
- Rank labels for display and taunts

ARCHITECTURE: This is a pure logic engine with NO persistence.
All functions are static methods that operate on passed-in data and
return new track dicts; the input track is never mutated.
State management belongs in GamificationManager and RivalManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import geometric_threshold

if TYPE_CHECKING:
    from ..type_defs import ExperienceTrack


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of applying an experience delta to a track.

    Attributes:
        track: The new track (a fresh dict)
        levels_changed: Net number of levels crossed, negative when descending
    """

    track: dict[str, Any]
    levels_changed: int = 0

    @property
    def leveled_up(self) -> bool:
        """True when at least one level was gained."""
        return self.levels_changed > 0


class RankEngine:
    """Pure logic engine for the nine-rank, ten-sub-rank ladder.

    All methods are static - no instance state.
    """

    LAST_RANK_INDEX: int = len(const.RANK_NAMES_LIST) - 1

    @staticmethod
    def rank_index(rank_name: str) -> int:
        """Return the index of a rank name, clamped to the first rank if unknown."""
        try:
            return const.RANK_NAMES_LIST.index(rank_name)
        except ValueError:
            const.LOGGER.debug("RankEngine: Unknown rank '%s', using first", rank_name)
            return 0

    @staticmethod
    def overall_index(rank_name: str, sub_rank: int) -> int:
        """Return the monotonic overall level index of a position."""
        sub_rank = min(max(sub_rank, 1), const.MAX_SUB_RANKS)
        return RankEngine.rank_index(rank_name) * const.MAX_SUB_RANKS + (sub_rank - 1)

    @staticmethod
    def threshold(rank_name: str, sub_rank: int) -> int:
        """Experience required to leave the given position.

        floor(BASE_EXP_PER_SUBRANK * EXP_SCALING_FACTOR ** overall_index)
        """
        return geometric_threshold(
            const.BASE_EXP_PER_SUBRANK,
            const.EXP_SCALING_FACTOR,
            RankEngine.overall_index(rank_name, sub_rank),
        )

    @staticmethod
    def new_track() -> ExperienceTrack:
        """Return a track at the very first position with no experience."""
        first_rank = const.RANK_NAMES_LIST[0]
        return {
            const.DATA_TRACK_RANK_NAME: first_rank,
            const.DATA_TRACK_SUB_RANK: 1,
            const.DATA_TRACK_TOTAL_EXP: 0,
            const.DATA_TRACK_CURRENT_EXP: 0,
            const.DATA_TRACK_EXP_TO_NEXT: RankEngine.threshold(first_rank, 1),
        }

    @staticmethod
    def apply_delta(track: ExperienceTrack | dict[str, Any], delta: int) -> LedgerResult:
        """Apply a signed experience delta with cascading level changes.

        Level-up: while the in-level experience reaches the threshold, the
        threshold is subtracted and the sub-rank advances, rolling over into
        the next rank. At the last rank the track stays at the maximum
        sub-rank with in-level experience pinned at the threshold.

        Level-down: while the in-level experience is negative, the position
        steps back one level and that level's threshold is added back. At
        the first position the in-level experience is clamped to 0.

        Total experience is adjusted once by delta and floored at 0.

        Args:
            track: Current experience track (not modified)
            delta: Experience to add (positive) or remove (negative)

        Returns:
            LedgerResult with the new track and the net levels crossed
        """
        rank_idx = RankEngine.rank_index(
            track.get(const.DATA_TRACK_RANK_NAME, const.RANK_NAMES_LIST[0])
        )
        sub_rank = min(
            max(int(track.get(const.DATA_TRACK_SUB_RANK, 1)), 1), const.MAX_SUB_RANKS
        )
        total_exp = max(0, int(track.get(const.DATA_TRACK_TOTAL_EXP, 0)) + delta)
        current = int(track.get(const.DATA_TRACK_CURRENT_EXP, 0)) + delta
        threshold = RankEngine.threshold(const.RANK_NAMES_LIST[rank_idx], sub_rank)
        levels_changed = 0

        while current >= threshold and threshold > 0:
            if rank_idx == RankEngine.LAST_RANK_INDEX and sub_rank == const.MAX_SUB_RANKS:
                # Ceiling: no further growth
                current = threshold
                break
            current -= threshold
            sub_rank += 1
            if sub_rank > const.MAX_SUB_RANKS:
                sub_rank = 1
                rank_idx += 1
            levels_changed += 1
            threshold = RankEngine.threshold(const.RANK_NAMES_LIST[rank_idx], sub_rank)

        while current < 0:
            if rank_idx == 0 and sub_rank == 1:
                current = 0
                break
            sub_rank -= 1
            if sub_rank < 1:
                rank_idx -= 1
                sub_rank = const.MAX_SUB_RANKS
            levels_changed -= 1
            threshold = RankEngine.threshold(const.RANK_NAMES_LIST[rank_idx], sub_rank)
            current += threshold

        if levels_changed:
            const.LOGGER.debug(
                "RankEngine: delta=%s crossed %s level(s), now %s %s",
                delta,
                levels_changed,
                const.RANK_NAMES_LIST[rank_idx],
                sub_rank,
            )

        new_track: ExperienceTrack = {
            const.DATA_TRACK_RANK_NAME: const.RANK_NAMES_LIST[rank_idx],
            const.DATA_TRACK_SUB_RANK: sub_rank,
            const.DATA_TRACK_TOTAL_EXP: total_exp,
            const.DATA_TRACK_CURRENT_EXP: current,
            const.DATA_TRACK_EXP_TO_NEXT: threshold,
        }
        return LedgerResult(track=dict(new_track), levels_changed=levels_changed)

    @staticmethod
    def format_rank_label(track: ExperienceTrack | dict[str, Any]) -> str:
        """Return a label such as "Voidwalker (Sub-Rank 3)"."""
        return (
            f"{track.get(const.DATA_TRACK_RANK_NAME, const.RANK_NAMES_LIST[0])} "
            f"(Sub-Rank {track.get(const.DATA_TRACK_SUB_RANK, 1)})"
        )
