"""Rival Manager - Rival setup, daily gain check and taunts.

The gain check is a re-entrant batch job: the persisted
`next_exp_gain_time` boundary is its only guard, so running it any number
of times (including after restarts) applies each rival day once.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.rank_engine import RankEngine
from ..engines.rival_engine import RivalEngine, RivalTickResult
from ..helpers.taunt_helpers import safe_generate_taunt
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from ..coordinator import CodexCoordinator
    from ..helpers.taunt_helpers import TauntProvider


class RivalManager(BaseManager):
    """Manager for the rival NPC."""

    def __init__(
        self,
        coordinator: CodexCoordinator,
        rng: random.Random,
        taunt_provider: TauntProvider | None = None,
    ) -> None:
        super().__init__(coordinator)
        self._rng = rng
        self._taunt_provider = taunt_provider

    @property
    def rival(self) -> dict[str, Any]:
        """The rival bucket of the running snapshot."""
        return self.data[const.DATA_RIVAL]

    def ensure_initialized(self, now: datetime) -> bool:
        """Give the rival a known name and a gain boundary.

        Returns:
            True if anything was filled in
        """
        rival = dict(self.rival)
        changed = False
        if rival.get(const.DATA_RIVAL_NAME) not in const.RIVAL_NAMES_POOL:
            rival[const.DATA_RIVAL_NAME] = self._rng.choice(const.RIVAL_NAMES_POOL)
            changed = True
        if RivalEngine.gain_boundary(rival) is None:
            rival[const.DATA_RIVAL_NEXT_GAIN_TIME] = RivalEngine.initial_gain_time(
                now
            ).isoformat()
            changed = True
        if changed:
            self.data[const.DATA_RIVAL] = rival
            const.LOGGER.debug(
                "DEBUG: Rival %s ready, next gain at %s",
                rival[const.DATA_RIVAL_NAME],
                rival[const.DATA_RIVAL_NEXT_GAIN_TIME],
            )
        return changed

    def check_gain(self, now: datetime) -> RivalTickResult:
        """Apply the rival's gain for one day if its boundary has passed."""
        profile = self.data[const.DATA_PROFILE]
        difficulty = self.data[const.DATA_SETTINGS].get(
            const.CONF_RIVAL_DIFFICULTY, const.RIVAL_DIFFICULTY_NORMAL
        )
        result = RivalEngine.simulate_tick(
            self.rival,
            self.data[const.DATA_TASKS],
            profile.get(const.DATA_PROFILE_HISTORY) or [],
            int(profile[const.DATA_PROFILE_TRACK][const.DATA_TRACK_TOTAL_EXP]),
            difficulty,
            now,
        )
        self.data[const.DATA_RIVAL] = result.rival
        if result.applied:
            const.LOGGER.info(
                "INFO: Rival %s gained %s exp for %s",
                result.rival[const.DATA_RIVAL_NAME],
                result.exp_gained,
                result.day,
            )
            self.emit(
                const.EVENT_RIVAL_EXP_GAINED,
                day=result.day.isoformat() if result.day else None,
                exp_gained=result.exp_gained,
                levels_gained=result.levels_changed,
            )
        return result

    def refresh_taunt(self) -> str:
        """Ask the taunt provider for a new line and store it."""
        profile = self.data[const.DATA_PROFILE]
        user_rate = (
            float(profile.get(const.DATA_PROFILE_COMPLETION_PERCENTAGE, 0.0)) / 100
        )
        rival_rate = (
            const.RIVAL_COMPLETION_RATE_MIN
            + self._rng.random() * const.RIVAL_COMPLETION_RATE_SPREAD
        )
        taunt = safe_generate_taunt(
            self._taunt_provider,
            user_rate,
            rival_rate,
            RankEngine.format_rank_label(profile[const.DATA_PROFILE_TRACK]),
            RankEngine.format_rank_label(self.rival[const.DATA_RIVAL_TRACK]),
        )
        rival = dict(self.rival)
        rival[const.DATA_RIVAL_LAST_TAUNT] = taunt
        self.data[const.DATA_RIVAL] = rival
        self.emit(const.EVENT_RIVAL_PROVOKE, taunt=taunt)
        return taunt

    def get_exp_history(self) -> list[dict[str, Any]]:
        """Return the most recent rival gains, oldest first."""
        return [
            dict(entry)
            for entry in self.rival.get(const.DATA_RIVAL_EXP_HISTORY) or []
        ][-const.MAX_RIVAL_HISTORY_ENTRIES :]
