"""Rival taunt helpers.

The taunt text source is external: anything with a `generate(...)` method
matching TauntProvider works. The engine only guarantees that a provider
failure never escapes (the fixed fallback line is used instead) and that
stored taunts stay within TAUNT_MAX_WORDS words.
"""

from __future__ import annotations

import random
from typing import Protocol

from .. import const

# Offline taunt pool, split by who is ahead today
TAUNTS_USER_BEHIND: tuple[str, ...] = (
    "Is that all you've got? Pathetic.",
    "You call that effort? I'm barely breaking a sweat.",
    "My grandmother could do better, and she's dust.",
    "Every moment you waste is another step I take towards victory.",
    "Keep dreaming, whelp. You'll never reach my level.",
    "I almost feel sorry for you. Almost.",
    "Another failure? Color me surprised. Not.",
    "You're not even a worthy opponent. Just an obstacle.",
    "The shadows themselves mock your feeble attempts.",
    "Give up. It's the only sensible thing you could do.",
)
TAUNTS_USER_AHEAD: tuple[str, ...] = (
    "A lucky streak, nothing more. Don't get comfortable.",
    "Impressive... for a beginner. My power still eclipses yours.",
    "Enjoy the lead while it lasts. The night is long.",
)


class TauntProvider(Protocol):
    """Text source for rival taunts."""

    def generate(
        self,
        user_completion_rate: float,
        rival_completion_rate: float,
        user_rank_label: str,
        rival_rank_label: str,
    ) -> str:
        """Return a short taunt for the given standings."""


class PregeneratedTauntProvider:
    """TauntProvider that picks from the built-in taunt pool."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(
        self,
        user_completion_rate: float,
        rival_completion_rate: float,
        user_rank_label: str,
        rival_rank_label: str,
    ) -> str:
        pool = (
            TAUNTS_USER_AHEAD
            if user_completion_rate > rival_completion_rate
            else TAUNTS_USER_BEHIND
        )
        return self._rng.choice(pool)


def truncate_taunt(text: str, max_words: int = const.TAUNT_MAX_WORDS) -> str:
    """Collapse whitespace and keep at most `max_words` words."""
    words = text.split()
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + "..."


def safe_generate_taunt(
    provider: TauntProvider | None,
    user_completion_rate: float,
    rival_completion_rate: float,
    user_rank_label: str,
    rival_rank_label: str,
) -> str:
    """Call the provider, returning the fallback taunt on any failure."""
    if provider is None:
        return const.TAUNT_FALLBACK
    try:
        taunt = provider.generate(
            user_completion_rate,
            rival_completion_rate,
            user_rank_label,
            rival_rank_label,
        )
    except Exception as err:  # pylint: disable=broad-except
        const.LOGGER.warning("WARNING: Failed to get rival taunt: %s", err)
        return const.TAUNT_FALLBACK

    if not isinstance(taunt, str) or not taunt.strip():
        const.LOGGER.warning("WARNING: Taunt provider returned no text")
        return const.TAUNT_FALLBACK
    return truncate_taunt(taunt)
