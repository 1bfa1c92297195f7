"""Profile Manager - Journal entries and the motivational quote.

These are the user's free-text profile fields. They never touch the
ledgers, so no events are emitted for them.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from .. import const
from ..exceptions import TaskValidationError
from ..utils.dt_utils import dt_to_date
from .base_manager import BaseManager


def normalize_custom_quote(quote: Any) -> str:
    """Return the quote to store, falling back to the default quote.

    Missing, blank and blocked quotes are replaced with the default.
    """
    if not isinstance(quote, str):
        return const.DEFAULT_CUSTOM_QUOTE
    cleaned = quote.strip()
    if not cleaned or cleaned.lower() in const.BLOCKED_CUSTOM_QUOTES:
        return const.DEFAULT_CUSTOM_QUOTE
    return cleaned


class ProfileManager(BaseManager):
    """Manager for journal entries and the custom quote."""

    @property
    def profile(self) -> dict[str, Any]:
        return self.data[const.DATA_PROFILE]

    def _update_profile(self, **changes: Any) -> None:
        updated = dict(self.profile)
        updated.update(changes)
        self.data[const.DATA_PROFILE] = updated

    # =========================================================================
    # Journal
    # =========================================================================

    def set_journal_entry(self, day: date | str, text: str) -> str:
        """Store the journal entry for one calendar day.

        An empty entry removes the day from the journal.

        Returns:
            The ISO date the entry was stored under

        Raises:
            TaskValidationError: If `day` is not a date
        """
        entry_day = dt_to_date(day)
        if entry_day is None:
            raise TaskValidationError(
                field=const.DATA_PROFILE_JOURNAL,
                translation_key=const.TRANS_KEY_INVALID_JOURNAL_DATE,
            )
        key = entry_day.isoformat()
        journal = dict(self.profile.get(const.DATA_PROFILE_JOURNAL) or {})
        if text:
            journal[key] = str(text)
        else:
            journal.pop(key, None)
        self._update_profile(**{const.DATA_PROFILE_JOURNAL: journal})
        const.LOGGER.debug("DEBUG: Journal entry saved for %s", key)
        return key

    def get_journal_entry(self, day: date | str) -> str:
        entry_day = dt_to_date(day)
        if entry_day is None:
            return ""
        journal = self.profile.get(const.DATA_PROFILE_JOURNAL) or {}
        return journal.get(entry_day.isoformat(), "")

    def get_journal_entries(self) -> dict[str, str]:
        """Return all journal entries keyed by ISO date, oldest first."""
        journal = self.profile.get(const.DATA_PROFILE_JOURNAL) or {}
        return dict(sorted(journal.items()))

    # =========================================================================
    # Custom quote
    # =========================================================================

    def set_custom_quote(self, quote: str | None) -> str:
        """Store a custom quote (the default when blank or blocked)."""
        stored = normalize_custom_quote(quote)
        self._update_profile(**{const.DATA_PROFILE_CUSTOM_QUOTE: stored})
        return stored

    def ensure_custom_quote(self) -> None:
        """Reset a missing or blocked stored quote to the default."""
        current = self.profile.get(const.DATA_PROFILE_CUSTOM_QUOTE)
        normalized = normalize_custom_quote(current)
        if current != normalized:
            const.LOGGER.info("INFO: Stored custom quote replaced with %r", normalized)
            self._update_profile(**{const.DATA_PROFILE_CUSTOM_QUOTE: normalized})

    def get_custom_quote(self) -> str:
        return normalize_custom_quote(self.profile.get(const.DATA_PROFILE_CUSTOM_QUOTE))
