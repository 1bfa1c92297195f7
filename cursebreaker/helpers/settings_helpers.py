"""App settings validation.

Settings are validated with voluptuous, the same way service call data is
validated: a schema of optional keys so partial updates can be checked
before they are merged over the stored values.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from .. import const
from ..exceptions import TaskValidationError

SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.CONF_RIVAL_DIFFICULTY): vol.In(
            list(const.RIVAL_DIFFICULTY_MULTIPLIERS)
        ),
        vol.Optional(const.CONF_AUTO_ASSIGN_STAT_EXP): bool,
        vol.Optional(const.CONF_ENABLE_ANIMATIONS): bool,
        vol.Optional(const.CONF_SOUND_ENABLED): bool,
    }
)


def merge_settings(
    current: dict[str, Any] | None, changes: dict[str, Any]
) -> dict[str, Any]:
    """Validate `changes` and return them merged over `current` and defaults.

    Raises:
        TaskValidationError: If a key is unknown or a value has the wrong type.
    """
    try:
        validated = SETTINGS_SCHEMA(dict(changes))
    except vol.Invalid as err:
        field = str(err.path[0]) if err.path else const.DATA_SETTINGS
        raise TaskValidationError(
            field=field,
            translation_key=const.TRANS_KEY_INVALID_SETTINGS,
            placeholders={"error": err.msg},
        ) from err

    merged = dict(const.DEFAULT_APP_SETTINGS)
    merged.update(current or {})
    merged.update(validated)
    return merged


def is_sound_enabled(settings: dict[str, Any] | None) -> bool:
    """Return the sound flag, defaulting to enabled."""
    return bool(
        (settings or {}).get(
            const.CONF_SOUND_ENABLED,
            const.DEFAULT_APP_SETTINGS[const.CONF_SOUND_ENABLED],
        )
    )
