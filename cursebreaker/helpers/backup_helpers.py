"""Save file utilities for Cursebreaker Codex.

Handles building, serializing and validating the versioned save blob:

    {
        "app": "Cursebreaker_Codex",
        "format": "cursebreaker-save",
        "schema_version": "1.0",
        "exported_at": "<iso datetime>",
        "data": {"profile": ..., "tasks": ..., "rival": ..., "settings": ..., "meta": ...}
    }

A blob is accepted or rejected as a whole; callers never apply a partially
valid blob.
"""

from __future__ import annotations

import copy
from datetime import datetime
import json
from typing import Any

import voluptuous as vol

from .. import const
from ..exceptions import ImportFormatError
from ..utils.dt_utils import dt_now_utc, dt_parse_date
from .settings_helpers import SETTINGS_SCHEMA

_NON_NEGATIVE_INT = vol.All(int, vol.Range(min=0))
_POSITIVE_INT = vol.All(int, vol.Range(min=1))
_OPTIONAL_STR = vol.Any(None, str)


def _iso_date(value: Any) -> str:
    """Voluptuous validator for a YYYY-MM-DD string."""
    if dt_parse_date(value) is None:
        raise vol.Invalid(f"expected an ISO date, got {value!r}")
    return value


def _track_in_level(track: dict[str, Any]) -> dict[str, Any]:
    """Reject a track whose level progress is at or past its threshold.

    Only the top position may sit exactly at the threshold (the ceiling).
    """
    current = track[const.DATA_TRACK_CURRENT_EXP]
    to_next = track[const.DATA_TRACK_EXP_TO_NEXT]
    at_ceiling = (
        track[const.DATA_TRACK_RANK_NAME] == const.RANK_NAMES_LIST[-1]
        and track[const.DATA_TRACK_SUB_RANK] == const.MAX_SUB_RANKS
    )
    if current > to_next or (current == to_next and not at_ceiling):
        raise vol.Invalid(
            f"current exp {current} is not below the level threshold {to_next}",
            path=[const.DATA_TRACK_CURRENT_EXP],
        )
    return track


TRACK_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Required(const.DATA_TRACK_RANK_NAME): vol.In(const.RANK_NAMES_LIST),
            vol.Required(const.DATA_TRACK_SUB_RANK): vol.All(
                int, vol.Range(min=1, max=const.MAX_SUB_RANKS)
            ),
            vol.Required(const.DATA_TRACK_TOTAL_EXP): _NON_NEGATIVE_INT,
            vol.Required(const.DATA_TRACK_CURRENT_EXP): _NON_NEGATIVE_INT,
            vol.Required(const.DATA_TRACK_EXP_TO_NEXT): _POSITIVE_INT,
        },
        extra=vol.ALLOW_EXTRA,
    ),
    _track_in_level,
)

STAT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_STAT_LEVEL): _POSITIVE_INT,
        vol.Required(const.DATA_STAT_EXP): _NON_NEGATIVE_INT,
        vol.Required(const.DATA_STAT_EXP_TO_NEXT): _POSITIVE_INT,
    },
    extra=vol.ALLOW_EXTRA,
)

HISTORY_ENTRY_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_HISTORY_TASK_ID): str,
        vol.Required(const.DATA_HISTORY_COMPLETION_DATE): _iso_date,
        vol.Required(const.DATA_HISTORY_EXP_AWARDED): _NON_NEGATIVE_INT,
        vol.Optional(const.DATA_HISTORY_STAT_EXP): vol.Any(None, _NON_NEGATIVE_INT),
        vol.Optional(const.DATA_HISTORY_STAT_ATTRIBUTE): vol.Any(
            None, vol.In(const.ATTRIBUTES)
        ),
        vol.Optional(const.DATA_HISTORY_RECORDED_AT): _OPTIONAL_STR,
        vol.Optional(const.DATA_HISTORY_TASK): dict,
    },
    extra=vol.ALLOW_EXTRA,
)

RIVAL_HISTORY_ENTRY_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_RIVAL_HISTORY_DATE): _iso_date,
        vol.Required(const.DATA_RIVAL_HISTORY_EXP_GAINED): _NON_NEGATIVE_INT,
        vol.Required(const.DATA_RIVAL_HISTORY_TOTAL_EXP): _NON_NEGATIVE_INT,
    },
    extra=vol.ALLOW_EXTRA,
)

TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_TASK_ID): str,
        vol.Required(const.DATA_TASK_NAME): str,
        vol.Required(const.DATA_TASK_TYPE): vol.In(const.TASK_TYPES),
        vol.Required(const.DATA_TASK_DATE_ADDED): _iso_date,
        vol.Required(const.DATA_TASK_BASE_EXP): _NON_NEGATIVE_INT,
        vol.Optional(const.DATA_TASK_IS_COMPLETED): bool,
        vol.Optional(const.DATA_TASK_DIFFICULTY): vol.In(const.DIFFICULTIES),
        vol.Optional(const.DATA_TASK_ATTRIBUTE): vol.In(const.ATTRIBUTES),
        vol.Optional(const.DATA_TASK_REPEAT_INTERVAL): _POSITIVE_INT,
        vol.Optional(const.DATA_TASK_NEXT_DUE_DATE): vol.Any(None, _iso_date),
        vol.Optional(const.DATA_TASK_LAST_COMPLETED_DATE): vol.Any(None, _iso_date),
        vol.Optional(const.DATA_TASK_SERIES_ANCHOR): vol.Any(None, _iso_date),
        vol.Optional(const.DATA_TASK_SCHEDULED_DATE): vol.Any(None, _iso_date),
    },
    extra=vol.ALLOW_EXTRA,
)

JOURNAL_SCHEMA = vol.Schema({_iso_date: str})

PROFILE_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_PROFILE_TRACK): TRACK_SCHEMA,
        vol.Optional(const.DATA_PROFILE_STATS): {
            vol.In(const.ATTRIBUTES_LIST): STAT_SCHEMA
        },
        vol.Optional(const.DATA_PROFILE_STREAK): _NON_NEGATIVE_INT,
        vol.Optional(const.DATA_PROFILE_LAST_FULL_DAY): vol.Any(None, _iso_date),
        vol.Optional(const.DATA_PROFILE_EXP_GAINED_TODAY): _NON_NEGATIVE_INT,
        vol.Optional(const.DATA_PROFILE_HISTORY): [HISTORY_ENTRY_SCHEMA],
        vol.Optional(const.DATA_PROFILE_JOURNAL): JOURNAL_SCHEMA,
        vol.Optional(const.DATA_PROFILE_CUSTOM_QUOTE): _OPTIONAL_STR,
    },
    extra=vol.ALLOW_EXTRA,
)

RIVAL_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_RIVAL_NAME): str,
        vol.Required(const.DATA_RIVAL_TRACK): TRACK_SCHEMA,
        vol.Optional(const.DATA_RIVAL_NEXT_GAIN_TIME): _OPTIONAL_STR,
        vol.Optional(const.DATA_RIVAL_EXP_HISTORY): [RIVAL_HISTORY_ENTRY_SCHEMA],
        vol.Optional(const.DATA_RIVAL_LAST_TAUNT): _OPTIONAL_STR,
    },
    extra=vol.ALLOW_EXTRA,
)

META_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_META_LAST_RITUAL_ROLLOVER): vol.Any(None, _iso_date),
        vol.Optional(const.DATA_META_LAST_STREAK_CHECK): vol.Any(None, _iso_date),
    },
    extra=vol.ALLOW_EXTRA,
)

SAVE_SCHEMA = vol.Schema(
    {
        vol.Required(const.SAVE_APP): vol.In([const.APP_NAME]),
        vol.Required(const.SAVE_FORMAT): vol.In([const.SAVE_FORMAT_TAG]),
        vol.Required(const.SAVE_VERSION): vol.In([const.SAVE_SCHEMA_VERSION]),
        vol.Optional(const.SAVE_EXPORTED_AT): str,
        vol.Required(const.SAVE_DATA): vol.Schema(
            {
                vol.Required(const.DATA_PROFILE): PROFILE_SCHEMA,
                vol.Required(const.DATA_TASKS): [TASK_SCHEMA],
                vol.Required(const.DATA_RIVAL): RIVAL_SCHEMA,
                vol.Optional(const.DATA_SETTINGS): SETTINGS_SCHEMA,
                vol.Optional(const.DATA_META): META_SCHEMA,
            }
        ),
    },
    extra=vol.ALLOW_EXTRA,
)


def build_save_blob(
    state: dict[str, Any], exported_at: datetime | None = None
) -> dict[str, Any]:
    """Wrap a full state snapshot in the versioned save envelope."""
    return {
        const.SAVE_APP: const.APP_NAME,
        const.SAVE_FORMAT: const.SAVE_FORMAT_TAG,
        const.SAVE_VERSION: const.SAVE_SCHEMA_VERSION,
        const.SAVE_EXPORTED_AT: (exported_at or dt_now_utc()).isoformat(),
        const.SAVE_DATA: {
            bucket: copy.deepcopy(state[bucket])
            for bucket in (
                const.DATA_PROFILE,
                const.DATA_TASKS,
                const.DATA_RIVAL,
                const.DATA_SETTINGS,
                const.DATA_META,
            )
        },
    }


def parse_save_blob(blob: Any) -> dict[str, Any]:
    """Validate a save blob and return a copy of its data section.

    Accepts the blob as a dict or as a JSON string.

    Raises:
        ImportFormatError: If the JSON is malformed, the app or format tag
            does not match, the version is unsupported or a required field
            is missing or malformed.
    """
    if isinstance(blob, (str, bytes)):
        try:
            blob = json.loads(blob)
        except json.JSONDecodeError as err:
            raise ImportFormatError(f"invalid JSON: {err.msg}") from err

    if not isinstance(blob, dict):
        raise ImportFormatError("save data is not an object")

    # Identity checks first, so a foreign file gets a clear reason
    if blob.get(const.SAVE_APP) != const.APP_NAME:
        raise ImportFormatError(f"unexpected app tag {blob.get(const.SAVE_APP)!r}")
    if blob.get(const.SAVE_FORMAT) != const.SAVE_FORMAT_TAG:
        raise ImportFormatError(
            f"unexpected format tag {blob.get(const.SAVE_FORMAT)!r}"
        )
    if blob.get(const.SAVE_VERSION) != const.SAVE_SCHEMA_VERSION:
        raise ImportFormatError(
            f"unsupported schema version {blob.get(const.SAVE_VERSION)!r}"
        )

    try:
        validated = SAVE_SCHEMA(copy.deepcopy(blob))
    except vol.Invalid as err:
        raise ImportFormatError(str(err)) from err

    return validated[const.SAVE_DATA]


def dump_save_blob(blob: dict[str, Any]) -> str:
    """Serialize a save blob to indented JSON."""
    return json.dumps(blob, indent=2, ensure_ascii=False)


def validate_save_json(json_str: str) -> bool:
    """Return True if a JSON string holds an importable save blob."""
    try:
        parse_save_blob(json_str)
    except ImportFormatError as err:
        const.LOGGER.debug("DEBUG: Save JSON rejected: %s", err.reason)
        return False
    return True
