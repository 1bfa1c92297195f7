"""Tests for backup, settings and taunt helpers."""

from __future__ import annotations

from datetime import UTC, datetime
import json
import random

import pytest

from cursebreaker import const
from cursebreaker.exceptions import ImportFormatError, TaskValidationError
from cursebreaker.helpers.backup_helpers import (
    build_save_blob,
    dump_save_blob,
    parse_save_blob,
    validate_save_json,
)
from cursebreaker.helpers.settings_helpers import merge_settings
from cursebreaker.helpers.taunt_helpers import (
    PregeneratedTauntProvider,
    safe_generate_taunt,
    truncate_taunt,
)
from cursebreaker.store import CodexStore

EXPORTED_AT = datetime(2025, 5, 5, 12, 0, tzinfo=UTC)


@pytest.fixture
def blob() -> dict:
    return build_save_blob(CodexStore.get_default_structure(), EXPORTED_AT)


# =============================================================================
# TEST: SAVE BLOB
# =============================================================================


class TestSaveBlob:
    """Test build_save_blob / parse_save_blob."""

    def test_envelope(self, blob: dict) -> None:
        assert blob[const.SAVE_APP] == "Cursebreaker_Codex"
        assert blob[const.SAVE_FORMAT] == "cursebreaker-save"
        assert blob[const.SAVE_VERSION] == "1.0"
        assert blob[const.SAVE_EXPORTED_AT] == EXPORTED_AT.isoformat()
        assert set(blob[const.SAVE_DATA]) == {
            const.DATA_PROFILE,
            const.DATA_TASKS,
            const.DATA_RIVAL,
            const.DATA_SETTINGS,
            const.DATA_META,
        }

    def test_accepts_json_string(self, blob: dict) -> None:
        data = parse_save_blob(dump_save_blob(blob))
        assert data[const.DATA_TASKS] == []
        assert validate_save_json(json.dumps(blob))

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            (const.SAVE_APP, "SomethingElse"),
            (const.SAVE_FORMAT, "other-save"),
            (const.SAVE_VERSION, "2.0"),
        ],
    )
    def test_rejects_wrong_identity(self, blob: dict, key: str, value: str) -> None:
        blob[key] = value
        with pytest.raises(ImportFormatError):
            parse_save_blob(blob)

    def test_rejects_missing_section(self, blob: dict) -> None:
        del blob[const.SAVE_DATA][const.DATA_RIVAL]
        with pytest.raises(ImportFormatError):
            parse_save_blob(blob)

    def test_rejects_malformed_track(self, blob: dict) -> None:
        blob[const.SAVE_DATA][const.DATA_PROFILE][const.DATA_PROFILE_TRACK][
            const.DATA_TRACK_SUB_RANK
        ] = 42
        with pytest.raises(ImportFormatError):
            parse_save_blob(blob)

    def test_rejects_bad_json(self) -> None:
        with pytest.raises(ImportFormatError):
            parse_save_blob("{not json")
        assert not validate_save_json("[]")


# =============================================================================
# TEST: SAVE CONTENTS
# =============================================================================


def _history_entry(**overrides: object) -> dict:
    entry = {
        const.DATA_HISTORY_TASK_ID: "task-1",
        const.DATA_HISTORY_COMPLETION_DATE: "2025-05-04",
        const.DATA_HISTORY_EXP_AWARDED: 15,
        const.DATA_HISTORY_STAT_EXP: 7,
        const.DATA_HISTORY_STAT_ATTRIBUTE: const.ATTRIBUTE_STRENGTH,
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def full_blob(blob: dict) -> dict:
    data = blob[const.SAVE_DATA]
    data[const.DATA_PROFILE][const.DATA_PROFILE_HISTORY] = [_history_entry()]
    data[const.DATA_PROFILE][const.DATA_PROFILE_JOURNAL] = {"2025-05-04": "Trained"}
    data[const.DATA_RIVAL][const.DATA_RIVAL_EXP_HISTORY] = [
        {
            const.DATA_RIVAL_HISTORY_DATE: "2025-05-04",
            const.DATA_RIVAL_HISTORY_EXP_GAINED: 4,
            const.DATA_RIVAL_HISTORY_TOTAL_EXP: 4,
        }
    ]
    data[const.DATA_TASKS] = [
        {
            const.DATA_TASK_ID: "task-1",
            const.DATA_TASK_NAME: "Meditate",
            const.DATA_TASK_TYPE: const.TASK_TYPE_RITUAL,
            const.DATA_TASK_DATE_ADDED: "2025-05-01",
            const.DATA_TASK_BASE_EXP: 15,
            const.DATA_TASK_REPEAT_INTERVAL: 3,
            const.DATA_TASK_NEXT_DUE_DATE: "2025-05-07",
            const.DATA_TASK_LAST_COMPLETED_DATE: "2025-05-04",
            const.DATA_TASK_SERIES_ANCHOR: "2025-05-01",
        }
    ]
    return blob


class TestSaveBlobContents:
    """Test validation of the nested records inside a save blob."""

    def test_accepts_populated_save(self, full_blob: dict) -> None:
        data = parse_save_blob(full_blob)
        assert data[const.DATA_PROFILE][const.DATA_PROFILE_HISTORY] == [
            _history_entry()
        ]

    @pytest.mark.parametrize(
        "entry",
        [
            {
                const.DATA_HISTORY_COMPLETION_DATE: "2025-05-04",
                const.DATA_HISTORY_EXP_AWARDED: 15,
            },
            _history_entry(**{const.DATA_HISTORY_COMPLETION_DATE: "yesterday"}),
            _history_entry(**{const.DATA_HISTORY_EXP_AWARDED: "15"}),
            _history_entry(**{const.DATA_HISTORY_STAT_ATTRIBUTE: "Luck"}),
        ],
    )
    def test_rejects_bad_history_entry(self, full_blob: dict, entry: dict) -> None:
        full_blob[const.SAVE_DATA][const.DATA_PROFILE][const.DATA_PROFILE_HISTORY] = [
            entry
        ]
        with pytest.raises(ImportFormatError):
            parse_save_blob(full_blob)

    @pytest.mark.parametrize(
        "stats",
        [
            {const.ATTRIBUTE_STRENGTH: {const.DATA_STAT_LEVEL: "abc"}},
            {
                const.ATTRIBUTE_STRENGTH: {
                    const.DATA_STAT_LEVEL: 0,
                    const.DATA_STAT_EXP: 0,
                    const.DATA_STAT_EXP_TO_NEXT: 100,
                }
            },
            {"Luck": {}},
        ],
    )
    def test_rejects_bad_stats(self, full_blob: dict, stats: dict) -> None:
        full_blob[const.SAVE_DATA][const.DATA_PROFILE][const.DATA_PROFILE_STATS] = stats
        with pytest.raises(ImportFormatError):
            parse_save_blob(full_blob)

    def test_rejects_bad_rival_history(self, full_blob: dict) -> None:
        full_blob[const.SAVE_DATA][const.DATA_RIVAL][const.DATA_RIVAL_EXP_HISTORY][0][
            const.DATA_RIVAL_HISTORY_EXP_GAINED
        ] = -3
        with pytest.raises(ImportFormatError):
            parse_save_blob(full_blob)

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            (const.DATA_TASK_REPEAT_INTERVAL, 0),
            (const.DATA_TASK_NEXT_DUE_DATE, "soon"),
            (const.DATA_TASK_DATE_ADDED, None),
        ],
    )
    def test_rejects_bad_task_field(
        self, full_blob: dict, key: str, value: object
    ) -> None:
        full_blob[const.SAVE_DATA][const.DATA_TASKS][0][key] = value
        with pytest.raises(ImportFormatError):
            parse_save_blob(full_blob)

    def test_rejects_bad_journal_key(self, full_blob: dict) -> None:
        full_blob[const.SAVE_DATA][const.DATA_PROFILE][const.DATA_PROFILE_JOURNAL] = {
            "someday": "text"
        }
        with pytest.raises(ImportFormatError):
            parse_save_blob(full_blob)

    def test_rejects_track_past_threshold(self, full_blob: dict) -> None:
        track = full_blob[const.SAVE_DATA][const.DATA_RIVAL][const.DATA_RIVAL_TRACK]
        track[const.DATA_TRACK_CURRENT_EXP] = track[const.DATA_TRACK_EXP_TO_NEXT]
        with pytest.raises(ImportFormatError):
            parse_save_blob(full_blob)

    def test_accepts_track_at_ceiling(self, full_blob: dict) -> None:
        full_blob[const.SAVE_DATA][const.DATA_PROFILE][const.DATA_PROFILE_TRACK] = {
            const.DATA_TRACK_RANK_NAME: const.RANK_NAMES_LIST[-1],
            const.DATA_TRACK_SUB_RANK: const.MAX_SUB_RANKS,
            const.DATA_TRACK_TOTAL_EXP: 999_999,
            const.DATA_TRACK_CURRENT_EXP: 500,
            const.DATA_TRACK_EXP_TO_NEXT: 500,
        }
        assert parse_save_blob(full_blob)


# =============================================================================
# TEST: SETTINGS
# =============================================================================


class TestSettings:
    """Test merge_settings."""

    def test_partial_merge(self) -> None:
        merged = merge_settings(
            dict(const.DEFAULT_APP_SETTINGS), {const.CONF_SOUND_ENABLED: False}
        )
        assert merged[const.CONF_SOUND_ENABLED] is False
        assert merged[const.CONF_RIVAL_DIFFICULTY] == const.RIVAL_DIFFICULTY_NORMAL

    def test_unknown_difficulty_rejected(self) -> None:
        with pytest.raises(TaskValidationError) as exc_info:
            merge_settings(None, {const.CONF_RIVAL_DIFFICULTY: "Nightmare"})
        assert exc_info.value.field == const.CONF_RIVAL_DIFFICULTY
        assert exc_info.value.translation_key == const.TRANS_KEY_INVALID_SETTINGS

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(TaskValidationError):
            merge_settings(None, {"volume": 11})


# =============================================================================
# TEST: TAUNTS
# =============================================================================


class _BrokenProvider:
    def generate(self, *args: object) -> str:
        raise RuntimeError("offline")


class _WordyProvider:
    def generate(self, *args: object) -> str:
        return " ".join(["blah"] * 30)


class TestTaunts:
    """Test safe_generate_taunt and the pregenerated provider."""

    def test_provider_failure_uses_fallback(self) -> None:
        taunt = safe_generate_taunt(_BrokenProvider(), 0.5, 0.7, "a", "b")
        assert taunt == const.TAUNT_FALLBACK

    def test_missing_provider_uses_fallback(self) -> None:
        assert safe_generate_taunt(None, 0.5, 0.7, "a", "b") == const.TAUNT_FALLBACK

    def test_long_taunt_truncated(self) -> None:
        taunt = safe_generate_taunt(_WordyProvider(), 0.5, 0.7, "a", "b")
        assert len(taunt.split()) == const.TAUNT_MAX_WORDS

    def test_truncate_keeps_short_text(self) -> None:
        assert truncate_taunt("Is that all?") == "Is that all?"

    def test_pregenerated_provider(self) -> None:
        provider = PregeneratedTauntProvider(random.Random(3))
        taunt = provider.generate(0.2, 0.8, "Aether Disciple (Sub-Rank 1)", "x")
        assert taunt
        assert len(taunt.split()) <= const.TAUNT_MAX_WORDS
