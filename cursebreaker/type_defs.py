"""Type definitions for Cursebreaker Codex data structures.

TypedDict is used for every persisted structure whose keys are fixed at
design time (tracks, tasks, history entries, rival, settings). Structures
keyed at runtime (the per-attribute stats map) use ``dict[str, ...]``.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime tolerance for missing keys
(``.get()`` defaults) stays in the engines and managers.

IMPORTANT: This file must NOT import from coordinator.py or the managers to
avoid circular dependencies. Only typing machinery is imported here.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TaskId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Progression Tracks
# =============================================================================


class ExperienceTrack(TypedDict):
    """Rank-based experience track shared by the user and the rival.

    ``exp_to_next_level`` is always derived from the position and never
    edited on its own.
    """

    rank_name: str
    sub_rank: int  # 1..MAX_SUB_RANKS
    total_exp: int
    current_exp_in_level: int
    exp_to_next_level: int


class StatTrack(TypedDict):
    """Per-attribute experience track (plain integer levels, no rank names)."""

    level: int
    exp: int
    exp_to_next_level: int


# =============================================================================
# Tasks and History
# =============================================================================


class TaskData(TypedDict):
    """A daily task, a recurring ritual, or a scheduled event."""

    id: TaskId
    name: str
    difficulty: str
    attribute: str
    task_type: str
    is_completed: bool
    date_added: ISODate
    base_exp_value: int
    date_completed: NotRequired[ISODate | None]

    # Ritual fields
    repeat_interval_days: NotRequired[int]
    next_due_date: NotRequired[ISODate | None]
    last_completed_date: NotRequired[ISODate | None]
    series_anchor_date: NotRequired[ISODate | None]

    # Event fields
    scheduled_date: NotRequired[ISODate]
    is_all_day: NotRequired[bool]
    start_time: NotRequired[str | None]
    end_time: NotRequired[str | None]
    reminder_offset_minutes: NotRequired[int | None]


class HistoryEntry(TypedDict):
    """Immutable record of one completion, keyed by task id and date."""

    task_id: TaskId
    completion_date: ISODate
    exp_awarded: int
    stat_exp_gained: int | None
    attribute_affected_for_stat_exp: str | None
    recorded_at: ISODatetime
    task: TaskData  # Snapshot of the task at completion time


# =============================================================================
# Profile, Rival, Settings
# =============================================================================


class ProfileData(TypedDict):
    """The user's progression state."""

    track: ExperienceTrack
    stats: dict[str, StatTrack]  # Keyed by attribute name
    current_streak: int
    last_fully_completed_day: ISODate | None
    daily_completion_percentage: float
    exp_gained_today: int
    last_exp_reset_date: ISODate | None
    task_history: list[HistoryEntry]
    journal_entries: dict[ISODate, str]
    custom_quote: str


class RivalHistoryEntry(TypedDict):
    """One processed rival day."""

    date: ISODate
    exp_gained: int
    total_exp: int


class RivalData(TypedDict):
    """The rival NPC."""

    name: str
    track: ExperienceTrack
    next_exp_gain_time: ISODatetime | None
    exp_history: list[RivalHistoryEntry]
    last_taunt: NotRequired[str | None]


class AppSettings(TypedDict):
    """User-adjustable engine settings."""

    rival_difficulty: str  # Easy | Normal | Hard
    auto_assign_stat_exp: bool
    enable_animations: bool
    sound_enabled: bool


class MetaData(TypedDict):
    """Persisted markers guarding the once-per-day background jobs."""

    last_ritual_rollover_date: ISODate | None
    last_streak_check_date: ISODate | None


class EngineState(TypedDict):
    """Complete state snapshot owned by the coordinator."""

    profile: ProfileData
    tasks: list[TaskData]
    rival: RivalData
    settings: AppSettings
    meta: MetaData


class SaveBlob(TypedDict):
    """Versioned export of the complete state."""

    app: str
    format: str
    schema_version: str
    exported_at: ISODatetime
    data: EngineState
