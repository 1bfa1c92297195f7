# File: const.py
"""Constants for the Cursebreaker Codex progression engine.

This file centralizes storage keys, data dictionary keys, leveling and rival
tuning values, event names and defaults for consistency across the engine.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General / Engine Information
# ------------------------------------------------------------------------------------------------
APP_NAME = "Cursebreaker_Codex"

# Logger
LOGGER = logging.getLogger(__package__)

# Storage keys (one entry per key in the injected key-value store)
STORAGE_KEY_PROFILE = f"{APP_NAME}UserProfile"
STORAGE_KEY_TASKS = f"{APP_NAME}Tasks"
STORAGE_KEY_RIVAL = f"{APP_NAME}Rival"
STORAGE_KEY_SETTINGS = f"{APP_NAME}Settings"
STORAGE_KEY_META = f"{APP_NAME}Meta"

# Save file identity
SAVE_FORMAT_TAG = "cursebreaker-save"
SAVE_SCHEMA_VERSION = "1.0"
SAVE_APP = "app"
SAVE_FORMAT = "format"
SAVE_VERSION = "schema_version"
SAVE_EXPORTED_AT = "exported_at"
SAVE_DATA = "data"

# ------------------------------------------------------------------------------------------------
# Top-level state buckets
# ------------------------------------------------------------------------------------------------
DATA_PROFILE = "profile"
DATA_TASKS = "tasks"
DATA_RIVAL = "rival"
DATA_SETTINGS = "settings"
DATA_META = "meta"

# Meta (persisted "last run" markers for the background jobs)
DATA_META_LAST_RITUAL_ROLLOVER = "last_ritual_rollover_date"
DATA_META_LAST_STREAK_CHECK = "last_streak_check_date"

# ------------------------------------------------------------------------------------------------
# Experience tracks
# ------------------------------------------------------------------------------------------------
DATA_TRACK_RANK_NAME = "rank_name"
DATA_TRACK_SUB_RANK = "sub_rank"
DATA_TRACK_TOTAL_EXP = "total_exp"
DATA_TRACK_CURRENT_EXP = "current_exp_in_level"
DATA_TRACK_EXP_TO_NEXT = "exp_to_next_level"

DATA_STAT_LEVEL = "level"
DATA_STAT_EXP = "exp"
DATA_STAT_EXP_TO_NEXT = "exp_to_next_level"

# ------------------------------------------------------------------------------------------------
# Profile
# ------------------------------------------------------------------------------------------------
DATA_PROFILE_TRACK = "track"
DATA_PROFILE_STATS = "stats"
DATA_PROFILE_STREAK = "current_streak"
DATA_PROFILE_LAST_FULL_DAY = "last_fully_completed_day"
DATA_PROFILE_COMPLETION_PERCENTAGE = "daily_completion_percentage"
DATA_PROFILE_EXP_GAINED_TODAY = "exp_gained_today"
DATA_PROFILE_LAST_EXP_RESET = "last_exp_reset_date"
DATA_PROFILE_HISTORY = "task_history"
DATA_PROFILE_JOURNAL = "journal_entries"
DATA_PROFILE_CUSTOM_QUOTE = "custom_quote"

# ------------------------------------------------------------------------------------------------
# Tasks
# ------------------------------------------------------------------------------------------------
DATA_TASK_ID = "id"
DATA_TASK_NAME = "name"
DATA_TASK_DIFFICULTY = "difficulty"
DATA_TASK_ATTRIBUTE = "attribute"
DATA_TASK_TYPE = "task_type"
DATA_TASK_IS_COMPLETED = "is_completed"
DATA_TASK_DATE_ADDED = "date_added"
DATA_TASK_DATE_COMPLETED = "date_completed"
DATA_TASK_BASE_EXP = "base_exp_value"
# Ritual
DATA_TASK_REPEAT_INTERVAL = "repeat_interval_days"
DATA_TASK_NEXT_DUE_DATE = "next_due_date"
DATA_TASK_LAST_COMPLETED_DATE = "last_completed_date"
DATA_TASK_SERIES_ANCHOR = "series_anchor_date"
# Event
DATA_TASK_SCHEDULED_DATE = "scheduled_date"
DATA_TASK_IS_ALL_DAY = "is_all_day"
DATA_TASK_START_TIME = "start_time"
DATA_TASK_END_TIME = "end_time"
DATA_TASK_REMINDER_OFFSET = "reminder_offset_minutes"

TASK_TYPE_DAILY = "daily"
TASK_TYPE_RITUAL = "ritual"
TASK_TYPE_EVENT = "event"
TASK_TYPES = [TASK_TYPE_DAILY, TASK_TYPE_RITUAL, TASK_TYPE_EVENT]

DIFFICULTY_EASY = "Easy"
DIFFICULTY_MODERATE = "Moderate"
DIFFICULTY_HARD = "Hard"

ATTRIBUTE_STRENGTH = "Strength"
ATTRIBUTE_INTELLIGENCE = "Intelligence"
ATTRIBUTE_ENDURANCE = "Endurance"
ATTRIBUTE_CREATIVITY = "Creativity"
ATTRIBUTE_CHARISMA = "Charisma"
ATTRIBUTE_NONE = "None"
ATTRIBUTES_LIST = [
    ATTRIBUTE_STRENGTH,
    ATTRIBUTE_INTELLIGENCE,
    ATTRIBUTE_ENDURANCE,
    ATTRIBUTE_CREATIVITY,
    ATTRIBUTE_CHARISMA,
]
ATTRIBUTES = [*ATTRIBUTES_LIST, ATTRIBUTE_NONE]

# ------------------------------------------------------------------------------------------------
# History entries
# ------------------------------------------------------------------------------------------------
DATA_HISTORY_TASK = "task"
DATA_HISTORY_TASK_ID = "task_id"
DATA_HISTORY_COMPLETION_DATE = "completion_date"
DATA_HISTORY_EXP_AWARDED = "exp_awarded"
DATA_HISTORY_STAT_EXP = "stat_exp_gained"
DATA_HISTORY_STAT_ATTRIBUTE = "attribute_affected_for_stat_exp"
DATA_HISTORY_RECORDED_AT = "recorded_at"

MAX_TASK_HISTORY_ENTRIES = 100

# ------------------------------------------------------------------------------------------------
# Rival
# ------------------------------------------------------------------------------------------------
DATA_RIVAL_NAME = "name"
DATA_RIVAL_TRACK = "track"
DATA_RIVAL_NEXT_GAIN_TIME = "next_exp_gain_time"
DATA_RIVAL_EXP_HISTORY = "exp_history"
DATA_RIVAL_LAST_TAUNT = "last_taunt"

DATA_RIVAL_HISTORY_DATE = "date"
DATA_RIVAL_HISTORY_EXP_GAINED = "exp_gained"
DATA_RIVAL_HISTORY_TOTAL_EXP = "total_exp"

MAX_RIVAL_HISTORY_ENTRIES = 30

RIVAL_NAMES_POOL = ["Kairos", "Zevik", "Ayen", "Lyra", "Sorin", "Vexia", "Draven"]
DEFAULT_RIVAL_NAME = "Kairos"

# Rival gets this share of what the user gained "yesterday"
RIVAL_USER_DAILY_EXP_PERCENTAGE = 0.3
RIVAL_DIFFICULTY_EASY = "Easy"
RIVAL_DIFFICULTY_NORMAL = "Normal"
RIVAL_DIFFICULTY_HARD = "Hard"
RIVAL_DIFFICULTY_MULTIPLIERS = {
    RIVAL_DIFFICULTY_EASY: 0.7,
    RIVAL_DIFFICULTY_NORMAL: 1.0,
    RIVAL_DIFFICULTY_HARD: 1.3,
}
RIVAL_CATCH_UP_EXP_DIFFERENCE = 1000
RIVAL_CATCH_UP_BOOST_MULTIPLIER = 1.5
# Longer than a day so the boundary never lands before the user's own rollover
RIVAL_GAIN_INTERVAL_HOURS = 25

# Taunts
TAUNT_MAX_WORDS = 20
TAUNT_FALLBACK = "Hmph. My systems are... momentarily indisposed."
RIVAL_COMPLETION_RATE_MIN = 0.5
RIVAL_COMPLETION_RATE_SPREAD = 0.4

# ------------------------------------------------------------------------------------------------
# Leveling
# ------------------------------------------------------------------------------------------------
RANK_NAMES_LIST = [
    "Aether Disciple",
    "Mystic Initiate",
    "Astral Adept",
    "Voidwalker",
    "Shadow Forger",
    "Chrono Ascendant",
    "Oblivion Herald",
    "Eclipse Sovereign",
    "Eternal Apex",
]

MAX_SUB_RANKS = 10
BASE_EXP_PER_SUBRANK = 100
EXP_SCALING_FACTOR = 1.5

STAT_BASE_EXP = 100
STAT_SCALING_FACTOR = 1.2
STAT_MIN_LEVEL = 1

# Base EXP per task completion, before difficulty and rank scaling
BASE_TASK_EXP = 10
TASK_DIFFICULTY_EXP_MULTIPLIER = {
    DIFFICULTY_EASY: 1,
    DIFFICULTY_MODERATE: 1.5,
    DIFFICULTY_HARD: 2.5,
}
DIFFICULTIES = list(TASK_DIFFICULTY_EXP_MULTIPLIER)
# How much the rank index influences EXP gained from tasks
RANK_EXP_SCALING_FACTOR = 0.1
STAT_EXP_SHARE = 0.5
# A finished focus session earns one EXP per this many minutes of focus
FOCUS_EXP_MINUTES_PER_POINT = 5

DEFAULT_CUSTOM_QUOTE = "The journey of a thousand miles begins with a single step."
# Quotes that are replaced with the default (compared case-insensitively)
BLOCKED_CUSTOM_QUOTES = frozenset({"fuck"})

# ------------------------------------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------------------------------------
CONF_RIVAL_DIFFICULTY = "rival_difficulty"
CONF_AUTO_ASSIGN_STAT_EXP = "auto_assign_stat_exp"
CONF_ENABLE_ANIMATIONS = "enable_animations"
CONF_SOUND_ENABLED = "sound_enabled"

DEFAULT_APP_SETTINGS = {
    CONF_RIVAL_DIFFICULTY: RIVAL_DIFFICULTY_NORMAL,
    CONF_AUTO_ASSIGN_STAT_EXP: True,
    CONF_ENABLE_ANIMATIONS: True,
    CONF_SOUND_ENABLED: True,
}

# ------------------------------------------------------------------------------------------------
# Events (notification / sound side channel)
# ------------------------------------------------------------------------------------------------
EVENT_TASK_ADDED = "task_added"
EVENT_TASK_DELETED = "task_deleted"
EVENT_TASK_COMPLETED = "task_completed"
EVENT_TASK_UNDONE = "task_undone"
EVENT_LEVEL_UP = "level_up"
EVENT_STAT_LEVEL_UP = "stat_level_up"
EVENT_STREAK_CHANGED = "streak_changed"
EVENT_RIVAL_EXP_GAINED = "rival_exp_gained"
EVENT_RIVAL_PROVOKE = "rival_provoke"
EVENT_FOCUS_SESSION_COMPLETED = "focus_session_completed"

SOUND_TASK_COMPLETE = "taskComplete"
SOUND_LEVEL_UP = "levelUp"
SOUND_RIVAL_PROVOKE = "rivalProvoke"
SOUND_BUTTON_CLICK = "buttonClick"

EVENT_SOUND_MAP = {
    EVENT_TASK_COMPLETED: SOUND_TASK_COMPLETE,
    EVENT_TASK_UNDONE: SOUND_BUTTON_CLICK,
    EVENT_LEVEL_UP: SOUND_LEVEL_UP,
    EVENT_RIVAL_PROVOKE: SOUND_RIVAL_PROVOKE,
}

# ------------------------------------------------------------------------------------------------
# Validation error keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_INVALID_TASK_NAME = "invalid_task_name"
TRANS_KEY_INVALID_DIFFICULTY = "invalid_difficulty"
TRANS_KEY_INVALID_ATTRIBUTE = "invalid_attribute"
TRANS_KEY_INVALID_TASK_TYPE = "invalid_task_type"
TRANS_KEY_INVALID_REPEAT_INTERVAL = "invalid_repeat_interval"
TRANS_KEY_MISSING_SCHEDULED_DATE = "missing_scheduled_date"
TRANS_KEY_MISSING_START_TIME = "missing_start_time"
TRANS_KEY_END_BEFORE_START = "end_time_before_start_time"
TRANS_KEY_INVALID_REMINDER_OFFSET = "invalid_reminder_offset"
TRANS_KEY_INVALID_SETTINGS = "invalid_settings"
TRANS_KEY_INVALID_FOCUS_DURATION = "invalid_focus_duration"
TRANS_KEY_INVALID_JOURNAL_DATE = "invalid_journal_date"

# Date formats
FORMAT_TIME = "%H:%M"
