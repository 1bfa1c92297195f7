"""Task lifecycle helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Task field defaults
- Business logic validation
- Complete task structure building

### Build Function
`build_task()` handles both create and update:
- Takes user input with DATA_TASK_* keys
- Generates the id (UUID) and stamps `date_added` for new tasks
- Freezes `base_exp_value` from the rank prevailing at creation
  (and again when an update changes the difficulty)
- Applies kind-specific defaults (ritual due date, event time window)
- Returns a complete task dict ready for storage

### Validation Function
`validate_task_data()` takes data with DATA_TASK_* keys and returns a dict
of errors ({field: translation_key}), empty when valid. `build_task()` runs
it and raises TaskValidationError for the first failure, so invalid tasks
never reach the engine.

Consumers:
- managers/task_manager.py (add/update)
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any
import uuid

from . import const
from .engines.task_engine import TaskEngine
from .exceptions import TaskValidationError
from .utils.dt_utils import dt_parse_time, dt_to_date, dt_today_local

if TYPE_CHECKING:
    from .type_defs import TaskData

# Fields only meaningful for one task kind
_RITUAL_FIELDS: frozenset[str] = frozenset(
    {
        const.DATA_TASK_REPEAT_INTERVAL,
        const.DATA_TASK_NEXT_DUE_DATE,
        const.DATA_TASK_LAST_COMPLETED_DATE,
        const.DATA_TASK_SERIES_ANCHOR,
    }
)
_EVENT_FIELDS: frozenset[str] = frozenset(
    {
        const.DATA_TASK_SCHEDULED_DATE,
        const.DATA_TASK_IS_ALL_DAY,
        const.DATA_TASK_START_TIME,
        const.DATA_TASK_END_TIME,
        const.DATA_TASK_REMINDER_OFFSET,
    }
)


# ==============================================================================
# VALIDATION
# ==============================================================================


def validate_task_data(
    data: dict[str, Any],
    *,
    is_update: bool = False,
) -> dict[str, str]:
    """Validate task business rules - SINGLE SOURCE OF TRUTH.

    Works with DATA_TASK_* keys (canonical storage format). In update mode
    `data` is the merged task (existing values overlaid with the changes).

    Args:
        data: Task data dict with DATA_TASK_* keys
        is_update: True if validating an edit of an existing task

    Returns:
        Dict of errors: {field: translation_key}
        Empty dict means validation passed.

    Validation Rules:
        1. Name not empty after stripping
        2. Difficulty, attribute and task type are known values
        3. Ritual: repeat interval is an integer >= 1
        4. Event: scheduled date present; timed events need a start time
           before the end time; reminder offset >= 0
    """
    errors: dict[str, str] = {}

    # === 1. Name validation ===
    name = data.get(const.DATA_TASK_NAME, "")
    if not isinstance(name, str) or not name.strip():
        errors[const.DATA_TASK_NAME] = const.TRANS_KEY_INVALID_TASK_NAME
        return errors

    # === 2. Enumerations ===
    if data.get(const.DATA_TASK_DIFFICULTY) not in const.DIFFICULTIES:
        errors[const.DATA_TASK_DIFFICULTY] = const.TRANS_KEY_INVALID_DIFFICULTY
        return errors
    if data.get(const.DATA_TASK_ATTRIBUTE) not in const.ATTRIBUTES:
        errors[const.DATA_TASK_ATTRIBUTE] = const.TRANS_KEY_INVALID_ATTRIBUTE
        return errors

    task_type = data.get(const.DATA_TASK_TYPE)
    if task_type not in const.TASK_TYPES:
        errors[const.DATA_TASK_TYPE] = const.TRANS_KEY_INVALID_TASK_TYPE
        return errors

    # === 3. Ritual interval ===
    if task_type == const.TASK_TYPE_RITUAL:
        interval = data.get(const.DATA_TASK_REPEAT_INTERVAL)
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            errors[const.DATA_TASK_REPEAT_INTERVAL] = (
                const.TRANS_KEY_INVALID_REPEAT_INTERVAL
            )
        return errors

    # === 4. Event schedule ===
    if task_type == const.TASK_TYPE_EVENT:
        scheduled = dt_to_date(data.get(const.DATA_TASK_SCHEDULED_DATE))
        if scheduled is None:
            errors[const.DATA_TASK_SCHEDULED_DATE] = (
                const.TRANS_KEY_MISSING_SCHEDULED_DATE
            )
            return errors

        if data.get(const.DATA_TASK_IS_ALL_DAY, True):
            return errors

        start = dt_parse_time(data.get(const.DATA_TASK_START_TIME))
        end = dt_parse_time(data.get(const.DATA_TASK_END_TIME))
        if start is None:
            errors[const.DATA_TASK_START_TIME] = const.TRANS_KEY_MISSING_START_TIME
            return errors
        if end is not None and end <= start:
            errors[const.DATA_TASK_END_TIME] = const.TRANS_KEY_END_BEFORE_START
            return errors

        offset = data.get(const.DATA_TASK_REMINDER_OFFSET)
        if offset is not None and (
            isinstance(offset, bool) or not isinstance(offset, int) or offset < 0
        ):
            errors[const.DATA_TASK_REMINDER_OFFSET] = (
                const.TRANS_KEY_INVALID_REMINDER_OFFSET
            )

    if is_update and not errors:
        const.LOGGER.debug("DEBUG: Task Update - '%s' passed validation", name.strip())
    return errors


# ==============================================================================
# BUILD
# ==============================================================================


def build_task(
    user_input: dict[str, Any],
    existing: TaskData | dict[str, Any] | None = None,
    *,
    rank_name: str = const.RANK_NAMES_LIST[0],
    today: date | None = None,
) -> TaskData:
    """Build task data for create or update operations.

    One function handles both create (existing=None) and update
    (existing=TaskData). The task type cannot change on update.

    Args:
        user_input: Data with DATA_TASK_* keys (may have missing fields)
        existing: None for create, existing TaskData for update
        rank_name: The user's current rank, used to freeze base_exp_value
        today: Reference date for date_added (defaults to local today)

    Returns:
        Complete TaskData dict ready for storage

    Raises:
        TaskValidationError: If any validation rule fails

    Examples:
        # CREATE mode - generates UUID, stamps date_added
        task = build_task({DATA_TASK_NAME: "Read", DATA_TASK_TYPE: "daily"})

        # UPDATE mode - preserves existing fields not in user_input
        task = build_task({DATA_TASK_DIFFICULTY: "Hard"}, existing=old_task)
    """
    is_create = existing is None
    today = today or dt_today_local()

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    task_type = get_field(const.DATA_TASK_TYPE, const.TASK_TYPE_DAILY)
    if not is_create and task_type != existing.get(const.DATA_TASK_TYPE):
        raise TaskValidationError(
            field=const.DATA_TASK_TYPE,
            translation_key=const.TRANS_KEY_INVALID_TASK_TYPE,
        )

    raw_name = get_field(const.DATA_TASK_NAME, "")
    merged: dict[str, Any] = {
        const.DATA_TASK_NAME: raw_name.strip() if isinstance(raw_name, str) else raw_name,
        const.DATA_TASK_DIFFICULTY: get_field(
            const.DATA_TASK_DIFFICULTY, const.DIFFICULTY_EASY
        ),
        const.DATA_TASK_ATTRIBUTE: get_field(
            const.DATA_TASK_ATTRIBUTE, const.ATTRIBUTE_NONE
        ),
        const.DATA_TASK_TYPE: task_type,
    }
    if task_type == const.TASK_TYPE_RITUAL:
        merged[const.DATA_TASK_REPEAT_INTERVAL] = get_field(
            const.DATA_TASK_REPEAT_INTERVAL, 1
        )
    elif task_type == const.TASK_TYPE_EVENT:
        merged[const.DATA_TASK_SCHEDULED_DATE] = get_field(
            const.DATA_TASK_SCHEDULED_DATE, None
        )
        merged[const.DATA_TASK_IS_ALL_DAY] = bool(
            get_field(const.DATA_TASK_IS_ALL_DAY, True)
        )
        merged[const.DATA_TASK_START_TIME] = get_field(const.DATA_TASK_START_TIME, None)
        merged[const.DATA_TASK_END_TIME] = get_field(const.DATA_TASK_END_TIME, None)
        merged[const.DATA_TASK_REMINDER_OFFSET] = get_field(
            const.DATA_TASK_REMINDER_OFFSET, None
        )

    errors = validate_task_data(merged, is_update=not is_create)
    if errors:
        field, translation_key = next(iter(errors.items()))
        raise TaskValidationError(field=field, translation_key=translation_key)

    # --- Build complete task structure ---
    if is_create:
        task: dict[str, Any] = {
            const.DATA_TASK_ID: str(uuid.uuid4()),
            const.DATA_TASK_IS_COMPLETED: False,
            const.DATA_TASK_DATE_ADDED: today.isoformat(),
            const.DATA_TASK_DATE_COMPLETED: None,
            const.DATA_TASK_BASE_EXP: TaskEngine.calculate_base_exp(
                merged[const.DATA_TASK_DIFFICULTY], rank_name
            ),
        }
    else:
        task = {
            key: value
            for key, value in existing.items()
            if key not in _RITUAL_FIELDS | _EVENT_FIELDS
        }
        if merged[const.DATA_TASK_DIFFICULTY] != existing.get(
            const.DATA_TASK_DIFFICULTY
        ):
            task[const.DATA_TASK_BASE_EXP] = TaskEngine.calculate_base_exp(
                merged[const.DATA_TASK_DIFFICULTY], rank_name
            )
    task.update(merged)

    if task_type == const.TASK_TYPE_RITUAL:
        # Schedule state is owned by the engine; callers cannot set it
        task.pop(const.DATA_TASK_DATE_COMPLETED, None)
        previous = existing or {}
        next_due = previous.get(
            const.DATA_TASK_NEXT_DUE_DATE, task[const.DATA_TASK_DATE_ADDED]
        )
        task[const.DATA_TASK_NEXT_DUE_DATE] = next_due
        task[const.DATA_TASK_LAST_COMPLETED_DATE] = previous.get(
            const.DATA_TASK_LAST_COMPLETED_DATE
        )
        interval_changed = not is_create and previous.get(
            const.DATA_TASK_REPEAT_INTERVAL
        ) != task[const.DATA_TASK_REPEAT_INTERVAL]
        if is_create or interval_changed:
            # The series restarts from the pending due date
            task[const.DATA_TASK_SERIES_ANCHOR] = next_due
        else:
            task[const.DATA_TASK_SERIES_ANCHOR] = previous.get(
                const.DATA_TASK_SERIES_ANCHOR, next_due
            )
    elif task_type == const.TASK_TYPE_EVENT:
        task[const.DATA_TASK_SCHEDULED_DATE] = dt_to_date(
            task[const.DATA_TASK_SCHEDULED_DATE]
        ).isoformat()
        if task[const.DATA_TASK_IS_ALL_DAY]:
            # Time window and reminder only apply to timed events
            task[const.DATA_TASK_START_TIME] = None
            task[const.DATA_TASK_END_TIME] = None
            task[const.DATA_TASK_REMINDER_OFFSET] = None

    return task  # type: ignore[return-value]
