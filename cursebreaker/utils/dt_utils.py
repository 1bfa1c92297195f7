# File: utils/dt_utils.py
"""Date and time utilities for Cursebreaker Codex.

Pure Python date/time functions with no engine state.
Uses standard library datetime and zoneinfo plus python-dateutil.

Functions:
    - set_default_timezone / get_default_timezone: Local zone configuration
    - dt_today_local / dt_today_iso: Today's date in the local zone
    - dt_now_utc / dt_now_iso: Current datetime
    - as_utc / as_local: Timezone conversion
    - start_of_local_day: Local midnight of a datetime
    - dt_parse_date / dt_parse_datetime / dt_parse_time: Safe parsing
    - dt_to_date: Normalize date-like inputs to a `datetime.date`
    - dt_add_days / dt_add_hours: Interval arithmetic
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil import parser as dt_parser
from dateutil.relativedelta import relativedelta

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by the host
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone used to derive "today".

    Args:
        tz: ZoneInfo object representing the user's timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string."""
    return dt_now_utc().isoformat()


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in the default timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be in UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def start_of_local_day(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get the start of day (00:00:00) for a datetime in local timezone.

    Args:
        dt_obj: Datetime object (can be in any timezone)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime at 00:00:00 in local timezone (timezone-aware)
    """
    local_dt = as_local(dt_obj, tz)
    return local_dt.replace(hour=0, minute=0, second=0, microsecond=0)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse an ISO date string into a `datetime.date`.

    Returns:
        datetime.date or None if the input is empty or malformed.
    """
    if not date_str or not isinstance(date_str, str):
        return None
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        _LOGGER.debug("Unparseable date string: %s", date_str)
        return None


def dt_parse_datetime(dt_str: str | None) -> datetime | None:
    """Parse a datetime string into a UTC-aware datetime.

    Uses dateutil so that both ISO strings and looser formats are accepted.
    """
    if not dt_str or not isinstance(dt_str, str):
        return None
    try:
        parsed = dt_parser.isoparse(dt_str)
    except ValueError:
        try:
            parsed = dt_parser.parse(dt_str)
        except (ValueError, OverflowError):
            _LOGGER.debug("Unparseable datetime string: %s", dt_str)
            return None
    return as_utc(parsed)


def dt_parse_time(time_str: str | None) -> time | None:
    """Parse an "HH:MM" string into a `datetime.time`."""
    if not time_str or not isinstance(time_str, str):
        return None
    try:
        return datetime.strptime(time_str, "%H:%M").time()
    except ValueError:
        return None


def dt_to_date(value: str | date | datetime | None) -> date | None:
    """Normalize a date-like input to a `datetime.date`.

    Datetimes are converted to the local zone before taking the date part.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_local(value).date()
    if isinstance(value, date):
        return value
    return dt_parse_date(value)


# ==============================================================================
# Interval Arithmetic
# ==============================================================================


def dt_add_days(base: date, days: int) -> date:
    """Add a (possibly negative) number of days to a date."""
    return base + relativedelta(days=days)


def dt_add_hours(base: datetime, hours: int) -> datetime:
    """Add a number of hours to a datetime."""
    return base + relativedelta(hours=hours)
