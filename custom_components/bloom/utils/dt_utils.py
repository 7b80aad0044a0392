# File: utils/dt_utils.py
"""Date and time utilities for Bloom.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Every habit record, food log and plant timestamp is keyed by a canonical local
calendar date string ("YYYY-MM-DD"). Time of day never matters.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date key
    - dt_now_iso: Get current datetime as ISO string
    - dt_parse_date: Parse date keys and datetime strings into dates
    - dt_date_key: Normalize any date-ish input to a date key
    - dt_days_between: Whole calendar days between two date keys
    - dt_trailing_dates: Date keys for a trailing window ending today
"""

from __future__ import annotations

from datetime import date, datetime
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil import parser as dt_parser
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


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
    """Return today's date key (YYYY-MM-DD) in local timezone.

    Example:
        "2025-04-07"
    """
    return dt_today_local(tz).isoformat()


def dt_now_iso(tz: ZoneInfo | None = None) -> str:
    """Return the current local datetime as an ISO 8601 string."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).isoformat()


# ==============================================================================
# Parsing / Normalization
# ==============================================================================


def dt_parse_date(value: str | date | datetime | None) -> date | None:
    """Safely parse a date key, ISO datetime string, or date object.

    Datetimes are truncated to their calendar date (time of day is ignored).

    Args:
        value: "2025-04-07", "2025-04-07T23:10:00+02:00", a date or a datetime

    Returns:
        datetime.date or None if parsing fails.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        pass

    try:
        return dt_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        _LOGGER.debug("Unable to parse date value: %s", value)
        return None


def dt_date_key(value: str | date | datetime | None) -> str | None:
    """Normalize a date-ish value to its canonical key, or None if invalid."""
    parsed = dt_parse_date(value)
    return parsed.isoformat() if parsed else None


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_days_between(
    start: str | date | datetime | None, end: str | date | datetime | None
) -> int | None:
    """Return whole calendar days between two dates (absolute value).

    Both inputs are truncated to date-only, so 23:59 → 00:01 is one day.

    Returns:
        Non-negative day count, or None if either input cannot be parsed.

    Examples:
        dt_days_between("2025-04-01", "2025-04-03") → 2
        dt_days_between("2025-04-03", "2025-04-01") → 2
    """
    start_date = dt_parse_date(start)
    end_date = dt_parse_date(end)
    if start_date is None or end_date is None:
        return None
    return abs((end_date - start_date).days)


def dt_add_days(value: str | date, days: int) -> str:
    """Return the date key `days` after (or before, if negative) `value`."""
    base = dt_parse_date(value)
    if base is None:
        raise ValueError(f"Invalid date: {value}")
    return (base + relativedelta(days=days)).isoformat()


def dt_trailing_dates(end: str | date, days: int) -> list[str]:
    """Return `days` consecutive date keys ending at `end`, oldest first.

    Example:
        dt_trailing_dates("2025-04-07", 3) → ["2025-04-05", "2025-04-06", "2025-04-07"]
    """
    return [dt_add_days(end, -offset) for offset in range(days - 1, -1, -1)]
