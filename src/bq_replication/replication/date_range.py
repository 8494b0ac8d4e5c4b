"""
Date key helpers for date-sharded warehouse tables.

Date keys are ``YYYYMMDD`` strings, the suffix BigQuery date-sharded tables
carry (``events_20230101``).
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from bq_replication.config.models import DATE_KEY_FORMAT, SourceRole
from bq_replication.core.exceptions import InvalidDateFormatError

logger = structlog.get_logger(__name__)


def parse_date_key(field_name: str, value: str) -> datetime:
    """Parse a YYYYMMDD key, raising InvalidDateFormatError otherwise."""
    if not isinstance(value, str) or not (len(value) == 8 and value.isdigit()):
        raise InvalidDateFormatError(field_name, value)
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT)
    except ValueError as e:
        raise InvalidDateFormatError(field_name, value) from e


def generate_date_range(date_start: str, date_end: str) -> List[str]:
    """
    Inclusive, chronological list of date keys from start to end.

    Args:
        date_start: First date key (YYYYMMDD)
        date_end: Last date key (YYYYMMDD)

    Returns:
        Date keys from start through end. When end is before start only
        start is returned.

    Raises:
        InvalidDateFormatError: If either bound is not a valid YYYYMMDD date
    """
    start = parse_date_key("dateRangeStart", date_start)
    end = parse_date_key("dateRangeEnd", date_end)

    days = (end - start).days
    if days < 0:
        return [date_start]

    return [
        (start + timedelta(days=offset)).strftime(DATE_KEY_FORMAT)
        for offset in range(days + 1)
    ]


def create_date(
    timezone_name: str, replication_target: str, now: Optional[datetime] = None
) -> str:
    """
    Date key of the table a source should pick up today.

    The daily source reads yesterday's table (UTC now minus 24 hours), any
    other source reads the current one. The instant is converted to
    ``timezone_name``; an unknown timezone falls back to UTC with a warning.

    Args:
        timezone_name: IANA timezone name, e.g. ``America/New_York``
        replication_target: Source role name
        now: Current instant, defaults to the wall clock (for tests)
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    if replication_target == SourceRole.DAILY.value:
        now = now - timedelta(hours=24)

    try:
        tz = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Error parsing timezone string. Defaulting to UTC", timezone=timezone_name
        )
        return now.strftime(DATE_KEY_FORMAT)

    return now.astimezone(tz).strftime(DATE_KEY_FORMAT)
