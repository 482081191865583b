"""Date manipulation utilities"""

import math
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

SECONDS_PER_DAY = 86_400


def utc_now() -> datetime:
    """Current UTC time as a naive datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting aware datetimes to UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Leniently parse a transaction/statement date.

    Accepts datetime, date, ISO strings and most human formats. Returns None
    for anything that cannot be parsed so callers can skip the record.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return to_naive_utc(date_parser.parse(text))
    except (ValueError, OverflowError):
        return None


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up"""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def format_short_date(value: datetime) -> str:
    return value.strftime("%m/%d/%Y")
