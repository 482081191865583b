"""Timeframe resolution - symbolic period to concrete date range"""

import re
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from banking_intel.domain.models import DateRange
from banking_intel.utils.date_utils import utc_now

ALL_TIME_START = datetime(2000, 1, 1)
DEFAULT_WINDOW_DAYS = 30

_TIMEFRAME_PATTERN = re.compile(r"^(\d+)([dmy])$")


def resolve_timeframe(timeframe: Optional[str], now: Optional[datetime] = None) -> DateRange:
    """
    Convert "30d" / "6m" / "2y" / "all" into a DateRange ending at now.

    Months and years are calendar arithmetic (Mar 31 - 1m = Feb 28/29).
    Anything else silently falls back to a 30-day window. A window too large
    to represent is clamped to the all-time start.
    """
    end_date = now or utc_now()
    text = (timeframe or "").strip().lower()

    if text == "all":
        return DateRange(start_date=min(ALL_TIME_START, end_date), end_date=end_date)

    match = _TIMEFRAME_PATTERN.match(text)
    if not match:
        return DateRange(start_date=end_date - timedelta(days=DEFAULT_WINDOW_DAYS), end_date=end_date)

    quantity = int(match.group(1))
    unit = match.group(2)

    try:
        if unit == "d":
            start_date = end_date - timedelta(days=quantity)
        elif unit == "m":
            start_date = end_date - relativedelta(months=quantity)
        else:
            start_date = end_date - relativedelta(years=quantity)
    except (OverflowError, ValueError):
        # window reaches past datetime.min; treat it as all-time
        start_date = min(ALL_TIME_START, end_date)

    return DateRange(start_date=start_date, end_date=end_date)
