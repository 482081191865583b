"""Temporal cadence analysis - weekday/weekend and time-of-day buckets"""

from typing import Iterable

from banking_intel.domain.models import CadenceProfile, Transaction

MIN_TRANSACTIONS_FOR_ANALYSIS = 5

MORNING_START_HOUR = 5
AFTERNOON_START_HOUR = 12
EVENING_START_HOUR = 18


def _percent(count: int, total: int) -> float:
    return (count / total) * 100 if total > 0 else 0.0


def analyze_cadence(transactions: Iterable[Transaction]) -> CadenceProfile:
    """
    Bucket expenses by day-of-week and hour-of-day.

    Each axis is normalized on its own so weekday+weekend and
    morning+afternoon+evening each sum to 100. Undated transactions are skipped.
    insufficient_data is set when the whole data set has fewer than 5
    transactions; counts are still reported.
    """
    transactions = list(transactions)

    weekday = weekend = morning = afternoon = evening = 0
    for txn in transactions:
        if not txn.is_expense or txn.date is None:
            continue

        if txn.date.weekday() >= 5:
            weekend += 1
        else:
            weekday += 1

        hour = txn.date.hour
        if MORNING_START_HOUR <= hour < AFTERNOON_START_HOUR:
            morning += 1
        elif AFTERNOON_START_HOUR <= hour < EVENING_START_HOUR:
            afternoon += 1
        else:
            evening += 1

    day_total = weekday + weekend
    time_total = morning + afternoon + evening

    return CadenceProfile(
        weekday_count=weekday,
        weekend_count=weekend,
        morning_count=morning,
        afternoon_count=afternoon,
        evening_count=evening,
        weekday_percent=_percent(weekday, day_total),
        weekend_percent=_percent(weekend, day_total),
        morning_percent=_percent(morning, time_total),
        afternoon_percent=_percent(afternoon, time_total),
        evening_percent=_percent(evening, time_total),
        insufficient_data=len(transactions) < MIN_TRANSACTIONS_FOR_ANALYSIS,
    )
