"""Travel period clustering"""

from datetime import timedelta
from typing import Iterable, List

from banking_intel.domain.keywords import TRAVEL_KEYWORDS, matches_any
from banking_intel.domain.models import AnalysisStatus, Transaction, TravelAnalysis, TravelPeriod
from banking_intel.utils.date_utils import days_between

MAX_GAP = timedelta(days=5)
MIN_TRANSACTIONS_FOR_ANALYSIS = 5


def is_travel_transaction(txn: Transaction) -> bool:
    return matches_any(txn.description, TRAVEL_KEYWORDS) or matches_any(txn.category, ("TRAVEL",))


def _close_period(txns: List[Transaction]) -> TravelPeriod:
    start, end = txns[0].date, txns[-1].date
    return TravelPeriod(
        start_date=start,
        end_date=end,
        duration_days=days_between(start, end) + 1,
        total_spend=sum(abs(t.amount) for t in txns),
        transaction_count=len(txns),
    )


def cluster_travel_periods(transactions: Iterable[Transaction]) -> TravelAnalysis:
    """
    Group travel-keyword transactions into periods.

    Matches are sorted by date; a match more than 5 days after the latest
    transaction of the open period starts a new one (exactly 5 days merges).
    Undated matches count toward spend but cannot be placed in a period.
    """
    transactions = list(transactions)
    if len(transactions) < MIN_TRANSACTIONS_FOR_ANALYSIS:
        return TravelAnalysis(status=AnalysisStatus.INSUFFICIENT_DATA)

    travel_txns = [t for t in transactions if is_travel_transaction(t)]
    dated = sorted((t for t in travel_txns if t.date is not None), key=lambda t: t.date)

    periods: List[TravelPeriod] = []
    current: List[Transaction] = []
    for txn in dated:
        if current and txn.date - current[-1].date > MAX_GAP:
            periods.append(_close_period(current))
            current = []
        current.append(txn)
    if current:
        periods.append(_close_period(current))

    return TravelAnalysis(
        status=AnalysisStatus.OK,
        periods=tuple(periods),
        travel_transaction_count=len(travel_txns),
        travel_spend=sum(abs(t.amount) for t in travel_txns),
    )
