"""Recurring charge / subscription detection"""

from typing import Iterable, List, Sequence

from banking_intel.domain.keywords import SUBSCRIPTION_BRANDS, TECH_UTILITY_KEYWORDS, matches_any
from banking_intel.domain.models import AnalysisStatus, RecurringAnalysis, Subscription, Transaction
from banking_intel.domain.signals.merchants import group_expenses_by_merchant

MAX_AMOUNT_DEVIATION = 0.10
MIN_CHARGES_PER_MERCHANT = 2
MIN_EXPENSES_FOR_ANALYSIS = 2


def max_relative_deviation(amounts: Sequence[float]) -> float:
    """Largest |amount - mean| / mean across amounts (0 when mean is 0)"""
    if not amounts:
        return 0.0
    mean = sum(amounts) / len(amounts)
    if mean == 0:
        return 0.0
    return max(abs(a - mean) / mean for a in amounts)


def detect_subscriptions(transactions: Iterable[Transaction]) -> RecurringAnalysis:
    """
    Find merchants with repeated, amount-stable debits.

    A merchant with 2+ expenses qualifies when its amounts deviate less than
    10% from their mean ("subscription") or its name contains a known
    subscription brand ("recurring" when amounts vary). Results are sorted by
    average amount, largest first. Fewer than 2 expenses in the whole data
    set yields INSUFFICIENT_DATA rather than an empty list.
    """
    transactions = list(transactions)
    if sum(1 for t in transactions if t.is_expense) < MIN_EXPENSES_FOR_ANALYSIS:
        return RecurringAnalysis(status=AnalysisStatus.INSUFFICIENT_DATA)

    subscriptions: List[Subscription] = []
    for merchant, txns in group_expenses_by_merchant(transactions).items():
        if len(txns) < MIN_CHARGES_PER_MERCHANT:
            continue

        amounts = [abs(t.amount) for t in txns]
        deviation = max_relative_deviation(amounts)
        is_stable = deviation < MAX_AMOUNT_DEVIATION

        if not (is_stable or matches_any(merchant, SUBSCRIPTION_BRANDS)):
            continue

        dates = [t.date for t in txns if t.date is not None]
        subscriptions.append(
            Subscription(
                merchant=merchant,
                average_amount=sum(amounts) / len(amounts),
                frequency="monthly" if len(txns) > 2 else "periodic",
                last_date=max(dates) if dates else None,
                count=len(txns),
                type="subscription" if is_stable else "recurring",
            )
        )

    subscriptions.sort(key=lambda s: s.average_amount, reverse=True)
    tech = [s for s in subscriptions if matches_any(s.merchant, TECH_UTILITY_KEYWORDS)]

    return RecurringAnalysis(
        status=AnalysisStatus.OK,
        subscriptions=tuple(subscriptions),
        tech_subscriptions=tuple(tech),
    )
