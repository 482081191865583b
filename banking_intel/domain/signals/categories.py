"""Category frequency analysis"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from banking_intel.domain.keywords import classify_elasticity
from banking_intel.domain.models import CategorySignal, Transaction

UNCATEGORIZED = "Uncategorized"
TOP_CATEGORY_LIMIT = 10


@dataclass(frozen=True)
class CategoryGroup:
    name: str
    count: int
    total: float


def group_categories(transactions: Iterable[Transaction]) -> List[CategoryGroup]:
    """
    Group expenses by category, most frequent first.

    Ties keep first-seen order (sorted() is stable over dict insertion order).
    """
    counts: Dict[str, int] = {}
    totals: Dict[str, float] = {}
    for txn in transactions:
        if not txn.is_expense:
            continue
        name = txn.category or UNCATEGORIZED
        counts[name] = counts.get(name, 0) + 1
        totals[name] = totals.get(name, 0.0) + abs(txn.amount)

    groups = [CategoryGroup(name=name, count=counts[name], total=totals[name]) for name in counts]
    return sorted(groups, key=lambda g: g.count, reverse=True)


def analyze_categories(
    transactions: Iterable[Transaction], limit: int = TOP_CATEGORY_LIMIT
) -> Tuple[CategorySignal, ...]:
    """
    Top categories by transaction count with elasticity labels.

    percent_of_total is relative to the returned top set only, not to all
    categories, so the returned percentages always sum to 100.
    """
    top = group_categories(transactions)[:limit]
    top_count = sum(g.count for g in top)

    return tuple(
        CategorySignal(
            name=g.name,
            count=g.count,
            total=g.total,
            percent_of_total=(g.count / top_count) * 100 if top_count > 0 else 0.0,
            elasticity=classify_elasticity(g.name),
        )
        for g in top
    )
