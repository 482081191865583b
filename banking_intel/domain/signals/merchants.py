"""Merchant concentration analysis"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from banking_intel.domain.keywords import MERCHANT_PREFIXES
from banking_intel.domain.models import MerchantSignal, Transaction

UNKNOWN_MERCHANT = "Unknown"
TOP_MERCHANT_LIMIT = 10

_PREFIX_PATTERN = re.compile(
    r"^(?:" + "|".join(re.escape(p) for p in MERCHANT_PREFIXES) + r")(?:\s+|\s*[-*:]\s*)",
    re.IGNORECASE,
)
_SEPARATOR_PATTERN = re.compile(r"^[\s\-*:#]+")
_DATE_SUFFIX_PATTERN = re.compile(r"\s+\d{1,2}/\d{1,2}/\d{2,4}$")


def extract_merchant_name(description: Optional[str]) -> str:
    """
    Derive a merchant name from a raw descriptor.

    "POS DEBIT STARBUCKS #123 01/15/2024" -> "STARBUCKS #123"
    """
    if not description:
        return UNKNOWN_MERCHANT

    cleaned = description.strip()
    while True:
        stripped = _PREFIX_PATTERN.sub("", cleaned, count=1)
        if stripped == cleaned:
            break
        cleaned = stripped
    cleaned = _SEPARATOR_PATTERN.sub("", cleaned)
    cleaned = _DATE_SUFFIX_PATTERN.sub("", cleaned).strip()

    return cleaned or UNKNOWN_MERCHANT


def merchant_for(txn: Transaction) -> str:
    return txn.merchant_name or extract_merchant_name(txn.description)


def group_expenses_by_merchant(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    """Expense transactions keyed by merchant, in first-seen order"""
    groups: Dict[str, List[Transaction]] = {}
    for txn in transactions:
        if txn.is_expense:
            groups.setdefault(merchant_for(txn), []).append(txn)
    return groups


def analyze_merchants(
    transactions: Iterable[Transaction], limit: int = TOP_MERCHANT_LIMIT
) -> Tuple[MerchantSignal, ...]:
    """Top merchants by expense transaction count"""
    signals = [
        MerchantSignal(name=name, count=len(txns), total=sum(abs(t.amount) for t in txns))
        for name, txns in group_expenses_by_merchant(transactions).items()
    ]
    signals.sort(key=lambda m: m.count, reverse=True)
    return tuple(signals[:limit])
