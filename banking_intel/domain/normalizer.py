"""
Financial data normalization.

Upstream sources are unreliable: relational stores hand back decimals as
strings and uploaded statements are often partially filled. Every numeric
field is therefore coerced with coerce_numeric, and bad values become 0
instead of raising.
"""

import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from banking_intel.domain.models import Account, DateRange, FinancialData, Transaction
from banking_intel.domain.timeframe import DEFAULT_WINDOW_DAYS
from banking_intel.utils.date_utils import parse_datetime, utc_now


def coerce_numeric(value: Any, fallback: float = 0.0) -> float:
    """
    Coerce a loosely-typed number to float.

    None, booleans, empty/non-numeric strings, NaN, infinities and ints too
    large for a float all map to fallback. Strings may carry thousands
    separators or a leading "$".
    """
    if value is None or isinstance(value, bool):
        return fallback

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return fallback
    else:
        text = str(value).strip().replace(",", "").replace("$", "")
        if not text:
            return fallback
        try:
            number = float(text)
        except ValueError:
            return fallback

    if not math.isfinite(number):
        return fallback
    return number


def _field(raw: Any, *names: str, default: Any = None) -> Any:
    """First non-None value among the given keys/attributes"""
    for name in names:
        if isinstance(raw, Mapping):
            value = raw.get(name)
        else:
            value = getattr(raw, name, None)
        if value is not None:
            return value
    return default


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def normalize_account(raw: Any, index: int = 0) -> Account:
    credit_limit = _field(raw, "creditLimit", "credit_limit")
    return Account(
        account_id=str(_field(raw, "accountId", "account_id", "id", default=f"account-{index}")),
        name=str(_field(raw, "name", default="Account")),
        type=str(_field(raw, "type", default="Unknown")),
        subtype=_optional_text(_field(raw, "subtype")),
        balance=coerce_numeric(_field(raw, "balance")),
        available_balance=coerce_numeric(_field(raw, "availableBalance", "available_balance")),
        currency=str(_field(raw, "currency", default="USD")),
        credit_limit=coerce_numeric(credit_limit) if credit_limit is not None else None,
    )


def normalize_transaction(raw: Any, index: int = 0) -> Transaction:
    return Transaction(
        transaction_id=str(_field(raw, "transactionId", "transaction_id", "id", default=f"txn-{index}")),
        account_id=str(_field(raw, "accountId", "account_id", default="")),
        date=parse_datetime(_field(raw, "date")),
        description=str(_field(raw, "description", default="")),
        amount=coerce_numeric(_field(raw, "amount")),
        category=_optional_text(_field(raw, "category")),
        merchant_name=_optional_text(_field(raw, "merchantName", "merchant_name")),
        pending=_coerce_flag(_field(raw, "pending", default=False)),
    )


def normalize_financial_data(
    accounts: Optional[Iterable[Any]],
    transactions: Optional[Iterable[Any]],
    date_range: DateRange,
    timeframe: str,
    user: Optional[Mapping[str, Any]] = None,
) -> FinancialData:
    """Build the canonical data set from already-fetched records"""
    return FinancialData(
        accounts=tuple(normalize_account(a, i) for i, a in enumerate(accounts or [])),
        transactions=tuple(normalize_transaction(t, i) for i, t in enumerate(transactions or [])),
        date_range=date_range,
        timeframe=timeframe,
        user=dict(user) if user else None,
    )


def _statement_date_range(raw: Any, now: datetime, default_range: Optional[DateRange]) -> DateRange:
    start = parse_datetime(_field(raw, "startDate", "start_date")) if raw else None
    end = parse_datetime(_field(raw, "endDate", "end_date")) if raw else None
    if start is None and end is None and default_range is not None:
        return default_range
    end = end or now
    start = start or end - timedelta(days=DEFAULT_WINDOW_DAYS)
    return DateRange(start_date=start, end_date=end)


def normalize_statement(
    statement: Mapping[str, Any],
    now: Optional[datetime] = None,
    default_range: Optional[DateRange] = None,
    default_timeframe: str = "30d",
) -> FinancialData:
    """
    Build the canonical data set from an uploaded statement payload.

    A missing date range falls back to default_range, or to the 30 days
    ending now when none is given. A statement whose start date is after
    its end date raises InvalidDateRangeError.
    """
    now = now or utc_now()
    return normalize_financial_data(
        accounts=statement.get("accounts"),
        transactions=statement.get("transactions"),
        date_range=_statement_date_range(_field(statement, "dateRange", "date_range"), now, default_range),
        timeframe=str(statement.get("timeframe") or default_timeframe),
        user=statement.get("user"),
    )
