"""Unit tests for financial data normalization"""

import math
import pytest
from datetime import datetime
from decimal import Decimal
from banking_intel.domain.exceptions import InvalidDateRangeError
from banking_intel.domain.normalizer import (
    coerce_numeric,
    normalize_account,
    normalize_statement,
    normalize_transaction,
)
from banking_intel.domain.timeframe import resolve_timeframe

NOW = datetime(2024, 6, 30, 12, 0)


@pytest.mark.parametrize(
    "value, expected",
    [
        (12.5, 12.5),
        (3, 3.0),
        ("4879.23", 4879.23),
        ("$1,950.00", 1950.0),
        (Decimal("10.10"), 10.1),
        ("  -15.49 ", -15.49),
    ],
)
def test_coerce_numeric_accepts_loose_numbers(value, expected):
    assert coerce_numeric(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value",
    [None, "", "abc", True, float("nan"), float("inf"), [], {}, 10**400, -(10**400), Decimal("sNaN")],
)
def test_coerce_numeric_defaults_bad_values_to_zero(value):
    """Test non-numeric input is silently zeroed, never raised"""
    assert coerce_numeric(value) == 0.0


def test_coerce_numeric_custom_fallback():
    assert coerce_numeric("n/a", fallback=-1.0) == -1.0
    assert not math.isnan(coerce_numeric(float("nan")))


def test_normalize_account_camel_case():
    account = normalize_account(
        {
            "accountId": "a1",
            "name": "Checking",
            "type": "depository",
            "balance": "100.50",
            "availableBalance": None,
            "creditLimit": "2,000",
        }
    )
    assert account.account_id == "a1"
    assert account.balance == 100.5
    assert account.available_balance == 0.0
    assert account.credit_limit == 2000.0
    assert account.currency == "USD"


def test_normalize_account_snake_case_and_defaults():
    account = normalize_account({"account_id": "a2", "balance": "garbage"}, index=3)
    assert account.account_id == "a2"
    assert account.balance == 0.0
    assert account.credit_limit is None


def test_normalize_transaction_parses_date_and_amount():
    txn = normalize_transaction(
        {
            "transactionId": "t1",
            "accountId": "a1",
            "date": "2024-06-01T08:15:00Z",
            "description": "POS STARBUCKS",
            "amount": "-5.75",
            "merchantName": "Starbucks",
            "pending": "true",
        }
    )
    assert txn.date == datetime(2024, 6, 1, 8, 15)
    assert txn.amount == -5.75
    assert txn.is_expense
    assert txn.merchant_name == "Starbucks"
    assert txn.category is None
    assert txn.pending is True


def test_normalize_transaction_unparseable_date_is_none():
    txn = normalize_transaction({"date": "not a date", "amount": 10}, index=7)
    assert txn.date is None
    assert txn.transaction_id == "txn-7"
    assert txn.is_income


def test_normalize_transaction_zeroes_amount_too_large_for_float():
    """Test one oversized amount degrades to 0 instead of failing the record"""
    txn = normalize_transaction({"transactionId": "t9", "date": "2024-06-01", "amount": 10**400})
    assert txn.amount == 0.0
    assert txn.transaction_id == "t9"


def test_normalize_statement_uses_explicit_range():
    data = normalize_statement(
        {
            "accounts": [{"accountId": "a1", "balance": 50}],
            "transactions": [{"amount": -5, "date": "2024-05-02"}],
            "dateRange": {"startDate": "2024-05-01", "endDate": "2024-05-31"},
        },
        now=NOW,
    )
    assert data.date_range.start_date == datetime(2024, 5, 1)
    assert data.date_range.end_date == datetime(2024, 5, 31)
    assert len(data.accounts) == 1
    assert len(data.transactions) == 1


def test_normalize_statement_without_range_uses_default():
    default_range = resolve_timeframe("90d", NOW)
    data = normalize_statement({"transactions": []}, now=NOW, default_range=default_range, default_timeframe="90d")
    assert data.date_range == default_range
    assert data.timeframe == "90d"
    assert data.accounts == ()


def test_normalize_statement_inverted_range_raises():
    with pytest.raises(InvalidDateRangeError):
        normalize_statement(
            {"dateRange": {"startDate": "2024-06-01", "endDate": "2024-05-01"}},
            now=NOW,
        )
