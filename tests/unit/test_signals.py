"""Unit tests for the signal extractors"""

import pytest
from datetime import datetime, timedelta
from banking_intel.domain.models import (
    Account,
    AnalysisStatus,
    Elasticity,
    FinancialData,
    Severity,
    Transaction,
)
from banking_intel.domain.signals.cadence import analyze_cadence
from banking_intel.domain.signals.cashflow import aggregate_cash_flow
from banking_intel.domain.signals.categories import analyze_categories, group_categories
from banking_intel.domain.signals.merchants import analyze_merchants, extract_merchant_name
from banking_intel.domain.signals.recurring import detect_subscriptions
from banking_intel.domain.signals.risk import RUNWAY_SENTINEL_DAYS, assess_risk, calculate_runway
from banking_intel.domain.signals.travel import cluster_travel_periods
from banking_intel.domain.timeframe import resolve_timeframe

BASE = datetime(2024, 6, 3, 10, 0)  # Monday


def make_txn(amount, description="Test", category=None, day=0, hour=10, merchant_name=None, txn_id=None, dated=True):
    return Transaction(
        transaction_id=txn_id or f"t{day}-{hour}-{description}-{amount}",
        account_id="a1",
        date=(BASE + timedelta(days=day)).replace(hour=hour) if dated else None,
        description=description,
        amount=amount,
        category=category,
        merchant_name=merchant_name,
    )


def make_data(transactions, balances=(1000.0,), timeframe="30d"):
    accounts = tuple(
        Account(account_id=f"a{i}", name=f"Account {i}", type="depository", balance=b, available_balance=b)
        for i, b in enumerate(balances)
    )
    return FinancialData(
        accounts=accounts,
        transactions=tuple(transactions),
        date_range=resolve_timeframe(timeframe, BASE + timedelta(days=30)),
        timeframe=timeframe,
    )


# ---------------------------------------------------------------------------
# Cash flow
# ---------------------------------------------------------------------------


def test_cash_flow_balance_invariant():
    """Test net_change == income - expenses and total_balance sums accounts"""
    data = make_data(
        [make_txn(2650.25), make_txn(-1950.0), make_txn(-49.99), make_txn(120.0)],
        balances=(4879.23, 120.77),
    )
    summary = aggregate_cash_flow(data)

    assert summary.total_balance == pytest.approx(5000.0)
    assert summary.income == pytest.approx(2770.25)
    assert summary.expenses == pytest.approx(1999.99)
    assert summary.net_change == summary.income - summary.expenses
    assert summary.days_in_period == 30
    assert summary.average_daily_spend == pytest.approx(1999.99 / 30)


def test_cash_flow_empty_snapshot_is_zeroed():
    summary = aggregate_cash_flow(make_data([], balances=()))
    assert summary.total_balance == 0
    assert summary.income == 0
    assert summary.expenses == 0
    assert summary.average_daily_spend == 0


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def test_categories_sorted_by_count_with_elasticity():
    txns = (
        [make_txn(-5, category="Coffee Shops") for _ in range(3)]
        + [make_txn(-1950, category="Housing")]
        + [make_txn(-40, category="Dining") for _ in range(2)]
        + [make_txn(3000, category="Income")]
    )
    categories = analyze_categories(txns)

    assert [c.name for c in categories] == ["Coffee Shops", "Dining", "Housing"]
    assert categories[0].percent_of_total == pytest.approx(50.0)
    housing = categories[2]
    assert housing.count == 1
    assert housing.total == 1950
    assert housing.elasticity == Elasticity.INELASTIC
    assert categories[1].elasticity == Elasticity.ELASTIC
    assert categories[0].elasticity == Elasticity.MODERATE


def test_uncategorized_expenses_are_grouped():
    categories = analyze_categories([make_txn(-5), make_txn(-6)])
    assert categories[0].name == "Uncategorized"
    assert categories[0].count == 2


def test_category_percentages_computed_over_top_ten_only():
    """Test percentages sum to 100 even when more than ten categories exist"""
    txns = []
    for i in range(12):
        txns.extend(make_txn(-10, category=f"Cat {i}") for _ in range(12 - i))
    categories = analyze_categories(txns)

    assert len(categories) == 10
    assert sum(c.percent_of_total for c in categories) == pytest.approx(100.0)
    assert len(group_categories(txns)) == 12


def test_rental_is_elastic_not_rent():
    categories = analyze_categories([make_txn(-80, category="Car Rental")])
    assert categories[0].elasticity == Elasticity.ELASTIC


# ---------------------------------------------------------------------------
# Merchants
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "description, expected",
    [
        ("POS DEBIT STARBUCKS #123 01/15/2024", "STARBUCKS #123"),
        ("ACH - PAYROLL ACME", "PAYROLL ACME"),
        ("purchase: TARGET T-1234", "TARGET T-1234"),
        ("WHOLE FOODS MARKET", "WHOLE FOODS MARKET"),
        ("POS", "POS"),
        ("", "Unknown"),
        (None, "Unknown"),
    ],
)
def test_extract_merchant_name(description, expected):
    assert extract_merchant_name(description) == expected


def test_merchants_prefer_merchant_name_and_skip_income():
    txns = [
        make_txn(-15.49, description="NETFLIX.COM 866-579", merchant_name="Netflix"),
        make_txn(-15.49, description="NETFLIX.COM 866-580", merchant_name="Netflix"),
        make_txn(-5.75, description="POS STARBUCKS"),
        make_txn(2650.25, description="PAYROLL"),
    ]
    merchants = analyze_merchants(txns)

    assert [(m.name, m.count) for m in merchants] == [("Netflix", 2), ("STARBUCKS", 1)]
    assert merchants[0].total == pytest.approx(30.98)


# ---------------------------------------------------------------------------
# Recurring
# ---------------------------------------------------------------------------


def test_two_identical_charges_are_a_subscription():
    recurring = detect_subscriptions([make_txn(-12.0, "GYM CLUB", day=0), make_txn(-12.0, "GYM CLUB", day=30)])

    assert recurring.status == AnalysisStatus.OK
    assert len(recurring.subscriptions) == 1
    subscription = recurring.subscriptions[0]
    assert subscription.type == "subscription"
    assert subscription.frequency == "periodic"
    assert subscription.count == 2
    assert subscription.last_date == BASE + timedelta(days=30)


def test_varying_non_brand_charges_are_excluded():
    """Test >10% amount difference without a known brand is not recurring"""
    recurring = detect_subscriptions([make_txn(-50.0, "CORNER DELI"), make_txn(-70.0, "CORNER DELI", day=7)])
    assert recurring.status == AnalysisStatus.OK
    assert recurring.subscriptions == ()


def test_varying_brand_charges_are_recurring():
    recurring = detect_subscriptions(
        [make_txn(-9.99, "SPOTIFY USA"), make_txn(-15.99, "SPOTIFY USA", day=30), make_txn(-10.99, "SPOTIFY USA", day=60)]
    )
    subscription = recurring.subscriptions[0]
    assert subscription.type == "recurring"
    assert subscription.frequency == "monthly"


def test_subscriptions_sorted_by_amount_and_tech_subset():
    txns = [
        make_txn(-9.99, "GITHUB INC"),
        make_txn(-9.99, "GITHUB INC", day=30),
        make_txn(-55.0, "CITY WATER"),
        make_txn(-55.0, "CITY WATER", day=30),
    ]
    recurring = detect_subscriptions(txns)

    assert [s.merchant for s in recurring.subscriptions] == ["CITY WATER", "GITHUB INC"]
    assert [s.merchant for s in recurring.tech_subscriptions] == ["GITHUB INC"]


def test_recurring_insufficient_below_two_expenses():
    recurring = detect_subscriptions([make_txn(-12.0, "GYM CLUB"), make_txn(500.0, "REFUND")])
    assert recurring.status == AnalysisStatus.INSUFFICIENT_DATA
    assert recurring.subscriptions == ()


# ---------------------------------------------------------------------------
# Travel
# ---------------------------------------------------------------------------


def _travel_fixture(second_day):
    filler = [make_txn(-5, "GROCERY", day=d) for d in range(3)]
    return filler + [
        make_txn(-300, "DELTA AIRLINE", day=0),
        make_txn(-200, "HILTON HOTEL", day=second_day),
    ]


def test_travel_five_days_apart_merge():
    travel = cluster_travel_periods(_travel_fixture(5))

    assert travel.status == AnalysisStatus.OK
    assert len(travel.periods) == 1
    period = travel.periods[0]
    assert period.duration_days == 6
    assert period.total_spend == 500
    assert period.transaction_count == 2


def test_travel_six_days_apart_split():
    travel = cluster_travel_periods(_travel_fixture(6))
    assert len(travel.periods) == 2
    assert travel.travel_transaction_count == 2
    assert travel.travel_spend == 500


def test_travel_matches_category_and_counts_undated_spend():
    txns = [make_txn(-5, "GROCERY", day=d) for d in range(4)] + [
        make_txn(-80, "RANDOM VENDOR", category="Travel", day=1),
        make_txn(-40, "EXPEDIA FEE", dated=False),
    ]
    travel = cluster_travel_periods(txns)

    assert len(travel.periods) == 1
    assert travel.travel_transaction_count == 2
    assert travel.travel_spend == 120


def test_travel_insufficient_below_five_transactions():
    travel = cluster_travel_periods([make_txn(-300, "DELTA AIRLINE")])
    assert travel.status == AnalysisStatus.INSUFFICIENT_DATA
    assert travel.periods == ()


# ---------------------------------------------------------------------------
# Cadence
# ---------------------------------------------------------------------------


def test_cadence_buckets_expenses_only():
    txns = [
        make_txn(-5, day=0, hour=8),  # Monday morning
        make_txn(-5, day=1, hour=13),  # Tuesday afternoon
        make_txn(-5, day=5, hour=20),  # Saturday evening
        make_txn(-5, day=6, hour=2),  # Sunday night
        make_txn(-5, day=2, hour=11),  # Wednesday morning
        make_txn(1000, day=3, hour=9),  # income ignored
        make_txn(-5, dated=False),  # undated ignored
    ]
    cadence = analyze_cadence(txns)

    assert cadence.insufficient_data is False
    assert (cadence.weekday_count, cadence.weekend_count) == (3, 2)
    assert (cadence.morning_count, cadence.afternoon_count, cadence.evening_count) == (2, 1, 2)
    assert cadence.weekday_percent + cadence.weekend_percent == pytest.approx(100.0)
    assert cadence.morning_percent == pytest.approx(40.0)


def test_cadence_insufficient_data_flag():
    cadence = analyze_cadence([make_txn(-5), make_txn(-6)])
    assert cadence.insufficient_data is True
    assert cadence.weekday_count == 2


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


def test_runway_sentinel_when_no_spend():
    """Test zero burn rate yields the sentinel, never infinity"""
    assert calculate_runway(500.0, 0.0) == RUNWAY_SENTINEL_DAYS
    risk = assess_risk(aggregate_cash_flow(make_data([make_txn(100)])), [])
    assert risk.days_of_runway == RUNWAY_SENTINEL_DAYS
    assert risk.risks == ()
    assert risk.has_critical_risks is False


@pytest.mark.parametrize(
    "balance, expected_severity",
    [(500.0, Severity.MEDIUM), (200.0, Severity.HIGH)],
)
def test_liquidity_risk_severity(balance, expected_severity):
    # 600 spend over 30 days = 20/day
    data = make_data([make_txn(-600.0)], balances=(balance,))
    risk = assess_risk(aggregate_cash_flow(data), data.transactions)

    assert risk.risk_count == 1
    assert risk.risks[0].type == "liquidity"
    assert risk.risks[0].severity == expected_severity


def test_gambling_risk_detected_in_description_and_merchant():
    txns = [
        make_txn(-300.0, "DRAFTKINGS DEPOSIT"),
        make_txn(-100.0, "ONLINE", merchant_name="PokerStars Poker"),
        make_txn(-600.0, "RENT"),
    ]
    data = make_data(txns, balances=(100000.0,))
    risk = assess_risk(aggregate_cash_flow(data), data.transactions)

    assert risk.gambling_transaction_count == 2
    assert risk.gambling_percent == pytest.approx(40.0)
    assert risk.has_risk("gambling")
    assert risk.has_critical_risks is True
    assert risk.to_dict()["risk_count"] == 1
