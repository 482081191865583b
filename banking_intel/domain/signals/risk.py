"""Liquidity and risk scoring"""

from typing import Iterable, List

from banking_intel.domain.keywords import GAMBLING_KEYWORDS, matches_any
from banking_intel.domain.models import CashFlowSummary, Risk, RiskAssessment, Severity, Transaction

# Runway reported when there is no detectable burn rate
RUNWAY_SENTINEL_DAYS = 999.0

LIQUIDITY_RISK_DAYS = 30
LIQUIDITY_HIGH_RISK_DAYS = 14
GAMBLING_RISK_PERCENT = 10
GAMBLING_HIGH_RISK_PERCENT = 25

LIQUIDITY = "liquidity"
GAMBLING = "gambling"


def calculate_runway(total_balance: float, average_daily_spend: float) -> float:
    """Days the current balance lasts at the current burn rate"""
    if average_daily_spend <= 0:
        return RUNWAY_SENTINEL_DAYS
    return total_balance / average_daily_spend


def is_gambling_transaction(txn: Transaction) -> bool:
    return matches_any(txn.description, GAMBLING_KEYWORDS) or matches_any(txn.merchant_name, GAMBLING_KEYWORDS)


def assess_risk(cash_flow: CashFlowSummary, transactions: Iterable[Transaction]) -> RiskAssessment:
    """
    Evaluate every risk rule independently and collect those that fire.

    Rules:
    - liquidity: runway < 30 days (high below 14)
    - gambling: gambling volume > 10% of expenses (high above 25%)
    """
    runway = calculate_runway(cash_flow.total_balance, cash_flow.average_daily_spend)
    risks: List[Risk] = []

    if runway < LIQUIDITY_RISK_DAYS:
        risks.append(
            Risk(
                type=LIQUIDITY,
                severity=Severity.HIGH if runway < LIQUIDITY_HIGH_RISK_DAYS else Severity.MEDIUM,
                description=f"Low balance relative to spending rate ({runway:.1f} days of runway)",
            )
        )

    gambling_txns = [t for t in transactions if is_gambling_transaction(t)]
    gambling_total = sum(abs(t.amount) for t in gambling_txns)
    gambling_percent = (gambling_total / cash_flow.expenses) * 100 if cash_flow.expenses > 0 else 0.0

    if gambling_percent > GAMBLING_RISK_PERCENT:
        risks.append(
            Risk(
                type=GAMBLING,
                severity=Severity.HIGH if gambling_percent > GAMBLING_HIGH_RISK_PERCENT else Severity.MEDIUM,
                description=f"High gambling activity ({gambling_percent:.1f}% of expenses)",
            )
        )

    return RiskAssessment(
        total_balance=cash_flow.total_balance,
        average_daily_spend=cash_flow.average_daily_spend,
        days_of_runway=runway,
        gambling_total=gambling_total,
        gambling_percent=gambling_percent,
        gambling_transaction_count=len(gambling_txns),
        risks=tuple(risks),
    )
