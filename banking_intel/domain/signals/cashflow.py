"""Balance and cash-flow aggregation"""

from banking_intel.domain.models import CashFlowSummary, FinancialData


def aggregate_cash_flow(data: FinancialData) -> CashFlowSummary:
    """
    Totals over the snapshot. Income/expense split uses the amount sign only.

    average_daily_spend divides by days_in_period, which is floored at 1.
    """
    total_balance = sum(account.balance for account in data.accounts)
    income = sum(t.amount for t in data.transactions if t.amount > 0)
    expenses = sum(abs(t.amount) for t in data.transactions if t.amount < 0)
    days_in_period = data.date_range.days_in_period

    return CashFlowSummary(
        total_balance=total_balance,
        income=income,
        expenses=expenses,
        net_change=income - expenses,
        average_daily_spend=expenses / days_in_period,
        days_in_period=days_in_period,
    )
