"""
Prompt builder - deterministic text blocks for every report section.

Each section has a *_prompt function (sent to the text-generation oracle) and
a *_fallback function (used verbatim when the oracle fails). Both read only
the pre-computed signals, never raw transactions, except for the shared
financial context block.
"""

from textwrap import dedent
from typing import Sequence

from banking_intel.domain.models import (
    AnalysisStatus,
    CadenceProfile,
    CashFlowSummary,
    CategorySignal,
    FinancialData,
    MerchantSignal,
    RecurringAnalysis,
    RiskAssessment,
    RuleSet,
    SectionKind,
    TravelAnalysis,
)
from banking_intel.utils.date_utils import format_short_date

SECTION_TITLES = {
    SectionKind.ACCOUNT_SUMMARY: "Account Summary",
    SectionKind.BEHAVIOR: "Behavior & Preferences (Frequency Signals)",
    SectionKind.MERCHANTS: "Merchant Concentration (Top Descriptors)",
    SectionKind.RISK: "Risk, Churn & Compliance",
    SectionKind.CADENCE: "Cadence & Routines",
    SectionKind.RECURRING: "Recurring & Subscriptions",
    SectionKind.TRAVEL: "Travel & Events",
    SectionKind.BACKEND_RULES: "Appendix — Backend Rules, Triggers & Scoring",
}

RECENT_TRANSACTION_LIMIT = 10

CATEGORY_METHOD_NOTE = (
    "Method: Keyword frequency across transaction categories; "
    "useful for engagement and rewards targeting."
)
MERCHANT_NOTE = "Note: Merchants extracted from transaction descriptions show brand concentration and habit anchors."

INSUFFICIENT_CADENCE = "Insufficient transaction data to analyze spending patterns."
INSUFFICIENT_RECURRING = "Insufficient transaction data to identify recurring patterns."
INSUFFICIENT_TRAVEL = "Insufficient transaction data to analyze travel patterns."


def money(value: float) -> str:
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def _prompt(body: str, context: str, **blocks: str) -> str:
    """Dedent body, fill {name} blocks, then append the shared context"""
    text = dedent(body).strip()
    for name, block in blocks.items():
        text = text.replace("{" + name + "}", block)
    return text + "\n\n" + context.strip() + "\n"


# ---------------------------------------------------------------------------
# Shared context
# ---------------------------------------------------------------------------


def build_financial_context(data: FinancialData, cash_flow: CashFlowSummary) -> str:
    """Totals, account balances and the most recent transactions"""
    accounts = "\n".join(
        f"{a.name}: {money(a.balance)} ({a.type})" for a in data.accounts
    ) or "No account information available"

    dated = sorted((t for t in data.transactions if t.date is not None), key=lambda t: t.date, reverse=True)
    recent = "\n".join(
        f"{format_short_date(t.date)}: {abs(t.amount):.2f} {'expense' if t.amount < 0 else 'income'}"
        f" - {t.category or 'Uncategorized'} - {t.description}"
        for t in dated[:RECENT_TRANSACTION_LIMIT]
    ) or "No transaction history available"

    return (
        "FINANCIAL SUMMARY:\n"
        f"Total Balance: {money(cash_flow.total_balance)}\n"
        f"Income: {money(cash_flow.income)}\n"
        f"Expenses: {money(cash_flow.expenses)}\n"
        f"Net Change: {money(cash_flow.net_change)}\n\n"
        f"ACCOUNTS:\n{accounts}\n\n"
        f"RECENT TRANSACTIONS:\n{recent}"
    )


# ---------------------------------------------------------------------------
# Account summary
# ---------------------------------------------------------------------------


def account_summary_prompt(cash_flow: CashFlowSummary, context: str) -> str:
    return _prompt(
        f"""
        Generate a professional Banking Intelligence 'Account Summary' analysis section based on this data:

        Total Balance: {money(cash_flow.total_balance)}
        Income: {money(cash_flow.income)}
        Expenses: {money(cash_flow.expenses)}
        Net Change: {money(cash_flow.net_change)}
        Time Period: {cash_flow.days_in_period} days
        Average Daily Spend: {money(cash_flow.average_daily_spend)}/day

        Format your response with Observation, Logic, and Bank Actions sections.
        Tone should be analytical, data-driven, and geared toward financial professionals.
        """,
        context,
    )


def account_summary_fallback(cash_flow: CashFlowSummary) -> str:
    return (
        f"Observation: Account has a total balance of {money(cash_flow.total_balance)} "
        f"with net change of {money(cash_flow.net_change)} over {cash_flow.days_in_period} days. "
        f"Average daily spend is {money(cash_flow.average_daily_spend)}."
    )


# ---------------------------------------------------------------------------
# Behavior & preferences
# ---------------------------------------------------------------------------


def _categories_text(categories: Sequence[CategorySignal]) -> str:
    return "\n".join(
        f"- {c.name}: {c.count} mentions ({c.percent_of_total:.2f}% of detected); "
        f"elasticity proxy: {c.elasticity.value}."
        for c in categories
    )


def behavior_prompt(categories: Sequence[CategorySignal], context: str) -> str:
    categories_text = _categories_text(categories) or "- No categorized spending detected"
    return _prompt(
        """
        Generate a professional Banking Intelligence 'Behavior & Preferences' analysis section
        based on this spending category data:

        {categories}

        Present frequency signals with percentages and the given elasticity labels
        (Inelastic = daily necessities, Moderate = regular needs, Elastic-ish = discretionary),
        followed by a one-line method note.
        Tone should be analytical, data-driven, and geared toward financial professionals.
        """,
        context,
        categories=categories_text,
    )


def behavior_fallback(categories: Sequence[CategorySignal]) -> str:
    categories_text = _categories_text(categories) or "No categorized spending detected in this period."
    return f"{categories_text}\n\n{CATEGORY_METHOD_NOTE}"


# ---------------------------------------------------------------------------
# Merchant concentration
# ---------------------------------------------------------------------------


def _merchants_text(merchants: Sequence[MerchantSignal]) -> str:
    return "\n".join(f"- {m.name} — {m.count}" for m in merchants)


def merchant_prompt(merchants: Sequence[MerchantSignal], context: str) -> str:
    merchants_text = _merchants_text(merchants) or "- No merchant activity detected"
    return _prompt(
        """
        Generate a professional Banking Intelligence 'Merchant Concentration' analysis section
        based on this merchant data:

        {merchants}

        Present the top merchant descriptors with frequency counts, followed by a short note
        that tokens come from transaction descriptions and show brand concentration and habit anchors.
        Tone should be analytical, data-driven, and geared toward financial professionals.
        """,
        context,
        merchants=merchants_text,
    )


def merchant_fallback(merchants: Sequence[MerchantSignal]) -> str:
    merchants_text = _merchants_text(merchants) or "No merchant activity detected in this period."
    return f"{merchants_text}\n\n{MERCHANT_NOTE}"


# ---------------------------------------------------------------------------
# Risk, churn & compliance
# ---------------------------------------------------------------------------


def risk_prompt(risk: RiskAssessment, context: str) -> str:
    risks_text = "\n".join(
        f"- {r.type}: {r.description}, severity: {r.severity.value}" for r in risk.risks
    ) or "- No significant risks detected"
    return _prompt(
        f"""
        Generate a professional Banking Intelligence 'Risk, Churn & Compliance' analysis section
        based on this data:

        Balance Information:
        - Total balance: {money(risk.total_balance)}
        - Average daily spend: {money(risk.average_daily_spend)}/day
        - Days of runway: {risk.days_of_runway:.1f} days

        Risk Information:
        {{risks}}

        Format your response with Observation, Logic, and Bank Actions sections.
        Tone should be analytical, data-driven, and focused on risk mitigation strategies.
        """,
        context,
        risks=risks_text,
    )


def risk_fallback(risk: RiskAssessment) -> str:
    findings = "several risk factors" if risk.risk_count > 0 else "no significant risks"
    return (
        f"Observation: Account has {findings} with {risk.days_of_runway:.1f} days of runway "
        "based on current spending patterns."
    )


# ---------------------------------------------------------------------------
# Cadence & routines
# ---------------------------------------------------------------------------


def _peak_time_of_day(cadence: CadenceProfile) -> str:
    if cadence.morning_percent > cadence.afternoon_percent and cadence.morning_percent > cadence.evening_percent:
        return "morning"
    if cadence.afternoon_percent > cadence.morning_percent and cadence.afternoon_percent > cadence.evening_percent:
        return "afternoon"
    return "evening"


def cadence_prompt(cadence: CadenceProfile, context: str) -> str:
    return _prompt(
        f"""
        Generate a professional Banking Intelligence 'Cadence & Routines' analysis section
        based on this spending pattern data:

        Weekday vs Weekend:
        - Weekday: {cadence.weekday_count} transactions ({cadence.weekday_percent:.1f}%)
        - Weekend: {cadence.weekend_count} transactions ({cadence.weekend_percent:.1f}%)

        Time of Day:
        - Morning (5am-12pm): {cadence.morning_count} transactions ({cadence.morning_percent:.1f}%)
        - Afternoon (12pm-6pm): {cadence.afternoon_count} transactions ({cadence.afternoon_percent:.1f}%)
        - Evening/Night (6pm-5am): {cadence.evening_count} transactions ({cadence.evening_percent:.1f}%)

        Format your response as an observed pattern followed by implications.
        Tone should be analytical and focused on actionable insights for financial marketing professionals.
        """,
        context,
    )


def cadence_fallback(cadence: CadenceProfile) -> str:
    if cadence.insufficient_data:
        return INSUFFICIENT_CADENCE
    split = "Primarily weekday" if cadence.weekday_percent > cadence.weekend_percent else "Balanced weekday/weekend"
    return f"Observed pattern: {split} spending with highest activity during the {_peak_time_of_day(cadence)} hours."


# ---------------------------------------------------------------------------
# Recurring & subscriptions
# ---------------------------------------------------------------------------


def _tech_text(recurring: RecurringAnalysis) -> str:
    if not recurring.tech_subscriptions:
        return "No tech/utility subscription merchants detected."
    names = ", ".join(s.merchant for s in recurring.tech_subscriptions)
    return f"Detected tech/utility merchants: {names}."


def recurring_prompt(recurring: RecurringAnalysis, context: str) -> str:
    subscriptions_text = "\n".join(
        f"- {s.merchant} ({s.frequency}, avg {money(s.average_amount)})" for s in recurring.subscriptions
    ) or "- No clear subscription patterns detected"
    return _prompt(
        """
        Generate a professional Banking Intelligence 'Recurring & Subscriptions' analysis section
        based on this data:

        {subscriptions}

        {tech}

        Format your response with the detected merchants and a signal analysis.
        Tone should be analytical and focused on product recommendation opportunities.
        """,
        context,
        subscriptions=subscriptions_text,
        tech=_tech_text(recurring),
    )


def recurring_fallback(recurring: RecurringAnalysis) -> str:
    if recurring.status != AnalysisStatus.OK:
        return INSUFFICIENT_RECURRING
    return _tech_text(recurring)


# ---------------------------------------------------------------------------
# Travel & events
# ---------------------------------------------------------------------------


def _travel_text(travel: TravelAnalysis) -> str:
    if not travel.periods:
        return "No significant travel activity detected."
    lines = "\n".join(
        f"- {format_short_date(p.start_date)} to {format_short_date(p.end_date)}: "
        f"{p.duration_days} days, {money(p.total_spend)} total"
        for p in travel.periods
    )
    return f"Travel periods detected:\n{lines}\n\nTotal travel spend: {money(travel.travel_spend)}"


def travel_prompt(travel: TravelAnalysis, context: str) -> str:
    return _prompt(
        """
        Generate a professional Banking Intelligence 'Travel & Events' analysis section
        based on this data:

        {travel}

        Format your response with Observation, Logic, and Bank Actions sections.
        Tone should be analytical and focused on travel-related banking opportunities.
        """,
        context,
        travel=_travel_text(travel),
    )


def travel_fallback(travel: TravelAnalysis) -> str:
    if travel.status != AnalysisStatus.OK:
        return INSUFFICIENT_TRAVEL
    return _travel_text(travel)


# ---------------------------------------------------------------------------
# Backend rules
# ---------------------------------------------------------------------------


def _rules_text(rule_set: RuleSet) -> str:
    return ",\n".join(r.as_rule_text() for r in rule_set.rules) or "No rules triggered for this period."


def _actions_text(rule_set: RuleSet) -> str:
    return "\n".join(rule_set.priority_stack) or "No prioritized actions for this period."


def backend_rules_prompt(rule_set: RuleSet, days_in_period: int, context: str) -> str:
    return _prompt(
        f"""
        Generate a professional Banking Intelligence 'Appendix — Backend Rules, Triggers & Scoring'
        section based on this data:

        Feature Definitions:
        - avg_daily_spend = total_outflows / {days_in_period}
        - liquidity_floor = 2 × avg_daily_spend

        Example Rules (JSON-like):
        {{rules}}

        Next-Best-Action (Priority Stack):
        {{actions}}

        Format your response with feature definitions, example rules, a scoring sketch,
        and the next-best-action priority stack.
        Tone should be technical, concise, and focused on actionable rules for banking systems.
        """,
        context,
        rules=_rules_text(rule_set),
        actions=_actions_text(rule_set),
    )


def backend_rules_fallback(rule_set: RuleSet, days_in_period: int) -> str:
    return (
        "Feature Definitions\n"
        f"- avg_daily_spend = total_outflows / {days_in_period}\n"
        "- liquidity_floor = 2 × avg_daily_spend\n\n"
        f"Example Rules (JSON-like)\n{_rules_text(rule_set)}\n\n"
        f"Next-Best-Action (Priority Stack)\n{_actions_text(rule_set)}"
    )
