"""Report synthesis - sequences the signal extractors and assembles the report envelope"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol

from banking_intel.domain import prompts
from banking_intel.domain.exceptions import InsufficientDataError, OracleError
from banking_intel.domain.models import (
    AnalysisStatus,
    CadenceProfile,
    CashFlowSummary,
    FinancialData,
    RecurringAnalysis,
    Report,
    ReportRequest,
    ReportSection,
    RiskAssessment,
    RuleSet,
    SectionKind,
    TravelAnalysis,
)
from banking_intel.domain.normalizer import normalize_financial_data, normalize_statement
from banking_intel.domain.signals.cadence import analyze_cadence
from banking_intel.domain.signals.cashflow import aggregate_cash_flow
from banking_intel.domain.signals.categories import analyze_categories, group_categories
from banking_intel.domain.signals.merchants import analyze_merchants
from banking_intel.domain.signals.recurring import detect_subscriptions
from banking_intel.domain.signals.risk import assess_risk
from banking_intel.domain.signals.rules import synthesize_rules
from banking_intel.domain.signals.travel import cluster_travel_periods
from banking_intel.domain.timeframe import resolve_timeframe
from banking_intel.utils.date_utils import format_short_date, utc_now

REPORT_TITLE = "Banking Intelligence Command — Benchmark Report"
SUMMARY_TOP_LIMIT = 5
DEFAULT_ORACLE_TIMEOUT_SECONDS = 30.0


class TextOracle(Protocol):
    """External prose generator. Implementations may raise anything on failure."""

    async def generate(self, prompt: str, *, request_id: str, section_kind: str) -> str: ...


@dataclass(frozen=True)
class ReportSignals:
    """Output of every extractor for one report; detailed signals are None unless requested"""

    cash_flow: CashFlowSummary
    categories: tuple
    merchants: tuple
    risk: RiskAssessment
    cadence: Optional[CadenceProfile] = None
    recurring: Optional[RecurringAnalysis] = None
    travel: Optional[TravelAnalysis] = None
    rules: Optional[RuleSet] = None


@dataclass(frozen=True)
class SectionPlan:
    """Everything needed to render one section. prompt is None when the oracle must not be called."""

    kind: SectionKind
    prompt: Optional[str]
    fallback: str
    data: Dict[str, Any] = field(default_factory=dict)


def extract_signals(data: FinancialData, include_detailed: bool) -> ReportSignals:
    """Run the extractors. Each one reads the same immutable snapshot."""
    cash_flow = aggregate_cash_flow(data)
    risk = assess_risk(cash_flow, data.transactions)
    signals = ReportSignals(
        cash_flow=cash_flow,
        categories=analyze_categories(data.transactions),
        merchants=analyze_merchants(data.transactions),
        risk=risk,
    )
    if not include_detailed:
        return signals

    return ReportSignals(
        cash_flow=signals.cash_flow,
        categories=signals.categories,
        merchants=signals.merchants,
        risk=signals.risk,
        cadence=analyze_cadence(data.transactions),
        recurring=detect_subscriptions(data.transactions),
        travel=cluster_travel_periods(data.transactions),
        rules=synthesize_rules(risk, group_categories(data.transactions)),
    )


def plan_sections(data: FinancialData, signals: ReportSignals) -> List[SectionPlan]:
    """Build section plans in fixed report order"""
    context = prompts.build_financial_context(data, signals.cash_flow)
    risk = signals.risk

    plans = [
        SectionPlan(
            kind=SectionKind.ACCOUNT_SUMMARY,
            prompt=prompts.account_summary_prompt(signals.cash_flow, context),
            fallback=prompts.account_summary_fallback(signals.cash_flow),
            data={"metrics": signals.cash_flow.to_dict()},
        ),
        SectionPlan(
            kind=SectionKind.BEHAVIOR,
            prompt=prompts.behavior_prompt(signals.categories, context),
            fallback=prompts.behavior_fallback(signals.categories),
            data={"categories": [c.to_dict() for c in signals.categories]},
        ),
        SectionPlan(
            kind=SectionKind.MERCHANTS,
            prompt=prompts.merchant_prompt(signals.merchants, context),
            fallback=prompts.merchant_fallback(signals.merchants),
            data={"merchants": [m.to_dict() for m in signals.merchants]},
        ),
        SectionPlan(
            kind=SectionKind.RISK,
            prompt=prompts.risk_prompt(risk, context),
            fallback=prompts.risk_fallback(risk),
            data={
                "risks": [r.to_dict() for r in risk.risks],
                "risk_count": risk.risk_count,
                "has_critical_risks": risk.has_critical_risks,
                "days_of_runway": risk.days_of_runway,
            },
        ),
    ]

    if signals.cadence is not None:
        cadence = signals.cadence
        plans.append(
            SectionPlan(
                kind=SectionKind.CADENCE,
                prompt=None if cadence.insufficient_data else prompts.cadence_prompt(cadence, context),
                fallback=prompts.cadence_fallback(cadence),
                data={"data": cadence.to_dict()},
            )
        )

    if signals.recurring is not None:
        recurring = signals.recurring
        sufficient = recurring.status == AnalysisStatus.OK
        plans.append(
            SectionPlan(
                kind=SectionKind.RECURRING,
                prompt=prompts.recurring_prompt(recurring, context) if sufficient else None,
                fallback=prompts.recurring_fallback(recurring),
                data=recurring.to_dict(),
            )
        )

    if signals.travel is not None:
        travel = signals.travel
        sufficient = travel.status == AnalysisStatus.OK
        plans.append(
            SectionPlan(
                kind=SectionKind.TRAVEL,
                prompt=prompts.travel_prompt(travel, context) if sufficient else None,
                fallback=prompts.travel_fallback(travel),
                data={
                    "status": travel.status.value,
                    "travel_periods": [p.to_dict() for p in travel.periods],
                    "travel_transaction_count": travel.travel_transaction_count,
                    "travel_spend": travel.travel_spend,
                },
            )
        )

    if signals.rules is not None:
        days = signals.cash_flow.days_in_period
        plans.append(
            SectionPlan(
                kind=SectionKind.BACKEND_RULES,
                prompt=prompts.backend_rules_prompt(signals.rules, days, context),
                fallback=prompts.backend_rules_fallback(signals.rules, days),
                data={
                    "rules": [r.to_dict() for r in signals.rules.rules],
                    "actions": list(signals.rules.priority_stack),
                },
            )
        )

    return plans


def build_summary(data: FinancialData, signals: ReportSignals) -> Dict[str, Any]:
    """Headline numbers for machine consumers"""
    return {
        "total_balance": signals.cash_flow.total_balance,
        "transaction_count": len(data.transactions),
        "date_range": data.date_range.to_dict(),
        "account_summary": signals.cash_flow.to_dict(),
        "top_categories": [c.to_dict() for c in signals.categories[:SUMMARY_TOP_LIMIT]],
        "top_merchants": [m.to_dict() for m in signals.merchants[:SUMMARY_TOP_LIMIT]],
        "risk_count": signals.risk.risk_count,
        "has_critical_risks": signals.risk.has_critical_risks,
        "days_of_runway": signals.risk.days_of_runway,
    }


class ReportSynthesizer:
    """
    Generates one report per call.

    Holds only the injected oracle and its timeout, so a single instance can
    serve concurrent calls for different users.
    """

    def __init__(
        self,
        oracle: Optional[TextOracle] = None,
        oracle_timeout: float = DEFAULT_ORACLE_TIMEOUT_SECONDS,
    ):
        self.oracle = oracle
        self.oracle_timeout = oracle_timeout

    @staticmethod
    def load_financial_data(
        request: ReportRequest,
        accounts: Optional[Iterable[Any]] = None,
        transactions: Optional[Iterable[Any]] = None,
        now: Optional[datetime] = None,
    ) -> FinancialData:
        """Resolve the timeframe and normalize either the statement or the fetched records"""
        date_range = resolve_timeframe(request.timeframe, now)
        if request.statement_data is not None:
            return normalize_statement(
                request.statement_data,
                now=date_range.end_date,
                default_range=date_range,
                default_timeframe=request.timeframe,
            )
        return normalize_financial_data(accounts, transactions, date_range, request.timeframe)

    async def generate_report(
        self,
        request: ReportRequest,
        accounts: Optional[Iterable[Any]] = None,
        transactions: Optional[Iterable[Any]] = None,
        now: Optional[datetime] = None,
    ) -> Report:
        """
        Build the full report.

        Flow:
        1. Resolve timeframe and normalize data
        2. Run extractors (cadence/recurring/travel/rules only when detailed)
        3. Render every section concurrently, one oracle call each
        4. Assemble sections in fixed order plus the summary

        Raises:
            InsufficientDataError: no accounts and no transactions at all
            InvalidDateRangeError: statement date range is inverted
        """
        now = now or utc_now()
        request_id = request.request_id or f"rpt-{uuid.uuid4().hex[:12]}"

        data = self.load_financial_data(request, accounts, transactions, now)
        if not data.accounts and not data.transactions:
            raise InsufficientDataError("No accounts or transactions available for report")

        signals = extract_signals(data, request.include_detailed)
        plans = plan_sections(data, signals)

        # gather() returns in argument order, so sections keep report order
        sections = await asyncio.gather(
            *(self._render_section(plan, order, request_id) for order, plan in enumerate(plans, start=1))
        )

        return Report(
            generated=now,
            title=REPORT_TITLE,
            format=request.format,
            period=f"{format_short_date(data.date_range.start_date)} to {format_short_date(data.date_range.end_date)}",
            sections=tuple(sections),
            summary=build_summary(data, signals),
        )

    async def _render_section(self, plan: SectionPlan, order: int, request_id: str) -> ReportSection:
        """Call the oracle once; any failure downgrades to the fallback text"""
        title = prompts.SECTION_TITLES[plan.kind]

        if plan.prompt is None:
            return ReportSection(id=plan.kind.value, order=order, title=title, content=plan.fallback, data=plan.data)

        try:
            content = await self._generate(plan.prompt, request_id, plan.kind)
            used_fallback = False
        except Exception as e:
            logging.warning(
                f"Oracle failed for section {plan.kind.value}, using fallback: {e}",
                extra={
                    "request_id": request_id,
                    "section": plan.kind.value,
                    "step": "section_fallback",
                    "error_type": type(e).__name__,
                },
            )
            content = plan.fallback
            used_fallback = True

        return ReportSection(
            id=plan.kind.value,
            order=order,
            title=title,
            content=content,
            used_fallback=used_fallback,
            data=plan.data,
        )

    async def _generate(self, prompt: str, request_id: str, kind: SectionKind) -> str:
        if self.oracle is None:
            raise OracleError("No text-generation oracle configured")

        text = await asyncio.wait_for(
            self.oracle.generate(prompt, request_id=f"{request_id}-{kind.value}", section_kind=kind.value),
            timeout=self.oracle_timeout,
        )
        if not isinstance(text, str) or not text.strip():
            raise OracleError("Oracle returned an empty response")
        return text.strip()
