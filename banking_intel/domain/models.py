"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from banking_intel.domain.exceptions import InvalidDateRangeError
from banking_intel.utils.date_utils import days_between


class Elasticity(str, Enum):
    """How discretionary a spending category is"""

    INELASTIC = "Inelastic"
    MODERATE = "Moderate"
    ELASTIC = "Elastic-ish"


class Severity(str, Enum):
    MEDIUM = "medium"
    HIGH = "high"


class ReportFormat(str, Enum):
    JSON = "json"
    HTML = "html"
    PDF = "pdf"


class AnalysisStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"


class SectionKind(str, Enum):
    """Report sections, declared in report order"""

    ACCOUNT_SUMMARY = "account_summary"
    BEHAVIOR = "behavior_preferences"
    MERCHANTS = "merchant_analysis"
    RISK = "risk_compliance"
    CADENCE = "cadence_routines"
    RECURRING = "recurring_subscriptions"
    TRAVEL = "travel_events"
    BACKEND_RULES = "backend_rules"


def to_jsonable(value: Any) -> Any:
    """Recursively convert dataclasses, enums and datetimes to JSON-safe values"""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


class Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self)


# ---------------------------------------------------------------------------
# Input snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Account(Serializable):
    """Account balance snapshot; numeric fields are already coerced"""

    account_id: str
    name: str
    type: str
    balance: float
    available_balance: float
    currency: str = "USD"
    subtype: Optional[str] = None
    credit_limit: Optional[float] = None


@dataclass(frozen=True)
class Transaction(Serializable):
    """Transaction snapshot. Sign of amount decides income (+) vs expense (-)."""

    transaction_id: str
    account_id: str
    date: Optional[datetime]
    description: str
    amount: float
    category: Optional[str] = None
    merchant_name: Optional[str] = None
    pending: bool = False

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount > 0


@dataclass(frozen=True)
class DateRange(Serializable):
    start_date: datetime
    end_date: datetime

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise InvalidDateRangeError(
                f"start_date {self.start_date.isoformat()} is after end_date {self.end_date.isoformat()}"
            )

    @property
    def days_in_period(self) -> int:
        """Whole days covered, rounded up and never below 1"""
        return max(1, days_between(self.start_date, self.end_date))


@dataclass(frozen=True)
class FinancialData:
    """Canonical data set handed to the signal extractors"""

    accounts: Tuple[Account, ...]
    transactions: Tuple[Transaction, ...]
    date_range: DateRange
    timeframe: str
    user: Optional[Dict[str, Any]] = None

    @property
    def expenses(self) -> Tuple[Transaction, ...]:
        return tuple(t for t in self.transactions if t.is_expense)


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CashFlowSummary(Serializable):
    total_balance: float
    income: float
    expenses: float
    net_change: float
    average_daily_spend: float
    days_in_period: int


@dataclass(frozen=True)
class CategorySignal(Serializable):
    name: str
    count: int
    total: float
    percent_of_total: float
    elasticity: Elasticity


@dataclass(frozen=True)
class MerchantSignal(Serializable):
    name: str
    count: int
    total: float


@dataclass(frozen=True)
class Subscription(Serializable):
    merchant: str
    average_amount: float
    frequency: str  # "monthly" or "periodic"
    last_date: Optional[datetime]
    count: int
    type: str  # "subscription" or "recurring"


@dataclass(frozen=True)
class RecurringAnalysis(Serializable):
    status: AnalysisStatus
    subscriptions: Tuple[Subscription, ...] = ()
    tech_subscriptions: Tuple[Subscription, ...] = ()


@dataclass(frozen=True)
class TravelPeriod(Serializable):
    start_date: datetime
    end_date: datetime
    duration_days: int
    total_spend: float
    transaction_count: int


@dataclass(frozen=True)
class TravelAnalysis(Serializable):
    status: AnalysisStatus
    periods: Tuple[TravelPeriod, ...] = ()
    travel_transaction_count: int = 0
    travel_spend: float = 0.0


@dataclass(frozen=True)
class CadenceProfile(Serializable):
    weekday_count: int
    weekend_count: int
    morning_count: int
    afternoon_count: int
    evening_count: int
    weekday_percent: float
    weekend_percent: float
    morning_percent: float
    afternoon_percent: float
    evening_percent: float
    insufficient_data: bool = False


@dataclass(frozen=True)
class Risk(Serializable):
    type: str
    severity: Severity
    description: str


@dataclass(frozen=True)
class RiskAssessment(Serializable):
    total_balance: float
    average_daily_spend: float
    days_of_runway: float
    gambling_total: float
    gambling_percent: float
    gambling_transaction_count: int
    risks: Tuple[Risk, ...] = ()

    @property
    def risk_count(self) -> int:
        return len(self.risks)

    @property
    def has_critical_risks(self) -> bool:
        return any(r.severity == Severity.HIGH for r in self.risks)

    def has_risk(self, risk_type: str) -> bool:
        return any(r.type == risk_type for r in self.risks)

    def to_dict(self) -> Dict[str, Any]:
        data = to_jsonable(self)
        data["risk_count"] = self.risk_count
        data["has_critical_risks"] = self.has_critical_risks
        return data


@dataclass(frozen=True)
class BackendRule(Serializable):
    """Condition/action trigger candidate"""

    key: str
    condition: str
    actions: Tuple[str, ...]
    label: str

    def as_rule_text(self) -> str:
        actions = ", ".join(f'"{a}"' for a in self.actions)
        return f'{{ "{self.key}": {{ "if": "{self.condition}", "then": [{actions}] }} }}'


@dataclass(frozen=True)
class RuleSet(Serializable):
    rules: Tuple[BackendRule, ...] = ()
    priority_stack: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportRequest:
    user_id: str
    timeframe: str = "30d"
    request_id: Optional[str] = None
    include_detailed: bool = True
    format: ReportFormat = ReportFormat.JSON
    statement_data: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ReportSection:
    id: str
    order: int
    title: str
    content: str
    used_fallback: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order,
            "title": self.title,
            "content": self.content,
            "used_fallback": self.used_fallback,
            **self.data,
        }


@dataclass(frozen=True)
class Report:
    generated: datetime
    title: str
    format: ReportFormat
    period: str
    sections: Tuple[ReportSection, ...]
    summary: Dict[str, Any]

    def section(self, section_id: str) -> Optional[ReportSection]:
        return next((s for s in self.sections if s.id == section_id), None)

    @property
    def fallback_count(self) -> int:
        return sum(1 for s in self.sections if s.used_fallback)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated": self.generated.isoformat(),
            "title": self.title,
            "format": self.format.value,
            "period": self.period,
            "sections": [s.to_dict() for s in self.sections],
            "summary": to_jsonable(self.summary),
        }
