"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class RiskLevel(str, Enum):
    """Coverage tier of a balance against its required float"""

    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"


class ConfidenceLevel(str, Enum):
    """Quality of the data behind an analysis or an expected inflow"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertType(str, Enum):
    LOW_BALANCE = "low_balance"
    UPCOMING_PAYROLL = "upcoming_payroll"
    CRITICAL_RISK = "critical_risk"
    PROJECTION_WARNING = "projection_warning"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class PayrollObligation:
    """Future payroll disbursement reported by the payroll provider"""

    amount: Decimal
    date: date
    description: Optional[str] = None
    employee_count: Optional[int] = None


@dataclass(frozen=True)
class CashInflow:
    """Expected incoming cash event"""

    amount: Decimal
    date: date
    description: Optional[str] = None
    confidence: Optional[ConfidenceLevel] = None


@dataclass(frozen=True)
class CashFlowProjection:
    """Simulated balance after a single inflow or outflow event"""

    date: date
    expected_inflow: Decimal
    expected_outflow: Decimal
    net_flow: Decimal
    running_balance: Decimal
    risk_level: RiskLevel
    description: str


@dataclass(frozen=True)
class RiskAssessment:
    """Point-in-time risk result for one company"""

    company_id: str
    current_balance: Decimal
    required_float: Decimal
    risk_level: RiskLevel
    days_until_risk: int  # negative when the next payroll date has passed
    recommendations: Tuple[str, ...]
    projections: Tuple[CashFlowProjection, ...]
    assessment_date: datetime
    next_payroll_date: Optional[date] = None
    next_payroll_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class AlertTrigger:
    """Candidate notification derived from an assessment"""

    company_id: str
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    risk_score: int
    triggered_at: datetime
    should_notify: bool


@dataclass(frozen=True)
class AlertHistoryEntry:
    """Record of an alert that was successfully dispatched"""

    company_id: str
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    risk_score: int
    sent_at: datetime
    channel_message_id: Optional[str] = None


@dataclass(frozen=True)
class BankBalance:
    """Balance aggregated across a company's linked accounts"""

    company_id: str
    total_balance: Decimal
    account_count: int
    as_of: datetime


@dataclass(frozen=True)
class PayrollSchedule:
    """Upcoming obligations, sorted ascending by date"""

    company_id: str
    obligations: Tuple[PayrollObligation, ...]
    as_of: datetime


@dataclass(frozen=True)
class NotificationReceipt:
    """Outcome of a single notification channel send"""

    success: bool
    channel_message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CashFlowAnalysis:
    """Assessment enriched with the provenance of its inputs"""

    company_id: str
    assessment: RiskAssessment
    risk_score: int
    summary: str
    bank_accounts_analyzed: int
    payrolls_analyzed: int
    confidence_level: ConfidenceLevel
    bank_data_as_of: datetime
    payroll_data_as_of: datetime


@dataclass(frozen=True)
class RiskThresholds:
    """Monitoring gate: any crossed threshold means risk was detected"""

    critical_risk_score: int = 80
    critical_days_until_payroll: int = 2
    critical_balance_ratio: Decimal = Decimal("0.8")
    warning_risk_score: int = 60
    warning_days_until_payroll: int = 7
    warning_balance_ratio: Decimal = Decimal("1.2")


@dataclass
class DispatchResult:
    """Counts from one filter-and-send pass"""

    approved: List[AlertTrigger] = field(default_factory=list)
    sent: int = 0
    failed: int = 0
    suppressed: int = 0


@dataclass
class MonitoringResult:
    """Outcome of monitoring a single company"""

    company_id: str
    monitored_at: datetime
    risk_detected: bool = False
    analysis: Optional[CashFlowAnalysis] = None
    candidates: List[AlertTrigger] = field(default_factory=list)
    dispatch: DispatchResult = field(default_factory=DispatchResult)
    errors: List[str] = field(default_factory=list)


@dataclass
class MonitoringStats:
    """Aggregate alerting activity across all monitored companies"""

    companies_monitored: int
    alerts_sent_today: int
    average_risk_score: float
    companies_alerted_today: int
