"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from payroll_sentinel.domain.models import (
    AlertHistoryEntry,
    AlertSeverity,
    AlertTrigger,
    AlertType,
    ConfidenceLevel,
    RiskAssessment,
    RiskLevel,
)


class ObligationSchema(BaseModel):
    """Upcoming payroll in an evaluation request"""

    amount: Decimal = Field(..., description="Payroll amount; negative amounts are rejected")
    date: date
    description: Optional[str] = None
    employee_count: Optional[int] = Field(None, ge=0)


class InflowSchema(BaseModel):
    """Expected incoming cash in an evaluation request"""

    amount: Decimal = Field(..., ge=0)
    date: date
    description: Optional[str] = None
    confidence: Optional[ConfidenceLevel] = None


class EvaluateRequest(BaseModel):
    """Request body for POST /v1/risk/evaluate"""

    company_id: str = Field(..., min_length=1, description="Company identifier")
    current_balance: Decimal
    obligations: List[ObligationSchema] = Field(default_factory=list, description="Sorted ascending by date")
    inflows: List[InflowSchema] = Field(default_factory=list)


class MonitorRequest(BaseModel):
    """Request body for POST /v1/risk/assessments"""

    company_id: str = Field(..., min_length=1, description="Company identifier")


class ProjectionSchema(BaseModel):
    date: date
    expected_inflow: Decimal
    expected_outflow: Decimal
    net_flow: Decimal
    running_balance: Decimal
    risk_level: RiskLevel
    description: str


class AssessmentSchema(BaseModel):
    """Full risk assessment"""

    company_id: str
    current_balance: Decimal
    required_float: Decimal
    risk_level: RiskLevel
    days_until_risk: int
    recommendations: List[str]
    projections: List[ProjectionSchema]
    assessment_date: datetime
    next_payroll_date: Optional[date] = None
    next_payroll_amount: Optional[Decimal] = None

    @classmethod
    def from_domain(cls, assessment: RiskAssessment) -> "AssessmentSchema":
        return cls(
            company_id=assessment.company_id,
            current_balance=assessment.current_balance,
            required_float=assessment.required_float,
            risk_level=assessment.risk_level,
            days_until_risk=assessment.days_until_risk,
            recommendations=list(assessment.recommendations),
            projections=[
                ProjectionSchema(
                    date=p.date,
                    expected_inflow=p.expected_inflow,
                    expected_outflow=p.expected_outflow,
                    net_flow=p.net_flow,
                    running_balance=p.running_balance,
                    risk_level=p.risk_level,
                    description=p.description,
                )
                for p in assessment.projections
            ],
            assessment_date=assessment.assessment_date,
            next_payroll_date=assessment.next_payroll_date,
            next_payroll_amount=assessment.next_payroll_amount,
        )


class EvaluateResponse(BaseModel):
    """Response for POST /v1/risk/evaluate"""

    assessment: AssessmentSchema
    risk_score: int
    summary: str


class AlertSchema(BaseModel):
    """Alert candidate produced by an assessment"""

    alert_type: AlertType
    severity: AlertSeverity
    message: str
    risk_score: int
    triggered_at: datetime
    should_notify: bool

    @classmethod
    def from_domain(cls, alert: AlertTrigger) -> "AlertSchema":
        return cls(
            alert_type=alert.alert_type,
            severity=alert.severity,
            message=alert.message,
            risk_score=alert.risk_score,
            triggered_at=alert.triggered_at,
            should_notify=alert.should_notify,
        )


class MonitorResponse(BaseModel):
    """Response for POST /v1/risk/assessments"""

    assessment_id: str
    company_id: str
    risk_detected: bool
    risk_score: int
    summary: str
    confidence_level: ConfidenceLevel
    alerts_sent: int
    alerts_failed: int
    alerts_suppressed: int
    candidates: List[AlertSchema]
    errors: List[str]
    assessment: AssessmentSchema


class AssessmentHistoryItem(BaseModel):
    """Single persisted assessment"""

    assessment_id: str
    risk_level: RiskLevel
    risk_score: int
    current_balance: Decimal
    required_float: Decimal
    days_until_risk: int
    assessed_at: str


class AssessmentHistoryResponse(BaseModel):
    """Response for GET /v1/risk/assessments"""

    company_id: str
    assessments: List[AssessmentHistoryItem]


class ScoreResponse(BaseModel):
    """Response for GET /v1/risk/score"""

    company_id: str
    risk_score: int
    risk_level: RiskLevel
    summary: str
    days_until_next_payroll: int
    current_balance: Decimal


class AlertHistoryItem(BaseModel):
    """Single dispatched alert"""

    alert_type: AlertType
    severity: AlertSeverity
    message: str
    risk_score: int
    sent_at: datetime
    channel_message_id: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: AlertHistoryEntry) -> "AlertHistoryItem":
        return cls(
            alert_type=entry.alert_type,
            severity=entry.severity,
            message=entry.message,
            risk_score=entry.risk_score,
            sent_at=entry.sent_at,
            channel_message_id=entry.channel_message_id,
        )


class AlertHistoryResponse(BaseModel):
    """Response for GET /v1/alerts/history"""

    company_id: str
    alerts: List[AlertHistoryItem]


class MonitoringStatsResponse(BaseModel):
    """Response for GET /v1/alerts/stats"""

    companies_monitored: int
    alerts_sent_today: int
    average_risk_score: float
    companies_alerted_today: int
