"""Alert candidate generation from a risk assessment"""

from datetime import datetime
from typing import List, Optional

from payroll_sentinel.domain.models import (
    AlertSeverity,
    AlertTrigger,
    AlertType,
    RiskAssessment,
    RiskLevel,
)
from payroll_sentinel.domain.scoring import format_currency
from payroll_sentinel.utils.date_utils import utcnow

IMMEDIATE = "immediate"
UPCOMING_PAYROLL_WINDOW_DAYS = 3


def build_alert_candidates(
    assessment: RiskAssessment,
    risk_score: int,
    alert_frequency: str = IMMEDIATE,
    now: Optional[datetime] = None,
) -> List[AlertTrigger]:
    """
    Turn an assessment into notification candidates.

    Rules:
    - critical level: critical_risk alert, always notifies
    - warning level: low_balance alert, notifies only for immediate frequency
    - payroll due within 1-3 days: upcoming_payroll alert, notifies unless safe
    - any critical projection: projection_warning alert, notifies only for immediate frequency

    Candidates are not deduplicated here; see AlertFilter.
    """
    now = now or utcnow()
    immediate = alert_frequency == IMMEDIATE
    candidates = []

    def candidate(alert_type: AlertType, severity: AlertSeverity, message: str, should_notify: bool) -> AlertTrigger:
        return AlertTrigger(
            company_id=assessment.company_id,
            alert_type=alert_type,
            severity=severity,
            message=message,
            risk_score=risk_score,
            triggered_at=now,
            should_notify=should_notify,
        )

    if assessment.risk_level == RiskLevel.CRITICAL:
        candidates.append(
            candidate(
                AlertType.CRITICAL_RISK,
                AlertSeverity.CRITICAL,
                "🚨 CRITICAL: Insufficient funds for upcoming payroll. "
                f"Current balance: {format_currency(assessment.current_balance)}",
                True,
            )
        )

    if assessment.risk_level == RiskLevel.WARNING:
        candidates.append(
            candidate(
                AlertType.LOW_BALANCE,
                AlertSeverity.WARNING,
                "⚠️ WARNING: Cash flow approaching critical levels. Monitor closely.",
                immediate,
            )
        )

    if 0 < assessment.days_until_risk <= UPCOMING_PAYROLL_WINDOW_DAYS:
        candidates.append(
            candidate(
                AlertType.UPCOMING_PAYROLL,
                AlertSeverity.CRITICAL if assessment.risk_level == RiskLevel.CRITICAL else AlertSeverity.WARNING,
                f"📅 Payroll due in {assessment.days_until_risk} day(s). "
                f"Amount: {format_currency(assessment.next_payroll_amount or 0)}",
                assessment.risk_level != RiskLevel.SAFE,
            )
        )

    critical_projections = sum(1 for p in assessment.projections if p.risk_level == RiskLevel.CRITICAL)
    if critical_projections:
        candidates.append(
            candidate(
                AlertType.PROJECTION_WARNING,
                AlertSeverity.WARNING,
                f"📊 {critical_projections} critical cash flow issues detected in projections",
                immediate,
            )
        )

    return candidates
