"""Risk assessment aggregation - combines classification, projections and recommendations"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from payroll_sentinel.domain.classifier import (
    DEFAULT_SAFETY_MULTIPLIER,
    Amount,
    as_decimal,
    calculate_days_until,
    calculate_required_float,
    determine_risk_level,
)
from payroll_sentinel.domain.models import (
    CashFlowProjection,
    CashInflow,
    ConfidenceLevel,
    PayrollObligation,
    RiskAssessment,
    RiskLevel,
)
from payroll_sentinel.domain.projections import generate_projections
from payroll_sentinel.utils.date_utils import ensure_utc, utcnow

RECOMMENDATIONS: Dict[RiskLevel, Tuple[str, ...]] = {
    RiskLevel.CRITICAL: (
        "🚨 IMMEDIATE ACTION REQUIRED: Insufficient funds for upcoming payroll",
        "💳 Consider emergency credit line or business loan",
        "⏸️ Delay non-essential payments until after cash flow improves",
        "📞 Contact banking partner for expedited credit options",
    ),
    RiskLevel.WARNING: (
        "⚠️ Monitor cash flow closely over the next few days",
        "🔄 Prepare backup funding options (credit line, etc.)",
        "📈 Consider accelerating receivables collection",
        "📋 Review and postpone non-critical expenses",
    ),
    RiskLevel.SAFE: (
        "✅ Cash flow is currently healthy",
        "📊 Continue monitoring for any changes",
    ),
}


def generate_recommendations(
    risk_level: RiskLevel,
    projections: Sequence[CashFlowProjection],
) -> List[str]:
    """Fixed advice for the current tier, followed by warnings about projected shortfalls"""
    recommendations = list(RECOMMENDATIONS[risk_level])

    future_risks = [p for p in projections if p.risk_level != RiskLevel.SAFE]
    if future_risks:
        recommendations.append(f"⚡ {len(future_risks)} potential future cash flow issues detected")

        critical_risks = [p for p in future_risks if p.risk_level == RiskLevel.CRITICAL]
        if critical_risks:
            recommendations.append(f"🔴 {len(critical_risks)} CRITICAL cash flow issues in projections")

    return recommendations


def perform_risk_assessment(
    company_id: str,
    current_balance: Amount,
    obligations: Sequence[PayrollObligation],
    inflows: Sequence[CashInflow] = (),
    now: Optional[datetime] = None,
    safety_multiplier: Amount = DEFAULT_SAFETY_MULTIPLIER,
) -> RiskAssessment:
    """
    Main entry point: assess a company's balance against its upcoming payrolls.

    The first obligation is treated as the next payroll, so callers must pass
    obligations sorted ascending by date. With no obligations the assessment is
    safe with a zero required float rather than an error.

    Raises:
        InvalidAmountError: If any payroll amount is negative
    """
    now = now or utcnow()
    balance = as_decimal(current_balance)

    next_payroll = obligations[0] if obligations else None
    required_float = calculate_required_float(next_payroll.amount, safety_multiplier) if next_payroll else Decimal("0.00")
    risk_level = determine_risk_level(balance, required_float)
    days_until_risk = calculate_days_until(next_payroll.date, now) if next_payroll else 0

    projections = generate_projections(balance, obligations, inflows, safety_multiplier)
    recommendations = generate_recommendations(risk_level, projections)

    return RiskAssessment(
        company_id=company_id,
        current_balance=balance,
        required_float=required_float,
        risk_level=risk_level,
        days_until_risk=days_until_risk,
        recommendations=tuple(recommendations),
        projections=tuple(projections),
        assessment_date=now,
        next_payroll_date=next_payroll.date if next_payroll else None,
        next_payroll_amount=as_decimal(next_payroll.amount) if next_payroll else None,
    )


def assess_data_confidence(
    bank_as_of: datetime,
    account_count: int,
    payroll_count: int,
    payroll_as_of: datetime,
    now: Optional[datetime] = None,
) -> ConfidenceLevel:
    """
    Grade how much an analysis can be trusted from input freshness and coverage.

    Points:
    - Bank data < 24h old: +2 (< 7 days: +1)
    - Two or more bank accounts: +1
    - Two or more upcoming payrolls: +1
    - Payroll data < 24h old: +1

    4+ points is high confidence, 2-3 medium, otherwise low.
    """
    now = now or utcnow()
    score = 0

    bank_age = now - ensure_utc(bank_as_of)
    if bank_age < timedelta(days=1):
        score += 2
    elif bank_age < timedelta(days=7):
        score += 1

    if account_count >= 2:
        score += 1

    if payroll_count >= 2:
        score += 1

    if now - ensure_utc(payroll_as_of) < timedelta(days=1):
        score += 1

    if score >= 4:
        return ConfidenceLevel.HIGH
    if score >= 2:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW
