"""Risk scoring engine - numeric score, summaries and the monitoring threshold gate"""

from typing import Sequence

from payroll_sentinel.domain.classifier import Amount, as_decimal, round_currency
from payroll_sentinel.domain.models import CashFlowProjection, RiskAssessment, RiskLevel, RiskThresholds

BASE_SCORES = {
    RiskLevel.CRITICAL: 70,
    RiskLevel.WARNING: 40,
    RiskLevel.SAFE: 10,
}

RISK_EMOJI = {
    RiskLevel.CRITICAL: "🚨",
    RiskLevel.WARNING: "⚠️",
    RiskLevel.SAFE: "✅",
}

MAX_SCORE = 100
FUTURE_RISK_POINTS = 2
FUTURE_RISK_CAP = 10


def _urgency_score(days_until_risk: int) -> int:
    if days_until_risk <= 1:
        return 20
    if days_until_risk <= 3:
        return 10
    if days_until_risk <= 7:
        return 5
    return 0


def _future_risk_score(projections: Sequence[CashFlowProjection]) -> int:
    future_risks = sum(1 for p in projections if p.risk_level != RiskLevel.SAFE)
    return min(future_risks * FUTURE_RISK_POINTS, FUTURE_RISK_CAP)


def calculate_risk_score(assessment: RiskAssessment) -> int:
    """
    Calculate risk score from 0 (lowest risk) to 100 (highest risk).

    Components:
    - Base by risk level: critical 70, warning 40, safe 10
    - Urgency by days until next payroll: <=1 day +20, <=3 +10, <=7 +5
    - Projected non-safe events: +2 each, capped at +10

    Components are summed first, then clamped to [0, 100].
    """
    score = (
        BASE_SCORES[assessment.risk_level]
        + _urgency_score(assessment.days_until_risk)
        + _future_risk_score(assessment.projections)
    )
    return max(0, min(score, MAX_SCORE))


def format_currency(amount: Amount) -> str:
    """Format as US dollars, e.g. $56,100.00 or -$11,000.00"""
    value = round_currency(as_decimal(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def risk_level_emoji(risk_level: RiskLevel) -> str:
    return RISK_EMOJI.get(risk_level, "❓")


def generate_risk_summary(assessment: RiskAssessment) -> str:
    """One-sentence human-readable summary of the assessment"""
    balance = format_currency(assessment.current_balance)
    emoji = risk_level_emoji(assessment.risk_level)

    messages = {
        RiskLevel.CRITICAL: (
            f"{emoji} CRITICAL: Current balance {balance} is insufficient for upcoming payroll. "
            "Immediate action required."
        ),
        RiskLevel.WARNING: (
            f"{emoji} WARNING: Current balance {balance} is approaching minimum requirements. "
            "Monitor closely."
        ),
        RiskLevel.SAFE: (
            f"{emoji} HEALTHY: Current balance {balance} meets payroll requirements. "
            "Continue monitoring."
        ),
    }
    return messages[assessment.risk_level]


def evaluate_risk_thresholds(
    assessment: RiskAssessment,
    risk_score: int,
    thresholds: RiskThresholds,
) -> bool:
    """
    Decide whether an assessment is risky enough to look for alerts.

    True when the score, days until payroll or risk level reach either the
    critical or warning thresholds, or when balance / required float is at or
    below either balance ratio.
    """
    if (
        risk_score >= thresholds.critical_risk_score
        or assessment.days_until_risk <= thresholds.critical_days_until_payroll
        or assessment.risk_level == RiskLevel.CRITICAL
    ):
        return True

    if (
        risk_score >= thresholds.warning_risk_score
        or assessment.days_until_risk <= thresholds.warning_days_until_payroll
        or assessment.risk_level == RiskLevel.WARNING
    ):
        return True

    if assessment.required_float > 0:
        balance_ratio = assessment.current_balance / assessment.required_float
        if balance_ratio <= max(
            as_decimal(thresholds.critical_balance_ratio),
            as_decimal(thresholds.warning_balance_ratio),
        ):
            return True

    return False

