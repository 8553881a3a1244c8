"""Unit tests for risk scoring logic"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from payroll_sentinel.domain.assessment import perform_risk_assessment
from payroll_sentinel.domain.models import PayrollObligation, RiskLevel, RiskThresholds
from payroll_sentinel.domain.scoring import (
    calculate_risk_score,
    evaluate_risk_thresholds,
    format_currency,
    generate_risk_summary,
    risk_level_emoji,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def assess(balance: str, *payrolls):
    obligations = [PayrollObligation(amount=Decimal(amount), date=pay_date) for amount, pay_date in payrolls]
    return perform_risk_assessment("company_1", Decimal(balance), obligations, now=NOW)


def test_safe_company_far_from_payroll_scores_base_only():
    assessment = assess("200000", ("51000", date(2025, 3, 31)))
    assert calculate_risk_score(assessment) == 10


def test_no_obligations_scores_safe_base_plus_urgency():
    """days_until_risk of 0 counts as imminent"""
    assessment = assess("1000")
    assert calculate_risk_score(assessment) == 30


@pytest.mark.parametrize(
    "pay_date,expected",
    [
        (date(2025, 3, 11), 30),  # 1 day: +20
        (date(2025, 3, 13), 20),  # 3 days: +10
        (date(2025, 3, 17), 15),  # 7 days: +5
        (date(2025, 3, 18), 10),  # 8 days: no urgency
    ],
)
def test_urgency_points_by_days_until_payroll(pay_date, expected):
    assessment = assess("200000", ("51000", pay_date))
    assert calculate_risk_score(assessment) == expected


def test_warning_company_scores_base_urgency_and_projection():
    # 50000 - 51000 = -1000 after payroll: one critical projection (+2)
    assessment = assess("50000", ("51000", date(2025, 3, 13)))
    assert assessment.risk_level == RiskLevel.WARNING
    assert calculate_risk_score(assessment) == 40 + 10 + 2


def test_future_risk_points_are_capped():
    payrolls = [("51000", date(2025, 3, 11 + i)) for i in range(8)]
    assessment = assess("40000", *payrolls)
    # 70 base + 20 urgency + min(8 * 2, 10)
    assert calculate_risk_score(assessment) == 100


def test_score_is_clamped_to_100():
    payrolls = [("51000", date(2025, 3, 11 + i)) for i in range(10)]
    assessment = assess("0", *payrolls)
    assert calculate_risk_score(assessment) == 100


@pytest.mark.parametrize(
    "amount,expected",
    [
        (Decimal("56100"), "$56,100.00"),
        (Decimal("-11000"), "-$11,000.00"),
        (Decimal("0.005"), "$0.01"),
        (0, "$0.00"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_summary_per_level():
    assert generate_risk_summary(assess("200000", ("51000", date(2025, 3, 31)))) == (
        "✅ HEALTHY: Current balance $200,000.00 meets payroll requirements. Continue monitoring."
    )
    assert generate_risk_summary(assess("50000", ("51000", date(2025, 3, 31)))) == (
        "⚠️ WARNING: Current balance $50,000.00 is approaching minimum requirements. Monitor closely."
    )
    assert generate_risk_summary(assess("40000", ("51000", date(2025, 3, 31)))) == (
        "🚨 CRITICAL: Current balance $40,000.00 is insufficient for upcoming payroll. Immediate action required."
    )


def test_risk_level_emoji():
    assert risk_level_emoji(RiskLevel.CRITICAL) == "🚨"
    assert risk_level_emoji(RiskLevel.SAFE) == "✅"


def test_thresholds_not_crossed_for_comfortable_company():
    assessment = assess("200000", ("51000", date(2025, 3, 31)))
    assert evaluate_risk_thresholds(assessment, calculate_risk_score(assessment), RiskThresholds()) is False


def test_thresholds_crossed_by_critical_level():
    assessment = assess("40000", ("51000", date(2025, 3, 31)))
    assert evaluate_risk_thresholds(assessment, calculate_risk_score(assessment), RiskThresholds()) is True


def test_thresholds_crossed_by_upcoming_payroll():
    assessment = assess("200000", ("51000", date(2025, 3, 15)))
    assert assessment.risk_level == RiskLevel.SAFE
    assert evaluate_risk_thresholds(assessment, 10, RiskThresholds()) is True


def test_thresholds_crossed_by_thin_balance_ratio():
    # 60000 / 56100 = 1.07, safe but under the 1.2 warning ratio
    assessment = assess("60000", ("51000", date(2025, 3, 31)))
    assert assessment.risk_level == RiskLevel.SAFE
    assert evaluate_risk_thresholds(assessment, 10, RiskThresholds()) is True


def test_thresholds_crossed_by_score():
    assessment = assess("200000", ("51000", date(2025, 3, 31)))
    assert evaluate_risk_thresholds(assessment, 60, RiskThresholds()) is True
