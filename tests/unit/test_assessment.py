"""Unit tests for risk assessment aggregation"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from payroll_sentinel.domain.assessment import (
    RECOMMENDATIONS,
    assess_data_confidence,
    generate_recommendations,
    perform_risk_assessment,
)
from payroll_sentinel.domain.exceptions import InvalidAmountError
from payroll_sentinel.domain.models import CashFlowProjection, ConfidenceLevel, PayrollObligation, RiskLevel

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def obligation(amount: str, pay_date: date) -> PayrollObligation:
    return PayrollObligation(amount=Decimal(amount), date=pay_date, employee_count=25)


def test_healthy_company_is_safe():
    assessment = perform_risk_assessment(
        "company_healthy",
        Decimal("200000"),
        [obligation("51000", date(2025, 3, 14))],
        now=NOW,
    )

    assert assessment.required_float == Decimal("56100.00")
    assert assessment.risk_level == RiskLevel.SAFE
    assert assessment.days_until_risk == 4
    assert assessment.next_payroll_date == date(2025, 3, 14)
    assert assessment.next_payroll_amount == Decimal("51000")
    assert assessment.assessment_date == NOW
    assert list(assessment.recommendations) == list(RECOMMENDATIONS[RiskLevel.SAFE])


def test_underfunded_company_is_critical():
    assessment = perform_risk_assessment(
        "company_short",
        Decimal("40000"),
        [obligation("51000", date(2025, 3, 12))],
        now=NOW,
    )

    assert assessment.risk_level == RiskLevel.CRITICAL
    assert assessment.recommendations[:4] == RECOMMENDATIONS[RiskLevel.CRITICAL]
    assert assessment.recommendations[4:] == (
        "⚡ 1 potential future cash flow issues detected",
        "🔴 1 CRITICAL cash flow issues in projections",
    )


def test_partially_funded_company_is_warning():
    assessment = perform_risk_assessment(
        "company_tight",
        Decimal("50000"),
        [obligation("51000", date(2025, 3, 12))],
        now=NOW,
    )

    assert assessment.risk_level == RiskLevel.WARNING


def test_no_obligations_is_trivially_safe():
    assessment = perform_risk_assessment("company_idle", Decimal("1000"), [], now=NOW)

    assert assessment.required_float == Decimal("0")
    assert assessment.risk_level == RiskLevel.SAFE
    assert assessment.days_until_risk == 0
    assert assessment.projections == ()
    assert assessment.next_payroll_date is None
    assert assessment.next_payroll_amount is None
    assert list(assessment.recommendations) == [
        "✅ Cash flow is currently healthy",
        "📊 Continue monitoring for any changes",
    ]


def test_first_obligation_is_the_next_payroll():
    """Obligations are not re-sorted; the first entry drives the required float"""
    assessment = perform_risk_assessment(
        "company_unsorted",
        Decimal("100000"),
        [obligation("20000", date(2025, 3, 28)), obligation("90000", date(2025, 3, 14))],
        now=NOW,
    )

    assert assessment.required_float == Decimal("22000.00")
    assert assessment.next_payroll_date == date(2025, 3, 28)


def test_past_due_payroll_gives_negative_days():
    assessment = perform_risk_assessment(
        "company_late",
        Decimal("100000"),
        [obligation("10000", date(2025, 3, 8))],
        now=NOW,
    )

    assert assessment.days_until_risk == -2


def test_negative_payroll_amount_is_rejected():
    with pytest.raises(InvalidAmountError):
        perform_risk_assessment("company_bad", Decimal("1000"), [obligation("-5", date(2025, 3, 14))], now=NOW)


def test_recommendations_count_future_warnings_without_critical():
    warning_projection = CashFlowProjection(
        date=date(2025, 3, 14),
        expected_inflow=Decimal("0"),
        expected_outflow=Decimal("10000"),
        net_flow=Decimal("-10000"),
        running_balance=Decimal("10000"),
        risk_level=RiskLevel.WARNING,
        description="Payroll",
    )

    recommendations = generate_recommendations(RiskLevel.SAFE, [warning_projection])

    assert recommendations[-1] == "⚡ 1 potential future cash flow issues detected"
    assert len(recommendations) == 3


def test_confidence_high_for_fresh_complete_data():
    confidence = assess_data_confidence(
        bank_as_of=NOW - timedelta(hours=2),
        account_count=3,
        payroll_count=4,
        payroll_as_of=NOW - timedelta(hours=1),
        now=NOW,
    )
    assert confidence == ConfidenceLevel.HIGH


def test_confidence_medium_for_week_old_bank_data():
    confidence = assess_data_confidence(
        bank_as_of=NOW - timedelta(days=3),
        account_count=1,
        payroll_count=1,
        payroll_as_of=NOW - timedelta(hours=1),
        now=NOW,
    )
    assert confidence == ConfidenceLevel.MEDIUM


def test_confidence_low_for_stale_sparse_data():
    confidence = assess_data_confidence(
        bank_as_of=NOW - timedelta(days=10),
        account_count=1,
        payroll_count=1,
        payroll_as_of=NOW - timedelta(days=2),
        now=NOW,
    )
    assert confidence == ConfidenceLevel.LOW


def test_custom_safety_multiplier_applies_to_assessment_and_projections():
    assessment = perform_risk_assessment(
        "company_buffered",
        Decimal("60000"),
        [obligation("50000", date(2025, 3, 14))],
        now=NOW,
        safety_multiplier=Decimal("1.25"),
    )

    assert assessment.required_float == Decimal("62500.00")
    assert assessment.risk_level == RiskLevel.WARNING
    assert assessment.projections[0].running_balance == Decimal("10000")


def test_repeated_assessment_with_same_inputs_is_identical():
    obligations = [obligation("51000", date(2025, 3, 12)), obligation("52000", date(2025, 3, 26))]

    first = perform_risk_assessment("company_1", Decimal("40000"), obligations, now=NOW)
    second = perform_risk_assessment("company_1", Decimal("40000"), obligations, now=NOW)

    assert first == second
    assert first.projections == second.projections
