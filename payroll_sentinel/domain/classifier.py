"""Required cash float and risk tier classification"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from payroll_sentinel.domain.exceptions import InvalidAmountError
from payroll_sentinel.domain.models import RiskLevel
from payroll_sentinel.utils.date_utils import days_between

Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
DEFAULT_SAFETY_MULTIPLIER = Decimal("1.1")

# Balance must cover this share of the required float to be "warning" rather than "critical"
WARNING_COVERAGE_RATIO = Decimal("0.8")


def as_decimal(value: Amount) -> Decimal:
    """Convert a currency-like value to Decimal without binary float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_currency(value: Decimal) -> Decimal:
    """Round to whole cents, halves away from zero"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_required_float(
    payroll_amount: Amount,
    safety_multiplier: Amount = DEFAULT_SAFETY_MULTIPLIER,
) -> Decimal:
    """
    Cash that must be on hand to fund a payroll with a safety buffer.

    Example:
        $51,000 payroll x 1.1 → $56,100.00 required float

    Raises:
        InvalidAmountError: If payroll_amount is negative
    """
    amount = as_decimal(payroll_amount)
    if amount < 0:
        raise InvalidAmountError(f"Payroll amount cannot be negative: {amount}")

    return round_currency(amount * as_decimal(safety_multiplier))


def determine_risk_level(current_balance: Amount, required_float: Amount) -> RiskLevel:
    """
    Classify balance coverage of the required float.

    Tiers:
    - safe:     no requirement, or balance >= 100% of required float
    - warning:  balance >= 80% of required float
    - critical: balance < 80% of required float
    """
    balance = as_decimal(current_balance)
    required = as_decimal(required_float)

    if required == 0:
        return RiskLevel.SAFE
    if balance >= required:
        return RiskLevel.SAFE
    if balance >= required * WARNING_COVERAGE_RATIO:
        return RiskLevel.WARNING
    return RiskLevel.CRITICAL


def calculate_days_until(target_date: date, now: datetime) -> int:
    """Days until target_date, rounded up; past dates give negative values"""
    return days_between(now, target_date)
