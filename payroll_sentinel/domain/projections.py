"""Event-by-event cash flow projection"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Sequence

from payroll_sentinel.domain.classifier import (
    DEFAULT_SAFETY_MULTIPLIER,
    Amount,
    as_decimal,
    calculate_required_float,
    determine_risk_level,
)
from payroll_sentinel.domain.models import CashFlowProjection, CashInflow, PayrollObligation

ZERO = Decimal("0")


@dataclass(frozen=True)
class _CashEvent:
    date: date
    amount: Decimal
    is_outflow: bool
    description: str


def _merge_events(
    obligations: Sequence[PayrollObligation],
    inflows: Sequence[CashInflow],
) -> List[_CashEvent]:
    """Outflows then inflows, stable-sorted by date so same-day events keep input order"""
    events = [
        _CashEvent(
            date=o.date,
            amount=as_decimal(o.amount),
            is_outflow=True,
            description=o.description or f"Payroll - {o.employee_count or 'N/A'} employees",
        )
        for o in obligations
    ]
    events.extend(
        _CashEvent(
            date=i.date,
            amount=as_decimal(i.amount),
            is_outflow=False,
            description=i.description or "Expected income",
        )
        for i in inflows
    )
    return sorted(events, key=lambda e: e.date)


def generate_projections(
    current_balance: Amount,
    obligations: Sequence[PayrollObligation],
    inflows: Sequence[CashInflow] = (),
    safety_multiplier: Amount = DEFAULT_SAFETY_MULTIPLIER,
) -> List[CashFlowProjection]:
    """
    Project the running balance across upcoming payrolls and expected inflows.

    One projection per event (not per calendar day). Each outflow is classified
    against the required float for that payroll; inflows carry no requirement.

    Raises:
        InvalidAmountError: If any payroll amount is negative
    """
    running_balance = as_decimal(current_balance)
    projections = []

    for event in _merge_events(obligations, inflows):
        inflow = ZERO if event.is_outflow else event.amount
        outflow = event.amount if event.is_outflow else ZERO
        net_flow = inflow - outflow
        running_balance += net_flow

        required_float = calculate_required_float(outflow, safety_multiplier) if event.is_outflow else ZERO

        projections.append(
            CashFlowProjection(
                date=event.date,
                expected_inflow=inflow,
                expected_outflow=outflow,
                net_flow=net_flow,
                running_balance=running_balance,
                risk_level=determine_risk_level(running_balance, required_float),
                description=event.description,
            )
        )

    return projections
