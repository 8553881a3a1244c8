"""Payroll provider HTTP client for fetching upcoming payroll obligations"""

import httpx
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from payroll_sentinel.domain.models import PayrollObligation, PayrollSchedule
from payroll_sentinel.domain.exceptions import PayrollAPIError
from payroll_sentinel.config import settings
from payroll_sentinel.infrastructure.clients.retry import send_with_retry
from payroll_sentinel.utils.date_utils import ensure_utc, utcnow


class PayrollClient:
    """Client for external payroll provider API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.payroll_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.client_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.client_backoff_base
        self.transport = transport

    async def get_upcoming_payroll_obligations(self, company_id: str, months_ahead: int = 3) -> PayrollSchedule:
        """
        Fetch scheduled payrolls for the next months_ahead months.

        Obligations are returned sorted ascending by pay date, which the
        risk assessment relies on to pick the next payroll.

        Raises:
            PayrollAPIError: On timeout, HTTP errors, or invalid response
                (including a negative estimated_amount)
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await send_with_retry(
                    client,
                    "GET",
                    f"{self.base_url}/companies/{company_id}/payrolls/upcoming",
                    collaborator="payroll",
                    max_attempts=self.max_retries,
                    backoff_base=self.backoff_base,
                    params={"months_ahead": months_ahead},
                )
                data = response.json()

                obligations = [
                    PayrollObligation(
                        amount=Decimal(str(payroll["estimated_amount"])),
                        date=date.fromisoformat(payroll["pay_date"]),
                        description=f"Payroll for {payroll['employee_count']} employees"
                        if payroll.get("employee_count") is not None
                        else None,
                        employee_count=payroll.get("employee_count"),
                    )
                    for payroll in data.get("upcoming_payrolls", [])
                ]
                for obligation in obligations:
                    if obligation.amount < 0:
                        raise ValueError(f"negative estimated_amount {obligation.amount} on {obligation.date}")
                last_updated = data.get("last_updated")

                return PayrollSchedule(
                    company_id=company_id,
                    obligations=tuple(sorted(obligations, key=lambda o: o.date)),
                    as_of=ensure_utc(datetime.fromisoformat(last_updated)) if last_updated else utcnow(),
                )

            except httpx.TimeoutException as e:
                raise PayrollAPIError(f"Payroll API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PayrollAPIError(f"Payroll API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise PayrollAPIError(f"Payroll API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, ArithmeticError) as e:
                raise PayrollAPIError(f"Invalid payroll data from provider: {e}") from e
