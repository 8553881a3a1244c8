"""Bank data API HTTP client for fetching aggregated account balances"""

import httpx
from datetime import datetime
from decimal import Decimal
from typing import Optional
from payroll_sentinel.domain.models import BankBalance
from payroll_sentinel.domain.exceptions import BankAPIError
from payroll_sentinel.config import settings
from payroll_sentinel.infrastructure.clients.retry import send_with_retry
from payroll_sentinel.utils.date_utils import ensure_utc, utcnow


class BankClient:
    """Client for external banking-data API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.bank_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.client_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.client_backoff_base
        self.transport = transport

    async def get_current_balance(self, company_id: str) -> BankBalance:
        """
        Fetch current balance summed across all linked accounts.

        Raises:
            BankAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await send_with_retry(
                    client,
                    "GET",
                    f"{self.base_url}/companies/{company_id}/balances",
                    collaborator="bank",
                    max_attempts=self.max_retries,
                    backoff_base=self.backoff_base,
                )
                data = response.json()

                accounts = data.get("accounts", [])
                total = sum((Decimal(str(acc["current_balance"])) for acc in accounts), Decimal("0"))
                last_sync = data.get("last_sync")

                return BankBalance(
                    company_id=company_id,
                    total_balance=total,
                    account_count=len(accounts),
                    as_of=ensure_utc(datetime.fromisoformat(last_sync)) if last_sync else utcnow(),
                )

            except httpx.TimeoutException as e:
                raise BankAPIError(f"Bank API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise BankAPIError(f"Bank API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise BankAPIError(f"Bank API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, ArithmeticError) as e:
                raise BankAPIError(f"Invalid balance data from bank: {e}") from e
