"""HTTP request helper with exponential backoff retry logic"""

import asyncio
import logging
from typing import Any

import httpx

from payroll_sentinel.infrastructure.observability.metrics import (
    collaborator_failures_counter,
    collaborator_latency_histogram,
)


def is_retryable(error: Exception) -> bool:
    """Network failures and 5xx responses are transient; 4xx are not"""
    if isinstance(error, httpx.HTTPStatusError):
        return 500 <= error.response.status_code < 600
    return isinstance(error, httpx.RequestError)


async def send_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    collaborator: str,
    max_attempts: int,
    backoff_base: float,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request, retrying transient failures.

    Retry strategy:
    - Exponential backoff: 1s, 2s, 4s, ... (backoff_base * 2^(attempt-1))
    - Retries on 5xx errors and network failures only
    - Tracks latency histogram and failure counter per collaborator

    Raises:
        httpx.HTTPStatusError: On a non-retryable status or the final 5xx
        httpx.RequestError: On the final network failure
    """
    attempt = 0
    while True:
        try:
            with collaborator_latency_histogram.labels(collaborator=collaborator).time():
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            attempt += 1
            collaborator_failures_counter.labels(collaborator=collaborator).inc()

            if not is_retryable(e) or attempt >= max_attempts:
                raise

            backoff = backoff_base * (2 ** (attempt - 1))
            logging.warning(
                f"{collaborator} request failed, retrying in {backoff}s",
                extra={"collaborator": collaborator, "attempt": attempt, "error": str(e)},
            )
            await asyncio.sleep(backoff)
