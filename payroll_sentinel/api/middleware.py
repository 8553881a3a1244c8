"""FastAPI middleware for request tracing, company tagging and metrics"""

import uuid
import time
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from payroll_sentinel.infrastructure.observability.logging import log_request
from payroll_sentinel.infrastructure.observability.metrics import request_duration_histogram


def request_company_id(request: Request) -> Optional[str]:
    """Company a request concerns: set by a route from its body, else the query or X-Company-ID header"""
    return (
        getattr(request.state, "company_id", None)
        or request.query_params.get("company_id")
        or request.headers.get("X-Company-ID")
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with a request ID and, when known, the company it concerns.

    The caller's X-Request-ID is reused when present. Both tags are echoed
    back as response headers so a caller can match an alert or log line to
    the request that produced it.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request.state.company_id = request_company_id(request)

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        company_id = request_company_id(request)
        if company_id:
            response.headers["X-Company-ID"] = company_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request latency by route and log one structured line per request"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        # Company ids stay out of the labels; they are unbounded
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)

        log_request(
            getattr(request.state, "request_id", "unknown"),
            request_company_id(request),
            request.method,
            endpoint,
            response.status_code,
            duration * 1000,
        )
        return response
