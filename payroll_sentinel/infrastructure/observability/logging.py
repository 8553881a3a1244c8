"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from payroll_sentinel.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_assessment(
    request_id: str,
    company_id: str,
    risk_level: str,
    risk_score: int,
    duration_ms: float,
) -> None:
    """Log structured assessment outcome for analysis"""
    logging.info(
        "Risk assessment completed",
        extra={
            "request_id": request_id,
            "company_id": company_id,
            "step": "assessment_complete",
            "risk_level": risk_level,
            "risk_score": risk_score,
            "duration_ms": duration_ms,
        },
    )


def log_alert_dispatch(company_id: str, alert_type: str, severity: str, success: bool) -> None:
    """Log a single notification attempt"""
    logging.info(
        "Alert dispatched" if success else "Alert dispatch failed",
        extra={
            "company_id": company_id,
            "step": "alert_dispatch",
            "alert_type": alert_type,
            "severity": severity,
            "success": success,
        },
    )


def log_request(
    request_id: str,
    company_id: Optional[str],
    method: str,
    endpoint: str,
    status: int,
    duration_ms: float,
) -> None:
    logging.info(
        "Request completed",
        extra={
            "request_id": request_id,
            "company_id": company_id,
            "step": "http_request",
            "method": method,
            "endpoint": endpoint,
            "status": status,
            "duration_ms": duration_ms,
        },
    )
