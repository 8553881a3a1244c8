"""Dependency injection for FastAPI endpoints"""

from datetime import timedelta
from decimal import Decimal

from fastapi import Request

from payroll_sentinel.config import Settings, settings
from payroll_sentinel.domain.models import RiskThresholds
from payroll_sentinel.infrastructure.clients.bank import BankClient
from payroll_sentinel.infrastructure.clients.payroll import PayrollClient
from payroll_sentinel.infrastructure.clients.slack import LoggingNotifier, SlackNotifier
from payroll_sentinel.infrastructure.database.session import SessionLocal
from payroll_sentinel.services.alert_filter import (
    AlertFilter,
    AlertHistoryStore,
    InMemoryAlertHistoryStore,
    SqlAlchemyAlertHistoryStore,
)
from payroll_sentinel.services.risk_monitor import RiskMonitor


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def build_thresholds(config: Settings = settings) -> RiskThresholds:
    return RiskThresholds(
        critical_risk_score=config.critical_risk_score,
        critical_days_until_payroll=config.critical_days_until_payroll,
        critical_balance_ratio=Decimal(str(config.critical_balance_ratio)),
        warning_risk_score=config.warning_risk_score,
        warning_days_until_payroll=config.warning_days_until_payroll,
        warning_balance_ratio=Decimal(str(config.warning_balance_ratio)),
    )


def build_alert_filter(config: Settings = settings) -> AlertFilter:
    """Alert filter backed by the configured history store"""
    store: AlertHistoryStore
    if config.alert_store_backend == "database":
        store = SqlAlchemyAlertHistoryStore(SessionLocal, limit=config.alert_history_limit)
    else:
        store = InMemoryAlertHistoryStore(limit=config.alert_history_limit)

    return AlertFilter(
        store,
        cooldown=timedelta(minutes=config.alert_cooldown_minutes),
        max_alerts_per_day=config.max_alerts_per_day,
    )


def build_risk_monitor(alert_filter: AlertFilter, config: Settings = settings) -> RiskMonitor:
    """Wire the monitor to real collaborators; Slack falls back to logging when unconfigured"""
    if config.slack_bot_token and config.slack_channel_id:
        notifier = SlackNotifier()
    else:
        notifier = LoggingNotifier()

    return RiskMonitor(
        bank_client=BankClient(),
        payroll_client=PayrollClient(),
        notifier=notifier,
        alert_filter=alert_filter,
        thresholds=build_thresholds(config),
        projection_months=config.projection_months,
        alert_frequency=config.alert_frequency,
        safety_multiplier=config.safety_multiplier,
    )


def get_risk_monitor(request: Request) -> RiskMonitor:
    """Process-wide monitor; shared so per-company dispatch locks are shared too"""
    return request.app.state.risk_monitor


def get_alert_filter(request: Request) -> AlertFilter:
    return request.app.state.alert_filter
