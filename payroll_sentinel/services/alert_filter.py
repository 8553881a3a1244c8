"""Alert deduplication: company cooldown, daily cap and repeat-type suppression"""

import logging
import threading
from collections import deque
from datetime import datetime, timedelta
from typing import Callable, Deque, Dict, List, Optional, Protocol, Sequence

from sqlalchemy.orm import sessionmaker

from payroll_sentinel.domain.models import AlertHistoryEntry, AlertTrigger, MonitoringStats
from payroll_sentinel.infrastructure.database.repositories import AlertHistoryRepository
from payroll_sentinel.infrastructure.observability.metrics import alerts_suppressed_counter
from payroll_sentinel.utils.date_utils import utcnow

ONE_DAY = timedelta(days=1)
DEFAULT_HISTORY_LIMIT = 100


class AlertHistoryStore(Protocol):
    """Per-company record of dispatched alerts, the only state the filter consults"""

    def get_history(self, company_id: str) -> List[AlertHistoryEntry]:
        """Entries oldest first"""
        ...

    def last_alert_time(self, company_id: str) -> Optional[datetime]:
        ...

    def append(self, entry: AlertHistoryEntry) -> None:
        ...

    def companies(self) -> List[str]:
        ...


class InMemoryAlertHistoryStore:
    """
    Process-local history, lost on restart.

    Each company keeps at most `limit` entries; the oldest are evicted first.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        self.limit = limit
        self._history: Dict[str, Deque[AlertHistoryEntry]] = {}
        self._last_alert_times: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def get_history(self, company_id: str) -> List[AlertHistoryEntry]:
        with self._lock:
            return list(self._history.get(company_id, ()))

    def last_alert_time(self, company_id: str) -> Optional[datetime]:
        with self._lock:
            return self._last_alert_times.get(company_id)

    def append(self, entry: AlertHistoryEntry) -> None:
        with self._lock:
            history = self._history.setdefault(entry.company_id, deque(maxlen=self.limit))
            history.append(entry)
            self._last_alert_times[entry.company_id] = entry.sent_at

    def companies(self) -> List[str]:
        with self._lock:
            return list(self._history)


class SqlAlchemyAlertHistoryStore:
    """History kept in the alert_history table so cooldowns survive restarts"""

    def __init__(self, session_factory: sessionmaker, limit: int = DEFAULT_HISTORY_LIMIT):
        self.session_factory = session_factory
        self.limit = limit

    def get_history(self, company_id: str) -> List[AlertHistoryEntry]:
        with self.session_factory() as db:
            return AlertHistoryRepository(db).get_recent(company_id, self.limit)

    def last_alert_time(self, company_id: str) -> Optional[datetime]:
        with self.session_factory() as db:
            return AlertHistoryRepository(db).last_sent_at(company_id)

    def append(self, entry: AlertHistoryEntry) -> None:
        with self.session_factory() as db:
            AlertHistoryRepository(db).add(entry)
            db.commit()

    def companies(self) -> List[str]:
        with self.session_factory() as db:
            return AlertHistoryRepository(db).company_ids()


class AlertFilter:
    """
    Decides which alert candidates may be dispatched for a company.

    The whole company is silenced during the cooldown window after any
    successful dispatch, including for alerts more severe than the last one.
    Callers must hold a per-company lock across filter_alerts, sending and
    record_dispatch so concurrent assessments cannot both pass the cooldown.
    """

    def __init__(
        self,
        store: AlertHistoryStore,
        cooldown: timedelta = timedelta(minutes=240),
        max_alerts_per_day: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.cooldown = cooldown
        self.max_alerts_per_day = max_alerts_per_day
        self.clock = clock

    def filter_alerts(
        self,
        company_id: str,
        candidates: Sequence[AlertTrigger],
        now: Optional[datetime] = None,
    ) -> List[AlertTrigger]:
        """
        Return the candidates that may be sent now.

        Order of checks:
        1. Company cooldown since the last successful dispatch: nothing passes
        2. Daily cap reached within the last 24h: nothing passes
        3. Alert types already sent within the cooldown window are dropped
        4. Candidates with should_notify=False are dropped
        Survivors are capped at the remaining daily allowance.
        """
        now = now or self.clock()
        if not candidates:
            return []

        last_alert_time = self.store.last_alert_time(company_id)
        if last_alert_time is not None and now - last_alert_time < self.cooldown:
            logging.info(f"Company {company_id} in alert cooldown period", extra={"company_id": company_id})
            alerts_suppressed_counter.labels(reason="cooldown").inc(len(candidates))
            return []

        history = self.store.get_history(company_id)
        sent_today = sum(1 for entry in history if now - entry.sent_at < ONE_DAY)
        if sent_today >= self.max_alerts_per_day:
            logging.info(f"Company {company_id} has reached daily alert limit", extra={"company_id": company_id})
            alerts_suppressed_counter.labels(reason="daily_cap").inc(len(candidates))
            return []

        recent_types = {entry.alert_type for entry in history if now - entry.sent_at < self.cooldown}

        survivors = []
        for alert in candidates:
            if alert.alert_type in recent_types:
                alerts_suppressed_counter.labels(reason="duplicate_type").inc()
                continue
            if not alert.should_notify:
                alerts_suppressed_counter.labels(reason="muted").inc()
                continue
            survivors.append(alert)

        allowance = self.max_alerts_per_day - sent_today
        if len(survivors) > allowance:
            alerts_suppressed_counter.labels(reason="daily_cap").inc(len(survivors) - allowance)
            survivors = survivors[:allowance]

        return survivors

    def record_dispatch(
        self,
        company_id: str,
        alert: AlertTrigger,
        sent_at: Optional[datetime] = None,
        channel_message_id: Optional[str] = None,
    ) -> AlertHistoryEntry:
        """Append a successfully sent alert; this also restarts the company cooldown"""
        entry = AlertHistoryEntry(
            company_id=company_id,
            alert_type=alert.alert_type,
            severity=alert.severity,
            message=alert.message,
            risk_score=alert.risk_score,
            sent_at=sent_at or self.clock(),
            channel_message_id=channel_message_id,
        )
        self.store.append(entry)
        return entry

    def get_alert_history(self, company_id: str, limit: int = 50) -> List[AlertHistoryEntry]:
        """Dispatched alerts for a company, newest first"""
        history = sorted(self.store.get_history(company_id), key=lambda e: e.sent_at, reverse=True)
        return history[:limit]

    def get_monitoring_stats(self, now: Optional[datetime] = None) -> MonitoringStats:
        """Alert volume over the last 24h across every company with history"""
        now = now or self.clock()
        companies = self.store.companies()

        alerts_sent_today = 0
        alerted_companies = 0
        total_risk_score = 0.0

        for company_id in companies:
            today = [e for e in self.store.get_history(company_id) if now - e.sent_at < ONE_DAY]
            alerts_sent_today += len(today)
            if today:
                alerted_companies += 1
                total_risk_score += sum(e.risk_score for e in today) / len(today)

        average = total_risk_score / alerted_companies if alerted_companies else 0.0

        return MonitoringStats(
            companies_monitored=len(companies),
            alerts_sent_today=alerts_sent_today,
            average_risk_score=round(average, 2),
            companies_alerted_today=alerted_companies,
        )
