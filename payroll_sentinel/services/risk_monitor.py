"""Monitoring pipeline: fetch balances and payrolls, assess, alert"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional, Protocol, Sequence
from datetime import datetime
from decimal import Decimal

from payroll_sentinel.domain.alerts import build_alert_candidates
from payroll_sentinel.domain.classifier import DEFAULT_SAFETY_MULTIPLIER
from payroll_sentinel.domain.assessment import assess_data_confidence, perform_risk_assessment
from payroll_sentinel.domain.exceptions import BankAPIError, NotificationError, PayrollAPIError
from payroll_sentinel.domain.models import (
    AlertTrigger,
    BankBalance,
    CashFlowAnalysis,
    DispatchResult,
    MonitoringResult,
    NotificationReceipt,
    PayrollSchedule,
    RiskAssessment,
    RiskThresholds,
)
from payroll_sentinel.domain.scoring import calculate_risk_score, evaluate_risk_thresholds, generate_risk_summary
from payroll_sentinel.infrastructure.observability.logging import log_alert_dispatch
from payroll_sentinel.infrastructure.observability.metrics import (
    alerts_sent_counter,
    notification_failure_counter,
    record_assessment,
)
from payroll_sentinel.services.alert_filter import AlertFilter
from payroll_sentinel.utils.date_utils import utcnow


class BalanceProvider(Protocol):
    async def get_current_balance(self, company_id: str) -> BankBalance:
        ...


class PayrollProvider(Protocol):
    async def get_upcoming_payroll_obligations(self, company_id: str, months_ahead: int = 3) -> PayrollSchedule:
        ...


class Notifier(Protocol):
    async def send(self, alert: AlertTrigger, assessment: Optional[RiskAssessment] = None) -> NotificationReceipt:
        ...


class RiskMonitor:
    """
    Runs risk assessments for companies and dispatches deduplicated alerts.

    Assessments of different companies share no state and run concurrently.
    Alert dispatch for one company is serialized by a per-company lock that
    covers filtering, sending and recording.
    """

    def __init__(
        self,
        bank_client: BalanceProvider,
        payroll_client: PayrollProvider,
        notifier: Notifier,
        alert_filter: AlertFilter,
        thresholds: Optional[RiskThresholds] = None,
        projection_months: int = 3,
        alert_frequency: str = "immediate",
        safety_multiplier: Decimal = DEFAULT_SAFETY_MULTIPLIER,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.bank_client = bank_client
        self.payroll_client = payroll_client
        self.notifier = notifier
        self.alert_filter = alert_filter
        self.thresholds = thresholds or RiskThresholds()
        self.projection_months = projection_months
        self.alert_frequency = alert_frequency
        self.safety_multiplier = safety_multiplier
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _company_lock(self, company_id: str) -> AsyncIterator[None]:
        """Hold the dispatch lock for a company; the lock is dropped once nobody holds or awaits it"""
        lock = self._locks.get(company_id)
        if lock is None:
            lock = self._locks[company_id] = asyncio.Lock()
        self._lock_users[company_id] = self._lock_users.get(company_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[company_id] -= 1
            if self._lock_users[company_id] == 0:
                del self._lock_users[company_id]
                del self._locks[company_id]

    async def analyze(self, company_id: str) -> CashFlowAnalysis:
        """
        Fetch current balance and upcoming payrolls, then assess risk.

        Raises:
            BankAPIError: Bank data could not be fetched
            PayrollAPIError: Payroll data could not be fetched
        """
        balance, schedule = await asyncio.gather(
            self.bank_client.get_current_balance(company_id),
            self.payroll_client.get_upcoming_payroll_obligations(company_id, self.projection_months),
        )

        now = self.clock()
        # Monitoring projects obligations only; expected inflows are not fetched
        assessment = perform_risk_assessment(
            company_id,
            balance.total_balance,
            schedule.obligations,
            now=now,
            safety_multiplier=self.safety_multiplier,
        )
        risk_score = calculate_risk_score(assessment)
        record_assessment(assessment.risk_level.value, risk_score)

        return CashFlowAnalysis(
            company_id=company_id,
            assessment=assessment,
            risk_score=risk_score,
            summary=generate_risk_summary(assessment),
            bank_accounts_analyzed=balance.account_count,
            payrolls_analyzed=len(schedule.obligations),
            confidence_level=assess_data_confidence(
                balance.as_of,
                balance.account_count,
                len(schedule.obligations),
                schedule.as_of,
                now=now,
            ),
            bank_data_as_of=balance.as_of,
            payroll_data_as_of=schedule.as_of,
        )

    async def dispatch_alerts(
        self,
        company_id: str,
        candidates: Sequence[AlertTrigger],
        assessment: Optional[RiskAssessment] = None,
    ) -> DispatchResult:
        """
        Filter candidates and send the survivors.

        Only successful sends are recorded, so a failing channel never
        starts a cooldown or counts toward the daily cap.
        """
        async with self._company_lock(company_id):
            approved = self.alert_filter.filter_alerts(company_id, candidates, now=self.clock())
            result = DispatchResult(approved=approved, suppressed=len(candidates) - len(approved))

            for alert in approved:
                try:
                    receipt = await self.notifier.send(alert, assessment)
                except NotificationError as e:
                    logging.error(f"Failed to send alert for {company_id}: {e}", extra={"company_id": company_id})
                    receipt = NotificationReceipt(success=False, error=str(e))

                log_alert_dispatch(company_id, alert.alert_type.value, alert.severity.value, receipt.success)

                if not receipt.success:
                    result.failed += 1
                    notification_failure_counter.inc()
                    continue

                self.alert_filter.record_dispatch(
                    company_id,
                    alert,
                    sent_at=self.clock(),
                    channel_message_id=receipt.channel_message_id,
                )
                alerts_sent_counter.labels(alert_type=alert.alert_type.value).inc()
                result.sent += 1

            return result

    async def monitor_company(self, company_id: str) -> MonitoringResult:
        """
        Assess one company and dispatch any alerts it warrants.

        Collaborator failures propagate to the caller.
        """
        result = MonitoringResult(company_id=company_id, monitored_at=self.clock())

        analysis = await self.analyze(company_id)
        result.analysis = analysis
        result.risk_detected = evaluate_risk_thresholds(analysis.assessment, analysis.risk_score, self.thresholds)

        if result.risk_detected:
            result.candidates = build_alert_candidates(
                analysis.assessment,
                analysis.risk_score,
                alert_frequency=self.alert_frequency,
                now=self.clock(),
            )
            result.dispatch = await self.dispatch_alerts(company_id, result.candidates, analysis.assessment)
            if result.dispatch.failed:
                result.errors.append(f"{result.dispatch.failed} alerts failed to send")

        return result

    async def monitor_companies(self, company_ids: Sequence[str]) -> List[MonitoringResult]:
        """Monitor several companies concurrently; one company's collaborator failure does not stop the rest"""

        async def monitor_one(company_id: str) -> MonitoringResult:
            try:
                return await self.monitor_company(company_id)
            except (BankAPIError, PayrollAPIError) as e:
                logging.error(f"Monitoring failed for {company_id}: {e}", extra={"company_id": company_id})
                return MonitoringResult(
                    company_id=company_id,
                    monitored_at=self.clock(),
                    errors=[f"Monitoring error: {e}"],
                )

        return list(await asyncio.gather(*(monitor_one(company_id) for company_id in company_ids)))
