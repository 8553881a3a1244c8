"""Slack notification channel for payroll risk alerts"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from payroll_sentinel.config import settings
from payroll_sentinel.domain.exceptions import NotificationError
from payroll_sentinel.domain.models import AlertSeverity, AlertTrigger, NotificationReceipt, RiskAssessment
from payroll_sentinel.domain.scoring import format_currency
from payroll_sentinel.infrastructure.clients.retry import send_with_retry

SEVERITY_EMOJI = {
    AlertSeverity.INFO: ":information_source:",
    AlertSeverity.WARNING: ":warning:",
    AlertSeverity.CRITICAL: ":rotating_light:",
}


def format_alert_message(alert: AlertTrigger, assessment: Optional[RiskAssessment] = None) -> Dict[str, Any]:
    """Build Slack text and blocks for an alert, with balance details when available"""
    header = f"{SEVERITY_EMOJI[alert.severity]} *Payroll Cash Flow Alert* - Company {alert.company_id}"
    if alert.severity == AlertSeverity.CRITICAL:
        header += "\n<!channel>"

    blocks: List[Dict[str, Any]] = [
        {"type": "section", "text": {"type": "mrkdwn", "text": header}},
        {"type": "section", "text": {"type": "mrkdwn", "text": alert.message}},
    ]

    if assessment is not None:
        shortfall = assessment.required_float - assessment.current_balance
        status = (
            f"Shortfall: {format_currency(shortfall)}"
            if shortfall > 0
            else f"Surplus: {format_currency(abs(shortfall))}"
        )
        fields = [
            f"*Current Balance:*\n{format_currency(assessment.current_balance)}",
            f"*Required Float:*\n{format_currency(assessment.required_float)}",
            f"*Days Until Payroll:*\n{assessment.days_until_risk} days",
            f"*Risk Status:*\n{status}",
        ]
        if assessment.next_payroll_date is not None:
            fields.append(f"*Pay Date:*\n{assessment.next_payroll_date.isoformat()}")
        blocks.append({"type": "section", "fields": [{"type": "mrkdwn", "text": f} for f in fields]})

    blocks.append(
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"Risk score: {alert.risk_score}/100"}],
        }
    )

    return {"text": f"{header}\n{alert.message}", "blocks": blocks}


class SlackNotifier:
    """Client for posting alerts through the Slack Web API"""

    def __init__(
        self,
        bot_token: str | None = None,
        channel_id: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token or settings.slack_bot_token
        self.channel_id = channel_id or settings.slack_channel_id
        self.api_base = api_base or settings.slack_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.client_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.client_backoff_base
        self.transport = transport

    async def send(self, alert: AlertTrigger, assessment: Optional[RiskAssessment] = None) -> NotificationReceipt:
        """
        Post an alert to the configured channel.

        Slack reports API-level failures with HTTP 200 and ok=false; those
        come back as an unsuccessful receipt.

        Raises:
            NotificationError: When the request cannot be delivered after retries
        """
        message = format_alert_message(alert, assessment)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await send_with_retry(
                    client,
                    "POST",
                    f"{self.api_base}/chat.postMessage",
                    collaborator="slack",
                    max_attempts=self.max_retries,
                    backoff_base=self.backoff_base,
                    headers={"Authorization": f"Bearer {self.bot_token}"},
                    json={
                        "channel": self.channel_id,
                        "text": message["text"],
                        "blocks": message["blocks"],
                        "unfurl_links": False,
                        "unfurl_media": False,
                    },
                )
                data = response.json()
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                raise NotificationError(f"Slack delivery failed: {e}") from e
            except ValueError as e:
                raise NotificationError(f"Invalid response from Slack: {e}") from e

        if not data.get("ok"):
            return NotificationReceipt(success=False, error=data.get("error", "unknown_error"))

        return NotificationReceipt(success=True, channel_message_id=data.get("ts"))


class LoggingNotifier:
    """Channel used when Slack is not configured: alerts are only written to the log"""

    async def send(self, alert: AlertTrigger, assessment: Optional[RiskAssessment] = None) -> NotificationReceipt:
        logging.info(
            alert.message,
            extra={
                "company_id": alert.company_id,
                "alert_type": alert.alert_type.value,
                "severity": alert.severity.value,
                "risk_score": alert.risk_score,
            },
        )
        return NotificationReceipt(success=True)
