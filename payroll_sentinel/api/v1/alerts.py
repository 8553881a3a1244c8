"""Alert history and monitoring statistics"""

from fastapi import APIRouter, Depends, Query

from payroll_sentinel.api.v1.schemas import AlertHistoryItem, AlertHistoryResponse, MonitoringStatsResponse
from payroll_sentinel.api.dependencies import get_alert_filter
from payroll_sentinel.services.alert_filter import AlertFilter

router = APIRouter()


@router.get("/alerts/history", response_model=AlertHistoryResponse)
def get_alert_history(
    company_id: str = Query(..., description="Company identifier"),
    limit: int = Query(50, ge=1, le=100),
    alert_filter: AlertFilter = Depends(get_alert_filter),
):
    """
    Retrieve alerts successfully dispatched for a company.

    Returns:
        Alerts newest first
    """
    entries = alert_filter.get_alert_history(company_id, limit=limit)
    return AlertHistoryResponse(
        company_id=company_id,
        alerts=[AlertHistoryItem.from_domain(e) for e in entries],
    )


@router.get("/alerts/stats", response_model=MonitoringStatsResponse)
def get_monitoring_stats(alert_filter: AlertFilter = Depends(get_alert_filter)):
    """Alert volume across all companies over the last 24 hours"""
    stats = alert_filter.get_monitoring_stats()
    return MonitoringStatsResponse(
        companies_monitored=stats.companies_monitored,
        alerts_sent_today=stats.alerts_sent_today,
        average_risk_score=stats.average_risk_score,
        companies_alerted_today=stats.companies_alerted_today,
    )
