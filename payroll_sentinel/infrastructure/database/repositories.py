"""Data access layer for assessment and alert history"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from payroll_sentinel.infrastructure.database.models import AlertHistoryRecord, RiskAssessmentRecord
from payroll_sentinel.domain.models import (
    AlertHistoryEntry,
    AlertSeverity,
    AlertType,
    ConfidenceLevel,
    RiskAssessment,
)
from payroll_sentinel.utils.date_utils import ensure_utc


class AssessmentRepository:
    """Repository for persisted risk assessments"""

    def __init__(self, db: Session):
        self.db = db

    def create_assessment(
        self,
        assessment: RiskAssessment,
        risk_score: int,
        confidence_level: Optional[ConfidenceLevel] = None,
    ) -> RiskAssessmentRecord:
        """Persist a snapshot of an assessment to the database"""
        db_assessment = RiskAssessmentRecord(
            company_id=assessment.company_id,
            current_balance=assessment.current_balance,
            required_float=assessment.required_float,
            risk_level=assessment.risk_level.value,
            risk_score=risk_score,
            days_until_risk=assessment.days_until_risk,
            next_payroll_date=assessment.next_payroll_date,
            next_payroll_amount=assessment.next_payroll_amount,
            confidence_level=confidence_level.value if confidence_level else None,
            recommendations=list(assessment.recommendations),
            projections=[
                {
                    "date": p.date.isoformat(),
                    "expected_inflow": str(p.expected_inflow),
                    "expected_outflow": str(p.expected_outflow),
                    "net_flow": str(p.net_flow),
                    "running_balance": str(p.running_balance),
                    "risk_level": p.risk_level.value,
                    "description": p.description,
                }
                for p in assessment.projections
            ],
            assessed_at=assessment.assessment_date,
        )
        self.db.add(db_assessment)
        self.db.flush()  # Get ID without committing
        return db_assessment

    def get_assessments_by_company(self, company_id: str, limit: int = 20) -> List[RiskAssessmentRecord]:
        """Fetch recent assessments for a company"""
        return (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.company_id == company_id)
            .order_by(RiskAssessmentRecord.assessed_at.desc())
            .limit(limit)
            .all()
        )


class AlertHistoryRepository:
    """Repository for dispatched alerts"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: AlertHistoryEntry) -> AlertHistoryRecord:
        record = AlertHistoryRecord(
            company_id=entry.company_id,
            alert_type=entry.alert_type.value,
            severity=entry.severity.value,
            message=entry.message,
            risk_score=entry.risk_score,
            channel_message_id=entry.channel_message_id,
            sent_at=entry.sent_at,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get_recent(self, company_id: str, limit: int) -> List[AlertHistoryEntry]:
        """Most recent alerts for a company, oldest first"""
        records = (
            self.db.query(AlertHistoryRecord)
            .filter(AlertHistoryRecord.company_id == company_id)
            .order_by(AlertHistoryRecord.sent_at.desc())
            .limit(limit)
            .all()
        )
        return [_to_entry(r) for r in reversed(records)]

    def last_sent_at(self, company_id: str) -> Optional[datetime]:
        last = (
            self.db.query(func.max(AlertHistoryRecord.sent_at))
            .filter(AlertHistoryRecord.company_id == company_id)
            .scalar()
        )
        return ensure_utc(last) if last is not None else None

    def company_ids(self) -> List[str]:
        return [row[0] for row in self.db.query(AlertHistoryRecord.company_id).distinct().all()]


def _to_entry(record: AlertHistoryRecord) -> AlertHistoryEntry:
    return AlertHistoryEntry(
        company_id=record.company_id,
        alert_type=AlertType(record.alert_type),
        severity=AlertSeverity(record.severity),
        message=record.message,
        risk_score=record.risk_score,
        sent_at=ensure_utc(record.sent_at),
        channel_message_id=record.channel_message_id,
    )

