"""SQLAlchemy ORM models for assessment and alert history"""

import uuid
from sqlalchemy import Column, Date, DateTime, Integer, JSON, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class RiskAssessmentRecord(Base):
    """Mirror of a computed risk assessment (the value object is not owned by the database)"""

    __tablename__ = "risk_assessment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Text, nullable=False, index=True)
    current_balance = Column(Numeric(14, 2), nullable=False)
    required_float = Column(Numeric(14, 2), nullable=False)
    risk_level = Column(Text, nullable=False)
    risk_score = Column(Integer, nullable=False)
    days_until_risk = Column(Integer, nullable=False)
    next_payroll_date = Column(Date, nullable=True)
    next_payroll_amount = Column(Numeric(14, 2), nullable=True)
    confidence_level = Column(Text, nullable=True)
    recommendations = Column(JSON, nullable=False)
    projections = Column(JSON, nullable=False)
    assessed_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AlertHistoryRecord(Base):
    """Alert successfully delivered to a notification channel"""

    __tablename__ = "alert_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Text, nullable=False, index=True)
    alert_type = Column(Text, nullable=False)
    severity = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    risk_score = Column(Integer, nullable=False)
    channel_message_id = Column(Text, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=False, index=True)
