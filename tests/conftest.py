"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from payroll_sentinel.api.main import create_app
from payroll_sentinel.infrastructure.database.models import Base
from payroll_sentinel.infrastructure.database.session import get_db
from payroll_sentinel.domain.exceptions import BankAPIError
from payroll_sentinel.domain.models import (
    AlertTrigger,
    BankBalance,
    NotificationReceipt,
    PayrollObligation,
    PayrollSchedule,
    RiskAssessment,
)
from payroll_sentinel.services.alert_filter import AlertFilter, InMemoryAlertHistoryStore
from payroll_sentinel.services.risk_monitor import RiskMonitor


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Monday noon UTC; payrolls below are dated relative to this
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


class FakeBankClient:
    """Stands in for BankClient with a fixed balance"""

    def __init__(self, balance: Decimal, account_count: int = 2, error: Optional[Exception] = None):
        self.balance = balance
        self.account_count = account_count
        self.error = error
        self.calls: List[str] = []

    async def get_current_balance(self, company_id: str) -> BankBalance:
        self.calls.append(company_id)
        if self.error is not None:
            raise self.error
        return BankBalance(
            company_id=company_id,
            total_balance=self.balance,
            account_count=self.account_count,
            as_of=NOW - timedelta(hours=1),
        )


class FakePayrollClient:
    """Stands in for PayrollClient with a fixed schedule"""

    def __init__(self, obligations: List[PayrollObligation], error: Optional[Exception] = None):
        self.obligations = obligations
        self.error = error

    async def get_upcoming_payroll_obligations(self, company_id: str, months_ahead: int = 3) -> PayrollSchedule:
        if self.error is not None:
            raise self.error
        return PayrollSchedule(company_id=company_id, obligations=tuple(self.obligations), as_of=NOW - timedelta(hours=2))


class RecordingNotifier:
    """Notifier that remembers what it was asked to send"""

    def __init__(self, success: bool = True):
        self.success = success
        self.sent: List[AlertTrigger] = []

    async def send(self, alert: AlertTrigger, assessment: Optional[RiskAssessment] = None) -> NotificationReceipt:
        self.sent.append(alert)
        if not self.success:
            return NotificationReceipt(success=False, error="channel_not_found")
        return NotificationReceipt(success=True, channel_message_id=f"1700000000.{len(self.sent):06d}")


def payroll(amount: str, days_ahead: int, employee_count: int = 25) -> PayrollObligation:
    return PayrollObligation(
        amount=Decimal(amount),
        date=TODAY + timedelta(days=days_ahead),
        description=f"Payroll for {employee_count} employees",
        employee_count=employee_count,
    )


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def alert_filter() -> AlertFilter:
    return AlertFilter(
        InMemoryAlertHistoryStore(),
        cooldown=timedelta(minutes=240),
        max_alerts_per_day=10,
        clock=lambda: NOW,
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def critical_monitor(alert_filter: AlertFilter, notifier: RecordingNotifier) -> RiskMonitor:
    """$40,000 on hand against a $51,000 payroll due in 2 days"""
    return RiskMonitor(
        bank_client=FakeBankClient(Decimal("40000.00")),
        payroll_client=FakePayrollClient([payroll("51000.00", 2), payroll("51000.00", 16)]),
        notifier=notifier,
        alert_filter=alert_filter,
        clock=lambda: NOW,
    )


@pytest.fixture
def client(db: Session, critical_monitor: RiskMonitor) -> TestClient:
    """Create FastAPI test client with test database and fake collaborators"""
    app = create_app()
    app.state.alert_filter = critical_monitor.alert_filter
    app.state.risk_monitor = critical_monitor

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def unavailable_bank_client(db: Session, alert_filter: AlertFilter, notifier: RecordingNotifier) -> TestClient:
    """Test client whose bank collaborator always fails"""
    app = create_app()
    monitor = RiskMonitor(
        bank_client=FakeBankClient(Decimal("0"), error=BankAPIError("Bank API error: 503")),
        payroll_client=FakePayrollClient([payroll("51000.00", 2)]),
        notifier=notifier,
        alert_filter=alert_filter,
        clock=lambda: NOW,
    )
    app.state.alert_filter = alert_filter
    app.state.risk_monitor = monitor

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
