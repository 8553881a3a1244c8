"""Risk assessment endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from payroll_sentinel.api.v1.schemas import (
    AlertSchema,
    AssessmentHistoryItem,
    AssessmentHistoryResponse,
    AssessmentSchema,
    EvaluateRequest,
    EvaluateResponse,
    MonitorRequest,
    MonitorResponse,
    ScoreResponse,
)
from payroll_sentinel.api.dependencies import get_request_id, get_risk_monitor
from payroll_sentinel.config import settings
from payroll_sentinel.infrastructure.database.session import get_db
from payroll_sentinel.infrastructure.database.repositories import AssessmentRepository
from payroll_sentinel.domain.assessment import perform_risk_assessment
from payroll_sentinel.domain.exceptions import BankAPIError, InvalidAmountError, PayrollAPIError
from payroll_sentinel.domain.models import CashInflow, PayrollObligation
from payroll_sentinel.domain.scoring import calculate_risk_score, generate_risk_summary
from payroll_sentinel.infrastructure.observability.metrics import record_assessment
from payroll_sentinel.infrastructure.observability.logging import log_assessment
from payroll_sentinel.services.risk_monitor import RiskMonitor

router = APIRouter()


@router.post("/risk/evaluate", response_model=EvaluateResponse)
def evaluate_risk(request_body: EvaluateRequest, request: Request):
    """
    Assess caller-supplied balance and payrolls without touching any collaborator.

    Nothing is persisted and no alerts are sent.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    request.state.company_id = request_body.company_id

    obligations = [
        PayrollObligation(
            amount=o.amount,
            date=o.date,
            description=o.description,
            employee_count=o.employee_count,
        )
        for o in request_body.obligations
    ]
    inflows = [
        CashInflow(amount=i.amount, date=i.date, description=i.description, confidence=i.confidence)
        for i in request_body.inflows
    ]

    try:
        assessment = perform_risk_assessment(
            request_body.company_id,
            request_body.current_balance,
            obligations,
            inflows,
            safety_multiplier=settings.safety_multiplier,
        )
    except InvalidAmountError as e:
        logging.warning(f"Invalid amount: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    risk_score = calculate_risk_score(assessment)
    record_assessment(assessment.risk_level.value, risk_score)
    duration_ms = (time.time() - start_time) * 1000
    log_assessment(request_id, assessment.company_id, assessment.risk_level.value, risk_score, duration_ms)

    return EvaluateResponse(
        assessment=AssessmentSchema.from_domain(assessment),
        risk_score=risk_score,
        summary=generate_risk_summary(assessment),
    )


@router.post("/risk/assessments", response_model=MonitorResponse)
async def create_assessment(
    request_body: MonitorRequest,
    request: Request,
    db: Session = Depends(get_db),
    monitor: RiskMonitor = Depends(get_risk_monitor),
):
    """
    Monitor a company end to end.

    Flow:
    1. Fetch balances and upcoming payrolls from the collaborators
    2. Assess risk and score it
    3. Dispatch alerts that pass the cooldown and daily cap
    4. Persist the assessment
    """
    start_time = time.time()
    request_id = get_request_id(request)
    request.state.company_id = request_body.company_id

    try:
        result = await monitor.monitor_company(request_body.company_id)
        analysis = result.analysis

        repo = AssessmentRepository(db)
        db_assessment = repo.create_assessment(
            analysis.assessment,
            analysis.risk_score,
            confidence_level=analysis.confidence_level,
        )
        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        log_assessment(
            request_id,
            request_body.company_id,
            analysis.assessment.risk_level.value,
            analysis.risk_score,
            duration_ms,
        )

        return MonitorResponse(
            assessment_id=str(db_assessment.id),
            company_id=request_body.company_id,
            risk_detected=result.risk_detected,
            risk_score=analysis.risk_score,
            summary=analysis.summary,
            confidence_level=analysis.confidence_level,
            alerts_sent=result.dispatch.sent,
            alerts_failed=result.dispatch.failed,
            alerts_suppressed=result.dispatch.suppressed,
            candidates=[AlertSchema.from_domain(a) for a in result.candidates],
            errors=result.errors,
            assessment=AssessmentSchema.from_domain(analysis.assessment),
        )

    except (BankAPIError, PayrollAPIError) as e:
        db.rollback()
        logging.error(f"Collaborator error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Upstream data provider unavailable")

    except InvalidAmountError as e:
        db.rollback()
        logging.warning(f"Invalid amount: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/risk/assessments", response_model=AssessmentHistoryResponse)
def get_assessment_history(
    company_id: str = Query(..., description="Company identifier"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Retrieve recent persisted assessments for a company, newest first"""
    repo = AssessmentRepository(db)
    records = repo.get_assessments_by_company(company_id, limit=limit)

    items = [
        AssessmentHistoryItem(
            assessment_id=str(r.id),
            risk_level=r.risk_level,
            risk_score=r.risk_score,
            current_balance=r.current_balance,
            required_float=r.required_float,
            days_until_risk=r.days_until_risk,
            assessed_at=r.assessed_at.isoformat(),
        )
        for r in records
    ]

    return AssessmentHistoryResponse(company_id=company_id, assessments=items)


@router.get("/risk/score", response_model=ScoreResponse)
async def get_risk_score(
    request: Request,
    company_id: str = Query(..., min_length=1, description="Company identifier"),
    monitor: RiskMonitor = Depends(get_risk_monitor),
):
    """Current risk score for a company; no alerts are sent and nothing is stored"""
    request_id = get_request_id(request)

    try:
        analysis = await monitor.analyze(company_id)
    except (BankAPIError, PayrollAPIError) as e:
        logging.error(f"Collaborator error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Upstream data provider unavailable")
    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ScoreResponse(
        company_id=company_id,
        risk_score=analysis.risk_score,
        risk_level=analysis.assessment.risk_level,
        summary=analysis.summary,
        days_until_next_payroll=analysis.assessment.days_until_risk,
        current_balance=analysis.assessment.current_balance,
    )
