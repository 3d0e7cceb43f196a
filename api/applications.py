from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from api.documents import document_to_response
from api.deps import get_current_user, get_document_gate, get_lifecycle
from models import LoanApplication, LoanStatus, User
from schemas.application import ApplicationCreate
from services.credit_scoring import monthly_installment
from services.document_gate import DocumentGate
from services.lifecycle import LoanLifecycle

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _app_to_response(app: LoanApplication) -> dict[str, Any]:
    """Serialize application to dict with camelCase for frontend."""
    installment = None
    if app.interest_rate is not None:
        installment = monthly_installment(app.approved_amount or app.amount, app.interest_rate, app.term_months)
    return {
        "id": app.id,
        "applicantId": app.applicant_id,
        "officerId": app.officer_id,
        "managerId": app.manager_id,
        "status": app.status,
        "documentsVerified": app.documents_verified,
        "amount": app.amount,
        "termMonths": app.term_months,
        "purpose": app.purpose,
        "creditScore": app.credit_score,
        "interestRate": app.interest_rate,
        "monthlyInstallment": installment,
        "approvedAmount": app.approved_amount,
        "interestAmount": app.interest_amount,
        "paidAmount": app.paid_amount,
        "pendingAmount": app.pending_amount,
        "appliedAt": app.applied_at.isoformat() if app.applied_at else None,
        "decisionAt": app.decision_at.isoformat() if app.decision_at else None,
    }


@router.get("")
async def list_applications(
    status: Optional[LoanStatus] = None,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    apps = await lifecycle.list_for(user, status.value if status else None)
    return [_app_to_response(a) for a in apps]


@router.post("", status_code=201)
async def submit_application(
    body: ApplicationCreate,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    app = await lifecycle.submit(user, body.amount, body.term_months, body.purpose)
    return _app_to_response(app)


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    return _app_to_response(await lifecycle.get_for(application_id, user))


@router.get("/{application_id}/assessment")
async def get_assessment(
    application_id: str,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    assessment = await lifecycle.assess(application_id, user)
    return {
        "applicationId": assessment.application_id,
        "creditScore": assessment.credit_score,
        "eligible": assessment.eligible,
        "interestRate": assessment.interest_rate,
        "monthlyInstallment": assessment.monthly_installment,
        "factors": [{"name": f.name, "points": f.points, "detail": f.detail} for f in assessment.factors],
    }


@router.get("/{application_id}/documents")
async def list_application_documents(
    application_id: str,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
    gate: DocumentGate = Depends(get_document_gate),
):
    app = await lifecycle.get_for(application_id, user)
    docs = await gate.documents.find_by_application(app.id)
    return [document_to_response(d) for d in docs]


@router.post("/{application_id}/verify")
async def verify_application(
    application_id: str,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    return _app_to_response(await lifecycle.mark_documents_verified(application_id, user))


@router.post("/{application_id}/approve")
async def approve_application(
    application_id: str,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    return _app_to_response(await lifecycle.approve(application_id, user))


@router.post("/{application_id}/reject")
async def reject_application(
    application_id: str,
    user: User = Depends(get_current_user),
    lifecycle: LoanLifecycle = Depends(get_lifecycle),
):
    return _app_to_response(await lifecycle.reject(application_id, user))
