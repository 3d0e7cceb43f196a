"""
Loan application lifecycle:

    SUBMITTED -> DOCUMENT_VERIFIED -> APPROVED
                                   -> REJECTED

Each operation checks the actor's capability, then the current status, and emits one
status event per transition.
"""
from __future__ import annotations

import logging
import uuid
from decimal import Decimal, InvalidOperation

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from errors import PermissionDeniedError, ValidationError
from models import LoanApplication, LoanStatus, Role, User
from repositories import DocumentRepository, LoanApplicationRepository, UserRepository
from schemas.credit import CreditAssessment, CreditProfile
from services import permissions
from services.blob_storage import BlobStorage
from services.credit_scoring import (
    RateTable,
    calculate_credit_score,
    calculate_interest_rate,
    is_eligible,
    monthly_installment,
    score_breakdown,
    summarize_history,
)
from services.decision import effective_rate, record_approval
from services.document_gate import DocumentGate
from services.interest_rates import load_rate_table
from services.notifications import NotificationDispatcher
from services.state_machine import transition
from utils.clock import utcnow

logger = logging.getLogger(__name__)


def _validate_request(amount, term_months, purpose) -> tuple[Decimal, int, str]:
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid loan amount: {amount!r}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid loan amount: {amount!r}")
    if amount > settings.max_loan_amount:
        raise ValidationError(f"Loan amount must not exceed {settings.max_loan_amount}")
    amount = amount.quantize(Decimal("0.01"))
    if amount <= 0:
        raise ValidationError("Loan amount must be greater than zero")
    if not isinstance(term_months, int) or isinstance(term_months, bool):
        raise ValidationError(f"Invalid term: {term_months!r}")
    if term_months < 1 or term_months > settings.max_term_months:
        raise ValidationError(f"Term must be between 1 and {settings.max_term_months} months")
    if not purpose or not purpose.strip():
        raise ValidationError("Loan purpose is required")
    return amount, term_months, purpose.strip()


class LoanLifecycle:
    def __init__(
        self,
        session: AsyncSession,
        storage: BlobStorage,
        notifier: NotificationDispatcher | None = None,
    ):
        self.session = session
        self.notifier = notifier or NotificationDispatcher()
        self.applications = LoanApplicationRepository(session)
        self.documents = DocumentRepository(session)
        self.users = UserRepository(session)
        self.gate = DocumentGate(session, storage, self.notifier)

    async def rate_table(self) -> RateTable:
        return await load_rate_table(self.session)

    async def submit(self, applicant: User, amount, term_months, purpose) -> LoanApplication:
        permissions.require(applicant, "submit_application")
        amount, term_months, purpose = _validate_request(amount, term_months, purpose)

        prior = await self.applications.find_by_owner(applicant.id)
        # First-time applicants must have uploaded a document; repeat applicants are grandfathered
        if not prior and await self.documents.count_by_owner(applicant.id) == 0:
            raise ValidationError("Please upload at least one document before applying for a loan")

        profile = CreditProfile.model_validate(applicant)
        history = summarize_history(prior)
        score = calculate_credit_score(profile, amount, term_months, purpose, history)
        rate = calculate_interest_rate(purpose, score, await self.rate_table())

        app = LoanApplication(
            id=f"app-{uuid.uuid4().hex[:12]}",
            applicant_id=applicant.id,
            status=LoanStatus.SUBMITTED.value,
            documents_verified=False,
            amount=amount,
            term_months=term_months,
            purpose=purpose,
            credit_score=score,
            interest_rate=rate,
            applied_at=utcnow(),
        )
        await self.applications.save(app)
        await self.gate.link_unassociated_documents(applicant.id, app.id)
        logger.info(
            "Application %s submitted by %s: amount=%s term=%s purpose=%s score=%s rate=%s",
            app.id, applicant.username, amount, term_months, purpose, score, rate,
        )
        self.notifier.status_changed(applicant.id, LoanStatus.SUBMITTED.value)
        return app

    async def mark_documents_verified(self, application_id: str, actor: User) -> LoanApplication:
        permissions.require(actor, "mark_documents_verified")
        app = await self.applications.get(application_id, for_update=True)
        transition(app, LoanStatus.DOCUMENT_VERIFIED)
        app.documents_verified = True
        app.officer_id = actor.id
        await self.applications.save(app)
        self.notifier.status_changed(app.applicant_id, LoanStatus.DOCUMENT_VERIFIED.value)
        return app

    async def approve(self, application_id: str, actor: User) -> LoanApplication:
        permissions.require(actor, "approve_application")
        app = await self.applications.get(application_id, for_update=True)
        transition(app, LoanStatus.APPROVED)
        record_approval(app)
        app.manager_id = actor.id
        await self.applications.save(app)
        logger.info(
            "Application %s approved by %s: approved=%s rate=%s pending=%s",
            app.id, actor.username, app.approved_amount, app.interest_rate, app.pending_amount,
        )
        self.notifier.status_changed(app.applicant_id, LoanStatus.APPROVED.value)
        return app

    async def reject(self, application_id: str, actor: User) -> LoanApplication:
        permissions.require(actor, "reject_application")
        app = await self.applications.get(application_id, for_update=True)
        transition(app, LoanStatus.REJECTED)
        app.decision_at = utcnow()
        if actor.role == Role.MANAGER.value:
            app.manager_id = actor.id
        else:
            app.officer_id = actor.id
        await self.applications.save(app)
        self.notifier.status_changed(app.applicant_id, LoanStatus.REJECTED.value)
        return app

    async def get_for(self, application_id: str, actor: User) -> LoanApplication:
        app = await self.applications.get(application_id)
        if app.applicant_id != actor.id and not permissions.can(actor, "review_all"):
            raise PermissionDeniedError("Not allowed to view this application")
        return app

    async def list_for(self, actor: User, status: str | None = None) -> list[LoanApplication]:
        if permissions.can(actor, "review_all"):
            if status:
                return await self.applications.find_by_status(status)
            return await self.applications.find_all()
        apps = await self.applications.find_by_owner(actor.id)
        return [a for a in apps if not status or a.status == status]

    async def assess(self, application_id: str, actor: User) -> CreditAssessment:
        """Advisory scoring of an existing application against the applicant's current profile."""
        app = await self.get_for(application_id, actor)
        applicant = await self.users.get(app.applicant_id)
        prior = [a for a in await self.applications.find_by_owner(app.applicant_id) if a.id != app.id]
        profile = CreditProfile.model_validate(applicant)
        history = summarize_history(prior)
        factors = score_breakdown(profile, app.amount, app.term_months, app.purpose, history)
        score = calculate_credit_score(profile, app.amount, app.term_months, app.purpose, history)
        rate = effective_rate(app)
        return CreditAssessment(
            application_id=app.id,
            credit_score=score,
            eligible=is_eligible(score, app.amount),
            interest_rate=rate,
            monthly_installment=monthly_installment(app.amount, rate, app.term_months),
            factors=factors,
        )
