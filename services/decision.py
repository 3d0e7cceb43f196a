"""
Financial fields written once when an application is approved.
"""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from config import settings
from errors import IllegalStateError
from models import LoanApplication
from utils.clock import utcnow

CENT = Decimal("0.01")


def effective_rate(application: LoanApplication, default_rate: Decimal | None = None) -> Decimal:
    """Rate stored at submission when positive, else the configured default."""
    rate = application.interest_rate
    if rate is not None and Decimal(rate) > 0:
        return Decimal(rate)
    return default_rate if default_rate is not None else settings.default_interest_rate


def record_approval(
    application: LoanApplication,
    now: datetime | None = None,
    default_rate: Decimal | None = None,
) -> LoanApplication:
    if application.approved_amount is not None:
        raise IllegalStateError(
            f"Decision already recorded for application {application.id}",
            current_state=application.status,
        )
    rate = effective_rate(application, default_rate)
    approved = Decimal(application.amount)
    interest = (approved * rate / 100).quantize(CENT, rounding=ROUND_HALF_UP)

    application.interest_rate = rate
    application.approved_amount = approved
    application.interest_amount = interest
    application.paid_amount = Decimal("0.00")
    application.pending_amount = approved + interest
    application.decision_at = now or utcnow()
    return application
