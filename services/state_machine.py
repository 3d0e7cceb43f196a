"""
Guarded status changes for loan applications. The only place `status` is assigned after creation.
"""
from __future__ import annotations

import logging

from errors import IllegalStateError
from models import LoanApplication, LoanStatus

logger = logging.getLogger(__name__)


def ensure_transition(application: LoanApplication, target: LoanStatus) -> LoanStatus:
    current = LoanStatus(application.status)
    if target not in LoanStatus.valid_transitions()[current]:
        logger.warning(
            "Rejected transition of application %s from %s to %s", application.id, current.value, target.value
        )
        raise IllegalStateError(
            f"Application {application.id} cannot move from {current.value} to {target.value}",
            current_state=current.value,
        )
    return current


def transition(application: LoanApplication, target: LoanStatus) -> LoanApplication:
    current = ensure_transition(application, target)
    application.status = target.value
    logger.info("Application %s: %s -> %s", application.id, current.value, target.value)
    return application
