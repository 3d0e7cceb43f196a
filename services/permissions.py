"""
Explicit capability table: which roles may perform each action.
Checked by the services before every transition, independent of the transport.
"""
from __future__ import annotations

import logging

from errors import PermissionDeniedError
from models import Role, User

logger = logging.getLogger(__name__)

ACTION_ROLES: dict[str, frozenset[Role]] = {
    "upload_document": frozenset({Role.APPLICANT}),
    "submit_application": frozenset({Role.APPLICANT}),
    "update_profile": frozenset({Role.APPLICANT}),
    "verify_document": frozenset({Role.OFFICER, Role.ADMIN}),
    "reject_document": frozenset({Role.OFFICER, Role.ADMIN}),
    "mark_documents_verified": frozenset({Role.OFFICER}),
    "approve_application": frozenset({Role.MANAGER}),
    "reject_application": frozenset({Role.OFFICER, Role.MANAGER}),
    "set_interest_rate": frozenset({Role.MANAGER, Role.ADMIN}),
    "manage_users": frozenset({Role.ADMIN}),
    "review_all": frozenset({Role.OFFICER, Role.MANAGER, Role.ADMIN}),
}


def can(actor: User, action: str) -> bool:
    allowed = ACTION_ROLES.get(action, frozenset())
    return bool(actor.is_active) and actor.role in {r.value for r in allowed}


def require(actor: User, action: str) -> None:
    if not actor.is_active:
        raise PermissionDeniedError(f"User {actor.username} is deactivated")
    if not can(actor, action):
        logger.warning("User %s (%s) denied action %s", actor.username, actor.role, action)
        raise PermissionDeniedError(f"Role {actor.role} may not perform {action}")
