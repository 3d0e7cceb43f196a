from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from errors import ValidationError
from models import Role, User
from repositories import UserRepository
from services import permissions

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "annual_income",
    "employment_status",
    "age",
    "marital_status",
    "existing_debts",
    "credit_history_years",
    "late_payments",
    "credit_utilization",
    "credit_inquiries",
    "credit_mix",
)


async def register(
    session: AsyncSession,
    username: str,
    email: str | None = None,
    role: Role = Role.APPLICANT,
    profile: dict[str, Any] | None = None,
) -> User:
    if not username or not username.strip():
        raise ValidationError("Username is required")
    repo = UserRepository(session)
    if await repo.find_by_username(username.strip()):
        raise ValidationError(f"Username already in use: {username.strip()}")
    user = User(
        id=f"usr-{uuid.uuid4().hex[:12]}",
        username=username.strip(),
        email=email,
        role=role.value,
        is_active=True,
    )
    for field, value in (profile or {}).items():
        if field in PROFILE_FIELDS:
            setattr(user, field, value)
    await repo.save(user)
    logger.info("Registered %s user %s", user.role, user.username)
    return user


async def update_profile(session: AsyncSession, user: User, changes: dict[str, Any]) -> User:
    """Owner-only update of credit attributes; unknown keys are ignored."""
    permissions.require(user, "update_profile")
    for field, value in changes.items():
        if field in PROFILE_FIELDS:
            setattr(user, field, value)
    return await UserRepository(session).save(user)


async def deactivate(session: AsyncSession, actor: User, user_id: str) -> User:
    permissions.require(actor, "manage_users")
    repo = UserRepository(session)
    user = await repo.get(user_id)
    user.is_active = False
    await repo.save(user)
    logger.info("User %s deactivated by %s", user.username, actor.username)
    return user
