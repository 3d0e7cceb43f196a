from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_optional_user
from database import get_db
from errors import PermissionDeniedError
from models import Role, User
from schemas.user import CreditProfileUpdate, UserCreate
from services import permissions, users

router = APIRouter(prefix="/api/users", tags=["users"])


def _user_to_response(u: User) -> dict[str, Any]:
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "role": u.role,
        "isActive": u.is_active,
        "profile": {
            "annualIncome": u.annual_income,
            "employmentStatus": u.employment_status,
            "age": u.age,
            "maritalStatus": u.marital_status,
            "existingDebts": u.existing_debts,
            "creditHistoryYears": u.credit_history_years,
            "latePayments": u.late_payments,
            "creditUtilization": u.credit_utilization,
            "creditInquiries": u.credit_inquiries,
            "creditMix": u.credit_mix or [],
        },
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


@router.post("", status_code=201)
async def register_user(
    body: UserCreate,
    actor: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    # Self-registration creates applicants; staff accounts are created by an admin
    if body.role != Role.APPLICANT:
        if actor is None:
            raise PermissionDeniedError("Only an admin may create staff accounts")
        permissions.require(actor, "manage_users")
    profile = body.profile.changes() if body.profile else None
    user = await users.register(db, body.username, email=body.email, role=body.role, profile=profile)
    return _user_to_response(user)


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    return _user_to_response(user)


@router.patch("/me/profile")
async def update_my_profile(
    body: CreditProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _user_to_response(await users.update_profile(db, user, body.changes()))


@router.post("/{user_id}/deactivate")
async def deactivate_user(
    user_id: str,
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _user_to_response(await users.deactivate(db, actor, user_id))
