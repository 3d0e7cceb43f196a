from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user
from database import get_db
from models import User
from schemas.interest_rate import InterestRateUpdate
from services import interest_rates

router = APIRouter(prefix="/api/interest-rates", tags=["interest-rates"])


@router.get("")
async def list_interest_rates(db: AsyncSession = Depends(get_db)):
    """Base rate per purpose before score adjustment; overrides flagged."""
    table = await interest_rates.load_rate_table(db)
    return {
        "rates": [
            {"purpose": purpose, "rate": rate, "override": purpose in table.overrides}
            for purpose, rate in sorted(table.effective_rates().items())
        ],
        "fallbackRate": table.fallback,
    }


@router.put("/{purpose}")
async def set_interest_rate(
    purpose: str,
    body: InterestRateUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    override = await interest_rates.set_override(db, user, purpose, body.rate)
    return {
        "purpose": override.purpose,
        "rate": override.rate,
        "override": True,
        "updatedBy": override.updated_by,
    }
