from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from errors import ValidationError
from models import InterestRateOverride, User
from repositories import InterestRateRepository
from services import permissions
from services.credit_scoring import RateTable, normalize_purpose

logger = logging.getLogger(__name__)

MAX_RATE = Decimal("99.99")


async def load_rate_table(session: AsyncSession) -> RateTable:
    return RateTable(overrides=await InterestRateRepository(session).as_mapping())


async def set_override(session: AsyncSession, actor: User, purpose: str, rate) -> InterestRateOverride:
    """
    Create or replace the manager rate for a purpose.
    Overrides are returned unadjusted by the engine, so the floor is enforced here.
    """
    permissions.require(actor, "set_interest_rate")
    key = normalize_purpose(purpose)
    if not key:
        raise ValidationError("Purpose is required")
    try:
        rate = Decimal(str(rate)).quantize(Decimal("0.01"))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid rate: {rate!r}")
    if not rate.is_finite():
        raise ValidationError(f"Invalid rate: {rate!r}")
    if rate <settings.min_interest_rate or rate > MAX_RATE:
        raise ValidationError(f"Rate must be between {settings.min_interest_rate} and {MAX_RATE}")
    override = await InterestRateRepository(session).upsert(key, rate, updated_by=actor.id)
    logger.info("Interest rate for %r set to %s by %s", key, rate, actor.username)
    return override
