from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import select

from models import InterestRateOverride
from repositories.base import Repository


class InterestRateRepository(Repository[InterestRateOverride]):
    model = InterestRateOverride
    entity_name = "Interest rate"

    async def find(self, purpose: str, for_update: bool = False) -> Optional[InterestRateOverride]:
        stmt = select(InterestRateOverride).where(InterestRateOverride.purpose == purpose)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(self) -> list[InterestRateOverride]:
        result = await self.session.execute(select(InterestRateOverride).order_by(InterestRateOverride.purpose))
        return list(result.scalars().all())

    async def as_mapping(self) -> dict[str, Decimal]:
        return {o.purpose: o.rate for o in await self.find_all()}

    async def upsert(self, purpose: str, rate: Decimal, updated_by: Optional[str] = None) -> InterestRateOverride:
        existing = await self.find(purpose, for_update=True)
        if existing is None:
            existing = InterestRateOverride(purpose=purpose, rate=rate, updated_by=updated_by)
        else:
            existing.rate = rate
            existing.updated_by = updated_by
        return await self.save(existing)
