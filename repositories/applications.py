from __future__ import annotations

from sqlalchemy import select

from models import LoanApplication
from repositories.base import Repository


class LoanApplicationRepository(Repository[LoanApplication]):
    model = LoanApplication
    entity_name = "Loan application"

    async def find_all(self) -> list[LoanApplication]:
        result = await self.session.execute(select(LoanApplication).order_by(LoanApplication.applied_at.desc()))
        return list(result.scalars().all())

    async def find_by_owner(self, applicant_id: str, for_update: bool = False) -> list[LoanApplication]:
        stmt = (
            select(LoanApplication)
            .where(LoanApplication.applicant_id == applicant_id)
            .order_by(LoanApplication.applied_at)
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_status(self, status: str) -> list[LoanApplication]:
        result = await self.session.execute(
            select(LoanApplication).where(LoanApplication.status == status).order_by(LoanApplication.applied_at)
        )
        return list(result.scalars().all())
