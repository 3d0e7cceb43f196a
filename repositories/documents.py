from __future__ import annotations

from sqlalchemy import func, select

from models import Document
from repositories.base import Repository


class DocumentRepository(Repository[Document]):
    model = Document
    entity_name = "Document"

    async def find_all(self) -> list[Document]:
        result = await self.session.execute(select(Document).order_by(Document.uploaded_at.desc()))
        return list(result.scalars().all())

    async def find_by_owner(self, owner_id: str, for_update: bool = False) -> list[Document]:
        stmt = select(Document).where(Document.owner_id == owner_id).order_by(Document.uploaded_at)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_status(self, status: str) -> list[Document]:
        result = await self.session.execute(
            select(Document).where(Document.status == status).order_by(Document.uploaded_at)
        )
        return list(result.scalars().all())

    async def find_by_application(self, application_id: str) -> list[Document]:
        result = await self.session.execute(
            select(Document).where(Document.application_id == application_id).order_by(Document.uploaded_at)
        )
        return list(result.scalars().all())

    async def find_unlinked_by_owner(self, owner_id: str) -> list[Document]:
        result = await self.session.execute(
            select(Document)
            .where(Document.owner_id == owner_id, Document.application_id.is_(None))
            .order_by(Document.uploaded_at)
        )
        return list(result.scalars().all())

    async def count_by_owner(self, owner_id: str) -> int:
        result = await self.session.execute(select(func.count()).select_from(Document).where(Document.owner_id == owner_id))
        return result.scalar_one()
