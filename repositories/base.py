from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from errors import IllegalStateError, NotFoundError

T = TypeVar("T")


class Repository(Generic[T]):
    """Id-keyed access to one entity type within the caller's session/transaction."""

    model: type
    entity_name: str = "Entity"

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, obj: T) -> T:
        self.session.add(obj)
        try:
            await self.session.flush()
        except StaleDataError as e:
            raise IllegalStateError(f"{self.entity_name} was modified concurrently; reload and retry") from e
        return obj

    async def find(self, entity_id: Any, for_update: bool = False) -> Optional[T]:
        stmt = select(self.model).where(self.model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, entity_id: Any, for_update: bool = False) -> T:
        obj = await self.find(entity_id, for_update=for_update)
        if obj is None:
            raise NotFoundError(self.entity_name, entity_id)
        return obj
