from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from models import User
from repositories.base import Repository


class UserRepository(Repository[User]):
    model = User
    entity_name = "User"

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()
