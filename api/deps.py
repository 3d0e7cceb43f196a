"""
Request-scoped collaborators for the routers. Tests override these via `app.dependency_overrides`.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from models import User
from repositories import UserRepository
from services.blob_storage import BlobStorage, LocalBlobStorage
from services.document_gate import DocumentGate
from services.lifecycle import LoanLifecycle
from services.notifications import NotificationDispatcher

_storage = LocalBlobStorage(settings.upload_dir)
_notifier = NotificationDispatcher()


def get_blob_storage() -> BlobStorage:
    return _storage


def get_notifier() -> NotificationDispatcher:
    return _notifier


async def get_optional_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Identity is asserted by the upstream gateway through the X-User-Id header."""
    if not x_user_id:
        return None
    user = await UserRepository(db).find(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is deactivated")
    return user


def get_document_gate(
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> DocumentGate:
    return DocumentGate(db, storage, notifier)


def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> LoanLifecycle:
    return LoanLifecycle(db, storage, notifier)
