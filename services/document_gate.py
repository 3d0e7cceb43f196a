"""
Document uploads, officer review, and the gate that unblocks submitted applications.

The gate is satisfied when every distinct document type the applicant has uploaded has
at least one VERIFIED document. Verification fan-out and rejection clean-up run in the
caller's transaction, so either every affected application is updated or none is.
"""
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from errors import PermissionDeniedError, ValidationError
from models import Document, DocumentStatus, LoanApplication, LoanStatus, User
from repositories import DocumentRepository, LoanApplicationRepository
from services import permissions
from services.blob_storage import BlobStorage
from services.notifications import NotificationDispatcher
from services.state_machine import transition
from utils.clock import utcnow

logger = logging.getLogger(__name__)


def gate_satisfied(documents: Iterable[Document]) -> bool:
    """True when each document type has a VERIFIED member. No documents -> False."""
    by_type: dict[str, list[Document]] = defaultdict(list)
    for doc in documents:
        by_type[doc.document_type].append(doc)
    if not by_type:
        return False
    return all(
        any(d.status == DocumentStatus.VERIFIED.value for d in docs)
        for docs in by_type.values()
    )


class DocumentGate:
    def __init__(
        self,
        session: AsyncSession,
        storage: BlobStorage,
        notifier: NotificationDispatcher | None = None,
    ):
        self.session = session
        self.storage = storage
        self.notifier = notifier or NotificationDispatcher()
        self.documents = DocumentRepository(session)
        self.applications = LoanApplicationRepository(session)

    async def record_upload(
        self,
        owner: User,
        file_name: str | None,
        content_type: str | None,
        data: bytes | None,
        document_type: str | None,
    ) -> Document:
        permissions.require(owner, "upload_document")
        if not data:
            raise ValidationError("Please select a file to upload: file is empty")
        if not document_type or not document_type.strip():
            raise ValidationError("Document type is required")

        handle = await run_in_threadpool(self.storage.store, data)
        doc = Document(
            id=f"doc-{uuid.uuid4().hex[:12]}",
            owner_id=owner.id,
            application_id=None,
            document_type=document_type.strip(),
            file_name=file_name or "upload",
            content_type=content_type or "application/octet-stream",
            file_size=len(data),
            storage_handle=handle,
            status=DocumentStatus.UPLOADED.value,
            uploaded_at=utcnow(),
        )
        await self.documents.save(doc)
        logger.info("Document %s (%s) uploaded by %s", doc.id, doc.document_type, owner.username)
        return doc

    async def _review(self, document_id: str, actor: User, status: DocumentStatus) -> Document:
        doc = await self.documents.get(document_id, for_update=True)
        doc.status = status.value
        doc.reviewed_by = actor.id
        doc.reviewed_at = utcnow()
        await self.documents.save(doc)
        logger.info("Document %s marked %s by %s", doc.id, status.value, actor.username)
        return doc

    async def verify(self, document_id: str, actor: User) -> Document:
        permissions.require(actor, "verify_document")
        doc = await self._review(document_id, actor, DocumentStatus.VERIFIED)
        await self._release_submitted(doc.owner_id, actor)
        return doc

    async def _release_submitted(self, owner_id: str, actor: User) -> list[LoanApplication]:
        applications = await self.applications.find_by_owner(owner_id, for_update=True)
        owner_docs = await self.documents.find_by_owner(owner_id)
        if not gate_satisfied(owner_docs):
            return []

        released = []
        for app in applications:
            if app.status != LoanStatus.SUBMITTED.value:
                continue
            transition(app, LoanStatus.DOCUMENT_VERIFIED)
            app.documents_verified = True
            app.officer_id = actor.id
            await self.applications.save(app)
            released.append(app)

        for app in released:
            self.notifier.status_changed(app.applicant_id, LoanStatus.DOCUMENT_VERIFIED.value)
        if released:
            logger.info("Document gate released %d application(s) for applicant %s", len(released), owner_id)
        return released

    async def reject(self, document_id: str, actor: User) -> Document:
        permissions.require(actor, "reject_document")
        doc = await self._review(document_id, actor, DocumentStatus.REJECTED)
        # Any rejection re-opens document scrutiny, including decided applications
        for app in await self.applications.find_by_owner(doc.owner_id, for_update=True):
            if app.documents_verified:
                app.documents_verified = False
                await self.applications.save(app)
        return doc

    async def link_unassociated_documents(self, owner_id: str, application_id: str) -> list[Document]:
        linked = []
        for doc in await self.documents.find_unlinked_by_owner(owner_id):
            doc.application_id = application_id
            await self.documents.save(doc)
            linked.append(doc)
        logger.debug("Linked %d document(s) to application %s", len(linked), application_id)
        return linked

    async def retrieve(self, document_id: str, actor: User) -> tuple[Document, bytes]:
        doc = await self.documents.get(document_id)
        if doc.owner_id != actor.id and not permissions.can(actor, "review_all"):
            raise PermissionDeniedError("Not allowed to view this document")
        return doc, await run_in_threadpool(self.storage.retrieve, doc.storage_handle)

    async def list_for(self, actor: User, status: str | None = None) -> list[Document]:
        if permissions.can(actor, "review_all"):
            if status:
                return await self.documents.find_by_status(status)
            return await self.documents.find_all()
        docs = await self.documents.find_by_owner(actor.id)
        return [d for d in docs if not status or d.status == status]
