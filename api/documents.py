from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from api.deps import get_current_user, get_document_gate
from models import Document, DocumentStatus, User
from services.document_gate import DocumentGate

router = APIRouter(prefix="/api/documents", tags=["documents"])


def document_to_response(doc: Document) -> dict[str, Any]:
    return {
        "id": doc.id,
        "ownerId": doc.owner_id,
        "applicationId": doc.application_id,
        "documentType": doc.document_type,
        "fileName": doc.file_name,
        "contentType": doc.content_type,
        "fileSize": doc.file_size,
        "status": doc.status,
        "reviewedBy": doc.reviewed_by,
        "reviewedAt": doc.reviewed_at.isoformat() if doc.reviewed_at else None,
        "uploadedAt": doc.uploaded_at.isoformat() if doc.uploaded_at else None,
    }


@router.post("", status_code=201)
async def upload_document(
    file: UploadFile = File(..., description="Supporting document"),
    document_type: str = Form("", alias="documentType"),
    user: User = Depends(get_current_user),
    gate: DocumentGate = Depends(get_document_gate),
):
    content = await file.read()
    doc = await gate.record_upload(user, file.filename, file.content_type, content, document_type)
    return document_to_response(doc)


@router.get("")
async def list_documents(
    status: Optional[DocumentStatus] = None,
    user: User = Depends(get_current_user),
    gate: DocumentGate = Depends(get_document_gate),
):
    docs = await gate.list_for(user, status.value if status else None)
    return [document_to_response(d) for d in docs]


@router.get("/{document_id}/content")
async def get_document_content(
    document_id: str,
    user: User = Depends(get_current_user),
    gate: DocumentGate = Depends(get_document_gate),
):
    doc, data = await gate.retrieve(document_id, user)
    return Response(
        content=data,
        media_type=doc.content_type,
        headers={"Content-Disposition": f'inline; filename="{doc.file_name}"'},
    )


@router.post("/{document_id}/verify")
async def verify_document(
    document_id: str,
    user: User = Depends(get_current_user),
    gate: DocumentGate = Depends(get_document_gate),
):
    return document_to_response(await gate.verify(document_id, user))


@router.post("/{document_id}/reject")
async def reject_document(
    document_id: str,
    user: User = Depends(get_current_user),
    gate: DocumentGate = Depends(get_document_gate),
):
    return document_to_response(await gate.reject(document_id, user))
