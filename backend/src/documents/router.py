"""Document API endpoints

Upload protocol (client side):
1. POST /documents/upload-url with an Idempotency-Key header
2. PUT the PDF bytes to the returned signed_upload_url
3. POST /documents/{id}/complete with an Idempotency-Key header

Both POSTs replay their first response when retried with the same key and
body. Errors are rendered by the DocumentPipelineError handler in main.py.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status

from auth.dependencies import AdminActor, CurrentActor
from .dependencies import get_ingestion_service
from .schemas import (
    CompleteUploadRequest,
    DocumentPublic,
    DownloadUrlResponse,
    MessageResponse,
    ReviewRequest,
    UploadUrlRequest,
    UploadUrlResponse,
)
from .service import IngestionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])
admin_router = APIRouter(prefix="/admin/documents", tags=["Documents (admin)"])


@router.post("/upload-url", response_model=UploadUrlResponse, status_code=status.HTTP_201_CREATED)
async def request_upload_url(
    body: UploadUrlRequest,
    actor: CurrentActor,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    service: IngestionService = Depends(get_ingestion_service),
):
    """Reserve a new document version and get a signed upload URL

    Validation (before any side effect):
    - content_type must be application/pdf (415 otherwise)
    - size_bytes must be in (0, 10 MiB] (400 / 413 otherwise)
    - filename must end in .pdf (400 otherwise)
    - Idempotency-Key header is required (400 otherwise)

    Example:
        curl -X POST https://api.example.com/api/v1/documents/upload-url \\
             -H "Authorization: Bearer $TOKEN" \\
             -H "Idempotency-Key: 5b0e2c8a-..." \\
             -d '{"document_type": "eps", "filename": "eps.pdf",
                  "content_type": "application/pdf", "size_bytes": 48213}'
    """
    return await service.request_upload_url(
        actor_id=actor.id,
        document_type=body.document_type,
        filename=body.filename,
        content_type=body.content_type,
        size_bytes=body.size_bytes,
        sha256=body.sha256,
        idempotency_key=idempotency_key,
    )


@router.post("/{document_id}/complete", response_model=DocumentPublic)
async def complete_upload(
    document_id: UUID,
    body: CompleteUploadRequest,
    actor: CurrentActor,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    service: IngestionService = Depends(get_ingestion_service),
):
    """Confirm an upload and make the document the current version

    The stored object must exist and match the declared size and MIME type.
    Any previously current document of the same type is demoted.
    """
    return await service.complete_upload(
        actor_id=actor.id,
        document_id=document_id,
        original_filename=body.original_filename,
        content_type=body.content_type,
        size_bytes=body.size_bytes,
        sha256=body.sha256,
        idempotency_key=idempotency_key,
    )


@router.get("", response_model=List[DocumentPublic])
def list_my_documents(
    actor: CurrentActor,
    service: IngestionService = Depends(get_ingestion_service),
):
    """List the caller's non-deleted documents, by type then newest version first"""
    return service.list_my_documents(actor.id)


@router.get("/{document_id}/download-url", response_model=DownloadUrlResponse)
async def get_download_url(
    document_id: UUID,
    actor: CurrentActor,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Get a short-lived signed download URL"""
    return await service.get_download_url(actor.id, document_id)


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_my_document(
    document_id: UUID,
    actor: CurrentActor,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Soft-delete one of the caller's documents

    Physical removal from storage is best-effort; the document is hidden
    immediately either way.
    """
    await service.delete_my_document(actor.id, document_id)
    return MessageResponse(message="Document deleted")


@admin_router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document_as_admin(
    document_id: UUID,
    admin: AdminActor,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Soft-delete any user's document (ADMIN only)"""
    await service.delete_document_as_admin(admin.id, document_id)
    return MessageResponse(message="Document deleted")


@admin_router.post("/{document_id}/review", response_model=DocumentPublic)
def review_document(
    document_id: UUID,
    body: ReviewRequest,
    admin: AdminActor,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Approve or reject a pending document (ADMIN only)"""
    return service.review_document(admin.id, document_id, body.decision, body.note)
