"""Document ingestion service

Orchestrates the upload protocol between clients, object storage and the
document table:

1. request_upload_url reserves the next version, signs an upload URL and
   records the document in PENDING_UPLOAD.
2. The client PUTs the bytes straight to storage.
3. complete_upload checks the stored object against the declared metadata and
   promotes the document to PENDING and current.

Both mutating steps run through the IdempotencyGuard, which also owns their
transaction. Reads, deletion and review commit on their own.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from config import Settings
from domain.documents import (
    ACCEPTED_MIME_TYPE,
    MAX_FILE_SIZE,
    DocumentStatus,
    DocumentType,
    can_transition,
    is_supported_mime_type,
    validate_upload_payload,
)
from domain.documents.ports.object_storage_port import ObjectStoragePort, StorageError
from domain.errors import (
    BadRequestError,
    DocumentPipelineError,
    InternalError,
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from domain.idempotency import validate_idempotency_key
from idempotency import IdempotencyGuard
from infrastructure.repositories.document_repository import DocumentRepository
from models.base import utcnow
from models.document import Document
from observability.metrics import document_operations_total, storage_errors_total
from .reconciliation import purge_from_storage
from .schemas import DocumentPublic

logger = logging.getLogger(__name__)

UPLOAD_URL_SCOPE = "upload-url"
REVIEW_DECISIONS = (DocumentStatus.APPROVED, DocumentStatus.REJECTED)


@dataclass(frozen=True)
class IngestionConfig:
    """Settings the ingestion service needs, resolved once at startup"""
    bucket: str
    base_path: str
    download_url_ttl_seconds: int = 120
    upload_url_ttl_seconds: int = 7200
    max_file_size: int = MAX_FILE_SIZE

    @classmethod
    def from_settings(cls, settings: Settings) -> "IngestionConfig":
        return cls(
            bucket=settings.DOCUMENTS_BUCKET,
            base_path=settings.DOCUMENTS_BASE_PATH.strip("/"),
            download_url_ttl_seconds=settings.DOWNLOAD_URL_TTL_SECONDS,
            upload_url_ttl_seconds=settings.UPLOAD_URL_TTL_SECONDS,
        )


def build_storage_path(
    base_path: str,
    owner_id: UUID,
    document_type: DocumentType,
    version: int,
    now: datetime,
) -> str:
    """Object key for one document version.

    Format: {base_path}/{owner_id}/{type}_{yyyymmddHHMMSSmmm}_v{version}.pdf

    Example:
        >>> build_storage_path("user_documents", owner, DocumentType.EPS, 3, now)
        'user_documents/6f1c.../eps_20250101120000123_v3.pdf'
    """
    stamp = now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"
    return f"{base_path}/{owner_id}/{document_type.value}_{stamp}_v{version}.pdf"


def to_public_dict(document: Document) -> Dict[str, Any]:
    """JSON-ready public view of a document, as frozen in the idempotency ledger"""
    return DocumentPublic.model_validate(document).model_dump(mode="json")


@contextmanager
def _track(operation: str):
    try:
        yield
    except DocumentPipelineError:
        document_operations_total.labels(operation=operation, outcome="error").inc()
        raise
    document_operations_total.labels(operation=operation, outcome="success").inc()


class IngestionService:
    """Upload, completion, listing, download, deletion and review of documents.

    Example:
        service = IngestionService(db, storage, IngestionConfig.from_settings(settings))
        result = await service.request_upload_url(
            actor_id, DocumentType.EPS, "doc.pdf", "application/pdf", 1000,
            sha256=None, idempotency_key="3f1d...",
        )
    """

    def __init__(self, db: Session, storage: ObjectStoragePort, config: IngestionConfig):
        self.db = db
        self.storage = storage
        self.config = config
        self.documents = DocumentRepository(db)
        self.guard = IdempotencyGuard(db)

    async def request_upload_url(
        self,
        actor_id: UUID,
        document_type: DocumentType,
        filename: str,
        content_type: str,
        size_bytes: int,
        sha256: Optional[str],
        idempotency_key: Optional[str],
    ) -> Dict[str, Any]:
        """Reserve a document version and issue a signed upload URL.

        Returns:
            dict with id, document_type, status, upload target, signed URL,
            expiry and creation time

        Raises:
            UnsupportedMediaTypeError: content_type is not application/pdf
            PayloadTooLargeError: size_bytes exceeds the limit
            ValidationError: bad size, bad extension or bad Idempotency-Key
            ConflictError: key reused with another payload, or version race
            InternalError: storage could not sign the URL
        """
        with _track("upload_url"):
            validate_idempotency_key(idempotency_key)
            validate_upload_payload(content_type, size_bytes, filename, self.config.max_file_size)

            payload = {
                "document_type": document_type,
                "filename": filename,
                "content_type": content_type,
                "size_bytes": size_bytes,
                "sha256": sha256,
            }

            async def handler() -> Dict[str, Any]:
                version = self.documents.next_version(actor_id, document_type)
                now = utcnow()
                storage_path = build_storage_path(
                    self.config.base_path, actor_id, document_type, version, now
                )
                signed_url = await self._sign_upload(storage_path)
                expires_at = now + timedelta(seconds=self.config.upload_url_ttl_seconds)

                document = Document(
                    owner_id=actor_id,
                    document_type=document_type,
                    status=DocumentStatus.PENDING_UPLOAD,
                    version=version,
                    is_current=False,
                    bucket=self.config.bucket,
                    storage_path=storage_path,
                    original_filename=filename,
                    mime_type=ACCEPTED_MIME_TYPE,
                    size_bytes=size_bytes,
                    sha256=sha256,
                    created_at=now,
                    updated_at=now,
                )
                self.documents.add(document)

                logger.info(
                    f"Upload reserved: document_id={document.id}, type={document_type.value}, "
                    f"version={version}",
                    extra={
                        "document_id": str(document.id),
                        "owner_id": str(actor_id),
                        "version": version,
                    },
                )

                upload = {
                    "bucket": self.config.bucket,
                    "path": storage_path,
                    "signed_upload_url": signed_url,
                    "expires_at": expires_at.isoformat(),
                }
                return {
                    "id": str(document.id),
                    "document_type": document_type.value,
                    "status": DocumentStatus.PENDING_UPLOAD.value,
                    "upload": upload,
                    "signed_upload_url": signed_url,
                    "expires_at": expires_at.isoformat(),
                    "created_at": now.isoformat(),
                }

            return await self.guard.execute(
                actor_id, UPLOAD_URL_SCOPE, idempotency_key, payload, handler
            )

    async def complete_upload(
        self,
        actor_id: UUID,
        document_id: UUID,
        original_filename: str,
        content_type: str,
        size_bytes: int,
        sha256: Optional[str],
        idempotency_key: Optional[str],
    ) -> Dict[str, Any]:
        """Confirm the upload against storage and promote the document to current.

        Returns:
            Public document view

        Raises:
            NotFoundError: document absent, deleted, or owned by someone else
            BadRequestError: wrong status, object missing, or size mismatch
            UnsupportedMediaTypeError: stored object is not a PDF
            PayloadTooLargeError: stored object exceeds the limit
            ConflictError: key reused with another payload, or another
                completion for the same (owner, type) won the race
            InternalError: storage lookup failed
        """
        with _track("complete"):
            validate_idempotency_key(idempotency_key)
            validate_upload_payload(
                content_type, size_bytes, original_filename, self.config.max_file_size
            )

            payload = {
                "original_filename": original_filename,
                "content_type": content_type,
                "size_bytes": size_bytes,
                "sha256": sha256,
            }

            async def handler() -> Dict[str, Any]:
                document = self._get_owned_active(actor_id, document_id)

                if not can_transition(document.status, DocumentStatus.PENDING):
                    raise BadRequestError(
                        f"Document cannot be completed in status {document.status.value}"
                    )

                await self._verify_stored_object(document, size_bytes)

                demoted = self.documents.demote_current(
                    actor_id, document.document_type, document.id
                )

                document.status = DocumentStatus.PENDING
                document.is_current = True
                document.original_filename = original_filename
                document.mime_type = ACCEPTED_MIME_TYPE
                document.size_bytes = size_bytes
                document.sha256 = sha256 or document.sha256
                document.updated_at = utcnow()
                self.db.flush()

                logger.info(
                    f"Upload completed: document_id={document.id}, version={document.version}, "
                    f"demoted={demoted}",
                    extra={
                        "document_id": str(document.id),
                        "owner_id": str(actor_id),
                        "demoted": demoted,
                    },
                )
                return to_public_dict(document)

            return await self.guard.execute(
                actor_id, f"complete:{document_id}", idempotency_key, payload, handler
            )

    def list_my_documents(self, actor_id: UUID) -> List[Document]:
        """Non-deleted documents of the caller, by type then newest version first"""
        return self.documents.list_active_for_owner(actor_id)

    async def get_download_url(self, actor_id: UUID, document_id: UUID) -> Dict[str, Any]:
        """Issue a short-lived signed download URL for an uploaded document.

        Raises:
            NotFoundError: document absent, deleted, or owned by someone else
            BadRequestError: nothing has been uploaded yet
            InternalError: storage could not sign the URL
        """
        with _track("download_url"):
            document = self._get_owned_active(actor_id, document_id)

            if document.status == DocumentStatus.PENDING_UPLOAD:
                raise BadRequestError("Document upload has not been completed")

            try:
                signed_url = await self.storage.create_signed_download_url(
                    document.storage_path, self.config.download_url_ttl_seconds
                )
            except StorageError as e:
                storage_errors_total.labels(operation="sign_download").inc()
                logger.error(
                    f"Signing download URL failed: document_id={document.id}, error={e}",
                    extra={"document_id": str(document.id)},
                )
                raise InternalError("Could not create a download URL")

            expires_at = utcnow() + timedelta(seconds=self.config.download_url_ttl_seconds)
            return {"signed_url": signed_url, "expires_at": expires_at}

    async def delete_my_document(self, actor_id: UUID, document_id: UUID) -> Document:
        """Soft-delete one of the caller's documents and try to remove its bytes.

        Raises:
            NotFoundError: document absent, already deleted, or owned by someone else
        """
        with _track("delete"):
            document = self._get_owned_active(actor_id, document_id)
            return await self._soft_delete(document, deleted_by=actor_id)

    async def delete_document_as_admin(self, admin_id: UUID, document_id: UUID) -> Document:
        """Soft-delete any user's document on behalf of an administrator.

        Raises:
            NotFoundError: document absent or already deleted
        """
        with _track("admin_delete"):
            document = self.documents.get(document_id)
            if document is None or document.is_deleted:
                raise NotFoundError("Document not found")
            return await self._soft_delete(document, deleted_by=admin_id)

    def review_document(
        self,
        reviewer_id: UUID,
        document_id: UUID,
        decision: DocumentStatus,
        note: Optional[str] = None,
    ) -> Document:
        """Approve or reject the current version of a document.

        Raises:
            ValidationError: decision is neither approved nor rejected
            NotFoundError: document absent or deleted
            BadRequestError: document is not current or not awaiting review
        """
        with _track("review"):
            if decision not in REVIEW_DECISIONS:
                raise ValidationError("decision must be approved or rejected")

            document = self.documents.get(document_id)
            if document is None or document.is_deleted:
                raise NotFoundError("Document not found")

            if not document.is_current:
                raise BadRequestError("Only the current version of a document can be reviewed")

            if not can_transition(document.status, decision):
                raise BadRequestError(
                    f"Document cannot be reviewed in status {document.status.value}"
                )

            now = utcnow()
            document.status = decision
            document.reviewed_by = reviewer_id
            document.reviewed_at = now
            document.review_note = note
            document.updated_at = now
            self.db.commit()

            logger.info(
                f"Document reviewed: document_id={document.id}, decision={decision.value}",
                extra={"document_id": str(document.id), "reviewer_id": str(reviewer_id)},
            )
            return document

    def _get_owned_active(self, owner_id: UUID, document_id: UUID) -> Document:
        document = self.documents.get_owned(owner_id, document_id)
        if document is None or document.is_deleted:
            raise NotFoundError("Document not found")
        return document

    async def _sign_upload(self, storage_path: str) -> str:
        try:
            return await self.storage.create_signed_upload_url(
                storage_path, ACCEPTED_MIME_TYPE, self.config.upload_url_ttl_seconds
            )
        except StorageError as e:
            storage_errors_total.labels(operation="sign_upload").inc()
            logger.error(
                f"Signing upload URL failed: storage_path={storage_path}, error={e}",
                extra={"storage_path": storage_path},
            )
            raise InternalError("Could not create an upload URL")

    async def _verify_stored_object(self, document: Document, declared_size: int) -> None:
        """Compare the object in storage with the declared upload metadata.

        Only metadata the store reports is checked: a missing content type or
        size does not fail the upload.
        """
        try:
            info = await self.storage.get_object_info(document.storage_path)
        except StorageError as e:
            storage_errors_total.labels(operation="object_info").inc()
            logger.error(
                f"Object lookup failed: document_id={document.id}, error={e}",
                extra={"document_id": str(document.id)},
            )
            raise InternalError("Could not verify the uploaded file")

        if info is None:
            raise BadRequestError("File not found in storage")

        if info.mime_type is not None and not is_supported_mime_type(info.mime_type):
            raise UnsupportedMediaTypeError(
                f"Stored file has content type {info.mime_type}, expected {ACCEPTED_MIME_TYPE}"
            )

        if info.size_bytes is None:
            return

        if info.size_bytes > self.config.max_file_size:
            raise PayloadTooLargeError(
                f"Stored file exceeds maximum size of {self.config.max_file_size} bytes"
            )

        if info.size_bytes != declared_size:
            raise BadRequestError(
                f"File size mismatch: declared {declared_size} bytes, "
                f"stored {info.size_bytes} bytes"
            )

    async def _soft_delete(self, document: Document, deleted_by: UUID) -> Document:
        """Mark a document deleted, commit, then attempt the physical delete."""
        now = utcnow()
        document.status = DocumentStatus.DELETED
        document.is_current = False
        document.deleted_by = deleted_by
        document.deleted_at = now
        document.storage_delete_scheduled_at = now
        document.updated_at = now
        self.db.commit()

        logger.info(
            f"Document soft-deleted: document_id={document.id}, deleted_by={deleted_by}",
            extra={"document_id": str(document.id), "deleted_by": str(deleted_by)},
        )

        if await purge_from_storage(self.storage, document):
            self.db.commit()

        return document
