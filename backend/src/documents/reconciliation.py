"""Physical deletion of soft-deleted documents from object storage.

Soft delete is what callers rely on; removing the bytes is best-effort. A
document whose physical delete failed keeps storage_delete_scheduled_at set and
storage_deleted_at empty, and the periodic sweep below retries it.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from domain.documents.ports.object_storage_port import ObjectStoragePort, StorageError
from infrastructure.repositories.document_repository import DocumentRepository
from models.base import utcnow
from models.document import Document
from observability.metrics import storage_errors_total, storage_reconciliation_total

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation sweep"""
    started_at: datetime
    examined: int = 0
    deleted: int = 0
    failed: int = 0
    failed_document_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "examined": self.examined,
            "deleted": self.deleted,
            "failed": self.failed,
            "failed_document_ids": list(self.failed_document_ids),
        }


async def purge_from_storage(storage: ObjectStoragePort, document: Document) -> bool:
    """Try to remove a soft-deleted document's object from storage.

    Stamps storage_deleted_at on success. The caller commits.

    Returns:
        True if storage confirmed the deletion, False if it failed
    """
    try:
        removed = await storage.delete_prefix(document.storage_path)
    except StorageError as e:
        storage_errors_total.labels(operation="delete").inc()
        logger.warning(
            f"Physical delete failed, left for reconciliation: document_id={document.id}, error={e}",
            extra={"document_id": str(document.id), "storage_path": document.storage_path},
        )
        return False

    document.storage_deleted_at = utcnow()
    logger.info(
        f"Physical delete completed: document_id={document.id}, objects_removed={removed}",
        extra={"document_id": str(document.id), "objects_removed": removed},
    )
    return True


async def reconcile_storage_deletions(
    db: Session,
    storage: ObjectStoragePort,
    batch_size: int,
    scheduled_before: Optional[datetime] = None,
) -> ReconciliationReport:
    """Retry physical deletion for soft-deleted documents still in storage.

    Each successful deletion is committed on its own so one failure never
    undoes the progress of the rest of the batch.

    Args:
        db: Database session
        storage: Storage gateway
        batch_size: Maximum number of documents handled in this run
        scheduled_before: Only retry deletions scheduled at or before this time

    Returns:
        ReconciliationReport with per-run counts
    """
    report = ReconciliationReport(started_at=utcnow())
    repository = DocumentRepository(db)

    for document in repository.list_pending_storage_deletions(batch_size, scheduled_before):
        report.examined += 1
        if await purge_from_storage(storage, document):
            db.commit()
            report.deleted += 1
            storage_reconciliation_total.labels(outcome="deleted").inc()
        else:
            report.failed += 1
            report.failed_document_ids.append(str(document.id))
            storage_reconciliation_total.labels(outcome="failed").inc()

    logger.info(
        f"Storage reconciliation finished: examined={report.examined}, "
        f"deleted={report.deleted}, failed={report.failed}",
        extra=report.to_dict(),
    )
    return report
