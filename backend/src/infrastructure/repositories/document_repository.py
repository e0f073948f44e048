"""Document repository for database operations"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import Session

from domain.documents.document_status import DocumentStatus, DocumentType
from models.base import utcnow
from models.document import Document


class DocumentRepository:
    """Repository for document table operations.

    The repository is passive: it never commits and enforces no lifecycle
    rules. Callers own the transaction and the state machine.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def add(self, document: Document) -> Document:
        """Stage a new document and flush it so constraint violations surface now.

        Raises:
            IntegrityError: If the (owner, type, version) slot is already taken
        """
        self.db.add(document)
        self.db.flush()
        return document

    def get(self, document_id: UUID) -> Optional[Document]:
        return self.db.get(Document, document_id)

    def get_owned(self, owner_id: UUID, document_id: UUID) -> Optional[Document]:
        """Get a document by ID, scoped to its owner.

        Returns None both when the document does not exist and when it belongs
        to another owner, so callers cannot tell the two apart.
        """
        query = select(Document).where(
            and_(
                Document.id == document_id,
                Document.owner_id == owner_id,
            )
        )
        return self.db.execute(query).scalars().first()

    def next_version(self, owner_id: UUID, document_type: DocumentType) -> int:
        """Next version number for (owner, type): 1 + max existing version.

        Deleted rows count, so a version number is never handed out twice.
        """
        query = select(func.max(Document.version)).where(
            and_(
                Document.owner_id == owner_id,
                Document.document_type == document_type,
            )
        )
        latest = self.db.execute(query).scalar()
        return (latest or 0) + 1

    def demote_current(
        self,
        owner_id: UUID,
        document_type: DocumentType,
        keep_document_id: UUID,
    ) -> int:
        """Clear is_current on every other current, non-deleted row of (owner, type).

        Returns:
            Number of rows demoted
        """
        stmt = (
            update(Document)
            .where(
                and_(
                    Document.owner_id == owner_id,
                    Document.document_type == document_type,
                    Document.id != keep_document_id,
                    Document.is_current.is_(True),
                    Document.deleted_at.is_(None),
                )
            )
            .values(is_current=False, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def list_active_for_owner(self, owner_id: UUID) -> List[Document]:
        """Non-deleted documents of an owner, by type, newest version first."""
        query = (
            select(Document)
            .where(
                and_(
                    Document.owner_id == owner_id,
                    Document.deleted_at.is_(None),
                )
            )
            .order_by(
                Document.document_type.asc(),
                Document.version.desc(),
                Document.created_at.desc(),
            )
        )
        return list(self.db.execute(query).scalars().all())

    def list_pending_storage_deletions(
        self,
        limit: int,
        scheduled_before: Optional[datetime] = None,
    ) -> List[Document]:
        """Soft-deleted documents whose physical delete has not succeeded yet.

        Oldest scheduled deletion first.
        """
        query = select(Document).where(
            and_(
                Document.status == DocumentStatus.DELETED,
                Document.storage_delete_scheduled_at.is_not(None),
                Document.storage_deleted_at.is_(None),
            )
        )

        if scheduled_before is not None:
            query = query.where(Document.storage_delete_scheduled_at <= scheduled_before)

        query = query.order_by(Document.storage_delete_scheduled_at.asc()).limit(limit)

        return list(self.db.execute(query).scalars().all())
