"""Document SQLAlchemy model

Document represents one stored version of a typed document owned by a user.
Tracks lifecycle status, version, the "current" flag, storage location,
review metadata and soft-delete metadata. Rows are never physically removed.
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    Index,
    Integer,
    BigInteger,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
import enum

from domain.documents.document_status import DocumentStatus, DocumentType
from .base import Base, utcnow


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Document(Base):
    """Document model representing one uploaded file version.

    Per (owner_id, document_type):
    - at most one non-deleted row has is_current = true (partial unique index)
    - version numbers are never reused, deleted rows included
    A DELETED row always has is_current = false.
    """
    __tablename__ = "document"
    __table_args__ = (
        # At most one current, non-deleted document per owner and type
        Index(
            "uq_document_owner_type_current",
            "owner_id",
            "document_type",
            unique=True,
            postgresql_where=text("is_current = true AND deleted_at IS NULL"),
            sqlite_where=text("is_current = 1 AND deleted_at IS NULL"),
        ),
        UniqueConstraint(
            "owner_id", "document_type", "version",
            name="uq_document_owner_type_version",
        ),
        Index("ix_document_owner_id", "owner_id"),
        Index(
            "ix_document_storage_delete_pending",
            "storage_delete_scheduled_at",
            postgresql_where=text("storage_deleted_at IS NULL"),
            sqlite_where=text("storage_deleted_at IS NULL"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    owner_id = Column(Uuid, nullable=False)
    document_type = Column(
        SQLEnum(
            DocumentType,
            name="document_type",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    status = Column(
        SQLEnum(
            DocumentStatus,
            name="document_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=DocumentStatus.PENDING_UPLOAD,
    )
    version = Column(Integer, nullable=False, default=1)
    is_current = Column(Boolean, nullable=False, default=False)

    # Storage coordinates
    bucket = Column(Text, nullable=False)
    storage_path = Column(Text, nullable=False)

    # Declared file metadata
    original_filename = Column(Text, nullable=False)
    mime_type = Column(Text, nullable=False, default="application/pdf")
    size_bytes = Column(BigInteger, nullable=False)
    sha256 = Column(Text, nullable=True)  # hex string, client-supplied

    # Review
    review_note = Column(Text, nullable=True)
    reviewed_by = Column(Uuid, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    # Soft delete
    deleted_by = Column(Uuid, nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    storage_delete_scheduled_at = Column(DateTime(timezone=True), nullable=True)
    storage_deleted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_deleted(self) -> bool:
        return self.status == DocumentStatus.DELETED or self.deleted_at is not None

    def __repr__(self):
        return (
            f"<Document id={self.id} owner_id={self.owner_id} "
            f"type={_value(self.document_type)} v{self.version} "
            f"status={_value(self.status)} current={self.is_current}>"
        )


def _value(member):
    return member.value if isinstance(member, enum.Enum) else member
