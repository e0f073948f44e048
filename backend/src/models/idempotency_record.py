"""IdempotencyRecord SQLAlchemy model

One row per (actor_id, scope, idempotency_key). Stores the fingerprint of the
first request seen for that triple and the response it produced. Rows are
written once and never updated or deleted afterwards.
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint, Uuid

from .base import Base, PortableJSONB, utcnow


class IdempotencyRecord(Base):
    """Frozen response for an idempotent request."""
    __tablename__ = "idempotency_record"
    __table_args__ = (
        UniqueConstraint(
            "actor_id", "scope", "idempotency_key",
            name="uq_idempotency_actor_scope_key",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    actor_id = Column(Uuid, nullable=False)
    scope = Column(Text, nullable=False)  # e.g. "upload-url", "complete:<document id>"
    idempotency_key = Column(String(255), nullable=False)
    request_hash = Column(Text, nullable=False)  # SHA-256 hex of the canonical payload
    response_payload = Column(PortableJSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return (
            f"<IdempotencyRecord actor_id={self.actor_id} scope={self.scope!r} "
            f"key={self.idempotency_key!r}>"
        )
