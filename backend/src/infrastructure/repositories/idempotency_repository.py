"""Idempotency ledger repository"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from models.idempotency_record import IdempotencyRecord


class IdempotencyRepository:
    """Repository for idempotency_record operations.

    Records are inserted once and never updated after commit.
    """

    def __init__(self, db: Session):
        self.db = db

    def find(self, actor_id: UUID, scope: str, idempotency_key: str) -> Optional[IdempotencyRecord]:
        """Get the committed record for (actor, scope, key), if any."""
        query = select(IdempotencyRecord).where(
            and_(
                IdempotencyRecord.actor_id == actor_id,
                IdempotencyRecord.scope == scope,
                IdempotencyRecord.idempotency_key == idempotency_key,
            )
        )
        return self.db.execute(query).scalars().first()

    def reserve(
        self,
        actor_id: UUID,
        scope: str,
        idempotency_key: str,
        request_hash: str,
    ) -> IdempotencyRecord:
        """Insert the ledger row for a new key inside the current transaction.

        The row is flushed immediately so a concurrent reservation of the same
        key either blocks on the unique index or fails right here.

        Raises:
            IntegrityError: If another caller already holds (actor, scope, key)
        """
        record = IdempotencyRecord(
            actor_id=actor_id,
            scope=scope,
            idempotency_key=idempotency_key,
            request_hash=request_hash,
            response_payload={},
        )
        self.db.add(record)
        self.db.flush()
        return record

    def store_response(self, record: IdempotencyRecord, response_payload: Any) -> None:
        """Attach the handler's result to a reserved, not yet committed record."""
        record.response_payload = response_payload
        self.db.flush()
