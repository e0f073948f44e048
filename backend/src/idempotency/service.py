"""Idempotency guard for mutating operations.

Makes a mutating operation safe to retry verbatim: for each
(actor, scope, idempotency key) the wrapped handler runs at most once and its
result is frozen in the idempotency ledger. A retry with the same payload gets
the stored result back; a retry with a different payload is a conflict.

Transaction model:
1. Look up a committed ledger row. Found: replay or conflict.
2. Not found: insert (flush) the ledger row first, in the transaction that will
   also carry the handler's writes. A concurrent caller holding the same key
   makes this insert block on the unique index until that caller commits, and
   then fail with a uniqueness violation.
3. On that violation: roll back, re-read the winner's row, replay or conflict.
4. Otherwise run the handler, store its result on the row, commit everything.
   Any handler failure rolls back the ledger row together with the handler's
   writes, leaving the key unused.
"""

import logging
from typing import Any, Awaitable, Callable, Dict
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from domain.errors import ConflictError
from domain.idempotency import compute_request_hash, validate_idempotency_key
from infrastructure.repositories.idempotency_repository import IdempotencyRepository
from models.idempotency_record import IdempotencyRecord
from observability.metrics import idempotency_requests_total

logger = logging.getLogger(__name__)

KEY_REUSED_MESSAGE = "Idempotency-Key reused with a different payload"

Handler = Callable[[], Awaitable[Dict[str, Any]]]


class IdempotencyGuard:
    """Runs handlers at most once per (actor, scope, idempotency key).

    The guard owns the transaction boundary of the operations it wraps: it
    commits on success and rolls back on failure. Handlers must only flush.
    """

    def __init__(self, db: Session, repository: IdempotencyRepository = None):
        self.db = db
        self.repository = repository or IdempotencyRepository(db)

    async def execute(
        self,
        actor_id: UUID,
        scope: str,
        idempotency_key: str,
        payload: Any,
        handler: Handler,
    ) -> Dict[str, Any]:
        """Execute handler once for this key, or replay its stored result.

        Args:
            actor_id: Caller identity
            scope: Operation scope, e.g. "upload-url" or "complete:<document id>"
            idempotency_key: Client-supplied key (1-255 characters)
            payload: Normalized request payload used for the fingerprint
            handler: Coroutine factory producing a JSON-serializable dict

        Returns:
            The handler's result, or the stored result of an earlier call

        Raises:
            ValidationError: If the key is missing, blank, or too long
            ConflictError: If the key was used with a different payload, or
                the handler's writes hit a uniqueness constraint
        """
        validate_idempotency_key(idempotency_key)
        request_hash = compute_request_hash(payload)
        metric_scope = scope.split(":", 1)[0]

        existing = self.repository.find(actor_id, scope, idempotency_key)
        if existing is not None:
            result = self._replay(existing, request_hash, metric_scope)
            idempotency_requests_total.labels(scope=metric_scope, outcome="replayed").inc()
            logger.info(
                f"Replayed idempotent response: scope={scope}, actor_id={actor_id}",
                extra={"scope": scope, "actor_id": str(actor_id)},
            )
            return result

        try:
            record = self.repository.reserve(actor_id, scope, idempotency_key, request_hash)
        except IntegrityError:
            self.db.rollback()
            return self._reconcile_race(actor_id, scope, idempotency_key, request_hash, metric_scope)

        try:
            result = await handler()
            self.repository.store_response(record, result)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"Uniqueness constraint violated while executing {scope}: {e.orig}",
                extra={"scope": scope, "actor_id": str(actor_id)},
            )
            raise ConflictError(
                "The request conflicts with a concurrent update. Retry the request."
            )
        except Exception:
            self.db.rollback()
            raise

        idempotency_requests_total.labels(scope=metric_scope, outcome="executed").inc()
        return result

    def _reconcile_race(
        self,
        actor_id: UUID,
        scope: str,
        idempotency_key: str,
        request_hash: str,
        metric_scope: str,
    ) -> Dict[str, Any]:
        """Resolve a lost reservation race against the winner's committed row."""
        raced = self.repository.find(actor_id, scope, idempotency_key)
        if raced is None:
            # Violation came from something other than the ledger key
            raise ConflictError(
                "The request conflicts with a concurrent update. Retry the request."
            )

        result = self._replay(raced, request_hash, metric_scope)
        idempotency_requests_total.labels(scope=metric_scope, outcome="race_replayed").inc()
        logger.info(
            f"Concurrent duplicate resolved from ledger: scope={scope}, actor_id={actor_id}",
            extra={"scope": scope, "actor_id": str(actor_id)},
        )
        return result

    @staticmethod
    def _replay(record: IdempotencyRecord, request_hash: str, metric_scope: str) -> Dict[str, Any]:
        if record.request_hash != request_hash:
            idempotency_requests_total.labels(scope=metric_scope, outcome="conflict").inc()
            raise ConflictError(KEY_REUSED_MESSAGE)
        return record.response_payload
