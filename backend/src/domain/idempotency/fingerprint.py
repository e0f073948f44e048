"""Request fingerprinting for idempotent operations.

A fingerprint is the SHA-256 hex digest of the canonical JSON form of a
request payload. Canonical means object keys sorted recursively and fields
without a value (None) dropped, so the same logical request always hashes to
the same fingerprint regardless of key order or omitted optional fields.
"""

import hashlib
import json
from enum import Enum
from typing import Any, Optional

from domain.errors import ValidationError

MAX_IDEMPOTENCY_KEY_LENGTH = 255


def normalize_payload(value: Any) -> Any:
    """Recursively sort mapping keys and drop None-valued fields.

    List order is significant and preserved.

    Example:
        >>> normalize_payload({"b": 1, "a": {"d": None, "c": 2}})
        {'a': {'c': 2}, 'b': 1}
    """
    if isinstance(value, dict):
        return {
            str(key): normalize_payload(value[key])
            for key in sorted(value, key=str)
            if value[key] is not None
        }

    if isinstance(value, (list, tuple)):
        return [normalize_payload(entry) for entry in value]

    if isinstance(value, Enum):
        return value.value

    return value


def compute_request_hash(payload: Any) -> str:
    """Compute the deterministic fingerprint of a request payload.

    Args:
        payload: JSON-like structure (dicts, lists, scalars). UUIDs, datetimes
            and other non-JSON scalars are serialized with str().

    Returns:
        str: 64-character SHA-256 hex digest
    """
    canonical = json.dumps(
        normalize_payload(payload),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def validate_idempotency_key(idempotency_key: Optional[str]) -> str:
    """Validate a client-supplied Idempotency-Key value.

    Returns:
        The key, unchanged

    Raises:
        ValidationError: key is missing, blank, or longer than 255 characters
    """
    if not idempotency_key or not idempotency_key.strip():
        raise ValidationError("The Idempotency-Key header is required")

    if len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
        raise ValidationError(
            f"Idempotency-Key cannot exceed {MAX_IDEMPOTENCY_KEY_LENGTH} characters"
        )

    return idempotency_key
