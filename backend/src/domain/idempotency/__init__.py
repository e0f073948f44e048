"""Idempotency domain module - request fingerprinting and key validation"""

from .fingerprint import (
    compute_request_hash,
    normalize_payload,
    validate_idempotency_key,
    MAX_IDEMPOTENCY_KEY_LENGTH,
)

__all__ = [
    "compute_request_hash",
    "normalize_payload",
    "validate_idempotency_key",
    "MAX_IDEMPOTENCY_KEY_LENGTH",
]
