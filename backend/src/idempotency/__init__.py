"""Idempotency ledger - at-most-once execution of mutating requests"""

from .service import IdempotencyGuard

__all__ = ["IdempotencyGuard"]
