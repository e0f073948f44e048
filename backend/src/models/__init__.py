"""SQLAlchemy Models for the document ingestion pipeline"""

from .base import Base
from .document import Document
from .idempotency_record import IdempotencyRecord

__all__ = [
    "Base",
    "Document",
    "IdempotencyRecord",
]
