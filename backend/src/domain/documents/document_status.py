"""DocumentStatus state machine for the document lifecycle

State flow:
    PENDING_UPLOAD → PENDING → APPROVED or REJECTED
    DELETED reachable from every state except DELETED itself
"""

from enum import Enum
from typing import Optional, Dict, List


class DocumentType(str, Enum):
    """Closed set of document types a user can upload"""
    EPS = "eps"
    PENSION = "pension"
    ARL = "arl"
    APORTES = "aportes"


class DocumentStatus(str, Enum):
    """Document lifecycle status enum

    State flow:
    PENDING_UPLOAD → PENDING → APPROVED or REJECTED
    Any non-deleted state → DELETED (soft delete, terminal)
    """
    PENDING_UPLOAD = "pending_upload"  # Upload URL issued, bytes not confirmed yet
    PENDING = "pending"                # Upload confirmed, awaiting review
    APPROVED = "approved"              # Accepted by a reviewer
    REJECTED = "rejected"              # Refused by a reviewer
    DELETED = "deleted"                # Soft-deleted (terminal)


# State transition rules
ALLOWED_TRANSITIONS: Dict[Optional[DocumentStatus], List[DocumentStatus]] = {
    None: [DocumentStatus.PENDING_UPLOAD],
    DocumentStatus.PENDING_UPLOAD: [DocumentStatus.PENDING, DocumentStatus.DELETED],
    # PENDING → PENDING allows an upload to be re-confirmed
    DocumentStatus.PENDING: [
        DocumentStatus.PENDING,
        DocumentStatus.APPROVED,
        DocumentStatus.REJECTED,
        DocumentStatus.DELETED,
    ],
    DocumentStatus.APPROVED: [DocumentStatus.DELETED],
    DocumentStatus.REJECTED: [DocumentStatus.DELETED],
    DocumentStatus.DELETED: [],  # Terminal
}


def can_transition(from_status: Optional[DocumentStatus], to_status: DocumentStatus) -> bool:
    """Validate if status transition is allowed

    Args:
        from_status: Current status (None for new documents)
        to_status: Target status

    Returns:
        True if transition is allowed, False otherwise

    Example:
        >>> can_transition(DocumentStatus.PENDING_UPLOAD, DocumentStatus.PENDING)
        True
        >>> can_transition(DocumentStatus.DELETED, DocumentStatus.PENDING)
        False
    """
    allowed = ALLOWED_TRANSITIONS.get(from_status, [])
    return to_status in allowed


def get_allowed_transitions(from_status: Optional[DocumentStatus]) -> List[DocumentStatus]:
    """Get list of allowed transitions from current status

    Example:
        >>> get_allowed_transitions(DocumentStatus.APPROVED)
        [<DocumentStatus.DELETED: 'deleted'>]
    """
    return ALLOWED_TRANSITIONS.get(from_status, [])
