"""Documents domain module - document lifecycle, status management, upload rules"""

from .document_status import (
    DocumentStatus,
    DocumentType,
    can_transition,
    get_allowed_transitions,
    ALLOWED_TRANSITIONS,
)
from .validation import (
    is_supported_mime_type,
    has_accepted_extension,
    validate_upload_payload,
    ACCEPTED_MIME_TYPE,
    ACCEPTED_EXTENSION,
    MAX_FILE_SIZE,
)

__all__ = [
    "DocumentStatus",
    "DocumentType",
    "can_transition",
    "get_allowed_transitions",
    "ALLOWED_TRANSITIONS",
    "is_supported_mime_type",
    "has_accepted_extension",
    "validate_upload_payload",
    "ACCEPTED_MIME_TYPE",
    "ACCEPTED_EXTENSION",
    "MAX_FILE_SIZE",
]
