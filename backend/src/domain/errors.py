"""Domain error taxonomy for the document ingestion pipeline.

Every error raised by the ingestion service or the idempotency guard derives
from DocumentPipelineError. Each class carries the HTTP status and the
machine-readable kind used by the API exception handler, so the domain layer
never raises HTTPException directly.
"""


class DocumentPipelineError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    kind: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(DocumentPipelineError):
    """Malformed or missing input (wrong extension, missing key, ...)."""

    status_code = 400
    kind = "validation_error"


class BadRequestError(DocumentPipelineError):
    """Request is well-formed but not valid for the document's current state."""

    status_code = 400
    kind = "bad_request"


class NotFoundError(DocumentPipelineError):
    """Document absent, soft-deleted, or owned by someone else."""

    status_code = 404
    kind = "not_found"


class ConflictError(DocumentPipelineError):
    """Idempotency key reuse with a different payload, or a uniqueness race."""

    status_code = 409
    kind = "conflict"


class PayloadTooLargeError(DocumentPipelineError):
    status_code = 413
    kind = "payload_too_large"


class UnsupportedMediaTypeError(DocumentPipelineError):
    status_code = 415
    kind = "unsupported_media_type"


class InternalError(DocumentPipelineError):
    """Storage gateway misconfigured, unreachable, or returned an unexpected shape."""

    status_code = 500
    kind = "internal_error"
