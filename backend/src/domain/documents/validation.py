"""File validation rules for document uploads

Only one document class is accepted: PDF files up to 10 MiB. The checks run
before any side effect, so a rejected request never reaches storage or the
database.
"""

from typing import Optional

from domain.errors import (
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    ValidationError,
)


ACCEPTED_MIME_TYPE = "application/pdf"
ACCEPTED_EXTENSION = ".pdf"

# 10 MiB
MAX_FILE_SIZE = 10 * 1024 * 1024


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is accepted for upload (case-insensitive)

    Example:
        >>> is_supported_mime_type('application/PDF')
        True
        >>> is_supported_mime_type('image/png')
        False
    """
    return bool(mime_type) and mime_type.strip().lower() == ACCEPTED_MIME_TYPE


def has_accepted_extension(filename: Optional[str]) -> bool:
    """Check the filename ends with .pdf (case-insensitive)"""
    return bool(filename) and filename.lower().endswith(ACCEPTED_EXTENSION)


def validate_upload_payload(
    content_type: Optional[str],
    size_bytes: Optional[int],
    filename: Optional[str],
    max_size: int = MAX_FILE_SIZE,
) -> None:
    """Validate declared MIME type, size and filename of an upload

    Checks run in a fixed order so a request with several problems always
    reports the same one: MIME type, then size, then extension.

    Args:
        content_type: Declared MIME type
        size_bytes: Declared size in bytes
        filename: Declared filename
        max_size: Maximum accepted size in bytes

    Raises:
        UnsupportedMediaTypeError: content_type is not application/pdf
        ValidationError: size is not positive, or filename lacks .pdf
        PayloadTooLargeError: size exceeds max_size
    """
    if not is_supported_mime_type(content_type):
        raise UnsupportedMediaTypeError(
            f"Only content_type {ACCEPTED_MIME_TYPE} is accepted"
        )

    if size_bytes is None or size_bytes <= 0:
        raise ValidationError("size_bytes must be greater than zero")

    if size_bytes > max_size:
        raise PayloadTooLargeError(
            f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"
        )

    if not has_accepted_extension(filename):
        raise ValidationError(f"Filename must have the {ACCEPTED_EXTENSION} extension")

