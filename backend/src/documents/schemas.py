"""Document API request/response schemas

content_type and size_bytes are deliberately left unconstrained here: the
ingestion service rejects them with 415/413 instead of a generic 422.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.documents import DocumentStatus, DocumentType


class UploadUrlRequest(BaseModel):
    """Request body for POST /documents/upload-url"""
    document_type: DocumentType = Field(..., description="Document class (eps, pension, arl, aportes)")
    filename: str = Field(..., min_length=1, max_length=255, description="Original filename, must end in .pdf")
    content_type: str = Field(..., description="Declared MIME type")
    size_bytes: int = Field(..., description="Declared size in bytes")
    sha256: Optional[str] = Field(None, max_length=64, description="Optional SHA256 hash (hex)")


class CompleteUploadRequest(BaseModel):
    """Request body for POST /documents/{id}/complete"""
    original_filename: str = Field(..., min_length=1, max_length=255, description="Original filename")
    content_type: str = Field(..., description="Declared MIME type")
    size_bytes: int = Field(..., description="Declared size in bytes")
    sha256: Optional[str] = Field(None, max_length=64, description="Optional SHA256 hash (hex)")


class ReviewRequest(BaseModel):
    """Request body for POST /admin/documents/{id}/review"""
    model_config = ConfigDict(extra='forbid')

    decision: DocumentStatus = Field(..., description="approved or rejected")
    note: Optional[str] = Field(None, max_length=2000, description="Optional reviewer note")


class UploadTarget(BaseModel):
    bucket: str
    path: str
    signed_upload_url: str
    expires_at: datetime


class UploadUrlResponse(BaseModel):
    """Response for POST /documents/upload-url"""
    id: UUID
    document_type: DocumentType
    status: DocumentStatus
    upload: UploadTarget
    signed_upload_url: str
    expires_at: datetime
    created_at: datetime


class DocumentPublic(BaseModel):
    """Public view of a document record"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_type: DocumentType
    status: DocumentStatus
    version: int
    is_current: bool
    original_filename: str
    created_at: datetime
    updated_at: datetime


class DownloadUrlResponse(BaseModel):
    """Response for GET /documents/{id}/download-url"""
    signed_url: str
    expires_at: datetime


class MessageResponse(BaseModel):
    message: str
