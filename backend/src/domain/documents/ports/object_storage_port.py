"""Object Storage Port - Domain interface for the storage gateway.

This port defines the contract the ingestion service needs from object storage:
signed URL issuance, object metadata lookup and prefix deletion. Bytes never
flow through the application; clients upload and download directly with the
signed URLs.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class ObjectInfo:
    """Metadata reported by storage for an existing object.

    Attributes:
        size_bytes: Object size in bytes (None if storage did not report it)
        mime_type: Lower-cased content type (None if storage did not report it)
    """
    size_bytes: Optional[int]
    mime_type: Optional[str]


class StorageError(Exception):
    """Raised by storage adapters when the gateway call fails."""
    pass


class ObjectStoragePort(ABC):
    """Port interface for the object storage gateway.

    Implementations must translate transport and service failures into
    StorageError, except where a method documents a different outcome.

    Example Usage:
        storage = S3StorageAdapter(...)

        url = await storage.create_signed_upload_url(
            "user_documents/42/eps_20250101120000000_v1.pdf",
            content_type="application/pdf",
            expires_in_seconds=7200,
        )
        info = await storage.get_object_info("user_documents/42/eps_...pdf")
    """

    @abstractmethod
    async def create_signed_upload_url(
        self,
        storage_path: str,
        content_type: str,
        expires_in_seconds: int,
    ) -> str:
        """Issue a time-boxed URL allowing a client to upload one object.

        Raises:
            StorageError: If the URL cannot be issued
        """

    @abstractmethod
    async def create_signed_download_url(
        self,
        storage_path: str,
        expires_in_seconds: int,
    ) -> str:
        """Issue a time-boxed URL allowing a client to download one object.

        Raises:
            StorageError: If the URL cannot be issued
        """

    @abstractmethod
    async def get_object_info(self, storage_path: str) -> Optional[ObjectInfo]:
        """Look up size and MIME type of an object.

        Returns:
            ObjectInfo, or None when storage answers 400/404 (object absent)

        Raises:
            StorageError: For any other failure
        """

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object whose key starts with prefix.

        Deleting a prefix with no objects succeeds and returns 0.

        Returns:
            int: Number of objects removed

        Raises:
            StorageError: If deletion fails
        """
