"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides the storage gateway operations for AWS S3, MinIO, and other
S3-compatible services: presigned upload/download URLs, object metadata via
HEAD, and deletion by key prefix.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from domain.documents.ports.object_storage_port import (
    ObjectInfo,
    ObjectStoragePort,
    StorageError,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

# HEAD answers meaning "no such object" rather than a gateway failure
ABSENT_OBJECT_STATUS_CODES = (400, 404)

# S3 DeleteObjects accepts at most 1000 keys per call
DELETE_BATCH_SIZE = 1000


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


def _http_status(error: ClientError) -> Optional[int]:
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage gateway using boto3.

    Example:
        config = storage_config_from_settings(get_settings())
        storage = S3StorageAdapter.from_config(config)

        url = await storage.create_signed_upload_url(
            "user_documents/42/eps_20250101120000000_v1.pdf",
            content_type="application/pdf",
            expires_in_seconds=7200,
        )
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """Build the boto3 client for one documents bucket.

        Args:
            endpoint_url: MinIO or other S3-compatible base URL; None targets AWS
            access_key: Service credential key ID
            secret_key: Service credential secret
            bucket_name: Bucket holding every document object
            region: Signing region

        Raises:
            StorageError: If boto3 rejects the client configuration
        """
        self.bucket_name = bucket_name
        self.region = region
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except (BotoCoreError, ValueError) as e:
            raise StorageError(f"Cannot create S3 client for bucket {bucket_name}: {e}")

        logger.info(
            f"S3 storage adapter ready: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'aws'}, region={region}"
        )

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3StorageAdapter":
        return cls(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

    def _presign(self, client_method: str, params: dict, expires_in_seconds: int, purpose: str) -> str:
        """Sign one request against the documents bucket.

        Raises:
            StorageError: If boto3 cannot produce the URL
        """
        try:
            url = self.s3_client.generate_presigned_url(
                client_method,
                Params={"Bucket": self.bucket_name, **params},
                ExpiresIn=expires_in_seconds,
            )
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(
                f"Signing {purpose} URL failed: key={params['Key']}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to generate signed {purpose} URL: {error_code}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Signing {purpose} URL failed: key={params['Key']}, error={e}")
            raise StorageError(f"Failed to generate signed {purpose} URL: {e}")

        logger.info(
            f"Signed {purpose} URL: key={params['Key']}, expires_in={expires_in_seconds}s"
        )
        return url

    async def create_signed_upload_url(
        self,
        storage_path: str,
        content_type: str,
        expires_in_seconds: int,
    ) -> str:
        """Presigned PUT bound to storage_path; the client must send the same Content-Type."""
        return self._presign(
            "put_object",
            {"Key": storage_path, "ContentType": content_type},
            expires_in_seconds,
            "upload",
        )

    async def create_signed_download_url(
        self,
        storage_path: str,
        expires_in_seconds: int,
    ) -> str:
        """Presigned GET for storage_path."""
        return self._presign("get_object", {"Key": storage_path}, expires_in_seconds, "download")

    async def get_object_info(self, storage_path: str) -> Optional[ObjectInfo]:
        """Read size and content type of an object with a HEAD request.

        Returns:
            ObjectInfo, or None if storage answers 400/404

        Raises:
            StorageError: For any other failure (permissions, network, ...)
        """
        try:
            response = self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=storage_path,
            )
        except ClientError as e:
            status_code = _http_status(e)
            error_code = _error_code(e)
            if status_code in ABSENT_OBJECT_STATUS_CODES or error_code in ("404", "NoSuchKey", "NotFound"):
                logger.info(f"Object not found in storage: storage_path={storage_path}")
                return None
            logger.error(
                f"Object metadata lookup failed: storage_path={storage_path}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to read object metadata: {error_code}")
        except BotoCoreError as e:
            logger.error(f"Unexpected error reading object metadata: {e}")
            raise StorageError(f"Failed to read object metadata: {e}")

        size = response.get("ContentLength")
        mime_type = (response.get("ContentType") or "").strip().lower() or None

        return ObjectInfo(
            size_bytes=int(size) if size is not None else None,
            mime_type=mime_type,
        )

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object under prefix.

        Returns:
            int: Number of objects deleted (0 if nothing matched)

        Raises:
            StorageError: If listing or deletion fails
        """
        deleted = 0
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
                for start in range(0, len(keys), DELETE_BATCH_SIZE):
                    batch = keys[start:start + DELETE_BATCH_SIZE]
                    response = self.s3_client.delete_objects(
                        Bucket=self.bucket_name,
                        Delete={"Objects": batch, "Quiet": True},
                    )
                    errors = response.get("Errors", [])
                    if errors:
                        raise StorageError(
                            f"Failed to delete {len(errors)} object(s) under {prefix}: "
                            f"{errors[0].get('Code', 'Unknown')}"
                        )
                    deleted += len(batch)
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(f"S3 deletion failed: prefix={prefix}, error={error_code}")
            raise StorageError(f"Failed to delete objects: {error_code}")
        except BotoCoreError as e:
            logger.error(f"Unexpected error during deletion: {e}")
            raise StorageError(f"Failed to delete objects: {e}")

        logger.info(f"Deleted objects: prefix={prefix}, count={deleted}")
        return deleted

    async def verify_bucket_exists(self) -> bool:
        """Verify that the configured bucket exists.

        Called on application startup (when enabled) to fail fast if the
        bucket doesn't exist.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"Verified bucket exists: {self.bucket_name}")
            return True
        except ClientError as e:
            error_code = _error_code(e)
            if error_code in ("404", "NoSuchBucket"):
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update the DOCUMENTS_BUCKET environment variable."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to verify bucket: {e}")
