"""Storage configuration for S3-compatible object storage.

Built once from application settings at startup. Supports both MinIO
(development) and AWS S3 (production) with the same interface.
"""

from dataclasses import dataclass
from typing import Optional

from config import Settings


@dataclass(frozen=True)
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: Storage service base URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: Service credential access key ID
        secret_key: Service credential secret
        bucket_name: Bucket holding uploaded documents
        region: AWS region (default: 'us-east-1')
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"


def storage_config_from_settings(settings: Settings) -> StorageConfig:
    """Build and validate the storage configuration from application settings.

    Raises:
        ValueError: If the configuration is invalid
    """
    config = StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.DOCUMENTS_BUCKET,
        region=settings.S3_REGION,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Args:
        config: Storage configuration to validate

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        # MinIO configuration
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    else:
        # AWS S3 configuration
        if not config.region:
            raise ValueError("AWS region is required when using S3 (S3_ENDPOINT_URL not set)")
