"""FastAPI dependencies wiring the ingestion service.

Storage adapter and ingestion config are built once per process from settings.
Tests replace get_storage (and get_db) through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from domain.documents.ports.object_storage_port import ObjectStoragePort
from infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from infrastructure.storage.storage_config import storage_config_from_settings
from .service import IngestionConfig, IngestionService


@lru_cache()
def get_storage() -> ObjectStoragePort:
    """Dependency for the object storage adapter"""
    return S3StorageAdapter.from_config(storage_config_from_settings(get_settings()))


@lru_cache()
def get_ingestion_config() -> IngestionConfig:
    return IngestionConfig.from_settings(get_settings())


def get_ingestion_service(
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_storage),
    config: IngestionConfig = Depends(get_ingestion_config),
) -> IngestionService:
    """Dependency for a request-scoped ingestion service"""
    return IngestionService(db, storage, config)
