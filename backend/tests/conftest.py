"""Pytest fixtures for the document ingestion backend.

Provides reusable test fixtures for:
- A fresh SQLite database file per test (same partial unique index as production)
- An in-memory object storage gateway with switchable failures
- The ingestion service wired to both
- A TestClient with dependency overrides and signed JWTs for USER and ADMIN

Usage:
    @pytest.mark.asyncio
    async def test_upload(service, owner_id):
        result = await service.request_upload_url(owner_id, ...)
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("STORAGE_VERIFY_BUCKET_ON_STARTUP", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Dict, Generator, List, Optional
from uuid import UUID, uuid4

# Make backend/src importable as top-level modules
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from models import Base
from domain.documents.ports.object_storage_port import (
    ObjectInfo,
    ObjectStoragePort,
    StorageError,
)
from documents.service import IngestionConfig, IngestionService
from auth.jwt import create_access_token

TEST_BUCKET = "documents"
TEST_BASE_PATH = "user_documents"


class FakeObjectStorage(ObjectStoragePort):
    """In-memory storage gateway.

    Objects are plain ObjectInfo entries keyed by path. Each fail_* flag makes
    the matching operation raise StorageError.
    """

    def __init__(self):
        self.objects: Dict[str, ObjectInfo] = {}
        self.deleted_prefixes: List[str] = []
        self.fail_sign_upload = False
        self.fail_sign_download = False
        self.fail_object_info = False
        self.fail_delete = False

    def put(self, path: str, size_bytes: Optional[int], mime_type: Optional[str] = "application/pdf"):
        """Simulate a client upload to a signed URL."""
        self.objects[path] = ObjectInfo(size_bytes=size_bytes, mime_type=mime_type)

    async def create_signed_upload_url(self, storage_path, content_type, expires_in_seconds):
        if self.fail_sign_upload:
            raise StorageError("upload signing unavailable")
        return f"https://storage.test/upload/{storage_path}?expires={expires_in_seconds}"

    async def create_signed_download_url(self, storage_path, expires_in_seconds):
        if self.fail_sign_download:
            raise StorageError("download signing unavailable")
        return f"https://storage.test/download/{storage_path}?expires={expires_in_seconds}"

    async def get_object_info(self, storage_path):
        if self.fail_object_info:
            raise StorageError("metadata lookup unavailable")
        return self.objects.get(storage_path)

    async def delete_prefix(self, prefix):
        if self.fail_delete:
            raise StorageError("delete unavailable")
        self.deleted_prefixes.append(prefix)
        matching = [path for path in self.objects if path.startswith(prefix)]
        for path in matching:
            del self.objects[path]
        return len(matching)


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """SQLite database file with all tables, one per test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'documents.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def ingestion_config() -> IngestionConfig:
    return IngestionConfig(bucket=TEST_BUCKET, base_path=TEST_BASE_PATH)


@pytest.fixture
def service(db_session, fake_storage, ingestion_config) -> IngestionService:
    return IngestionService(db_session, fake_storage, ingestion_config)


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def admin_id() -> UUID:
    return uuid4()


@pytest.fixture
def user_token(owner_id) -> str:
    return create_access_token(user_id=owner_id, role="USER", email="owner@test.com")


@pytest.fixture
def admin_token(admin_id) -> str:
    return create_access_token(user_id=admin_id, role="ADMIN", email="admin@test.com")


@pytest.fixture
def client(session_factory, fake_storage, ingestion_config) -> Generator[TestClient, None, None]:
    """TestClient with database, storage and config dependencies overridden."""
    from main import app
    from database import get_db
    from documents.dependencies import get_ingestion_config, get_storage

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: fake_storage
    app.dependency_overrides[get_ingestion_config] = lambda: ingestion_config

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build request headers: bearer token, plus Idempotency-Key when given."""

    def build(token: str, idempotency_key: Optional[str] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {token}"}
        if idempotency_key is not None:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    return build
