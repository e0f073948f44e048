"""Unit tests for S3 Storage Adapter using moto

Covers the storage gateway operations against a mocked S3: presigned upload and
download URLs, object metadata via HEAD, deletion by prefix, and bucket
verification. Error paths moto cannot produce are driven with botocore's Stubber.
"""

import pytest
from urllib.parse import urlparse

import boto3
from botocore.stub import Stubber
from moto import mock_aws

from domain.documents.ports.object_storage_port import ObjectInfo, StorageError
from infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from infrastructure.storage.storage_config import StorageConfig, validate_storage_config


# Test constants
TEST_BUCKET = "test-documents-bucket"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"
OWNER_PREFIX = "user_documents/2b9f6a43-7d0e-4c55-9a51-3f0b8d2c9e11"


@pytest.fixture
def s3_client():
    """Mock S3 with the documents bucket created"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def storage_adapter(s3_client):
    """S3StorageAdapter pointed at the mocked bucket"""
    return S3StorageAdapter(
        endpoint_url=None,  # AWS S3 (moto mocks this)
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=TEST_BUCKET,
        region=TEST_REGION,
    )


@pytest.fixture
def missing_bucket_adapter(s3_client):
    return S3StorageAdapter(
        endpoint_url=None,
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name="bucket-that-does-not-exist",
        region=TEST_REGION,
    )


def _put(client, key, body=b"%PDF-1.4\n", content_type="application/pdf"):
    client.put_object(Bucket=TEST_BUCKET, Key=key, Body=body, ContentType=content_type)


class TestAdapterInitialization:

    def test_from_config(self, s3_client):
        config = StorageConfig(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name=TEST_BUCKET,
            region=TEST_REGION,
        )

        adapter = S3StorageAdapter.from_config(config)

        assert adapter.bucket_name == TEST_BUCKET
        assert adapter.region == TEST_REGION


class TestSignedUrls:

    @pytest.mark.asyncio
    async def test_signed_upload_url_targets_key(self, storage_adapter):
        key = f"{OWNER_PREFIX}/eps_20250101120000000_v1.pdf"

        url = await storage_adapter.create_signed_upload_url(key, "application/pdf", 7200)

        parsed = urlparse(url)
        assert parsed.path.endswith(key)
        assert TEST_BUCKET in url
        assert "Expires=" in url or "X-Amz-Expires=7200" in url

    @pytest.mark.asyncio
    async def test_signed_download_url_targets_key(self, storage_adapter):
        key = f"{OWNER_PREFIX}/eps_20250101120000000_v1.pdf"

        url = await storage_adapter.create_signed_download_url(key, 120)

        assert urlparse(url).path.endswith(key)
        assert TEST_BUCKET in url


class TestObjectInfo:

    @pytest.mark.asyncio
    async def test_returns_size_and_content_type(self, storage_adapter, s3_client):
        key = f"{OWNER_PREFIX}/eps_20250101120000000_v1.pdf"
        _put(s3_client, key, body=b"x" * 1000)

        info = await storage_adapter.get_object_info(key)

        assert info == ObjectInfo(size_bytes=1000, mime_type="application/pdf")

    @pytest.mark.asyncio
    async def test_content_type_is_normalized(self, storage_adapter, s3_client):
        key = f"{OWNER_PREFIX}/arl_20250101120000000_v1.pdf"
        _put(s3_client, key, content_type="Application/PDF")

        info = await storage_adapter.get_object_info(key)

        assert info.mime_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_missing_object_returns_none(self, storage_adapter):
        assert await storage_adapter.get_object_info(f"{OWNER_PREFIX}/missing.pdf") is None

    @pytest.mark.asyncio
    async def test_access_denied_raises_storage_error(self, storage_adapter):
        with Stubber(storage_adapter.s3_client) as stubber:
            stubber.add_client_error(
                "head_object",
                service_error_code="AccessDenied",
                http_status_code=403,
            )

            with pytest.raises(StorageError, match="AccessDenied"):
                await storage_adapter.get_object_info(f"{OWNER_PREFIX}/secret.pdf")

    @pytest.mark.asyncio
    async def test_bad_request_counts_as_absent(self, storage_adapter):
        with Stubber(storage_adapter.s3_client) as stubber:
            stubber.add_client_error(
                "head_object",
                service_error_code="400",
                http_status_code=400,
            )

            assert await storage_adapter.get_object_info(f"{OWNER_PREFIX}/odd.pdf") is None


class TestDeletePrefix:

    @pytest.mark.asyncio
    async def test_deletes_only_matching_objects(self, storage_adapter, s3_client):
        target = f"{OWNER_PREFIX}/eps_20250101120000000_v1.pdf"
        sibling = f"{OWNER_PREFIX}/eps_20250101130000000_v2.pdf"
        _put(s3_client, target)
        _put(s3_client, sibling)

        deleted = await storage_adapter.delete_prefix(target)

        assert deleted == 1
        remaining = s3_client.list_objects_v2(Bucket=TEST_BUCKET).get("Contents", [])
        assert [obj["Key"] for obj in remaining] == [sibling]

    @pytest.mark.asyncio
    async def test_deletes_whole_owner_prefix(self, storage_adapter, s3_client):
        for version in range(1, 4):
            _put(s3_client, f"{OWNER_PREFIX}/pension_20250101120000000_v{version}.pdf")
        _put(s3_client, "user_documents/someone-else/pension_20250101120000000_v1.pdf")

        deleted = await storage_adapter.delete_prefix(f"{OWNER_PREFIX}/")

        assert deleted == 3
        remaining = s3_client.list_objects_v2(Bucket=TEST_BUCKET)["Contents"]
        assert len(remaining) == 1

    @pytest.mark.asyncio
    async def test_nothing_to_delete_returns_zero(self, storage_adapter):
        assert await storage_adapter.delete_prefix(f"{OWNER_PREFIX}/nothing.pdf") == 0

    @pytest.mark.asyncio
    async def test_missing_bucket_raises_storage_error(self, missing_bucket_adapter):
        with pytest.raises(StorageError):
            await missing_bucket_adapter.delete_prefix(OWNER_PREFIX)


class TestVerifyBucket:

    @pytest.mark.asyncio
    async def test_existing_bucket(self, storage_adapter):
        assert await storage_adapter.verify_bucket_exists() is True

    @pytest.mark.asyncio
    async def test_missing_bucket(self, missing_bucket_adapter):
        with pytest.raises(StorageError, match="does not exist"):
            await missing_bucket_adapter.verify_bucket_exists()


class TestStorageConfigValidation:

    def _config(self, **overrides):
        values = {
            "endpoint_url": "http://localhost:9000",
            "access_key": "minioadmin",
            "secret_key": "minioadmin",
            "bucket_name": "documents",
            "region": "us-east-1",
        }
        values.update(overrides)
        return StorageConfig(**values)

    def test_minio_config_is_valid(self):
        validate_storage_config(self._config())

    def test_aws_config_is_valid(self):
        validate_storage_config(self._config(endpoint_url=None))

    @pytest.mark.parametrize("field", ["access_key", "secret_key", "bucket_name"])
    def test_required_fields(self, field):
        with pytest.raises(ValueError, match=field):
            validate_storage_config(self._config(**{field: ""}))

    def test_endpoint_must_be_http(self):
        with pytest.raises(ValueError, match="endpoint_url"):
            validate_storage_config(self._config(endpoint_url="localhost:9000"))

    def test_aws_requires_region(self):
        with pytest.raises(ValueError, match="region"):
            validate_storage_config(self._config(endpoint_url=None, region=""))
