"""
Object storage client for the asset bucket.

Supports Cloudflare R2 (S3-compatible) with mock mode for local development.
The proxy only reads from the bucket and the uploader only writes to it, so
the client surface is deliberately small: get, put and list.

Mock mode keeps objects in memory, enabling the proxy and the upload
pipeline to be exercised without provisioning actual object storage.
"""

import hashlib
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import BinaryIO, Iterator, MutableMapping, Optional, Protocol, Union

from ...config.settings import Settings

logger = logging.getLogger(__name__)

# Bytes pulled from the bucket per read while streaming a response body
DEFAULT_CHUNK_SIZE = 64 * 1024

Body = Union[bytes, BinaryIO]


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for R2/S3-compatible storage.

    Passed explicitly to the client instead of read from globals, so tests
    and tools can build as many differently-configured clients as they like.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    region: str = "auto"  # R2 uses 'auto' for region
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class HttpMetadata:
    """Standard HTTP headers stored alongside an object."""
    content_type: Optional[str] = None
    content_language: Optional[str] = None
    content_disposition: Optional[str] = None
    content_encoding: Optional[str] = None
    cache_control: Optional[str] = None
    cache_expiry: Optional[datetime] = None

    def write_to(self, headers: MutableMapping[str, str]) -> None:
        """Populate response headers with every field that is set."""
        if self.content_type:
            headers["content-type"] = self.content_type
        if self.content_language:
            headers["content-language"] = self.content_language
        if self.content_disposition:
            headers["content-disposition"] = self.content_disposition
        if self.content_encoding:
            headers["content-encoding"] = self.content_encoding
        if self.cache_control:
            headers["cache-control"] = self.cache_control
        if self.cache_expiry:
            headers["expires"] = format_datetime(
                self.cache_expiry.astimezone(timezone.utc), usegmt=True
            )


@dataclass(frozen=True)
class ObjectInfo:
    """Listing entry for an object: enough to detect unchanged files."""
    key: str
    size: int
    etag: str


@dataclass
class BucketObject:
    """
    An object fetched from the bucket.

    The body is a readable, closeable stream. Callers either iterate it
    with iter_body() (which closes it when exhausted) or close() it
    themselves when abandoning the read.
    """
    key: str
    size: Optional[int]
    etag: str
    body: BinaryIO
    http_metadata: HttpMetadata = field(default_factory=HttpMetadata)
    custom_metadata: dict[str, str] = field(default_factory=dict)

    @property
    def http_etag(self) -> str:
        """ETag in the quoted form used by the HTTP etag header."""
        return f'"{self.etag}"'

    def write_http_metadata(self, headers: MutableMapping[str, str]) -> None:
        self.http_metadata.write_to(headers)
        if self.size is not None:
            headers["content-length"] = str(self.size)

    def iter_body(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        try:
            while True:
                chunk = self.body.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def read(self) -> bytes:
        """Read the whole body. Only sensible for small objects and tests."""
        try:
            return self.body.read()
        finally:
            self.close()

    def close(self) -> None:
        try:
            self.body.close()
        except Exception as e:
            logger.debug(
                "Failed to close object body",
                extra={"key": self.key, "error": str(e)}
            )


class BucketClient(Protocol):
    """
    Protocol for object storage operations.

    Using a protocol means tests can provide fakes and we can swap
    storage backends without changing the proxy or the uploader.
    """

    def get(self, key: str) -> Optional[BucketObject]:
        """Fetch an object, or None if the key is absent."""
        ...

    def put(
        self,
        key: str,
        body: Body,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """Store an object, replacing any previous one under the key."""
        ...

    def list(self, prefix: str = "") -> Iterator[ObjectInfo]:
        """Iterate over objects whose key starts with prefix."""
        ...


def _strip_etag(etag: str) -> str:
    return etag.strip('"')


class R2BucketClient:
    """
    Cloudflare R2 object storage client.

    Uses boto3 because R2 is S3-compatible. Uploads go through a single
    put_object call (never multipart), so every write is a whole-object
    replacement and readers see either the old object or the new one.
    """

    def __init__(self, config: StorageConfig) -> None:
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for R2 storage. Install with: pip install boto3"
            )

        self._config = config

        # R2 requires v4 signatures and has specific endpoint patterns
        boto_kwargs = {
            "signature_version": "s3v4",
            "s3": {"addressing_style": "path"},
        }
        if config.timeout_seconds is not None:
            boto_kwargs["connect_timeout"] = config.timeout_seconds
            boto_kwargs["read_timeout"] = config.timeout_seconds

        self._s3_client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=Config(**boto_kwargs),
        )

        logger.info(
            "Initialized R2 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    def get(self, key: str) -> Optional[BucketObject]:
        from botocore.exceptions import ClientError

        try:
            response = self._s3_client.get_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("NoSuchKey", "404", "NotFound"):
                return None
            logger.error(
                "Failed to fetch object",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Fetch failed: {e}")
        except Exception as e:
            logger.error(
                "Failed to fetch object",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Fetch failed: {e}")

        expires = response.get("Expires")
        http_metadata = HttpMetadata(
            content_type=response.get("ContentType"),
            content_language=response.get("ContentLanguage"),
            content_disposition=response.get("ContentDisposition"),
            content_encoding=response.get("ContentEncoding"),
            cache_control=response.get("CacheControl"),
            cache_expiry=expires if isinstance(expires, datetime) else None,
        )

        return BucketObject(
            key=key,
            size=response.get("ContentLength"),
            etag=_strip_etag(response.get("ETag", "")),
            body=response["Body"],
            http_metadata=http_metadata,
            custom_metadata=dict(response.get("Metadata") or {}),
        )

    def put(
        self,
        key: str,
        body: Body,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        try:
            self._s3_client.put_object(
                Bucket=self._config.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata=metadata or {},
            )
        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}")

    def list(self, prefix: str = "") -> Iterator[ObjectInfo]:
        try:
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(
                Bucket=self._config.bucket_name,
                Prefix=prefix,
            ):
                for obj in page.get("Contents", []):
                    yield ObjectInfo(
                        key=obj["Key"],
                        size=obj["Size"],
                        etag=_strip_etag(obj.get("ETag", "")),
                    )
        except Exception as e:
            logger.error(
                "Failed to list objects",
                extra={"prefix": prefix, "error": str(e)}
            )
            raise StorageError(f"List failed: {e}")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _StoredObject:
    data: bytes
    etag: str
    content_type: str
    metadata: dict[str, str]


class MockBucketClient:
    """
    In-memory bucket for local development and tests.

    ETags are the MD5 of the content, matching what R2 reports for objects
    written with a single put, so change detection behaves the same here.
    """

    def __init__(self) -> None:
        self._objects: dict[str, _StoredObject] = {}
        logger.info("Initialized mock bucket client (in-memory)")

    def get(self, key: str) -> Optional[BucketObject]:
        stored = self._objects.get(key)
        if stored is None:
            return None

        return BucketObject(
            key=key,
            size=len(stored.data),
            etag=stored.etag,
            body=io.BytesIO(stored.data),
            http_metadata=HttpMetadata(content_type=stored.content_type),
            custom_metadata=dict(stored.metadata),
        )

    def put(
        self,
        key: str,
        body: Body,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        data = body if isinstance(body, bytes) else body.read()

        # Replace the whole entry in one assignment; readers never see a mix
        self._objects[key] = _StoredObject(
            data=data,
            etag=hashlib.md5(data).hexdigest(),
            content_type=content_type,
            metadata=dict(metadata or {}),
        )

        logger.debug(
            "Stored object in mock bucket",
            extra={"key": key, "size_bytes": len(data)}
        )

    def list(self, prefix: str = "") -> Iterator[ObjectInfo]:
        for key in sorted(self._objects):
            if key.startswith(prefix):
                stored = self._objects[key]
                yield ObjectInfo(key=key, size=len(stored.data), etag=stored.etag)


# ---------------------------------------------------------------------------
# Factory Functions
# ---------------------------------------------------------------------------

def create_bucket_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> BucketClient:
    """
    Create bucket client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return in-memory client

    Returns:
        BucketClient implementation (R2 or Mock)
    """
    if mock_mode:
        return MockBucketClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return R2BucketClient(config)


def storage_config_from_settings(
    settings: Settings,
    timeout_seconds: Optional[float] = None,
) -> StorageConfig:
    """Build the R2 storage configuration from application settings."""
    return StorageConfig(
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        bucket_name=settings.r2_bucket_name,
        endpoint_url=settings.r2_endpoint,
        timeout_seconds=timeout_seconds,
    )
