"""
Object storage integration for the asset bucket.

Supports R2 (Cloudflare) via its S3-compatible API.
Includes an in-memory mock for local development without credentials.
"""

from .client import (
    BucketClient,
    BucketObject,
    HttpMetadata,
    MockBucketClient,
    ObjectInfo,
    R2BucketClient,
    StorageConfig,
    StorageError,
    create_bucket_client,
    storage_config_from_settings,
)

__all__ = [
    "BucketClient",
    "BucketObject",
    "HttpMetadata",
    "MockBucketClient",
    "ObjectInfo",
    "R2BucketClient",
    "StorageConfig",
    "StorageError",
    "create_bucket_client",
    "storage_config_from_settings",
]
