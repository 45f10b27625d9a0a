"""
Batch tools that move assets towards the bucket.

- migration: legacy uploads directory -> local assets root
- uploader: local assets root -> bucket
- runner: settings-driven entry points used by the scripts
"""

from .migration import LegacyUploadMigrator, migrate_legacy_uploads
from .runner import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    EXIT_PARTIAL_FAILURE,
    ConfigurationError,
    build_bucket_client,
    exit_code_for,
    legacy_url_map,
    run_migration,
    run_upload,
)
from .uploader import AssetFile, AssetUploader, file_md5, iter_asset_files

__all__ = [
    "LegacyUploadMigrator",
    "migrate_legacy_uploads",
    "EXIT_CONFIG_ERROR",
    "EXIT_OK",
    "EXIT_PARTIAL_FAILURE",
    "ConfigurationError",
    "build_bucket_client",
    "exit_code_for",
    "legacy_url_map",
    "run_migration",
    "run_upload",
    "AssetFile",
    "AssetUploader",
    "file_md5",
    "iter_asset_files",
]
