"""
Entry points shared by the command-line scripts.

These resolve settings into a configured migrator or uploader and run it.
Missing bucket configuration is the only batch-fatal error: it is raised
before any file is touched.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..config.settings import Settings
from ..core.assets.keys import LEGACY_UPLOADS_PREFIX, rewrite_legacy_url
from ..core.assets.models import BatchReport, FileStatus
from ..infrastructure.storage.client import (
    BucketClient,
    create_bucket_client,
    storage_config_from_settings,
)
from .migration import LegacyUploadMigrator
from .uploader import AssetUploader

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_CONFIG_ERROR = 2


class ConfigurationError(Exception):
    """Raised when required settings are missing or unusable."""

    def __init__(self, message: str, missing: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.missing = missing or []


def run_migration(
    settings: Settings,
    legacy_dir: Optional[Union[str, Path]] = None,
    target_dir: Optional[Union[str, Path]] = None,
) -> BatchReport:
    """Move legacy uploads into the uploads directory of the assets root."""
    migrator = LegacyUploadMigrator(
        legacy_dir or settings.legacy_uploads_dir,
        target_dir or settings.uploads_dir,
    )
    return migrator.run()


def legacy_url_map(settings: Settings, report: BatchReport) -> dict[str, str]:
    """
    Old '/api/uploads/<name>' URL -> public proxy URL for each moved entry.

    The application that stored the old URLs uses this to repoint them once
    the moved files have been uploaded.

    Raises:
        ConfigurationError: if R2_PUBLIC_URL is not set
    """
    if not settings.r2_public_url:
        raise ConfigurationError(
            "Missing required configuration: R2_PUBLIC_URL",
            missing=["R2_PUBLIC_URL"],
        )

    url_map = {}
    for outcome in report.outcomes:
        if outcome.status is not FileStatus.SUCCEEDED:
            continue
        old_url = LEGACY_UPLOADS_PREFIX + outcome.name
        url_map[old_url] = rewrite_legacy_url(old_url, settings.r2_public_url)
    return url_map


def build_bucket_client(settings: Settings) -> BucketClient:
    """
    Create the bucket client for uploads, failing fast on missing settings.

    Raises:
        ConfigurationError: naming every missing environment variable
    """
    missing = settings.validate_required_fields()
    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}",
            missing=missing,
        )

    if settings.r2_mock_mode:
        return create_bucket_client(mock_mode=True)

    config = storage_config_from_settings(
        settings,
        timeout_seconds=settings.upload_timeout_seconds,
    )
    return create_bucket_client(config=config)


def run_upload(
    settings: Settings,
    assets_dir: Optional[Union[str, Path]] = None,
    workers: Optional[int] = None,
    skip_unchanged: Optional[bool] = None,
    dry_run: bool = False,
    bucket: Optional[BucketClient] = None,
) -> BatchReport:
    """
    Upload the assets tree. Arguments left as None fall back to settings.

    A dry run needs no bucket and therefore no credentials.

    Raises:
        ConfigurationError: if bucket settings are missing or the assets
            directory does not exist
    """
    assets_dir = Path(assets_dir or settings.assets_dir)
    if not assets_dir.is_dir():
        raise ConfigurationError(f"Assets directory not found: {assets_dir}")

    if bucket is None and not dry_run:
        bucket = build_bucket_client(settings)

    uploader = AssetUploader(
        bucket,
        assets_dir,
        workers=settings.upload_workers if workers is None else workers,
        skip_unchanged=settings.skip_unchanged if skip_unchanged is None else skip_unchanged,
        dry_run=dry_run,
    )
    return uploader.run()


def exit_code_for(report: BatchReport) -> int:
    return EXIT_OK if report.ok else EXIT_PARTIAL_FAILURE
