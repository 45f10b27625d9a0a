#!/usr/bin/env python3
"""
Upload the local assets tree to the R2 bucket.

Every file under the assets root (default r2-assets) is stored under its
path relative to that root, with '/' separators, which is exactly the path
the asset proxy serves it at. Existing objects are overwritten.

Usage:
    python scripts/upload_assets.py [--assets-dir DIR] [--workers N]
                                    [--skip-unchanged] [--dry-run]

Requires (unless --dry-run or R2_MOCK_MODE=true):
    - R2_ACCOUNT_ID (or R2_ENDPOINT_URL), R2_ACCESS_KEY_ID,
      R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME in the environment or .env

Exit status: 0 on success, 1 if any file failed, 2 on configuration error.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path so the package imports without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from asset_gateway.config.settings import get_settings
from asset_gateway.pipeline.runner import (
    EXIT_CONFIG_ERROR,
    ConfigurationError,
    exit_code_for,
    run_upload,
)

logger = logging.getLogger("upload_assets")


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description='Upload local assets to R2')
    parser.add_argument('--assets-dir', default=settings.assets_dir,
                        help='Root of the tree to upload')
    parser.add_argument('--workers', type=int, default=settings.upload_workers,
                        help='Concurrent uploads (1 = sequential)')
    parser.add_argument('--skip-unchanged', action='store_true', default=settings.skip_unchanged,
                        help='Skip files whose content already matches the bucket')
    parser.add_argument('--dry-run', action='store_true',
                        help='List what would be uploaded without touching the bucket')
    args = parser.parse_args()

    if args.workers < 1:
        parser.error('--workers must be at least 1')

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )

    logger.info("Starting asset upload to R2...")

    try:
        report = run_upload(
            settings,
            assets_dir=args.assets_dir,
            workers=args.workers,
            skip_unchanged=args.skip_unchanged,
            dry_run=args.dry_run,
        )
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(EXIT_CONFIG_ERROR)

    logger.info("=== Asset upload completed ===")
    logger.info(f"Uploaded: {report.succeeded}")
    logger.info(f"Skipped: {report.skipped}")
    logger.info(f"Failed: {report.failed}")
    for key in report.failed_names:
        logger.error(f"  failed: {key}")

    sys.exit(exit_code_for(report))


if __name__ == '__main__':
    main()
