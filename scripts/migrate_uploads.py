#!/usr/bin/env python3
"""
Move legacy uploads into the local assets root.

Moves every entry of the legacy uploads directory (default server/uploads)
to the uploads directory inside the assets root (default r2-assets/uploads),
ready for upload_assets.py. Safe to run again: once the legacy directory is
gone or empty there is nothing to do.

With --url-map, prints one "<old url> <new url>" line per moved entry,
mapping /api/uploads/<name> to the public proxy URL (R2_PUBLIC_URL).

Usage:
    python scripts/migrate_uploads.py [--legacy-dir DIR] [--target-dir DIR] [--url-map]

Exit status: 0 if every entry moved (or nothing to do), 1 if any failed,
2 if --url-map is given without R2_PUBLIC_URL.
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
    legacy_url_map,
    run_migration,
)

logger = logging.getLogger("migrate_uploads")


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description='Move legacy uploads into the assets root')
    parser.add_argument('--legacy-dir', default=settings.legacy_uploads_dir,
                        help='Legacy uploads directory')
    parser.add_argument('--target-dir', default=settings.uploads_dir,
                        help='Destination directory')
    parser.add_argument('--url-map', action='store_true',
                        help='Print old and new URL of every moved entry')
    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )

    # Fail before any entry is moved
    if args.url_map and not settings.r2_public_url:
        logger.error("Missing required configuration: R2_PUBLIC_URL")
        sys.exit(EXIT_CONFIG_ERROR)

    report = run_migration(settings, legacy_dir=args.legacy_dir, target_dir=args.target_dir)

    if report.nothing_to_do:
        logger.info(f"No files in {args.legacy_dir} - nothing to do.")
    else:
        logger.info(f"Moved: {report.succeeded}")
        logger.info(f"Failed: {report.failed}")
        for name in report.failed_names:
            logger.error(f"  not moved: {name}")

    if args.url_map:
        try:
            url_map = legacy_url_map(settings, report)
        except ConfigurationError as e:
            logger.error(str(e))
            sys.exit(EXIT_CONFIG_ERROR)
        for old_url, new_url in url_map.items():
            print(f"{old_url} {new_url}")

    logger.info("Done.")

    sys.exit(exit_code_for(report))


if __name__ == '__main__':
    main()
