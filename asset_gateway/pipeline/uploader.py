"""
Bulk upload of the local assets tree into the bucket.

Every file under the assets root is stored under its relative path, so the
key the proxy derives from a request URL matches the key written here.
Uploads overwrite, which makes re-runs idempotent with respect to the final
bucket contents. Failures are per file: they are logged, recorded in the
report and never stop the walk.
"""

import concurrent.futures
import errno
import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from ..core.assets.content_types import content_type_for
from ..core.assets.keys import asset_key_for_file
from ..core.assets.models import BatchReport, FileOutcome
from ..infrastructure.storage.client import BucketClient, StorageError

logger = logging.getLogger(__name__)

_HASH_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class AssetFile:
    """A local file scheduled for upload."""
    path: Path
    key: str
    content_type: str


def iter_asset_files(
    root: Union[str, Path],
    on_error: Optional[Callable[[str, OSError], None]] = None,
) -> Iterator[AssetFile]:
    """
    Walk root depth-first in name order, yielding every file below it.

    Directories are descended into, never yielded. Symlinked directories are
    followed unless they lead back into a directory already being walked.
    An entry that cannot be listed or classified (unreadable directory,
    broken symlink loop, directory cycle) is reported to on_error with its
    key and skipped.
    """
    root = Path(root)

    def report(path: Path, error: OSError) -> None:
        if on_error is not None:
            on_error(asset_key_for_file(path, root), error)

    def walk(directory: Path, ancestors: frozenset) -> Iterator[AssetFile]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            if directory == root:
                raise
            report(directory, e)
            return

        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir()
            except OSError as e:
                report(path, e)
                continue

            if not is_dir:
                yield AssetFile(
                    path=path,
                    key=asset_key_for_file(path, root),
                    content_type=content_type_for(path),
                )
                continue

            real = os.path.realpath(path)
            if real in ancestors:
                report(path, OSError(errno.ELOOP, "Directory cycle", str(path)))
                continue
            yield from walk(path, ancestors | {real})

    return walk(root, frozenset([os.path.realpath(root)]))


def file_md5(path: Union[str, Path]) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class AssetUploader:
    """
    Pushes the assets tree into a bucket.

    Uploads run one at a time unless workers > 1, in which case a bounded
    thread pool is used. Upload outcomes follow walk order either way;
    entries the walk could not read are reported ahead of them.
    """

    def __init__(
        self,
        bucket: Optional[BucketClient],
        assets_dir: Union[str, Path],
        workers: int = 1,
        skip_unchanged: bool = False,
        dry_run: bool = False,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if bucket is None and not dry_run:
            raise ValueError("bucket is required unless dry_run is set")

        self._bucket = bucket
        self._assets_dir = Path(assets_dir)
        self._workers = workers
        self._skip_unchanged = skip_unchanged
        self._dry_run = dry_run

    def run(self) -> BatchReport:
        """
        Upload every file under the assets root.

        Raises FileNotFoundError if the assets root does not exist; that is
        a setup problem, not a per-file failure.
        """
        if not self._assets_dir.is_dir():
            raise FileNotFoundError(f"Assets directory not found: {self._assets_dir}")

        logger.info(
            "Starting asset upload",
            extra={
                "assets_dir": str(self._assets_dir),
                "workers": self._workers,
                "dry_run": self._dry_run,
            }
        )

        report = BatchReport()

        def record_walk_error(key: str, error: OSError) -> None:
            logger.error(
                f"Failed to read {key}",
                extra={"key": key, "error": str(error)}
            )
            outcome = FileOutcome(name=key)
            outcome.fail(error)
            report.outcomes.append(outcome)

        files = list(iter_asset_files(self._assets_dir, on_error=record_walk_error))
        remote_etags = self._remote_etags() if self._skip_unchanged else {}

        def upload(asset: AssetFile) -> FileOutcome:
            return self._upload_one(asset, remote_etags)

        if self._workers == 1:
            outcomes = [upload(asset) for asset in files]
        else:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self._workers) as executor:
                outcomes = list(executor.map(upload, files))

        report.outcomes.extend(outcomes)

        if not report.outcomes:
            report.nothing_to_do = True

        logger.info(
            "Asset upload completed",
            extra={
                "uploaded": report.succeeded,
                "skipped": report.skipped,
                "failed": report.failed,
                "failed_keys": report.failed_names,
            }
        )
        return report

    def _remote_etags(self) -> dict[str, str]:
        """Map of key to ETag for what is already in the bucket."""
        if self._bucket is None:
            return {}
        try:
            return {info.key: info.etag for info in self._bucket.list()}
        except StorageError as e:
            logger.warning(
                "Could not list bucket, uploading every file",
                extra={"error": str(e)}
            )
            return {}

    def _upload_one(self, asset: AssetFile, remote_etags: dict[str, str]) -> FileOutcome:
        outcome = FileOutcome(name=asset.key)

        if self._dry_run:
            logger.info(
                f"Would upload {asset.key} ({asset.content_type})",
                extra={"key": asset.key, "content_type": asset.content_type}
            )
            outcome.skip()
            return outcome

        try:
            if asset.key in remote_etags and file_md5(asset.path) == remote_etags[asset.key]:
                logger.info(f"Unchanged {asset.key}", extra={"key": asset.key})
                outcome.skip()
                return outcome

            logger.info(f"Uploading {asset.key}...", extra={"key": asset.key})
            with open(asset.path, "rb") as body:
                self._bucket.put(asset.key, body, asset.content_type)
        except Exception as e:
            logger.error(
                f"Failed to upload {asset.key}",
                extra={"key": asset.key, "error": str(e)}
            )
            outcome.fail(e)
            return outcome

        logger.info(f"Successfully uploaded {asset.key}", extra={"key": asset.key})
        outcome.succeed()
        return outcome
