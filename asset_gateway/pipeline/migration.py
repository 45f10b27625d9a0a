"""
One-shot relocation of legacy uploads into the new local storage root.

The legacy uploads directory is flat, so only its direct entries are
moved. Each move is independent: a failure is logged and recorded, and
the remaining entries are still attempted. Running the tool again after a
successful migration finds nothing to move and does nothing.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Union

from ..core.assets.models import BatchReport, FileOutcome

logger = logging.getLogger(__name__)

MoveFn = Callable[[str, str], object]


class LegacyUploadMigrator:
    """
    Moves every entry of legacy_dir to the same name under target_dir.

    move is injectable so tests can simulate filesystem faults; it
    defaults to shutil.move, which also works across devices.
    """

    def __init__(
        self,
        legacy_dir: Union[str, Path],
        target_dir: Union[str, Path],
        move: MoveFn = shutil.move,
    ) -> None:
        self._legacy_dir = Path(legacy_dir)
        self._target_dir = Path(target_dir)
        self._move = move

    def run(self) -> BatchReport:
        report = BatchReport()

        if not self._legacy_dir.is_dir():
            logger.info(
                "No legacy uploads directory found - nothing to do",
                extra={"legacy_dir": str(self._legacy_dir)}
            )
            report.nothing_to_do = True
            return report

        self._target_dir.mkdir(parents=True, exist_ok=True)

        names = sorted(os.listdir(self._legacy_dir))
        if not names:
            logger.info(
                "Legacy uploads directory is empty - nothing to do",
                extra={"legacy_dir": str(self._legacy_dir)}
            )
            report.nothing_to_do = True
            return report

        for name in names:
            report.outcomes.append(self._migrate_entry(name))

        logger.info(
            "Migration finished",
            extra={
                "moved": report.succeeded,
                "failed": report.failed,
                "failed_files": report.failed_names,
            }
        )
        return report

    def _migrate_entry(self, name: str) -> FileOutcome:
        outcome = FileOutcome(name=name)
        src = self._legacy_dir / name
        dest = self._target_dir / name

        try:
            # shutil.move would silently replace a file or nest a directory
            if os.path.lexists(dest):
                raise FileExistsError(f"{dest} already exists")
            self._move(str(src), str(dest))
        except Exception as e:
            logger.error(
                f"Failed to move {name}",
                extra={"entry": name, "error": str(e)}
            )
            outcome.fail(e)
            return outcome

        logger.info(f"Moved {name}", extra={"entry": name})
        outcome.succeed()
        return outcome


def migrate_legacy_uploads(
    legacy_dir: Union[str, Path],
    target_dir: Union[str, Path],
) -> BatchReport:
    """Convenience wrapper: migrate with the default mover."""
    return LegacyUploadMigrator(legacy_dir, target_dir).run()
