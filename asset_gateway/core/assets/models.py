"""
Outcome models shared by the migration tool and the uploader.

Every file in a batch goes PENDING -> SUCCEEDED | FAILED (or SKIPPED when
the uploader finds the bucket already up to date). FAILED is terminal for
the run; there are no retries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class FileStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"  # Unchanged since the last upload


@dataclass
class FileOutcome:
    """
    Result of processing one file.

    name is the asset key for uploads and the entry name for migrations.
    """
    name: str
    status: FileStatus = FileStatus.PENDING
    error: Optional[str] = None

    def succeed(self) -> None:
        self._finish(FileStatus.SUCCEEDED)

    def skip(self) -> None:
        self._finish(FileStatus.SKIPPED)

    def fail(self, error: BaseException) -> None:
        self._finish(FileStatus.FAILED)
        self.error = f"{type(error).__name__}: {error}"

    def _finish(self, status: FileStatus) -> None:
        if self.status is not FileStatus.PENDING:
            raise ValueError(f"{self.name} already finished as {self.status.value}")
        self.status = status


@dataclass
class BatchReport:
    """All outcomes of one tool run, in processing order."""
    outcomes: list[FileOutcome] = field(default_factory=list)
    nothing_to_do: bool = False

    def _count(self, status: FileStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(FileStatus.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self._count(FileStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(FileStatus.FAILED)

    @property
    def failed_names(self) -> list[str]:
        return [o.name for o in self.outcomes if o.status is FileStatus.FAILED]

    @property
    def ok(self) -> bool:
        """True when no file failed. Pipelines use this for the exit status."""
        return self.failed == 0
