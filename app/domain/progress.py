"""
app/domain/progress.py

Run progress snapshots and end-of-run results.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any


class RunStatus(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.ABORTED)


@dataclass(frozen=True)
class RunProgress:
    """
    Cumulative progress snapshot.

    ``succeeded + failed == processed`` holds for every snapshot and
    ``processed`` never decreases within a run.
    """

    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    status: RunStatus = RunStatus.IDLE
    message: str = ""
    error: dict[str, Any] | None = None

    def record(self, *, succeeded: bool) -> "RunProgress":
        return replace(
            self,
            processed=self.processed + 1,
            succeeded=self.succeeded + (1 if succeeded else 0),
            failed=self.failed + (0 if succeeded else 1),
        )

    def with_status(self, status: RunStatus, message: str = "", **changes: Any) -> "RunProgress":
        return replace(self, status=status, message=message, **changes)

    @property
    def is_finished(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "total": self.total,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "status": self.status.value,
            "message": self.message,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


ProgressListener = Callable[[RunProgress], None]


def ignore_progress(progress: RunProgress) -> None:
    """Listener used when the caller does not observe progress."""


@dataclass(frozen=True)
class RowError:
    """
    One per-row failure.
    """

    index: int
    message: str
    column: str | None = None


@dataclass(frozen=True)
class RunResult:
    """
    End-of-run summary returned to the caller.
    """

    progress: RunProgress
    columns: tuple[str, ...]
    dry_run: bool
    sample_row: dict[str, Any] | None = None
    row_errors: list[RowError] = field(default_factory=list)
