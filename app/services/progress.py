"""
app/services/progress.py

Progress reporting for runs and the channel that carries events to observers.

The pipeline is the only producer of a channel and the transport layer the
only consumer; no progress state is shared between them.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any, Generic, Protocol, TypeVar

from app.domain.progress import ProgressListener, RowError, RunProgress, RunStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProgressReporter:
    """
    Tracks one run's counters and pushes snapshots to a listener.

    Row updates are emitted every ``interval`` rows and on the last row;
    status transitions are always emitted.
    """

    def __init__(
        self,
        listener: ProgressListener,
        *,
        interval: int = 10,
        max_row_errors: int = 500,
        log_row_errors: bool = True,
        run_label: str = "run",
    ) -> None:
        self._listener = listener
        self._interval = max(1, interval)
        self._max_row_errors = max(1, max_row_errors)
        self._log_row_errors = log_row_errors
        self._run_label = run_label
        self._progress = RunProgress()
        self._row_errors: list[RowError] = []

    @property
    def progress(self) -> RunProgress:
        return self._progress

    @property
    def row_errors(self) -> list[RowError]:
        return list(self._row_errors)

    def transition(self, status: RunStatus, message: str = "", **changes: Any) -> RunProgress:
        self._progress = self._progress.with_status(status, message, **changes)
        self._publish()
        return self._progress

    def start(self, *, total: int, message: str) -> None:
        self.transition(RunStatus.RUNNING, message, total=total)

    def row_succeeded(self) -> None:
        self._progress = self._progress.record(succeeded=True)
        self._publish_row()

    def row_failed(self, index: int, message: str, *, column: str | None = None) -> None:
        self._progress = self._progress.record(succeeded=False)
        if self._log_row_errors:
            logger.warning("%s row failed index=%s column=%s reason=%s", self._run_label, index, column, message)
        if len(self._row_errors) < self._max_row_errors:
            self._row_errors.append(RowError(index=index, message=message, column=column))
        self._publish_row()

    def complete(self, message: str) -> RunProgress:
        return self.transition(RunStatus.COMPLETED, message)

    def abort(self, message: str, error: dict[str, Any] | None = None) -> RunProgress:
        return self.transition(RunStatus.ABORTED, message, error=error)

    def _publish_row(self) -> None:
        processed = self._progress.processed
        if processed % self._interval == 0 or processed == self._progress.total:
            self._progress = self._progress.with_status(
                RunStatus.RUNNING,
                f"Progress: {processed}/{self._progress.total} records processed",
            )
            self._publish()

    def _publish(self) -> None:
        try:
            self._listener(self._progress)
        except Exception:  # noqa: BLE001
            # A failing observer must not abort the run it observes.
            logger.exception("%s progress listener failed", self._run_label)


class OverflowPolicy(str, enum.Enum):
    BLOCK = "block"
    DROP_OLDEST = "drop_oldest"


class ProgressChannel(Generic[T]):
    """
    Bounded single-producer/single-consumer event channel.

    ``DROP_OLDEST`` suits cumulative snapshots (a newer snapshot supersedes
    older ones); ``BLOCK`` applies backpressure for events that must all be
    delivered. Closing the channel from either side releases the other.
    """

    def __init__(self, maxsize: int = 256, *, overflow: OverflowPolicy = OverflowPolicy.BLOCK) -> None:
        self._maxsize = max(1, maxsize)
        self._overflow = overflow
        self._items: deque[T] = deque()
        self._condition = threading.Condition()
        self._closed = False
        self._dropped = 0

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    @property
    def dropped(self) -> int:
        with self._condition:
            return self._dropped

    def publish(self, item: T) -> bool:
        """
        Enqueue ``item``. Returns False when the channel is already closed.
        """

        with self._condition:
            if self._overflow is OverflowPolicy.BLOCK:
                while len(self._items) >= self._maxsize and not self._closed:
                    self._condition.wait()
            if self._closed:
                return False
            if len(self._items) >= self._maxsize:
                self._items.popleft()
                self._dropped += 1
            self._items.append(item)
            self._condition.notify_all()
            return True

    def close(self) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def __iter__(self) -> Iterator[T]:
        try:
            while True:
                with self._condition:
                    while not self._items and not self._closed:
                        self._condition.wait()
                    if not self._items:
                        return
                    item = self._items.popleft()
                    self._condition.notify_all()
                yield item
        finally:
            self.close()


class TaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class ThreadTaskExecutor:
    """
    Runs each submitted task on its own daemon thread.
    """

    def __init__(self, *, name_prefix: str = "json-run") -> None:
        self._name_prefix = name_prefix
        self._counter = 0
        self._lock = threading.Lock()

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._counter += 1
            name = f"{self._name_prefix}-{self._counter}"
        thread = threading.Thread(target=task, args=args, kwargs=kwargs, name=name, daemon=True)
        thread.start()


class InlineTaskExecutor:
    """
    Runs tasks synchronously in the caller's thread.
    """

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        task(*args, **kwargs)


def run_in_background(
    executor: TaskExecutor,
    channel: ProgressChannel[T],
    task: Callable[[Callable[[T], Any]], Any],
    *,
    on_error: Callable[[Exception], T | None] | None = None,
) -> None:
    """
    Submit ``task(publish)`` and close ``channel`` when it ends.

    Exceptions are logged; ``on_error`` may turn one into a final event.
    """

    def _runner() -> None:
        try:
            task(channel.publish)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Background task ended with error: %s", exc)
            if on_error is not None:
                final_event = on_error(exc)
                if final_event is not None:
                    channel.publish(final_event)
        finally:
            channel.close()

    executor.submit(_runner)
