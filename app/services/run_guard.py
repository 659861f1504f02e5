"""
app/services/run_guard.py

Single-run-at-a-time guard per target database file.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path

from db.config import normalize_db_path
from extraction.errors import JsonImportError

logger = logging.getLogger(__name__)


class RunInProgressError(JsonImportError):
    """Raised when another run already holds the same database file."""

    code = "run_in_progress"


class RunGuard:
    """
    Admits at most one writing run per resolved database path.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def is_held(self, db_path: str | Path) -> bool:
        return self._lock_for(str(normalize_db_path(db_path))).locked()

    @contextmanager
    def hold(self, db_path: str | Path) -> Iterator[None]:
        key = str(normalize_db_path(db_path))
        lock = self._lock_for(key)
        if not lock.acquire(blocking=False):
            raise RunInProgressError(f"Another run is already writing to {key}.")
        logger.debug("Acquired run guard db=%s", key)
        try:
            yield
        finally:
            lock.release()
            logger.debug("Released run guard db=%s", key)


@lru_cache(maxsize=1)
def get_run_guard() -> RunGuard:
    """
    Process-wide guard shared by import and update runs.
    """

    return RunGuard()
