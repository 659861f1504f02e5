"""
db/session.py

SQLAlchemy engine factory for target SQLite database files.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from db.config import build_sqlite_url, load_env_files, normalize_db_path
from db.repositories.errors import DatabaseUnavailableError


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def create_db_engine(db_path: str | Path) -> Engine:
    """
    Create an engine bound to an existing SQLite file.

    The file must already exist: connecting would otherwise create an empty
    database and every table lookup would fail later with a less useful error.
    """

    load_env_files()
    resolved = normalize_db_path(db_path)
    if not resolved.is_file():
        raise DatabaseUnavailableError(f"Database file not found: {resolved}")

    return create_engine(
        build_sqlite_url(resolved),
        echo=_get_bool_env("SQL_ECHO", default=False),
    )


@contextmanager
def open_engine(db_path: str | Path) -> Iterator[Engine]:
    """
    Yield an engine for one run and dispose of its pool afterwards.
    """

    engine = create_db_engine(db_path)
    try:
        yield engine
    finally:
        engine.dispose()
