"""
Shared fixtures: JSON files and SQLite databases under ``tmp_path``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, text

from app.config import ImportSettings
from app.services.run_guard import RunGuard

USERS_DDL = """
CREATE TABLE users (
    id INTEGER NOT NULL UNIQUE,
    name TEXT NOT NULL,
    email TEXT,
    city TEXT,
    active BOOLEAN,
    score REAL,
    tags TEXT
)
"""


def run_sql(db_path: Path, *statements: str) -> None:
    engine = create_engine(f"sqlite:///{db_path.as_posix()}")
    try:
        with engine.begin() as connection:
            for statement in statements:
                connection.execute(text(statement))
    finally:
        engine.dispose()


def fetch_rows(db_path: Path, query: str) -> list[dict[str, Any]]:
    engine = create_engine(f"sqlite:///{db_path.as_posix()}")
    try:
        with engine.connect() as connection:
            return [dict(row) for row in connection.execute(text(query)).mappings().all()]
    finally:
        engine.dispose()


@pytest.fixture()
def write_json(tmp_path: Path) -> Callable[[Any, str], Path]:
    def _write(document: Any, name: str = "data.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def make_db(tmp_path: Path) -> Callable[..., Path]:
    def _make(*statements: str, name: str = "target.sqlite") -> Path:
        path = tmp_path / name
        run_sql(path, *statements)
        return path

    return _make


@pytest.fixture()
def users_db(make_db: Callable[..., Path]) -> Path:
    return make_db(USERS_DDL)


@pytest.fixture()
def import_settings() -> ImportSettings:
    return ImportSettings(progress_interval=1, max_row_errors=50, log_row_errors=False)


@pytest.fixture()
def run_guard() -> RunGuard:
    return RunGuard()


@pytest.fixture(name="fetch_rows")
def fetch_rows_fixture() -> Callable[[Path, str], list[dict[str, Any]]]:
    return fetch_rows


@pytest.fixture(name="run_sql")
def run_sql_fixture() -> Callable[..., None]:
    return run_sql
