"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_db_path(db_path: str | Path) -> Path:
    """
    Resolve a database file path to the absolute form used as a lock key.
    """

    return Path(db_path).expanduser().resolve()


def build_sqlite_url(db_path: str | Path) -> str:
    """
    Build a SQLAlchemy URL for an existing SQLite database file.
    """

    return f"sqlite:///{normalize_db_path(db_path).as_posix()}"
