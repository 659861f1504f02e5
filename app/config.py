"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for import and update runs.
    """

    progress_interval: int = 10
    max_row_errors: int = 500
    log_row_errors: bool = True
    progress_channel_size: int = 256


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Runtime settings for structure analysis and record previews.
    """

    sample_max_chars: int = 50
    max_depth: int = 0
    default_sample_limit: int = 10


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        progress_interval=max(1, _get_int_env("JSON_IMPORT_PROGRESS_INTERVAL", 10)),
        max_row_errors=max(1, _get_int_env("JSON_IMPORT_MAX_ROW_ERRORS", 500)),
        log_row_errors=_get_bool_env("JSON_IMPORT_LOG_ROW_ERRORS", True),
        progress_channel_size=max(2, _get_int_env("PROGRESS_CHANNEL_SIZE", 256)),
    )


@lru_cache(maxsize=1)
def get_analysis_settings() -> AnalysisSettings:
    """
    Return cached structure analysis settings from environment variables.
    """

    return AnalysisSettings(
        sample_max_chars=max(4, _get_int_env("JSON_ANALYSIS_SAMPLE_MAX_CHARS", 50)),
        max_depth=max(0, _get_int_env("JSON_ANALYSIS_MAX_DEPTH", 0)),
        default_sample_limit=max(1, _get_int_env("JSON_SAMPLE_DEFAULT_LIMIT", 10)),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings(level=_get_str_env("LOG_LEVEL", "INFO").upper())
