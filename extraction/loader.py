"""
extraction/loader.py

Read JSON documents from disk into memory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from extraction.errors import JsonDocumentError

logger = logging.getLogger(__name__)


def _reject_constant(token: str) -> Any:
    raise JsonDocumentError(f"non-standard constant {token!r}")


def read_json_document(json_path: str | Path) -> Any:
    """
    Load and parse one JSON file.

    Raises JsonDocumentError with code ``file_unreadable`` for I/O and
    encoding failures and ``malformed_json`` for parse failures.
    """

    path = Path(json_path)
    try:
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise JsonDocumentError(
            f"Unable to read JSON file {path}: {exc}",
            code="file_unreadable",
        ) from exc

    try:
        document = json.loads(content, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise JsonDocumentError(f"Invalid JSON in {path}: {exc}") from exc
    except JsonDocumentError as exc:
        raise JsonDocumentError(f"Invalid JSON in {path}: {exc.message}") from exc

    logger.debug("Loaded JSON document path=%s bytes=%d", path, len(content))
    return document


def to_json_text(value: Any) -> str:
    """
    Canonical compact JSON text for objects and arrays written as scalars.
    """

    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
