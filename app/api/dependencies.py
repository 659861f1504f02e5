"""
app/api/dependencies.py

Shared FastAPI dependencies and error translation for the JSON import API.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from functools import lru_cache
from typing import Any

from fastapi import HTTPException, status

from app.services.progress import ProgressChannel, ThreadTaskExecutor, TaskExecutor
from extraction.errors import JsonImportError

NDJSON_MEDIA_TYPE = "application/x-ndjson"

_NOT_FOUND_CODES = {"file_unreadable", "database_unreachable"}


@lru_cache(maxsize=1)
def get_task_executor() -> TaskExecutor:
    """
    Executor running streamed pipelines off the request thread.
    """

    return ThreadTaskExecutor(name_prefix="json-api")


def to_http_error(exc: JsonImportError) -> HTTPException:
    """
    Map a fatal import error onto an HTTP error with a structured detail.
    """

    if exc.code in _NOT_FOUND_CODES:
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=status_code, detail=exc.to_dict())


def iter_ndjson(channel: ProgressChannel[dict[str, Any]]) -> Iterator[str]:
    """
    Render channel events as newline-delimited JSON.
    """

    for event in channel:
        yield json.dumps(event, ensure_ascii=False, default=str) + "\n"
