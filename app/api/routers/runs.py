"""
app/api/routers/runs.py

Import and keyed-update run endpoints.

Both endpoints answer with an NDJSON stream: cumulative progress snapshots
(``event: progress``) ending with a ``completed`` or ``aborted`` snapshot,
followed by one ``event: result`` summary when the run completed. The run
executes on a background task and is the sole producer of the stream.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.dependencies import NDJSON_MEDIA_TYPE, get_task_executor, iter_ndjson
from app.config import get_import_settings
from app.domain.progress import RunProgress, RunResult
from app.schemas.runs import ImportRunRequest, RunResultResponse, UpdateRunRequest
from app.services.import_service import TransactionalWriter, get_transactional_writer
from app.services.progress import OverflowPolicy, ProgressChannel, TaskExecutor, run_in_background
from app.services.update_service import KeyedUpdater, get_keyed_updater
from extraction.errors import JsonImportError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/runs", tags=["runs"])

IMPORT_CHANNEL = "import-progress"
UPDATE_CHANNEL = "update-progress"

RunCallable = Callable[[Callable[[RunProgress], None]], RunResult]


def _stream_run(executor: TaskExecutor, channel_name: str, run: RunCallable) -> StreamingResponse:
    channel: ProgressChannel[dict[str, Any]] = ProgressChannel(
        get_import_settings().progress_channel_size,
        overflow=OverflowPolicy.DROP_OLDEST,
    )

    def _task(publish: Callable[[dict[str, Any]], Any]) -> None:
        result = run(
            lambda progress: publish({"channel": channel_name, "event": "progress", **progress.to_dict()})
        )
        publish(
            {
                "channel": channel_name,
                "event": "result",
                **RunResultResponse.from_result(result).model_dump(),
            }
        )

    def _on_error(exc: Exception) -> None:
        # The run already published its aborted snapshot.
        if not isinstance(exc, JsonImportError):
            logger.error("Unexpected failure in %s stream", channel_name, exc_info=exc)

    run_in_background(executor, channel, _task, on_error=_on_error)
    return StreamingResponse(iter_ndjson(channel), media_type=NDJSON_MEDIA_TYPE)


@router.post("/import")
def start_import(
    payload: ImportRunRequest,
    writer: TransactionalWriter = Depends(get_transactional_writer),
    executor: TaskExecutor = Depends(get_task_executor),
) -> StreamingResponse:
    """
    Import every record under ``json_root`` into ``table_name``.
    """

    config = payload.to_config()
    return _stream_run(executor, IMPORT_CHANNEL, lambda listener: writer.run(config, listener))


@router.post("/update")
def start_update(
    payload: UpdateRunRequest,
    updater: KeyedUpdater = Depends(get_keyed_updater),
    executor: TaskExecutor = Depends(get_task_executor),
) -> StreamingResponse:
    """
    Update ``update_columns`` of rows matched on ``key_column``.
    """

    config = payload.to_config()
    return _stream_run(executor, UPDATE_CHANNEL, lambda listener: updater.run(config, listener))
