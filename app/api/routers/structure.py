"""
app/api/routers/structure.py

JSON structure discovery and record preview endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.dependencies import NDJSON_MEDIA_TYPE, get_task_executor, iter_ndjson, to_http_error
from app.config import get_import_settings
from app.schemas.structure import (
    JsonPathInfoResponse,
    SampleRequest,
    SampleResponse,
    StructureRequest,
    StructureResponse,
)
from app.services.progress import OverflowPolicy, ProgressChannel, TaskExecutor, run_in_background
from app.services.structure_service import StructureService, get_structure_service
from extraction.analyzer import AnalysisComplete, PathDiscovered, StructureEvent
from extraction.errors import JsonImportError

router = APIRouter(prefix="/json", tags=["structure"])


def _structure_event_payload(event: StructureEvent) -> dict[str, Any]:
    if isinstance(event, PathDiscovered):
        return {"event": "path", **JsonPathInfoResponse.from_info(event.info).model_dump()}
    if isinstance(event, AnalysisComplete):
        return {"event": "complete", "path_count": event.path_count}
    raise TypeError(f"Unsupported structure event: {type(event).__name__}")


def _structure_error_payload(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, JsonImportError):
        return {"event": "aborted", "error": exc.to_dict()}
    return {"event": "aborted", "error": {"code": "internal_error", "message": str(exc)}}


@router.post("/structure", response_model=StructureResponse)
def analyze_structure(
    payload: StructureRequest,
    structure_service: StructureService = Depends(get_structure_service),
) -> StructureResponse:
    """
    Scan the whole document and return every distinct path.
    """

    try:
        paths = structure_service.analyze_structure(payload.json_path)
    except JsonImportError as exc:
        raise to_http_error(exc) from exc

    return StructureResponse(
        paths=[JsonPathInfoResponse.from_info(info) for info in paths],
        path_count=len(paths),
    )


@router.post("/structure/stream")
def stream_structure(
    payload: StructureRequest,
    structure_service: StructureService = Depends(get_structure_service),
    executor: TaskExecutor = Depends(get_task_executor),
) -> StreamingResponse:
    """
    Stream one ``path`` event per discovered path, then one ``complete`` event.
    """

    channel: ProgressChannel[dict[str, Any]] = ProgressChannel(
        get_import_settings().progress_channel_size,
        overflow=OverflowPolicy.BLOCK,
    )

    def _task(publish) -> None:
        structure_service.analyze_structure_progressive(
            payload.json_path,
            lambda event: publish(_structure_event_payload(event)),
        )

    run_in_background(executor, channel, _task, on_error=_structure_error_payload)
    return StreamingResponse(iter_ndjson(channel), media_type=NDJSON_MEDIA_TYPE)


@router.post("/sample", response_model=SampleResponse)
def get_sample(
    payload: SampleRequest,
    structure_service: StructureService = Depends(get_structure_service),
) -> SampleResponse:
    """
    Return up to ``limit`` raw records under ``json_root``, before any mapping.
    """

    try:
        records = structure_service.get_sample(payload.json_path, payload.json_root, payload.limit)
    except JsonImportError as exc:
        raise to_http_error(exc) from exc

    return SampleResponse(json_root=payload.json_root, records=records)
