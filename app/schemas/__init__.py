"""
app/schemas package marker.
"""

from app.schemas.catalog import ColumnInfoResponse, TableInfoResponse, TableListResponse
from app.schemas.runs import (
    ImportRunRequest,
    RowErrorResponse,
    RunConfigFile,
    RunResultResponse,
    UpdateRunRequest,
    ValueRulesPayload,
)
from app.schemas.structure import (
    JsonPathInfoResponse,
    SampleRequest,
    SampleResponse,
    StructureRequest,
    StructureResponse,
)

__all__ = [
    "ColumnInfoResponse",
    "ImportRunRequest",
    "JsonPathInfoResponse",
    "RowErrorResponse",
    "RunConfigFile",
    "RunResultResponse",
    "SampleRequest",
    "SampleResponse",
    "StructureRequest",
    "StructureResponse",
    "TableInfoResponse",
    "TableListResponse",
    "UpdateRunRequest",
    "ValueRulesPayload",
]
