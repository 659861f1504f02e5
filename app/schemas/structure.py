"""
app/schemas/structure.py

Request and response schemas for JSON structure endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from extraction.analyzer import JsonPathInfo


class StructureRequest(BaseModel):
    json_path: str = Field(..., min_length=1, description="Path of the JSON file to scan")


class SampleRequest(BaseModel):
    json_path: str = Field(..., min_length=1)
    json_root: str = Field(default="", description="Root path such as data.regions[].cities[]")
    limit: int | None = Field(default=None, ge=1, le=1000)


class JsonPathInfoResponse(BaseModel):
    """
    API response model for one discovered path.
    """

    path: str
    data_type: str
    sample: str

    @classmethod
    def from_info(cls, info: JsonPathInfo) -> "JsonPathInfoResponse":
        return cls(path=info.path, data_type=info.data_type.value, sample=info.sample)


class StructureResponse(BaseModel):
    paths: list[JsonPathInfoResponse] = Field(default_factory=list)
    path_count: int = Field(..., ge=0)


class SampleResponse(BaseModel):
    json_root: str
    records: list[Any] = Field(default_factory=list)
