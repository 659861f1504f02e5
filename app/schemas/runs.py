"""
app/schemas/runs.py

Request/response schemas for import and update runs, plus the run
configuration file consumed by the CLI.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.progress import RunResult
from app.domain.run_config import ImportRunConfig, UpdateRunConfig, ValueRules


class ValueRulesPayload(BaseModel):
    """
    Column rules: ``defaults`` fill nulls, ``forced`` and ``dynamic`` overwrite.
    """

    defaults: dict[str, Any] = Field(default_factory=dict)
    forced: dict[str, Any] = Field(default_factory=dict)
    dynamic: dict[str, str] = Field(default_factory=dict)

    def to_rules(self) -> ValueRules:
        return ValueRules(defaults=self.defaults, forced=self.forced, dynamic=self.dynamic)


class ImportRunRequest(BaseModel):
    json_path: str = Field(..., min_length=1)
    db_path: str = Field(..., min_length=1)
    json_root: str = ""
    table_name: str = Field(..., min_length=1)
    mapping: dict[str, str] = Field(default_factory=dict, description="JSON path -> column name")
    rules: ValueRulesPayload = Field(default_factory=ValueRulesPayload)
    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)
    dry_run: bool = False

    def to_config(self) -> ImportRunConfig:
        return ImportRunConfig(
            json_path=self.json_path,
            db_path=self.db_path,
            json_root=self.json_root,
            table_name=self.table_name,
            mapping=self.mapping,
            rules=self.rules.to_rules(),
            limit=self.limit,
            offset=self.offset,
            dry_run=self.dry_run,
        )


class UpdateRunRequest(BaseModel):
    json_path: str = Field(..., min_length=1)
    db_path: str = Field(..., min_length=1)
    json_root: str = ""
    table_name: str = Field(..., min_length=1)
    key_column: str = Field(..., min_length=1)
    update_columns: list[str] = Field(default_factory=list)
    mapping: dict[str, str] = Field(default_factory=dict, description="JSON path -> column name")
    dry_run: bool = False

    def to_config(self) -> UpdateRunConfig:
        return UpdateRunConfig(
            json_path=self.json_path,
            db_path=self.db_path,
            json_root=self.json_root,
            table_name=self.table_name,
            key_column=self.key_column,
            update_columns=tuple(self.update_columns),
            mapping=self.mapping,
            dry_run=self.dry_run,
        )


class RowErrorResponse(BaseModel):
    index: int = Field(..., ge=0)
    message: str
    column: str | None = None


class RunResultResponse(BaseModel):
    """
    API response model for the end-of-run summary.
    """

    total: int = Field(..., ge=0)
    processed: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    status: str
    message: str
    dry_run: bool
    columns: list[str] = Field(default_factory=list)
    sample_row: dict[str, Any] | None = None
    row_errors: list[RowErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: RunResult) -> "RunResultResponse":
        progress = result.progress
        return cls(
            total=progress.total,
            processed=progress.processed,
            succeeded=progress.succeeded,
            failed=progress.failed,
            status=progress.status.value,
            message=progress.message,
            dry_run=result.dry_run,
            columns=list(result.columns),
            sample_row=result.sample_row,
            row_errors=[
                RowErrorResponse(index=error.index, message=error.message, column=error.column)
                for error in result.row_errors
            ],
        )


class RunConfigFile(BaseModel):
    """
    Run configuration file for the CLI.

    Mapping and rules may be inline or referenced through ``mappingFile`` /
    ``defaultsFile`` (a file holding ``defaults``, ``forced`` and ``dynamic``).
    Referenced paths are relative to the configuration file.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    json_path: str = Field(..., alias="jsonPath", min_length=1)
    db_path: str = Field(..., alias="dbPath", min_length=1)
    json_root: str = Field(default="", alias="jsonRoot")
    table_name: str = Field(..., alias="table", min_length=1)
    mapping: dict[str, str] | None = None
    mapping_file: str | None = Field(default=None, alias="mappingFile")
    rules: ValueRulesPayload | None = None
    defaults_file: str | None = Field(default=None, alias="defaultsFile")
    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)
    dry_run: bool = Field(default=False, alias="dryRun")
    key_column: str | None = Field(default=None, alias="keyColumn")
    update_columns: list[str] = Field(default_factory=list, alias="updateColumns")

    @field_validator("key_column")
    @classmethod
    def _strip_key_column(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None
