"""
app/schemas/catalog.py

Response schemas for target database metadata endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from db.repositories.types import TableInfo


class TableListResponse(BaseModel):
    tables: list[str] = Field(default_factory=list)


class ColumnInfoResponse(BaseModel):
    name: str
    data_type: str
    not_null: bool
    primary_key: bool
    default_value: str | None = None
    unique: bool = False


class TableInfoResponse(BaseModel):
    """
    API response model for one table: columns in declaration order and every
    UNIQUE constraint as a member list.
    """

    name: str
    columns: list[ColumnInfoResponse] = Field(default_factory=list)
    unique_constraints: list[list[str]] = Field(default_factory=list)

    @classmethod
    def from_table(cls, table: TableInfo) -> "TableInfoResponse":
        unique_columns = table.unique_columns
        return cls(
            name=table.name,
            columns=[
                ColumnInfoResponse(
                    name=column.name,
                    data_type=column.data_type,
                    not_null=column.not_null,
                    primary_key=column.primary_key,
                    default_value=column.default_value,
                    unique=column.name in unique_columns,
                )
                for column in table.columns
            ],
            unique_constraints=[list(constraint) for constraint in table.unique_constraints],
        )
