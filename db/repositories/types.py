"""
Typed DTOs describing target table metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ColumnInfo:
    """
    One column definition as declared in the live schema.
    """

    name: str
    data_type: str
    not_null: bool
    primary_key: bool
    default_value: str | None = None


@dataclass(frozen=True)
class TableInfo:
    """
    Column definitions plus every UNIQUE constraint of a table.

    Each unique constraint lists its member columns in index order.
    """

    name: str
    columns: tuple[ColumnInfo, ...]
    unique_constraints: tuple[tuple[str, ...], ...] = field(default_factory=tuple)

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def unique_columns(self) -> frozenset[str]:
        return frozenset(name for constraint in self.unique_constraints for name in constraint)

    def get_column(self, name: str) -> ColumnInfo | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None
