"""
app/mappers/value_resolver.py

Per-record column value resolution.

A row is produced by running a fixed pipeline of pure ``row -> row`` stages:

    1. mapping      record path lookups (missing paths resolve to None)
    2. defaults     only where the value is still None or absent
    3. forced       unconditional overwrite
    4. templates    unconditional overwrite from ``{{INDEX}}`` / ``{{UUID}}`` /
                    ``{{TIMESTAMP}}`` templates
    5. backfill     synthetic values for NOT NULL + UNIQUE columns still empty

``{{DYNAMIC}}`` in a default or forced rule asks for a synthetic value typed
after the target column.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from typing import Any

from app.domain.run_config import (
    DYNAMIC_SENTINEL,
    INDEX_TOKEN,
    TIMESTAMP_TOKEN,
    UUID_TOKEN,
    ValueRules,
)
from app.mappers.synthetic_values import ColumnKind, SyntheticValueGenerator, classify_column
from db.repositories.types import TableInfo
from extraction.extractor import MISSING, lookup_value
from extraction.loader import to_json_text

Row = dict[str, Any]
RowStage = Callable[[Row, Any, int], Row]

SQLITE_INTEGER_MIN = -(2**63)
SQLITE_INTEGER_MAX = 2**63 - 1


def to_cell_value(value: Any) -> Any:
    """
    Convert a resolved JSON value into a scalar bindable as a table cell.

    Integers outside SQLite's 64-bit range bind as REAL, or as their decimal
    text when they do not fit a float either.
    """

    if isinstance(value, (dict, list)):
        return to_json_text(value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int) and not SQLITE_INTEGER_MIN <= value <= SQLITE_INTEGER_MAX:
        try:
            return float(value)
        except OverflowError:
            return str(value)
    return value


def to_cells(row: Mapping[str, Any], columns: tuple[str, ...]) -> Row:
    """
    Project a resolved row onto ``columns``; absent columns bind as NULL.
    """

    return {name: to_cell_value(row.get(name)) for name in columns}


class ValueResolver:
    """
    Resolves one extracted record into a column -> value row.
    """

    def __init__(
        self,
        *,
        mapping: Mapping[str, str],
        rules: ValueRules | None = None,
        table: TableInfo | None = None,
        generator: SyntheticValueGenerator | None = None,
        uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self._mapping = dict(mapping)
        self._rules = rules or ValueRules()
        self._generator = generator or SyntheticValueGenerator()
        self._uuid_factory = uuid_factory
        self._kinds: dict[str, ColumnKind] = {}
        self._backfill_columns: tuple[str, ...] = ()
        if table is not None:
            self._kinds = {
                column.name: classify_column(column.data_type, column.name)
                for column in table.columns
            }
            unique_columns = table.unique_columns
            self._backfill_columns = tuple(
                column.name
                for column in table.columns
                if column.not_null and column.name in unique_columns
            )
        self._stages: tuple[RowStage, ...] = (
            self._apply_mapping,
            self._apply_defaults,
            self._apply_forced,
            self._apply_templates,
            self._apply_backfill,
        )

    @property
    def backfill_columns(self) -> tuple[str, ...]:
        return self._backfill_columns

    def resolve(self, record: Any, index: int) -> Row:
        """
        Run every stage for the record at ordinal ``index``.
        """

        row: Row = {}
        for stage in self._stages:
            row = stage(row, record, index)
        return row

    def map_record(self, record: Any, *, include_missing: bool = True) -> Row:
        """
        Apply only the mapping stage.

        With ``include_missing=False`` columns whose path does not resolve are
        left out instead of set to None.
        """

        row: Row = {}
        for json_path, column_name in self._mapping.items():
            value = lookup_value(record, json_path)
            if value is MISSING:
                if not include_missing:
                    row.pop(column_name, None)
                    continue
                value = None
            row[column_name] = value
        return row

    def synthetic_value(self, column_name: str, index: int) -> Any:
        kind = self._kinds.get(column_name, ColumnKind.OTHER)
        return self._generator.generate(kind, column_name, index)

    def render_template(self, template: str, index: int) -> str:
        """
        Substitute every placeholder occurrence; each ``{{UUID}}`` is distinct.
        """

        value = template.replace(INDEX_TOKEN, str(index))
        if UUID_TOKEN in value:
            parts = value.split(UUID_TOKEN)
            value = parts[0] + "".join(str(self._uuid_factory()) + part for part in parts[1:])
        if TIMESTAMP_TOKEN in value:
            value = value.replace(TIMESTAMP_TOKEN, str(self._generator.now_millis()))
        return value

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _apply_mapping(self, row: Row, record: Any, index: int) -> Row:
        return {**row, **self.map_record(record)}

    def _apply_defaults(self, row: Row, record: Any, index: int) -> Row:
        resolved = dict(row)
        for column_name, rule in self._rules.defaults.items():
            if resolved.get(column_name) is None:
                resolved[column_name] = self._rule_value(column_name, rule, index)
        return resolved

    def _apply_forced(self, row: Row, record: Any, index: int) -> Row:
        resolved = dict(row)
        for column_name, rule in self._rules.forced.items():
            resolved[column_name] = self._rule_value(column_name, rule, index)
        return resolved

    def _apply_templates(self, row: Row, record: Any, index: int) -> Row:
        resolved = dict(row)
        for column_name, template in self._rules.dynamic.items():
            resolved[column_name] = self.render_template(str(template), index)
        return resolved

    def _apply_backfill(self, row: Row, record: Any, index: int) -> Row:
        resolved = dict(row)
        for column_name in self._backfill_columns:
            if resolved.get(column_name) is None:
                resolved[column_name] = self.synthetic_value(column_name, index)
        return resolved

    def _rule_value(self, column_name: str, rule: Any, index: int) -> Any:
        if rule == DYNAMIC_SENTINEL:
            return self.synthetic_value(column_name, index)
        return rule
