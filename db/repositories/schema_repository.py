"""
db/repositories/schema_repository.py

Live schema introspection for target SQLite tables.
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from db.repositories.errors import TableNotFoundError
from db.repositories.types import ColumnInfo, TableInfo

logger = logging.getLogger(__name__)

_TABLE_INFO_SQL = text("SELECT * FROM pragma_table_info(:table_name) ORDER BY cid")


class SchemaIntrospector:
    """
    Reads table names, column definitions and UNIQUE constraints.

    Metadata is read on every call; nothing is cached between runs.
    """

    def __init__(self, bind: Engine | Connection) -> None:
        self._bind = bind

    def list_tables(self) -> list[str]:
        """
        Return user table names, excluding SQLite internal tables.
        """

        inspector = inspect(self._bind)
        return sorted(name for name in inspector.get_table_names() if not name.startswith("sqlite_"))

    def describe_table(self, table_name: str) -> TableInfo:
        """
        Return column metadata and unique constraints for ``table_name``.
        """

        inspector = inspect(self._bind)
        if not inspector.has_table(table_name):
            raise TableNotFoundError(table_name)

        columns = self._read_columns(table_name)
        if not columns:
            raise TableNotFoundError(table_name)

        unique_constraints: list[tuple[str, ...]] = []
        for constraint in inspector.get_unique_constraints(table_name):
            self._add_constraint(unique_constraints, constraint.get("column_names") or [])
        for index in inspector.get_indexes(table_name):
            if index.get("unique"):
                self._add_constraint(unique_constraints, index.get("column_names") or [])

        logger.info(
            "Analyzed table=%s columns=%d unique_constraints=%d",
            table_name,
            len(columns),
            len(unique_constraints),
        )
        return TableInfo(
            name=table_name,
            columns=tuple(columns),
            unique_constraints=tuple(unique_constraints),
        )

    def _read_columns(self, table_name: str) -> list[ColumnInfo]:
        if isinstance(self._bind, Connection):
            rows = self._bind.execute(_TABLE_INFO_SQL, {"table_name": table_name}).mappings().all()
        else:
            with self._bind.connect() as connection:
                rows = connection.execute(_TABLE_INFO_SQL, {"table_name": table_name}).mappings().all()

        return [
            ColumnInfo(
                name=row["name"],
                data_type=row["type"] or "",
                not_null=bool(row["notnull"]),
                primary_key=bool(row["pk"]),
                default_value=None if row["dflt_value"] is None else str(row["dflt_value"]),
            )
            for row in rows
        ]

    @staticmethod
    def _add_constraint(constraints: list[tuple[str, ...]], column_names: list[str | None]) -> None:
        # Expression indexes report None for computed members.
        members = tuple(name for name in column_names if name)
        if members and members not in constraints:
            constraints.append(members)
