"""
db/repositories/row_repository.py

Row-level INSERT/UPDATE execution against one target table.

Statements are built from lightweight table clauses rather than reflected
types so values bind exactly as resolved (no type coercion on the way in).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import column, select, table
from sqlalchemy.engine import Connection
from sqlalchemy.sql.dml import Insert


class TableRowRepository:
    """
    Executes parameterized statements for one table on an open connection.

    The caller owns the connection and its transaction.
    """

    def __init__(self, connection: Connection, table_name: str, columns: Sequence[str]) -> None:
        self._connection = connection
        self._table_name = table_name
        self._table = table(table_name, *(column(name) for name in columns))

    def prepare_insert(self) -> Insert:
        """
        Build the INSERT statement once per run.
        """

        return self._table.insert()

    def insert(self, statement: Insert, values: Mapping[str, Any]) -> int:
        result = self._connection.execute(statement, dict(values))
        return result.rowcount

    def update_by_key(
        self,
        *,
        key_column: str,
        key_value: Any,
        values: Mapping[str, Any],
    ) -> int:
        """
        Update ``values`` on rows where ``key_column = key_value``.

        Returns the number of matched rows.
        """

        statement = (
            self._table.update()
            .where(self._table.c[key_column] == key_value)
            .values(dict(values))
        )
        result = self._connection.execute(statement)
        return result.rowcount

    def fetch_all(self, columns: Sequence[str] | None = None) -> list[dict[str, Any]]:
        """
        Read rows back as dictionaries, in rowid order.
        """

        selected = [self._table.c[name] for name in (columns or self._table.c.keys())]
        rows = self._connection.execute(select(*selected).order_by(column("rowid"))).mappings().all()
        return [dict(row) for row in rows]
