"""
Repository-layer exceptions for target database access.
"""

from __future__ import annotations

from extraction.errors import JsonImportError


class DatabaseUnavailableError(JsonImportError):
    """Raised when the target database file cannot be opened."""

    code = "database_unreachable"


class TableNotFoundError(JsonImportError):
    """Raised when the target table does not exist."""

    code = "table_not_found"

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table '{table_name}' does not exist in the database.")
        self.table_name = table_name
