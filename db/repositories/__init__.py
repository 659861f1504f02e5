"""
Repository layer package exports.
"""

from db.repositories.errors import DatabaseUnavailableError, TableNotFoundError
from db.repositories.row_repository import TableRowRepository
from db.repositories.schema_repository import SchemaIntrospector
from db.repositories.types import ColumnInfo, TableInfo

__all__ = [
    "ColumnInfo",
    "DatabaseUnavailableError",
    "SchemaIntrospector",
    "TableInfo",
    "TableNotFoundError",
    "TableRowRepository",
]
