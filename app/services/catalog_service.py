"""
app/services/catalog_service.py

Read-only views of the target database: table names and table metadata.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from db.repositories.schema_repository import SchemaIntrospector
from db.repositories.types import TableInfo
from db.session import open_engine

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Metadata is read fresh on every call; nothing is cached between runs.
    """

    def get_tables(self, db_path: str | Path) -> list[str]:
        with open_engine(db_path) as engine:
            tables = SchemaIntrospector(engine).list_tables()
        logger.debug("Listed tables db=%s count=%d", db_path, len(tables))
        return tables

    def analyze_table(self, db_path: str | Path, table_name: str) -> TableInfo:
        with open_engine(db_path) as engine:
            return SchemaIntrospector(engine).describe_table(table_name)


@lru_cache(maxsize=1)
def get_catalog_service() -> CatalogService:
    return CatalogService()
