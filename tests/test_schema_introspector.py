"""
tests/test_schema_introspector.py

Column metadata and UNIQUE detection against real SQLite files.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from app.services.catalog_service import CatalogService
from db.repositories.errors import DatabaseUnavailableError, TableNotFoundError
from db.repositories.schema_repository import SchemaIntrospector
from db.session import open_engine

DDL = (
    """
    CREATE TABLE orders (
        id INTEGER PRIMARY KEY,
        ref TEXT NOT NULL UNIQUE,
        region TEXT NOT NULL DEFAULT 'eu',
        customer TEXT,
        placed_at DATETIME,
        UNIQUE (customer, placed_at)
    )
    """,
    "CREATE UNIQUE INDEX ux_orders_ref ON orders (ref)",
    "CREATE UNIQUE INDEX ux_orders_region_customer ON orders (region, customer)",
    "CREATE INDEX ix_orders_customer ON orders (customer)",
    "CREATE TABLE notes (body TEXT)",
)


@pytest.fixture()
def orders_db(make_db) -> Path:
    return make_db(*DDL)


def test_columns_are_read_in_declaration_order(orders_db: Path) -> None:
    with open_engine(orders_db) as engine:
        table = SchemaIntrospector(engine).describe_table("orders")

    assert table.column_names == ("id", "ref", "region", "customer", "placed_at")
    ref = table.get_column("ref")
    assert ref is not None and ref.not_null and not ref.primary_key
    region = table.get_column("region")
    assert region is not None and region.default_value == "'eu'"
    assert table.get_column("id").primary_key
    assert table.get_column("placed_at").data_type == "DATETIME"


def test_unique_constraints_include_indexes_without_duplicates(orders_db: Path) -> None:
    with open_engine(orders_db) as engine:
        table = SchemaIntrospector(engine).describe_table("orders")

    constraints = set(table.unique_constraints)
    assert ("ref",) in constraints
    assert ("customer", "placed_at") in constraints
    assert ("region", "customer") in constraints
    assert ("customer",) not in constraints
    assert len(table.unique_constraints) == len(constraints)
    assert table.unique_columns == frozenset({"ref", "customer", "placed_at", "region"})


def test_missing_table_raises(orders_db: Path) -> None:
    with open_engine(orders_db) as engine:
        with pytest.raises(TableNotFoundError) as exc_info:
            SchemaIntrospector(engine).describe_table("absent")

    assert exc_info.value.code == "table_not_found"


def test_catalog_lists_user_tables(orders_db: Path) -> None:
    assert CatalogService().get_tables(orders_db) == ["notes", "orders"]


def test_missing_database_file_is_unreachable(tmp_path: Path) -> None:
    with pytest.raises(DatabaseUnavailableError):
        CatalogService().get_tables(tmp_path / "nope.sqlite")

    assert not (tmp_path / "nope.sqlite").exists()
