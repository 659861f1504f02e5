"""
tests/test_update_service.py

KeyedUpdater: per-row failures for unmatched or missing keys, restricted SET
lists and fatal pre-run checks.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from app.domain.progress import RunStatus
from app.domain.run_config import UpdateRunConfig
from app.services.update_service import KeyedUpdater
from app.validators.run_validator import RunValidationError
from db.repositories.errors import TableNotFoundError
from db.repositories.row_repository import TableRowRepository

PRODUCTS_DDL = "CREATE TABLE products (sku TEXT PRIMARY KEY, price REAL, stock INTEGER, label TEXT)"


@pytest.fixture()
def updater(import_settings, run_guard) -> KeyedUpdater:
    return KeyedUpdater(settings=import_settings, guard=run_guard)


@pytest.fixture()
def products_db(make_db) -> Path:
    return make_db(
        PRODUCTS_DDL,
        *(f"INSERT INTO products VALUES ('S{i}', 1.0, 0, 'item {i}')" for i in range(8)),
    )


def _config(json_path: Path, db_path: Path, **overrides) -> UpdateRunConfig:
    values = {
        "json_path": str(json_path),
        "db_path": str(db_path),
        "json_root": "items[]",
        "table_name": "products",
        "key_column": "sku",
        "update_columns": ("price", "stock"),
        "mapping": {"id": "sku", "cost": "price", "qty": "stock", "title": "label"},
    }
    values.update(overrides)
    return UpdateRunConfig(**values)


def test_unmatched_keys_fail_without_aborting(updater, write_json, products_db, fetch_rows) -> None:
    items = [{"id": f"S{i}", "cost": 10.0 + i, "qty": i} for i in range(8)]
    items += [{"id": "NOPE-1", "cost": 1.0, "qty": 1}, {"id": "NOPE-2", "cost": 1.0, "qty": 1}]
    json_path = write_json({"items": items})

    result = updater.run(_config(json_path, products_db))

    progress = result.progress
    assert (progress.processed, progress.succeeded, progress.failed) == (10, 8, 2)
    assert progress.status is RunStatus.COMPLETED
    assert [error.index for error in result.row_errors] == [8, 9]
    rows = fetch_rows(products_db, "SELECT sku, price, stock, label FROM products ORDER BY sku")
    assert rows[3] == {"sku": "S3", "price": 13.0, "stock": 3, "label": "item 3"}


def test_only_update_columns_are_written(updater, write_json, products_db, fetch_rows) -> None:
    json_path = write_json({"items": [{"id": "S1", "cost": 5.5, "qty": 9, "title": "changed"}]})

    updater.run(_config(json_path, products_db))

    (row,) = fetch_rows(products_db, "SELECT price, stock, label FROM products WHERE sku = 'S1'")
    assert row == {"price": 5.5, "stock": 9, "label": "item 1"}


def test_missing_update_values_are_skipped_per_column(updater, write_json, products_db, fetch_rows) -> None:
    json_path = write_json({"items": [{"id": "S2", "qty": 4}]})

    result = updater.run(_config(json_path, products_db))

    assert result.progress.succeeded == 1
    (row,) = fetch_rows(products_db, "SELECT price, stock FROM products WHERE sku = 'S2'")
    assert row == {"price": 1.0, "stock": 4}


def test_missing_key_or_values_fail_the_row(updater, write_json, products_db) -> None:
    json_path = write_json({"items": [{"cost": 2.0}, {"id": "S0"}, {"id": "S1", "cost": 3.0}]})

    result = updater.run(_config(json_path, products_db))

    assert (result.progress.succeeded, result.progress.failed) == (1, 2)
    assert [(error.index, error.column) for error in result.row_errors] == [(0, "sku"), (1, None)]


def test_dry_run_does_not_touch_rows(updater, write_json, products_db, fetch_rows) -> None:
    json_path = write_json({"items": [{"id": "S0", "cost": 99.0}, {"id": "MISSING", "cost": 1.0}]})

    result = updater.run(_config(json_path, products_db, dry_run=True))

    assert (result.progress.processed, result.progress.succeeded) == (2, 2)
    assert result.columns == ("sku", "price", "stock")
    assert result.sample_row == {"sku": "S0", "price": 99.0}
    (row,) = fetch_rows(products_db, "SELECT price FROM products WHERE sku = 'S0'")
    assert row["price"] == 1.0


def test_unmapped_key_aborts_before_reading(updater, tmp_path: Path, products_db) -> None:
    snapshots = []

    with pytest.raises(RunValidationError) as exc_info:
        updater.run(
            _config(tmp_path / "never-read.json", products_db, key_column="label", mapping={"cost": "price"}),
            snapshots.append,
        )

    assert [error.code for error in exc_info.value.errors] == ["key_column_unmapped"]
    assert snapshots[-1].status is RunStatus.ABORTED


def test_unknown_update_column_aborts(updater, write_json, products_db) -> None:
    json_path = write_json({"items": [{"id": "S0"}]})

    with pytest.raises(RunValidationError) as exc_info:
        updater.run(_config(json_path, products_db, update_columns=("weight",)))

    assert exc_info.value.errors[0].code == "column_not_found"


def test_missing_table_aborts(updater, write_json, products_db) -> None:
    json_path = write_json({"items": []})

    with pytest.raises(TableNotFoundError):
        updater.run(_config(json_path, products_db, table_name="ghost"))


def test_oversized_integer_updates_as_real(updater, write_json, products_db, fetch_rows) -> None:
    json_path = write_json({"items": [{"id": "S0", "qty": 99999999999999999999}, {"id": "S1", "qty": 2}]})

    result = updater.run(_config(json_path, products_db))

    assert (result.progress.succeeded, result.progress.failed) == (2, 0)
    rows = fetch_rows(products_db, "SELECT sku, stock FROM products WHERE sku IN ('S0', 'S1') ORDER BY sku")
    assert rows == [{"sku": "S0", "stock": 1e20}, {"sku": "S1", "stock": 2}]


def test_binding_error_fails_only_that_row(updater, write_json, products_db, fetch_rows, monkeypatch) -> None:
    original_update = TableRowRepository.update_by_key

    def _update_by_key(self, *, key_column, key_value, values):
        if key_value == "S1":
            raise OverflowError("Python int too large to convert to SQLite INTEGER")
        return original_update(self, key_column=key_column, key_value=key_value, values=values)

    monkeypatch.setattr(TableRowRepository, "update_by_key", _update_by_key)
    json_path = write_json({"items": [{"id": "S0", "qty": 5}, {"id": "S1", "qty": 6}, {"id": "S2", "qty": 7}]})

    result = updater.run(_config(json_path, products_db))

    assert result.progress.status is RunStatus.COMPLETED
    assert (result.progress.succeeded, result.progress.failed) == (2, 1)
    assert result.row_errors[0].index == 1
    rows = fetch_rows(products_db, "SELECT stock FROM products WHERE sku IN ('S0', 'S1', 'S2') ORDER BY sku")
    assert rows == [{"stock": 5}, {"stock": 0}, {"stock": 7}]
