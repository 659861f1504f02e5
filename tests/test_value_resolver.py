"""
tests/test_value_resolver.py

Rule order: mapping -> defaults -> forced -> templates -> constraint backfill.
"""

from __future__ import annotations

import itertools
import random
import uuid
from datetime import date

import pytest

from app.domain.run_config import ValueRules
from app.mappers.synthetic_values import SyntheticValueGenerator
from app.mappers.value_resolver import ValueResolver, to_cell_value, to_cells
from db.repositories.types import ColumnInfo, TableInfo

TABLE = TableInfo(
    name="users",
    columns=(
        ColumnInfo("id", "INTEGER", not_null=True, primary_key=False),
        ColumnInfo("name", "TEXT", not_null=True, primary_key=False),
        ColumnInfo("email", "TEXT", not_null=False, primary_key=False),
        ColumnInfo("code", "TEXT", not_null=True, primary_key=False),
        ColumnInfo("joined", "DATE", not_null=False, primary_key=False),
    ),
    unique_constraints=(("id",), ("code", "email")),
)


def _generator() -> SyntheticValueGenerator:
    return SyntheticValueGenerator(
        clock=lambda: 1000.0,
        today=lambda: date(2024, 5, 1),
        rng=random.Random(3),
    )


def _resolver(mapping: dict[str, str], rules: ValueRules | None = None, **kwargs) -> ValueResolver:
    return ValueResolver(mapping=mapping, rules=rules, table=TABLE, generator=_generator(), **kwargs)


def test_defaults_fill_only_null_or_missing_values() -> None:
    resolver = ValueResolver(mapping={"name": "name"}, rules=ValueRules(defaults={"name": "unknown"}))
    records = [{"name": "A"}, {"name": None}, {}]

    rows = [resolver.resolve(record, index) for index, record in enumerate(records)]

    assert rows == [{"name": "A"}, {"name": "unknown"}, {"name": "unknown"}]


def test_forced_overrides_mapping_and_defaults() -> None:
    resolver = ValueResolver(
        mapping={"city": "city"},
        rules=ValueRules(defaults={"city": "Lyon"}, forced={"city": "Paris"}),
    )

    assert resolver.resolve({"city": "Nice"}, 0)["city"] == "Paris"
    assert resolver.resolve({}, 1)["city"] == "Paris"


def test_templates_override_forced_values() -> None:
    uuids = iter([uuid.UUID(int=1), uuid.UUID(int=2)])
    resolver = ValueResolver(
        mapping={},
        rules=ValueRules(forced={"ref": "fixed"}, dynamic={"ref": "R-{{INDEX}}-{{UUID}}-{{UUID}}"}),
        generator=_generator(),
        uuid_factory=lambda: next(uuids),
    )

    value = resolver.resolve({}, 7)["ref"]

    assert value == f"R-7-{uuid.UUID(int=1)}-{uuid.UUID(int=2)}"


def test_timestamp_template_uses_epoch_millis() -> None:
    resolver = ValueResolver(
        mapping={},
        rules=ValueRules(dynamic={"stamp": "{{TIMESTAMP}}"}),
        generator=_generator(),
    )

    assert resolver.resolve({}, 0)["stamp"] == "1000000"


def test_dynamic_sentinel_generates_typed_value() -> None:
    resolver = _resolver(
        {"n": "name"},
        ValueRules(defaults={"name": "{{DYNAMIC}}"}, forced={"joined": "{{DYNAMIC}}"}),
    )

    row = resolver.resolve({"n": None}, 3)

    assert row["name"] == "Name_3"
    assert row["joined"] == "2024-05-04"


def test_backfill_covers_not_null_unique_columns_only() -> None:
    resolver = _resolver({"n": "name"})

    rows = [resolver.resolve({"n": f"user{i}"}, i) for i in range(4)]

    assert resolver.backfill_columns == ("id", "code")
    assert [row["id"] for row in rows] == [1000, 1001, 1002, 1003]
    assert len({row["id"] for row in rows}) == 4
    assert rows[2]["code"] == "COD_1000000_2"
    assert "email" not in rows[0]


def test_backfill_keeps_mapped_values() -> None:
    resolver = _resolver({"id": "id", "n": "name", "c": "code"})

    row = resolver.resolve({"id": 42, "n": "A", "c": "X1"}, 0)

    assert row == {"id": 42, "name": "A", "code": "X1"}


def test_missing_intermediate_key_maps_to_none() -> None:
    resolver = ValueResolver(mapping={"address.city": "city", "name": "name"})

    assert resolver.resolve({"name": "A"}, 0) == {"city": None, "name": "A"}


def test_map_record_can_omit_missing_paths() -> None:
    resolver = ValueResolver(mapping={"address.city": "city", "name": "name"})

    assert resolver.map_record({"name": "A"}, include_missing=False) == {"name": "A"}


def test_last_mapping_entry_wins_for_same_column() -> None:
    resolver = ValueResolver(mapping={"first": "label", "second": "label"})

    assert resolver.resolve({"first": "a", "second": "b"}, 0) == {"label": "b"}


def test_unknown_rule_column_falls_back_to_other_kind() -> None:
    resolver = _resolver({}, ValueRules(forced={"extra": "{{DYNAMIC}}"}))

    assert resolver.resolve({}, 5)["extra"] == "extra_5"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ({"a": [1, 2]}, '{"a":[1,2]}'),
        (["é", 1], '["é",1]'),
        (True, 1),
        (False, 0),
        (1.5, 1.5),
        (None, None),
        (2**63 - 1, 2**63 - 1),
        (-(2**63), -(2**63)),
        (2**63, float(2**63)),
        (-(2**63) - 1, float(-(2**63) - 1)),
        (10**400, "1" + "0" * 400),
    ],
)
def test_cell_values(value, expected) -> None:
    assert to_cell_value(value) == expected


def test_to_cells_projects_columns_in_order() -> None:
    assert to_cells({"b": 2, "c": [1]}, ("a", "b", "c")) == {"a": None, "b": 2, "c": "[1]"}


def test_uuid_template_is_fresh_per_row() -> None:
    counter = itertools.count(1)
    resolver = ValueResolver(
        mapping={},
        rules=ValueRules(dynamic={"token": "{{UUID}}"}),
        uuid_factory=lambda: uuid.UUID(int=next(counter)),
    )

    values = {resolver.resolve({}, index)["token"] for index in range(5)}

    assert len(values) == 5
