"""
tests/test_record_extractor.py

Root-path expansion, windowing and record-relative lookups.
"""

from __future__ import annotations

import pytest

from extraction.errors import MissingPropertyError, NotAnArrayError, PathTraversalError
from extraction.extractor import MISSING, RecordExtractor, apply_window, lookup_value

REGIONS = {
    "data": {
        "regions": [
            {"name": "north", "cities": [{"c": 1}, {"c": 2}, {"c": 3}]},
            {"name": "south", "cities": [{"c": 4}, {"c": 5}]},
            {"name": "east", "cities": []},
        ]
    }
}


@pytest.fixture()
def extractor() -> RecordExtractor:
    return RecordExtractor()


def test_nested_arrays_expand_as_cross_product_in_document_order(extractor: RecordExtractor) -> None:
    records = extractor.extract(REGIONS, "data.regions[].cities[]")

    assert [record["c"] for record in records] == [1, 2, 3, 4, 5]


def test_record_count_is_product_of_array_sizes(extractor: RecordExtractor) -> None:
    document = {"a": [{"b": [{"c": [0] * 4}] * 3}] * 2}

    assert len(extractor.extract(document, "a[].b[].c[]")) == 2 * 3 * 4


def test_scalar_root_yields_single_record(extractor: RecordExtractor) -> None:
    assert extractor.extract({"data": {"meta": {"v": 1}}}, "data.meta") == [{"v": 1}]


def test_trailing_array_emits_elements_directly(extractor: RecordExtractor) -> None:
    assert extractor.extract({"xs": [1, "two", None]}, "xs[]") == [1, "two", None]


def test_empty_root_uses_top_level_value(extractor: RecordExtractor) -> None:
    assert extractor.extract([{"a": 1}, {"a": 2}], "") == [{"a": 1}, {"a": 2}]
    assert extractor.extract({"a": 1}, "") == [{"a": 1}]
    with pytest.raises(PathTraversalError):
        extractor.extract(7, "")


def test_zero_records_is_not_an_error(extractor: RecordExtractor) -> None:
    assert extractor.extract({"xs": []}, "xs[]") == []


def test_missing_property_fails(extractor: RecordExtractor) -> None:
    with pytest.raises(MissingPropertyError) as exc_info:
        extractor.extract(REGIONS, "data.countries[]")

    assert exc_info.value.code == "missing_property"


def test_non_array_segment_fails(extractor: RecordExtractor) -> None:
    with pytest.raises(NotAnArrayError) as exc_info:
        extractor.extract(REGIONS, "data[].regions")

    assert exc_info.value.code == "not_an_array"


def test_navigating_into_scalar_fails(extractor: RecordExtractor) -> None:
    with pytest.raises(PathTraversalError):
        extractor.extract({"a": 5}, "a.b")


def test_window_selects_offset_and_limit(extractor: RecordExtractor) -> None:
    document = {"xs": [0, 1, 2, 3, 4]}

    assert extractor.extract_window(document, "xs[]", offset=2, limit=2) == [2, 3]
    assert extractor.extract_window(document, "xs[]", offset=3) == [3, 4]
    assert extractor.extract_window(document, "xs[]", offset=9, limit=2) == []


@pytest.mark.parametrize(
    ("offset", "limit"),
    [(0, 0), (0, 3), (2, 0), (4, 10), (5, 1), (1, 1)],
)
def test_window_matches_slice_semantics(offset: int, limit: int) -> None:
    records = list(range(5))
    expected = records[offset : offset + limit] if limit > 0 else records[offset:]

    assert apply_window(records, offset=offset, limit=limit) == expected


def test_deep_nesting_does_not_recurse(extractor: RecordExtractor) -> None:
    document: dict = {"leaf": True}
    path_parts = []
    for _ in range(3000):
        document = {"n": document}
        path_parts.append("n")

    assert extractor.extract(document, ".".join(path_parts)) == [{"leaf": True}]


def test_lookup_value_handles_missing_and_nested_paths() -> None:
    record = {"name": "A", "address": {"city": "Paris"}, "tags": ["x"], "items": [{"p": 1}, {"q": 2}, {"p": 3}]}

    assert lookup_value(record, "address.city") == "Paris"
    assert lookup_value(record, "address.zip") is MISSING
    assert lookup_value(record, "name.first") is MISSING
    assert lookup_value(record, "tags[]") == ["x"]
    assert lookup_value(record, "items[].p") == [1, 3]
    assert lookup_value(record, "") is record
