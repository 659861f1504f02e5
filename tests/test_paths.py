from __future__ import annotations

import pytest

from extraction.errors import PathSyntaxError
from extraction.paths import PathExpression, PathSegment, relative_mapping_path


def test_parse_marks_array_segments() -> None:
    expression = PathExpression.parse("data.regions[].cities[]")

    assert expression.segments == (
        PathSegment("data"),
        PathSegment("regions", is_array=True),
        PathSegment("cities", is_array=True),
    )
    assert expression.array_count == 2
    assert expression.ends_with_array
    assert expression.render() == "data.regions[].cities[]"


def test_empty_path_is_document_root() -> None:
    expression = PathExpression.parse("  ")

    assert expression.is_root
    assert expression.render() == ""
    assert not expression.ends_with_array


@pytest.mark.parametrize("raw", ["data..users", "data.[]", ".users"])
def test_empty_segment_is_rejected(raw: str) -> None:
    with pytest.raises(PathSyntaxError):
        PathExpression.parse(raw)


def test_as_array_marks_last_segment_only() -> None:
    expression = PathExpression.parse("data.users").as_array()

    assert expression.render() == "data.users[]"
    assert PathExpression().as_array().is_root


def test_relative_mapping_path_strips_root_prefix() -> None:
    assert relative_mapping_path("data.users[].address.city", "data.users[]") == "address.city"
    assert relative_mapping_path("meta.version", "data.users[]") == "meta.version"
    assert relative_mapping_path("data.users[]", "data.users[]") == "data.users[]"
