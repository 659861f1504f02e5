"""
extraction/extractor.py

Root-path expansion of JSON documents into flat record sequences.

Array segments are expanded as a cross product: ``data.regions[].cities[]``
yields one record per city across all regions, in document order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from extraction.errors import MissingPropertyError, NotAnArrayError, PathTraversalError
from extraction.paths import ARRAY_MARKER, SEPARATOR, PathExpression

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for a record-relative path that does not resolve."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class RecordExtractor:
    """
    Expands a root path over a parsed document.
    """

    def extract(self, document: Any, root: PathExpression | str) -> list[Any]:
        """
        Return every record reachable through ``root``.

        Zero records is a valid result; callers decide whether it is fatal.
        """

        expression = PathExpression.parse(root) if isinstance(root, str) else root
        if expression.is_root:
            return self._extract_document_root(document)

        segments = expression.segments
        last_index = len(segments) - 1
        records: list[Any] = []
        stack: list[tuple[Any, int]] = [(document, 0)]

        while stack:
            value, index = stack.pop()
            if index > last_index:
                records.append(value)
                continue

            segment = segments[index]
            if not isinstance(value, dict):
                raise PathTraversalError(
                    f"Cannot navigate into '{segment.name}': expected an object, "
                    f"found {type(value).__name__}."
                )
            if segment.name not in value:
                raise MissingPropertyError(segment.name)

            child = value[segment.name]
            if not segment.is_array:
                stack.append((child, index + 1))
                continue
            if not isinstance(child, list):
                raise NotAnArrayError(segment.name)

            # Pushed in reverse so elements pop in document order.
            for element in reversed(child):
                stack.append((element, index + 1))

        logger.debug("Expanded root=%s records=%d", expression, len(records))
        return records

    def extract_window(
        self,
        document: Any,
        root: PathExpression | str,
        *,
        offset: int = 0,
        limit: int = 0,
    ) -> list[Any]:
        return apply_window(self.extract(document, root), offset=offset, limit=limit)

    @staticmethod
    def _extract_document_root(document: Any) -> list[Any]:
        if isinstance(document, list):
            return list(document)
        if isinstance(document, dict):
            return [document]
        raise PathTraversalError("The JSON root is neither an object nor an array.")


def apply_window(records: Sequence[Any], *, offset: int = 0, limit: int = 0) -> list[Any]:
    """
    Slice semantics: ``records[offset:offset + limit]``, or ``records[offset:]``
    when ``limit`` is not positive.
    """

    start = max(0, offset)
    if limit > 0:
        return list(records[start : start + limit])
    return list(records[start:])


def lookup_value(record: Any, path: str) -> Any:
    """
    Resolve a record-relative dot path.

    Missing keys and non-object intermediates return MISSING. A trailing
    ``[]`` segment returns the array; an intermediate one projects the rest of
    the path over each element.
    """

    if not path:
        return record
    return _lookup_parts(record, path.split(SEPARATOR))


def _lookup_parts(value: Any, parts: list[str]) -> Any:
    current = value
    for position, part in enumerate(parts):
        is_array = part.endswith(ARRAY_MARKER)
        key = part[: -len(ARRAY_MARKER)] if is_array else part
        if not isinstance(current, dict) or key not in current:
            return MISSING
        current = current[key]
        if not is_array:
            continue
        if not isinstance(current, list):
            return MISSING
        remaining = parts[position + 1 :]
        if not remaining:
            return current
        projected = [_lookup_parts(element, remaining) for element in current]
        return [item for item in projected if item is not MISSING]
    return current
