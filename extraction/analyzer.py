"""
extraction/analyzer.py

Structure discovery for arbitrary JSON documents.

The analyzer walks a parsed document depth-first and reports every distinct
addressable path once. Array indices are folded: ``items[]`` stands for every
element of ``items`` and ``items[].sku`` for the ``sku`` key of any of them.
Type and sample of a path come from the first value that reached it.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Union

from extraction.loader import to_json_text
from extraction.paths import PathExpression

_ELLIPSIS = "..."


class JsonDataType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"


@dataclass(frozen=True)
class JsonPathInfo:
    """
    One discovered path with its inferred type and a sample value.
    """

    path: str
    data_type: JsonDataType
    sample: str


@dataclass(frozen=True)
class PathDiscovered:
    info: JsonPathInfo


@dataclass(frozen=True)
class AnalysisComplete:
    path_count: int


StructureEvent = Union[PathDiscovered, AnalysisComplete]
StructureListener = Callable[[StructureEvent], None]


def infer_data_type(value: Any) -> JsonDataType:
    if value is None:
        return JsonDataType.NULL
    if isinstance(value, bool):
        return JsonDataType.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonDataType.NUMBER
    if isinstance(value, str):
        return JsonDataType.STRING
    if isinstance(value, list):
        return JsonDataType.ARRAY
    return JsonDataType.OBJECT


def truncate_sample(text: str, max_chars: int) -> str:
    """
    Shorten ``text`` to at most ``max_chars`` characters, marking the cut.
    """

    if max_chars <= 0 or len(text) <= max_chars:
        return text
    keep = max(0, max_chars - len(_ELLIPSIS))
    return text[:keep] + _ELLIPSIS


class StructureAnalyzer:
    """
    Discovers the distinct paths of a JSON document.
    """

    def __init__(self, *, sample_max_chars: int = 50, max_depth: int = 0) -> None:
        self._sample_max_chars = sample_max_chars
        self._max_depth = max(0, max_depth)

    def analyze(self, document: Any) -> list[JsonPathInfo]:
        """
        Return every distinct path of ``document`` in discovery order.
        """

        return [
            event.info
            for event in self.iter_events(document)
            if isinstance(event, PathDiscovered)
        ]

    def analyze_progressive(self, document: Any, listener: StructureListener) -> int:
        """
        Push discovery events to ``listener`` as they happen.

        Returns the number of distinct paths found.
        """

        path_count = 0
        for event in self.iter_events(document):
            listener(event)
            if isinstance(event, AnalysisComplete):
                path_count = event.path_count
        return path_count

    def iter_events(self, document: Any) -> Iterator[StructureEvent]:
        """
        Yield one PathDiscovered per new path, then exactly one AnalysisComplete.
        """

        seen: set[str] = set()
        stack: list[tuple[PathExpression, Any, int]] = [(PathExpression(), document, 0)]

        while stack:
            path, value, depth = stack.pop()
            if self._max_depth and depth > self._max_depth:
                continue

            if isinstance(value, list):
                array_path = path.as_array()
                if not array_path.is_root:
                    info = self._describe_array(array_path, value)
                    if info.path not in seen:
                        seen.add(info.path)
                        yield PathDiscovered(info)
                for element in reversed(value):
                    stack.append((array_path, element, depth + 1))
                continue

            if not path.is_root:
                rendered = path.render()
                if rendered not in seen:
                    seen.add(rendered)
                    yield PathDiscovered(self._describe(rendered, value))

            if isinstance(value, dict):
                for key, child in reversed(list(value.items())):
                    stack.append((path.child(key), child, depth + 1))

        yield AnalysisComplete(path_count=len(seen))

    def _describe(self, rendered: str, value: Any) -> JsonPathInfo:
        return JsonPathInfo(
            path=rendered,
            data_type=infer_data_type(value),
            sample=truncate_sample(to_json_text(value), self._sample_max_chars),
        )

    def _describe_array(self, path: PathExpression, value: list[Any]) -> JsonPathInfo:
        if not value:
            return JsonPathInfo(path=path.render(), data_type=JsonDataType.ARRAY, sample="[]")
        return self._describe(path.render(), value[0])
