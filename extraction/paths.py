"""
extraction/paths.py

Parsing and rendering of dot-separated JSON paths with `[]` array markers.
"""

from __future__ import annotations

from dataclasses import dataclass

from extraction.errors import PathSyntaxError

ARRAY_MARKER = "[]"
SEPARATOR = "."


@dataclass(frozen=True)
class PathSegment:
    """
    One path step: a property name, optionally expanded as an array.
    """

    name: str
    is_array: bool = False

    def render(self) -> str:
        return f"{self.name}{ARRAY_MARKER}" if self.is_array else self.name


@dataclass(frozen=True)
class PathExpression:
    """
    Ordered sequence of path segments, e.g. ``data.regions[].cities[]``.
    """

    segments: tuple[PathSegment, ...] = ()

    @classmethod
    def parse(cls, raw: str) -> "PathExpression":
        """
        Parse a rendered path. The empty string is the document root.
        """

        text = raw.strip()
        if not text:
            return cls()

        segments: list[PathSegment] = []
        for part in text.split(SEPARATOR):
            is_array = part.endswith(ARRAY_MARKER)
            name = part[: -len(ARRAY_MARKER)] if is_array else part
            if not name:
                raise PathSyntaxError(f"Path '{raw}' contains an empty segment.")
            segments.append(PathSegment(name=name, is_array=is_array))
        return cls(segments=tuple(segments))

    def render(self) -> str:
        return SEPARATOR.join(segment.render() for segment in self.segments)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def ends_with_array(self) -> bool:
        return bool(self.segments) and self.segments[-1].is_array

    @property
    def array_count(self) -> int:
        return sum(1 for segment in self.segments if segment.is_array)

    def child(self, name: str, *, is_array: bool = False) -> "PathExpression":
        return PathExpression(segments=(*self.segments, PathSegment(name=name, is_array=is_array)))

    def as_array(self) -> "PathExpression":
        """
        Return this path with its last segment marked as an array.
        """

        if not self.segments:
            return self
        last = self.segments[-1]
        return PathExpression(segments=(*self.segments[:-1], PathSegment(name=last.name, is_array=True)))

    def relative_to(self, root: "PathExpression") -> "PathExpression | None":
        """
        Strip ``root`` from the front of this path.

        Returns None when this path does not live under ``root``.
        """

        size = len(root.segments)
        if self.segments[:size] != root.segments:
            return None
        return PathExpression(segments=self.segments[size:])


def relative_mapping_path(path: str, root: str) -> str:
    """
    Convert an analyzer path into a record-relative mapping path.

    Paths outside the root are returned unchanged.
    """

    expression = PathExpression.parse(path)
    relative = expression.relative_to(PathExpression.parse(root))
    if relative is None or relative.is_root:
        return expression.render()
    return relative.render()
