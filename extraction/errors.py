"""
extraction/errors.py

Exceptions raised while loading JSON documents and resolving paths.
"""

from __future__ import annotations

from typing import Any


class JsonImportError(Exception):
    """Base exception for every fatal import/update failure."""

    code = "import_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class JsonDocumentError(JsonImportError):
    """Raised when a JSON file cannot be read or parsed."""

    code = "malformed_json"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class PathSyntaxError(JsonImportError):
    """Raised when a root or mapping path cannot be parsed."""

    code = "invalid_path"


class PathTraversalError(JsonImportError):
    """Raised when a root path cannot be followed through a document."""

    code = "path_traversal"


class MissingPropertyError(PathTraversalError):
    """Raised when a root path segment names a key that is absent."""

    code = "missing_property"

    def __init__(self, segment: str) -> None:
        super().__init__(f"Property '{segment}' does not exist in the JSON data.")
        self.segment = segment


class NotAnArrayError(PathTraversalError):
    """Raised when an array segment resolves to something other than a list."""

    code = "not_an_array"

    def __init__(self, segment: str) -> None:
        super().__init__(f"Property '{segment}' is not an array.")
        self.segment = segment
