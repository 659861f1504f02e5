"""
extraction package marker.
"""

from extraction.analyzer import (
    AnalysisComplete,
    JsonDataType,
    JsonPathInfo,
    PathDiscovered,
    StructureAnalyzer,
)
from extraction.errors import (
    JsonDocumentError,
    JsonImportError,
    MissingPropertyError,
    NotAnArrayError,
    PathSyntaxError,
    PathTraversalError,
)
from extraction.extractor import MISSING, RecordExtractor, apply_window, lookup_value
from extraction.loader import read_json_document
from extraction.paths import PathExpression, PathSegment, relative_mapping_path

__all__ = [
    "AnalysisComplete",
    "JsonDataType",
    "JsonDocumentError",
    "JsonImportError",
    "JsonPathInfo",
    "MISSING",
    "MissingPropertyError",
    "NotAnArrayError",
    "PathDiscovered",
    "PathExpression",
    "PathSegment",
    "PathSyntaxError",
    "PathTraversalError",
    "RecordExtractor",
    "StructureAnalyzer",
    "apply_window",
    "lookup_value",
    "read_json_document",
    "relative_mapping_path",
]
