"""
app/services/structure_service.py

Document-level operations used to build a mapping: path discovery and raw
record previews.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path
from typing import Any

from app.config import AnalysisSettings, get_analysis_settings
from extraction.analyzer import (
    AnalysisComplete,
    JsonPathInfo,
    StructureAnalyzer,
    StructureEvent,
    StructureListener,
)
from extraction.extractor import RecordExtractor
from extraction.loader import read_json_document

logger = logging.getLogger(__name__)


class StructureService:
    def __init__(
        self,
        *,
        settings: AnalysisSettings | None = None,
        extractor: RecordExtractor | None = None,
    ) -> None:
        self._settings = settings or get_analysis_settings()
        self._analyzer = StructureAnalyzer(
            sample_max_chars=self._settings.sample_max_chars,
            max_depth=self._settings.max_depth,
        )
        self._extractor = extractor or RecordExtractor()

    def analyze_structure(self, json_path: str | Path) -> list[JsonPathInfo]:
        """
        One-shot scan of every distinct path of the document.
        """

        document = read_json_document(json_path)
        paths = self._analyzer.analyze(document)
        logger.info("Analyzed structure file=%s paths=%d", json_path, len(paths))
        return paths

    def analyze_structure_progressive(self, json_path: str | Path, listener: StructureListener) -> int:
        """
        Push one event per discovered path, then exactly one completion event.

        The document is parsed before the first event, so malformed JSON fails
        without emitting anything.
        """

        document = read_json_document(json_path)
        path_count = self._analyzer.analyze_progressive(document, listener)
        logger.info("Progressive analysis finished file=%s paths=%d", json_path, path_count)
        return path_count

    def iter_structure_events(self, json_path: str | Path) -> Iterator[StructureEvent]:
        document = read_json_document(json_path)
        for event in self._analyzer.iter_events(document):
            if isinstance(event, AnalysisComplete):
                logger.info("Progressive analysis finished file=%s paths=%d", json_path, event.path_count)
            yield event

    def get_sample(self, json_path: str | Path, json_root: str, limit: int | None = None) -> list[Any]:
        """
        Return up to ``limit`` raw records under ``json_root``, before mapping.
        """

        effective_limit = limit if limit and limit > 0 else self._settings.default_sample_limit
        document = read_json_document(json_path)
        return self._extractor.extract_window(document, json_root, limit=effective_limit)


@lru_cache(maxsize=1)
def get_structure_service() -> StructureService:
    return StructureService()
