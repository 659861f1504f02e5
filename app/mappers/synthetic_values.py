"""
app/mappers/synthetic_values.py

Type-directed synthetic values for columns no rule supplies.

A column is classified once into a ColumnKind from its declared type (and,
for text columns, its name); generation is one function per kind.
"""

from __future__ import annotations

import enum
import random
import time
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

INTEGER_BASE = 1000


class ColumnKind(str, enum.Enum):
    INTEGER = "integer"
    TEXT = "text"
    IDENTIFIER = "identifier"
    EMAIL = "email"
    NAME = "name"
    FLOAT = "float"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    OTHER = "other"


def classify_column(data_type: str, column_name: str) -> ColumnKind:
    """
    Derive the logical kind of a column from its declared type and name.
    """

    declared = data_type.lower()
    name = column_name.lower()

    if "int" in declared:
        return ColumnKind.INTEGER
    if "text" in declared or "char" in declared or "clob" in declared:
        if "id" in name or "code" in name:
            return ColumnKind.IDENTIFIER
        if "email" in name:
            return ColumnKind.EMAIL
        if "name" in name:
            return ColumnKind.NAME
        return ColumnKind.TEXT
    if "real" in declared or "floa" in declared or "doub" in declared:
        return ColumnKind.FLOAT
    if "date" in declared or "time" in declared:
        return ColumnKind.DATETIME
    if "bool" in declared:
        return ColumnKind.BOOLEAN
    return ColumnKind.OTHER


class SyntheticValueGenerator:
    """
    Generates placeholder values per ColumnKind.

    Integer, email, name, date, boolean and fallback values depend only on
    ``(kind, column, index)``; identifiers embed the clock and free text and
    floats draw from ``rng``.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] | None = None,
        today: Callable[[], date] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._clock = clock or time.time
        self._today = today or date.today
        self._rng = rng or random.Random()
        self._generators: dict[ColumnKind, Callable[[str, int], Any]] = {
            ColumnKind.INTEGER: self._integer,
            ColumnKind.TEXT: self._text,
            ColumnKind.IDENTIFIER: self._identifier,
            ColumnKind.EMAIL: self._email,
            ColumnKind.NAME: self._name,
            ColumnKind.FLOAT: self._float,
            ColumnKind.DATETIME: self._datetime,
            ColumnKind.BOOLEAN: self._boolean,
            ColumnKind.OTHER: self._other,
        }

    def generate(self, kind: ColumnKind, column_name: str, index: int) -> Any:
        return self._generators[kind](column_name, index)

    def now_millis(self) -> int:
        return int(self._clock() * 1000)

    @staticmethod
    def _integer(column_name: str, index: int) -> int:
        return INTEGER_BASE + index

    def _text(self, column_name: str, index: int) -> str:
        return f"{column_name}_{self._rng.getrandbits(32):08x}_{index}"

    def _identifier(self, column_name: str, index: int) -> str:
        return f"{column_name[:3].upper()}_{self.now_millis()}_{index}"

    @staticmethod
    def _email(column_name: str, index: int) -> str:
        return f"user{index}@example.com"

    @staticmethod
    def _name(column_name: str, index: int) -> str:
        return f"Name_{index}"

    def _float(self, column_name: str, index: int) -> float:
        # Truncate rather than round so the value stays below 100.
        return int(self._rng.random() * 10000) / 100

    def _datetime(self, column_name: str, index: int) -> str:
        return (self._today() + timedelta(days=index)).isoformat()

    @staticmethod
    def _boolean(column_name: str, index: int) -> bool:
        return index % 2 == 0

    @staticmethod
    def _other(column_name: str, index: int) -> str:
        return f"{column_name}_{index}"
