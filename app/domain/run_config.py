"""
app/domain/run_config.py

Immutable run configurations built once before a pipeline starts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

DYNAMIC_SENTINEL = "{{DYNAMIC}}"
INDEX_TOKEN = "{{INDEX}}"
UUID_TOKEN = "{{UUID}}"
TIMESTAMP_TOKEN = "{{TIMESTAMP}}"


def _freeze(values: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class ValueRules:
    """
    Default, forced and templated column rules.

    ``defaults`` apply only when a column resolved to null; ``forced`` and
    ``dynamic`` always overwrite.
    """

    defaults: Mapping[str, Any] = field(default_factory=dict)
    forced: Mapping[str, Any] = field(default_factory=dict)
    dynamic: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "defaults", _freeze(self.defaults))
        object.__setattr__(self, "forced", _freeze(self.forced))
        object.__setattr__(self, "dynamic", _freeze(self.dynamic))

    @property
    def columns(self) -> tuple[str, ...]:
        ordered: dict[str, None] = {}
        for rule_set in (self.defaults, self.forced, self.dynamic):
            ordered.update(dict.fromkeys(rule_set))
        return tuple(ordered)


@dataclass(frozen=True)
class ImportRunConfig:
    """
    Parameters of one import run.
    """

    json_path: str
    db_path: str
    json_root: str
    table_name: str
    mapping: Mapping[str, str]
    rules: ValueRules = field(default_factory=ValueRules)
    limit: int = 0
    offset: int = 0
    dry_run: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "mapping", _freeze(self.mapping))
        object.__setattr__(self, "limit", max(0, int(self.limit or 0)))
        object.__setattr__(self, "offset", max(0, int(self.offset or 0)))


@dataclass(frozen=True)
class UpdateRunConfig:
    """
    Parameters of one keyed update run.
    """

    json_path: str
    db_path: str
    json_root: str
    table_name: str
    key_column: str
    update_columns: tuple[str, ...]
    mapping: Mapping[str, str]
    dry_run: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "mapping", _freeze(self.mapping))
        object.__setattr__(self, "update_columns", tuple(dict.fromkeys(self.update_columns)))
