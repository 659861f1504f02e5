"""
app/validators/run_validator.py

Pre-run validation of import and update configurations against a live table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from app.domain.run_config import DYNAMIC_SENTINEL, ImportRunConfig, UpdateRunConfig
from db.repositories.types import TableInfo
from extraction.errors import JsonImportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunErrorDetail:
    """
    Structured validation error detail.
    """

    code: str
    message: str
    column: str | None = None
    context: dict[str, Any] | None = None


class RunValidationError(JsonImportError):
    """
    Raised when a run cannot start safely.
    """

    code = "run_validation_failed"

    def __init__(self, *, message: str, errors: Sequence[RunErrorDetail]) -> None:
        super().__init__(message)
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "column": error.column,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


@dataclass(frozen=True)
class ImportPlan:
    """
    Validated write plan: the columns every INSERT binds, in table order.
    """

    columns: tuple[str, ...]
    ignored_columns: tuple[str, ...]


class RunValidator:
    """
    Validates run configurations and derives the resolved column set.
    """

    def validate_import(
        self,
        *,
        config: ImportRunConfig,
        table: TableInfo,
        backfill_columns: Sequence[str] = (),
    ) -> ImportPlan:
        """
        Check NOT NULL coverage and template syntax, return the write plan.
        """

        errors: list[RunErrorDetail] = []

        for column_name, template in config.rules.dynamic.items():
            if DYNAMIC_SENTINEL in str(template):
                errors.append(
                    RunErrorDetail(
                        code="dynamic_sentinel_in_template",
                        message=f"{DYNAMIC_SENTINEL} is only allowed in default and forced rules.",
                        column=column_name,
                        context={"template": template},
                    )
                )

        requested = dict.fromkeys(
            [*config.mapping.values(), *config.rules.columns, *backfill_columns]
        )
        table_columns = set(table.column_names)
        columns = tuple(name for name in table.column_names if name in requested)
        ignored = tuple(name for name in requested if name not in table_columns)
        if ignored:
            logger.warning(
                "Ignoring columns absent from table=%s columns=%s",
                table.name,
                ", ".join(ignored),
            )

        for column in table.columns:
            if not column.not_null or column.primary_key or column.default_value is not None:
                continue
            if column.name not in columns:
                errors.append(
                    RunErrorDetail(
                        code="not_null_uncovered",
                        message="NOT NULL column has no default, mapping or rule.",
                        column=column.name,
                        context={"data_type": column.data_type},
                    )
                )

        if not columns:
            errors.append(
                RunErrorDetail(
                    code="no_columns",
                    message="No mapped or rule column exists in the target table.",
                    context={"table_columns": list(table.column_names)},
                )
            )

        self._raise_if_errors(errors, table_name=table.name)
        return ImportPlan(columns=columns, ignored_columns=ignored)

    def validate_update(self, *, config: UpdateRunConfig, table: TableInfo | None = None) -> None:
        """
        Check key and update columns. Without ``table`` only mapping-level
        checks run.
        """

        errors: list[RunErrorDetail] = []
        mapped_columns = set(config.mapping.values())

        if config.key_column not in mapped_columns:
            errors.append(
                RunErrorDetail(
                    code="key_column_unmapped",
                    message="Key column is not a target of the mapping.",
                    column=config.key_column,
                    context={"mapped_columns": sorted(mapped_columns)},
                )
            )
        if not config.update_columns:
            errors.append(
                RunErrorDetail(
                    code="update_columns_empty",
                    message="At least one column to update is required.",
                )
            )

        if table is not None:
            for column_name in (config.key_column, *config.update_columns):
                if not table.has_column(column_name):
                    errors.append(
                        RunErrorDetail(
                            code="column_not_found",
                            message="Column does not exist in the target table.",
                            column=column_name,
                        )
                    )

        self._raise_if_errors(errors, table_name=config.table_name)

    @staticmethod
    def _raise_if_errors(errors: list[RunErrorDetail], *, table_name: str) -> None:
        if not errors:
            return
        columns = ", ".join(sorted({error.column for error in errors if error.column})) or "none"
        raise RunValidationError(
            message=f"Run validation failed for table '{table_name}'. Affected columns: {columns}.",
            errors=errors,
        )

