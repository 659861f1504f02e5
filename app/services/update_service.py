"""
app/services/update_service.py

Keyed partial updates of existing rows from extracted JSON records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from sqlalchemy.engine import Engine

from app.domain.run_config import UpdateRunConfig
from app.mappers.value_resolver import ValueResolver, to_cell_value
from app.services.base_run import ROW_ERRORS, BaseRunService, statement_error_reason
from app.services.progress import ProgressReporter
from app.validators.run_validator import RunValidator
from db.repositories.row_repository import TableRowRepository
from db.repositories.types import TableInfo

logger = logging.getLogger(__name__)


class _RowSkipped(Exception):
    def __init__(self, message: str, column: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.column = column


@dataclass(frozen=True)
class _UpdateWork:
    resolver: ValueResolver
    columns: tuple[str, ...]


class KeyedUpdater(BaseRunService[UpdateRunConfig, _UpdateWork]):
    """
    Applies ``UPDATE ... SET <update columns> WHERE <key> = :key`` per record.

    Rows without a key value, without any update value, or matching no
    existing row are counted as failed; the run continues.
    """

    run_kind = "update"

    def __init__(self, *, validator: RunValidator | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._validator = validator or RunValidator()

    def _precheck(self, config: UpdateRunConfig) -> None:
        self._validator.validate_update(config=config)

    def _plan(self, config: UpdateRunConfig, table: TableInfo) -> _UpdateWork:
        self._validator.validate_update(config=config, table=table)
        return _UpdateWork(
            resolver=ValueResolver(mapping=config.mapping, table=table),
            columns=tuple(dict.fromkeys((config.key_column, *config.update_columns))),
        )

    def _plan_columns(self, plan: _UpdateWork) -> tuple[str, ...]:
        return plan.columns

    def _start_message(self, dry_run: bool) -> str:
        return "Simulating update (dry run)" if dry_run else "Updating rows"

    def _simulate(
        self,
        config: UpdateRunConfig,
        table: TableInfo,
        plan: _UpdateWork,
        records: list[Any],
        reporter: ProgressReporter,
    ) -> dict[str, Any] | None:
        sample_row: dict[str, Any] | None = None
        for index, record in enumerate(records):
            key_value, values = self._resolve_update(config, plan.resolver, record)
            if sample_row is None:
                sample_row = {config.key_column: key_value, **values}
            reporter.row_succeeded()
        return sample_row

    def _execute(
        self,
        engine: Engine,
        config: UpdateRunConfig,
        table: TableInfo,
        plan: _UpdateWork,
        records: list[Any],
        reporter: ProgressReporter,
    ) -> dict[str, Any] | None:
        sample_row: dict[str, Any] | None = None
        columns = plan.columns
        with engine.connect() as connection, connection.begin():
            repository = TableRowRepository(connection, table.name, columns)
            for index, record in enumerate(records):
                try:
                    key_value, values = self._checked_update(config, plan.resolver, record)
                    matched = repository.update_by_key(
                        key_column=config.key_column,
                        key_value=key_value,
                        values=values,
                    )
                except _RowSkipped as exc:
                    reporter.row_failed(index, exc.message, column=exc.column)
                    continue
                except ROW_ERRORS as exc:
                    reporter.row_failed(index, statement_error_reason(exc))
                    continue
                if matched == 0:
                    reporter.row_failed(
                        index,
                        f"No row with {config.key_column} = {key_value!r}.",
                        column=config.key_column,
                    )
                    continue
                if sample_row is None:
                    sample_row = {config.key_column: key_value, **values}
                reporter.row_succeeded()
        return sample_row

    @staticmethod
    def _resolve_update(
        config: UpdateRunConfig,
        resolver: ValueResolver,
        record: Any,
    ) -> tuple[Any, dict[str, Any]]:
        row = resolver.map_record(record, include_missing=False)
        key_value = to_cell_value(row.get(config.key_column))
        values = {
            column_name: to_cell_value(row[column_name])
            for column_name in config.update_columns
            if column_name in row
        }
        return key_value, values

    def _checked_update(
        self,
        config: UpdateRunConfig,
        resolver: ValueResolver,
        record: Any,
    ) -> tuple[Any, dict[str, Any]]:
        key_value, values = self._resolve_update(config, resolver, record)
        if key_value is None:
            raise _RowSkipped("Key value is missing.", column=config.key_column)
        if not values:
            raise _RowSkipped("No update column resolved for this record.")
        return key_value, values


@lru_cache(maxsize=1)
def get_keyed_updater() -> KeyedUpdater:
    """
    Cached updater factory.
    """

    return KeyedUpdater()
