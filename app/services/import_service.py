"""
app/services/import_service.py

Transactional import of extracted JSON records into an existing table.

One transaction per run and one prepared INSERT per run. A statement or
value binding error on a row marks only that row as failed; the transaction
still commits once every row has been attempted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from sqlalchemy.engine import Engine

from app.domain.run_config import ImportRunConfig
from app.mappers.synthetic_values import SyntheticValueGenerator
from app.mappers.value_resolver import ValueResolver, to_cells
from app.services.base_run import ROW_ERRORS, BaseRunService, statement_error_reason
from app.services.progress import ProgressReporter
from app.validators.run_validator import ImportPlan, RunValidator
from db.repositories.row_repository import TableRowRepository
from db.repositories.types import TableInfo
from extraction.loader import read_json_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ImportWork:
    plan: ImportPlan
    resolver: ValueResolver


class TransactionalWriter(BaseRunService[ImportRunConfig, _ImportWork]):
    """
    Resolves each record through the rule pipeline and inserts it.
    """

    run_kind = "import"

    def __init__(
        self,
        *,
        validator: RunValidator | None = None,
        generator_factory: type[SyntheticValueGenerator] = SyntheticValueGenerator,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._validator = validator or RunValidator()
        self._generator_factory = generator_factory

    def _load_records(self, config: ImportRunConfig) -> list[Any]:
        document = read_json_document(config.json_path)
        return self._extractor.extract_window(
            document,
            config.json_root,
            offset=config.offset,
            limit=config.limit,
        )

    def _plan(self, config: ImportRunConfig, table: TableInfo) -> _ImportWork:
        resolver = ValueResolver(
            mapping=config.mapping,
            rules=config.rules,
            table=table,
            generator=self._generator_factory(),
        )
        plan = self._validator.validate_import(
            config=config,
            table=table,
            backfill_columns=resolver.backfill_columns,
        )
        logger.info(
            "Import plan table=%s columns=%s ignored=%s",
            table.name,
            ", ".join(plan.columns),
            ", ".join(plan.ignored_columns) or "none",
        )
        return _ImportWork(plan=plan, resolver=resolver)

    def _plan_columns(self, plan: _ImportWork) -> tuple[str, ...]:
        return plan.plan.columns

    def _start_message(self, dry_run: bool) -> str:
        return "Simulating import (dry run)" if dry_run else "Importing rows"

    def _simulate(
        self,
        config: ImportRunConfig,
        table: TableInfo,
        plan: _ImportWork,
        records: list[Any],
        reporter: ProgressReporter,
    ) -> dict[str, Any] | None:
        sample_row: dict[str, Any] | None = None
        for index, record in enumerate(records):
            cells = to_cells(plan.resolver.resolve(record, index), plan.plan.columns)
            if sample_row is None:
                sample_row = cells
            reporter.row_succeeded()
        return sample_row

    def _execute(
        self,
        engine: Engine,
        config: ImportRunConfig,
        table: TableInfo,
        plan: _ImportWork,
        records: list[Any],
        reporter: ProgressReporter,
    ) -> dict[str, Any] | None:
        columns = plan.plan.columns
        sample_row: dict[str, Any] | None = None
        with engine.connect() as connection, connection.begin():
            repository = TableRowRepository(connection, table.name, columns)
            statement = repository.prepare_insert()
            for index, record in enumerate(records):
                try:
                    cells = to_cells(plan.resolver.resolve(record, index), columns)
                    repository.insert(statement, cells)
                except ROW_ERRORS as exc:
                    reporter.row_failed(index, statement_error_reason(exc))
                    continue
                if sample_row is None:
                    sample_row = cells
                reporter.row_succeeded()
        return sample_row


@lru_cache(maxsize=1)
def get_transactional_writer() -> TransactionalWriter:
    """
    Cached writer factory.
    """

    return TransactionalWriter()
