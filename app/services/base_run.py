"""
app/services/base_run.py

Shared lifecycle for import and update runs.

Every run follows ``idle -> validating -> (aborted | running) -> completed``.
Fatal errors raised before the first row abort the run with zero rows
attempted; they are reported once as an ``aborted`` snapshot and re-raised.
Unexpected errors are reported the same way with code ``internal_error`` and
the counters reached so far.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import Any, Generic, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.config import ImportSettings, get_import_settings
from app.domain.progress import ProgressListener, RunResult, RunStatus, ignore_progress
from app.domain.run_config import ImportRunConfig, UpdateRunConfig
from app.logging_utils import log_event
from app.services.progress import ProgressReporter
from app.services.run_guard import RunGuard, get_run_guard
from db.repositories.schema_repository import SchemaIntrospector
from db.repositories.types import TableInfo
from db.session import open_engine
from extraction.errors import JsonImportError
from extraction.extractor import RecordExtractor
from extraction.loader import read_json_document

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", ImportRunConfig, UpdateRunConfig)
PlanT = TypeVar("PlanT")


class RunPersistenceError(JsonImportError):
    """
    Raised when the run transaction cannot be opened or committed.
    """

    code = "persistence_failed"


ROW_ERRORS = (SQLAlchemyError, OverflowError, ValueError, TypeError)


def statement_error_reason(exc: Exception) -> str:
    """
    Driver message of a failed row, without the SQL echo.
    """

    original = getattr(exc, "orig", None)
    return str(original) if original is not None else str(exc)


class BaseRunService(ABC, Generic[ConfigT, PlanT]):
    """
    Template for runs that expand a JSON document into table writes.

    Subclasses validate a plan against the live table and process rows.
    """

    run_kind = "run"

    def __init__(
        self,
        *,
        settings: ImportSettings | None = None,
        extractor: RecordExtractor | None = None,
        guard: RunGuard | None = None,
    ) -> None:
        self._settings = settings or get_import_settings()
        self._extractor = extractor or RecordExtractor()
        self._guard = guard or get_run_guard()

    def run(self, config: ConfigT, listener: ProgressListener | None = None) -> RunResult:
        """
        Execute one run, pushing progress snapshots to ``listener``.
        """

        reporter = ProgressReporter(
            listener or ignore_progress,
            interval=self._settings.progress_interval,
            max_row_errors=self._settings.max_row_errors,
            log_row_errors=self._settings.log_row_errors,
            run_label=self.run_kind,
        )
        dry_run = config.dry_run
        table_name = config.table_name
        log_event(logger, logging.INFO, f"{self.run_kind}_started", table=table_name, dry_run=dry_run)
        reporter.transition(RunStatus.VALIDATING, "Validating run configuration")

        try:
            self._precheck(config)
            records = self._load_records(config)
            guard = nullcontext() if dry_run else self._guard.hold(config.db_path)
            with guard, open_engine(config.db_path) as engine:
                table = SchemaIntrospector(engine).describe_table(table_name)
                plan = self._plan(config, table)
                reporter.start(total=len(records), message=self._start_message(dry_run))
                if dry_run:
                    sample_row = self._simulate(config, table, plan, records, reporter)
                else:
                    sample_row = self._execute(engine, config, table, plan, records, reporter)
        except JsonImportError as exc:
            self._abort(reporter, exc, table_name)
            raise
        except SQLAlchemyError as exc:
            error = RunPersistenceError(f"Database error during {self.run_kind}: {exc}")
            self._abort(reporter, error, table_name)
            raise error from exc
        except Exception as exc:  # noqa: BLE001
            reporter.abort(
                f"{self.run_kind.capitalize()} failed unexpectedly.",
                error={"code": "internal_error", "message": str(exc)},
            )
            log_event(
                logger,
                logging.ERROR,
                f"{self.run_kind}_aborted",
                table=table_name,
                code="internal_error",
                message=str(exc),
            )
            raise

        progress = reporter.complete(self._finish_message(reporter, dry_run))
        log_event(
            logger,
            logging.INFO,
            f"{self.run_kind}_completed",
            table=table_name,
            dry_run=dry_run,
            total=progress.total,
            succeeded=progress.succeeded,
            failed=progress.failed,
        )
        return RunResult(
            progress=progress,
            columns=self._plan_columns(plan),
            dry_run=dry_run,
            sample_row=sample_row,
            row_errors=reporter.row_errors,
        )

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _precheck(self, config: ConfigT) -> None:
        """Validation that needs neither the document nor the database."""

    def _load_records(self, config: ConfigT) -> list[Any]:
        document = read_json_document(config.json_path)
        return self._extractor.extract(document, config.json_root)

    @abstractmethod
    def _plan(self, config: ConfigT, table: TableInfo) -> PlanT:
        raise NotImplementedError

    @abstractmethod
    def _plan_columns(self, plan: PlanT) -> tuple[str, ...]:
        raise NotImplementedError

    @abstractmethod
    def _simulate(
        self,
        config: ConfigT,
        table: TableInfo,
        plan: PlanT,
        records: list[Any],
        reporter: ProgressReporter,
    ) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def _execute(
        self,
        engine: Engine,
        config: ConfigT,
        table: TableInfo,
        plan: PlanT,
        records: list[Any],
        reporter: ProgressReporter,
    ) -> dict[str, Any] | None:
        raise NotImplementedError

    def _start_message(self, dry_run: bool) -> str:
        return "Simulating rows (dry run)" if dry_run else "Writing rows"

    def _finish_message(self, reporter: ProgressReporter, dry_run: bool) -> str:
        progress = reporter.progress
        prefix = "Simulation finished (dry run)." if dry_run else f"{self.run_kind.capitalize()} finished."
        return f"{prefix} Succeeded: {progress.succeeded}, Failed: {progress.failed}"

    def _abort(self, reporter: ProgressReporter, exc: JsonImportError, table_name: str) -> None:
        reporter.abort(exc.message, error=exc.to_dict())
        log_event(
            logger,
            logging.ERROR,
            f"{self.run_kind}_aborted",
            table=table_name,
            code=exc.code,
            message=exc.message,
        )
