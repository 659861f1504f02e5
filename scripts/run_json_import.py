"""
Run a JSON import or keyed update from a run configuration file.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from app.config import get_logging_settings
from app.domain.progress import RunProgress
from app.domain.run_config import ImportRunConfig, UpdateRunConfig
from app.logging_utils import configure_logging
from app.schemas.runs import RunConfigFile, RunResultResponse, ValueRulesPayload
from app.services.import_service import TransactionalWriter
from app.services.update_service import KeyedUpdater
from extraction.errors import JsonImportError
from extraction.loader import read_json_document

logger = logging.getLogger("scripts.run_json_import")


def _resolve(base_dir: Path, raw_path: str) -> Path:
    path = Path(raw_path).expanduser()
    return path if path.is_absolute() else base_dir / path


def load_run_config(config_path: Path) -> RunConfigFile:
    """
    Read and validate a run configuration file, inlining referenced files.
    """

    raw = read_json_document(config_path)
    config = RunConfigFile.model_validate(raw)
    base_dir = config_path.resolve().parent

    updates: dict[str, Any] = {}
    if config.mapping is None and config.mapping_file:
        updates["mapping"] = read_json_document(_resolve(base_dir, config.mapping_file))
    if config.rules is None and config.defaults_file:
        updates["rules"] = ValueRulesPayload.model_validate(
            read_json_document(_resolve(base_dir, config.defaults_file))
        )
    if updates:
        config = RunConfigFile.model_validate({**config.model_dump(), **updates})
    return config


def build_import_config(config: RunConfigFile, *, dry_run: bool) -> ImportRunConfig:
    rules = config.rules or ValueRulesPayload()
    return ImportRunConfig(
        json_path=config.json_path,
        db_path=config.db_path,
        json_root=config.json_root,
        table_name=config.table_name,
        mapping=config.mapping or {},
        rules=rules.to_rules(),
        limit=config.limit,
        offset=config.offset,
        dry_run=dry_run or config.dry_run,
    )


def build_update_config(config: RunConfigFile, *, dry_run: bool) -> UpdateRunConfig:
    return UpdateRunConfig(
        json_path=config.json_path,
        db_path=config.db_path,
        json_root=config.json_root,
        table_name=config.table_name,
        key_column=config.key_column or "",
        update_columns=tuple(config.update_columns),
        mapping=config.mapping or {},
        dry_run=dry_run or config.dry_run,
    )


def _log_progress(progress: RunProgress) -> None:
    logger.info(
        "[%s] %s (%d/%d, failed=%d)",
        progress.status.value,
        progress.message,
        progress.processed,
        progress.total,
        progress.failed,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import JSON records into an existing SQLite table.")
    parser.add_argument("--config", required=True, help="Path of the run configuration JSON file.")
    parser.add_argument(
        "--update",
        action="store_true",
        help="Apply keyed updates (keyColumn/updateColumns) instead of inserting rows.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Resolve rows without writing.")
    args = parser.parse_args(argv)

    configure_logging(get_logging_settings().level)

    try:
        config = load_run_config(Path(args.config))
    except ValidationError as exc:
        print(json.dumps({"code": "invalid_config", "errors": exc.errors(include_url=False)}, indent=2, default=str))
        return 2
    except JsonImportError as exc:
        print(json.dumps(exc.to_dict(), indent=2))
        return 2

    try:
        if args.update:
            result = KeyedUpdater().run(build_update_config(config, dry_run=args.dry_run), _log_progress)
        else:
            result = TransactionalWriter().run(build_import_config(config, dry_run=args.dry_run), _log_progress)
    except JsonImportError as exc:
        print(json.dumps(exc.to_dict(), indent=2))
        return 1
    except Exception as exc:  # noqa: BLE001
        logger.exception("Run failed unexpectedly")
        print(json.dumps({"code": "internal_error", "message": str(exc)}, indent=2))
        return 1

    print(json.dumps(RunResultResponse.from_result(result).model_dump(), indent=2, default=str))
    return 0 if result.progress.failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
