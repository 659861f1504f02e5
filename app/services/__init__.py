"""
app/services package marker.
"""

from app.services.base_run import RunPersistenceError
from app.services.catalog_service import CatalogService, get_catalog_service
from app.services.import_service import TransactionalWriter, get_transactional_writer
from app.services.run_guard import RunGuard, RunInProgressError, get_run_guard
from app.services.structure_service import StructureService, get_structure_service
from app.services.update_service import KeyedUpdater, get_keyed_updater

__all__ = [
    "CatalogService",
    "get_catalog_service",
    "KeyedUpdater",
    "get_keyed_updater",
    "RunGuard",
    "RunInProgressError",
    "RunPersistenceError",
    "get_run_guard",
    "StructureService",
    "get_structure_service",
    "TransactionalWriter",
    "get_transactional_writer",
]
