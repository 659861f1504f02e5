"""
app/api/routers/tables.py

Target database metadata endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import to_http_error
from app.schemas.catalog import TableInfoResponse, TableListResponse
from app.services.catalog_service import CatalogService, get_catalog_service
from extraction.errors import JsonImportError

router = APIRouter(prefix="/db", tags=["tables"])


@router.get("/tables", response_model=TableListResponse)
def list_tables(
    db_path: str = Query(..., min_length=1, description="Path of the SQLite database file"),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> TableListResponse:
    try:
        tables = catalog_service.get_tables(db_path)
    except JsonImportError as exc:
        raise to_http_error(exc) from exc
    return TableListResponse(tables=tables)


@router.get("/tables/{table_name}", response_model=TableInfoResponse)
def describe_table(
    table_name: str,
    db_path: str = Query(..., min_length=1, description="Path of the SQLite database file"),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> TableInfoResponse:
    """
    Return column metadata and UNIQUE constraints for one table.
    """

    try:
        table = catalog_service.analyze_table(db_path, table_name)
    except JsonImportError as exc:
        raise to_http_error(exc) from exc
    return TableInfoResponse.from_table(table)
