from __future__ import annotations

import logging

from fastapi import FastAPI

from app.config import get_logging_settings
from app.logging_utils import configure_logging


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging(get_logging_settings().level)

    application = FastAPI(
        title="JSON Table Import API",
        version="1.0.0",
    )

    from app.api.routers import runs_router, structure_router, tables_router

    application.include_router(structure_router)
    application.include_router(tables_router)
    application.include_router(runs_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    logging.getLogger(__name__).info("Application created with %d routes", len(application.routes))
    return application


app = create_app()
