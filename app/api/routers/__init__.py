"""
app/api/routers package marker.
"""

from app.api.routers.runs import router as runs_router
from app.api.routers.structure import router as structure_router
from app.api.routers.tables import router as tables_router

__all__ = [
    "runs_router",
    "structure_router",
    "tables_router",
]
