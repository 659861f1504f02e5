"""
app/domain package marker.
"""

from app.domain.progress import RowError, RunProgress, RunResult, RunStatus
from app.domain.run_config import ImportRunConfig, UpdateRunConfig, ValueRules

__all__ = [
    "ImportRunConfig",
    "RowError",
    "RunProgress",
    "RunResult",
    "RunStatus",
    "UpdateRunConfig",
    "ValueRules",
]
