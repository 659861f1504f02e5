"""
app/validators package marker.
"""

from app.validators.run_validator import ImportPlan, RunErrorDetail, RunValidationError, RunValidator

__all__ = [
    "ImportPlan",
    "RunErrorDetail",
    "RunValidationError",
    "RunValidator",
]
