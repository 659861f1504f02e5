"""
app/mappers package marker.
"""

from app.mappers.synthetic_values import ColumnKind, SyntheticValueGenerator, classify_column
from app.mappers.value_resolver import ValueResolver, to_cell_value, to_cells

__all__ = [
    "ColumnKind",
    "SyntheticValueGenerator",
    "ValueResolver",
    "classify_column",
    "to_cell_value",
    "to_cells",
]
