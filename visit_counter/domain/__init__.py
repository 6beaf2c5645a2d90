"""
Domain package for the visit counter.

Exports the cell value model, the single-pass ResultSet and the per-request
VisitFacts. Keep this package focused on data definitions; no I/O here.
"""

from visit_counter.domain.cells import (
    BlobCell,
    Cell,
    IntegerCell,
    NullCell,
    RealCell,
    TextCell,
    cell_from_value,
    to_display,
    to_json,
)
from visit_counter.domain.models import ResultSet, Row, VisitFacts

__all__ = [
    "Cell",
    "NullCell",
    "IntegerCell",
    "RealCell",
    "TextCell",
    "BlobCell",
    "cell_from_value",
    "to_display",
    "to_json",
    "ResultSet",
    "Row",
    "VisitFacts",
]
