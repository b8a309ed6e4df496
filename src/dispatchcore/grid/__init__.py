"""Reservation grid: bucket filters, search, column sort and the stateful grid."""

from dispatchcore.grid.engine import SORTABLE_COLUMNS, ColumnSort, DispatchGrid, apply_filters, search_rows
from dispatchcore.grid.sample import sample_rows

__all__ = [
    "SORTABLE_COLUMNS",
    "ColumnSort",
    "DispatchGrid",
    "apply_filters",
    "sample_rows",
    "search_rows",
]
