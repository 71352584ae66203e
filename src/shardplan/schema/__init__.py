"""
Row model for shardplan.

Provides the Row type, stable row hashing and the composite-key comparator.
"""

from .comparator import RowComparator, compare_rows
from .row import Row, encode_row, row_from_mapping, stable_row_hash

__all__ = [
    # Row values
    "Row",
    "row_from_mapping",
    # Hashing
    "encode_row",
    "stable_row_hash",
    # Ordering
    "RowComparator",
    "compare_rows",
]
