"""
Data module for LOB Alpha Research System.

Provides:
- Immutable five-level order book snapshots
- CSV ingestion
- Synthetic snapshot generation for development and tests
"""

from .orderbook import (
    BOOK_LEVELS,
    LOBSnapshot,
    SnapshotSimulator,
    make_snapshot,
)

from .csv_loader import (
    CSV_HEADER,
    group_by_symbol,
    load_csv,
    parse_csv,
)

__all__ = [
    "BOOK_LEVELS",
    "LOBSnapshot",
    "SnapshotSimulator",
    "make_snapshot",
    "CSV_HEADER",
    "group_by_symbol",
    "load_csv",
    "parse_csv",
]
