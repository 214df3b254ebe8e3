"""
CSV ingestion of LOB snapshots.

Expected header (24 columns):

    timestamp,symbol,bid1..bid5,bidsize1..bidsize5,ask1..ask5,asksize1..asksize5,mid_price,spread

Rules:
- A row with fewer fields than the header is skipped
- Every numeric field is parsed as float; malformed values become NaN
- No other validation happens here; callers decide what an empty result means
"""

import csv
import io
import math
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .orderbook import BOOK_LEVELS, LOBSnapshot
from ..infra.logging import get_logger, LogCategory


logger = get_logger()

CSV_HEADER = (
    ["timestamp", "symbol"]
    + [f"bid{i}" for i in range(1, BOOK_LEVELS + 1)]
    + [f"bidsize{i}" for i in range(1, BOOK_LEVELS + 1)]
    + [f"ask{i}" for i in range(1, BOOK_LEVELS + 1)]
    + [f"asksize{i}" for i in range(1, BOOK_LEVELS + 1)]
    + ["mid_price", "spread"]
)


def _parse_float(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        return math.nan


def parse_rows(rows: Iterable[List[str]]) -> List[LOBSnapshot]:
    """
    Convert CSV rows (header first) into snapshots.

    Columns are read by position, as in the documented layout.
    """
    iterator = iter(rows)
    header = next(iterator, None)
    if header is None:
        return []
    n_columns = len(header)

    snapshots: List[LOBSnapshot] = []
    skipped = 0

    for row in iterator:
        values = [value.strip() for value in row]
        if not values or values == [""]:
            continue
        if len(values) < n_columns or len(values) < len(CSV_HEADER):
            skipped += 1
            continue

        numbers = [_parse_float(v) for v in values[2:24]]
        snapshots.append(LOBSnapshot(
            timestamp=_parse_float(values[0]),
            symbol=values[1],
            bid_prices=tuple(numbers[0:5]),
            bid_sizes=tuple(numbers[5:10]),
            ask_prices=tuple(numbers[10:15]),
            ask_sizes=tuple(numbers[15:20]),
            mid_price=numbers[20],
            spread=numbers[21],
        ))

    if skipped:
        logger.warning(
            f"Skipped {skipped} short rows while parsing LOB CSV",
            category=LogCategory.DATA,
            skipped=skipped,
        )
    return snapshots


def parse_csv(text: str) -> List[LOBSnapshot]:
    """Parse CSV text into snapshots."""
    return parse_rows(csv.reader(io.StringIO(text.strip())))


def load_csv(path: Union[str, Path]) -> List[LOBSnapshot]:
    """Load snapshots from a CSV file on disk."""
    path = Path(path)
    with path.open(newline="") as handle:
        snapshots = parse_rows(csv.reader(handle))

    logger.info(
        f"Loaded {len(snapshots)} snapshots from {path.name}",
        category=LogCategory.DATA,
        path=str(path),
    )
    return snapshots


def group_by_symbol(snapshots: Iterable[LOBSnapshot]) -> Dict[str, List[LOBSnapshot]]:
    """Split a mixed snapshot stream per symbol, preserving order."""
    grouped: Dict[str, List[LOBSnapshot]] = {}
    for snapshot in snapshots:
        grouped.setdefault(snapshot.symbol, []).append(snapshot)
    return grouped
