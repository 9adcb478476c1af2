"""
Result Normalizer
Turns warehouse wire rows (lists of values) into keyed records
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from app.dtos.query import ResultSet

logger = logging.getLogger(__name__)


def column_names(row_type: Optional[Sequence[Any]]) -> List[str]:
    """
    Extract column names from wire metadata

    Accepts [{"name": ...}, ...] or plain strings. Repeated names get a
    numeric suffix (AMOUNT, AMOUNT_2) so record keys stay unique.
    """
    names: List[str] = []
    seen: Dict[str, int] = {}

    for i, col in enumerate(row_type or []):
        name = col.get("name") if isinstance(col, dict) else col
        name = str(name) if name not in (None, "") else f"COLUMN_{i + 1}"

        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
            while name in seen:
                name = f"{name}_"
        seen.setdefault(name, 1)
        names.append(name)

    return names


def normalize_rows(
    columns: Sequence[str],
    rows: Optional[Sequence[Sequence[Any]]]
) -> List[Dict[str, Any]]:
    """
    Zip each row with the column names

    Input: columns=["A", "B"], rows=[[1, 2], [3, 4]]
    Output: [{"A": 1, "B": 2}, {"A": 3, "B": 4}]

    Wire data is loosely typed: each row is zipped up to the shorter of
    columns/values, so short rows lose trailing keys and extra values are dropped.
    """
    if not rows:
        return []

    records = []
    for row in rows:
        if row is None:
            row = []
        if len(row) != len(columns):
            logger.debug(f"Row width {len(row)} != column count {len(columns)}")
        records.append(dict(zip(columns, row)))

    return records


def build_result_set(
    row_type: Optional[Sequence[Any]],
    rows: Optional[Sequence[Sequence[Any]]],
    total_rows: Optional[int] = None,
) -> ResultSet:
    """Normalize wire metadata + rows into a ResultSet"""
    columns = column_names(row_type)
    records = normalize_rows(columns, rows)
    return ResultSet(columns=columns, records=records, total_rows=total_rows)
