"""
Header and schema management.

Row 1 holds the headers. Column 1 is reserved for the "Date Modified"
stamp once a write method that grows the schema has run.
"""
from typing import Any, Iterable, Mapping

from config import DATE_MODIFIED_HEADER
from core.grid import Grid
from lib.sheet_utils import trim_trailing_empty


def effective_headers(grid: Grid) -> list[Any]:
    """Row 1 up to its last non-empty cell."""
    width = grid.last_column()
    if width < 1:
        return []
    return trim_trailing_empty(grid.get_values(1, 1, 1, width)[0])


def has_date_column(headers: list[Any]) -> bool:
    return bool(headers) and headers[0] == DATE_MODIFIED_HEADER


def ensure_date_modified_column(grid: Grid) -> bool:
    """
    Insert the "Date Modified" column at position 1 if it is missing.

    Returns:
        True if a column was inserted
    """
    if has_date_column(effective_headers(grid)):
        return False
    grid.insert_column_before(1)
    grid.set_value(1, 1, DATE_MODIFIED_HEADER)
    return True


def grow_schema(grid: Grid, records: Iterable[Mapping[str, Any]]) -> list[str]:
    """
    Append a column for every key not yet present in the headers.

    New columns are added in first-seen order across the whole batch,
    after the date column has been ensured.

    Returns:
        Names of the added columns
    """
    ensure_date_modified_column(grid)
    existing = set(effective_headers(grid))

    new_columns: list[str] = []
    for record in records:
        for key in record:
            if key not in existing and key not in new_columns:
                new_columns.append(key)

    for name in new_columns:
        grid.append_column(name)

    return new_columns
