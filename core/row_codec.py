"""
Conversion between grid rows and header-keyed records.
"""
import json
from typing import Any, Mapping

from lib.common import is_empty
from lib.types import GridRow, Record


def encode_value(value: Any) -> Any:
    """Cell value for one field: structures become JSON text, missing becomes ""."""
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return value


def record_to_row(record: Mapping[str, Any], headers: list[Any]) -> GridRow:
    """
    Build the cells for headers from a record.

    Headers absent from the record give "". Callers pass the headers
    after the reserved date column and prepend the stamp themselves.
    """
    return [encode_value(record.get(h)) for h in headers]


def row_to_record(cells: GridRow, row_index: int, headers: list[Any]) -> Record | None:
    """
    Build a record from one row.

    Returns None for a row whose cells are all empty. Columns with an
    empty header are skipped. Values are returned as stored.
    """
    if all(is_empty(c) for c in cells):
        return None

    record: Record = {"_id": row_index}
    for i, header in enumerate(headers):
        if is_empty(header):
            continue
        record[header] = cells[i] if i < len(cells) else ""
    return record
