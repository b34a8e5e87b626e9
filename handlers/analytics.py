"""
Analytics handler.
Whole-sheet reductions and exports.
"""
from __future__ import annotations

import csv
import io
from typing import Any, Callable

from config import FIRST_DATA_ROW
from core.base_handler import BaseHandler
from lib import errors
from lib.common import is_number, to_text


def _avg(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


# operation -> reduction over the numeric cells of a column
AGGREGATIONS: dict[str, Callable[[list[Any]], Any]] = {
    "sum": lambda values: sum(values, 0),
    "avg": _avg,
    "min": lambda values: min(values) if values else None,
    "max": lambda values: max(values) if values else None,
    "count": len,
}


class AnalyticsHandler(BaseHandler):
    """Handler for AGGREGATE and EXPORT."""

    # === Aggregate ===

    def aggregate(self, column: Any, operation: Any, where: Any = None) -> dict[str, Any]:
        """
        Reduce the numeric cells of a column.

        Non-numeric cells (text, blanks, booleans) are left out before the
        reduction. `where` is accepted and not applied: every data row is
        reduced. avg/min/max of no values give None.
        """
        col = self.column_position(column)
        if col < 1:
            return errors.column_not_found(400, column=column)

        reducer = AGGREGATIONS.get(operation.lower() if isinstance(operation, str) else operation)
        if reducer is None:
            return errors.invalid_operation(operation)

        values = [v for v in self._column_values(col) if is_number(v)]
        return self._ok(200, {"result": reducer(values)})

    def _column_values(self, col: int) -> list[Any]:
        last_row = self.last_data_row()
        if last_row < FIRST_DATA_ROW:
            return []
        num_rows = last_row - FIRST_DATA_ROW + 1
        return [cell for (cell,) in self.grid.get_values(FIRST_DATA_ROW, col, num_rows, 1)]

    # === Export ===

    def export(self, fmt: Any = "json") -> dict[str, Any]:
        """
        All non-empty data rows as JSON records or CSV text.

        CSV has a header line then one line per record; fields are quoted
        only when they contain a delimiter, quote or newline.
        """
        kind = fmt.lower() if isinstance(fmt, str) else None
        if kind not in ("json", "csv"):
            return errors.invalid_format(fmt)

        records = self.data_records()
        if kind == "json":
            return self._ok(200, records)

        headers = self.headers
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow([to_text(h) for h in headers])
        for record in records:
            writer.writerow([to_text(record.get(h, "")) if h != "" else "" for h in headers])
        return self._ok(200, buf.getvalue().rstrip("\n"), format="csv")
