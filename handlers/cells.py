"""
Cell handler.

Raw rectangular access that ignores the record model: row and column
slices, full-grid dumps with formulas and formatting, bulk range writes
and auto-detected data blocks.
"""
from __future__ import annotations

from typing import Any

from config import COLUMN_FORMAT_KEYS, FIRST_DATA_ROW, FORMAT_DEFAULTS
from core.base_handler import BaseHandler
from core.grid import GridError
from lib import errors
from lib.common import is_empty
from lib.input_parser import coerce_int
from lib.sheet_utils import column_index
from lib.types import GridValues, RangeBounds

EMPTY_RANGE: dict[str, Any] = {"values": [], "range": None}


def format_flag(key: str) -> str:
    """Request flag that toggles one formatting attribute (fontColors -> includeFontColors)."""
    return "include" + key[0].upper() + key[1:]


def _keep_indices(lines: list[list[Any]], stop: bool) -> list[int]:
    """
    Indices of non-empty lines in order.
    With stop set, the scan ends at the first empty line.
    """
    keep = []
    for i, line in enumerate(lines):
        if all(is_empty(cell) for cell in line):
            if stop:
                break
            continue
        keep.append(i)
    return keep


def _transpose(values: GridValues) -> GridValues:
    return [list(col) for col in zip(*values)]


class CellsHandler(BaseHandler):
    """Handler for GET_ROWS, GET_COLUMNS, GET_ALL_CELLS, RANGE_UPDATE, GET_RANGE and GET_DATA_BLOCK."""

    # === Slices ===

    def get_rows(self, start_row: Any, end_row: Any = None, include_formulas: bool = False) -> dict[str, Any]:
        """
        Full-width rows start_row..end_row.

        end_row defaults to start_row and is clamped to the last row;
        an invalid or out-of-bounds start gives no values.
        """
        start = coerce_int(start_row)
        end = coerce_int(end_row) if end_row not in (None, "") else start
        last_row = self.grid.last_row()
        width = self.grid.last_column()

        if start is None or end is None or start < 1 or width < 1:
            return self._ok(200, {"values": []})
        end = min(end, last_row)
        if start > end:
            return self._ok(200, {"values": []})

        num_rows = end - start + 1
        result: dict[str, Any] = {"values": self.grid.get_values(start, 1, num_rows, width)}
        if include_formulas:
            result["formulas"] = self.grid.get_formulas(start, 1, num_rows, width)
        return self._ok(200, result)

    def get_columns(
        self,
        start_column: Any,
        end_column: Any = None,
        include_formulas: bool = False,
        include_formatting: bool = False,
    ) -> dict[str, Any]:
        """
        Columns start_column..end_column, all rows.

        Args:
            start_column: 1-based number or letter label
            end_column: Same forms; defaults to start_column, clamped to
                        the last column
            include_formulas: Add a parallel formulas array
            include_formatting: Add backgrounds, fontColors and numberFormats

        Returns:
            {"values": [...]} plus the requested parallel arrays; empty
            values for an invalid or out-of-bounds identifier
        """
        try:
            start = column_index(start_column)
            end = column_index(end_column) if end_column not in (None, "") else start
        except ValueError:
            return self._ok(200, {"values": []})

        last_row = self.grid.last_row()
        end = min(end, self.grid.last_column())
        if start < 1 or start > end or last_row < 1:
            return self._ok(200, {"values": []})

        num_cols = end - start + 1
        result: dict[str, Any] = {"values": self.grid.get_values(1, start, last_row, num_cols)}
        if include_formulas:
            result["formulas"] = self.grid.get_formulas(1, start, last_row, num_cols)
        if include_formatting:
            formatting = self.grid.get_formatting(1, start, last_row, num_cols)
            for key in COLUMN_FORMAT_KEYS:
                result[key] = formatting[key]
        return self._ok(200, result)

    def get_all_cells(
        self,
        include_formulas: bool = True,
        include_formatting: bool = True,
        attributes: dict[str, bool] | None = None,
    ) -> dict[str, Any]:
        """
        Every cell of the data range in one read.

        Formulas and all formatting attributes are returned unless turned
        off; `attributes` switches single formatting keys on or off.
        """
        last_row = self.grid.last_row()
        last_col = self.grid.last_column()
        attributes = attributes or {}
        wanted = [k for k in FORMAT_DEFAULTS if include_formatting and attributes.get(k, True)]

        result: dict[str, Any] = {"values": [], "lastRow": last_row, "lastColumn": last_col}
        if last_row < 1 or last_col < 1:
            if include_formulas:
                result["formulas"] = []
            result.update({k: [] for k in wanted})
            return self._ok(200, result)

        result["values"] = self.grid.get_values(1, 1, last_row, last_col)
        if include_formulas:
            result["formulas"] = self.grid.get_formulas(1, 1, last_row, last_col)
        if wanted:
            formatting = self.grid.get_formatting(1, 1, last_row, last_col)
            for key in wanted:
                result[key] = formatting[key]
        return self._ok(200, result)

    # === Bulk write ===

    def range_update(self, start_row: Any, start_col: Any, values: Any) -> dict[str, Any]:
        """
        Write a 2-D array at (start_row, start_col) in one call.

        Data rows touched by the write get a fresh "Date Modified" stamp
        when the sheet has that column. Backend failures are reported as
        update_failed with the attempted coordinates.
        """
        if not isinstance(values, list) or not values or not isinstance(values[0], list):
            return errors.invalid_data()

        num_rows = len(values)
        num_cols = len(values[0])
        row = coerce_int(start_row)
        col = coerce_int(start_col)
        if row is None or col is None:
            return errors.update_failed(
                "startRow and startCol must be integers", f"{start_row},{start_col}"
            )
        range_text = f"{row},{col} to {row + num_rows - 1},{col + num_cols - 1}"

        try:
            self.grid.set_values(row, col, values)
            self.refresh_headers()
            if self.has_date_column:
                first = max(row, FIRST_DATA_ROW)
                self.grid.fill_column(first, 1, row + num_rows - first, self.timestamp())
        except GridError as e:
            return errors.update_failed(str(e), range_text)

        return self._ok(200, {
            "updated": {"rows": num_rows, "columns": num_cols, "cells": num_rows * num_cols}
        })

    # === Block reads ===

    def get_range(
        self,
        start_row: Any,
        start_col: Any,
        stop_at_empty_row: bool = False,
        stop_at_empty_column: bool = False,
        skip_empty_rows: bool = False,
        skip_empty_columns: bool = False,
        include_formulas: bool = False,
    ) -> dict[str, Any]:
        return self._ok(200, self.read_range(
            start_row,
            start_col,
            stop_at_empty_row=stop_at_empty_row,
            stop_at_empty_column=stop_at_empty_column,
            skip_empty_rows=skip_empty_rows,
            skip_empty_columns=skip_empty_columns,
            include_formulas=include_formulas,
        ))

    def read_range(
        self,
        start_row: Any,
        start_col: Any,
        stop_at_empty_row: bool = False,
        stop_at_empty_column: bool = False,
        skip_empty_rows: bool = False,
        skip_empty_columns: bool = False,
        include_formulas: bool = False,
    ) -> dict[str, Any]:
        """
        Read from (start_row, start_col) to the last row and column, then filter.

        Columns are filtered before rows. "stop" flags cut at the first
        empty line; "skip" flags drop every empty line. Formulas follow
        the same filtering. The returned range is the bounding box of
        the kept cells, counted from the start.
        """
        row = coerce_int(start_row)
        col = coerce_int(start_col)
        last_row = self.grid.last_row()
        last_col = self.grid.last_column()
        if row is None or col is None or row < 1 or col < 1 or row > last_row or col > last_col:
            return dict(EMPTY_RANGE)

        num_rows = last_row - row + 1
        num_cols = last_col - col + 1
        values = self.grid.get_values(row, col, num_rows, num_cols)
        formulas = self.grid.get_formulas(row, col, num_rows, num_cols) if include_formulas else None

        if stop_at_empty_column or skip_empty_columns:
            keep = _keep_indices(_transpose(values), stop_at_empty_column)
            if not keep:
                return dict(EMPTY_RANGE)
            values = [[line[i] for i in keep] for line in values]
            if formulas is not None:
                formulas = [[line[i] for i in keep] for line in formulas]
            num_cols = len(keep)

        if stop_at_empty_row or skip_empty_rows:
            keep = _keep_indices(values, stop_at_empty_row)
            if not keep:
                return dict(EMPTY_RANGE)
            values = [values[i] for i in keep]
            if formulas is not None:
                formulas = [formulas[i] for i in keep]
            num_rows = len(keep)

        result: dict[str, Any] = {"values": values}
        if formulas is not None:
            result["formulas"] = formulas
        bounds: RangeBounds = {
            "startRow": row,
            "startCol": col,
            "endRow": row + num_rows - 1,
            "endCol": col + num_cols - 1,
            "numRows": num_rows,
            "numCols": num_cols,
        }
        result["range"] = bounds
        return result

    def get_data_block(self, search_range: Any = None) -> dict[str, Any]:
        """
        Locate the first non-empty cell of search_range (row-major) and
        read the contiguous block anchored there.

        search_range keys startRow, startCol, endRow, endCol default to
        the whole data range.
        """
        bounds = search_range if isinstance(search_range, dict) else {}
        start_row = coerce_int(bounds.get("startRow", 1))
        start_col = coerce_int(bounds.get("startCol", 1))
        end_row = coerce_int(bounds.get("endRow", self.grid.last_row()))
        end_col = coerce_int(bounds.get("endCol", self.grid.last_column()))

        if None in (start_row, start_col, end_row, end_col):
            return self._ok(200, dict(EMPTY_RANGE))
        if start_row < 1 or start_col < 1 or end_row < start_row or end_col < start_col:
            return self._ok(200, dict(EMPTY_RANGE))

        cells = self.grid.get_values(start_row, start_col, end_row - start_row + 1, end_col - start_col + 1)
        for i, line in enumerate(cells):
            for j, cell in enumerate(line):
                if not is_empty(cell):
                    return self._ok(200, self.read_range(
                        start_row + i,
                        start_col + j,
                        stop_at_empty_row=True,
                        stop_at_empty_column=True,
                        skip_empty_rows=True,
                        skip_empty_columns=True,
                    ))
        return self._ok(200, dict(EMPTY_RANGE))
