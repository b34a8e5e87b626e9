"""
In-memory grid backend.

Keeps values, formulas and per-cell formatting in parallel 2-D lists.
Used by the test suite and by SHEETLOG_BACKEND=memory for local runs.
"""
from __future__ import annotations

import csv
import io
from typing import Any

from config import FORMAT_DEFAULTS
from core.grid import Grid, GridError, Workbook, check_range, check_rectangular
from lib.common import is_empty


class MemoryGrid(Grid):
    """A sheet tab held in Python lists."""

    def __init__(
        self,
        name: str,
        values: list[list[Any]] | None = None,
        sheet_id: int = 0,
        index: int = 0,
        hidden: bool = False,
        formulas: dict[tuple[int, int], str] | None = None,
        formats: dict[tuple[int, int], dict[str, Any]] | None = None,
    ) -> None:
        """
        Args:
            name: Tab name
            values: Initial rows (row 1 first); ragged rows are allowed
            formulas: (row, col) -> formula text, 1-based
            formats: (row, col) -> {format key: value}, 1-based
        """
        self.name = name
        self.sheet_id = sheet_id
        self.index = index
        self.hidden = hidden
        self._values: list[list[Any]] = [list(r) for r in (values or [])]
        self._formulas: list[list[str]] = []
        self._formats: list[list[dict[str, Any] | None]] = []
        width = max((len(r) for r in self._values), default=0)
        self._ensure_size(len(self._values), width)
        for (r, c), f in (formulas or {}).items():
            self._ensure_size(r, c)
            self._formulas[r - 1][c - 1] = f
        for (r, c), fmt in (formats or {}).items():
            self._ensure_size(r, c)
            self._formats[r - 1][c - 1] = dict(fmt)

    # === Storage ===

    def _width(self) -> int:
        return len(self._values[0]) if self._values else 0

    def _ensure_size(self, num_rows: int, num_cols: int) -> None:
        """Grow all three layers to at least num_rows x num_cols."""
        num_cols = max(num_cols, self._width())
        while len(self._values) < num_rows:
            self._values.append([])
            self._formulas.append([])
            self._formats.append([])
        for i in range(len(self._values)):
            for layer, fill in ((self._values, ""), (self._formulas, ""), (self._formats, None)):
                while len(layer) <= i:
                    layer.append([])
                row = layer[i]
                row.extend([fill] * (num_cols - len(row)))

    def _has_content(self, r: int, c: int) -> bool:
        return not is_empty(self._values[r][c]) or bool(self._formulas[r][c])

    # === Grid interface ===

    def last_row(self) -> int:
        for r in range(len(self._values) - 1, -1, -1):
            if any(self._has_content(r, c) for c in range(len(self._values[r]))):
                return r + 1
        return 0

    def last_column(self) -> int:
        last = 0
        for r in range(len(self._values)):
            for c in range(len(self._values[r]) - 1, last - 1, -1):
                if self._has_content(r, c):
                    last = c + 1
                    break
        return last

    def _read(self, layer: list[list[Any]], row: int, col: int, num_rows: int, num_cols: int, fill: Any) -> list[list[Any]]:
        check_range(row, col, num_rows, num_cols)
        out = []
        for r in range(row - 1, row - 1 + num_rows):
            src = layer[r] if r < len(layer) else []
            out.append([src[c] if c < len(src) else fill for c in range(col - 1, col - 1 + num_cols)])
        return out

    def get_values(self, row: int, col: int, num_rows: int, num_cols: int) -> list[list[Any]]:
        return self._read(self._values, row, col, num_rows, num_cols, "")

    def get_formulas(self, row: int, col: int, num_rows: int, num_cols: int) -> list[list[str]]:
        return self._read(self._formulas, row, col, num_rows, num_cols, "")

    def get_formatting(self, row: int, col: int, num_rows: int, num_cols: int) -> dict[str, list[list[Any]]]:
        cells = self._read(self._formats, row, col, num_rows, num_cols, None)
        return {
            key: [[(fmt or {}).get(key, default) for fmt in r] for r in cells]
            for key, default in FORMAT_DEFAULTS.items()
        }

    def set_values(self, row: int, col: int, values: list[list[Any]]) -> None:
        num_rows, num_cols = check_rectangular(values)
        check_range(row, col, num_rows, num_cols)
        self._ensure_size(row - 1 + num_rows, col - 1 + num_cols)
        for i, src in enumerate(values):
            for j, v in enumerate(src):
                if isinstance(v, (dict, list)):
                    raise GridError(f"Unsupported cell value type: {type(v).__name__}")
                self._values[row - 1 + i][col - 1 + j] = "" if v is None else v
                self._formulas[row - 1 + i][col - 1 + j] = ""

    def insert_column_before(self, col: int) -> None:
        if col < 1:
            raise GridError(f"Column must be >= 1: {col}")
        self._ensure_size(len(self._values), col - 1)
        for r in range(len(self._values)):
            self._values[r].insert(col - 1, "")
            self._formulas[r].insert(col - 1, "")
            self._formats[r].insert(col - 1, None)

    def delete_column(self, col: int) -> None:
        if col < 1 or col > self._width():
            raise GridError(f"Column out of bounds: {col}")
        for r in range(len(self._values)):
            del self._values[r][col - 1]
            del self._formulas[r][col - 1]
            del self._formats[r][col - 1]

    # === Test helpers ===

    def rows(self) -> list[list[Any]]:
        """Snapshot of the content area (last_row x last_column)."""
        nr, nc = self.last_row(), self.last_column()
        if nr < 1 or nc < 1:
            return []
        return self.get_values(1, 1, nr, nc)


class MemoryWorkbook(Workbook):
    """A spreadsheet of MemoryGrids."""

    def __init__(self, spreadsheet_id: str = "memory") -> None:
        self.id = spreadsheet_id
        self._sheets: list[MemoryGrid] = []

    def add_sheet(self, name: str, values: list[list[Any]] | None = None, **kwargs: Any) -> MemoryGrid:
        """Create a tab at the end and return it."""
        kwargs.setdefault("sheet_id", len(self._sheets))
        grid = MemoryGrid(name, values, index=len(self._sheets), **kwargs)
        self._sheets.append(grid)
        return grid

    def sheets(self) -> list[Grid]:
        return list(self._sheets)

    def fetch_csv(self, grid: Grid) -> tuple[int, str]:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        nr, nc = grid.last_row(), grid.last_column()
        if nr and nc:
            writer.writerows(grid.get_values(1, 1, nr, nc))
        return 200, buf.getvalue().rstrip("\n")
