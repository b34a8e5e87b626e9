"""
Grid accessor interfaces.

A Workbook is a set of named Grids (sheet tabs). A Grid is a 1-based
2-D cell store whose last_row()/last_column() report the last row and
column holding content; every range request is bounded by them.

Backends:
- MemoryWorkbook (core.memory_grid): in-process lists, used by tests
- SheetsWorkbook (sheets_client): Google Sheets through gspread
"""
from abc import ABC, abstractmethod
from typing import Any

from config import CSV_EXPORT_URL, SHEET_EDIT_URL


class GridError(Exception):
    """Raised by a backend when a read or write cannot be carried out."""


def check_range(row: int, col: int, num_rows: int, num_cols: int) -> None:
    """Raise GridError for coordinates outside the 1-based grid."""
    if row < 1 or col < 1:
        raise GridError(f"Range coordinates must be >= 1 (row={row}, column={col})")
    if num_rows < 1 or num_cols < 1:
        raise GridError(f"Range size must be >= 1 (rows={num_rows}, columns={num_cols})")


def check_rectangular(values: list[list[Any]]) -> tuple[int, int]:
    """Return (num_rows, num_cols) of a 2-D list, raising GridError if it is ragged or empty."""
    if not values or not isinstance(values, list) or not all(isinstance(r, list) for r in values):
        raise GridError("Values must be a non-empty 2D array")
    num_cols = len(values[0])
    if num_cols == 0:
        raise GridError("Values must have at least one column")
    for i, r in enumerate(values):
        if len(r) != num_cols:
            raise GridError(
                f"The number of columns in the data does not match the number of "
                f"columns in the range. The data has {len(r)} but the range has {num_cols} (row {i + 1})."
            )
    return len(values), num_cols


class Grid(ABC):
    """One sheet tab."""

    name: str
    sheet_id: int
    index: int  # 0-based tab position
    hidden: bool

    @abstractmethod
    def last_row(self) -> int:
        """Last row with content (0 for an empty sheet)."""

    @abstractmethod
    def last_column(self) -> int:
        """Last column with content (0 for an empty sheet)."""

    @abstractmethod
    def get_values(self, row: int, col: int, num_rows: int, num_cols: int) -> list[list[Any]]:
        """Read a rectangle. Cells past the content are returned as ""."""

    @abstractmethod
    def get_formulas(self, row: int, col: int, num_rows: int, num_cols: int) -> list[list[str]]:
        """Read formulas for a rectangle ("" where a cell holds no formula)."""

    @abstractmethod
    def get_formatting(self, row: int, col: int, num_rows: int, num_cols: int) -> dict[str, list[list[Any]]]:
        """Read formatting for a rectangle, one 2-D list per key of config.FORMAT_DEFAULTS."""

    @abstractmethod
    def set_values(self, row: int, col: int, values: list[list[Any]]) -> None:
        """Write a rectangle in one call."""

    @abstractmethod
    def insert_column_before(self, col: int) -> None:
        """Insert an empty column at position col, shifting the rest right."""

    @abstractmethod
    def delete_column(self, col: int) -> None:
        """Remove column col, shifting the rest left."""

    # === Derived operations ===

    def get_row(self, row: int) -> list[Any]:
        """Full-width read of one row."""
        width = self.last_column()
        if width < 1:
            return []
        return self.get_values(row, 1, 1, width)[0]

    def set_value(self, row: int, col: int, value: Any) -> None:
        self.set_values(row, col, [[value]])

    def fill_column(self, row: int, col: int, num_rows: int, value: Any) -> None:
        """Write the same value into num_rows cells of one column."""
        if num_rows < 1:
            return
        self.set_values(row, col, [[value] for _ in range(num_rows)])

    def clear_row(self, row: int) -> None:
        """Clear the contents of a row across the sheet's width. The row itself stays."""
        width = self.last_column()
        if width < 1:
            return
        self.set_values(row, 1, [[""] * width])

    def append_row(self, values: list[Any]) -> None:
        """Write values into the row after the last row with content."""
        if not values:
            return
        self.set_values(self.last_row() + 1, 1, [list(values)])

    def append_column(self, header: str) -> int:
        """Add a column after the last one, titled header. Returns its position."""
        position = self.last_column() + 1
        self.set_value(1, position, header)
        return position


class Workbook(ABC):
    """A spreadsheet: an ordered set of Grids."""

    id: str

    @abstractmethod
    def sheets(self) -> list[Grid]:
        """All tabs in display order."""

    @abstractmethod
    def fetch_csv(self, grid: Grid) -> tuple[int, str]:
        """Fetch the CSV export of a tab. Returns (http_status, body)."""

    def sheet_by_name(self, name: str) -> Grid | None:
        """Case-insensitive tab lookup."""
        target = (name or "").lower()
        for grid in self.sheets():
            if grid.name.lower() == target:
                return grid
        return None

    def csv_url(self, grid: Grid) -> str:
        return CSV_EXPORT_URL.format(spreadsheet_id=self.id, gid=grid.sheet_id)

    def sheet_url(self, grid: Grid) -> str:
        return SHEET_EDIT_URL.format(spreadsheet_id=self.id, gid=grid.sheet_id)
