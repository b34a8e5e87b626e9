"""
Base handler class for sheet-based operations.

Provides common functionality for all handlers:
- Header loading (lazy, refreshed after schema changes)
- Column lookup by header name
- Record reads over row windows
- Row finding by column value
- "Date Modified" stamping
- Success envelopes
"""
from abc import ABC
from datetime import datetime, tzinfo
from typing import Any, Callable

from config import FIRST_DATA_ROW
from core.grid import Grid
from core.row_codec import row_to_record
from core.schema import effective_headers, has_date_column
from lib.common import data, format_timestamp, to_text
from lib.sheet_utils import header_position


class BaseHandler(ABC):
    """
    Abstract base class for handlers working on one sheet tab.

    Example:
        class RowsHandler(BaseHandler):
            def get(self, row_id):
                record = self.read_record(row_id)
                ...
    """

    def __init__(
        self,
        grid: Grid,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize handler with a grid and the stamp time zone.

        Args:
            grid: Target sheet tab
            tz: Time zone for "Date Modified" stamps
            clock: Override for the current time (tests)
        """
        self.grid = grid
        self.tz = tz
        self.clock = clock

        # Lazily loaded
        self._headers: list[Any] | None = None

    # === Properties ===

    @property
    def headers(self) -> list[Any]:
        """Effective header row."""
        if self._headers is None:
            self._headers = effective_headers(self.grid)
        return self._headers

    def refresh_headers(self) -> list[Any]:
        """Re-read headers after the schema changed."""
        self._headers = None
        return self.headers

    @property
    def has_date_column(self) -> bool:
        return has_date_column(self.headers)

    def last_data_row(self) -> int:
        return self.grid.last_row()

    # === Stamps ===

    def timestamp(self) -> str:
        """Formatted "Date Modified" value for this moment."""
        now = self.clock() if self.clock else None
        return format_timestamp(self.tz, now)

    # === Column Access ===

    def column_position(self, name: Any) -> int:
        """1-based position of a header, 0 if absent."""
        return header_position(self.headers, name)

    # === Record Reads ===

    def read_record(self, row: int) -> dict[str, Any] | None:
        """Decode one row (full width)."""
        return row_to_record(self.grid.get_row(row), row, self.headers)

    def read_records(self, first_row: int, last_row: int) -> list[dict[str, Any] | None]:
        """
        Decode rows first_row..last_row (inclusive) in one read.
        Empty rows decode to None and are kept in place.
        """
        width = self.grid.last_column()
        if last_row < first_row or width < 1:
            return []
        rows = self.grid.get_values(first_row, 1, last_row - first_row + 1, width)
        return [row_to_record(cells, first_row + i, self.headers) for i, cells in enumerate(rows)]

    def data_records(self) -> list[dict[str, Any]]:
        """All non-empty data rows."""
        records = self.read_records(FIRST_DATA_ROW, self.last_data_row())
        return [r for r in records if r is not None]

    # === Row Finding ===

    def find_rows(self, col: int, target: Any, first_only: bool = True) -> list[int]:
        """
        Find rows whose cell in column col has the same string form as target.

        Args:
            col: 1-based column position
            target: Value to match
            first_only: Stop at the first match

        Returns:
            1-based row indices in sheet order
        """
        last_row = self.last_data_row()
        if col < 1 or last_row < FIRST_DATA_ROW:
            return []

        wanted = to_text(target)
        column = self.grid.get_values(FIRST_DATA_ROW, col, last_row - FIRST_DATA_ROW + 1, 1)
        matches = []
        for i, (cell,) in enumerate(column):
            if to_text(cell) == wanted:
                matches.append(FIRST_DATA_ROW + i)
                if first_only:
                    break
        return matches

    # === Response Helpers ===

    def _ok(self, status: int = 200, payload: Any = None, **extra: Any) -> dict[str, Any]:
        """
        Return success response.

        Args:
            status: Envelope status
            payload: Response data (left out when None)
            extra: Additional top-level fields

        Returns:
            Success response dict
        """
        return data(status, payload, **extra)
