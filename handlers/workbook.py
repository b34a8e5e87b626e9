"""
Workbook handler.
Spreadsheet-level operations that are not bound to one tab.
"""
from typing import Any

from core.grid import GridError, Workbook
from lib import errors
from lib.common import data, log


class WorkbookHandler:
    """Handler for GET_SHEETS and GET_CSV."""

    def __init__(self, workbook: Workbook) -> None:
        self.workbook = workbook

    def get_sheets(self) -> dict[str, Any]:
        """Describe every tab: name, gid, 1-based position, visibility and URLs."""
        return data(200, [
            {
                "name": grid.name,
                "id": grid.sheet_id,
                "index": grid.index + 1,
                "isHidden": grid.hidden,
                "csvUrl": self.workbook.csv_url(grid),
                "sheetUrl": self.workbook.sheet_url(grid),
            }
            for grid in self.workbook.sheets()
        ])

    def get_csv(self, sheet_name: Any) -> dict[str, Any]:
        """
        Raw CSV export of a tab.

        A non-200 export response is passed through as csv_fetch_failed
        with the same status; any other failure is csv_processing_failed.
        """
        try:
            grid = self.workbook.sheet_by_name(sheet_name if isinstance(sheet_name, str) else "")
            if grid is None:
                return errors.sheet_not_found(sheet_name)

            status, text = self.workbook.fetch_csv(grid)
            if status != 200:
                return errors.csv_fetch_failed(status, text)
            return data(200, text)
        except (GridError, OSError, ValueError) as e:
            log("GET_CSV failed:", sheet_name, e)
            return errors.csv_processing_failed(str(e), sheet_name)
