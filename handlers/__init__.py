"""
Method handlers for the Sheetlog server.
Each handler works on one grid (or, for WorkbookHandler, the whole spreadsheet).
"""
from .analytics import AnalyticsHandler
from .cells import CellsHandler
from .columns import ColumnsHandler
from .rows import RowsHandler
from .workbook import WorkbookHandler

__all__ = [
    "AnalyticsHandler",
    "CellsHandler",
    "ColumnsHandler",
    "RowsHandler",
    "WorkbookHandler",
]
