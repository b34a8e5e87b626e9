"""
Tests for WorkbookHandler (GET_SHEETS, GET_CSV).
"""
from unittest.mock import MagicMock

import pytest

from core.grid import GridError
from core.memory_grid import MemoryWorkbook
from handlers.workbook import WorkbookHandler


@pytest.fixture
def book():
    wb = MemoryWorkbook("abc123")
    wb.add_sheet("Logs", [["name"], ["alice"]], sheet_id=101)
    wb.add_sheet("Archive", sheet_id=202, hidden=True)
    return wb


class TestGetSheets:
    """Tests for get_sheets method."""

    def test_lists_tabs(self, book, assertions):
        sheets = assertions.assert_success(WorkbookHandler(book).get_sheets(), 200)
        assert sheets == [
            {
                "name": "Logs",
                "id": 101,
                "index": 1,
                "isHidden": False,
                "csvUrl": "https://docs.google.com/spreadsheets/d/abc123/export?format=csv&gid=101",
                "sheetUrl": "https://docs.google.com/spreadsheets/d/abc123/edit#gid=101",
            },
            {
                "name": "Archive",
                "id": 202,
                "index": 2,
                "isHidden": True,
                "csvUrl": "https://docs.google.com/spreadsheets/d/abc123/export?format=csv&gid=202",
                "sheetUrl": "https://docs.google.com/spreadsheets/d/abc123/edit#gid=202",
            },
        ]


class TestGetCsv:
    """Tests for get_csv method."""

    def test_csv_text(self, book, assertions):
        text = assertions.assert_success(WorkbookHandler(book).get_csv("Logs"), 200)
        assert text == "name\nalice"

    def test_sheet_not_found(self, book, assertions):
        details = assertions.assert_error(WorkbookHandler(book).get_csv("Nope"), "sheet_not_found", 404)
        assert details == {"sheet": "Nope"}

    def test_fetch_status_passed_through(self, book, assertions):
        book.fetch_csv = MagicMock(return_value=(403, "Forbidden"))
        details = assertions.assert_error(WorkbookHandler(book).get_csv("Logs"), "csv_fetch_failed", 403)
        assert details == {"message": "Forbidden"}

    def test_fetch_error(self, book, assertions):
        book.fetch_csv = MagicMock(side_effect=GridError("connection reset"))
        details = assertions.assert_error(WorkbookHandler(book).get_csv("Logs"), "csv_processing_failed", 500)
        assert details == {"message": "connection reset", "sheet": "Logs"}
