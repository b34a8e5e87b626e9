"""
Pytest configuration and fixtures for Sheetlog tests.

Handlers and the dispatcher run against the in-memory grid backend;
the gspread backend is tested with MagicMock worksheets.
"""
import os
from datetime import datetime, timezone

import pytest

from core.dispatcher import Dispatcher
from core.memory_grid import MemoryWorkbook
from core.permissions import PermissionEngine

# Keep tests independent of any local .env
os.environ.setdefault("SHEETLOG_BACKEND", "memory")

STRONG_KEY = "Adm1n!Secret"
FIXED_NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
FIXED_STAMP = "01/15/2024 10:30:00"


# ========== Response Assertion Helpers ==========

class ResponseAssertions:
    """Helper class for asserting response envelopes."""

    @staticmethod
    def assert_success(response: dict, status: int | None = None):
        """Assert response is successful and return its data.

        Args:
            response: The envelope to check
            status: Optional expected status

        Returns:
            The data field (None when absent)
        """
        assert "error" not in response, f"Expected success, got: {response}"
        if status is not None:
            assert response.get("status") == status, f"Expected status={status}, got {response.get('status')}"
        return response.get("data")

    @staticmethod
    def assert_error(response: dict, code: str, status: int | None = None) -> dict:
        """Assert response is an error with given code.

        Args:
            response: The envelope to check
            code: Expected error code
            status: Optional expected status

        Returns:
            The error details
        """
        assert "error" in response, f"Expected error, got success: {response}"
        assert response["error"].get("code") == code, \
            f"Expected error code {code}, got {response['error'].get('code')}"
        if status is not None:
            assert response.get("status") == status, f"Expected status={status}, got {response.get('status')}"
        return response["error"].get("details", {})


@pytest.fixture
def assertions():
    """Fixture providing response assertion helpers."""
    return ResponseAssertions()


# ========== Grid Fixtures ==========

@pytest.fixture
def fixed_clock():
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def workbook():
    """Workbook with a 'logs' tab holding three records and an empty 'Blank' tab."""
    wb = MemoryWorkbook("test-spreadsheet-id")
    wb.add_sheet("logs", [
        ["Date Modified", "name", "score"],
        ["01/01/2024 00:00:00", "alice", 10],
        ["01/02/2024 00:00:00", "bob", 20],
        ["01/03/2024 00:00:00", "carol", 30],
    ])
    wb.add_sheet("Blank")
    return wb


@pytest.fixture
def logs(workbook):
    """The 'logs' grid of the workbook fixture."""
    return workbook.sheet_by_name("logs")


@pytest.fixture
def users_config():
    """User table covering every grant shape."""
    return [
        {"name": "admin", "key": STRONG_KEY, "permissions": "*"},
        {"name": "reader", "key": "Read3r!Only", "permissions": {"logs": ["GET", "FIND"]}},
        {"name": "weak", "key": "password", "permissions": "*"},
        {"name": "anonymous", "key": {"__unsafe": ""}, "permissions": {"Blank": "POST"}},
    ]


@pytest.fixture
def engine(users_config):
    return PermissionEngine.from_config(users_config)


@pytest.fixture
def dispatcher(workbook, engine, fixed_clock):
    """Dispatcher over the workbook fixture with a fixed clock."""
    return Dispatcher(workbook, engine, tz=timezone.utc, clock=fixed_clock)


@pytest.fixture
def call(dispatcher):
    """
    Run a request as the admin user.

    Usage:
        def test_get(call):
            response = call("GET", sheet="logs", id=2)
    """
    def _call(method: str, sheet: str = "logs", **params):
        return dispatcher.handle({"method": method, "sheet": sheet, "key": STRONG_KEY, **params})
    return _call
