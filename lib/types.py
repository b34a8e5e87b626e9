"""
Type definitions for the Sheetlog server.
Provides type safety for envelopes, records and grid data.
"""
from typing import TypedDict, Any


class ErrorDetail(TypedDict):
    """Error detail structure."""
    code: str
    details: dict[str, Any]


class SuccessResponse(TypedDict, total=False):
    """Successful response envelope. Extra keys (next, cursor, hasMore, format) may follow."""
    status: int
    data: Any


class ErrorResponse(TypedDict):
    """Error response envelope."""
    status: int
    error: ErrorDetail


# Union type for all responses
Response = SuccessResponse | ErrorResponse


class RangeBounds(TypedDict):
    """Resolved bounding range of a GET_RANGE / GET_DATA_BLOCK read."""
    startRow: int
    startCol: int
    endRow: int
    endCol: int
    numRows: int
    numCols: int


# Grid data types
Cell = str | int | float | bool | None
GridRow = list[Cell]
GridValues = list[GridRow]

# Header-keyed view of one data row, tagged with _id
Record = dict[str, Any]
