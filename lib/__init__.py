"""
Utility libraries for the Sheetlog server.
Pure functions shared by the core and the handlers.
"""
from .common import data, error, is_empty, is_number, log, to_text
from .sheet_utils import a1_range, col_letter_to_index, column_index, index_to_col_letter
from .types import (
    Response,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
    RangeBounds,
    GridRow,
    GridValues,
    Record,
)

__all__ = [
    # Response types
    "Response",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
    "RangeBounds",
    "GridRow",
    "GridValues",
    "Record",
    # Functions
    "data",
    "error",
    "is_empty",
    "is_number",
    "log",
    "to_text",
    "a1_range",
    "col_letter_to_index",
    "column_index",
    "index_to_col_letter",
]
