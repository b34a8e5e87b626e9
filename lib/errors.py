"""
Standardized error handling for the Sheetlog server.
Provides the error code taxonomy and one response helper per code.
"""
from enum import Enum
from typing import Any

from config import WEAK_KEY_MESSAGE
from lib.common import error


class ErrorCode(str, Enum):
    """Error codes surfaced in response envelopes."""
    # Authorization
    UNAUTHORIZED = "unauthorized"
    WEAK_KEY = "weak_key"
    # Resource resolution
    SHEET_NOT_FOUND = "sheet_not_found"
    ROW_NOT_FOUND = "row_not_found"
    ID_COLUMN_NOT_FOUND = "id_column_not_found"
    COLUMN_NOT_FOUND = "column_not_found"
    SORT_COLUMN_NOT_FOUND = "sort_column_not_found"
    START_ID_OUT_OF_RANGE = "start_id_out_of_range"
    # Validation
    ROW_INDEX_INVALID = "row_index_invalid"
    ROW_ID_MISSING = "row_id_missing"
    COLUMN_NAME_MISSING = "column_name_missing"
    INVALID_LIMIT = "invalid_limit"
    INVALID_CURSOR = "invalid_cursor"
    INVALID_IDS = "invalid_ids"
    INVALID_DATA = "invalid_data"
    INVALID_PAYLOAD = "invalid_payload"
    INVALID_FORMAT = "invalid_format"
    INVALID_OPERATION = "invalid_operation"
    UNKNOWN_METHOD = "unknown_method"
    INVALID_POST_PAYLOAD = "invalid_post_payload"
    # Query-shaped not-found
    NO_MATCHES_FOUND = "no_matches_found"
    # Infrastructure
    UPDATE_FAILED = "update_failed"
    CSV_FETCH_FAILED = "csv_fetch_failed"
    CSV_PROCESSING_FAILED = "csv_processing_failed"
    INTERNAL_ERROR = "internal_error"


def unauthorized() -> dict[str, Any]:
    return error(401, ErrorCode.UNAUTHORIZED, {})


def weak_key() -> dict[str, Any]:
    return error(401, ErrorCode.WEAK_KEY, {"message": WEAK_KEY_MESSAGE})


def sheet_not_found(sheet: str) -> dict[str, Any]:
    return error(404, ErrorCode.SHEET_NOT_FOUND, {"sheet": sheet})


def row_not_found(row_id: int) -> dict[str, Any]:
    return error(404, ErrorCode.ROW_NOT_FOUND, {"_id": row_id})


def id_column_not_found(id_column: str) -> dict[str, Any]:
    return error(400, ErrorCode.ID_COLUMN_NOT_FOUND, {"idColumn": id_column})


def column_not_found(status: int = 400, **details: Any) -> dict[str, Any]:
    """Aggregation reports 400, header edits report 404."""
    return error(status, ErrorCode.COLUMN_NOT_FOUND, details)


def sort_column_not_found(sort_by: str) -> dict[str, Any]:
    return error(400, ErrorCode.SORT_COLUMN_NOT_FOUND, {"sortBy": sort_by})


def start_id_out_of_range(start_id: Any) -> dict[str, Any]:
    return error(404, ErrorCode.START_ID_OUT_OF_RANGE, {"start_id": start_id})


def row_index_invalid(row_id: Any) -> dict[str, Any]:
    return error(400, ErrorCode.ROW_INDEX_INVALID, {"_id": row_id})


def row_id_missing() -> dict[str, Any]:
    return error(400, ErrorCode.ROW_ID_MISSING, {})


def column_name_missing() -> dict[str, Any]:
    return error(400, ErrorCode.COLUMN_NAME_MISSING, {})


def invalid_limit(limit: Any) -> dict[str, Any]:
    return error(404, ErrorCode.INVALID_LIMIT, {"limit": limit})


def invalid_cursor(cursor: Any) -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_CURSOR, {"cursor": cursor})


def invalid_ids() -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_IDS, {"message": "ids must be an array"})


def invalid_data(message: str = "Data must be a 2D array") -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_DATA, {"message": message})


def invalid_payload(message: str) -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_PAYLOAD, {"message": message})


def invalid_format(fmt: Any) -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_FORMAT, {"format": fmt})


def invalid_operation(operation: Any) -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_OPERATION, {"operation": operation})


def unknown_method(method: str) -> dict[str, Any]:
    return error(404, ErrorCode.UNKNOWN_METHOD, {"method": method})


def invalid_post_payload(payload: str, content_type: str | None) -> dict[str, Any]:
    return error(400, ErrorCode.INVALID_POST_PAYLOAD, {"payload": payload, "type": content_type})


def no_matches_found() -> dict[str, Any]:
    return error(404, ErrorCode.NO_MATCHES_FOUND, {})


def update_failed(message: str, range_text: str) -> dict[str, Any]:
    return error(500, ErrorCode.UPDATE_FAILED, {"message": message, "range": range_text})


def csv_fetch_failed(status: int, message: str) -> dict[str, Any]:
    return error(status, ErrorCode.CSV_FETCH_FAILED, {"message": message})


def csv_processing_failed(message: str, sheet: str) -> dict[str, Any]:
    return error(500, ErrorCode.CSV_PROCESSING_FAILED, {"message": message, "sheet": sheet})


def internal_error(message: str) -> dict[str, Any]:
    return error(500, ErrorCode.INTERNAL_ERROR, {"message": message})
