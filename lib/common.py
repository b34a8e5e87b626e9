"""
Common utility functions.
Envelope builders, cell helpers and the stderr logger.
"""
import sys
from datetime import datetime, tzinfo
from typing import Any

from config import TIMESTAMP_FORMAT
from lib.types import ErrorResponse, Response


def log(*a: Any) -> None:
    print(*a, file=sys.stderr, flush=True)


def is_empty(value: Any) -> bool:
    """A cell is empty when it holds None or the empty string."""
    return value is None or value == ""


def to_text(value: Any) -> str:
    """
    String form of a cell value used for id comparisons.

    Whole floats drop their fractional part (10.0 -> "10") and booleans
    render lowercase, so numbers typed into a sheet compare equal to the
    ids callers send.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_number(value: Any) -> bool:
    """True for int/float cell values (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_timestamp(tz: tzinfo | None = None, now: datetime | None = None) -> str:
    """Format the "Date Modified" stamp (MM/dd/yyyy HH:mm:ss)."""
    if now is None:
        now = datetime.now(tz)
    elif tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    return now.strftime(TIMESTAMP_FORMAT)


def data(status: int, payload: Any = None, **extra: Any) -> Response:
    """Create a successful response. A None payload is left out."""
    result: dict[str, Any] = {"status": status}
    if payload is not None:
        result["data"] = payload
    result.update(extra)
    return result


def error(status: int, code: str, details: dict[str, Any] | None = None) -> ErrorResponse:
    """Create an error response."""
    return {"status": status, "error": {"code": getattr(code, "value", code), "details": details or {}}}
