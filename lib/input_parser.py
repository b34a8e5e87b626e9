"""
Input parsing and validation utilities.

Functions for normalizing request parameters that may arrive either as
JSON values (POST body) or as strings (query string).
"""
import json
import math
from typing import Any

from config import JSON_QUERY_PARAMS


def strip_quotes(s: str) -> str:
    """
    Strip outer quotes from a string.

    Args:
        s: Input string

    Returns:
        String with leading/trailing quotes removed
    """
    s = s.strip()
    if len(s) >= 2 and ((s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'"))):
        return s[1:-1]
    return s


def coerce_int(x: Any) -> int | None:
    """
    Extract an integer from a JSON number or a numeric string.

    Whole floats are accepted (2.0 -> 2); anything else gives None.
    """
    if isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    if isinstance(x, float):
        return int(x) if x.is_integer() else None
    if isinstance(x, str):
        s = strip_quotes(x)
        try:
            return int(s)
        except ValueError:
            try:
                f = float(s)
            except ValueError:
                return None
            return int(f) if f.is_integer() else None
    return None


def coerce_float(x: Any) -> float:
    """
    Numeric value of a parameter, NaN when it is not a number.
    None and "" are not numbers here.
    """
    if isinstance(x, bool) or x is None:
        return math.nan
    if isinstance(x, (int, float)):
        return float(x)
    if isinstance(x, str):
        try:
            return float(x.strip())
        except ValueError:
            return math.nan
    return math.nan


def coerce_bool(x: Any, default: bool = False) -> bool:
    """
    Extract a boolean from a JSON bool or a query-string flag.

    Args:
        x: Input value
        default: Value used when x is None or unrecognized

    Returns:
        Parsed boolean
    """
    if x is None:
        return default
    if isinstance(x, bool):
        return x
    if isinstance(x, (int, float)):
        return x != 0
    if isinstance(x, str):
        lower = x.lower().strip()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off", ""):
            return False
    return default


def as_record_list(payload: Any) -> list[dict[str, Any]]:
    """Normalize a payload to a list of objects (a single object becomes a one-item list)."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, (list, tuple)):
        return [p for p in payload if isinstance(p, dict)]
    return []


def decode_query_params(params: dict[str, Any]) -> dict[str, Any]:
    """
    Decode JSON documents carried in query-string parameters.

    Only the parameters that hold structured values (payload, ids, data,
    searchRange, where) are decoded; a value that is not valid JSON is
    left as the raw string.
    """
    out = dict(params)
    for name in JSON_QUERY_PARAMS:
        raw = out.get(name)
        if not isinstance(raw, str):
            continue
        s = raw.strip()
        if not s or s[0] not in "[{":
            continue
        try:
            out[name] = json.loads(s)
        except json.JSONDecodeError:
            continue
    return out
