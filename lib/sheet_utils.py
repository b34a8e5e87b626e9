"""
Sheet utility functions.
Column letter arithmetic, A1 notation and header helpers.
"""
import re
from typing import Any

from lib.common import is_empty


def col_letter_to_index(letter: str) -> int:
    """
    Convert column letter(s) to a 1-based index.
    A -> 1, B -> 2, ..., Z -> 26, AA -> 27, etc.
    Base 26 without a zero digit.
    """
    if not letter or not letter.isalpha() or not letter.isascii():
        raise ValueError(f"Invalid column letter: {letter!r}")
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result


def index_to_col_letter(index: int) -> str:
    """
    Convert a 1-based index to column letter(s).
    1 -> A, 2 -> B, ..., 26 -> Z, 27 -> AA, etc.
    """
    if index < 1:
        raise ValueError(f"Column index must be >= 1: {index}")
    result = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        result = chr(ord("A") + remainder) + result
    return result


def column_index(identifier: Any) -> int:
    """
    Resolve a column identifier to a 1-based index.

    Accepts a number (3), a numeric string from a query string ("3")
    or a letter label ("C", "AA").

    Raises:
        ValueError: For anything else
    """
    if isinstance(identifier, bool):
        raise ValueError("Invalid column identifier")
    if isinstance(identifier, int):
        return identifier
    if isinstance(identifier, float) and identifier.is_integer():
        return int(identifier)
    if isinstance(identifier, str):
        s = identifier.strip()
        if re.fullmatch(r"-?\d+", s):
            return int(s)
        return col_letter_to_index(s)
    raise ValueError("Invalid column identifier")


def a1_range(row: int, col: int, num_rows: int = 1, num_cols: int = 1) -> str:
    """
    Build A1 notation for a rectangle.
    a1_range(2, 1, 3, 2) -> "A2:B4"
    """
    start = f"{index_to_col_letter(col)}{row}"
    if num_rows == 1 and num_cols == 1:
        return start
    end = f"{index_to_col_letter(col + num_cols - 1)}{row + num_rows - 1}"
    return f"{start}:{end}"


def trim_trailing_empty(cells: list[Any]) -> list[Any]:
    """Drop the trailing run of empty cells. Embedded empties are kept."""
    for i in range(len(cells) - 1, -1, -1):
        if not is_empty(cells[i]):
            return list(cells[: i + 1])
    return []


def header_position(headers: list[Any], name: Any) -> int:
    """
    Find the 1-based position of an exact header name.
    Returns 0 if not found.
    """
    for i, h in enumerate(headers, 1):
        if h == name:
            return i
    return 0


def pad_rows(values: list[list[Any]], num_rows: int, num_cols: int, fill: Any = "") -> list[list[Any]]:
    """Pad (or cut) a ragged 2-D list to exactly num_rows x num_cols."""
    out = []
    for r in range(num_rows):
        row = list(values[r]) if r < len(values) else []
        row = row[:num_cols] + [fill] * (num_cols - len(row))
        out.append(row)
    return out


def extract_spreadsheet_id(url: Any) -> str | None:
    """
    Extract spreadsheet ID from a Google Sheets URL or raw ID string.

    Args:
        url: A Google Sheets URL or raw spreadsheet ID

    Returns:
        The spreadsheet ID if found (at least 25 chars), None otherwise
    """
    if not url:
        return None
    match = re.search(r"[-\w]{25,}", str(url))
    return match.group(0) if match else None
