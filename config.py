"""
Configuration constants for the Sheetlog server.
Centralizes header names, timestamp format, URL templates and defaults.
"""
from typing import Final

# Reserved first column maintained by write-oriented methods
DATE_MODIFIED_HEADER: Final[str] = "Date Modified"

# MM/dd/yyyy HH:mm:ss
TIMESTAMP_FORMAT: Final[str] = "%m/%d/%Y %H:%M:%S"

# Row 1 holds headers; data starts here
FIRST_DATA_ROW: Final[int] = 2

# PAGINATED_GET defaults
DEFAULT_PAGE_SIZE: Final[int] = 10
DEFAULT_SORT_BY: Final[str] = DATE_MODIFIED_HEADER
DEFAULT_SORT_DIR: Final[str] = "desc"

# Wildcard permission and fallback sheet key
ALL: Final[str] = "*"
ALL_SHEETS_KEY: Final[str] = "ALL"

# Key strength policy
MIN_KEY_LENGTH: Final[int] = 8
WEAK_KEY_MESSAGE: Final[str] = (
    "Authentication key should be at least 8 characters long "
    "and contain at least one lower case, upper case, number and special character. "
    "Update your password or mark it as UNSAFE. Refer to the documentation for details."
)

# Used when no user table is configured. Prototyping only.
DEFAULT_USERS: Final[list[dict]] = [
    {"name": "anonymous", "key": {"__unsafe": ""}, "permissions": ALL},
]

# Google Sheets endpoints
SCOPES: Final[list[str]] = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
]
CSV_EXPORT_URL: Final[str] = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=csv&gid={gid}"
SHEET_EDIT_URL: Final[str] = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit#gid={gid}"
CSV_FETCH_TIMEOUT: Final[int] = 30

# Formatting attributes returned by GET_ALL_CELLS (response key -> default cell value)
FORMAT_DEFAULTS: Final[dict[str, object]] = {
    "backgrounds": "#ffffff",
    "fontColors": "#000000",
    "numberFormats": "0.###############",
    "fontFamilies": "Arial",
    "fontSizes": 10,
    "fontStyles": "normal",
    "horizontalAlignments": "general",
    "verticalAlignments": "bottom",
    "wraps": False,
}

# Subset returned by GET_COLUMNS when includeFormatting is set
COLUMN_FORMAT_KEYS: Final[list[str]] = ["backgrounds", "fontColors", "numberFormats"]

# Query-string parameters that carry JSON documents
JSON_QUERY_PARAMS: Final[tuple[str, ...]] = ("payload", "ids", "data", "searchRange", "where")
