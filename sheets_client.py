"""
Google Sheets backend using gspread.
Provides Service Account authentication and the Grid/Workbook
implementations over a single spreadsheet.
"""
import json
from typing import Any

import google.auth.exceptions
import gspread
import httpx
import requests
from google.auth.transport.requests import Request
from google.oauth2.service_account import Credentials
from gspread.utils import DateTimeOption, ValueInputOption, ValueRenderOption

from config import CSV_FETCH_TIMEOUT, FORMAT_DEFAULTS, SCOPES
from core.grid import Grid, GridError, Workbook, check_range, check_rectangular
from lib.common import log
from lib.sheet_utils import a1_range, extract_spreadsheet_id, pad_rows

# Raised by gspread calls: API replies, transport failures and token refresh
BACKEND_ERRORS = (
    gspread.exceptions.APIError,
    requests.exceptions.RequestException,
    google.auth.exceptions.GoogleAuthError,
)


class SheetsClient:
    """Wrapper around gspread for Google Sheets API access."""

    def __init__(self, credentials_json: str | dict):
        """
        Initialize the client with Service Account credentials.

        Args:
            credentials_json: Either a JSON string or dict containing
                             the Service Account credentials.
        """
        if isinstance(credentials_json, str):
            credentials_json = json.loads(credentials_json)
        self.creds = Credentials.from_service_account_info(credentials_json, scopes=SCOPES)
        self.gc = gspread.authorize(self.creds)
        self._spreadsheet_cache: dict[str, gspread.Spreadsheet] = {}

    def open_by_id(self, spreadsheet_id: str) -> gspread.Spreadsheet:
        """Open a spreadsheet by ID (or URL) with caching."""
        key = extract_spreadsheet_id(spreadsheet_id) or spreadsheet_id
        if key not in self._spreadsheet_cache:
            self._spreadsheet_cache[key] = self.gc.open_by_key(key)
        return self._spreadsheet_cache[key]

    def access_token(self) -> str:
        """Current OAuth access token, refreshed when expired."""
        if not self.creds.valid:
            self.creds.refresh(Request())
        return self.creds.token

    def workbook(self, spreadsheet_id: str) -> "SheetsWorkbook":
        return SheetsWorkbook(self, self.open_by_id(spreadsheet_id))

    def clear_cache(self, spreadsheet_id: str | None = None) -> None:
        """Clear the spreadsheet cache (useful after modifications)."""
        if spreadsheet_id:
            self._spreadsheet_cache.pop(spreadsheet_id, None)
        else:
            self._spreadsheet_cache.clear()


def _color_to_hex(color: dict[str, Any] | None, default: str) -> str:
    """Convert a Sheets API {red, green, blue} (0..1 floats) to #rrggbb."""
    if not color:
        return default
    parts = [round(float(color.get(c, 0)) * 255) for c in ("red", "green", "blue")]
    return "#" + "".join(f"{p:02x}" for p in parts)


def _cell_format(cell: dict[str, Any]) -> dict[str, Any]:
    """Map one CellData.effectiveFormat to the GET_ALL_CELLS attribute set."""
    fmt = cell.get("effectiveFormat") or {}
    text = fmt.get("textFormat") or {}
    number = fmt.get("numberFormat") or {}
    horizontal = fmt.get("horizontalAlignment")
    vertical = fmt.get("verticalAlignment")
    return {
        "backgrounds": _color_to_hex(fmt.get("backgroundColor"), FORMAT_DEFAULTS["backgrounds"]),
        "fontColors": _color_to_hex(text.get("foregroundColor"), FORMAT_DEFAULTS["fontColors"]),
        "numberFormats": number.get("pattern", FORMAT_DEFAULTS["numberFormats"]),
        "fontFamilies": text.get("fontFamily", FORMAT_DEFAULTS["fontFamilies"]),
        "fontSizes": text.get("fontSize", FORMAT_DEFAULTS["fontSizes"]),
        "fontStyles": "italic" if text.get("italic") else "normal",
        "horizontalAlignments": horizontal.lower() if horizontal else FORMAT_DEFAULTS["horizontalAlignments"],
        "verticalAlignments": vertical.lower() if vertical else FORMAT_DEFAULTS["verticalAlignments"],
        "wraps": fmt.get("wrapStrategy") == "WRAP",
    }


class SheetsGrid(Grid):
    """
    A worksheet as a Grid.

    The unformatted values of the whole sheet are read once and reused
    until the next write, so bounds and row reads cost a single API call
    per request. Date cells come back as their displayed text.
    """

    def __init__(self, worksheet: gspread.Worksheet) -> None:
        self.ws = worksheet
        self.name = worksheet.title
        self.sheet_id = worksheet.id
        self.index = worksheet.index
        self.hidden = bool(worksheet.isSheetHidden)
        self._values: list[list[Any]] | None = None

    # === Cache ===

    def _all_values(self) -> list[list[Any]]:
        if self._values is None:
            try:
                self._values = self.ws.get_all_values(
                    value_render_option=ValueRenderOption.unformatted,
                    date_time_render_option=DateTimeOption.formatted_string,
                )
            except BACKEND_ERRORS as e:
                raise GridError(str(e)) from e
        return self._values

    def _invalidate(self) -> None:
        self._values = None

    # === Grid interface ===

    def last_row(self) -> int:
        values = self._all_values()
        for r in range(len(values) - 1, -1, -1):
            if any(c not in ("", None) for c in values[r]):
                return r + 1
        return 0

    def last_column(self) -> int:
        last = 0
        for row in self._all_values():
            for c in range(len(row) - 1, last - 1, -1):
                if row[c] not in ("", None):
                    last = c + 1
                    break
        return last

    def get_values(self, row: int, col: int, num_rows: int, num_cols: int) -> list[list[Any]]:
        check_range(row, col, num_rows, num_cols)
        values = self._all_values()
        window = [r[col - 1 : col - 1 + num_cols] for r in values[row - 1 : row - 1 + num_rows]]
        return pad_rows(window, num_rows, num_cols)

    def get_formulas(self, row: int, col: int, num_rows: int, num_cols: int) -> list[list[str]]:
        check_range(row, col, num_rows, num_cols)
        try:
            raw = self.ws.get(a1_range(row, col, num_rows, num_cols), value_render_option=ValueRenderOption.formula)
        except BACKEND_ERRORS as e:
            raise GridError(str(e)) from e
        cells = pad_rows([list(r) for r in raw], num_rows, num_cols)
        return [[c if isinstance(c, str) and c.startswith("=") else "" for c in r] for r in cells]

    def get_formatting(self, row: int, col: int, num_rows: int, num_cols: int) -> dict[str, list[list[Any]]]:
        check_range(row, col, num_rows, num_cols)
        title = self.name.replace("'", "''")
        params = {
            "includeGridData": "true",
            "ranges": f"'{title}'!{a1_range(row, col, num_rows, num_cols)}",
            "fields": "sheets(data(rowData(values(effectiveFormat))))",
        }
        try:
            meta = self.ws.spreadsheet.fetch_sheet_metadata(params=params)
        except BACKEND_ERRORS as e:
            raise GridError(str(e)) from e

        sheets = meta.get("sheets") or [{}]
        data = (sheets[0].get("data") or [{}])[0]
        row_data = data.get("rowData") or []
        cells = pad_rows(
            [[_cell_format(v) for v in (rd.get("values") or [])] for rd in row_data],
            num_rows,
            num_cols,
            fill=None,
        )
        default = _cell_format({})
        return {
            key: [[(c or default)[key] for c in r] for r in cells]
            for key in FORMAT_DEFAULTS
        }

    def set_values(self, row: int, col: int, values: list[list[Any]]) -> None:
        num_rows, num_cols = check_rectangular(values)
        check_range(row, col, num_rows, num_cols)
        try:
            if row + num_rows - 1 > self.ws.row_count:
                self.ws.add_rows(row + num_rows - 1 - self.ws.row_count)
            if col + num_cols - 1 > self.ws.col_count:
                self.ws.add_cols(col + num_cols - 1 - self.ws.col_count)
            self.ws.update(
                values=values,
                range_name=a1_range(row, col, num_rows, num_cols),
                value_input_option=ValueInputOption.user_entered,
            )
        except BACKEND_ERRORS as e:
            raise GridError(str(e)) from e
        finally:
            self._invalidate()

    def insert_column_before(self, col: int) -> None:
        try:
            self.ws.insert_cols([[]], col=col)
        except BACKEND_ERRORS as e:
            raise GridError(str(e)) from e
        finally:
            self._invalidate()

    def delete_column(self, col: int) -> None:
        try:
            self.ws.delete_columns(col)
        except BACKEND_ERRORS as e:
            raise GridError(str(e)) from e
        finally:
            self._invalidate()


class SheetsWorkbook(Workbook):
    """A Google spreadsheet as a Workbook."""

    def __init__(self, client: SheetsClient, spreadsheet: gspread.Spreadsheet) -> None:
        self.client = client
        self.spreadsheet = spreadsheet
        self.id = spreadsheet.id

    def sheets(self) -> list[Grid]:
        try:
            return [SheetsGrid(ws) for ws in self.spreadsheet.worksheets()]
        except BACKEND_ERRORS as e:
            raise GridError(str(e)) from e

    def fetch_csv(self, grid: Grid) -> tuple[int, str]:
        url = self.csv_url(grid)
        log("CSV_EXPORT GET", url)
        try:
            response = httpx.get(
                url,
                headers={"Authorization": f"Bearer {self.client.access_token()}"},
                follow_redirects=True,
                timeout=CSV_FETCH_TIMEOUT,
            )
        except (httpx.HTTPError, *BACKEND_ERRORS) as e:
            raise GridError(f"CSV export failed: {e}") from e
        return response.status_code, response.text


# Singleton instance for the application
_sheets_client: SheetsClient | None = None


def get_sheets_client() -> SheetsClient:
    """
    Get the global SheetsClient instance.
    Initializes from environment variables on first call.
    """
    global _sheets_client
    if _sheets_client is None:
        from env_loader import get_google_credentials
        credentials = get_google_credentials()
        _sheets_client = SheetsClient(credentials)
    return _sheets_client


def reset_sheets_client() -> None:
    """Reset the global client (useful for testing)."""
    global _sheets_client
    _sheets_client = None
