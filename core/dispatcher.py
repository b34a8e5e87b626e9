"""
Method dispatcher.

Turns one request parameter map into one response envelope:

1. Parse method (default GET, case-insensitive), sheet and key
2. Authorize the caller for (sheet, method)        -> 401 unauthorized
3. Check the caller's key strength                 -> 401 weak_key
4. Resolve the sheet tab (case-insensitive)        -> 404 sheet_not_found
5. Validate the row id, when one is given          -> 400 row_index_invalid
6. Route through the Method table                  -> 404 unknown_method

No state is kept between requests.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Callable, Mapping

from config import FIRST_DATA_ROW, FORMAT_DEFAULTS, DEFAULT_PAGE_SIZE, DEFAULT_SORT_BY, DEFAULT_SORT_DIR
from core.grid import Grid, Workbook
from core.permissions import PermissionEngine
from handlers.analytics import AnalyticsHandler
from handlers.cells import CellsHandler, format_flag
from handlers.columns import ColumnsHandler
from handlers.rows import RowsHandler
from handlers.workbook import WorkbookHandler
from lib import errors
from lib.input_parser import coerce_bool, coerce_int


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    DYNAMIC_POST = "DYNAMIC_POST"
    UPSERT = "UPSERT"
    PUT = "PUT"
    DELETE = "DELETE"
    ADD_COLUMN = "ADD_COLUMN"
    EDIT_COLUMN = "EDIT_COLUMN"
    REMOVE_COLUMN = "REMOVE_COLUMN"
    FIND = "FIND"
    BULK_DELETE = "BULK_DELETE"
    PAGINATED_GET = "PAGINATED_GET"
    EXPORT = "EXPORT"
    AGGREGATE = "AGGREGATE"
    BATCH_UPDATE = "BATCH_UPDATE"
    GET_ROWS = "GET_ROWS"
    GET_COLUMNS = "GET_COLUMNS"
    GET_ALL_CELLS = "GET_ALL_CELLS"
    RANGE_UPDATE = "RANGE_UPDATE"
    GET_RANGE = "GET_RANGE"
    GET_DATA_BLOCK = "GET_DATA_BLOCK"
    GET_SHEETS = "GET_SHEETS"
    GET_CSV = "GET_CSV"


# Methods whose `id` parameter is a row number rather than a lookup value
ROW_ADDRESSED = frozenset({Method.GET, Method.PUT, Method.DELETE})


@dataclass(frozen=True)
class Request:
    method: str
    sheet: str
    key: str
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> Request:
        method = params.get("method") or "GET"
        sheet = params.get("sheet") or ""
        key = params.get("key") or ""
        return cls(
            method=str(method).upper(),
            sheet=str(sheet),
            key=str(key),
            params=params,
        )

    def raw_row_id(self) -> Any:
        """The row id as sent: `_id`, or `id` for row-addressed methods."""
        if self.params.get("_id") not in (None, ""):
            return self.params["_id"]
        if self.method in ROW_ADDRESSED and self.params.get("id") not in (None, ""):
            return self.params["id"]
        return None


@dataclass
class Call:
    """Everything a route needs for one request."""
    workbook: Workbook
    grid: Grid
    params: Mapping[str, Any]
    row_id: int | None
    tz: tzinfo | None = None
    clock: Callable[[], datetime] | None = None

    def get(self, name: str, default: Any = None) -> Any:
        value = self.params.get(name)
        return default if value is None else value

    def flag(self, name: str, default: bool = False) -> bool:
        return coerce_bool(self.params.get(name), default)

    def rows(self) -> RowsHandler:
        return RowsHandler(self.grid, self.tz, self.clock)

    def columns(self) -> ColumnsHandler:
        return ColumnsHandler(self.grid, self.tz, self.clock)

    def analytics(self) -> AnalyticsHandler:
        return AnalyticsHandler(self.grid, self.tz, self.clock)

    def cells(self) -> CellsHandler:
        return CellsHandler(self.grid, self.tz, self.clock)


# === Routes ===

def _get(call: Call) -> dict[str, Any]:
    if call.row_id is not None:
        return call.rows().get(call.row_id)
    return call.rows().get_many(
        limit=call.get("limit"),
        start_id=call.get("start_id"),
        order=call.get("order"),
    )


def _find(call: Call) -> dict[str, Any]:
    return call.rows().find(
        call.get("idColumn", ""),
        call.get("id", ""),
        return_all=call.flag("returnAllMatches"),
    )


def _paginated_get(call: Call) -> dict[str, Any]:
    return call.rows().paginated_get(
        cursor=call.get("cursor"),
        limit=call.get("limit", DEFAULT_PAGE_SIZE),
        sort_by=call.get("sortBy", DEFAULT_SORT_BY),
        sort_dir=call.get("sortDir", DEFAULT_SORT_DIR),
    )


def _get_columns(call: Call) -> dict[str, Any]:
    return call.cells().get_columns(
        call.get("startColumn"),
        call.get("endColumn"),
        include_formulas=call.flag("includeFormulas"),
        include_formatting=call.flag("includeFormatting"),
    )


def _get_all_cells(call: Call) -> dict[str, Any]:
    attributes = {
        key: call.flag(format_flag(key), True)
        for key in FORMAT_DEFAULTS
    }
    return call.cells().get_all_cells(
        include_formulas=call.flag("includeFormulas", True),
        include_formatting=call.flag("includeFormatting", True),
        attributes=attributes,
    )


def _get_range(call: Call) -> dict[str, Any]:
    return call.cells().get_range(
        call.get("startRow"),
        call.get("startCol"),
        stop_at_empty_row=call.flag("stopAtEmptyRow"),
        stop_at_empty_column=call.flag("stopAtEmptyColumn"),
        skip_empty_rows=call.flag("skipEmptyRows"),
        skip_empty_columns=call.flag("skipEmptyColumns"),
        include_formulas=call.flag("includeFormulas"),
    )


def _get_csv(call: Call) -> dict[str, Any]:
    return WorkbookHandler(call.workbook).get_csv(call.get("sheetName") or call.grid.name)


ROUTES: dict[Method, Callable[[Call], dict[str, Any]]] = {
    Method.GET: _get,
    Method.POST: lambda call: call.rows().post(call.get("payload")),
    Method.DYNAMIC_POST: lambda call: call.rows().dynamic_post(call.get("payload")),
    Method.UPSERT: lambda call: call.rows().upsert(
        call.get("idColumn", ""), call.get("id", ""), call.get("payload")
    ),
    Method.PUT: lambda call: call.rows().put(call.row_id, call.get("payload")),
    Method.DELETE: lambda call: call.rows().delete(call.row_id),
    Method.ADD_COLUMN: lambda call: call.columns().add(call.get("columnName")),
    Method.EDIT_COLUMN: lambda call: call.columns().rename(
        call.get("oldColumnName"), call.get("newColumnName")
    ),
    Method.REMOVE_COLUMN: lambda call: call.columns().remove(call.get("columnName")),
    Method.FIND: _find,
    Method.BULK_DELETE: lambda call: call.rows().bulk_delete(call.get("ids")),
    Method.PAGINATED_GET: _paginated_get,
    Method.EXPORT: lambda call: call.analytics().export(call.get("format", "json")),
    Method.AGGREGATE: lambda call: call.analytics().aggregate(
        call.get("column"), call.get("operation"), call.get("where")
    ),
    Method.BATCH_UPDATE: lambda call: call.rows().batch_update(call.get("payload")),
    Method.GET_ROWS: lambda call: call.cells().get_rows(
        call.get("startRow"), call.get("endRow"), include_formulas=call.flag("includeFormulas")
    ),
    Method.GET_COLUMNS: _get_columns,
    Method.GET_ALL_CELLS: _get_all_cells,
    Method.RANGE_UPDATE: lambda call: call.cells().range_update(
        call.get("startRow"), call.get("startCol"), call.get("data")
    ),
    Method.GET_RANGE: _get_range,
    Method.GET_DATA_BLOCK: lambda call: call.cells().get_data_block(call.get("searchRange")),
    Method.GET_SHEETS: lambda call: WorkbookHandler(call.workbook).get_sheets(),
    Method.GET_CSV: _get_csv,
}

_unrouted = [m.value for m in Method if m not in ROUTES]
if _unrouted:
    raise RuntimeError(f"Methods without a route: {', '.join(_unrouted)}")


class Dispatcher:
    """
    Runs requests against one workbook under one permission table.

    Example:
        dispatcher = Dispatcher(MemoryWorkbook(), PermissionEngine.from_config(users))
        dispatcher.handle({"method": "GET", "sheet": "logs", "key": "..."})
    """

    def __init__(
        self,
        workbook: Workbook,
        engine: PermissionEngine,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.workbook = workbook
        self.engine = engine
        self.tz = tz
        self.clock = clock

    def handle(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """
        Execute one request.

        Args:
            params: Request parameters (query string or JSON body)

        Returns:
            Response envelope; domain failures are error envelopes
        """
        request = Request.parse(params)

        if not self.engine.authorize(request.key, request.sheet, request.method):
            return errors.unauthorized()
        if not self.engine.is_strong_credential(request.key):
            return errors.weak_key()

        grid = self.workbook.sheet_by_name(request.sheet)
        if grid is None:
            return errors.sheet_not_found(request.sheet)

        raw_row_id = request.raw_row_id()
        row_id = None
        if raw_row_id is not None:
            row_id = coerce_int(raw_row_id)
            if row_id is None or row_id < FIRST_DATA_ROW:
                return errors.row_index_invalid(raw_row_id)

        try:
            method = Method(request.method)
        except ValueError:
            return errors.unknown_method(request.method)

        call = Call(
            workbook=self.workbook,
            grid=grid,
            params=request.params,
            row_id=row_id,
            tz=self.tz,
            clock=self.clock,
        )
        return ROUTES[method](call)
