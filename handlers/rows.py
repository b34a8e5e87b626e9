"""
Row handler.

Record-level operations on one sheet tab: reads (single, windowed,
paginated), inserts (fixed and dynamic schema), upsert, find, updates
and deletes.
"""
from __future__ import annotations

import math
from typing import Any

from config import DEFAULT_PAGE_SIZE, DEFAULT_SORT_BY, DEFAULT_SORT_DIR, FIRST_DATA_ROW
from core.base_handler import BaseHandler
from core.row_codec import encode_value, record_to_row
from core.schema import grow_schema
from lib import errors
from lib.input_parser import as_record_list, coerce_float, coerce_int


class RowsHandler(BaseHandler):
    """
    Handler for record operations.

    Row ids are 1-based sheet row numbers; row 1 (headers) is never
    addressed as data. Write methods put a fresh "Date Modified" stamp
    in column 1.
    """

    # === Reads ===

    def get(self, row_id: int) -> dict[str, Any]:
        """Single record by row id."""
        record = self.read_record(row_id)
        if record is None:
            return errors.row_not_found(row_id)
        return self._ok(200, record)

    def get_many(
        self,
        limit: Any = None,
        start_id: Any = None,
        order: Any = None,
    ) -> dict[str, Any]:
        """
        A window of records.

        Args:
            limit: Window size (default: every data row)
            start_id: Row anchoring the window; its first row when
                      ascending, its last row when descending
            order: "desc" scans from the bottom; anything else ascends

        Returns:
            Records in scan order plus a `next` row id when more rows
            lie beyond the window in the scan direction
        """
        first_row = FIRST_DATA_ROW
        last_row = self.last_data_row()
        total = max(last_row - first_row + 1, 0)

        if limit is None:
            size = float(total)
        else:
            size = coerce_float(limit)
            if math.isnan(size) or size < 0:
                return errors.invalid_limit(limit)
        size_rows = total if math.isinf(size) else int(size)

        is_asc = not (isinstance(order, str) and order.lower() == "desc")

        first_in_page = first_row if is_asc else last_row - size_rows + 1
        if start_id is not None:
            start = coerce_int(start_id)
            if start is None or start < first_row or start > last_row:
                return errors.start_id_out_of_range(start_id)
            first_in_page = start - (0 if is_asc else size_rows - 1)

        last_in_page = min(first_in_page + size_rows - 1, last_row)
        first_in_page = max(first_in_page, first_row)

        if first_in_page > last_in_page:
            return self._ok(200, [])

        records = self.read_records(first_in_page, last_in_page)
        if not is_asc:
            records.reverse()

        next_row: int | None = last_in_page + 1 if is_asc else first_in_page - 1
        if next_row < first_row or next_row > last_row:
            next_row = None

        extra = {"next": next_row} if next_row is not None else {}
        return self._ok(200, [r for r in records if r is not None], **extra)

    def paginated_get(
        self,
        cursor: Any = None,
        limit: Any = DEFAULT_PAGE_SIZE,
        sort_by: Any = DEFAULT_SORT_BY,
        sort_dir: Any = DEFAULT_SORT_DIR,
    ) -> dict[str, Any]:
        """
        Cursor pagination by row offset.

        The sort column must exist; rows are windowed in sheet order.
        One extra row is read to decide hasMore. sort_dir is accepted
        and not applied.
        """
        if self.column_position(sort_by) < 1:
            return errors.sort_column_not_found(sort_by)

        page_size = coerce_int(limit)
        if page_size is None or page_size < 0:
            return errors.invalid_limit(limit)

        start_row = coerce_int(cursor) if cursor not in (None, "") else FIRST_DATA_ROW
        if start_row is None:
            return errors.invalid_cursor(cursor)
        start_row = max(start_row, FIRST_DATA_ROW)

        count = min(page_size + 1, self.last_data_row() - start_row + 1)
        records = []
        if count > 0:
            records = [r for r in self.read_records(start_row, start_row + count - 1) if r is not None]

        has_more = len(records) > page_size
        if has_more:
            records.pop()

        next_cursor = start_row + page_size if has_more else None
        return self._ok(200, records, cursor=next_cursor, hasMore=has_more)

    def find(self, id_column: Any, value: Any, return_all: bool = False) -> dict[str, Any]:
        """
        Records whose id_column cell matches value.

        A single match without return_all comes back as the record itself;
        otherwise a list.
        """
        col = self.column_position(id_column)
        if col < 1:
            return errors.id_column_not_found(id_column)

        matches = []
        for row in self.find_rows(col, value, first_only=False):
            record = self.read_record(row)
            if record is None:
                continue
            matches.append(record)
            if not return_all:
                break

        if not matches:
            return errors.no_matches_found()
        if len(matches) == 1 and not return_all:
            return self._ok(200, matches[0])
        return self._ok(200, matches)

    # === Inserts ===

    def post(self, payload: Any) -> dict[str, Any]:
        """
        Append a row per object against the current headers.
        No columns are added; unknown keys are dropped.
        """
        if not isinstance(payload, (dict, list)):
            return errors.invalid_payload("payload must be an object or an array of objects")

        stamp = self.timestamp()
        fields = self.headers[1:]
        for record in as_record_list(payload):
            self.grid.append_row([stamp] + record_to_row(record, fields))
        return self._ok(201)

    def dynamic_post(self, payload: Any) -> dict[str, Any]:
        """
        Append a row per object, adding a column for every new key first.
        """
        if not isinstance(payload, (dict, list)):
            return errors.invalid_payload("payload must be an object or an array of objects")

        records = as_record_list(payload)
        grow_schema(self.grid, records)
        fields = self.refresh_headers()[1:]

        stamp = self.timestamp()
        for record in records:
            self.grid.append_row([stamp] + record_to_row(record, fields))
        return self._ok(201)

    def upsert(self, id_column: Any, value: Any, payload: Any) -> dict[str, Any]:
        """
        Overwrite the first row whose id_column matches value, or insert.

        Updates keep the existing schema; inserts grow it for the payload.
        """
        col = self.column_position(id_column)
        if col < 1:
            return errors.id_column_not_found(id_column)
        if not isinstance(payload, dict):
            return errors.invalid_payload("payload must be an object")

        stamp = self.timestamp()
        found = self.find_rows(col, value, first_only=True)

        if found:
            row_values = [stamp] + record_to_row(payload, self.headers[1:])
            self.grid.set_values(found[0], 1, [row_values])
            return self._ok(200, {"message": "Row updated"})

        grow_schema(self.grid, [payload])
        fields = self.refresh_headers()[1:]
        self.grid.append_row([stamp] + record_to_row(payload, fields))
        return self._ok(201, {"message": "Row inserted"})

    # === Updates ===

    def put(self, row_id: int | None, payload: Any) -> dict[str, Any]:
        """Set the cells of row_id named by payload keys. Unknown keys are ignored."""
        if row_id is None:
            return errors.row_id_missing()
        if not isinstance(payload, dict):
            return errors.invalid_payload("payload must be an object")

        for key, value in payload.items():
            col = self.column_position(key)
            if col < 1:
                continue
            self.grid.set_value(row_id, col, encode_value(value))
        return self._ok(201)

    def batch_update(self, updates: Any) -> dict[str, Any]:
        """
        Apply [{_id, field: value, ...}, ...].

        Items without a usable _id are skipped. Each processed row gets a
        fresh stamp when the sheet has a date column.

        Returns:
            Number of updates received
        """
        if not isinstance(updates, list):
            return errors.invalid_payload("payload must be an array of updates")

        stamp = self.timestamp()
        for update in updates:
            if not isinstance(update, dict):
                continue
            row_id = coerce_int(update.get("_id"))
            if not row_id or row_id < FIRST_DATA_ROW:
                continue

            if self.has_date_column:
                self.grid.set_value(row_id, 1, stamp)

            for key, value in update.items():
                if key == "_id":
                    continue
                col = self.column_position(key)
                if col < 1:
                    continue
                self.grid.set_value(row_id, col, encode_value(value))

        return self._ok(200, {"updated": len(updates)})

    # === Deletes ===

    def delete(self, row_id: int | None) -> dict[str, Any]:
        """Clear a row's contents. The row keeps its position."""
        if row_id is None:
            return errors.row_id_missing()
        self.grid.clear_row(row_id)
        return self._ok(204)

    def bulk_delete(self, ids: Any) -> dict[str, Any]:
        """Clear every listed row. All ids are validated before any row is touched."""
        if not isinstance(ids, list):
            return errors.invalid_ids()

        rows = []
        for raw in ids:
            row_id = coerce_int(raw)
            if row_id is None or row_id < FIRST_DATA_ROW:
                return errors.row_index_invalid(raw)
            rows.append(row_id)

        for row_id in rows:
            self.grid.clear_row(row_id)
        return self._ok(200, {"deleted": len(ids)})
