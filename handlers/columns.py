"""
Column handler.
Header-only schema edits by column name.
"""
from typing import Any

from core.base_handler import BaseHandler
from lib import errors
from lib.common import is_empty


class ColumnsHandler(BaseHandler):
    """Add, rename and remove columns."""

    def add(self, column_name: Any) -> dict[str, Any]:
        """Append a column titled column_name after the last column."""
        if is_empty(column_name):
            return errors.column_name_missing()
        self.grid.append_column(column_name)
        self.refresh_headers()
        return self._ok(201, {"message": "Column added"})

    def rename(self, old_column_name: Any, new_column_name: Any) -> dict[str, Any]:
        col = self.column_position(old_column_name)
        if col < 1:
            return errors.column_not_found(404, oldColumnName=old_column_name)
        if is_empty(new_column_name):
            return errors.column_name_missing()
        self.grid.set_value(1, col, new_column_name)
        self.refresh_headers()
        return self._ok(201, {"message": "Column renamed"})

    def remove(self, column_name: Any) -> dict[str, Any]:
        col = self.column_position(column_name)
        if col < 1:
            return errors.column_not_found(404, columnName=column_name)
        self.grid.delete_column(col)
        self.refresh_headers()
        return self._ok(204, {"message": "Column removed"})
