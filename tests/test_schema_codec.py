"""
Tests for header/schema management and the row codec.
"""
import json

from core.memory_grid import MemoryGrid
from core.row_codec import encode_value, record_to_row, row_to_record
from core.schema import effective_headers, ensure_date_modified_column, grow_schema, has_date_column


class TestEffectiveHeaders:
    """Tests for effective_headers function"""

    def test_empty_sheet(self):
        assert effective_headers(MemoryGrid("g")) == []

    def test_trailing_empty_trimmed(self):
        grid = MemoryGrid("g", [["a", "", "b", ""], [1, 2, 3, 4]])
        assert effective_headers(grid) == ["a", "", "b"]

    def test_has_date_column(self):
        assert has_date_column(["Date Modified", "a"])
        assert not has_date_column(["a", "Date Modified"])
        assert not has_date_column([])


class TestEnsureDateModifiedColumn:
    """Tests for ensure_date_modified_column function"""

    def test_inserts_at_front(self):
        grid = MemoryGrid("g", [["name"], ["alice"]])
        assert ensure_date_modified_column(grid) is True
        assert grid.rows() == [["Date Modified", "name"], ["", "alice"]]

    def test_noop_when_present(self):
        grid = MemoryGrid("g", [["Date Modified", "name"]])
        assert ensure_date_modified_column(grid) is False
        assert grid.rows() == [["Date Modified", "name"]]

    def test_empty_sheet(self):
        grid = MemoryGrid("g")
        ensure_date_modified_column(grid)
        assert effective_headers(grid) == ["Date Modified"]


class TestGrowSchema:
    """Tests for grow_schema function"""

    def test_first_seen_order_across_batch(self):
        grid = MemoryGrid("g", [["Date Modified", "name"]])
        added = grow_schema(grid, [{"name": "a", "city": "x"}, {"age": 3, "city": "y"}])
        assert added == ["city", "age"]
        assert effective_headers(grid) == ["Date Modified", "name", "city", "age"]

    def test_ensures_date_column_first(self):
        grid = MemoryGrid("g")
        grow_schema(grid, [{"a": 1}])
        assert effective_headers(grid) == ["Date Modified", "a"]

    def test_existing_keys_not_duplicated(self):
        grid = MemoryGrid("g", [["Date Modified", "a"]])
        assert grow_schema(grid, [{"a": 1}]) == []
        assert effective_headers(grid) == ["Date Modified", "a"]


class TestEncodeValue:
    """Tests for encode_value function"""

    def test_none_is_blank(self):
        assert encode_value(None) == ""

    def test_falsy_scalars_survive(self):
        assert encode_value(0) == 0
        assert encode_value(False) is False
        assert encode_value("") == ""

    def test_structures_become_compact_json(self):
        assert encode_value({"a": [1, 2]}) == '{"a":[1,2]}'
        assert encode_value([1, "x"]) == '[1,"x"]'

    def test_non_ascii_kept(self):
        assert encode_value({"name": "café"}) == '{"name":"café"}'


class TestRecordToRow:
    """Tests for record_to_row function"""

    def test_header_order_and_missing(self):
        assert record_to_row({"b": 2, "a": 1}, ["a", "b", "c"]) == [1, 2, ""]

    def test_unknown_keys_dropped(self):
        assert record_to_row({"a": 1, "zzz": 9}, ["a"]) == [1]


class TestRowToRecord:
    """Tests for row_to_record function"""

    def test_all_empty_is_none(self):
        assert row_to_record(["", "", None], 5, ["a", "b", "c"]) is None

    def test_record_with_id(self):
        assert row_to_record(["x", 1], 3, ["a", "b"]) == {"_id": 3, "a": "x", "b": 1}

    def test_empty_header_skipped(self):
        assert row_to_record(["x", "hidden", 2], 2, ["a", "", "b"]) == {"_id": 2, "a": "x", "b": 2}

    def test_values_verbatim(self):
        record = row_to_record(['{"k":1}'], 2, ["a"])
        assert record["a"] == '{"k":1}'

    def test_round_trip(self):
        headers = ["name", "tags", "count", "flag"]
        record = {"name": "alice", "tags": ["x", "y"], "count": 0, "flag": False}
        decoded = row_to_record(record_to_row(record, headers), 2, headers)
        assert decoded["name"] == "alice"
        assert json.loads(decoded["tags"]) == ["x", "y"]
        assert decoded["count"] == 0
        assert decoded["flag"] is False
