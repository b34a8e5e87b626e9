"""
Tests for helper functions in lib modules.
Pure functions that can be tested without a grid.
"""
import math
import os
from datetime import datetime, timedelta, timezone

import pytest

import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.common import data, error, format_timestamp, is_empty, is_number, to_text
from lib.errors import ErrorCode, column_not_found, csv_fetch_failed, weak_key
from lib.sheet_utils import (
    a1_range,
    col_letter_to_index,
    column_index,
    extract_spreadsheet_id,
    header_position,
    index_to_col_letter,
    pad_rows,
    trim_trailing_empty,
)
from lib.input_parser import (
    as_record_list,
    coerce_bool,
    coerce_float,
    coerce_int,
    decode_query_params,
    strip_quotes as _strip_quotes,
)


class TestStripQuotes:
    """Tests for _strip_quotes function"""

    def test_removes_double_quotes(self):
        assert _strip_quotes('"hello"') == "hello"

    def test_removes_single_quotes(self):
        assert _strip_quotes("'hello'") == "hello"

    def test_strips_whitespace(self):
        assert _strip_quotes("  hello  ") == "hello"

    def test_mismatched_quotes_unchanged(self):
        assert _strip_quotes('"hello\'') == '"hello\''

    def test_only_quotes(self):
        assert _strip_quotes('""') == ""


class TestCoerceInt:
    """Tests for coerce_int function"""

    def test_int(self):
        assert coerce_int(5) == 5

    def test_whole_float(self):
        assert coerce_int(2.0) == 2

    def test_fractional_float(self):
        assert coerce_int(2.5) is None

    def test_numeric_string(self):
        assert coerce_int("12") == 12
        assert coerce_int('"12"') == 12
        assert coerce_int("3.0") == 3

    def test_bool_rejected(self):
        assert coerce_int(True) is None

    def test_garbage(self):
        assert coerce_int("abc") is None
        assert coerce_int(None) is None
        assert coerce_int([1]) is None


class TestCoerceFloat:
    """Tests for coerce_float function"""

    def test_numbers(self):
        assert coerce_float(3) == 3.0
        assert coerce_float("2.5") == 2.5

    def test_invalid_is_nan(self):
        assert math.isnan(coerce_float("ten"))
        assert math.isnan(coerce_float(None))
        assert math.isnan(coerce_float(False))


class TestCoerceBool:
    """Tests for coerce_bool function"""

    @pytest.mark.parametrize("raw", [True, "true", "TRUE", "1", "yes", 1])
    def test_truthy(self, raw):
        assert coerce_bool(raw) is True

    @pytest.mark.parametrize("raw", [False, "false", "0", "no", "", 0])
    def test_falsy(self, raw):
        assert coerce_bool(raw, default=True) is False

    def test_default_for_missing(self):
        assert coerce_bool(None) is False
        assert coerce_bool(None, default=True) is True

    def test_default_for_unrecognized(self):
        assert coerce_bool("maybe", default=True) is True


class TestAsRecordList:
    """Tests for as_record_list function"""

    def test_single_object(self):
        assert as_record_list({"a": 1}) == [{"a": 1}]

    def test_list_drops_non_objects(self):
        assert as_record_list([{"a": 1}, "x", 3, {"b": 2}]) == [{"a": 1}, {"b": 2}]

    def test_none(self):
        assert as_record_list(None) == []


class TestDecodeQueryParams:
    """Tests for decode_query_params function"""

    def test_decodes_json_params(self):
        out = decode_query_params({
            "payload": '{"name": "alice"}',
            "ids": "[2, 3]",
            "searchRange": '{"startRow": 1}',
        })
        assert out["payload"] == {"name": "alice"}
        assert out["ids"] == [2, 3]
        assert out["searchRange"] == {"startRow": 1}

    def test_leaves_other_params(self):
        out = decode_query_params({"sheet": "[logs]", "id": "2"})
        assert out == {"sheet": "[logs]", "id": "2"}

    def test_invalid_json_kept_raw(self):
        assert decode_query_params({"payload": "{oops"})["payload"] == "{oops"

    def test_plain_string_kept(self):
        assert decode_query_params({"payload": "hello"})["payload"] == "hello"


class TestToText:
    """Tests for to_text function"""

    def test_whole_float(self):
        assert to_text(10.0) == "10"

    def test_fractional_float(self):
        assert to_text(1.5) == "1.5"

    def test_bool(self):
        assert to_text(True) == "true"

    def test_none(self):
        assert to_text(None) == ""

    def test_int_and_string_compare_equal(self):
        assert to_text(42) == to_text("42")


class TestCellPredicates:
    """Tests for is_empty and is_number"""

    def test_is_empty(self):
        assert is_empty("")
        assert is_empty(None)
        assert not is_empty(0)
        assert not is_empty(False)
        assert not is_empty(" ")

    def test_is_number(self):
        assert is_number(1)
        assert is_number(1.5)
        assert not is_number("1")
        assert not is_number(True)


class TestFormatTimestamp:
    """Tests for format_timestamp function"""

    def test_fixed_time(self):
        now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
        assert format_timestamp(timezone.utc, now) == "03/05/2024 07:08:09"

    def test_converted_to_timezone(self):
        now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
        assert format_timestamp(timezone(timedelta(hours=-5)), now) == "03/05/2024 02:08:09"

    def test_current_time_shape(self):
        stamp = format_timestamp(timezone.utc)
        assert datetime.strptime(stamp, "%m/%d/%Y %H:%M:%S")


class TestEnvelopes:
    """Tests for data/error builders and error helpers"""

    def test_data_with_payload(self):
        assert data(200, [1]) == {"status": 200, "data": [1]}

    def test_data_without_payload(self):
        assert data(201) == {"status": 201}

    def test_data_extras(self):
        assert data(200, [], cursor=None, hasMore=False) == {
            "status": 200, "data": [], "cursor": None, "hasMore": False,
        }

    def test_error_uses_code_value(self):
        response = error(404, ErrorCode.SHEET_NOT_FOUND, {"sheet": "x"})
        assert response == {"status": 404, "error": {"code": "sheet_not_found", "details": {"sheet": "x"}}}

    def test_weak_key_has_message(self):
        response = weak_key()
        assert response["status"] == 401
        assert "8 characters" in response["error"]["details"]["message"]

    def test_column_not_found_status(self):
        assert column_not_found(404, columnName="x")["status"] == 404
        assert column_not_found(column="x")["status"] == 400

    def test_csv_fetch_failed_keeps_status(self):
        assert csv_fetch_failed(403, "denied")["status"] == 403


class TestColLetterToIndex:
    """Tests for col_letter_to_index function"""

    def test_single_letters(self):
        assert col_letter_to_index("A") == 1
        assert col_letter_to_index("Z") == 26

    def test_double_letters(self):
        assert col_letter_to_index("AA") == 27
        assert col_letter_to_index("AZ") == 52
        assert col_letter_to_index("BA") == 53

    def test_lowercase(self):
        assert col_letter_to_index("aa") == 27

    def test_invalid(self):
        with pytest.raises(ValueError):
            col_letter_to_index("A1")
        with pytest.raises(ValueError):
            col_letter_to_index("")


class TestIndexToColLetter:
    """Tests for index_to_col_letter function"""

    @pytest.mark.parametrize("index,letter", [(1, "A"), (26, "Z"), (27, "AA"), (702, "ZZ"), (703, "AAA")])
    def test_known_values(self, index, letter):
        assert index_to_col_letter(index) == letter

    def test_zero_rejected(self):
        with pytest.raises(ValueError):
            index_to_col_letter(0)


class TestColumnIndex:
    """Tests for column_index function"""

    def test_number(self):
        assert column_index(3) == 3

    def test_numeric_string(self):
        assert column_index("3") == 3

    def test_letters(self):
        assert column_index("C") == 3
        assert column_index("AA") == 27

    def test_invalid(self):
        with pytest.raises(ValueError):
            column_index(None)
        with pytest.raises(ValueError):
            column_index(True)


class TestA1Range:
    """Tests for a1_range function"""

    def test_single_cell(self):
        assert a1_range(2, 1) == "A2"

    def test_rectangle(self):
        assert a1_range(2, 1, 3, 2) == "A2:B4"


class TestHeaderHelpers:
    """Tests for header_position, trim_trailing_empty and pad_rows"""

    def test_header_position(self):
        assert header_position(["Date Modified", "name"], "name") == 2
        assert header_position(["Date Modified", "name"], "Name") == 0

    def test_trim_trailing_empty_keeps_embedded(self):
        assert trim_trailing_empty(["a", "", "b", "", ""]) == ["a", "", "b"]

    def test_trim_all_empty(self):
        assert trim_trailing_empty(["", ""]) == []

    def test_pad_rows(self):
        assert pad_rows([[1], [2, 3, 4]], 3, 2) == [[1, ""], [2, 3], ["", ""]]


class TestExtractSpreadsheetId:
    """Tests for extract_spreadsheet_id function"""

    def test_full_url(self):
        url = "https://docs.google.com/spreadsheets/d/1abc123def456ghi789jkl012mno/edit"
        assert extract_spreadsheet_id(url) == "1abc123def456ghi789jkl012mno"

    def test_short_string(self):
        assert extract_spreadsheet_id("short") is None

    def test_none(self):
        assert extract_spreadsheet_id(None) is None
