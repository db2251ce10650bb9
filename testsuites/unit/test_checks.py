"""
================================================================================
Data Check Tests
================================================================================

Sort, range and row-match checks over scraped values and table rows.

================================================================================
"""

import re

import pytest

from ui_framework.utils import (
    MatchCheck,
    RangeCheck,
    SortCheck,
    check_matched,
    check_range,
    check_sorted,
    convert_number_value,
    is_in_range,
    is_matched,
    is_sorted,
)
from ui_framework.utils.match_check import match_check_from_dict

ROWS = [
    {"Name": "Apple", "Price": "1,200", "Created": "Created on 2024-01-05"},
    {"Name": "Banana", "Price": "15", "Created": "Created on 2024-02-10"},
    {"Name": "Cherry", "Price": "9.5", "Created": "Created on 2024-03-01"},
]


# =============================================================================
# Sort
# =============================================================================

class TestSortCheck:

    def test_strings_ignore_case_and_accents(self):
        check_sorted(["apple", "Banana", "cherry"])
        check_sorted(["Éclair", "eclair", "Fig"])

    def test_numbers_and_dates(self):
        check_sorted(["1", "2", "1,000"], SortCheck(type="number"))
        check_sorted(["12/31/2023", "01/02/2024"], SortCheck(type="date"))
        check_sorted(ROWS, SortCheck(order="desc", type="number", path="$.Price"))

    def test_out_of_order_reports_neighbours(self):
        with pytest.raises(AssertionError, match=r"values\[0\]"):
            check_sorted(["b", "a"])

    def test_is_sorted_returns_false_on_invalid_input(self):
        assert not is_sorted(["b", "a"])
        assert not is_sorted(["1", "x"], SortCheck(type="number"))
        assert is_sorted([])

    @pytest.mark.parametrize(
        "options", [SortCheck(order="up"), SortCheck(type="color"), SortCheck(format="upper")]
    )
    def test_invalid_options(self, options):
        with pytest.raises(ValueError):
            check_sorted(["a"], options)


# =============================================================================
# Range
# =============================================================================

class TestRangeCheck:

    def test_number_bounds_are_inclusive(self):
        check_range(["1", "5", "10"], RangeCheck(from_value=1, to_value=10, type="number"))
        with pytest.raises(AssertionError, match="greater than maximum"):
            check_range(["11"], RangeCheck(to_value=10, type="number"))

    def test_dates_are_extracted_from_text(self):
        options = RangeCheck(
            from_value="2024-01-01", to_value="2024-03-31", type="date", format="YYYY-MM-DD", path="$.Created"
        )
        check_range(ROWS, options)

    def test_now_bound_uses_offset(self):
        check_range(["2000-01-01"], RangeCheck(to_value="now", type="date", format="YYYY-MM-DD", time_zone=0))

    def test_case_insensitive_strings(self):
        assert is_in_range(["B"], RangeCheck(from_value="a", to_value="c", format="case-insensitive"))
        assert not is_in_range(["B"], RangeCheck(from_value="a", to_value="c"))

    def test_unparsable_date_is_not_in_range(self):
        assert not is_in_range(["yesterday"], RangeCheck(from_value="01/01/2024", type="date"))

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1,200", 1200.0),
            ("N/A", None),
            ("_", None),
            ("$10 - $20", RangeCheck(from_value=10.0, to_value=20.0, type="number")),
        ],
    )
    def test_convert_number_value(self, text, expected):
        assert convert_number_value(text) == expected


# =============================================================================
# Match
# =============================================================================

class TestMatchCheck:

    def test_contain_over_selected_fields(self):
        check_matched(ROWS, MatchCheck(contain="2024", fields=["Created"]))
        with pytest.raises(AssertionError, match="No match found for row 0"):
            check_matched(ROWS, MatchCheck(contain="an", fields=["Name"]))

    def test_not_contain_and_not_match(self):
        check_matched(ROWS, MatchCheck(not_contain="durian"))
        assert not is_matched(ROWS, MatchCheck(not_match="banana", fields=["Name"]))

    def test_match_is_case_insensitive_by_default(self):
        check_matched([{"Status": "Active"}], MatchCheck(match="ACTIVE"))
        assert not is_matched([{"Status": "Active"}], MatchCheck(match="ACTIVE", case_sensitive=True))

    def test_regex_from_mapping(self):
        options = match_check_from_dict({"match": r"regex:^\d+$", "fields": ["Price"]})
        assert isinstance(options.match, re.Pattern)
        assert is_matched([{"Price": "15"}], options)

    def test_exactly_one_criterion(self):
        with pytest.raises(ValueError):
            check_matched(ROWS, MatchCheck())
        with pytest.raises(ValueError):
            check_matched(ROWS, MatchCheck(contain="a", not_contain="b"))

    def test_is_matched_returns_false_on_invalid_options(self):
        assert not is_matched(ROWS, MatchCheck())
        assert not is_matched(ROWS, MatchCheck(match=re.compile("a"), case_sensitive=True))

    def test_rows_are_not_modified(self):
        rows = [dict(row) for row in ROWS]
        check_matched(rows, MatchCheck(contain="e"))
        assert rows == ROWS
