"""
================================================================================
UI Framework Utilities
================================================================================

Data helpers used by tests and by table checks.

Components:
    - compare: structural equality (order-insensitive for lists)
    - arrays: list containment / match helpers
    - sort_check: sort-order validation
    - range_check: value-range validation
    - match_check: row content validation
    - timedate: date parsing and formatting with moment-style formats
    - data_collector: JSON/YAML test data with JSONPath queries

================================================================================
"""

from .arrays import (
    contains_each_other,
    does_array_contain_array,
    does_array_match_array,
    remove_from_array_with_values,
)
from .compare import deep_equal
from .data_collector import DataCollector, get_data, read_data, set_data
from .match_check import MatchCheck, check_matched, is_matched
from .range_check import RangeCheck, check_range, convert_number_value, is_in_range
from .sort_check import SortCheck, check_sorted, is_sorted
from .timedate import IDate, date_range, get_date_format, is_valid_date, parse_date, shift_date

__all__ = [
    "deep_equal",
    "does_array_contain_array",
    "contains_each_other",
    "remove_from_array_with_values",
    "does_array_match_array",
    "DataCollector",
    "read_data",
    "get_data",
    "set_data",
    "SortCheck",
    "check_sorted",
    "is_sorted",
    "RangeCheck",
    "check_range",
    "is_in_range",
    "convert_number_value",
    "MatchCheck",
    "check_matched",
    "is_matched",
    "IDate",
    "date_range",
    "get_date_format",
    "is_valid_date",
    "parse_date",
    "shift_date",
]
