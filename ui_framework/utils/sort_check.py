"""
================================================================================
Sort Order Checks
================================================================================

Validates that a list of scraped values (or of rows, through a JSONPath) is
ordered.

Types:
    string  - compared like a base-sensitivity locale compare: accents and
              case are ignored
    number  - compared numerically (thousands separators allowed)
    date    - parsed with a moment-style format (default MM/DD/YYYY)

Usage:
    check_sorted(["apple", "Banana", "cherry"])
    check_sorted(rows, SortCheck(order="desc", type="number", path="$.Price"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from .data_collector import query_first
from .timedate import DEFAULT_DATE_FORMAT, parse_date

STRING_FORMATS = ("case-insensitive", "case-sensitive")


@dataclass(frozen=True)
class SortCheck:
    """
    Options of a sort check.

    Attributes:
        order: 'asc' or 'desc'
        type: 'string', 'number' or 'date'
        format: Date format for dates; 'case-insensitive' / 'case-sensitive' for strings
        path: JSONPath applied to each element before comparing
    """

    order: str = "asc"
    type: str = "string"
    format: Optional[str] = None
    path: Optional[str] = None


def base_text(value: Any) -> str:
    """Accent- and case-folded text, the key of a base-sensitivity compare."""
    decomposed = unicodedata.normalize("NFKD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def to_number(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "")
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"Not a number: {value!r}") from None


def extract_values(values: Sequence[Any], path: Optional[str]) -> List[Any]:
    if not path:
        return list(values)
    return [query_first(value, path) for value in values]


def _comparison_key(options: SortCheck) -> Callable[[Any], Any]:
    if options.type == "string":
        if options.format is not None and options.format not in STRING_FORMATS:
            raise ValueError(f"Invalid string format: {options.format}")
        return base_text
    if options.type == "number":
        return to_number
    if options.type == "date":
        fmt = options.format or DEFAULT_DATE_FORMAT
        return lambda value: parse_date(str(value), fmt)
    raise ValueError(f"Invalid sort type: {options.type}")


def check_sorted(values: Sequence[Any], options: Optional[SortCheck] = None) -> None:
    """
    Assert that ``values`` are ordered.

    Raises:
        AssertionError: Two neighbours are out of order
        ValueError: Invalid options or an unparsable value
    """
    options = options or SortCheck()
    if options.order not in ("asc", "desc"):
        raise ValueError(f"Invalid sort order: {options.order}")

    raw = extract_values(values, options.path)
    key = _comparison_key(options)
    keys = [key(value) for value in raw]

    for i in range(len(keys) - 1):
        current, following = keys[i], keys[i + 1]
        if options.order == "asc" and current > following:
            raise AssertionError(
                f"values[{i}]: {raw[i]!r} is greater than values[{i + 1}]: {raw[i + 1]!r}"
            )
        if options.order == "desc" and current < following:
            raise AssertionError(
                f"values[{i}]: {raw[i]!r} is less than values[{i + 1}]: {raw[i + 1]!r}"
            )


def is_sorted(values: Sequence[Any], options: Optional[SortCheck] = None) -> bool:
    try:
        check_sorted(values, options)
    except (AssertionError, ValueError) as e:
        logger.info(f"Not sorted: {e}")
        return False
    return True


def sort_check_from_dict(options: Dict[str, Any]) -> SortCheck:
    """Build a ``SortCheck`` from a plain mapping (e.g. a YAML test case)."""
    return SortCheck(**options)


__all__ = [
    "SortCheck",
    "check_sorted",
    "is_sorted",
    "base_text",
    "to_number",
    "extract_values",
    "sort_check_from_dict",
]
