"""
================================================================================
Range Checks
================================================================================

Validates that every scraped value lies within [from, to]. Either bound may be
omitted. Dates may use "now" as a bound, evaluated at the configured UTC
offset (``timezone.offset_hours``).

Usage:
    check_range(prices, RangeCheck(from_value=10, to_value=20, type="number"))
    check_range(rows, RangeCheck(to_value="now", type="date",
                                 format="YYYY-MM-DD", path="$.Created"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

from .sort_check import extract_values, to_number
from .timedate import DEFAULT_DATE_FORMAT, now_in_offset, parse_date

NOW = "now"

DATE_REGEXES: Dict[str, str] = {
    "DD/MM/YYYY": r"(\d{2}/\d{2}/\d{4})",
    "MM/DD/YYYY": r"(\d{2}/\d{2}/\d{4})",
    "YYYY/MM/DD": r"(\d{4}/\d{2}/\d{2})",
    "YYYY-MM-DD": r"(\d{4}-\d{2}-\d{2})",
    "DD-MM-YYYY": r"(\d{2}-\d{2}-\d{4})",
    "MM-DD-YYYY": r"(\d{2}-\d{2}-\d{4})",
    "YYYY/MM/DD HH:mm:ss": r"(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})",
    "YYYY-MM-DD HH:mm:ss": r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})",
}


@dataclass(frozen=True)
class RangeCheck:
    """
    Options of a range check.

    Attributes:
        from_value: Lower bound (inclusive), or None
        to_value: Upper bound (inclusive), or None
        type: 'string', 'number' or 'date'
        format: Date format, or 'case-insensitive' / 'case-sensitive' for strings
        path: JSONPath applied to each element
        time_zone: UTC offset in hours used for "now"
        regex: Pattern extracting the date text; group 1 is used when present
    """

    from_value: Any = None
    to_value: Any = None
    type: str = "string"
    format: Optional[str] = None
    path: Optional[str] = None
    time_zone: Optional[float] = None
    regex: Union[str, re.Pattern, None] = None


def _date_pattern(options: RangeCheck, fmt: str) -> re.Pattern:
    if options.regex is not None:
        return re.compile(options.regex) if isinstance(options.regex, str) else options.regex
    return re.compile(DATE_REGEXES.get(fmt, r"(.+)"))


def _extract_date_text(value: Any, pattern: re.Pattern) -> str:
    if not isinstance(value, str):
        logger.warning(
            f"Checked value is not a string: {value!r}; it is converted to JSON text, check the path"
        )
        value = json.dumps(value)
    match = pattern.search(value)
    if not match:
        raise ValueError(f"Invalid date format: {value}")
    return match.group(1) if match.groups() else match.group(0)


def _date_bound(bound: Any, fmt: str, time_zone: Optional[float]) -> Optional[datetime]:
    if bound is None:
        return None
    if bound == NOW:
        return now_in_offset(time_zone)
    if isinstance(bound, datetime):
        return bound
    return parse_date(str(bound), fmt)


def check_range(values: Sequence[Any], options: Optional[RangeCheck] = None) -> None:
    """
    Assert that every value lies within the configured bounds.

    Raises:
        AssertionError: A value is out of range
        ValueError: Invalid options or an unparsable value
    """
    options = options or RangeCheck()
    raw = extract_values(values, options.path)
    low, high = options.from_value, options.to_value

    if options.type == "date":
        fmt = options.format or DEFAULT_DATE_FORMAT
        pattern = _date_pattern(options, fmt)
        chosen: List[Any] = [parse_date(_extract_date_text(v, pattern), fmt) for v in raw]
        low = _date_bound(low, fmt, options.time_zone)
        high = _date_bound(high, fmt, options.time_zone)
    elif options.type == "number":
        chosen = [to_number(v) for v in raw]
        low = None if low is None else to_number(low)
        high = None if high is None else to_number(high)
    elif options.type == "string":
        if options.format not in (None, "case-insensitive", "case-sensitive"):
            raise ValueError(f"Invalid string format: {options.format}")
        fold = options.format == "case-insensitive"
        chosen = [str(v).lower() if fold else str(v) for v in raw]
        low = None if low is None else (str(low).lower() if fold else str(low))
        high = None if high is None else (str(high).lower() if fold else str(high))
    else:
        raise ValueError(f"Invalid range type: {options.type}")

    for i, value in enumerate(chosen):
        if low is not None and value < low:
            raise AssertionError(
                f"values[{i}]: {raw[i]!r} is less than minimum: {options.from_value!r}"
            )
        if high is not None and value > high:
            raise AssertionError(
                f"values[{i}]: {raw[i]!r} is greater than maximum: {options.to_value!r}"
            )


def is_in_range(values: Sequence[Any], options: Optional[RangeCheck] = None) -> bool:
    try:
        check_range(values, options)
    except (AssertionError, ValueError) as e:
        logger.info(f"Not in range: {e}")
        return False
    return True


_RANGE_SEPARATOR = re.compile(r"(?<=[\d%$])\s*-\s*")


def _parse_number(text: str) -> float:
    return float(re.sub(r"[^0-9.\-]+", "", text))


def convert_number_value(value: str) -> Union[float, RangeCheck, None]:
    """
    Convert a numeric cell into a number, a number range or None.

    Examples:
        "1,200"     -> 1200.0
        "$10 - $20" -> RangeCheck(from_value=10.0, to_value=20.0, type="number")
        "N/A"       -> None
    """
    value = value.strip()
    if value in ("_", "N/A"):
        return None
    parts = _RANGE_SEPARATOR.split(value)
    if len(parts) == 2:
        return RangeCheck(
            from_value=_parse_number(parts[0]),
            to_value=_parse_number(parts[1]),
            type="number",
        )
    if len(parts) > 2:
        raise ValueError(f"Invalid range: {value}")
    return _parse_number(value)


__all__ = [
    "NOW",
    "DATE_REGEXES",
    "RangeCheck",
    "check_range",
    "is_in_range",
    "convert_number_value",
]
