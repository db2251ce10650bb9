"""
Date helpers shared by the sort and range checks and by the date-picker
widgets.

Formats are written with moment-style tokens (``MM/DD/YYYY``) because that is
how test data writes them; ``to_strptime`` translates them.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from ..common.global_config import get_config

WEEK_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

DEFAULT_DATE_FORMAT = "MM/DD/YYYY"

DATE_FORMATS: Dict[str, str] = {
    "DD/MM/YYYY": "%d/%m/%Y",
    "MM/DD/YYYY": "%m/%d/%Y",
    "YYYY/MM/DD": "%Y/%m/%d",
    "YYYY-MM-DD": "%Y-%m-%d",
    "DD-MM-YYYY": "%d-%m-%Y",
    "MM-DD-YYYY": "%m-%d-%Y",
    "YYYY/MM/DD HH:mm:ss": "%Y/%m/%d %H:%M:%S",
    "YYYY-MM-DD HH:mm:ss": "%Y-%m-%d %H:%M:%S",
}

# "January 5, 2024"
LONG_DATE_PATTERN = "%B %d, %Y"

# Longest tokens first so "MMMM" is not eaten by "MM".
_TOKENS = [
    ("YYYY", "%Y"),
    ("MMMM", "%B"),
    ("MMM", "%b"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("HH", "%H"),
    ("hh", "%I"),
    ("mm", "%M"),
    ("ss", "%S"),
    ("A", "%p"),
]
_TOKEN_RE = re.compile("|".join(token for token, _ in _TOKENS))


def to_strptime(fmt: str) -> str:
    """Translate a moment-style format into a ``strptime`` format."""
    if fmt in DATE_FORMATS:
        return DATE_FORMATS[fmt]
    mapping = dict(_TOKENS)
    return _TOKEN_RE.sub(lambda m: mapping[m.group(0)], fmt)


def parse_date(text: str, fmt: str = DEFAULT_DATE_FORMAT) -> datetime:
    """Parse ``text`` strictly with a moment-style format. Raises ValueError."""
    return datetime.strptime(text.strip(), to_strptime(fmt))


def is_valid_date(text: str, fmt: str = DEFAULT_DATE_FORMAT) -> bool:
    try:
        parse_date(text, fmt)
    except ValueError:
        return False
    return True


def now_in_offset(offset_hours: Optional[float] = None) -> datetime:
    """
    Current wall-clock time at a fixed UTC offset, as a naive datetime.

    The offset defaults to ``timezone.offset_hours`` from the configuration.
    """
    if offset_hours is None:
        offset_hours = get_config("timezone.offset_hours", -5)
    tz = timezone(timedelta(hours=float(offset_hours)))
    return datetime.now(tz).replace(tzinfo=None)


def format_date(value: datetime, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    return value.strftime(to_strptime(fmt))


def get_date(offset_days: int, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    """Today shifted by ``offset_days``, formatted."""
    return format_date(datetime.now() + timedelta(days=offset_days), fmt)


def shift_date(value: date, days: int = 0, months: int = 0, years: int = 0) -> date:
    """
    Shift by days, then months, then years.

    Month and year shifts keep the day of month, clamped to the target
    month's length (Jan 31 + 1 month is Feb 28/29).
    """
    shifted = value + timedelta(days=days)
    month_index = shifted.month - 1 + months
    year = shifted.year + years + month_index // 12
    month = month_index % 12 + 1
    day = min(shifted.day, calendar.monthrange(year, month)[1])
    return shifted.replace(year=year, month=month, day=day)


@dataclass(frozen=True, order=True)
class IDate:
    """A calendar date without time. Ordered chronologically."""

    year: int
    month: int
    day: int

    @property
    def weekday(self) -> str:
        return WEEK_DAYS[self.as_date().weekday()]

    def as_date(self) -> date:
        return date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> "IDate":
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_string(cls, text: str, fmt: Optional[str] = None) -> "IDate":
        """
        Parse a date string.

        Without ``fmt`` the known formats are tried in order, then the long
        form used by date pickers ("January 5, 2024").
        """
        if fmt:
            return cls.from_date(parse_date(text, fmt).date())
        for pattern in list(DATE_FORMATS.values()) + [LONG_DATE_PATTERN]:
            try:
                return cls.from_date(datetime.strptime(text.strip(), pattern).date())
            except ValueError:
                continue
        raise ValueError(f"Unrecognized date: {text!r}")

    @classmethod
    def today(cls, offset_hours: Optional[float] = None) -> "IDate":
        return cls.from_date(now_in_offset(offset_hours).date())

    def to_format(self, fmt: str = DEFAULT_DATE_FORMAT) -> str:
        return self.as_date().strftime(to_strptime(fmt))

    def to_date_string(self) -> str:
        """Long form, e.g. ``January 5, 2024``."""
        return f"{MONTH_NAMES[self.month - 1]} {self.day}, {self.year}"

    def add_days(self, days: int) -> "IDate":
        return IDate.from_date(self.as_date() + timedelta(days=days))

    def days_since(self, other: "IDate") -> int:
        return (self.as_date() - other.as_date()).days

    def compare(self, other: "IDate") -> int:
        """-1, 0 or 1."""
        if self < other:
            return -1
        if self > other:
            return 1
        return 0


def date_range(start: IDate, end: IDate) -> List[IDate]:
    """Every date from ``start`` to ``end`` inclusive (empty if start > end)."""
    result = []
    current = start
    while current <= end:
        result.append(current)
        current = current.add_days(1)
    return result


_YEAR_RANGE_RE = re.compile(r"^\d{4}-\d{4}$")
_YEAR_RE = re.compile(r"^\d{4}$")
_MONTH_YEAR_RE = re.compile(rf"^({'|'.join(MONTH_NAMES)}) \d{{4}}$")


def get_date_format(text: str) -> str:
    """Classify a period label: 'year-range', 'year', 'month year' or 'invalid'."""
    if _YEAR_RANGE_RE.match(text):
        return "year-range"
    if _YEAR_RE.match(text):
        return "year"
    if _MONTH_YEAR_RE.match(text):
        return "month year"
    return "invalid"


__all__ = [
    "WEEK_DAYS",
    "MONTH_NAMES",
    "DATE_FORMATS",
    "DEFAULT_DATE_FORMAT",
    "to_strptime",
    "parse_date",
    "is_valid_date",
    "now_in_offset",
    "format_date",
    "get_date",
    "shift_date",
    "IDate",
    "date_range",
    "get_date_format",
]
