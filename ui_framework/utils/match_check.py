"""
Row-content checks for filtered tables.

Every row must satisfy exactly one criterion over the selected fields:
``match`` (some field equals / fully matches a regex), ``contain`` (some field
contains), ``not_contain`` (no field contains) or ``not_match`` (no field
equals / matches).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from loguru import logger

TextOrPattern = Union[str, re.Pattern, None]


@dataclass(frozen=True)
class MatchCheck:
    match: TextOrPattern = None
    contain: Optional[str] = None
    not_contain: Optional[str] = None
    not_match: TextOrPattern = None
    fields: Optional[Sequence[str]] = None
    case_sensitive: bool = False


def _validate(options: MatchCheck) -> None:
    given = [c for c in (options.match, options.contain, options.not_contain, options.not_match) if c]
    if len(given) != 1:
        raise ValueError("Exactly one of match, contain, not_contain, not_match is required")
    if options.case_sensitive and any(
        isinstance(c, re.Pattern) for c in (options.match, options.not_match)
    ):
        raise ValueError("case_sensitive is not supported with a compiled regex")


def _fold(value: Any, case_sensitive: bool) -> str:
    text = "" if value is None else str(value)
    return text if case_sensitive else text.lower()


def _equals_or_matches(criterion: Union[str, re.Pattern], case_sensitive: bool) -> Callable[[str], bool]:
    if isinstance(criterion, re.Pattern):
        return lambda value: criterion.search(value) is not None
    expected = _fold(criterion, case_sensitive)
    return lambda value: value == expected


def check_matched(rows: Sequence[Mapping[str, Any]], options: MatchCheck) -> None:
    """
    Assert that every row satisfies the criterion. Input rows are not modified.

    Raises:
        AssertionError: A row violates the criterion
        ValueError: Not exactly one criterion was given
    """
    _validate(options)
    if not rows:
        logger.info("No rows to check")
        return

    fields = list(options.fields) if options.fields else list(rows[0].keys())
    cs = options.case_sensitive

    if options.match:
        test, expect_hit, verb = _equals_or_matches(options.match, cs), True, f"matching {options.match!r}"
    elif options.contain:
        needle = _fold(options.contain, cs)
        test, expect_hit, verb = (lambda v: needle in v), True, f"containing {options.contain!r}"
    elif options.not_contain:
        needle = _fold(options.not_contain, cs)
        test, expect_hit, verb = (lambda v: needle in v), False, f"containing {options.not_contain!r}"
    else:
        test, expect_hit, verb = _equals_or_matches(options.not_match, cs), False, f"matching {options.not_match!r}"

    for i, row in enumerate(rows):
        checked: List[str] = [_fold(row.get(field), cs) for field in fields]
        hit = any(test(value) for value in checked)
        if hit != expect_hit:
            found = "No match" if expect_hit else "Match"
            raise AssertionError(f"{found} found for row {i}: {dict(row)} with fields {fields} {verb}")


def is_matched(rows: Sequence[Mapping[str, Any]], options: MatchCheck) -> bool:
    try:
        check_matched(rows, options)
    except (AssertionError, ValueError) as e:
        logger.error(e)
        return False
    return True


def match_check_from_dict(options: Dict[str, Any]) -> MatchCheck:
    """Build a ``MatchCheck`` from a mapping; string ``regex:`` prefixes become patterns."""
    converted = dict(options)
    for key in ("match", "not_match"):
        value = converted.get(key)
        if isinstance(value, str) and value.startswith("regex:"):
            converted[key] = re.compile(value[len("regex:"):])
    return MatchCheck(**converted)


__all__ = ["MatchCheck", "check_matched", "is_matched", "match_check_from_dict"]
