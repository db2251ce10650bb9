"""List comparison helpers. Each returns a boolean and logs what did not match."""

from __future__ import annotations

from typing import Any, List, Sequence

from loguru import logger


def does_array_contain_array(values: Sequence[Any], target: Sequence[Any]) -> bool:
    """True when every element of ``target`` is in ``values``."""
    missing = [v for v in target if v not in values]
    if missing:
        logger.info(f"Elements not matched: {missing}")
    return not missing


def contains_each_other(first: Sequence[Any], second: Sequence[Any]) -> bool:
    """True when both lists hold the same elements, ignoring order and repeats."""
    return does_array_contain_array(first, second) and does_array_contain_array(second, first)


def remove_from_array_with_values(values: Sequence[Any], target: Sequence[Any]) -> List[Any]:
    return [v for v in values if v not in target]


def does_array_match_array(values: Sequence[Any], target: Sequence[Any]) -> bool:
    """True when both lists are equal element by element."""
    if len(values) == len(target) and all(a == b for a, b in zip(values, target)):
        return True
    mismatched = [
        (i, a, b) for i, (a, b) in enumerate(zip(values, target)) if a != b
    ]
    logger.info(
        f"Elements not matched (index, actual, expected): {mismatched}; "
        f"lengths {len(values)} vs {len(target)}"
    )
    return False


__all__ = [
    "does_array_contain_array",
    "contains_each_other",
    "remove_from_array_with_values",
    "does_array_match_array",
]
