"""Structural equality used by assertions on scraped data."""

from __future__ import annotations

from typing import Any, Mapping


def deep_equal(a: Any, b: Any) -> bool:
    """
    Compare two values structurally.

    Sequences (lists and tuples) are compared as multisets: same length and the
    same elements in any order. Mappings must have the same key set with
    deep-equal values. Everything else uses ``==``.
    """
    if a is b:
        return True

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if set(a) != set(b):
            return False
        return all(deep_equal(a[key], b[key]) for key in a)

    a_is_seq = isinstance(a, (list, tuple))
    b_is_seq = isinstance(b, (list, tuple))
    if a_is_seq and b_is_seq:
        if len(a) != len(b):
            return False
        remaining = list(b)
        for item in a:
            for i, candidate in enumerate(remaining):
                if deep_equal(item, candidate):
                    del remaining[i]
                    break
            else:
                return False
        return True
    if a_is_seq != b_is_seq:
        return False

    return a == b


__all__ = ["deep_equal"]
