"""
Target resolution.

A widget option may be given either as a selector string (CSS / XPath /
Playwright engine syntax) or as an already-built Playwright ``Locator``.
Both are normalized into a small tagged union and resolved in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from playwright.async_api import Locator, Page


@dataclass(frozen=True)
class Selector:
    """A selector string, resolved against a page or a scope locator."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Handle:
    """A pre-resolved Playwright locator."""

    locator: Locator

    def __str__(self) -> str:
        return str(self.locator)


Target = Union[Selector, Handle]
TargetLike = Union[str, Selector, Handle, Locator]


def as_target(value: TargetLike) -> Target:
    """Wrap a raw selector string or locator into a ``Target``."""
    if isinstance(value, (Selector, Handle)):
        return value
    if isinstance(value, str):
        return Selector(value)
    return Handle(value)


def resolve(page: Page, value: TargetLike, scope: Optional[Any] = None) -> Locator:
    """
    Resolve a target into a Playwright locator.

    Args:
        page: Page used for selector strings when no scope is given
        value: Selector string, ``Selector``, ``Handle`` or ``Locator``
        scope: Optional locator that selector strings are resolved under

    Returns:
        Locator for the target. Handles are returned as-is; the scope only
        applies to selector strings.
    """
    target = as_target(value)
    if isinstance(target, Handle):
        return target.locator
    return (scope if scope is not None else page).locator(target.value)


def describe(value: Optional[TargetLike]) -> str:
    """Short human-readable form of a target for logs and error messages."""
    if value is None:
        return "<none>"
    return str(as_target(value))


def xpath_literal(text: str) -> str:
    """
    Quote ``text`` as an XPath string literal.

    XPath 1.0 has no escape sequences, so text holding both quote kinds is
    built with ``concat()``.
    """
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


__all__ = [
    "Selector",
    "Handle",
    "Target",
    "TargetLike",
    "as_target",
    "resolve",
    "describe",
    "xpath_literal",
]
