"""
================================================================================
Predicate Filter Engine
================================================================================

Filters a snapshot of candidate elements by a set of independent clauses:

    - exact text            (whitespace-normalized text content equals)
    - contained text        (text content contains)
    - excluded texts        (full text contains none of)
    - attribute             (present / equals / contains)
    - state                 (visible, hidden, enabled, disabled, editable)

Clauses are AND-combined. An unset clause places no constraint. Every clause
reads a fresh property from the element; a read that fails because the node
went stale counts as "does not match" (and, for excluded texts, as "not
excluded").

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, List, Optional, Sequence, Tuple

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator


class ElementState(str, Enum):
    """Element states a predicate can require."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    ENABLED = "enabled"
    DISABLED = "disabled"
    EDITABLE = "editable"


@dataclass(frozen=True)
class AttributeClause:
    """
    Attribute constraint.

    The attribute must be present; ``value`` additionally requires equality
    and ``contained_value`` requires containment.
    """

    key: str
    value: Optional[str] = None
    contained_value: Optional[str] = None


@dataclass(frozen=True)
class WaitPredicates:
    """
    Immutable predicate set for one wait/filter call.

    Attributes:
        text: Exact (whitespace-normalized) text content
        contained_text: Substring of the text content
        excluded_texts: Reject elements whose full text contains any of these
        attribute: Attribute presence/equality/containment
        state: Required element state
    """

    text: Optional[str] = None
    contained_text: Optional[str] = None
    excluded_texts: Tuple[str, ...] = field(default_factory=tuple)
    attribute: Optional[AttributeClause] = None
    state: Optional[ElementState] = None

    def __post_init__(self) -> None:
        # Accept lists for convenience while staying hashable/immutable.
        if not isinstance(self.excluded_texts, tuple):
            object.__setattr__(self, "excluded_texts", tuple(self.excluded_texts))
        if self.state is not None and not isinstance(self.state, ElementState):
            object.__setattr__(self, "state", ElementState(self.state))

    @property
    def is_empty(self) -> bool:
        return (
            self.text is None
            and self.contained_text is None
            and not self.excluded_texts
            and self.attribute is None
            and self.state is None
        )

    def describe(self) -> str:
        parts = []
        if self.text is not None:
            parts.append(f"text={self.text!r}")
        if self.contained_text is not None:
            parts.append(f"contained_text={self.contained_text!r}")
        if self.excluded_texts:
            parts.append(f"excluded_texts={list(self.excluded_texts)!r}")
        if self.attribute is not None:
            parts.append(f"attribute={self.attribute}")
        if self.state is not None:
            parts.append(f"state={self.state.value}")
        return ", ".join(parts) or "no predicates"


def normalize_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace and strip the ends."""
    return " ".join((text or "").split())


async def read_or_none(read: Awaitable[Any], what: str = "property") -> Any:
    """
    Await a single element read, absorbing stale-element failures.

    Returns:
        The read value, or None when the element went stale mid-read.
    """
    try:
        return await read
    except PlaywrightError as e:
        logger.debug(f"Transient read failure ({what}): {str(e)[:80]}")
        return None


async def is_state(element: Locator, state: ElementState) -> bool:
    """Check one element state. Raises for unknown states."""
    state = ElementState(state)
    if state is ElementState.VISIBLE:
        return await element.is_visible()
    if state is ElementState.HIDDEN:
        return await element.is_hidden()
    if state is ElementState.ENABLED:
        return await element.is_enabled()
    if state is ElementState.DISABLED:
        return await element.is_disabled()
    if state is ElementState.EDITABLE:
        return await element.is_editable()
    raise ValueError(f"State: {state} is not supported")


async def _matches(element: Locator, predicates: WaitPredicates) -> bool:
    needs_text = (
        predicates.text is not None
        or predicates.contained_text is not None
        or bool(predicates.excluded_texts)
    )
    text = await read_or_none(element.text_content(), "text") if needs_text else None

    if predicates.text is not None:
        if text is None or normalize_text(text) != normalize_text(predicates.text):
            return False

    if predicates.contained_text is not None:
        if text is None or predicates.contained_text not in text:
            return False

    # Unreadable text is treated as not excluded.
    if predicates.excluded_texts and text is not None:
        if any(excluded in text for excluded in predicates.excluded_texts):
            return False

    if predicates.attribute is not None:
        clause = predicates.attribute
        attr = await read_or_none(element.get_attribute(clause.key), f"@{clause.key}")
        if attr is None:
            return False
        if clause.value is not None and attr != clause.value:
            return False
        if clause.contained_value is not None and clause.contained_value not in attr:
            return False

    if predicates.state is not None:
        in_state = await read_or_none(is_state(element, predicates.state), predicates.state.value)
        if not in_state:
            return False

    return True


async def filter_elements(
    candidates: Sequence[Locator],
    predicates: Optional[WaitPredicates] = None,
) -> List[Locator]:
    """
    Return the candidates that satisfy every clause of ``predicates``.

    Elements are evaluated concurrently; the input order is preserved.

    Args:
        candidates: Snapshot of element handles
        predicates: Clause set; None or an empty set keeps every candidate

    Returns:
        Surviving subset, in candidate order
    """
    if not candidates:
        return []
    if predicates is None or predicates.is_empty:
        return list(candidates)

    verdicts = await asyncio.gather(*(_matches(el, predicates) for el in candidates))
    return [el for el, keep in zip(candidates, verdicts) if keep]


__all__ = [
    "ElementState",
    "AttributeClause",
    "WaitPredicates",
    "normalize_text",
    "read_or_none",
    "is_state",
    "filter_elements",
]
