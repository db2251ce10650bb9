"""
================================================================================
Framework Errors
================================================================================

Exception taxonomy shared by the polling loop, widgets and table scanning.

    UIFrameworkError
     ├── ElementNotFoundError      required element/row/option never matched
     ├── WaitTimeoutError          polling budget exhausted
     ├── InvariantViolationError   structural mismatch or conflicting options
     └── WidgetConfigurationError  operation needs a control the widget lacks

Per-element read failures (stale or detached nodes) are not represented here:
they surface as Playwright's own ``Error`` and are absorbed where they occur.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class UIFrameworkError(Exception):
    """Base class for all framework errors."""
    pass


class NotFoundReason(str, Enum):
    """Why a lookup produced no match."""

    NO_ROWS = "no_rows"
    NO_MATCH = "no_match"


class ElementNotFoundError(UIFrameworkError):
    """
    Raised when a required element, row or option cannot be found.

    Attributes:
        target: Selector or handle description that was searched
        value: The requested value (text, data-value, label...)
        candidate_count: Number of candidates seen when giving up
        reason: NO_ROWS when no candidates appeared at all,
            NO_MATCH when candidates appeared but none matched
    """

    def __init__(
        self,
        message: str,
        target: Any = None,
        value: Any = None,
        candidate_count: Optional[int] = None,
        reason: NotFoundReason = NotFoundReason.NO_MATCH,
    ):
        super().__init__(message)
        self.target = target
        self.value = value
        self.candidate_count = candidate_count
        self.reason = reason


class WaitTimeoutError(UIFrameworkError):
    """
    Raised when a polling loop exhausts its budget.

    Attributes:
        description: Predicate/condition description of the wait
        last_count: Filtered candidate count seen on the last iteration
        iterations: Number of snapshots taken
    """

    def __init__(
        self,
        message: str,
        description: str = "",
        last_count: int = 0,
        iterations: int = 0,
    ):
        super().__init__(message)
        self.description = description
        self.last_count = last_count
        self.iterations = iterations


class InvariantViolationError(UIFrameworkError):
    """Raised on structural mismatches or conflicting caller options. Never retried."""
    pass


class WidgetConfigurationError(UIFrameworkError):
    """Raised when an operation needs a control the widget was not configured with."""
    pass


__all__ = [
    "UIFrameworkError",
    "NotFoundReason",
    "ElementNotFoundError",
    "WaitTimeoutError",
    "InvariantViolationError",
    "WidgetConfigurationError",
]
