"""
================================================================================
UI Framework Core
================================================================================

Errors, target resolution, the predicate filter engine, the bounded polling
loop and the component/page base classes.

================================================================================
"""

from .component import BaseComponent
from .errors import (
    ElementNotFoundError,
    InvariantViolationError,
    NotFoundReason,
    UIFrameworkError,
    WaitTimeoutError,
    WidgetConfigurationError,
)
from .page import BasePage
from .polling import MatchCondition, PollBudget, is_transient_error, poll_until
from .predicates import AttributeClause, ElementState, WaitPredicates, filter_elements
from .target import Handle, Selector, Target, TargetLike, as_target, resolve, xpath_literal

__all__ = [
    "BaseComponent",
    "BasePage",
    "UIFrameworkError",
    "NotFoundReason",
    "ElementNotFoundError",
    "WaitTimeoutError",
    "InvariantViolationError",
    "WidgetConfigurationError",
    "PollBudget",
    "MatchCondition",
    "poll_until",
    "is_transient_error",
    "ElementState",
    "AttributeClause",
    "WaitPredicates",
    "filter_elements",
    "Selector",
    "Handle",
    "Target",
    "TargetLike",
    "as_target",
    "resolve",
    "xpath_literal",
]
