"""
================================================================================
Bounded Polling Loop
================================================================================

The generic "retry until condition or timeout" primitive every consumer-facing
wait is built on.

Each iteration:
    1. takes a fresh snapshot of candidates (never reusing prior handles)
    2. treats a transient snapshot failure (page navigated mid-read) as empty
    3. filters the snapshot through the predicate engine
    4. checks the match condition against the surviving count
    5. returns immediately on success
    6. otherwise sleeps one interval and decrements the remaining budget

Usage:
    budget = PollBudget(timeout_ms=5000, interval_ms=250)
    rows = await poll_until(
        lambda: page.locator("//tr").all(),
        WaitPredicates(contained_text="Banana"),
        MatchCondition(minimum=1),
        budget,
    )

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator

from ..common.global_config import get_config
from .errors import InvariantViolationError, WaitTimeoutError
from .predicates import WaitPredicates, filter_elements

Snapshot = Callable[[], Awaitable[Sequence[Locator]]]
Sleep = Callable[[int], Awaitable[None]]

# Snapshot failures caused by navigation or re-rendering mid-query.
TRANSIENT_ERROR_MARKERS: Tuple[str, ...] = (
    "Execution context was destroyed",
    "Frame was detached",
    "frame was detached",
    "Target closed",
    "Element is not attached to the DOM",
)


def is_transient_error(error: BaseException) -> bool:
    """Return True for Playwright errors caused by page churn rather than bad input."""
    if not isinstance(error, PlaywrightError):
        return False
    message = str(error)
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


@dataclass(frozen=True)
class PollBudget:
    """
    Timeout budget for one polling loop.

    Attributes:
        timeout_ms: Total budget in milliseconds
        interval_ms: Sleep between iterations in milliseconds
    """

    timeout_ms: int = 10000
    interval_ms: int = 500

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise InvariantViolationError(f"Poll interval must be positive, got {self.interval_ms}ms")
        if self.timeout_ms < 0:
            raise InvariantViolationError(f"Poll timeout must not be negative, got {self.timeout_ms}ms")

    @property
    def max_iterations(self) -> int:
        """Number of snapshots the loop takes before giving up (at least one)."""
        return max(1, math.ceil(self.timeout_ms / self.interval_ms))

    @classmethod
    def default(cls) -> "PollBudget":
        """Budget from ``wait.timeout_ms`` / ``wait.interval_ms``."""
        return cls(
            timeout_ms=get_config("wait.timeout_ms", 10000),
            interval_ms=get_config("wait.interval_ms", 500),
        )

    @classmethod
    def of(cls, timeout_ms: Optional[int] = None, interval_ms: Optional[int] = None) -> "PollBudget":
        """Configured default budget with optional per-call overrides."""
        base = cls.default()
        return cls(
            timeout_ms=base.timeout_ms if timeout_ms is None else timeout_ms,
            interval_ms=base.interval_ms if interval_ms is None else interval_ms,
        )


@dataclass(frozen=True)
class MatchCondition:
    """
    Success criterion over the filtered candidate count.

    Either ``count`` (an exact number or a set of accepted numbers) or a
    ``minimum``/``maximum`` range may be given, never both. With nothing
    given the condition is "at least one".
    """

    count: Union[int, Tuple[int, ...], None] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    def __post_init__(self) -> None:
        if self.count is not None and (self.minimum is not None or self.maximum is not None):
            raise InvariantViolationError(
                "Specify either count or min/max for the match condition, not both "
                f"(count={self.count}, min={self.minimum}, max={self.maximum})"
            )
        if self.count is not None and not isinstance(self.count, int):
            object.__setattr__(self, "count", tuple(self.count))
        if self.count is None and self.minimum is None and self.maximum is None:
            object.__setattr__(self, "minimum", 1)
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise InvariantViolationError(f"min ({self.minimum}) is greater than max ({self.maximum})")

    @property
    def accepts_zero(self) -> bool:
        return self.is_satisfied(0)

    def is_satisfied(self, total: int) -> bool:
        if isinstance(self.count, int):
            return total == self.count
        if self.count is not None:
            return total in self.count
        if self.minimum is not None and total < self.minimum:
            return False
        if self.maximum is not None and total > self.maximum:
            return False
        return True

    def describe(self) -> str:
        if isinstance(self.count, int):
            return f"count == {self.count}"
        if self.count is not None:
            return f"count in {list(self.count)}"
        parts = []
        if self.minimum is not None:
            parts.append(f"count >= {self.minimum}")
        if self.maximum is not None:
            parts.append(f"count <= {self.maximum}")
        return " and ".join(parts)


async def _sleep_ms(ms: int) -> None:
    await asyncio.sleep(ms / 1000)


async def poll_until(
    snapshot: Snapshot,
    predicates: Optional[WaitPredicates] = None,
    condition: Optional[MatchCondition] = None,
    budget: Optional[PollBudget] = None,
    sleep: Optional[Sleep] = None,
    description: str = "",
) -> List[Locator]:
    """
    Poll ``snapshot`` until the filtered candidates satisfy ``condition``.

    Args:
        snapshot: Coroutine factory returning a fresh candidate list per call
        predicates: Clauses applied to every snapshot
        condition: Count condition; defaults to "at least one"
        budget: Timeout/interval; defaults to the configured budget
        sleep: Millisecond sleep coroutine (injectable for tests)
        description: Subject of the wait, used in logs and the timeout error

    Returns:
        The filtered candidates of the successful iteration

    Raises:
        WaitTimeoutError: Budget exhausted without satisfying the condition
    """
    predicates = predicates or WaitPredicates()
    condition = condition or MatchCondition()
    budget = budget or PollBudget.default()
    sleep = sleep or _sleep_ms

    summary = f"{description or 'elements'} [{predicates.describe()}; {condition.describe()}]"
    remaining = budget.timeout_ms
    iterations = 0
    last_count = 0

    logger.trace(
        f"Polling for {summary} (timeout={budget.timeout_ms}ms, interval={budget.interval_ms}ms)"
    )

    while True:
        iterations += 1
        try:
            candidates = await snapshot()
        except PlaywrightError as e:
            if not is_transient_error(e):
                raise
            logger.debug(f"Iteration {iterations}: transient snapshot failure, treating as empty: {e}")
            candidates = []

        matched = await filter_elements(candidates, predicates)
        last_count = len(matched)

        if condition.is_satisfied(last_count):
            logger.trace(f"Poll satisfied after {iterations} iteration(s): {summary}")
            return matched

        logger.trace(
            f"Iteration {iterations}: {last_count} of {len(candidates)} candidate(s) matched, "
            f"{remaining}ms remaining"
        )

        remaining -= budget.interval_ms
        if remaining <= 0:
            break
        await sleep(budget.interval_ms)

    message = (
        f"Timed out after {budget.timeout_ms}ms ({iterations} iteration(s)) waiting for "
        f"{summary}; last matched count: {last_count}"
    )
    logger.warning(message)
    raise WaitTimeoutError(message, description=summary, last_count=last_count, iterations=iterations)


__all__ = [
    "PollBudget",
    "MatchCondition",
    "poll_until",
    "is_transient_error",
    "TRANSIENT_ERROR_MARKERS",
]
