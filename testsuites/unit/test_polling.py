import pytest
from playwright.async_api import Error as PlaywrightError

from testsuites.unit.fakes import FakeLocator, FakeNode
from ui_framework.core import (
    InvariantViolationError,
    MatchCondition,
    PollBudget,
    WaitPredicates,
    WaitTimeoutError,
    is_transient_error,
    poll_until,
)


class GrowingSnapshot:
    """Returns the next candidate set on every call, repeating the last one."""

    def __init__(self, *sizes):
        self.sizes = list(sizes)
        self.calls = 0

    async def __call__(self):
        size = self.sizes[min(self.calls, len(self.sizes) - 1)]
        self.calls += 1
        return [FakeLocator(lambda i=i: [FakeNode(f"row {i}")]) for i in range(size)]


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, ms):
        self.calls.append(ms)


# =============================================================================
# Budget and condition
# =============================================================================

@pytest.mark.parametrize(
    "timeout_ms, interval_ms, iterations",
    [(10000, 500, 20), (1200, 500, 3), (500, 500, 1), (0, 500, 1)],
)
def test_max_iterations(timeout_ms, interval_ms, iterations):
    assert PollBudget(timeout_ms, interval_ms).max_iterations == iterations


def test_budget_rejects_non_positive_interval():
    with pytest.raises(InvariantViolationError):
        PollBudget(timeout_ms=1000, interval_ms=0)


def test_budget_defaults_come_from_config(monkeypatch):
    monkeypatch.setenv("WAIT__TIMEOUT_MS", "3000")
    budget = PollBudget.of(interval_ms=100)
    assert budget == PollBudget(timeout_ms=3000, interval_ms=100)


def test_count_and_range_are_mutually_exclusive():
    with pytest.raises(InvariantViolationError):
        MatchCondition(count=2, minimum=1)
    with pytest.raises(InvariantViolationError):
        MatchCondition(minimum=3, maximum=2)


@pytest.mark.parametrize(
    "condition, accepted, rejected",
    [
        (MatchCondition(), [1, 5], [0]),
        (MatchCondition(count=2), [2], [1, 3]),
        (MatchCondition(count=[0, 2]), [0, 2], [1]),
        (MatchCondition(minimum=2, maximum=3), [2, 3], [1, 4]),
        (MatchCondition(maximum=1), [0, 1], [2]),
    ],
)
def test_match_condition(condition, accepted, rejected):
    assert all(condition.is_satisfied(n) for n in accepted)
    assert not any(condition.is_satisfied(n) for n in rejected)


# =============================================================================
# Loop
# =============================================================================

@pytest.mark.asyncio
async def test_succeeds_on_the_iteration_that_meets_the_count():
    snapshot = GrowingSnapshot(0, 2, 3)
    sleep = SleepRecorder()

    matched = await poll_until(
        snapshot, condition=MatchCondition(count=3), budget=PollBudget(10000, 500), sleep=sleep
    )

    assert len(matched) == 3
    assert snapshot.calls == 3
    assert sleep.calls == [500, 500]


@pytest.mark.asyncio
async def test_success_on_first_iteration_never_sleeps():
    sleep = SleepRecorder()
    await poll_until(GrowingSnapshot(1), sleep=sleep, budget=PollBudget(1000, 100))
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_timeout_after_ceil_iterations():
    snapshot = GrowingSnapshot(1)
    sleep = SleepRecorder()

    with pytest.raises(WaitTimeoutError) as exc_info:
        await poll_until(
            snapshot,
            WaitPredicates(text="missing"),
            MatchCondition(minimum=1),
            PollBudget(timeout_ms=1200, interval_ms=500),
            sleep=sleep,
            description="rows",
        )

    error = exc_info.value
    assert snapshot.calls == 3
    assert error.iterations == 3
    assert error.last_count == 0
    assert "missing" in error.description
    assert "count >= 1" in error.description
    assert all(ms > 0 for ms in sleep.calls)
    assert len(sleep.calls) == 2


@pytest.mark.asyncio
async def test_transient_snapshot_failure_counts_as_empty():
    calls = []

    async def snapshot():
        calls.append(1)
        if len(calls) == 1:
            raise PlaywrightError("Execution context was destroyed, most likely because of a navigation")
        return [FakeLocator(lambda: [FakeNode("ok")])]

    matched = await poll_until(snapshot, budget=PollBudget(1000, 100), sleep=SleepRecorder())
    assert len(matched) == 1
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_other_snapshot_failures_propagate():
    async def snapshot():
        raise PlaywrightError("Unexpected token in selector")

    with pytest.raises(PlaywrightError):
        await poll_until(snapshot, budget=PollBudget(1000, 100), sleep=SleepRecorder())


def test_is_transient_error():
    assert is_transient_error(PlaywrightError("Frame was detached"))
    assert not is_transient_error(PlaywrightError("strict mode violation"))
    assert not is_transient_error(ValueError("Frame was detached"))


@pytest.mark.asyncio
async def test_zero_count_condition_waits_for_disappearance():
    snapshot = GrowingSnapshot(2, 1, 0)
    matched = await poll_until(
        snapshot, condition=MatchCondition(count=0), budget=PollBudget(5000, 500), sleep=SleepRecorder()
    )
    assert matched == []
    assert snapshot.calls == 3
