"""
================================================================================
Unit Test Fixtures
================================================================================

Browser-free fixtures: an in-memory page and a sleep that returns at once
while recording every requested duration.

================================================================================
"""

from typing import List

import pytest

from testsuites.unit.fakes import FakePage
from ui_framework.common import reset_config
from ui_framework.core import BaseComponent


@pytest.fixture(autouse=True)
def slept(monkeypatch) -> List[int]:
    """Durations (ms) passed to ``BaseComponent.sleep``; nothing actually sleeps."""
    durations: List[int] = []

    async def _no_wait(self, ms=None):
        durations.append(200 if ms is None else ms)

    monkeypatch.setattr(BaseComponent, "sleep", _no_wait)
    return durations


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def page() -> FakePage:
    return FakePage()
