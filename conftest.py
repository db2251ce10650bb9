"""
================================================================================
Root Pytest Configuration
================================================================================

Registers the project-wide markers, sets safe environment defaults and
initializes the framework logger once per session.

Values below are placeholders for local runs; CI provides real ones.

================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from ui_framework.common import init_logger


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line("markers", "P0: Critical priority tests - must pass for deployment")
    config.addinivalue_line("markers", "P1: High priority tests - important functionality")
    config.addinivalue_line("markers", "P2: Medium priority tests - edge cases and minor features")

    # Test type markers
    config.addinivalue_line("markers", "smoke: Quick verification tests")
    config.addinivalue_line("markers", "regression: Full regression test suite")
    config.addinivalue_line("markers", "unit: Browser-free tests against in-memory pages")
    config.addinivalue_line("markers", "ui: Tests that drive a real browser")


def pytest_collection_modifyitems(config, items):
    """Auto-add the 'unit' marker to tests under testsuites/unit."""
    for item in items:
        if "unit" in Path(str(item.fspath)).parts:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    return [
        "",
        "=" * 60,
        "UI Automation Framework",
        "=" * 60,
        "",
    ]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """Set environment defaults if not already provided by the user/CI."""
    defaults = {
        "UI_BASE_URL": "http://localhost:3000",
        "UI_SCREENSHOT_DIR": "screenshots",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    init_logger()
    yield
