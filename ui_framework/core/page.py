"""
================================================================================
Base Page Object
================================================================================

Foundation class for page objects built on ``BaseComponent``.

Provides:
    - Navigation and URL handling
    - Load-state and URL waits
    - Screenshot capture with Allure attachment
    - Recent API response capture for failure diagnostics

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response

from .component import BaseComponent


# Default output directory for screenshots
SCREENSHOT_DIR = Path(os.getenv("UI_SCREENSHOT_DIR", "screenshots"))

MAX_CAPTURED_RESPONSES = 20


class BasePage(BaseComponent):
    """
    Base class for all page objects.

    Usage:
        class ProductsPage(BasePage):
            URL_PATH = "/products"

            async def open_sort(self):
                await self.sort_dropdown.open()
    """

    # Override in subclasses
    URL_PATH: str = "/"

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        base_url: str = "",
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object or a component sharing it
            base_url: Base URL for the application (UI_BASE_URL when empty)
        """
        super().__init__(page)
        if not base_url:
            base_url = os.getenv("UI_BASE_URL", "http://localhost:3000")
        self.base_url = base_url.rstrip("/")

        self._captured_responses: List[Dict[str, Any]] = []
        self.page.on("response", self._capture_response)

    async def _capture_response(self, response: Response) -> None:
        if "/api/" not in response.url:
            return
        self._captured_responses.append({
            "timestamp": datetime.now().isoformat(),
            "url": response.url,
            "status": response.status,
        })
        if len(self._captured_responses) > MAX_CAPTURED_RESPONSES:
            self._captured_responses.pop(0)

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    async def navigate(self, wait_for: str = "networkidle") -> None:
        """
        Navigate to this page and run its check-in.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")
            await self.check_in()

    async def navigate_to(self, path: str, wait_for: str = "networkidle") -> None:
        full_url = f"{self.base_url}{path}"
        with allure.step(f"Navigate to {path}"):
            await self.page.goto(full_url, wait_until=wait_for)

    async def wait_for_url(self, url_pattern: str, timeout: int = 10000) -> None:
        """
        Wait for URL to match pattern.

        Args:
            url_pattern: URL pattern (supports wildcards)
            timeout: Timeout in milliseconds
        """
        with allure.step(f"Wait for URL: {url_pattern}"):
            await self.page.wait_for_url(url_pattern, timeout=timeout)

    async def wait_for_page_load(self, state: str = "networkidle", timeout: int = 15000) -> None:
        await self.page.wait_for_load_state(state, timeout=timeout)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        data = await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach(data, name=name, attachment_type=allure.attachment_type.PNG)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """
        Attach debugging information for a failed test.

        Saves the screenshot, the current URL and the last API responses.
        """
        with allure.step("Capture failure details"):
            try:
                await self.screenshot(f"failure_{test_name}", attach_to_allure=True)
            except PlaywrightError as e:
                logger.warning(f"Could not capture failure screenshot: {e}")

            allure.attach(
                self.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT,
            )

            if self._captured_responses:
                allure.attach(
                    json.dumps(self._captured_responses[-10:], indent=2),
                    name="Recent API Responses",
                    attachment_type=allure.attachment_type.JSON,
                )


__all__ = ["BasePage", "SCREENSHOT_DIR"]
