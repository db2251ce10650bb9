"""
================================================================================
Base Component
================================================================================

Capability adapter over an async Playwright ``Page``. Every page, widget and
table of the framework derives from ``BaseComponent`` and reaches the browser
only through it:

    - locate           locator / locate_all (fresh query on every call)
    - read             get_text_content / get_inner_text / get_attribute
    - state            is_visible / is_state / is_checked
    - act              click / click_around_element / fill / press / check
    - wait             wait_for_selector / wait_for_selector_count / sleep
    - network          wait_for_api_loaded / expect_api_response
    - assert           assert_visible / assert_element_count / assert_text / attributes

Usage:
    component = BaseComponent(page)
    rows = await component.wait_for_selector(
        "//table//tr",
        WaitPredicates(contained_text="Banana", state=ElementState.VISIBLE),
        MatchCondition(minimum=1),
    )

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..common.global_config import get_config
from .errors import WaitTimeoutError
from .polling import MatchCondition, PollBudget, poll_until
from .predicates import AttributeClause, ElementState, WaitPredicates, is_state, normalize_text, read_or_none
from .target import TargetLike, describe, resolve


class BaseComponent:
    """
    Base class for everything that talks to the page.

    Accepts either a Playwright ``Page`` or another component, in which case
    the underlying page is shared.
    """

    def __init__(self, page: Union[Page, "BaseComponent"]):
        self.page: Page = page.page if isinstance(page, BaseComponent) else page

    async def check_in(self) -> None:
        """Hook for subclasses that must verify they are on screen."""
        return None

    # =========================================================================
    # Locating
    # =========================================================================

    def locator(self, target: TargetLike, scope: Optional[Locator] = None) -> Locator:
        """Resolve a selector string or locator, optionally under ``scope``."""
        return resolve(self.page, target, scope)

    async def locate_all(self, target: TargetLike, scope: Optional[Locator] = None) -> List[Locator]:
        """Fresh snapshot of every element matching ``target``."""
        return await self.locator(target, scope).all()

    # =========================================================================
    # Interaction
    # =========================================================================

    async def click(
        self,
        target: TargetLike,
        force: bool = False,
        timeout: int = 15000,
        double: bool = False,
    ) -> None:
        logger.debug(f"Clicking element: {describe(target)}")
        element = self.locator(target)
        if double:
            await element.dblclick(force=force, timeout=timeout)
        else:
            await element.click(force=force, timeout=timeout)

    async def click_around_element(
        self,
        target: TargetLike,
        border: str = "top",
        offset: int = 10,
    ) -> None:
        """
        Click just outside an element, typically to dismiss an overlay.

        Args:
            target: Element to click around
            border: Side to click on - 'top', 'bottom', 'left' or 'right'
            offset: Distance from the element's corner in pixels
        """
        logger.debug(f"Clicking around element: {describe(target)} ({border}, {offset}px)")
        box = await self.locator(target).bounding_box()
        if not box:
            raise ValueError(f"Element position is not found: {describe(target)}")

        x, y = box["x"], box["y"]
        if border == "top":
            y -= offset
        elif border == "bottom":
            y += box["height"] + offset
        elif border == "left":
            x -= offset
        elif border == "right":
            x += box["width"] + offset
        else:
            raise ValueError(f"Unsupported border: {border}")
        await self.page.mouse.click(x, y)

    async def fill(
        self,
        target: TargetLike,
        text: Union[str, int, float],
        clear: bool = False,
        confirm: bool = False,
    ) -> None:
        """
        Fill an input element.

        Args:
            target: Input element
            text: Value to type; numbers are converted to strings
            clear: Clear the input first
            confirm: Press Enter afterwards
        """
        logger.debug(f"Filling element: {describe(target)} with: {text}")
        element = self.locator(target)
        if clear:
            await element.clear()
        await element.fill(str(text))
        if confirm:
            await self.press("Enter")

    async def press(self, key: str) -> None:
        logger.debug(f"Pressing key: {key}")
        await self.page.keyboard.press(key)

    async def check(self, target: TargetLike, value: bool = True) -> None:
        logger.debug(f"Setting checked={value}: {describe(target)}")
        element = self.locator(target)
        if value:
            await element.check()
        else:
            await element.uncheck()

    async def uncheck(self, target: TargetLike) -> None:
        await self.check(target, False)

    async def is_checked(self, target: TargetLike) -> bool:
        return await self.locator(target).is_checked()

    # =========================================================================
    # Reading
    # =========================================================================

    async def get_text_content(self, target: TargetLike) -> str:
        return (await self.locator(target).text_content()) or ""

    async def get_inner_text(self, target: TargetLike) -> str:
        return await self.locator(target).inner_text()

    async def get_attribute(self, target: TargetLike, name: str) -> Optional[str]:
        return await self.locator(target).get_attribute(name)

    async def get_input_value(self, target: TargetLike) -> str:
        return await self.locator(target).input_value()

    async def is_visible(self, target: TargetLike) -> bool:
        return await self.locator(target).is_visible()

    async def is_state(self, target: TargetLike, state: Union[ElementState, str]) -> bool:
        return await is_state(self.locator(target), ElementState(state))

    async def get_elements_count(self, target: TargetLike) -> int:
        return await self.locator(target).count()

    # =========================================================================
    # Waiting
    # =========================================================================

    async def sleep(self, ms: Optional[int] = None) -> None:
        """Pause for ``ms`` milliseconds (200ms when not given)."""
        duration = 200 if ms is None else ms
        logger.trace(f"Sleeping for: {duration}ms")
        await asyncio.sleep(duration / 1000)

    async def wait_for_selector(
        self,
        target: TargetLike,
        predicates: Optional[WaitPredicates] = None,
        condition: Optional[MatchCondition] = None,
        budget: Optional[PollBudget] = None,
        scope: Optional[Locator] = None,
        message: str = "",
    ) -> List[Locator]:
        """
        Poll ``target`` until the filtered candidates satisfy ``condition``.

        Candidates are re-queried on every iteration.

        Args:
            target: Selector string or locator
            predicates: Filter clauses
            condition: Count condition, "at least one" by default
            budget: Timeout/interval, the configured budget by default
            scope: Resolve selector strings under this locator
            message: Extra context for the timeout message

        Returns:
            The matching elements of the successful iteration

        Raises:
            WaitTimeoutError: The condition was not met within the budget
        """
        description = describe(target) if not message else f"{describe(target)} ({message})"
        return await poll_until(
            lambda: self.locate_all(target, scope),
            predicates,
            condition,
            budget,
            sleep=self.sleep,
            description=description,
        )

    async def wait_for_selector_count(
        self,
        target: TargetLike,
        condition: MatchCondition,
        budget: Optional[PollBudget] = None,
    ) -> int:
        """Poll until the raw element count satisfies ``condition``; returns that count."""
        matched = await self.wait_for_selector(target, None, condition, budget)
        return len(matched)

    async def wait_for_element_has_text(
        self,
        target: TargetLike,
        text: Union[str, re.Pattern],
        timeout_ms: Optional[int] = None,
    ) -> List[Locator]:
        """
        Poll until an element matching ``target`` has ``text``.

        A string must be contained in the text content; a compiled regex must
        match somewhere in it.

        Raises:
            WaitTimeoutError: No element got the text within the budget
        """
        logger.debug(f"Waiting for selector: {describe(target)} to have text: {text}")
        budget = PollBudget.of(timeout_ms=timeout_ms)
        if not isinstance(text, re.Pattern):
            return await self.wait_for_selector(target, WaitPredicates(contained_text=text), budget=budget)

        async def matching() -> List[Locator]:
            elements = await self.locate_all(target)
            texts = await asyncio.gather(*(read_or_none(el.text_content(), "text") for el in elements))
            return [el for el, t in zip(elements, texts) if t is not None and text.search(t)]

        return await poll_until(
            matching, budget=budget, sleep=self.sleep, description=f"{describe(target)} ~ /{text.pattern}/"
        )

    async def wait_for_api_loaded(
        self,
        url: str,
        timeout_ms: Optional[int] = None,
        render_time_ms: int = 100,
    ) -> Response:
        """
        Wait for a response whose URL contains ``url``, then let the UI render.

        Raises:
            WaitTimeoutError: No such response within ``timeout_ms``
        """
        timeout = timeout_ms if timeout_ms is not None else get_config("network.response_timeout_ms", 10000)
        logger.debug(f"Waiting for API loaded: {url}")
        try:
            response = await self.page.wait_for_response(lambda r: url in r.url, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(
                f"No response matching '{url}' within {timeout}ms", description=url
            ) from e
        await self.sleep(render_time_ms)
        return response

    @asynccontextmanager
    async def expect_api_response(
        self,
        url: str,
        timeout_ms: Optional[int] = None,
        render_time_ms: Optional[int] = None,
    ) -> AsyncIterator[None]:
        """
        Wait for a response to ``url`` triggered by the actions inside the block.

        Usage:
            async with component.expect_api_response("/api/items"):
                await component.click(sort_option)
        """
        timeout = timeout_ms if timeout_ms is not None else get_config("network.response_timeout_ms", 10000)
        render_time = render_time_ms if render_time_ms is not None else get_config("widgets.render_time_ms", 1000)
        logger.debug(f"Expecting API response: {url}")
        block_done = False
        try:
            async with self.page.expect_response(lambda r: url in r.url, timeout=timeout) as info:
                yield
                block_done = True
            await info.value
        except PlaywrightTimeoutError as e:
            # Timeouts raised by the block itself are not ours to rename.
            if not block_done:
                raise
            raise WaitTimeoutError(
                f"No response matching '{url}' within {timeout}ms", description=url
            ) from e
        await self.sleep(render_time)

    # =========================================================================
    # Assertions
    # =========================================================================

    async def _assert_state(
        self,
        target: TargetLike,
        state: ElementState,
        timeout_ms: Optional[int],
    ) -> None:
        with allure.step(f"Assert {state.value}: {describe(target)}"):
            await self.wait_for_selector(
                target,
                WaitPredicates(state=state),
                MatchCondition(minimum=1),
                PollBudget.of(timeout_ms=timeout_ms),
                message=f"expected {state.value}",
            )

    async def assert_visible(self, target: TargetLike, timeout_ms: Optional[int] = None) -> None:
        await self._assert_state(target, ElementState.VISIBLE, timeout_ms)

    async def assert_enabled(self, target: TargetLike, timeout_ms: Optional[int] = None) -> None:
        await self._assert_state(target, ElementState.ENABLED, timeout_ms)

    async def assert_disabled(self, target: TargetLike, timeout_ms: Optional[int] = None) -> None:
        await self._assert_state(target, ElementState.DISABLED, timeout_ms)

    async def assert_not_visible(self, target: TargetLike, timeout_ms: Optional[int] = None) -> None:
        """Passes once no element matching ``target`` is visible."""
        with allure.step(f"Assert not visible: {describe(target)}"):
            await self.wait_for_selector(
                target,
                WaitPredicates(state=ElementState.VISIBLE),
                MatchCondition(count=0),
                PollBudget.of(timeout_ms=timeout_ms),
                message="expected not visible",
            )

    async def assert_element_count(
        self,
        target: TargetLike,
        count: int,
        timeout_ms: Optional[int] = None,
    ) -> None:
        with allure.step(f"Assert {count} element(s): {describe(target)}"):
            await self.wait_for_selector_count(
                target, MatchCondition(count=count), PollBudget.of(timeout_ms=timeout_ms)
            )

    async def _assert_attribute(
        self,
        target: TargetLike,
        clause: AttributeClause,
        timeout_ms: Optional[int],
    ) -> None:
        with allure.step(f"Assert {clause}: {describe(target)}"):
            await self.wait_for_selector(
                target,
                WaitPredicates(attribute=clause),
                MatchCondition(minimum=1),
                PollBudget.of(timeout_ms=timeout_ms),
                message=f"expected {clause}",
            )

    async def assert_element_has_attribute(
        self, target: TargetLike, attribute: str, timeout_ms: Optional[int] = None
    ) -> None:
        await self._assert_attribute(target, AttributeClause(attribute), timeout_ms)

    async def assert_element_attribute_has_value(
        self, target: TargetLike, attribute: str, value: str, timeout_ms: Optional[int] = None
    ) -> None:
        await self._assert_attribute(target, AttributeClause(attribute, value=value), timeout_ms)

    async def assert_element_attribute_contains(
        self, target: TargetLike, attribute: str, value: str, timeout_ms: Optional[int] = None
    ) -> None:
        await self._assert_attribute(target, AttributeClause(attribute, contained_value=value), timeout_ms)

    async def assert_text(self, target: TargetLike, text: str) -> None:
        actual = normalize_text(await self.get_inner_text(target))
        assert actual == normalize_text(text), (
            f"Text of {describe(target)} is '{actual}', expected '{text}'"
        )

    async def assert_text_contains(self, target: TargetLike, text: str) -> None:
        actual = await self.get_inner_text(target)
        assert text in actual, f"Text of {describe(target)} is '{actual}', expected to contain '{text}'"


__all__ = ["BaseComponent"]
