"""
================================================================================
Dropdown List Widgets
================================================================================

Transient overlay lists driven by a trigger control.

    DropdownList           open/close, select a row by text, data-value or
                           index, multi-check rows, search
    DropdownListCollector  multi-select dropdown whose selections are shown as
                           a collection of chips

Every selection first waits (bounded polling) for a visible row containing the
search term, then scans the settled row set for the requested value. Failures
are reported as ``ElementNotFoundError`` with reason NO_ROWS (the list never
produced rows) or NO_MATCH (rows loaded, none matched).

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from ..common.global_config import get_config
from ..core.component import BaseComponent
from ..core.errors import (
    ElementNotFoundError,
    NotFoundReason,
    WaitTimeoutError,
    WidgetConfigurationError,
)
from ..core.polling import MatchCondition, PollBudget
from ..core.predicates import (
    AttributeClause,
    ElementState,
    WaitPredicates,
    normalize_text,
    read_or_none,
)
from ..core.target import TargetLike, describe
from .widget import Widget, sync_checkboxes

DEFAULT_CHECKBOX_LOCATOR = "xpath=.//input[@type='checkbox']"
DATA_VALUE_ATTRIBUTE = "data-value"


class DropdownList(Widget):
    """
    Dropdown list driven by a trigger.

    Open-state detection, in order: root visibility (when a root is given),
    trigger ``class`` containing "open" (``use_trigger_class``), trigger
    ``aria-expanded`` (``use_trigger_aria_expanded``), rows present.

    Args:
        page: Playwright page or a component sharing it
        trigger: Control that opens the list
        rows_locator: Selector matching every option row
        root: Overlay container
        txt_search: Search input inside the overlay
        btn_apply: Confirm button clicked after a selection
        btn_cancel: Cancel button
        btn_clear: Clear-selection button
        hide_trigger_after_selected: The trigger is hidden while the list is open
        use_trigger_class: Detect open state from the trigger's class
        use_trigger_aria_expanded: Detect open state from aria-expanded
        checkbox_locator: Checkbox inside a row; "" means the row itself
        render_time_ms: Settle time after the row set loads
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        trigger: TargetLike,
        rows_locator: TargetLike,
        root: Optional[TargetLike] = None,
        txt_search: Optional[TargetLike] = None,
        btn_apply: Optional[TargetLike] = None,
        btn_cancel: Optional[TargetLike] = None,
        btn_clear: Optional[TargetLike] = None,
        hide_trigger_after_selected: bool = False,
        use_trigger_class: bool = False,
        use_trigger_aria_expanded: bool = False,
        checkbox_locator: str = DEFAULT_CHECKBOX_LOCATOR,
        render_time_ms: Optional[int] = None,
    ):
        super().__init__(page, root=root, trigger=trigger)
        self.rows_locator = rows_locator
        self.txt_search = txt_search
        self.btn_apply = btn_apply
        self.btn_cancel = btn_cancel
        self.btn_clear = btn_clear
        self.hide_trigger_after_selected = hide_trigger_after_selected
        self.use_trigger_class = use_trigger_class
        self.use_trigger_aria_expanded = use_trigger_aria_expanded
        self.checkbox_locator = checkbox_locator
        self.render_time_ms = (
            render_time_ms if render_time_ms is not None else get_config("widgets.render_time_ms", 1000)
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(trigger={describe(self.trigger)})"

    # =========================================================================
    # Open / Close
    # =========================================================================

    async def is_opened(self) -> bool:
        if self.root is not None:
            return await self.is_visible(self.root)
        if self.use_trigger_class:
            css_class = await self.get_attribute(self.trigger, "class")
            if css_class:
                return "open" in css_class
        if self.use_trigger_aria_expanded:
            return (await self.get_attribute(self.trigger, "aria-expanded")) == "true"
        return await self.locator(self.rows_locator).count() > 0

    async def is_closed(self) -> bool:
        if self.hide_trigger_after_selected:
            return await self.is_visible(self.trigger)
        return not await self.is_opened()

    async def open(self, force: bool = False) -> None:
        """Open the list; no-op when it is already open."""
        if await self.is_opened():
            logger.debug(f"{self!r} is already opened.")
            return
        logger.debug(f"Opening {self!r}.")
        await self.click(self.trigger, force=force)

    async def close(self) -> None:
        """Close the list; no-op when it is already closed."""
        if not await self.is_opened():
            logger.debug(f"{self!r} is already closed.")
            return
        logger.debug(f"Closing {self!r}.")
        await self.click(self.trigger)

    async def close_by_click_around(self) -> None:
        """Dismiss the overlay without side effects by clicking beside the first row."""
        await self.click_around_element(self.locator(self.rows_locator).nth(0), border="left", offset=30)

    async def assert_open(self) -> None:
        if self.hide_trigger_after_selected:
            await self.assert_not_visible(self.trigger)
        else:
            await self.assert_visible(self.trigger)
        await self.assert_visible(self.rows_locator)

    async def assert_close(self) -> None:
        await self.assert_not_visible(self.root if self.root is not None else self.rows_locator)

    # =========================================================================
    # Controls
    # =========================================================================

    def _require(self, control: Optional[TargetLike], name: str) -> TargetLike:
        if control is None:
            raise WidgetConfigurationError(f"{self!r} does not have a {name}.")
        return control

    async def clear(self) -> None:
        await self.click(self._require(self.btn_clear, "clear button"))

    async def cancel(self) -> None:
        await self.click(self._require(self.btn_cancel, "cancel button"))

    async def apply(self) -> None:
        if self.btn_apply is not None:
            logger.debug(f"Clicking apply button in {self!r}.")
            await self.click(self.btn_apply)

    async def search(self, text: str, hold_ms: int = 1000) -> None:
        txt_search = self._require(self.txt_search, "search box")
        await self.open()
        await self.fill(txt_search, text)
        await self.sleep(hold_ms)

    # =========================================================================
    # Selection
    # =========================================================================

    async def _wait_for_rows(
        self,
        predicates: WaitPredicates,
        value: Any,
        budget: Optional[PollBudget],
    ) -> List[Locator]:
        try:
            return await self.wait_for_selector(
                self.rows_locator,
                predicates,
                MatchCondition(minimum=1),
                budget,
                message=f"rows for {value!r}",
            )
        except WaitTimeoutError as e:
            total = await self.locator(self.rows_locator).count()
            reason = NotFoundReason.NO_ROWS if total == 0 else NotFoundReason.NO_MATCH
            raise ElementNotFoundError(
                f"{self!r}: no row for {value!r} ({reason.value}, {total} row(s) present)",
                target=describe(self.rows_locator),
                value=value,
                candidate_count=total,
                reason=reason,
            ) from e

    async def _pick_row(
        self,
        rows: Sequence[Locator],
        value: Any,
        read: Callable[[Locator], Awaitable[Optional[str]]],
        matches: Callable[[str], bool],
    ) -> Locator:
        if not rows:
            raise ElementNotFoundError(
                f"{self!r}: no row found for {value!r}",
                target=describe(self.rows_locator),
                value=value,
                candidate_count=0,
                reason=NotFoundReason.NO_ROWS,
            )
        values = await asyncio.gather(*(read_or_none(read(row)) for row in rows))
        for row, row_value in zip(rows, values):
            if row_value is not None and matches(row_value):
                return row
        raise ElementNotFoundError(
            f"{self!r}: cannot find row with {value!r} among {len(rows)} row(s)",
            target=describe(self.rows_locator),
            value=value,
            candidate_count=len(rows),
            reason=NotFoundReason.NO_MATCH,
        )

    async def _confirm(self, row: Locator, force: bool = False) -> None:
        await self.click(row, force=force, timeout=5000)
        await self.apply()

    async def _select(
        self,
        value: str,
        poll_predicates: WaitPredicates,
        read: Callable[[Locator], Awaitable[Optional[str]]],
        matches: Callable[[str], bool],
        result_required: bool,
        sleep_ms: Optional[int],
        render_time_ms: Optional[int],
        force: bool,
        budget: Optional[PollBudget],
    ) -> None:
        if sleep_ms:
            await self.sleep(sleep_ms)
        if result_required:
            await self._wait_for_rows(poll_predicates, value, budget)
        await self.sleep(render_time_ms if render_time_ms is not None else self.render_time_ms)

        rows = await self.locate_all(self.rows_locator)
        row = await self._pick_row(rows, value, read, matches)
        logger.debug(f"Clicking row for {value!r} in {self!r}.")
        await self._confirm(row, force)

    async def _enter_search(self, value: str, search: Optional[str]) -> str:
        """Type the search term when a search box exists; returns the term rows must contain."""
        if self.txt_search is None:
            return value
        term = search or value
        await self.fill(self.txt_search, term)
        return term

    async def select_by_text(
        self,
        text: str,
        search: Optional[str] = None,
        contained: bool = False,
        result_required: bool = True,
        sleep_ms: Optional[int] = None,
        render_time_ms: Optional[int] = None,
        force: bool = False,
        budget: Optional[PollBudget] = None,
    ) -> None:
        """
        Select the row whose text equals (or, with ``contained``, contains) ``text``.

        Args:
            text: Row text to select
            search: Term typed into the search box (defaults to ``text``)
            contained: Match rows containing ``text`` instead of equal to it
            result_required: Wait for a visible row containing the search term first
            sleep_ms: Extra pause after typing
            render_time_ms: Settle time before scanning rows
            force: Force the row click
            budget: Polling budget for the row wait

        Raises:
            ElementNotFoundError: No row matched (reason tells whether any rows loaded)
        """
        with allure.step(f"Select '{text}' from dropdown {describe(self.trigger)}"):
            logger.debug(f"Selecting {text!r} from {self!r}.")
            await self.open()
            term = await self._enter_search(text, search)
            expected = normalize_text(text)
            await self._select(
                text,
                WaitPredicates(contained_text=term, state=ElementState.VISIBLE),
                lambda row: row.inner_text(),
                (lambda t: text in t) if contained else (lambda t: normalize_text(t) == expected),
                result_required,
                sleep_ms,
                render_time_ms,
                force,
                budget,
            )

    async def select_by_containing_text(self, text: str, **kwargs: Any) -> None:
        await self.select_by_text(text, contained=True, **kwargs)

    async def select_by_data_value(
        self,
        value: str,
        search: Optional[str] = None,
        contained: bool = False,
        result_required: bool = True,
        sleep_ms: Optional[int] = None,
        render_time_ms: Optional[int] = None,
        force: bool = False,
        budget: Optional[PollBudget] = None,
    ) -> None:
        """Same as ``select_by_text`` but keyed on the rows' ``data-value`` attribute."""
        with allure.step(f"Select data-value '{value}' from dropdown {describe(self.trigger)}"):
            logger.debug(f"Selecting data-value {value!r} from {self!r}.")
            await self.open()
            await self._enter_search(value, search)
            clause = (
                AttributeClause(DATA_VALUE_ATTRIBUTE, contained_value=value)
                if contained
                else AttributeClause(DATA_VALUE_ATTRIBUTE, value=value)
            )
            await self._select(
                value,
                WaitPredicates(attribute=clause, state=ElementState.VISIBLE),
                lambda row: row.get_attribute(DATA_VALUE_ATTRIBUTE),
                (lambda v: value in v) if contained else (lambda v: v == value),
                result_required,
                sleep_ms,
                render_time_ms,
                force,
                budget,
            )

    async def select_by_index(
        self,
        index: int,
        search: Optional[str] = None,
        wait_ms: Optional[int] = None,
        force: bool = False,
    ) -> None:
        """
        Select the ``index``-th row (1-based).

        Raises:
            ElementNotFoundError: ``index`` is outside the loaded rows
        """
        with allure.step(f"Select row #{index} from dropdown {describe(self.trigger)}"):
            await self.open()
            if search:
                if self.txt_search is None:
                    logger.warning(f"{self!r} has no search box, ignoring search {search!r}.")
                else:
                    await self.fill(self.txt_search, search)
            await self.sleep(wait_ms if wait_ms is not None else self.render_time_ms)

            rows = await self.locate_all(self.rows_locator)
            if index < 1 or index > len(rows):
                raise ElementNotFoundError(
                    f"Index {index} is out of range. {self!r} has {len(rows)} item(s).",
                    target=describe(self.rows_locator),
                    value=index,
                    candidate_count=len(rows),
                    reason=NotFoundReason.NO_ROWS if not rows else NotFoundReason.NO_MATCH,
                )
            await self._confirm(rows[index - 1], force)

    # =========================================================================
    # Multi-check
    # =========================================================================

    def _checkbox_of(self, row: Locator) -> Locator:
        return row if self.checkbox_locator == "" else row.locator(self.checkbox_locator)

    async def _toggle_rows(self, choices: Sequence[str], contained: bool, only_check: bool) -> None:
        rows = await self.locate_all(self.rows_locator)
        logger.debug(f"{self!r} rows count: {len(rows)}")
        await sync_checkboxes(rows, self._checkbox_of, choices, contained, only_check)

    async def check_by_text(
        self,
        choices: Union[str, Sequence[str]],
        contained: bool = False,
        only_check: bool = False,
        sleep_ms: Optional[int] = None,
        render_time_ms: Optional[int] = None,
    ) -> None:
        """
        Bring every row checkbox to ``row text in choices``.

        A checkbox is clicked only when its current state differs from the
        wanted one. With ``only_check`` rows outside ``choices`` are left as
        they are. When a search box exists each choice is searched in turn.
        """
        choices = [choices] if isinstance(choices, str) else list(dict.fromkeys(choices))
        with allure.step(f"Check {choices} in dropdown {describe(self.trigger)}"):
            await self.open()
            if sleep_ms:
                await self.sleep(sleep_ms)
            await self.wait_for_selector(
                self.rows_locator, WaitPredicates(state=ElementState.VISIBLE), MatchCondition(minimum=1)
            )
            await self.sleep(render_time_ms if render_time_ms is not None else self.render_time_ms)

            if self.txt_search is None:
                await self._toggle_rows(choices, contained, only_check)
            else:
                for choice in choices:
                    await self.fill(self.txt_search, choice)
                    await self.wait_for_selector(
                        self.rows_locator,
                        WaitPredicates(contained_text=choice),
                        MatchCondition(minimum=1),
                        message=f"Cannot find row with text: {choice}",
                    )
                    await self._toggle_rows(choices, contained, only_check)

            await self.apply()

    # =========================================================================
    # Reading
    # =========================================================================

    async def get_values(self) -> str:
        """Value of the trigger input, or of an input inside the trigger."""
        trigger = self.locator(self.trigger)
        for candidate in (trigger, trigger.locator("xpath=.//input").first):
            if await read_or_none(candidate.get_attribute("value"), "value"):
                return await candidate.input_value()
        raise ElementNotFoundError(
            f"Cannot get values from {self!r}.", target=describe(self.trigger)
        )

    async def get_current_text(self) -> str:
        return normalize_text(await self.get_text_content(self.trigger))

    async def get_selection(self) -> str:
        return (await self.get_current_text()) or (await self.get_values())


class DropdownListCollector(DropdownList):
    """
    Multi-select dropdown whose selected values are rendered as a collection.

    Args:
        rows_collector: Selector matching each collected selection
        **kwargs: ``DropdownList`` options
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        trigger: TargetLike,
        rows_locator: TargetLike,
        rows_collector: Optional[TargetLike] = None,
        **kwargs: Any,
    ):
        super().__init__(page, trigger, rows_locator, **kwargs)
        self.rows_collector = rows_collector

    async def get_collection(self) -> List[Locator]:
        collector = self._require(self.rows_collector, "rows collector")
        return await self.locate_all(collector)

    async def get_collection_count(self) -> int:
        return len(await self.get_collection())

    async def get_collection_text(self) -> List[str]:
        items = await self.get_collection()
        texts = await asyncio.gather(*(item.text_content() for item in items))
        return [normalize_text(t) for t in texts]

    async def collect(self, texts: Union[str, Sequence[str]], **kwargs: Any) -> None:
        """
        Select every text through the search box, then verify the collection.

        Raises:
            ElementNotFoundError: A text is missing from the collection
            WaitTimeoutError: The collection never reached the expected size
        """
        texts = [texts] if isinstance(texts, str) else list(texts)
        with allure.step(f"Collect {texts}"):
            for text in texts:
                kwargs["search"] = text
                await self.select_by_text(text, **kwargs)

            if self.rows_collector is None:
                logger.warning("Rows collector locator is not provided. Skip checking collector.")
                return

            await self.wait_for_selector_count(self.rows_collector, MatchCondition(count=len(texts)))
            collected = await self.get_collection_text()
            for text in texts:
                if normalize_text(text) not in collected:
                    raise ElementNotFoundError(
                        f"Text: {text} not found in the collection {collected}.",
                        target=describe(self.rows_collector),
                        value=text,
                        candidate_count=len(collected),
                    )


__all__ = ["DropdownList", "DropdownListCollector", "DEFAULT_CHECKBOX_LOCATOR", "DATA_VALUE_ATTRIBUTE"]
