"""
List-shaped widgets: plain lists, checkbox groups, radio groups and
typed-text collectors.

Row indexes are 1-based throughout.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from ..common.global_config import get_config
from ..core.component import BaseComponent
from ..core.errors import ElementNotFoundError, NotFoundReason, WaitTimeoutError
from ..core.predicates import WaitPredicates, normalize_text, read_or_none
from ..core.target import TargetLike, describe
from ..utils.arrays import contains_each_other
from .dropdown import DEFAULT_CHECKBOX_LOCATOR
from .widget import Widget, sync_checkboxes


class ListWidget(Widget):
    """
    A static list of rows.

    Args:
        page: Playwright page or a component sharing it
        rows_locator: Selector matching every row
        root: Container the rows are looked up under
        render_time_ms: Pause before reading the rows
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        rows_locator: TargetLike,
        root: Optional[TargetLike] = None,
        render_time_ms: Optional[int] = None,
    ):
        super().__init__(page, root=root)
        self.rows_locator = rows_locator
        self.render_time_ms = (
            render_time_ms if render_time_ms is not None else get_config("widgets.render_time_ms", 1000)
        )

    def rows(self) -> Locator:
        scope = self.locator(self.root) if self.root is not None else None
        return self.locator(self.rows_locator, scope)

    async def get_rows(self) -> List[Locator]:
        return await self.rows().all()

    async def _settle(self, wait_ms: Optional[int]) -> None:
        await self.sleep(wait_ms if wait_ms is not None else self.render_time_ms)

    def _not_found(self, value, rows: Sequence[Locator]) -> ElementNotFoundError:
        return ElementNotFoundError(
            f"{type(self).__name__}: {value!r} not found among {len(rows)} row(s).",
            target=describe(self.rows_locator),
            value=value,
            candidate_count=len(rows),
            reason=NotFoundReason.NO_ROWS if not rows else NotFoundReason.NO_MATCH,
        )

    async def _row_at(self, index: int, rows: Sequence[Locator]) -> Locator:
        if index < 1 or index > len(rows):
            raise ElementNotFoundError(
                f"Index {index} is out of range. The list has {len(rows)} item(s).",
                target=describe(self.rows_locator),
                value=index,
                candidate_count=len(rows),
                reason=NotFoundReason.NO_ROWS if not rows else NotFoundReason.NO_MATCH,
            )
        return rows[index - 1]

    async def select_by_text(
        self,
        text: Union[str, Sequence[str]],
        sub_locator: Optional[str] = None,
        sub_select_locator: Optional[str] = None,
        wait_ms: Optional[int] = None,
    ) -> None:
        """
        Click the row whose text equals ``text`` (each text when a list is given).

        Args:
            text: Row text, or several row texts
            sub_locator: Read and match text on this element inside each row
            sub_select_locator: Click this element inside the row instead of the row

        Raises:
            ElementNotFoundError: No row has the text
        """
        texts = [text] if isinstance(text, str) else list(text)
        logger.debug(f"Select by text: {texts}")
        await self._settle(wait_ms)
        for value in texts:
            rows = await self.get_rows()
            targets = [row.locator(sub_locator) for row in rows] if sub_locator else rows
            row_texts = await asyncio.gather(
                *(read_or_none(t.inner_text(), "row text") for t in targets)
            )
            expected = normalize_text(value)
            index = next(
                (i for i, t in enumerate(row_texts) if t is not None and normalize_text(t) == expected),
                None,
            )
            if index is None:
                raise self._not_found(value, rows)
            row = rows[index]
            await self.click(row.locator(sub_select_locator) if sub_select_locator else row)

    async def select_by_index(self, index: int, wait_ms: Optional[int] = None) -> None:
        logger.debug(f"Select by index: {index}")
        await self._settle(wait_ms)
        await self.click(await self._row_at(index, await self.get_rows()))

    async def get_rows_count(self, wait_ms: Optional[int] = None) -> int:
        await self._settle(wait_ms)
        return len(await self.get_rows())

    async def get_full_text_by_index(self, index: int, wait_ms: Optional[int] = None) -> str:
        await self._settle(wait_ms)
        row = await self._row_at(index, await self.get_rows())
        return await row.inner_text()

    async def get_list_text(
        self, sub_locator: Optional[str] = None, wait_ms: Optional[int] = None
    ) -> List[Optional[str]]:
        """Text content of every row (or of ``sub_locator`` inside it)."""
        await self._settle(wait_ms)
        rows = await self.get_rows()
        logger.debug(f"List rows count: {len(rows)}")
        targets = [row.locator(sub_locator) for row in rows] if sub_locator else rows
        return list(await asyncio.gather(*(t.text_content() for t in targets)))


class Checkbox(ListWidget):
    """
    Checkbox group.

    ``chk_locator`` selects the checkbox inside a row: the native checkbox
    input when None, the row itself when "", otherwise a custom selector.
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        rows_locator: TargetLike,
        chk_locator: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(page, rows_locator, **kwargs)
        self.chk_locator = chk_locator

    def _checkbox_of(self, row: Locator) -> Locator:
        if self.chk_locator is None:
            return row.locator(DEFAULT_CHECKBOX_LOCATOR)
        if self.chk_locator == "":
            return row
        return row.locator(self.chk_locator)

    async def check_by_text(
        self,
        choices: Union[str, Sequence[str]],
        contained: bool = False,
        only_check: bool = False,
    ) -> None:
        """Check exactly the rows in ``choices``, toggling only rows whose state differs."""
        choices = [choices] if isinstance(choices, str) else list(dict.fromkeys(choices))
        with allure.step(f"Check {choices}"):
            logger.debug(f"Checking checkbox by text: {choices}")
            rows = await self.get_rows()
            await sync_checkboxes(rows, self._checkbox_of, choices, contained, only_check)

    async def check_by_index(self, index: int) -> None:
        await self.click(await self._row_at(index, await self.get_rows()))

    async def assert_all_choices_available(self, choices: Sequence[str]) -> None:
        if not choices:
            logger.warning("All choices length is 0, which cannot be compared")
        rows = await self.get_rows()
        texts = await asyncio.gather(*(row.inner_text() for row in rows))
        actual = [normalize_text(t) for t in texts]
        assert contains_each_other(actual, list(choices)), (
            f"Choices {actual} do not match expected {list(choices)}"
        )


class Radio(ListWidget):
    """Radio group; every ``select_*`` raises ``ElementNotFoundError`` when nothing matches."""

    async def _click_first(self, value, read, matches) -> None:
        rows = await self.get_rows()
        values = await asyncio.gather(*(read_or_none(read(row)) for row in rows))
        for row, row_value in zip(rows, values):
            if row_value is not None and matches(row_value):
                await self.click(row)
                return
        raise self._not_found(value, rows)

    async def select_by_text(self, text: str) -> None:
        logger.debug(f"Selecting radio by text: {text}")
        expected = normalize_text(text)
        await self._click_first(text, lambda row: row.inner_text(), lambda t: normalize_text(t) == expected)

    async def select_by_containing_text(self, text: str, case_insensitive: bool = False) -> None:
        logger.debug(f"Selecting radio containing text: {text}")
        needle = text.lower() if case_insensitive else text
        await self._click_first(
            text,
            lambda row: row.text_content(),
            lambda t: needle in (t.lower() if case_insensitive else t),
        )

    async def select_by_value(self, value: str) -> None:
        logger.debug(f"Selecting radio has value: {value}")
        await self._click_first(value, lambda row: row.get_attribute("value"), lambda v: value in v)


class TextCollector(Widget):
    """
    Free-text input whose entries are collected as chips.

    Args:
        page: Playwright page or a component sharing it
        txt_search: Input the texts are typed into
        rows_collector: Selector matching each collected chip
        root: Container the chips are looked up under
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        txt_search: TargetLike,
        rows_collector: TargetLike,
        root: Optional[TargetLike] = None,
    ):
        super().__init__(page, root=root)
        self.txt_search = txt_search
        self.rows_collector = rows_collector

    def _scope(self) -> Optional[Locator]:
        return self.locator(self.root) if self.root is not None else None

    async def get_collection(self) -> List[Locator]:
        return await self.locate_all(self.rows_collector, self._scope())

    async def get_collection_count(self) -> int:
        return len(await self.get_collection())

    async def get_collection_text(self) -> List[str]:
        items = await self.get_collection()
        texts = await asyncio.gather(*(item.text_content() for item in items))
        return [normalize_text(t) for t in texts]

    async def collect(self, texts: Union[str, Sequence[str]]) -> None:
        """
        Type each text and confirm it with Enter, then wait for its chip.

        Raises:
            ElementNotFoundError: A chip did not show up
        """
        texts = [texts] if isinstance(texts, str) else list(texts)
        with allure.step(f"Collect {texts}"):
            for text in texts:
                await self.fill(self.txt_search, text, confirm=True)
                try:
                    await self.wait_for_selector(
                        self.rows_collector, WaitPredicates(text=text), scope=self._scope()
                    )
                except WaitTimeoutError as e:
                    raise ElementNotFoundError(
                        f"Text: {text} not found in the collection.",
                        target=describe(self.rows_collector),
                        value=text,
                        candidate_count=await self.get_collection_count(),
                    ) from e

__all__ = ["ListWidget", "Checkbox", "Radio", "TextCollector"]
