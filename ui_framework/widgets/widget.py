"""
Base widget: a component with an optional root container and an optional
trigger control that opens it.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from ..core.component import BaseComponent
from ..core.predicates import normalize_text, read_or_none
from ..core.target import TargetLike

CHECKED_CLASS_MARKERS = ("checked", "selected")


async def read_checked_state(element: Locator) -> bool:
    """
    Checked state of a native checkbox/radio, or of a styled element.

    Elements that are not real inputs report their state through the
    ``checked`` / ``selected`` class names.
    """
    try:
        return await element.is_checked()
    except PlaywrightError as e:
        if "Not a checkbox or radio button" not in str(e):
            raise
        css_class = (await element.get_attribute("class")) or ""
        logger.trace(f"Falling back to class name for checked state: '{css_class}'")
        return any(marker in css_class for marker in CHECKED_CLASS_MARKERS)


async def _checkbox_state(
    row: Locator, checkbox: Locator
) -> Tuple[Optional[str], Optional[bool]]:
    if not await read_or_none(checkbox.is_visible(), "checkbox visibility"):
        return None, None
    text, checked = await asyncio.gather(
        read_or_none(row.inner_text(), "row text"),
        read_or_none(read_checked_state(checkbox), "checked state"),
    )
    return text, checked


async def sync_checkboxes(
    rows: Sequence[Locator],
    checkbox_of: Callable[[Locator], Locator],
    choices: Sequence[str],
    contained: bool = False,
    only_check: bool = False,
) -> int:
    """
    Bring each row's checkbox to ``row text in choices``.

    States are read concurrently for all rows, then only the checkboxes whose
    state differs are clicked. Rows without a visible, readable checkbox are
    skipped with a warning.

    Args:
        rows: Row snapshot
        checkbox_of: Maps a row to its checkbox
        choices: Texts of the rows that must end up checked
        contained: A row is wanted when its text contains any choice
        only_check: Never uncheck rows outside ``choices``

    Returns:
        Number of clicks performed
    """
    checkboxes = [checkbox_of(row) for row in rows]
    states = await asyncio.gather(
        *(_checkbox_state(row, checkbox) for row, checkbox in zip(rows, checkboxes))
    )
    wanted_texts = {normalize_text(c) for c in choices}

    clicks = 0
    for checkbox, (text, checked) in zip(checkboxes, states):
        if text is None or checked is None:
            logger.warning(f"Checkbox is not visible for row: {text}")
            continue
        row_text = normalize_text(text)
        wanted = any(c in row_text for c in choices) if contained else row_text in wanted_texts
        if wanted == checked or (only_check and not wanted):
            continue
        logger.trace(f"Toggling row {row_text!r} to checked={wanted}")
        await checkbox.click(force=True)
        clicks += 1
    return clicks


class Widget(BaseComponent):
    """
    Base for dropdowns, lists, popups and tables.

    Args:
        page: Playwright page or a component sharing it
        root: Container element of the widget
        trigger: Control that opens the widget
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        root: Optional[TargetLike] = None,
        trigger: Optional[TargetLike] = None,
    ):
        super().__init__(page)
        self.root = root
        self.trigger = trigger

    async def check_in(self) -> None:
        if self.trigger is not None:
            await self.assert_visible(self.trigger)


__all__ = ["Widget", "read_checked_state", "sync_checkboxes", "CHECKED_CLASS_MARKERS"]
