"""
================================================================================
Media Picker
================================================================================

Gallery dialog: pick one media item, optionally fill its title and
alternative text, then save.

Usage:
    picker = MediaPicker(page, trigger="//button[text()='Add Media']")
    await picker.pick_media(index=2, title="Banner")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import random
from typing import Optional, Union

import allure
from loguru import logger
from playwright.async_api import Page

from ..core.component import BaseComponent
from ..core.errors import ElementNotFoundError, NotFoundReason, WidgetConfigurationError
from ..core.target import TargetLike, describe
from .list_widget import ListWidget
from .widget import Widget

MEDIA_ROWS = "xpath=//div[@id='mediaFileContainer']/div"
NEXT_BUTTON = "xpath=//button[text()='Next']"
SAVE_BUTTON = "xpath=//h6[text()='GALLERY']/../following-sibling::div//button[text()='Save']"
TITLE_INPUT = "xpath=//legend[text()='Title']/following-sibling::div//input"
ALTERNATIVE_TEXT_INPUT = "xpath=//legend[text()='Alternative Text']/following-sibling::div//input"


class MediaPicker(Widget):
    """
    Args:
        page: Playwright page or a component sharing it
        trigger: Control that opens the gallery; without it the gallery is
            expected to be open already
        media_rows: Selector matching each gallery item
        save_wait_ms: Pause before saving, while the details form settles
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        trigger: Optional[TargetLike] = None,
        media_rows: TargetLike = MEDIA_ROWS,
        btn_next: TargetLike = NEXT_BUTTON,
        btn_save: TargetLike = SAVE_BUTTON,
        txt_title: TargetLike = TITLE_INPUT,
        txt_alternative_text: TargetLike = ALTERNATIVE_TEXT_INPUT,
        save_wait_ms: int = 2000,
    ):
        super().__init__(page, trigger=trigger)
        self.lst_media = ListWidget(page, media_rows, render_time_ms=0)
        self.btn_next = btn_next
        self.btn_save = btn_save
        self.txt_title = txt_title
        self.txt_alternative_text = txt_alternative_text
        self.save_wait_ms = save_wait_ms

    async def open(self) -> None:
        if self.trigger is None:
            raise WidgetConfigurationError("Trigger is not provided.")
        await self.click(self.trigger)

    async def get_media_count(self) -> int:
        return await self.lst_media.get_rows_count()

    async def pick_media(
        self,
        index: Optional[int] = None,
        title: Optional[str] = None,
        alternative_text: Optional[str] = None,
    ) -> int:
        """
        Pick the ``index``-th item (1-based), or a random one, and save.

        Returns:
            The index that was picked

        Raises:
            ElementNotFoundError: The gallery is empty or the index is out of range
        """
        if self.trigger is not None:
            await self.open()
        if index is None:
            count = await self.get_media_count()
            if not count:
                raise ElementNotFoundError(
                    "The media gallery is empty.",
                    target=describe(self.lst_media.rows_locator),
                    candidate_count=0,
                    reason=NotFoundReason.NO_ROWS,
                )
            index = random.randint(1, count)
        logger.debug(f"Picking media at index {index}")

        with allure.step(f"Pick media #{index}"):
            await self.lst_media.select_by_index(index)
            await self.click(self.btn_next)
            if title:
                await self.fill(self.txt_title, title)
            if alternative_text:
                await self.fill(self.txt_alternative_text, alternative_text)
            await self.sleep(self.save_wait_ms)
            await self.click(self.btn_save)
        return index


__all__ = ["MediaPicker"]
