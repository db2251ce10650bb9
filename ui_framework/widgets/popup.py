"""
Modal popups: a generic popup with optional apply / cancel / close
controls, the table view-setting popup and inline confirmations.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from ..core.component import BaseComponent
from ..core.errors import WidgetConfigurationError
from ..core.predicates import ElementState, WaitPredicates
from ..core.target import TargetLike, xpath_literal
from .dropdown import DropdownList
from .list_widget import Checkbox
from .widget import Widget

POPUP_ASSERT_TIMEOUT_MS = 500


class Popup(Widget):
    """
    Args:
        page: Playwright page or a component sharing it
        root: Popup container
        trigger: Control that opens the popup
        btn_apply: Confirm button
        btn_cancel: Cancel button
        btn_close: Close button
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        root: TargetLike,
        trigger: Optional[TargetLike] = None,
        btn_apply: Optional[TargetLike] = None,
        btn_cancel: Optional[TargetLike] = None,
        btn_close: Optional[TargetLike] = None,
    ):
        super().__init__(page, root=root, trigger=trigger)
        self.btn_apply = btn_apply
        self.btn_cancel = btn_cancel
        self.btn_close = btn_close

    async def open(self) -> None:
        if await self.is_visible(self.root):
            logger.debug("Popup is already opened.")
            return
        if self.trigger is None:
            raise WidgetConfigurationError("Trigger is not set. Can not activate the popup.")
        await self.click(self.trigger)

    async def assert_appear(self, timeout_ms: int = POPUP_ASSERT_TIMEOUT_MS) -> None:
        logger.debug("Asserting that the popup appears.")
        await self.assert_visible(self.root, timeout_ms)

    async def assert_disappear(self, timeout_ms: int = POPUP_ASSERT_TIMEOUT_MS) -> None:
        logger.debug("Asserting that the popup disappears.")
        await self.assert_not_visible(self.root, timeout_ms)

    async def click_by_text(self, text: str) -> None:
        await self.click(
            self.locator(self.root).locator(f"xpath=.//*[contains(text(), {xpath_literal(text)})]").first,
            timeout=5000,
        )

    async def _click_control(self, control: Optional[TargetLike], name: str) -> None:
        if not control:
            raise WidgetConfigurationError(f"{name} button is not set.")
        logger.debug(f"Clicking popup {name.lower()} button.")
        await self.click(control)

    async def apply(self) -> None:
        await self._click_control(self.btn_apply, "Apply")

    async def cancel(self) -> None:
        await self._click_control(self.btn_cancel, "Cancel")

    async def close(self) -> None:
        await self._click_control(self.btn_close, "Close")


ITEMS_PER_PAGE = (10, 25, 50, 75, 100)
VIEW_COLUMN_ROWS = "xpath=.//*[text()='Columns']/..//input[@type='checkbox']/../.."
ITEMS_PER_PAGE_TRIGGER = "xpath=.//span[contains(text(),'items per page')]/following-sibling::div[1]"
ITEMS_PER_PAGE_ROWS = "xpath=//ul//li"


class ViewSetting(Popup):
    """
    Table view settings: visible columns and items per page.

    Args:
        page: Playwright page or a component sharing it
        root: Settings popup
        trigger: Control that opens the popup
        columns: Column choices the popup is expected to offer
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        root: TargetLike,
        trigger: Optional[TargetLike] = None,
        columns: Optional[Sequence[str]] = None,
    ):
        super().__init__(page, root=root, trigger=trigger)
        container = self.locator(root)
        self.btn_apply = container.locator("xpath=.//button[text()='Apply']")
        self.btn_cancel = container.locator("xpath=.//button[text()='Cancel']")
        self.columns = list(columns or [])
        self.column_checkboxes = Checkbox(page, VIEW_COLUMN_ROWS, root=root)
        self.ddl_items_per_page = DropdownList(
            page,
            trigger=container.locator(ITEMS_PER_PAGE_TRIGGER),
            rows_locator=ITEMS_PER_PAGE_ROWS,
        )

    async def apply(self) -> None:
        logger.debug("Clicking view setting apply button.")
        await self.click(self.btn_apply, double=True)

    async def assert_appear(self, timeout_ms: int = POPUP_ASSERT_TIMEOUT_MS) -> None:
        await super().assert_appear(timeout_ms)
        await self.column_checkboxes.assert_all_choices_available(self.columns)

    async def select_columns(self, columns: Sequence[str]) -> None:
        await self.open()
        await self.set_columns(columns)
        await self.apply()

    async def set_columns(self, columns: Sequence[str]) -> None:
        await self.column_checkboxes.check_by_text(columns)

    async def set_items_per_page(self, items: int) -> None:
        if items not in ITEMS_PER_PAGE:
            raise ValueError(f"Items per page must be one of {ITEMS_PER_PAGE}, got {items}")
        await self.ddl_items_per_page.select_by_text(str(items))

    async def set_view(self, columns: Optional[Sequence[str]] = None, items_per_page: Optional[int] = None) -> None:
        """
        Open the popup, apply the given columns and page size, then confirm.

        Raises:
            ValueError: Neither option is given
        """
        if not columns and not items_per_page:
            logger.error("No options are set.")
            raise ValueError("No options are set.")
        with allure.step(f"Set view: columns={columns}, items_per_page={items_per_page}"):
            await self.open()
            if columns:
                await self.set_columns(columns)
            if items_per_page:
                await self.set_items_per_page(items_per_page)
                await self.sleep(1000)
            await self.apply()


class PopConfirm(Widget):
    """
    Inline confirmation with command buttons ("OK", "Cancel", "Yes", ...).

    Without a root the buttons and message are looked up on the whole page.
    """

    def __init__(self, page: Union[Page, BaseComponent], root: Optional[TargetLike] = None):
        super().__init__(page, root=root)

    def _command_button(self, command: str) -> Locator:
        text = xpath_literal(command)
        if self.root is None:
            return self.locator(f"xpath=//button//*[text()={text}] | //button[text()={text}]")
        return self.locator(self.root).locator(f"xpath=.//button//*[text()={text}] | .//button[text()={text}]")

    async def confirm(self, command: str) -> None:
        """
        Click the visible button labelled ``command``.

        Raises:
            WaitTimeoutError: No such button became visible
        """
        logger.debug(f"Confirming with: {command}")
        buttons = await self.wait_for_selector(
            self._command_button(command),
            WaitPredicates(state=ElementState.VISIBLE),
            message=f"confirm button {command!r}",
        )
        await self.click(buttons[0])

    async def confirm_delete(self, command: str) -> None:
        with allure.step(f"Confirm delete: {command}"):
            await self.confirm(command)

    async def assert_message(self, message: str) -> None:
        await self.wait_for_selector(
            self.root if self.root is not None else "xpath=//body",
            WaitPredicates(contained_text=message),
            message="confirm message",
        )


__all__ = ["Popup", "ViewSetting", "PopConfirm", "ITEMS_PER_PAGE"]
