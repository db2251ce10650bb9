"""
================================================================================
Date Pickers
================================================================================

Three calendar widgets:

    - DatePicker          preset ranges, from / to inputs and an apply button
    - SimpleDatePicker    day / month / year calendar navigated through its
                          switch label ("March 2024" -> "2024" -> "2020-2029")
    - BsSingleDatePicker  single-date input with year / month / day buttons

Dates are written with moment-style formats (see ``utils.timedate``).

Usage:
    picker = SimpleDatePicker(page, trigger="#start-date")
    await picker.pick_date("03/15/2024")
    assert await picker.get_idate_value() == IDate(2024, 3, 15)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional, Tuple, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from ..core.component import BaseComponent
from ..core.errors import ElementNotFoundError, WidgetConfigurationError
from ..core.polling import MatchCondition, PollBudget
from ..core.predicates import ElementState, WaitPredicates, normalize_text
from ..core.target import TargetLike, describe, xpath_literal
from ..utils.timedate import (
    DEFAULT_DATE_FORMAT,
    MONTH_NAMES,
    IDate,
    format_date,
    get_date_format,
    is_valid_date,
    shift_date,
)
from .table import Table
from .widget import Widget

DATE_RANGE_PRESETS = (
    "All Time",
    "Today",
    "Yesterday",
    "Last 7 days",
    "Last 30 days",
    "This Month",
    "Last Month",
    "Custom",
)
APPLY_ATTEMPTS = 5


# =============================================================================
# Range picker
# =============================================================================

class DatePicker(Widget):
    """
    Range picker with preset buttons and from / to inputs.

    Args:
        page: Playwright page or a component sharing it
        root: Picker panel
        trigger: Control that opens the panel
        txt_from_date: "From" input under the root
        txt_to_date: "To" input under the root
        btn_apply: Apply button under the root
        range_input: Single "from - to" input
        date_format: Format typed dates are validated against
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        root: TargetLike,
        trigger: TargetLike,
        txt_from_date: TargetLike = "xpath=.//input[@name='startDate']",
        txt_to_date: TargetLike = "xpath=.//input[@name='endDate']",
        btn_apply: TargetLike = "xpath=.//button[text()='Apply Filter']",
        range_input: TargetLike = "xpath=//input[@data-testid='input-expiration-date']",
        date_format: str = DEFAULT_DATE_FORMAT,
    ):
        super().__init__(page, root=root, trigger=trigger)
        self.txt_from_date = txt_from_date
        self.txt_to_date = txt_to_date
        self.btn_apply = btn_apply
        self.range_input = range_input
        self.date_format = date_format

    def _in_root(self, target: TargetLike) -> Locator:
        return self.locator(target, self.locator(self.root))

    async def open(self) -> None:
        if await self.is_visible(self.root):
            logger.debug("Date picker is already opened.")
            return
        await self.click(self.trigger)

    async def filter_by_preset(self, preset: str) -> None:
        """Click one of ``DATE_RANGE_PRESETS``. Raises ValueError for any other text."""
        if preset not in DATE_RANGE_PRESETS:
            raise ValueError(f"Invalid range: {preset}")
        logger.debug(f"Filtering by preset range: {preset}")
        await self.click(self._in_root(f"xpath=.//div[text()={xpath_literal(preset)}][@role='button']"))

    async def _enter_date(self, target: Locator, value: str, name: str) -> None:
        if value == "":
            logger.warning(f"{name} date is empty.")
            return
        if not is_valid_date(value, self.date_format):
            logger.warning(f"Invalid date: {value}")
        await self.fill(target, value, confirm=True)

    async def enter_from_date(self, value: str) -> None:
        await self._enter_date(self._in_root(self.txt_from_date), value, "From")

    async def enter_to_date(self, value: str) -> None:
        await self._enter_date(self._in_root(self.txt_to_date), value, "To")

    async def enter_range_date(self, from_date: str, to_date: str) -> None:
        if not from_date or not to_date:
            logger.warning("Range date is incomplete.")
            return
        for value in (from_date, to_date):
            if not is_valid_date(value, self.date_format):
                logger.warning(f"Invalid date: {value}")
        await self.fill(self.range_input, f"{from_date} - {to_date}")

    async def get_from_date(self) -> str:
        return await self.get_input_value(self._in_root(self.txt_from_date))

    async def get_to_date(self) -> str:
        return await self.get_input_value(self._in_root(self.txt_to_date))

    async def set_date(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> None:
        """
        Type the dates and apply.

        Apply is clicked again (up to ``APPLY_ATTEMPTS`` times) while it stays
        visible.

        Raises:
            WaitTimeoutError: The picker is still open afterwards
        """
        with allure.step(f"Set date range: {from_date} - {to_date}"):
            await self.open()
            if from_date:
                await self.enter_from_date(from_date)
            if to_date:
                await self.enter_to_date(to_date)
            await self.sleep(200)

            apply = self._in_root(self.btn_apply)
            for attempt in range(1, APPLY_ATTEMPTS + 1):
                logger.debug(f"Clicking apply button in DatePicker. Attempt: {attempt}")
                await self.click(apply)
                await self.sleep(1000)
                if not await self.is_visible(apply):
                    break
            await self.assert_not_visible(self.root)

    async def set_date_range(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> None:
        if from_date and to_date:
            await self.enter_range_date(from_date, to_date)


# =============================================================================
# Calendar picker
# =============================================================================

SWITCH_LABEL = "xpath=//th[@class='rdtSwitch']"
PREVIOUS_BUTTON = "xpath=//th[@class='rdtPrev']"
NEXT_BUTTON = "xpath=//th[@class='rdtNext']"
YEARS_TABLE = "xpath=(//div[@class='rdtYears']/table)[2]"
MONTHS_TABLE = "xpath=(//div[@class='rdtMonths']/table)[2]"
DAYS_TABLE = "xpath=(//div[@class='rdtDays']/table)[1]"
MAX_YEAR_PAGES = 30

_YEARS_RANGE_RE = re.compile(r"(\d{4}).*?(\d{4})")


class SimpleDatePicker(Widget):
    """
    Calendar with day, month and year views.

    The switch label shows "March 2024" on the day view, "2024" on the
    month view and "2020-2029" on the year view; clicking it zooms out.

    Args:
        page: Playwright page or a component sharing it
        trigger: Input that opens the calendar and holds the picked date
        btn_clear: Clears the picked date
        date_format: Format of the trigger value
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        trigger: TargetLike,
        btn_clear: Optional[TargetLike] = None,
        date_format: str = DEFAULT_DATE_FORMAT,
        switch_label: TargetLike = SWITCH_LABEL,
        btn_previous: TargetLike = PREVIOUS_BUTTON,
        btn_next: TargetLike = NEXT_BUTTON,
        years_table: TargetLike = YEARS_TABLE,
        months_table: TargetLike = MONTHS_TABLE,
        days_table: TargetLike = DAYS_TABLE,
    ):
        super().__init__(page, trigger=trigger)
        self.btn_clear = btn_clear
        self.date_format = date_format
        self.switch_label = switch_label
        self.btn_previous = btn_previous
        self.btn_next = btn_next
        self.tbl_year = Table(self, root=years_table)
        self.tbl_month = Table(self, root=months_table)
        self.tbl_day = Table(self, root=days_table)

    async def open(self) -> None:
        await self.click(self.trigger)

    async def clear(self) -> None:
        if self.btn_clear is None:
            raise WidgetConfigurationError("Clear button is not defined.")
        if await self.get_date_string_value():
            await self.click(self.btn_clear)

    async def _switch_text(self) -> str:
        await self.sleep(200)
        return normalize_text(await self.get_inner_text(self.switch_label))

    async def _years_range(self) -> Tuple[int, int]:
        label = await self._switch_text()
        match = _YEARS_RANGE_RE.search(label)
        if not match:
            raise ValueError(f"Unable to find years in the switch label: {label!r}")
        return int(match.group(1)), int(match.group(2))

    async def _pick_year(self, year: int) -> None:
        label = await self._switch_text()
        if get_date_format(label) == "month year":
            await self.click(self.switch_label)
            label = await self._switch_text()
        if get_date_format(label) == "year":
            if int(label) == year:
                return
            await self.click(self.switch_label)

        for _ in range(MAX_YEAR_PAGES):
            first, last = await self._years_range()
            if first <= year <= last:
                break
            await self.click(self.btn_previous if year < first else self.btn_next)
        else:
            raise ElementNotFoundError(
                f"Year {year} is not reachable within {MAX_YEAR_PAGES} pages",
                target=describe(self.switch_label),
                value=year,
            )
        await self.tbl_year.click_cell_by_text(str(year))

    async def _pick_month(self, month: int) -> None:
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        await self.tbl_month.click_cell_by_text(MONTH_NAMES[month - 1][:3])

    async def _pick_day(self, day: int) -> None:
        if not 1 <= day <= 31:
            raise ValueError(f"Invalid day: {day}")
        # Late days also appear among the previous month's leading cells.
        await self.tbl_day.click_cell_by_text(str(day), 0 if day <= 15 else 1)

    async def pick_date(self, value: Union[str, IDate]) -> None:
        """
        Pick a date given as "MM/DD/YYYY" or an ``IDate``.

        Raises:
            ValueError: The date is not valid
        """
        text = value.to_format("MM/DD/YYYY") if isinstance(value, IDate) else value
        if not is_valid_date(text, "MM/DD/YYYY"):
            raise ValueError(f"Invalid date: {value}")
        picked = IDate.from_string(text, "MM/DD/YYYY")

        with allure.step(f"Pick date: {text}"):
            await self.open()
            await self.sleep(50)
            await self._pick_year(picked.year)
            await self.sleep(50)
            await self._pick_month(picked.month)
            await self.sleep(50)
            await self._pick_day(picked.day)

    async def set_idate(self, value: IDate) -> None:
        await self.pick_date(value)

    async def _trigger_value(self) -> Optional[str]:
        value = await self.get_attribute(self.trigger, "value")
        if not value:
            inner = self.locator(self.trigger).locator("xpath=.//input")
            if await inner.count():
                value = await inner.first.get_attribute("value")
        return value or None

    async def get_idate_value(self) -> Optional[IDate]:
        """Picked date, or None when the trigger holds no date."""
        value = await self._trigger_value()
        if value is None:
            return None
        try:
            return IDate.from_string(value, self.date_format)
        except ValueError:
            logger.debug(f"Trigger value is not a date: {value!r}")
            return None

    async def get_date_string_value(self, fmt: str = DEFAULT_DATE_FORMAT) -> Optional[str]:
        picked = await self.get_idate_value()
        return picked.to_format(fmt) if picked else None


# =============================================================================
# Single-date input picker
# =============================================================================

BS_HEADER = "xpath=//div[@data-testid='bs-dp-header']"
BS_CHANGE_VIEW = "xpath=//div[contains(@class, 'MuiPickersCalendarHeader-labelContainer')]"
BS_INPUT = "input[data-testid='bs-dp-input']"
BS_DAY_CELLS = "div.MuiDayCalendar-weekContainer button:not(.Mui-disabled)"
BS_MONTH_CELLS = "div.MuiMonthCalendar-root button:not(.Mui-disabled)"
BS_YEAR_CELLS = "div.MuiYearCalendar-root button:not(.Mui-disabled)"
BS_DATE_FORMAT = "MMM DD, YYYY"


class BsSingleDatePicker(Widget):
    """
    Single-date picker with a typed input and year / month / day buttons.

    Dates are given as offsets from today.
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        trigger: TargetLike,
        input_locator: TargetLike = BS_INPUT,
        header: TargetLike = BS_HEADER,
        btn_change_view: TargetLike = BS_CHANGE_VIEW,
        day_cells: TargetLike = BS_DAY_CELLS,
        month_cells: TargetLike = BS_MONTH_CELLS,
        year_cells: TargetLike = BS_YEAR_CELLS,
        type_delay_ms: int = 400,
        pick_timeout_ms: int = 5000,
    ):
        super().__init__(page, trigger=trigger)
        self.input_locator = input_locator
        self.header = header
        self.btn_change_view = btn_change_view
        self.day_cells = day_cells
        self.month_cells = month_cells
        self.year_cells = year_cells
        self.type_delay_ms = type_delay_ms
        self.pick_timeout_ms = pick_timeout_ms

    @staticmethod
    def target_date(offset_days: int = 0, offset_months: int = 0, offset_years: int = 0) -> date:
        return shift_date(date.today(), offset_days, offset_months, offset_years)

    async def open(self) -> None:
        await self.click(self.trigger)

    async def _click_button_with_text(self, cells: TargetLike, text: str, what: str) -> None:
        buttons = await self.wait_for_selector(
            cells,
            WaitPredicates(text=text, state=ElementState.VISIBLE),
            MatchCondition(minimum=1),
            PollBudget.of(timeout_ms=self.pick_timeout_ms),
            message=f"{what} {text}",
        )
        await self.click(buttons[0])

    async def _assert_input_value(self, expected: str) -> None:
        actual = await self.get_input_value(self.input_locator)
        assert actual == expected, f"Date input value is '{actual}', expected '{expected}'"

    async def set_date(
        self,
        offset_days: int = 0,
        offset_months: int = 0,
        offset_years: int = 0,
        fmt: str = BS_DATE_FORMAT,
    ) -> str:
        """Type today shifted by the offsets into the input; returns the typed text."""
        formatted = format_date(self.target_date(offset_days, offset_months, offset_years), fmt)
        logger.info(
            f"offset days: {offset_days}, months: {offset_months}, years: {offset_years} -> {formatted}"
        )
        with allure.step(f"Type date: {formatted}"):
            element = self.locator(self.input_locator)
            await element.click()
            await element.press("Control+a")
            await element.press("Delete")
            await element.press_sequentially(formatted, delay=self.type_delay_ms)
            await self._assert_input_value(formatted)
        return formatted

    async def pick_date(
        self,
        offset_days: int = 0,
        offset_months: int = 0,
        offset_years: int = 0,
        fmt: str = BS_DATE_FORMAT,
    ) -> str:
        """
        Pick today shifted by the offsets through the calendar buttons.

        Raises:
            WaitTimeoutError: A year, month or day button did not show up
            AssertionError: The input does not show the picked date
        """
        target = self.target_date(offset_days, offset_months, offset_years)
        formatted = format_date(target, fmt)
        with allure.step(f"Pick date: {formatted}"):
            await self.open()
            await self.assert_visible(self.header)
            await self.click(self.btn_change_view)
            await self._click_button_with_text(self.year_cells, str(target.year), "year")
            await self._click_button_with_text(self.month_cells, MONTH_NAMES[target.month - 1][:3], "month")
            await self._click_button_with_text(self.day_cells, str(target.day), "day")
            await self._assert_input_value(formatted)
        return formatted


__all__ = [
    "DatePicker",
    "SimpleDatePicker",
    "BsSingleDatePicker",
    "DATE_RANGE_PRESETS",
]
