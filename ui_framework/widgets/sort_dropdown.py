"""
================================================================================
Sort Options Dropdown
================================================================================

Dropdown whose rows are sort columns. Clicking a row cycles that column
through Unset -> Ascending -> Descending -> Unset, and each click closes the
overlay.

The click sequence needed to move from the current state to a requested one
is computed by ``plan_sort_clicks`` (a pure function), then replayed against
the live rows, re-opening the overlay between clicks. When a reload URL is
configured the last click waits for that response.

Usage:
    sort = SortOptionsDropdownList(page, trigger="#sort", rows_locator="#sort li",
                                   reload_url="/api/products")
    await sort.sort_by(SortSelection("Name", SortOrder.DESC))
    await sort.sort_by(None)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from ..common.global_config import get_config
from ..core.component import BaseComponent
from ..core.errors import ElementNotFoundError, NotFoundReason
from ..core.predicates import normalize_text, read_or_none
from ..core.target import TargetLike, describe
from .dropdown import DropdownList

DEFAULT_CHECK_SUB_LOCATOR = "xpath=.//div[@class='menu-icon'][1]"
DEFAULT_ARROW_SUB_LOCATOR = "xpath=.//div[@class='menu-icon'][2]/div"
DESCENDING_ARROW_MARKER = "down"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSelection:
    """A column and a direction."""

    by: str
    order: SortOrder = SortOrder.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "order", SortOrder(self.order))

    @classmethod
    def coerce(cls, value: Any) -> Optional["SortSelection"]:
        """
        Accept a ``SortSelection``, a ``{"by": ..., "order": ...}`` mapping,
        or None / "None" for no sort.
        """
        if value is None or value == "None":
            return None
        if isinstance(value, SortSelection):
            return value
        if isinstance(value, dict):
            return cls(by=value["by"], order=SortOrder(value.get("order", SortOrder.ASC)))
        raise ValueError(f"Invalid sort option: {value!r}")

    def __str__(self) -> str:
        return f"{self.by} ({self.order.value})"


# None stands for "no column sorted"
SortOption = Optional[SortSelection]
NO_SORT: SortOption = None


def plan_sort_clicks(current: Any, target: Any) -> List[str]:
    """
    Labels of the rows to click, in order, to move from ``current`` to ``target``.

    Every click advances one column through Unset -> Asc -> Desc -> Unset.
    Clicking a column other than the sorted one resets the previous column
    and starts the clicked one at Asc.

    Examples:
        None            -> Name asc   : ["Name"]
        None            -> Name desc  : ["Name", "Name"]
        Name asc        -> Name desc  : ["Name"]
        Name desc       -> Name asc   : ["Name", "Name"]
        Name asc        -> None       : ["Name", "Name"]
        Name desc       -> None       : ["Name"]
        Name asc        -> Price desc : ["Price", "Price"]
    """
    current = SortSelection.coerce(current)
    target = SortSelection.coerce(target)

    if current == target:
        return []
    if current is None:
        return [target.by] * (2 if target.order is SortOrder.DESC else 1)
    if target is None:
        return [current.by] * (2 if current.order is SortOrder.ASC else 1)
    if current.by == target.by:
        return [target.by] * (1 if current.order is SortOrder.ASC else 2)
    return [target.by] * (2 if target.order is SortOrder.DESC else 1)


class SortOptionsDropdownList(DropdownList):
    """
    Sort dropdown driven by a check indicator and a direction arrow per row.

    Args:
        page: Playwright page or a component sharing it
        trigger: Control that opens the list
        rows_locator: Selector matching every sort option row
        check_sub_locator: Indicator inside a row; a visible child marks the sorted row
        arrow_sub_locator: Arrow inside a row; a class containing "down" means descending
        value_sub_locator: Label element inside a row (row text when not given)
        label_value: Text of a non-option heading row to ignore
        reload_url: Response URL fragment awaited after the last sort click
        render_time_ms: Settle time after the reload response
        reopen_delay_ms: Pause before re-opening the list between clicks
        **kwargs: ``DropdownList`` options
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        trigger: TargetLike,
        rows_locator: TargetLike,
        check_sub_locator: str = DEFAULT_CHECK_SUB_LOCATOR,
        arrow_sub_locator: str = DEFAULT_ARROW_SUB_LOCATOR,
        value_sub_locator: Optional[str] = None,
        label_value: Optional[str] = None,
        reload_url: Optional[str] = None,
        render_time_ms: Optional[int] = None,
        reopen_delay_ms: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(page, trigger, rows_locator, render_time_ms=render_time_ms, **kwargs)
        self.check_sub_locator = check_sub_locator
        self.arrow_sub_locator = arrow_sub_locator
        self.value_sub_locator = value_sub_locator
        self.label_value = label_value
        self.reload_url = reload_url
        self.reopen_delay_ms = (
            reopen_delay_ms if reopen_delay_ms is not None else get_config("widgets.reopen_delay_ms", 1000)
        )
        # Shared population task of the label -> row map
        self._rows_task: Optional[asyncio.Task] = None

    # =========================================================================
    # Rows
    # =========================================================================

    async def _read_label(self, row: Locator) -> Optional[str]:
        label_element = row.locator(self.value_sub_locator).first if self.value_sub_locator else row
        text = await read_or_none(label_element.text_content(), "sort label")
        return None if text is None else normalize_text(text)

    async def _labelled_rows(self) -> List[Tuple[str, Locator]]:
        """
        Option rows with their labels, without the heading row.

        Polls until at least one row is rendered.

        Raises:
            WaitTimeoutError: No row appeared within the budget
        """
        rows = await self.wait_for_selector(self.rows_locator, message="sort options")
        labels = await asyncio.gather(*(self._read_label(row) for row in rows))
        return [
            (label, row)
            for label, row in zip(labels, rows)
            if label is not None and label != self.label_value
        ]

    async def _load_rows(self) -> Dict[str, Locator]:
        """
        Label -> row map, scanned once per widget.

        Only a non-empty scan is kept; a failed or empty scan is dropped so
        the next call scans again.
        """
        task = self._rows_task
        if task is None:
            logger.debug(f"Loading sort options of {self!r}")
            task = self._rows_task = asyncio.create_task(self._labelled_rows())
        try:
            rows = dict(await task)
        except Exception:
            if self._rows_task is task:
                self._rows_task = None
            raise
        if not rows and self._rows_task is task:
            logger.warning(f"{self!r} has no sort options yet.")
            self._rows_task = None
        return rows

    async def get_sort_options(self) -> List[str]:
        """Option labels in display order."""
        return list(await self._load_rows())

    # =========================================================================
    # State
    # =========================================================================

    async def _is_checked_row(self, row: Locator) -> bool:
        marker = row.locator(self.check_sub_locator).locator("xpath=./*").first
        return bool(await read_or_none(marker.is_visible(), "sort check indicator"))

    async def get_sort_option(self) -> SortOption:
        """Current sort state, read fresh from the row indicators."""
        rows = [row for _, row in await self._labelled_rows()]
        logger.debug(f"Sort options dropdown list rows count: {len(rows)}")

        checked = await asyncio.gather(*(self._is_checked_row(row) for row in rows))
        picked = next((row for row, is_checked in zip(rows, checked) if is_checked), None)
        if picked is None:
            return NO_SORT

        arrow_class = await read_or_none(
            picked.locator(self.arrow_sub_locator).first.get_attribute("class"), "sort arrow"
        )
        logger.debug(f"Order selected: {arrow_class}")
        order = SortOrder.DESC if arrow_class and DESCENDING_ARROW_MARKER in arrow_class else SortOrder.ASC
        return SortSelection(await self._read_label(picked) or "", order)

    # =========================================================================
    # Sorting
    # =========================================================================

    async def _click_option(self, row: Locator, wait_for_reload: bool) -> None:
        if wait_for_reload and self.reload_url:
            async with self.expect_api_response(self.reload_url, render_time_ms=self.render_time_ms):
                await self.click(row)
        else:
            await self.click(row)

    async def sort_by(self, target: Any) -> None:
        """
        Bring the list to ``target`` with the fewest clicks.

        Args:
            target: ``SortSelection``, ``{"by", "order"}`` mapping, or None for no sort

        Raises:
            ElementNotFoundError: A label of the click plan has no row
            WaitTimeoutError: The reload response did not arrive
        """
        target = SortSelection.coerce(target)
        with allure.step(f"Sort by: {target or 'None'}"):
            await self.open(force=True)
            rows = await self._load_rows()
            current = await self.get_sort_option()
            clicks = plan_sort_clicks(current, target)
            logger.debug(f"Sorting {self!r} from {current} to {target}: {clicks}")

            if not clicks:
                await self.close_by_click_around()
                return

            for label in clicks:
                if label not in rows:
                    raise ElementNotFoundError(
                        f"Cannot find row with text: {label}",
                        target=describe(self.rows_locator),
                        value=label,
                        candidate_count=len(rows),
                        reason=NotFoundReason.NO_ROWS if not rows else NotFoundReason.NO_MATCH,
                    )

            for i, label in enumerate(clicks):
                if i > 0:
                    await self.sleep(self.reopen_delay_ms)
                    await self.open(force=True)
                await self._click_option(rows[label], wait_for_reload=i == len(clicks) - 1)


__all__ = [
    "SortOrder",
    "SortSelection",
    "SortOption",
    "NO_SORT",
    "plan_sort_clicks",
    "SortOptionsDropdownList",
    "DEFAULT_CHECK_SUB_LOCATOR",
    "DEFAULT_ARROW_SUB_LOCATOR",
]
