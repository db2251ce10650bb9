"""
================================================================================
Table Widget
================================================================================

Reads an HTML-style table in two independent passes and reconciles them:

    Pass A  get_grid        {column: cell locator} per row, for interaction
    Pass B  get_grid_data   {column: cell text} per row, a frozen snapshot

``get_grid_composite`` merges both index by index into ``Row`` objects of
``CompositeCell(data, locator)``. The passes must agree on the row count and
on every row's column set; any disagreement raises ``InvariantViolationError``
and is never retried.

Rows whose text contains an excluded marker ("No results found", ...) are
dropped from both passes. Rows can be tagged with a group name using
start/end marker texts, and extra values can be read from sub-elements of
a cell ("additionals" / inner cells).

Usage:
    table = Table(page, root="#products table",
                  groups_by_text=[GroupByText("Fruits", start="Fruits", end="Vegetables")])
    rows = await table.get_grid_composite()
    await rows[0]["Name"].locator.click()
    await table.check_data_sorted(SortCheck(order="asc", path="$.Name"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from ..core.component import BaseComponent
from ..core.errors import ElementNotFoundError, InvariantViolationError, NotFoundReason
from ..core.polling import MatchCondition
from ..core.predicates import WaitPredicates, normalize_text, read_or_none
from ..core.target import TargetLike, describe, xpath_literal
from ..utils.match_check import MatchCheck, check_matched, is_matched
from ..utils.range_check import RangeCheck, check_range, is_in_range
from ..utils.sort_check import SortCheck, check_sorted, is_sorted
from .widget import Widget

DEFAULT_EXCLUDED_TEXTS = (
    "No results found",
    "No data available",
    "No data",
    "No records",
    "No records found",
    "No items found",
    "End of results",
    "No data to display",
)
DEFAULT_EMPTY_SIGN = "No results found"
ADDITIONAL_READ_TIMEOUT_MS = 10000

Grid = List[Dict[str, Locator]]
GridData = List[Dict[str, str]]
DataRow = Dict[str, Optional[str]]


# =============================================================================
# Types
# =============================================================================

@dataclass(frozen=True)
class HeaderCell:
    key: str
    text: Optional[str]
    locator: Optional[Locator]


@dataclass
class CompositeCell:
    """Text snapshot of a cell together with its live locator."""

    data: Optional[str]
    locator: Locator
    key: str
    visible: bool = True


@dataclass
class Row:
    """One table row keyed by column name, optionally tagged with a group."""

    cells: Dict[str, CompositeCell] = field(default_factory=dict)
    group: Optional[str] = None

    def __getitem__(self, key: str) -> CompositeCell:
        return self.cells[key]

    def __contains__(self, key: object) -> bool:
        return key in self.cells

    def __iter__(self) -> Iterator[str]:
        return iter(self.cells)

    def get(self, key: str) -> Optional[CompositeCell]:
        return self.cells.get(key)

    def contains_text(self, text: str) -> bool:
        return any(cell.data and text in cell.data for cell in self.cells.values())

    def data(self) -> DataRow:
        row: DataRow = {key: cell.data for key, cell in self.cells.items() if cell.data is not None}
        if self.group is not None:
            row["group"] = self.group
        return row


@dataclass(frozen=True)
class GroupByText:
    """Rows from the one containing ``start`` to the one containing ``end`` (or the last row)."""

    name: str
    start: str
    end: Optional[str] = None


@dataclass(frozen=True)
class InnerCell:
    """Read ``sub_locator`` inside the ``column`` cell and attach it under ``key``."""

    key: str
    column: str
    sub_locator: str


# =============================================================================
# Table
# =============================================================================

class Table(Widget):
    """
    Args:
        page: Playwright page or a component sharing it
        root: The table element
        header_row_locator: Header row under the root
        header_cell_sub_locator: Header cell under the header row
        body_row_locator: Body row under the root
        body_cell_sub_locator: Cell under a body row
        excluded_texts: Extra markers of rows to drop (added to the defaults)
        groups_by_text: Group spans to tag rows with
        empty_sign: Text shown by the table when it has no rows
    """

    def __init__(
        self,
        page: Union[Page, BaseComponent],
        root: TargetLike,
        header_row_locator: str = "xpath=.//thead/tr",
        header_cell_sub_locator: str = "xpath=./th",
        body_row_locator: str = "xpath=.//tbody/tr",
        body_cell_sub_locator: str = "xpath=./td",
        excluded_texts: Optional[Sequence[str]] = None,
        groups_by_text: Optional[Sequence[GroupByText]] = None,
        empty_sign: str = DEFAULT_EMPTY_SIGN,
    ):
        super().__init__(page, root=root)
        self.header_row_locator = header_row_locator
        self.header_cell_sub_locator = header_cell_sub_locator
        self.body_row_locator = body_row_locator
        self.body_cell_sub_locator = body_cell_sub_locator
        self.excluded_texts = list(DEFAULT_EXCLUDED_TEXTS) + list(excluded_texts or [])
        self.groups_by_text = list(groups_by_text or [])
        self.empty_sign = empty_sign
        logger.debug(f"Table excluded texts: {self.excluded_texts}")

    def __repr__(self) -> str:
        return f"Table({describe(self.root)})"

    def _root(self) -> Locator:
        return self.locator(self.root)

    def body_rows(self) -> Locator:
        return self._root().locator(self.body_row_locator)

    # =========================================================================
    # Header
    # =========================================================================

    async def get_header_cells(self) -> List[HeaderCell]:
        """
        Header cells with their column keys.

        A cell with no text gets the positional key ``column{i}``. A table
        without header cells gets one positional key per cell of its first row.
        """
        header_cells = await self._root().locator(self.header_row_locator).locator(
            self.header_cell_sub_locator
        ).all()

        if not header_cells:
            first_row = self.body_rows().first
            count = await first_row.locator(self.body_cell_sub_locator).count()
            logger.debug(f"{self!r} has no header cells, using {count} positional column(s)")
            return [HeaderCell(key=f"column{i}", text=None, locator=None) for i in range(count)]

        texts = await asyncio.gather(
            *(read_or_none(cell.text_content(), "header text") for cell in header_cells)
        )
        headers: List[HeaderCell] = []
        for i, (cell, text) in enumerate(zip(header_cells, texts)):
            label = normalize_text(text)
            if not label:
                logger.error(f"Column name {i} of {self!r} is empty. Please check the table structure.")
            headers.append(HeaderCell(key=label or f"column{i}", text=text, locator=cell))
        return headers

    async def get_columns(self) -> List[str]:
        return [header.key for header in await self.get_header_cells()]

    async def is_empty(self) -> bool:
        sign = self._root().locator(f"xpath=.//tr//*[contains(text(), {xpath_literal(self.empty_sign)})]")
        return await self.is_visible(sign.first)

    # =========================================================================
    # Scan passes
    # =========================================================================

    async def _surviving_rows(self, max_rows: Optional[int]) -> List[Locator]:
        if await self.is_empty():
            logger.debug(f"{self!r} is empty.")
            return []
        rows = await self.body_rows().all()
        if max_rows is not None:
            rows = rows[:max_rows]
        texts = await asyncio.gather(*(read_or_none(row.text_content(), "row text") for row in rows))

        surviving = []
        for row, text in zip(rows, texts):
            if text is not None and any(excluded in text for excluded in self.excluded_texts):
                logger.debug(f"Row excluded: {normalize_text(text)}")
                continue
            surviving.append(row)
        logger.debug(f"{self!r} rows: {len(rows)} scanned, {len(surviving)} kept")
        return surviving

    async def _row_cells(self, row: Locator) -> List[Locator]:
        return await row.locator(self.body_cell_sub_locator).all()

    async def get_grid(self, max_rows: Optional[int] = None) -> Grid:
        """Pass A: cell locators per row. Missing cells leave their column out."""
        columns = await self.get_columns()
        rows = await self._surviving_rows(max_rows)
        row_cells = await asyncio.gather(*(self._row_cells(row) for row in rows))
        return [
            {column: cells[i] for i, column in enumerate(columns) if i < len(cells)}
            for cells in row_cells
        ]

    async def _row_data(self, index: int, row: Locator, columns: Sequence[str]) -> Dict[str, str]:
        cells = await self._row_cells(row)
        texts = await asyncio.gather(
            *(read_or_none(cell.text_content(), "cell text") for cell in cells[: len(columns)])
        )
        data: Dict[str, str] = {}
        for i, column in enumerate(columns):
            if i >= len(texts):
                logger.warning(f"Column {column} from row {index} has no data.")
                data[column] = ""
            else:
                data[column] = normalize_text(texts[i])
        return data

    async def get_grid_data(self, max_rows: Optional[int] = None) -> GridData:
        """Pass B: text per column per row. Missing cells read as ""."""
        columns = await self.get_columns()
        rows = await self._surviving_rows(max_rows)
        return list(
            await asyncio.gather(*(self._row_data(i, row, columns) for i, row in enumerate(rows)))
        )

    # =========================================================================
    # Reconciliation
    # =========================================================================

    @staticmethod
    def merge(grid: Grid, grid_data: GridData) -> List[Row]:
        """
        Merge both passes index by index.

        Raises:
            InvariantViolationError: Row counts or a row's column sets differ
        """
        if len(grid) != len(grid_data):
            raise InvariantViolationError(
                f"Grid and grid data should have the same length: {len(grid)} != {len(grid_data)}"
            )
        rows: List[Row] = []
        for i, (cells, texts) in enumerate(zip(grid, grid_data)):
            if set(cells) != set(texts):
                raise InvariantViolationError(
                    f"Grid and grid data should have the same columns in row {i}: "
                    f"{sorted(cells)} != {sorted(texts)}"
                )
            rows.append(
                Row({column: CompositeCell(texts[column], cells[column], column) for column in texts})
            )
        return rows

    def tag_groups(self, rows: List[Row]) -> None:
        for group in self.groups_by_text:
            start = next((i for i, row in enumerate(rows) if row.contains_text(group.start)), None)
            if start is None:
                logger.warning(f"Group {group.name}: start marker {group.start!r} not found")
                continue
            end = len(rows) - 1
            if group.end:
                found = next(
                    (i for i in range(start, len(rows)) if rows[i].contains_text(group.end)), None
                )
                if found is None:
                    logger.warning(f"Group {group.name}: end marker {group.end!r} not found, using last row")
                else:
                    end = found
            logger.debug(f"Group {group.name} from {start} to {end}")
            for row in rows[start : end + 1]:
                row.group = group.name

    async def _attach_inner_cell(self, index: int, row: Row, inner: InnerCell, check_visible: bool) -> None:
        cell = row.get(inner.column)
        if cell is None:
            logger.warning(f"Row {index} has no column {inner.column} for {inner.key}")
            return
        sub = cell.locator.locator(inner.sub_locator)
        try:
            if check_visible:
                visible = await sub.is_visible()
                text = await sub.text_content() if visible else None
            else:
                visible = True
                text = (await sub.text_content(timeout=ADDITIONAL_READ_TIMEOUT_MS)) or ""
        except PlaywrightError as e:
            logger.warning(f"Failed to load additional property {inner.key}, row {index}: {e}")
            return
        row.cells[inner.key] = CompositeCell(
            None if text is None else normalize_text(text), sub, inner.key, visible
        )

    async def _attach_inner_cells(
        self, rows: List[Row], inner_cells: Sequence[InnerCell], check_visible: bool
    ) -> None:
        for inner in inner_cells:
            await asyncio.gather(
                *(self._attach_inner_cell(i, row, inner, check_visible) for i, row in enumerate(rows))
            )

    async def get_grid_composite(
        self,
        additionals: Optional[Sequence[InnerCell]] = None,
        max_rows: Optional[int] = None,
    ) -> List[Row]:
        """
        Scan both passes, merge them, tag groups and attach additional values.

        Args:
            additionals: Sub-element values to attach to every row
            max_rows: Scan at most this many body rows

        Raises:
            InvariantViolationError: The passes disagree
        """
        with allure.step(f"Load grid of {describe(self.root)}"):
            grid = await self.get_grid(max_rows)
            grid_data = await self.get_grid_data(max_rows)
            logger.trace(f"grid data: {grid_data}")
            rows = self.merge(grid, grid_data)
            self.tag_groups(rows)
            if additionals:
                await self._attach_inner_cells(rows, additionals, check_visible=False)
            return rows

    # =========================================================================
    # Body
    # =========================================================================

    async def wait_for_any_rows(self) -> None:
        await self.wait_for_selector(
            self.body_rows(),
            WaitPredicates(excluded_texts=tuple(self.excluded_texts)),
            MatchCondition(minimum=1),
            message="any table row",
        )

    async def get_body(
        self,
        inner_cells: Optional[Sequence[InnerCell]] = None,
        wait_for_rows: bool = False,
        max_rows: Optional[int] = None,
    ) -> List[Row]:
        """
        Composite rows; inner cells record whether their element is visible
        and carry no data when it is not.
        """
        if wait_for_rows:
            await self.wait_for_any_rows()
        rows = await self.get_grid_composite(max_rows=max_rows)
        if inner_cells:
            await self._attach_inner_cells(rows, inner_cells, check_visible=True)
        return rows

    async def get_body_data(
        self,
        inner_cells: Optional[Sequence[InnerCell]] = None,
        wait_for_rows: bool = False,
        max_rows: Optional[int] = None,
    ) -> List[DataRow]:
        rows = await self.get_body(inner_cells, wait_for_rows, max_rows)
        return [row.data() for row in rows]

    # =========================================================================
    # Rows, cells and columns
    # =========================================================================

    async def get_rows_count(self) -> int:
        return len(await self.get_grid())

    def _missing(self, what: str, value: Any, count: int) -> ElementNotFoundError:
        return ElementNotFoundError(
            f"{self!r} has no {what} {value!r} ({count} available)",
            target=describe(self.root),
            value=value,
            candidate_count=count,
            reason=NotFoundReason.NO_ROWS if count == 0 else NotFoundReason.NO_MATCH,
        )

    async def get_row(self, index: int) -> Dict[str, Locator]:
        """Cell locators of the ``index``-th data row (0-based)."""
        grid = await self.get_grid()
        if not 0 <= index < len(grid):
            raise self._missing("row", index, len(grid))
        return grid[index]

    async def get_cell_data(self, row: int, column: str) -> str:
        grid_data = await self.get_grid_data()
        if not 0 <= row < len(grid_data):
            raise self._missing("row", row, len(grid_data))
        if column not in grid_data[row]:
            raise self._missing("column", column, len(grid_data[row]))
        return grid_data[row][column]

    async def get_column_cells(self, column: str, sub_locator: Optional[str] = None) -> List[Locator]:
        grid = await self.get_grid()
        cells = []
        for row in grid:
            if column not in row:
                raise self._missing("column", column, len(row))
            cells.append(row[column].locator(sub_locator) if sub_locator else row[column])
        return cells

    async def get_column_data(self, column: str, sub_locator: Optional[str] = None) -> List[Optional[str]]:
        cells = await self.get_column_cells(column, sub_locator)
        texts = await asyncio.gather(*(read_or_none(cell.inner_text(), f"{column} cell") for cell in cells))
        if any(text is None for text in texts):
            logger.warning(f"Column {column} has cells without data.")
        return list(texts)

    async def click_cell_by_text(self, text: str, index: int = 0) -> None:
        """
        Click the ``index``-th cell (0-based) whose text equals ``text``.

        An index past the last match clicks the last match.

        Raises:
            ElementNotFoundError: No cell has the text
            InvariantViolationError: The cell is disabled
        """
        logger.debug(f"Clicking cell with text: {text}")
        cells = await self._root().locator("xpath=.//td").all()
        texts = await asyncio.gather(*(read_or_none(cell.inner_text(), "cell text") for cell in cells))
        expected = normalize_text(text)
        matched = [cell for cell, t in zip(cells, texts) if t is not None and normalize_text(t) == expected]
        if not matched:
            raise ElementNotFoundError(
                f"Cannot find cell with text: {text}",
                target=describe(self.root),
                value=text,
                candidate_count=len(cells),
                reason=NotFoundReason.NO_ROWS if not cells else NotFoundReason.NO_MATCH,
            )
        if index > len(matched) - 1:
            logger.warning(f"Index {index} is out of range. Using the last cell instead.")
            index = len(matched) - 1
        cell = matched[index]

        css_class = (await cell.get_attribute("class")) or ""
        if "disabled" in css_class.lower():
            raise InvariantViolationError(f"Cell with text: {text} is disabled.")
        await self.click(cell)

    # =========================================================================
    # Data checks
    # =========================================================================

    async def check_data_sorted(self, options: SortCheck) -> None:
        check_sorted(await self.get_grid_data(), options)

    async def is_data_sorted(self, options: SortCheck) -> bool:
        return is_sorted(await self.get_grid_data(), options)

    async def check_data_range(self, options: RangeCheck) -> None:
        check_range(await self.get_grid_data(), options)

    async def is_data_in_range(self, options: RangeCheck) -> bool:
        return is_in_range(await self.get_grid_data(), options)

    async def check_data_matched(self, options: MatchCheck) -> None:
        check_matched(await self.get_grid_data(), options)

    async def is_data_matched(self, options: MatchCheck) -> bool:
        return is_matched(await self.get_grid_data(), options)


__all__ = [
    "Table",
    "Row",
    "CompositeCell",
    "HeaderCell",
    "GroupByText",
    "InnerCell",
    "Grid",
    "GridData",
    "DEFAULT_EXCLUDED_TEXTS",
    "DEFAULT_EMPTY_SIGN",
]
