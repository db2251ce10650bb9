"""
================================================================================
Sort Options Dropdown Tests
================================================================================

``plan_sort_clicks`` is checked as a pure function against a model of the
Unset -> Asc -> Desc -> Unset click cycle; ``SortOptionsDropdownList`` is
driven against an in-memory sort menu that implements the same cycle.

================================================================================
"""

import asyncio
import itertools

import allure
import pytest
from playwright.async_api import Error as PlaywrightError

from testsuites.unit.fakes import FakeNode
from ui_framework.core import ElementNotFoundError, WaitTimeoutError
from ui_framework.widgets import SortOptionsDropdownList, SortOrder, SortSelection, plan_sort_clicks
from ui_framework.widgets.sort_dropdown import DEFAULT_ARROW_SUB_LOCATOR, DEFAULT_CHECK_SUB_LOCATOR

ASC, DESC = SortOrder.ASC, SortOrder.DESC
COLUMNS = ("Name", "Price")


def click_model(state, label):
    """What one click on ``label`` does to the sort state."""
    if state is None or state.by != label:
        return SortSelection(label, ASC)
    if state.order is ASC:
        return SortSelection(label, DESC)
    return None


ALL_STATES = [None] + [SortSelection(c, o) for c in COLUMNS for o in (ASC, DESC)]


# =============================================================================
# Click planning
# =============================================================================

@pytest.mark.parametrize(
    "current, target, clicks",
    [
        (None, SortSelection("Name", ASC), ["Name"]),
        (None, SortSelection("Name", DESC), ["Name", "Name"]),
        (SortSelection("Name", ASC), SortSelection("Name", DESC), ["Name"]),
        (SortSelection("Name", DESC), SortSelection("Name", ASC), ["Name", "Name"]),
        (SortSelection("Name", ASC), None, ["Name", "Name"]),
        (SortSelection("Name", DESC), None, ["Name"]),
        (SortSelection("Name", DESC), SortSelection("Price", ASC), ["Price"]),
        (SortSelection("Name", ASC), SortSelection("Price", DESC), ["Price", "Price"]),
        (SortSelection("Name", ASC), SortSelection("Name", ASC), []),
        (None, None, []),
    ],
)
def test_plan_sort_clicks(current, target, clicks):
    assert plan_sort_clicks(current, target) == clicks


@pytest.mark.parametrize("current, target", list(itertools.product(ALL_STATES, ALL_STATES)))
def test_replaying_the_plan_reaches_the_target(current, target):
    state = current
    for label in plan_sort_clicks(current, target):
        state = click_model(state, label)
    assert state == target


def test_full_cycle_takes_three_clicks():
    name_asc, name_desc = SortSelection("Name", ASC), SortSelection("Name", DESC)
    steps = [(None, name_asc), (name_asc, name_desc), (name_desc, None)]
    assert sum(len(plan_sort_clicks(a, b)) for a, b in steps) == 3


def test_coerce_accepts_mappings_and_none_strings():
    assert SortSelection.coerce({"by": "Name", "order": "desc"}) == SortSelection("Name", DESC)
    assert SortSelection.coerce("None") is None
    assert plan_sort_clicks("None", {"by": "Name", "order": "asc"}) == ["Name"]
    with pytest.raises(ValueError):
        SortSelection.coerce(42)


# =============================================================================
# Widget
# =============================================================================

class FakeSortMenu:
    """Sort menu whose rows implement the click cycle and close the overlay."""

    def __init__(self, page, labels=COLUMNS, state=None, heading=None, reload_url="/api/items", render_delay=0):
        self.page = page
        self.state = state
        self.opened = False
        self.scans = 0
        # Scans after opening that still show only the heading (or nothing)
        self.render_delay = render_delay
        self.pending_scans = 0
        self.fail_next_scan = False
        self.reload_url = reload_url
        self.heading = heading
        self.trigger = FakeNode("Sort", on_click=self._toggle)
        self.rows = {}
        nodes = []
        if heading:
            nodes.append(FakeNode(heading))
        for label in labels:
            row = FakeNode(
                label,
                children={
                    DEFAULT_CHECK_SUB_LOCATOR: [FakeNode(children={"xpath=./*": self._check_of(label)})],
                    DEFAULT_ARROW_SUB_LOCATOR: self._arrow_of(label),
                },
                on_click=self._click,
            )
            self.rows[label] = row
            nodes.append(row)
        self._nodes = nodes
        page.add("#sort", [self.trigger])
        page.add("#sort li", self._visible_rows)

    def _check_of(self, label):
        return lambda: [FakeNode("✓")] if self.state and self.state.by == label else []

    def _arrow_of(self, label):
        def arrow():
            down = self.state and self.state.by == label and self.state.order is DESC
            return [FakeNode(attrs={"class": "arrow down" if down else "arrow up"})]

        return arrow

    def _toggle(self, _node):
        self.opened = not self.opened
        self.pending_scans = self.render_delay if self.opened else 0

    def _click(self, node):
        self.state = click_model(self.state, node.text)
        self.opened = False
        if self.reload_url:
            self.page.emit_response(f"{self.reload_url}?sort={self.state}")

    def _visible_rows(self):
        self.scans += 1
        if self.fail_next_scan:
            self.fail_next_scan = False
            raise PlaywrightError("Protocol error: session lost")
        if not self.opened:
            return []
        if self.pending_scans:
            self.pending_scans -= 1
            return self._nodes[:1] if self.heading else []
        return list(self._nodes)

    def row_clicks(self):
        return {label: row.clicks for label, row in self.rows.items()}


def _sort_widget(page, **kwargs):
    return SortOptionsDropdownList(
        page, trigger="#sort", rows_locator="#sort li", reload_url="/api/items", **kwargs
    )


@allure.epic("UI Framework")
@allure.feature("Sort Options Dropdown")
class TestSortOptionsDropdown:

    @pytest.mark.asyncio
    async def test_reads_current_sort_option(self, page):
        menu = FakeSortMenu(page, state=SortSelection("Price", DESC))
        menu.opened = True

        assert await _sort_widget(page).get_sort_option() == SortSelection("Price", DESC)

    @pytest.mark.asyncio
    async def test_no_checked_row_means_no_sort(self, page):
        menu = FakeSortMenu(page)
        menu.opened = True

        assert await _sort_widget(page).get_sort_option() is None

    @allure.title("Name asc -> Name desc is a single click")
    @pytest.mark.asyncio
    async def test_same_column_asc_to_desc_clicks_once(self, page):
        menu = FakeSortMenu(page, state=SortSelection("Name", ASC))

        await _sort_widget(page).sort_by({"by": "Name", "order": "desc"})

        assert menu.state == SortSelection("Name", DESC)
        assert menu.row_clicks() == {"Name": 1, "Price": 0}
        assert len(page.responses) == 1

    @pytest.mark.asyncio
    async def test_desc_from_unsorted_reopens_between_clicks(self, page, slept):
        menu = FakeSortMenu(page)
        widget = _sort_widget(page, reopen_delay_ms=750)

        await widget.sort_by(SortSelection("Name", DESC))

        assert menu.state == SortSelection("Name", DESC)
        assert menu.row_clicks() == {"Name": 2, "Price": 0}
        assert menu.trigger.clicks == 2
        assert 750 in slept

    @pytest.mark.asyncio
    async def test_back_to_no_sort(self, page):
        menu = FakeSortMenu(page, state=SortSelection("Price", ASC))

        await _sort_widget(page).sort_by(None)

        assert menu.state is None
        assert menu.row_clicks() == {"Name": 0, "Price": 2}

    @pytest.mark.asyncio
    async def test_full_cycle_through_widget(self, page):
        menu = FakeSortMenu(page)
        widget = _sort_widget(page)

        for target in (SortSelection("Name", ASC), SortSelection("Name", DESC), None):
            await widget.sort_by(target)
            assert menu.state == target

        assert menu.row_clicks() == {"Name": 3, "Price": 0}

    @pytest.mark.asyncio
    async def test_current_state_is_dismissed_without_clicking_rows(self, page):
        menu = FakeSortMenu(page, state=SortSelection("Name", ASC))

        await _sort_widget(page).sort_by(SortSelection("Name", ASC))

        assert menu.row_clicks() == {"Name": 0, "Price": 0}
        assert len(page.mouse.clicks) == 1
        assert page.responses == []

    @pytest.mark.asyncio
    async def test_unknown_column_raises_not_found(self, page):
        FakeSortMenu(page)

        with pytest.raises(ElementNotFoundError) as exc_info:
            await _sort_widget(page).sort_by(SortSelection("Weight", ASC))

        assert exc_info.value.value == "Weight"

    @pytest.mark.asyncio
    async def test_missing_reload_response_times_out(self, page):
        FakeSortMenu(page, reload_url=None)

        with pytest.raises(WaitTimeoutError):
            await _sort_widget(page).sort_by(SortSelection("Name", ASC))

    @pytest.mark.asyncio
    async def test_without_reload_url_nothing_is_awaited(self, page):
        menu = FakeSortMenu(page, reload_url=None)
        widget = SortOptionsDropdownList(page, trigger="#sort", rows_locator="#sort li")

        await widget.sort_by(SortSelection("Price", ASC))

        assert menu.state == SortSelection("Price", ASC)


@allure.epic("UI Framework")
@allure.feature("Sort Options Dropdown")
class TestSortOptionsMemo:

    @pytest.mark.asyncio
    async def test_options_are_scanned_once(self, page):
        menu = FakeSortMenu(page, heading="Sort by")
        menu.opened = True
        widget = SortOptionsDropdownList(page, trigger="#sort", rows_locator="#sort li", label_value="Sort by")

        first, second = await asyncio.gather(widget.get_sort_options(), widget.get_sort_options())
        third = await widget.get_sort_options()

        assert first == second == third == ["Name", "Price"]
        assert menu.scans == 1

    @pytest.mark.asyncio
    async def test_failed_scan_is_retried_on_next_call(self, page):
        menu = FakeSortMenu(page)
        menu.opened = True
        menu.fail_next_scan = True
        widget = _sort_widget(page)

        with pytest.raises(PlaywrightError):
            await widget.get_sort_options()

        assert await widget.get_sort_options() == ["Name", "Price"]
        assert menu.scans == 2

    @allure.title("Options rendered after the overlay opens are still found")
    @pytest.mark.asyncio
    async def test_rows_rendered_late_are_waited_for(self, page):
        menu = FakeSortMenu(page, render_delay=1)
        widget = _sort_widget(page)

        await widget.sort_by(SortSelection("Name", ASC))
        await widget.sort_by(SortSelection("Name", ASC))

        assert menu.state == SortSelection("Name", ASC)
        assert menu.row_clicks() == {"Name": 1, "Price": 0}

    @pytest.mark.asyncio
    async def test_options_of_a_closed_list_are_scanned_again_once_open(self, page):
        menu = FakeSortMenu(page)
        widget = _sort_widget(page)

        with pytest.raises(WaitTimeoutError):
            await widget.get_sort_options()

        menu.opened = True
        assert await widget.get_sort_options() == ["Name", "Price"]

    @pytest.mark.asyncio
    async def test_empty_scan_is_not_kept(self, page):
        menu = FakeSortMenu(page, heading="Sort by", render_delay=1)
        widget = SortOptionsDropdownList(page, trigger="#sort", rows_locator="#sort li", label_value="Sort by")
        await widget.open()

        assert await widget.get_sort_options() == []
        assert await widget.get_sort_options() == ["Name", "Price"]
        assert await widget.get_sort_options() == ["Name", "Price"]
        assert menu.scans == 3
