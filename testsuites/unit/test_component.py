"""
================================================================================
Base Component and Page Tests
================================================================================
"""

import re

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from testsuites.unit.fakes import FakeNode, FakeResponse, rows_of
from ui_framework.core import BaseComponent, BasePage, Handle, WaitTimeoutError, xpath_literal
from ui_framework.core import page as page_module


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "border, point",
    [("top", (100.0, 90.0)), ("bottom", (100.0, 130.0)), ("left", (90.0, 100.0)), ("right", (160.0, 100.0))],
)
async def test_click_around_element(page, border, point):
    page.add("#menu", [FakeNode("menu")])

    await BaseComponent(page).click_around_element("#menu", border=border)

    assert page.mouse.clicks == [point]


@pytest.mark.asyncio
async def test_click_around_element_rejects_unknown_border(page):
    page.add("#menu", [FakeNode("menu")])
    with pytest.raises(ValueError):
        await BaseComponent(page).click_around_element("#menu", border="diagonal")
    with pytest.raises(ValueError):
        await BaseComponent(page).click_around_element("#missing")


@pytest.mark.asyncio
async def test_fill_converts_and_confirms(page):
    box = FakeNode()
    page.add("#qty", [box])

    await BaseComponent(page).fill("#qty", 42, clear=True, confirm=True)

    assert box.value == "42"
    assert page.keyboard.pressed == ["Enter"]


@pytest.mark.asyncio
async def test_handles_are_used_as_is(page):
    node = FakeNode("Save")
    page.add("#save", [node])
    component = BaseComponent(page)

    await component.click(Handle(page.locator("#save")))

    assert node.clicks == 1
    assert BaseComponent(component).page is page


@pytest.mark.asyncio
async def test_wait_for_api_loaded(page, slept):
    page.emit_response("https://shop.test/api/items?page=1")

    response = await BaseComponent(page).wait_for_api_loaded("/api/items", render_time_ms=300)

    assert response.url.endswith("page=1")
    assert slept == [300]
    with pytest.raises(WaitTimeoutError):
        await BaseComponent(page).wait_for_api_loaded("/api/orders")


@pytest.mark.asyncio
async def test_expect_api_response(page, slept):
    component = BaseComponent(page)

    async with component.expect_api_response("/api/items", render_time_ms=50):
        page.emit_response("https://shop.test/api/items")

    assert slept == [50]

    with pytest.raises(WaitTimeoutError):
        async with component.expect_api_response("/api/items"):
            page.emit_response("https://shop.test/api/orders")


@pytest.mark.asyncio
async def test_timeouts_raised_inside_the_block_are_not_renamed(page):
    with pytest.raises(PlaywrightTimeoutError):
        async with BaseComponent(page).expect_api_response("/api/items"):
            await page.locator("#missing").click()


@pytest.mark.asyncio
async def test_assertions(page):
    page.add("#items li", rows_of("Apple", "Banana"))
    page.add("#title", [FakeNode("  Fruit   list ")])
    page.add("#spinner", [FakeNode(visible=False)])
    component = BaseComponent(page)

    await component.assert_element_count("#items li", 2)
    await component.assert_visible("#title")
    await component.assert_not_visible("#spinner")
    await component.assert_text("#title", "Fruit list")
    await component.assert_text_contains("#title", "list")
    with pytest.raises(WaitTimeoutError):
        await component.assert_element_count("#items li", 3, timeout_ms=1000)
    with pytest.raises(AssertionError):
        await component.assert_text("#title", "Vegetables")


class ProductsPage(BasePage):
    URL_PATH = "/products"

    checked_in = False

    async def check_in(self):
        self.checked_in = True


@pytest.mark.asyncio
async def test_navigate_runs_check_in(page, monkeypatch):
    monkeypatch.setenv("UI_BASE_URL", "https://shop.test/")
    products = ProductsPage(page)

    await products.navigate()

    assert page.visited == ["https://shop.test/products"]
    assert products.checked_in


@pytest.mark.asyncio
async def test_only_api_responses_are_captured(page):
    products = ProductsPage(page, base_url="https://shop.test")

    for i in range(page_module.MAX_CAPTURED_RESPONSES + 3):
        await products._capture_response(FakeResponse(f"https://shop.test/api/items/{i}"))
    await products._capture_response(FakeResponse("https://shop.test/static/app.js"))

    urls = [r["url"] for r in products._captured_responses]
    assert len(urls) == page_module.MAX_CAPTURED_RESPONSES
    assert urls[0].endswith("/api/items/3")


@pytest.mark.asyncio
async def test_capture_failure_saves_screenshot(page, monkeypatch, tmp_path):
    monkeypatch.setattr(page_module, "SCREENSHOT_DIR", tmp_path)
    products = ProductsPage(page, base_url="https://shop.test")

    path = await products.screenshot("sorted", attach_to_allure=False)
    await products.capture_failure("test_sort")

    assert path.parent == tmp_path
    assert path.name.startswith("sorted_")


@pytest.mark.parametrize(
    "text, literal",
    [
        ("Save", "'Save'"),
        ("Don't save", '"Don\'t save"'),
        ("It's \"new\"", "concat('It', \"'\", 's \"new\"')"),
    ],
)
def test_xpath_literal_quotes_any_text(text, literal):
    assert xpath_literal(text) == literal


@pytest.mark.asyncio
async def test_double_click_and_input_value(page):
    box = FakeNode(attrs={"value": "3"})
    page.add("#qty", [box])
    component = BaseComponent(page)

    await component.click("#qty", double=True)

    assert box.clicks == 2
    assert await component.get_input_value("#qty") == "3"


@pytest.mark.asyncio
async def test_wait_for_element_has_text_polls_until_text_appears(page):
    toast = FakeNode("Saving...")
    reads = []

    def nodes():
        reads.append(1)
        if len(reads) == 3:
            toast.text = "Saved 3 items"
        return [toast]

    page.add("#toast", nodes)
    component = BaseComponent(page)

    assert await component.wait_for_element_has_text("#toast", "Saved") != []
    assert len(reads) == 3
    assert await component.wait_for_element_has_text("#toast", re.compile(r"Saved \d+ items")) != []


@pytest.mark.asyncio
async def test_wait_for_element_has_text_times_out(page):
    page.add("#toast", [FakeNode("Saving...")])
    component = BaseComponent(page)

    with pytest.raises(WaitTimeoutError):
        await component.wait_for_element_has_text("#toast", "Saved", timeout_ms=1000)
    with pytest.raises(WaitTimeoutError):
        await component.wait_for_element_has_text("#toast", re.compile(r"^Saved"), timeout_ms=1000)


@pytest.mark.asyncio
async def test_attribute_assertions(page):
    page.add("#save", [FakeNode("Save", attrs={"class": "btn btn-primary", "type": "submit"})])
    component = BaseComponent(page)

    await component.assert_element_has_attribute("#save", "type")
    await component.assert_element_attribute_has_value("#save", "type", "submit")
    await component.assert_element_attribute_contains("#save", "class", "primary")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "assertion, args",
    [
        ("assert_element_has_attribute", ("disabled",)),
        ("assert_element_attribute_has_value", ("type", "button")),
        ("assert_element_attribute_contains", ("class", "danger")),
    ],
)
async def test_attribute_assertions_time_out(page, assertion, args):
    page.add("#save", [FakeNode("Save", attrs={"class": "btn btn-primary", "type": "submit"})])
    component = BaseComponent(page)

    with pytest.raises(WaitTimeoutError):
        await getattr(component, assertion)("#save", *args, timeout_ms=1000)


@pytest.mark.asyncio
async def test_attribute_appearing_later_is_waited_for(page):
    button = FakeNode("Save")
    reads = []

    def nodes():
        reads.append(1)
        if len(reads) == 2:
            button.attrs["aria-busy"] = "false"
        return [button]

    page.add("#save", nodes)

    await BaseComponent(page).assert_element_attribute_has_value("#save", "aria-busy", "false")

    assert len(reads) == 2
