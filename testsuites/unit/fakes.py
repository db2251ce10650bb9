"""
================================================================================
In-Memory Page Doubles
================================================================================

Minimal stand-ins for the async Playwright ``Page`` / ``Locator`` surface the
framework uses, so widgets can be exercised without a browser.

    FakeNode     one DOM node: text, attributes, state, children by selector
    FakeLocator  lazily resolved node set (re-resolved on every call, like a
                 real locator)
    FakePage     selector -> nodes registry plus mouse, keyboard and network

Selectors are matched literally: ``page.locator("#rows")`` returns whatever
was registered under "#rows", and ``node_locator.locator("xpath=./td")``
returns the node's children registered under "xpath=./td".

================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

Nodes = Union[Sequence["FakeNode"], Callable[[], Sequence["FakeNode"]]]


def _materialize(nodes: Nodes) -> List["FakeNode"]:
    return list(nodes() if callable(nodes) else nodes)


class FakeNode:
    """A DOM node double. ``checked=None`` means "not a checkbox or radio"."""

    def __init__(
        self,
        text: str = "",
        attrs: Optional[Dict[str, str]] = None,
        visible: bool = True,
        enabled: bool = True,
        checked: Optional[bool] = None,
        children: Optional[Dict[str, Nodes]] = None,
        on_click: Optional[Callable[["FakeNode"], None]] = None,
        box: Optional[Dict[str, float]] = None,
    ):
        self.text = text
        self.attrs = dict(attrs or {})
        self.visible = visible
        self.enabled = enabled
        self.checked = checked
        self.children: Dict[str, Nodes] = dict(children or {})
        self.on_click = on_click
        self.box = box if box is not None else {"x": 100.0, "y": 100.0, "width": 50.0, "height": 20.0}
        self.value = ""
        self.clicks = 0
        self.stale = False
        self.selected_all = False

    def find(self, selector: str) -> List["FakeNode"]:
        return _materialize(self.children.get(selector, []))

    def __repr__(self) -> str:
        return f"FakeNode({self.text!r})"


class FakeLocator:
    def __init__(self, resolver: Callable[[], List[FakeNode]], description: str = "fake"):
        self._resolver = resolver
        self.description = description

    def __repr__(self) -> str:
        return f"FakeLocator({self.description})"

    __str__ = __repr__

    # ------------------------------------------------------------------ query

    def nodes(self) -> List[FakeNode]:
        return self._resolver()

    def locator(self, selector: str) -> "FakeLocator":
        return FakeLocator(
            lambda: [child for node in self._resolver() for child in node.find(selector)],
            f"{self.description} >> {selector}",
        )

    @property
    def first(self) -> "FakeLocator":
        return self.nth(0)

    def nth(self, index: int) -> "FakeLocator":
        def resolve() -> List[FakeNode]:
            nodes = self._resolver()
            return nodes[index : index + 1] if index < len(nodes) else []

        return FakeLocator(resolve, f"{self.description} >> nth={index}")

    async def all(self) -> List["FakeLocator"]:
        return [
            FakeLocator(lambda node=node: [node], f"{self.description} >> {node!r}")
            for node in self._resolver()
        ]

    async def count(self) -> int:
        return len(self._resolver())

    def _one(self) -> FakeNode:
        nodes = self._resolver()
        if not nodes:
            raise PlaywrightTimeoutError(f"Timeout: no element for {self.description}")
        if len(nodes) > 1:
            raise PlaywrightError(f"strict mode violation: {self.description} resolved to {len(nodes)} elements")
        node = nodes[0]
        if node.stale:
            raise PlaywrightError("Element is not attached to the DOM")
        return node

    # ------------------------------------------------------------------- read

    async def text_content(self, timeout: Optional[float] = None) -> Optional[str]:
        return self._one().text

    async def inner_text(self, timeout: Optional[float] = None) -> str:
        return self._one().text

    async def get_attribute(self, name: str, timeout: Optional[float] = None) -> Optional[str]:
        return self._one().attrs.get(name)

    async def input_value(self, timeout: Optional[float] = None) -> str:
        node = self._one()
        return node.value or node.attrs.get("value", "")

    async def is_visible(self) -> bool:
        nodes = self._resolver()
        if not nodes:
            return False
        return self._one().visible

    async def is_hidden(self) -> bool:
        return not await self.is_visible()

    async def is_enabled(self) -> bool:
        return self._one().enabled

    async def is_disabled(self) -> bool:
        return not self._one().enabled

    async def is_editable(self) -> bool:
        return self._one().enabled

    async def is_checked(self) -> bool:
        node = self._one()
        if node.checked is None:
            raise PlaywrightError("Error: Not a checkbox or radio button")
        return node.checked

    async def bounding_box(self) -> Optional[Dict[str, float]]:
        nodes = self._resolver()
        return nodes[0].box if nodes else None

    # -------------------------------------------------------------------- act

    async def click(self, force: bool = False, timeout: Optional[float] = None, **_: Any) -> None:
        node = self._one()
        node.clicks += 1
        if node.checked is not None:
            node.checked = not node.checked
        if node.on_click is not None:
            node.on_click(node)

    async def dblclick(self, force: bool = False, timeout: Optional[float] = None, **_: Any) -> None:
        await self.click(force=force, timeout=timeout)
        await self.click(force=force, timeout=timeout)

    async def press(self, key: str, timeout: Optional[float] = None) -> None:
        node = self._one()
        if key == "Control+a":
            node.selected_all = True
        elif key in ("Delete", "Backspace") and node.selected_all:
            node.value = ""
            node.selected_all = False

    async def press_sequentially(self, text: str, delay: Optional[float] = None, **_: Any) -> None:
        node = self._one()
        node.value += text

    async def fill(self, value: str, timeout: Optional[float] = None) -> None:
        node = self._one()
        node.value = value
        if node.on_click is not None:
            node.on_click(node)

    async def clear(self, timeout: Optional[float] = None) -> None:
        self._one().value = ""

    async def check(self, timeout: Optional[float] = None) -> None:
        self._one().checked = True

    async def uncheck(self, timeout: Optional[float] = None) -> None:
        self._one().checked = False


class FakeMouse:
    def __init__(self) -> None:
        self.clicks: List[tuple] = []

    async def click(self, x: float, y: float) -> None:
        self.clicks.append((x, y))


class FakeKeyboard:
    def __init__(self) -> None:
        self.pressed: List[str] = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)


class FakeResponse:
    def __init__(self, url: str, status: int = 200):
        self.url = url
        self.status = status


class _ResponseWaiter:
    """``page.expect_response`` double; the response must be emitted inside the block."""

    def __init__(self, page: "FakePage", predicate: Callable[[FakeResponse], bool]):
        self._page = page
        self._predicate = predicate
        self._start = 0

    async def __aenter__(self) -> "_ResponseWaiter":
        self._start = len(self._page.responses)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    @property
    def value(self):
        return self._find()

    async def _find(self) -> FakeResponse:
        for response in self._page.responses[self._start :]:
            if self._predicate(response):
                return response
        raise PlaywrightTimeoutError("Timeout while waiting for event \"response\"")


class FakePage:
    """
    Page double. Register nodes with ``add(selector, nodes)``; ``nodes`` may be
    a callable so the node set can change between snapshots.
    """

    def __init__(self, url: str = "about:blank"):
        self.selectors: Dict[str, Nodes] = {}
        self.mouse = FakeMouse()
        self.keyboard = FakeKeyboard()
        self.responses: List[FakeResponse] = []
        self.handlers: Dict[str, List[Callable]] = {}
        self.url = url
        self.visited: List[str] = []

    def add(self, selector: str, nodes: Nodes) -> Nodes:
        self.selectors[selector] = nodes
        return nodes

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(lambda: _materialize(self.selectors.get(selector, [])), selector)

    def emit_response(self, url: str, status: int = 200) -> FakeResponse:
        response = FakeResponse(url, status)
        self.responses.append(response)
        for handler in self.handlers.get("response", []):
            handler(response)
        return response

    def expect_response(self, predicate: Callable[[FakeResponse], bool], timeout: Optional[float] = None):
        return _ResponseWaiter(self, predicate)

    async def wait_for_response(
        self, predicate: Callable[[FakeResponse], bool], timeout: Optional[float] = None
    ) -> FakeResponse:
        for response in self.responses:
            if predicate(response):
                return response
        raise PlaywrightTimeoutError("Timeout while waiting for event \"response\"")

    def on(self, event: str, handler: Callable) -> None:
        self.handlers.setdefault(event, []).append(handler)

    async def goto(self, url: str, **_: Any) -> FakeResponse:
        self.url = url
        self.visited.append(url)
        return FakeResponse(url)

    async def screenshot(self, **_: Any) -> bytes:
        return b"\x89PNG"


def rows_of(*texts: str, **node_kwargs: Any) -> List[FakeNode]:
    """One node per text."""
    return [FakeNode(text, **node_kwargs) for text in texts]


__all__ = [
    "FakeNode",
    "FakeLocator",
    "FakePage",
    "FakeResponse",
    "rows_of",
]
