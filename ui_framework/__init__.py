"""
================================================================================
UI Framework
================================================================================

Browser UI test automation on top of async Playwright.

Modules:
    - common: configuration (YAML + environment overrides) and loguru setup
    - core: polling wait engine, predicate filter, base component and page
    - widgets: dropdowns, sort dropdown, lists, popups, date pickers, table
    - utils: sort/range/match checks, dates, comparison, JSON/YAML test data

Example:
    from ui_framework.core import BasePage, WaitPredicates, MatchCondition
    from ui_framework.widgets import DropdownList, Table

    class ProductsPage(BasePage):
        URL_PATH = "/products"

        def __init__(self, page):
            super().__init__(page)
            self.category = DropdownList(self, trigger="#category", rows_locator="#category li")
            self.table = Table(self, root="#products table")

    products = ProductsPage(page)
    await products.navigate()
    await products.category.select_by_text("Fruits")
    rows = await products.table.get_body_data(wait_for_rows=True)

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "core",
    "widgets",
    "utils",
]
