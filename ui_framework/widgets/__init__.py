"""
================================================================================
UI Framework Widgets
================================================================================

Reusable widgets built on ``BaseComponent``:

    - DropdownList / DropdownListCollector: overlay lists with search and apply
    - SortOptionsDropdownList: column sort toggles (Unset -> Asc -> Desc)
    - ListWidget / Checkbox / Radio / TextCollector: static row lists and
      typed-text chips
    - Popup / ViewSetting / PopConfirm: modals and inline confirmations
    - DatePicker / SimpleDatePicker / BsSingleDatePicker: calendars
    - MediaPicker: gallery item picker
    - Table: two-pass grid scan with reconciliation, groups and inner cells

================================================================================
"""

from .date_picker import DATE_RANGE_PRESETS, BsSingleDatePicker, DatePicker, SimpleDatePicker
from .dropdown import DropdownList, DropdownListCollector
from .list_widget import Checkbox, ListWidget, Radio, TextCollector
from .media_picker import MediaPicker
from .popup import ITEMS_PER_PAGE, PopConfirm, Popup, ViewSetting
from .sort_dropdown import (
    NO_SORT,
    SortOption,
    SortOptionsDropdownList,
    SortOrder,
    SortSelection,
    plan_sort_clicks,
)
from .table import CompositeCell, GroupByText, HeaderCell, InnerCell, Row, Table
from .widget import Widget, read_checked_state, sync_checkboxes

__all__ = [
    "Widget",
    "read_checked_state",
    "sync_checkboxes",
    "DropdownList",
    "DropdownListCollector",
    "SortOptionsDropdownList",
    "SortOrder",
    "SortSelection",
    "SortOption",
    "NO_SORT",
    "plan_sort_clicks",
    "ListWidget",
    "Checkbox",
    "Radio",
    "TextCollector",
    "Popup",
    "ViewSetting",
    "PopConfirm",
    "ITEMS_PER_PAGE",
    "DatePicker",
    "SimpleDatePicker",
    "BsSingleDatePicker",
    "DATE_RANGE_PRESETS",
    "MediaPicker",
    "Table",
    "Row",
    "CompositeCell",
    "HeaderCell",
    "GroupByText",
    "InnerCell",
]
