"""
================================================================================
Media Picker Tests
================================================================================
"""

import allure
import pytest

from testsuites.unit.fakes import FakeNode, rows_of
from ui_framework.core import ElementNotFoundError, NotFoundReason, WidgetConfigurationError
from ui_framework.widgets import MediaPicker
from ui_framework.widgets import media_picker


class FakeGallery:
    def __init__(self, page, items=("cat.png", "dog.png", "bird.png")):
        self.items = page.add(media_picker.MEDIA_ROWS, rows_of(*items))
        self.trigger = page.add("#add-media", [FakeNode("Add Media")])[0]
        self.btn_next = page.add(media_picker.NEXT_BUTTON, [FakeNode("Next")])[0]
        self.btn_save = page.add(media_picker.SAVE_BUTTON, [FakeNode("Save")])[0]
        self.txt_title = page.add(media_picker.TITLE_INPUT, [FakeNode()])[0]
        self.txt_alternative_text = page.add(media_picker.ALTERNATIVE_TEXT_INPUT, [FakeNode()])[0]


@allure.epic("UI Framework")
@allure.feature("Media Picker")
class TestMediaPicker:

    @pytest.mark.asyncio
    async def test_pick_by_index_fills_details_and_saves(self, page, slept):
        gallery = FakeGallery(page)
        picker = MediaPicker(page, trigger="#add-media")

        picked = await picker.pick_media(index=2, title="Banner", alternative_text="A dog")

        assert picked == 2
        assert [item.clicks for item in gallery.items] == [0, 1, 0]
        assert gallery.trigger.clicks == 1
        assert gallery.btn_next.clicks == 1
        assert (gallery.txt_title.value, gallery.txt_alternative_text.value) == ("Banner", "A dog")
        assert gallery.btn_save.clicks == 1
        assert 2000 in slept

    @pytest.mark.asyncio
    async def test_random_pick_stays_in_gallery(self, page, monkeypatch):
        gallery = FakeGallery(page)
        monkeypatch.setattr(media_picker.random, "randint", lambda low, high: high)

        picked = await MediaPicker(page).pick_media()

        assert picked == 3
        assert [item.clicks for item in gallery.items] == [0, 0, 1]
        assert gallery.trigger.clicks == 0
        assert gallery.txt_title.value == ""

    @pytest.mark.asyncio
    async def test_empty_gallery(self, page):
        FakeGallery(page, items=())

        assert await MediaPicker(page).get_media_count() == 0
        with pytest.raises(ElementNotFoundError) as exc_info:
            await MediaPicker(page).pick_media()
        assert exc_info.value.reason is NotFoundReason.NO_ROWS

    @pytest.mark.asyncio
    async def test_index_out_of_range(self, page):
        FakeGallery(page)
        with pytest.raises(ElementNotFoundError):
            await MediaPicker(page).pick_media(index=4)

    @pytest.mark.asyncio
    async def test_open_without_trigger(self, page):
        with pytest.raises(WidgetConfigurationError):
            await MediaPicker(page).open()
