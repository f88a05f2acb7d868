"""models モジュールのユニットテスト."""

import pytest

from dashwidgets.errors import DecodeError
from dashwidgets.models import CATEGORY_ABBREVIATIONS, HotSearchItem, RawFact


class TestFormattedHotValue:
    """formatted_hot_value のテスト."""

    def test_plain(self):
        assert HotSearchItem(word="a", num=999).formatted_hot_value() == "999"

    def test_thousands(self):
        assert HotSearchItem(word="a", num=1500).formatted_hot_value() == "1.5K"

    def test_millions(self):
        assert HotSearchItem(word="a", num=2_500_000).formatted_hot_value() == "2.5M"

    def test_boundaries(self):
        assert HotSearchItem(word="a", num=1000).formatted_hot_value() == "1.0K"
        assert HotSearchItem(word="a", num=1_000_000).formatted_hot_value() == "1.0M"
        assert HotSearchItem(word="a", num=0).formatted_hot_value() == "0"


class TestCategoryDisplayName:
    """category_display_name のテスト."""

    def test_mapped(self):
        assert HotSearchItem(word="a", label_name="娱乐").category_display_name() == "娱"

    def test_unmapped(self):
        assert HotSearchItem(word="a", label_name="xyz").category_display_name() == "xyz"

    def test_table_is_immutable(self):
        assert len(CATEGORY_ABBREVIATIONS) == 10
        with pytest.raises(TypeError):
            CATEGORY_ABBREVIATIONS["新闻"] = "新"


class TestHotSearchItemFromDict:
    """HotSearchItem.from_dict のテスト."""

    def test_unknown_fields_ignored(self):
        item = HotSearchItem.from_dict({"word": "w", "num": 10, "monitors": {"x": 1}})
        assert item.word == "w"
        assert item.num == 10

    def test_null_and_missing_use_defaults(self):
        item = HotSearchItem.from_dict({"word": "w", "note": None})
        assert item.note == ""
        assert item.label_name == ""
        assert item.num == 0

    def test_wrong_type(self):
        with pytest.raises(DecodeError):
            HotSearchItem.from_dict({"word": "w", "num": "12"})

    def test_bool_is_not_int(self):
        with pytest.raises(DecodeError):
            HotSearchItem.from_dict({"word": "w", "num": True})

    def test_not_object(self):
        with pytest.raises(DecodeError):
            HotSearchItem.from_dict(["w"])


class TestRawFactFromDict:
    """RawFact.from_dict のテスト."""

    def test_parse(self):
        fact = RawFact.from_dict({"id": "abc", "text": "Penguins have knees.", "language": "en"})
        assert fact.id == "abc"
        assert fact.text == "Penguins have knees."
        assert fact.language == "en"

    def test_empty_text(self):
        with pytest.raises(DecodeError):
            RawFact.from_dict({"id": "abc", "text": "  "})

    def test_not_object(self):
        with pytest.raises(DecodeError):
            RawFact.from_dict("Penguins have knees.")
