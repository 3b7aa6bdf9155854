"""Tests for data models."""

import hashlib

import pytest

from clippings.library.models import (
    HIGHLIGHT,
    Book,
    Entry,
    Image,
    Position,
    PositionalHighlight,
    TextHighlight,
    raw_bookmark_from_dict,
    raw_highlight_from_dict,
)


class TestImage:
    def test_hash_is_md5_of_payload(self):
        img = Image.from_payload(b"\x89PNG data")
        assert img.hash == hashlib.md5(b"\x89PNG data").hexdigest()

    def test_same_payload_same_hash(self):
        assert Image.from_payload(b"abc") == Image.from_payload(b"abc")


class TestEntry:
    def test_defaults(self):
        entry = Entry(page=3)
        assert entry.category == HIGHLIGHT
        assert entry.time is None
        assert entry.note is None
        assert not entry.has_content

    def test_has_content_text_or_image(self):
        assert Entry(page=1, text="x").has_content
        assert Entry(page=1, image=Image.from_payload(b"p")).has_content


class TestBook:
    def test_empty_entries_default(self, tmp_path):
        book = Book(file=tmp_path / "b.pdf", title="T")
        assert book.author is None
        assert book.entries == []


class TestPosition:
    def test_from_dict(self):
        pos = Position.from_dict({"x": 1, "y": 2.5, "page": 4, "zoom": 1.0})
        assert pos == Position(x=1.0, y=2.5, page=4, zoom=1.0)

    def test_missing_coordinate(self):
        assert Position.from_dict({"x": 1}) is None
        assert Position.from_dict(None) is None

    def test_page_optional(self):
        assert Position.from_dict({"x": 1, "y": 2}).page is None

    @pytest.mark.parametrize("x", ["a", "1", True, {}, float("nan")])
    def test_non_numeric_coordinate(self, x):
        assert Position.from_dict({"x": x, "y": 1}) is None

    def test_non_numeric_page_dropped(self):
        pos = Position.from_dict({"x": 1, "y": 2, "page": "five", "zoom": "big"})
        assert pos == Position(x=1.0, y=2.0)


class TestRawHighlight:
    def test_text_item(self):
        item = raw_highlight_from_dict(
            {"text": "hello", "datetime": "2020-05-01 12:30:45", "chapter": "One"}
        )
        assert item == TextHighlight(
            datetime="2020-05-01 12:30:45", text="hello", chapter="One"
        )

    def test_positional_item(self):
        item = raw_highlight_from_dict(
            {
                "text": "",
                "datetime": "d",
                "pos0": {"x": 1, "y": 2, "page": 3},
                "pos1": {"x": 10, "y": 20},
                "pboxes": {1: {"x": 1, "y": 2, "w": 9, "h": 18}},
                "drawer": "lighten",
            }
        )
        assert isinstance(item, PositionalHighlight)
        assert item.pos0.page == 3
        assert item.pos1.page is None
        assert item.pboxes == ({"x": 1, "y": 2, "w": 9, "h": 18},)
        assert item.drawer == "lighten"

    def test_positional_boxes_list(self):
        item = raw_highlight_from_dict(
            {
                "pos0": {"x": 1, "y": 2},
                "pos1": {"x": 3, "y": 4},
                "pboxes": [{"x": 1, "y": 2, "w": 2, "h": 2}],
            }
        )
        assert item.pboxes == ({"x": 1, "y": 2, "w": 2, "h": 2},)

    def test_text_wins_over_positions(self):
        item = raw_highlight_from_dict(
            {"text": "t", "pos0": {"x": 1, "y": 2}, "pos1": {"x": 3, "y": 4}}
        )
        assert isinstance(item, TextHighlight)

    def test_incomplete_positions_stay_text(self):
        item = raw_highlight_from_dict({"text": "", "pos0": {"x": 1, "y": 2}})
        assert item == TextHighlight(datetime=None, text="")

    def test_bad_coordinates_stay_text(self):
        item = raw_highlight_from_dict(
            {"text": "", "pos0": {"x": "a", "y": 1}, "pos1": {"x": 1, "y": 1}}
        )
        assert item == TextHighlight(datetime=None, text="")

    def test_non_string_fields_dropped(self):
        item = raw_highlight_from_dict({"text": "t", "datetime": 1588336245, "chapter": 3})
        assert item == TextHighlight(datetime=None, text="t", chapter=None)


class TestRawBookmark:
    def test_from_dict(self):
        bm = raw_bookmark_from_dict({"datetime": "d", "text": "t", "page": 5})
        assert bm.text == "t"
        assert bm.page == 5

    def test_non_string_text(self):
        assert raw_bookmark_from_dict({"text": 5}).text is None

    def test_non_string_datetime_and_notes(self):
        bm = raw_bookmark_from_dict({"datetime": 1588336245, "text": "t", "notes": {}})
        assert bm.datetime is None
        assert bm.notes is None
