"""Tests for parse result accumulators."""

import pytest

from mdpreview.core.events import ByteRange
from mdpreview.core.result import PlainTextIndex, TextSegment


@pytest.fixture
def index() -> PlainTextIndex:
    """Index of two segments with a gap between them in the source."""
    index = PlainTextIndex()
    index.on_text("日本", ByteRange(0, 6))
    index.on_text("abc", ByteRange(10, 13))
    return index


class TestPlainTextIndex:
    """Tests for PlainTextIndex."""

    def test__on_text__concatenates_segments(self, index: PlainTextIndex) -> None:
        """Join text tokens in the order they were emitted."""
        assert index.text == "日本abc"
        assert index.segments == [
            TextSegment("日本", ByteRange(0, 6)),
            TextSegment("abc", ByteRange(10, 13)),
        ]

    def test__empty_text__is_ignored(self) -> None:
        """Skip empty text tokens."""
        index = PlainTextIndex()
        index.on_text("", ByteRange(3, 3))

        assert index.segments == []
        assert index.text == ""

    def test__span_in_multibyte_segment__maps_to_utf8_bytes(self, index: PlainTextIndex) -> None:
        """Map single characters to their UTF-8 byte ranges."""
        assert index.span_to_range(0, 1) == ByteRange(0, 3)
        assert index.span_to_range(1, 2) == ByteRange(3, 6)

    def test__span_across_segments__covers_both(self, index: PlainTextIndex) -> None:
        """Map a span crossing segments to a range spanning the gap."""
        assert index.span_to_range(1, 3) == ByteRange(3, 11)

    def test__span_in_second_segment__uses_its_offset(self, index: PlainTextIndex) -> None:
        """Map a span to bytes relative to its own segment."""
        assert index.span_to_range(2, 5) == ByteRange(10, 13)
        assert index.span_to_range(3, 4) == ByteRange(11, 12)

    @pytest.mark.parametrize(("start", "end"), [(0, 0), (2, 1), (-1, 1), (4, 6)])
    def test__invalid_span__raises(self, index: PlainTextIndex, start: int, end: int) -> None:
        """Reject empty spans and spans outside the text."""
        with pytest.raises(IndexError, match="outside plain text"):
            index.span_to_range(start, end)
