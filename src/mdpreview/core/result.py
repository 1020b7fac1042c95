"""Parse result accumulators observing text emitted by the serializer."""

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Protocol

from mdpreview.core.events import ByteRange
from mdpreview.core.tokenizer import byte_len


class ParseResult(Protocol):
    """Side-channel observer called once per emitted text token."""

    def on_text(self, text: str, byte_range: ByteRange) -> None: ...


class NullResult:
    """Accumulator that ignores all text."""

    def on_text(self, text: str, byte_range: ByteRange) -> None:
        pass


@dataclass
class TextSegment:
    """A piece of document text and where it came from."""

    text: str
    range: ByteRange


@dataclass
class PlainTextIndex:
    """Flat plain-text view of a document.

    Concatenates every emitted text token in document order and remembers
    where each one came from, so that spans found in the plain text can be
    mapped back to source byte ranges.
    """

    segments: list[TextSegment] = field(default_factory=list)
    _starts: list[int] = field(default_factory=list, repr=False)
    _length: int = field(default=0, repr=False)

    def on_text(self, text: str, byte_range: ByteRange) -> None:
        if not text:
            return
        self._starts.append(self._length)
        self.segments.append(TextSegment(text, byte_range))
        self._length += len(text)

    @property
    def text(self) -> str:
        """Concatenated plain text."""
        return "".join(segment.text for segment in self.segments)

    def span_to_range(self, start: int, end: int) -> ByteRange:
        """Map a character span of ``text`` to a source byte range.

        Args:
            start: First character index (inclusive)
            end: Last character index (exclusive), greater than start

        Returns:
            Byte range in the source covering the span

        Raises:
            IndexError: If the span is empty or outside the text
        """
        if not 0 <= start < end <= self._length:
            raise IndexError(f"Span {start}..{end} is outside plain text of length {self._length}")
        return ByteRange(self._offset(start), self._offset(end - 1, after=True))

    def _offset(self, index: int, *, after: bool = False) -> int:
        i = bisect_right(self._starts, index) - 1
        segment = self.segments[i]
        local = index - self._starts[i]
        if after:
            local += 1
        return segment.range.start + byte_len(segment.text[:local])
