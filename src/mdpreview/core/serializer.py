"""Parse tree serialization.

Walks a markdown event stream and writes the parse tree message consumed by
the preview frontend directly to a sink, without building the tree in memory.

Message format:
    {"kind":"parse_tree","tree":[<node>, ...]}

where a node is either an escaped text string or a tagged object
``{"t":"<name>", <attributes>, "c":[<node>, ...]}``. Leaf markers (``hr``,
``br``, ``modified``, ``fn-ref``, ``checkbox``, ``html``) have no ``"c"``.
"""

import io
import logging
from collections.abc import Iterable
from enum import Enum
from typing import Protocol, TypeVar, assert_never

from mdpreview.core.escape import escape_string
from mdpreview.core.events import (
    Alignment,
    BlockQuote,
    ByteRange,
    Code,
    CodeBlock,
    Emphasis,
    End,
    Event,
    FootnoteDefinition,
    FootnoteReference,
    HardBreak,
    Heading,
    Html,
    Image,
    Item,
    Link,
    LinkKind,
    List,
    Paragraph,
    Rule,
    SoftBreak,
    Start,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableHead,
    TableRow,
    Tag,
    TaskListMarker,
    Text,
)
from mdpreview.core.result import NullResult, ParseResult
from mdpreview.core.tokenizer import (
    NullTokenizer,
    TextTokenizer,
    TokenKind,
    byte_len,
    split_at_byte,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ParseResult)

_ALIGNMENTS = {
    Alignment.NONE: "null",
    Alignment.LEFT: '"left"',
    Alignment.CENTER: '"center"',
    Alignment.RIGHT: '"right"',
}


class Sink(Protocol):
    """Append-only text destination."""

    def write(self, s: str, /) -> object: ...


class SinkWriteError(Exception):
    """Writing to the output sink failed. The partial output is invalid."""


class TokenizerError(Exception):
    """A text tokenizer did not consume any text."""


class TableState(Enum):
    HEAD = "head"
    ROW = "row"


class ParseTreeSerializer:
    """Serializes one event stream into a parse tree message.

    All state (table state, footnote ids, pending modified offset) belongs to
    a single pass. Create a new instance for each document.
    """

    def __init__(
        self,
        sink: Sink,
        *,
        modified: int | None = None,
        tokenizer: TextTokenizer | None = None,
        result: ParseResult | None = None,
    ) -> None:
        """Initialize serializer.

        Args:
            sink: Destination receiving the message text
            modified: Byte offset where modified content starts, if known
            tokenizer: Text tokenizer for match highlighting (default: none)
            result: Accumulator notified of every emitted text token
        """
        self._sink = sink
        self._modified = modified
        self._tokenizer: TextTokenizer = tokenizer or NullTokenizer()
        self._result: ParseResult = result if result is not None else NullResult()
        self._table = TableState.HEAD
        self._ids: dict[str, int] = {}
        self._is_start = True

    def serialize(self, events: Iterable[tuple[Event, ByteRange]]) -> None:
        """Write the complete message for an event stream.

        Raises:
            SinkWriteError: If the sink fails to accept output
            TokenizerError: If the tokenizer stops making progress
        """
        self._write('{"kind":"parse_tree","tree":[')
        for event, byte_range in events:
            self._event(event, byte_range)

        # No text reached the modified offset, so only markup after the last
        # text changed. Put the marker at the end as the closest position.
        if self._modified is not None:
            logger.debug(f"Modified offset {self._modified} not reached, marking end of tree")
            self._modified = None
            self._marker()
        self._write("]}")

    def _write(self, s: str) -> None:
        try:
            self._sink.write(s)
        except Exception as e:
            raise SinkWriteError(f"Could not write parse tree: {e}") from e

    def _id(self, name: str) -> int:
        return self._ids.setdefault(name, len(self._ids) + 1)

    def _comma(self) -> None:
        if self._is_start:
            self._is_start = False
        else:
            self._write(",")

    def _tag(self, name: str) -> None:
        self._comma()
        self._write(f'{{"t":"{name}"')

    def _attr(self, name: str, value: str) -> None:
        self._write(f',"{name}":{escape_string(value)}')

    def _children_begin(self) -> None:
        self._is_start = True
        self._write(',"c":[')

    def _children_end(self) -> None:
        self._is_start = False
        self._write("]}")

    def _marker(self) -> None:
        self._tag("modified")
        self._write("}")

    def _string(self, text: str) -> None:
        self._comma()
        self._write(escape_string(text))

    def _text_tokens(self, text: str, byte_range: ByteRange) -> None:
        self._result.on_text(text, byte_range)
        start, end = byte_range
        while text:
            kind, token = self._tokenizer.tokenize(text, ByteRange(start, end))
            if not token:
                raise TokenizerError(f"Tokenizer returned an empty token for {text!r} at {start}")

            if kind is TokenKind.NORMAL:
                self._string(token)
            elif kind is TokenKind.MATCH_OTHER or kind is TokenKind.MATCH_CURRENT:
                self._tag(kind.value)
                self._children_begin()
                self._string(token)
                self._children_end()
            else:
                assert_never(kind)

            text = text[len(token) :]
            start += byte_len(token)

    def _text(self, text: str, byte_range: ByteRange) -> None:
        offset = self._modified
        start, end = byte_range
        if offset is None or end < offset:
            self._text_tokens(text, byte_range)
            return

        self._modified = None
        logger.debug(f"Handling modified offset {offset} in text at {start}..{end}")

        if offset <= start:
            self._marker()
            self._text_tokens(text, byte_range)
        elif offset == end:
            self._text_tokens(text, byte_range)
            self._marker()
        else:
            head, tail = split_at_byte(text, offset - start)
            split = start + byte_len(head)
            if head:
                self._text_tokens(head, ByteRange(start, split))
            self._marker()
            if tail:
                self._text_tokens(tail, ByteRange(split, end))

    def _event(self, event: Event, byte_range: ByteRange) -> None:
        if isinstance(event, Start):
            self._start_tag(event.tag)
        elif isinstance(event, End):
            self._end_tag(event.tag)
        elif isinstance(event, Text):
            self._text(event.text, byte_range)
        elif isinstance(event, Code):
            # The range includes the backtick fences and padding around the code
            pad = max((byte_range.length - byte_len(event.text)) // 2, 0)
            inner = ByteRange(byte_range.start + pad, max(byte_range.end - pad, byte_range.start + pad))
            self._tag("code")
            self._children_begin()
            self._text(event.text, inner)
            self._children_end()
        elif isinstance(event, Html):
            self._tag("html")
            self._attr("raw", event.html)
            self._write("}")
        elif isinstance(event, SoftBreak):
            self._text("\n", byte_range)
        elif isinstance(event, HardBreak):
            self._tag("br")
            self._write("}")
        elif isinstance(event, Rule):
            self._tag("hr")
            self._write("}")
        elif isinstance(event, FootnoteReference):
            self._tag("fn-ref")
            self._write(f',"id":{self._id(event.name)}}}')
        elif isinstance(event, TaskListMarker):
            self._tag("checkbox")
            self._write(f',"checked":{"true" if event.checked else "false"}}}')
        else:
            assert_never(event)

    def _start_tag(self, tag: Tag) -> None:
        if isinstance(tag, Paragraph):
            self._tag("p")
        elif isinstance(tag, Heading):
            self._tag("h")
            self._write(f',"level":{tag.level}')
            if tag.id is not None:
                self._attr("id", tag.id)
        elif isinstance(tag, Table):
            self._tag("table")
            aligns = ",".join(_ALIGNMENTS[a] for a in tag.alignments)
            self._write(f',"align":[{aligns}]')
        elif isinstance(tag, TableHead):
            self._table = TableState.HEAD
            self._tag("thead")
            self._children_begin()
            self._tag("tr")
        elif isinstance(tag, TableRow):
            self._table = TableState.ROW
            self._tag("tr")
        elif isinstance(tag, TableCell):
            self._tag("th" if self._table is TableState.HEAD else "td")
        elif isinstance(tag, BlockQuote):
            self._tag("blockquote")
        elif isinstance(tag, CodeBlock):
            self._tag("pre")
            self._children_begin()
            self._tag("code")
            if tag.info is not None:
                lang = next(iter(tag.info.split()), "")
                if lang:
                    self._attr("lang", lang)
        elif isinstance(tag, List):
            if tag.start is None:
                self._tag("ul")
            else:
                self._tag("ol")
                if tag.start != 1:
                    self._write(f',"start":{tag.start}')
        elif isinstance(tag, Item):
            self._tag("li")
        elif isinstance(tag, Emphasis):
            self._tag("em")
        elif isinstance(tag, Strong):
            self._tag("strong")
        elif isinstance(tag, Strikethrough):
            self._tag("del")
        elif isinstance(tag, Link):
            self._tag("a")
            if tag.kind is LinkKind.EMAIL:
                self._attr("href", f"mailto:{tag.destination}")
            else:
                self._attr("href", tag.destination)
            if tag.title:
                self._attr("title", tag.title)
        elif isinstance(tag, Image):
            self._tag("img")
            if tag.title:
                self._attr("title", tag.title)
            self._attr("src", tag.destination)
        elif isinstance(tag, FootnoteDefinition):
            self._tag("fn-def")
            if tag.name:
                self._attr("name", tag.name)
            self._write(f',"id":{self._id(tag.name)}')
        else:
            assert_never(tag)

        # Tag elements always have children, maybe empty
        self._children_begin()

    def _end_tag(self, tag: Tag) -> None:
        if isinstance(tag, (Table, CodeBlock)):
            self._children_end()
            self._children_end()
        elif isinstance(tag, TableHead):
            self._children_end()
            self._children_end()
            self._tag("tbody")
            self._children_begin()
        elif isinstance(
            tag,
            (
                Paragraph,
                Heading,
                TableRow,
                TableCell,
                BlockQuote,
                List,
                Item,
                Emphasis,
                Strong,
                Strikethrough,
                Link,
                Image,
                FootnoteDefinition,
            ),
        ):
            self._children_end()
        else:
            assert_never(tag)


def write_parse_tree(
    events: Iterable[tuple[Event, ByteRange]],
    sink: Sink,
    *,
    modified: int | None = None,
    tokenizer: TextTokenizer | None = None,
    result: R | None = None,
) -> R | None:
    """Stream the parse tree message for an event stream to a sink.

    On error the sink holds a truncated message which must be discarded.

    Args:
        events: Markdown events paired with their source byte ranges
        sink: Destination receiving the message text
        modified: Byte offset where modified content starts, if known
        tokenizer: Text tokenizer for match highlighting
        result: Accumulator notified of every emitted text token

    Returns:
        The accumulator passed as ``result``

    Raises:
        SinkWriteError: If the sink fails to accept output
        TokenizerError: If the tokenizer stops making progress
    """
    serializer = ParseTreeSerializer(sink, modified=modified, tokenizer=tokenizer, result=result)
    serializer.serialize(events)
    return result


def render_parse_tree(
    events: Iterable[tuple[Event, ByteRange]],
    *,
    modified: int | None = None,
    tokenizer: TextTokenizer | None = None,
    result: R | None = None,
) -> tuple[str, R | None]:
    """Render the parse tree message for an event stream into a string.

    Args:
        events: Markdown events paired with their source byte ranges
        modified: Byte offset where modified content starts, if known
        tokenizer: Text tokenizer for match highlighting
        result: Accumulator notified of every emitted text token

    Returns:
        Tuple of (message, accumulator)
    """
    buf = io.StringIO()
    write_parse_tree(events, buf, modified=modified, tokenizer=tokenizer, result=result)
    return buf.getvalue(), result
