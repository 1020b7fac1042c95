"""Markdown event source built on mistune.

Converts the mistune AST into the flat start/end event stream expected by the
parse tree serializer. The AST carries no source positions, so byte ranges are
recovered by locating each text token in the UTF-8 source with a cursor that
only moves forward. Structural events get an empty range at the cursor.
"""

import html
import logging
import re
from collections.abc import Iterator, MutableMapping
from typing import Any

import mistune

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

logger = logging.getLogger(__name__)

# Fixed extension set: no other dialect extensions are enabled
PLUGINS = ["strikethrough", "footnotes", "table", "task_lists"]

_ALIGNMENTS = {
    None: Alignment.NONE,
    "left": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
}

# Tokens wrapping children without producing an element of their own
_TRANSPARENT = {"block_text", "table_body"}

_SIMPLE_TAGS: dict[str, Tag] = {
    "paragraph": Paragraph(),
    "block_quote": BlockQuote(),
    "emphasis": Emphasis(),
    "strong": Strong(),
    "strikethrough": Strikethrough(),
    "table_row": TableRow(),
    "table_cell": TableCell(),
}

_FOOTNOTE_REF = re.compile(rb"\[\^([^\]\n]+)\]")
_FOOTNOTE_DEF = re.compile(rb"^ {0,3}\[\^([^\]\n]+)\]:", re.MULTILINE)

# Tail of an inline link or image after its text: ](destination "title")
_DESTINATION = re.compile(rb"[*_~`]*\]\((?:[^()\n]|\([^()\n]*\))*\)")

_PARAGRAPH_SPLIT = re.compile(r"\n{2,}")

Token = dict[str, Any]


def _same_key(label: str, key: str) -> bool:
    return " ".join(label.split()).casefold() == " ".join(key.split()).casefold()


class _Locator:
    """Finds byte ranges of text in the source, moving forward only."""

    def __init__(self, source: str) -> None:
        self._source = source.encode("utf-8")
        self._cursor = 0

    def here(self) -> ByteRange:
        return ByteRange(self._cursor, self._cursor)

    def text(self, text: str) -> ByteRange:
        needle = text.encode("utf-8")
        pos = self._source.find(needle, self._cursor)
        if pos < 0:
            logger.debug(f"Could not locate text {text!r} after offset {self._cursor}")
            start = self._cursor
            self._cursor = min(start + len(needle), len(self._source))
            return ByteRange(start, self._cursor)
        self._cursor = pos + len(needle)
        return ByteRange(pos, self._cursor)

    def code(self, text: str) -> ByteRange:
        """Locate inline code including its backtick fences."""
        open_at = self._source.find(b"`", self._cursor)
        if open_at < 0:
            return self.text(text)
        fence_len = len(self._source[open_at:]) - len(self._source[open_at:].lstrip(b"`"))
        fence = b"`" * fence_len
        close_at = self._source.find(fence, open_at + fence_len)
        if close_at < 0:
            return self.text(text)
        self._cursor = close_at + fence_len
        return ByteRange(open_at, self._cursor)

    def destination(self) -> None:
        """Skip the destination of an inline link or image at the cursor."""
        m = _DESTINATION.match(self._source, self._cursor)
        if m is not None:
            self._cursor = m.end()

    def footnote_ref(self, key: str) -> tuple[str, ByteRange]:
        """Locate a footnote reference and return its label as written."""
        for m in _FOOTNOTE_REF.finditer(self._source, self._cursor):
            label = m.group(1).decode("utf-8")
            if _same_key(label, key):
                self._cursor = m.end()
                return label, ByteRange(m.start(), m.end())
        logger.debug(f"Could not locate footnote reference {key!r} after offset {self._cursor}")
        return key, self.here()

    def footnote_definition(self, key: str) -> str:
        """Move to a footnote definition label and return it as written."""
        for m in _FOOTNOTE_DEF.finditer(self._source):
            label = m.group(1).decode("utf-8")
            if _same_key(label, key):
                self._cursor = m.end()
                return label
        logger.debug(f"Could not locate footnote definition {key!r}")
        return key


class MarkdownEventSource:
    """Iterable of (event, byte range) pairs for a markdown document.

    Footnote definitions follow the document body in source order, including
    definitions that are never referenced.
    """

    def __init__(self, source: str) -> None:
        """Initialize event source.

        Args:
            source: Markdown source text
        """
        self._source = source
        self._markdown = mistune.create_markdown(renderer="ast", plugins=PLUGINS)

    def __iter__(self) -> Iterator[tuple[Event, ByteRange]]:
        tokens, state = self._markdown.parse(self._source)
        locator = _Locator(self._source)
        yield from self._tokens(tokens, locator)

        definitions = state.env.get("ref_footnotes") or {}
        for key, text in definitions.items():
            yield from self._footnote(key, text, state.env, locator)

    def _tokens(self, tokens: list[Token], locator: _Locator) -> Iterator[tuple[Event, ByteRange]]:
        for token in tokens:
            yield from self._token(token, locator)

    def _token(self, token: Token, locator: _Locator) -> Iterator[tuple[Event, ByteRange]]:
        kind = token["type"]
        attrs = token.get("attrs", {})
        children = token.get("children", [])

        if kind == "text":
            yield Text(html.unescape(token["raw"])), locator.text(token["raw"])
        elif kind == "codespan":
            yield Code(token["raw"]), locator.code(token["raw"])
        elif kind == "softbreak":
            yield SoftBreak(), locator.text("\n")
        elif kind == "linebreak":
            yield HardBreak(), locator.here()
        elif kind in ("inline_html", "block_html"):
            yield Html(token["raw"]), locator.text(token["raw"])
        elif kind == "thematic_break":
            yield Rule(), locator.here()
        elif kind == "footnote_ref":
            label, byte_range = locator.footnote_ref(token["raw"])
            yield FootnoteReference(label), byte_range
        elif kind in ("blank_line", "footnotes"):
            # Footnote definitions are emitted separately, see _footnote()
            return
        elif kind in _TRANSPARENT:
            yield from self._tokens(children, locator)
        elif kind == "block_code":
            tag = CodeBlock(attrs.get("info", "") if token.get("style") == "fenced" else None)
            yield Start(tag), locator.here()
            yield Text(token["raw"]), locator.text(token["raw"])
            yield End(tag), locator.here()
        elif kind in ("list_item", "task_list_item"):
            yield Start(Item()), locator.here()
            if "checked" in attrs:
                yield TaskListMarker(bool(attrs["checked"])), locator.here()
            yield from self._tokens(children, locator)
            yield End(Item()), locator.here()
        elif kind == "table":
            yield from self._table(token, locator)
        elif kind in ("link", "image"):
            tag = self._container_tag(token)
            yield Start(tag), locator.here()
            yield from self._tokens(children, locator)
            locator.destination()
            yield End(tag), locator.here()
        else:
            yield from self._wrap(self._container_tag(token), children, locator)

    def _wrap(
        self, tag: Tag, children: list[Token], locator: _Locator
    ) -> Iterator[tuple[Event, ByteRange]]:
        yield Start(tag), locator.here()
        yield from self._tokens(children, locator)
        yield End(tag), locator.here()

    def _footnote(
        self, key: str, text: str, env: MutableMapping[str, Any], locator: _Locator
    ) -> Iterator[tuple[Event, ByteRange]]:
        tag = FootnoteDefinition(locator.footnote_definition(key))
        yield Start(tag), locator.here()
        for paragraph in _footnote_paragraphs(text):
            yield from self._wrap(Paragraph(), self._markdown.inline(paragraph, env), locator)
        yield End(tag), locator.here()

    def _table(self, token: Token, locator: _Locator) -> Iterator[tuple[Event, ByteRange]]:
        sections = token.get("children", [])
        head = next((s for s in sections if s["type"] == "table_head"), {"children": []})
        alignments = tuple(
            _ALIGNMENTS.get(cell.get("attrs", {}).get("align"), Alignment.NONE)
            for cell in head["children"]
        )
        table = Table(alignments)
        yield Start(table), locator.here()
        for section in sections:
            if section["type"] == "table_head":
                yield from self._wrap(TableHead(), section["children"], locator)
            else:
                yield from self._token(section, locator)
        yield End(table), locator.here()

    def _container_tag(self, token: Token) -> Tag:
        kind = token["type"]
        attrs = token.get("attrs", {})
        if kind in _SIMPLE_TAGS:
            return _SIMPLE_TAGS[kind]
        if kind == "heading":
            return Heading(attrs["level"], attrs.get("id"))
        if kind == "list":
            return List(attrs.get("start", 1) if attrs.get("ordered") else None)
        if kind == "link":
            return _link(token)
        if kind == "image":
            return Image(attrs["url"], html.unescape(attrs.get("title") or ""))
        raise TypeError(f"Unsupported markdown token: {kind}")


def _link(token: Token) -> Link:
    url = token["attrs"]["url"]
    title = html.unescape(token["attrs"].get("title") or "")
    children = token.get("children", [])
    label = None
    if len(children) == 1 and children[0]["type"] == "text":
        label = html.unescape(children[0]["raw"])
    if label is not None and url == f"mailto:{label}":
        return Link(LinkKind.EMAIL, label, title)
    if label is not None and url == label:
        return Link(LinkKind.AUTOLINK, url, title)
    return Link(LinkKind.INLINE, url, title)


def _footnote_paragraphs(text: str) -> list[str]:
    """Split a footnote definition body into paragraph texts.

    Continuation lines are dedented by the indentation of the first
    non-empty one, the way mistune renders referenced definitions.
    """
    indented = next((line for line in text.splitlines()[1:] if line), None)
    if indented:
        spaces = len(indented) - len(indented.lstrip())
        text = re.sub(rf"^ {{{spaces},}}", "", text, flags=re.MULTILINE)
    return [p for p in _PARAGRAPH_SPLIT.split(text.strip()) if p]
