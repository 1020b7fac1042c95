"""Markdown parse events consumed by the parse tree serializer.

Events form a closed vocabulary. Every ``Start`` is matched by exactly one
``End`` carrying the same tag, with strictly nested scoping. Each event is
paired with the byte range it covers in the UTF-8 encoded source.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class ByteRange(NamedTuple):
    """Half-open ``[start, end)`` byte offsets into the UTF-8 source."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return max(self.end - self.start, 0)


class Alignment(Enum):
    """Table column alignment."""

    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class LinkKind(Enum):
    """How a link was written in the source."""

    INLINE = "inline"
    AUTOLINK = "autolink"
    EMAIL = "email"


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class Heading:
    level: int
    id: str | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be between 1 and 6, got {self.level}")


@dataclass(frozen=True)
class Table:
    alignments: tuple[Alignment, ...] = ()


@dataclass(frozen=True)
class TableHead:
    pass


@dataclass(frozen=True)
class TableRow:
    pass


@dataclass(frozen=True)
class TableCell:
    pass


@dataclass(frozen=True)
class BlockQuote:
    pass


@dataclass(frozen=True)
class CodeBlock:
    """Code block. ``info`` is the fence info string, None for indented blocks."""

    info: str | None = None


@dataclass(frozen=True)
class List:
    """List. ``start`` is None for unordered lists."""

    start: int | None = None


@dataclass(frozen=True)
class Item:
    pass


@dataclass(frozen=True)
class Emphasis:
    pass


@dataclass(frozen=True)
class Strong:
    pass


@dataclass(frozen=True)
class Strikethrough:
    pass


@dataclass(frozen=True)
class Link:
    kind: LinkKind
    destination: str
    title: str = ""


@dataclass(frozen=True)
class Image:
    destination: str
    title: str = ""


@dataclass(frozen=True)
class FootnoteDefinition:
    name: str


Tag = (
    Paragraph
    | Heading
    | Table
    | TableHead
    | TableRow
    | TableCell
    | BlockQuote
    | CodeBlock
    | List
    | Item
    | Emphasis
    | Strong
    | Strikethrough
    | Link
    | Image
    | FootnoteDefinition
)


@dataclass(frozen=True)
class Start:
    tag: Tag


@dataclass(frozen=True)
class End:
    tag: Tag


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    """Inline code. The paired range includes the backtick fences."""

    text: str


@dataclass(frozen=True)
class Html:
    html: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class FootnoteReference:
    name: str


@dataclass(frozen=True)
class TaskListMarker:
    checked: bool


Event = (
    Start
    | End
    | Text
    | Code
    | Html
    | SoftBreak
    | HardBreak
    | Rule
    | FootnoteReference
    | TaskListMarker
)
