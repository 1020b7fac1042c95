"""Text tokenizer capability used to split text into highlight classes."""

from enum import Enum
from typing import Protocol

from mdpreview.core.events import ByteRange


class TokenKind(Enum):
    """Highlight class of a text token."""

    NORMAL = "normal"
    MATCH_OTHER = "match"
    MATCH_CURRENT = "match-current"


class TextTokenizer(Protocol):
    """Splits text into highlight-classified prefixes.

    Each call returns the kind of the leading part of ``text`` together with
    that leading part. The serializer calls it repeatedly on the remainder
    until the text is consumed, so a non-empty input must always yield a
    non-empty prefix.
    """

    def tokenize(self, text: str, byte_range: ByteRange) -> tuple[TokenKind, str]: ...


class NullTokenizer:
    """Tokenizer classifying all text as normal."""

    def tokenize(self, text: str, byte_range: ByteRange) -> tuple[TokenKind, str]:
        return TokenKind.NORMAL, text


def byte_len(text: str) -> int:
    """Length of text in UTF-8 bytes."""
    if text.isascii():
        return len(text)
    return len(text.encode("utf-8"))


def split_at_byte(text: str, index: int) -> tuple[str, str]:
    """Split text at a UTF-8 byte index.

    An index inside a multi-byte character splits before that character.

    Args:
        text: Text to split
        index: Byte offset into the UTF-8 encoding of text

    Returns:
        Tuple of (head, tail)
    """
    if text.isascii():
        return text[:index], text[index:]
    head = text.encode("utf-8")[:index].decode("utf-8", errors="ignore")
    return head, text[len(head) :]
