"""In-document text search.

Finds query matches in the plain text of a rendered document and highlights
them through a text tokenizer on the next serialization pass.
"""

import logging
import re
from collections.abc import Sequence
from enum import Enum

from mdpreview.core.events import ByteRange
from mdpreview.core.result import PlainTextIndex
from mdpreview.core.tokenizer import TokenKind, split_at_byte

logger = logging.getLogger(__name__)


class SearchMatcher(Enum):
    """How a search query is matched against document text."""

    SMART_CASE = "SmartCase"
    CASE_SENSITIVE = "CaseSensitive"
    CASE_INSENSITIVE = "CaseInsensitive"
    CASE_SENSITIVE_REGEX = "CaseSensitiveRegex"


class InvalidQueryError(ValueError):
    """Search query could not be compiled."""


def compile_query(query: str, matcher: SearchMatcher) -> re.Pattern[str]:
    """Compile a search query into a pattern.

    Smart case matching is case-insensitive unless the query contains an
    uppercase character.

    Raises:
        InvalidQueryError: If a regex query is not a valid pattern
    """
    if matcher is SearchMatcher.CASE_SENSITIVE_REGEX:
        try:
            return re.compile(query)
        except re.error as e:
            raise InvalidQueryError(f"Invalid search pattern {query!r}: {e}") from e

    flags = 0
    if matcher is SearchMatcher.CASE_INSENSITIVE:
        flags = re.IGNORECASE
    elif matcher is SearchMatcher.SMART_CASE and query == query.lower():
        flags = re.IGNORECASE
    return re.compile(re.escape(query), flags)


def find_matches(index: PlainTextIndex, query: str, matcher: SearchMatcher) -> list[ByteRange]:
    """Find query matches in a document.

    Args:
        index: Plain text collected while serializing the document
        query: Search query
        matcher: Matching mode

    Returns:
        Source byte ranges of the matches in document order
    """
    if not query:
        return []

    pattern = compile_query(query, matcher)
    matches = [
        index.span_to_range(m.start(), m.end())
        for m in pattern.finditer(index.text)
        if m.end() > m.start()
    ]
    logger.debug(f"Found {len(matches)} matches for {query!r}")
    return matches


class MatchTokenizer:
    """Text tokenizer highlighting precomputed match ranges.

    Text must be tokenized in document order, so use one instance per
    serialization pass.
    """

    def __init__(self, matches: Sequence[ByteRange], current: int | None = None) -> None:
        """Initialize tokenizer.

        Args:
            matches: Match ranges sorted by start offset
            current: Index of the focused match, if any
        """
        self._matches = matches
        self._current = current
        self._next = 0

    def tokenize(self, text: str, byte_range: ByteRange) -> tuple[TokenKind, str]:
        start, end = byte_range
        while self._next < len(self._matches) and self._matches[self._next].end <= start:
            self._next += 1

        if self._next == len(self._matches):
            return TokenKind.NORMAL, text

        match = self._matches[self._next]
        if match.start >= end:
            return TokenKind.NORMAL, text
        if match.start > start:
            return TokenKind.NORMAL, _prefix(text, match.start - start)

        kind = TokenKind.MATCH_CURRENT if self._next == self._current else TokenKind.MATCH_OTHER
        return kind, _prefix(text, min(match.end, end) - start)


def _prefix(text: str, size: int) -> str:
    head, _ = split_at_byte(text, size)
    # Never return an empty token for non-empty text
    return head or text[:1]
