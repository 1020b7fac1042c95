"""Markdown rendering into parse tree messages.

Ties the event source, the serializer and search together. Rendering is a
single serializer pass, plus a second highlighting pass when a search query
has matches.
"""

import logging
from dataclasses import dataclass, field

from mdpreview.core.events import ByteRange
from mdpreview.core.result import PlainTextIndex
from mdpreview.core.search import MatchTokenizer, SearchMatcher, find_matches
from mdpreview.core.serializer import render_parse_tree
from mdpreview.core.source import MarkdownEventSource

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Result of rendering a markdown document."""

    message: str
    text: PlainTextIndex
    matches: list[ByteRange] = field(default_factory=list)
    current: int | None = None


class ParseTreeRenderer:
    """Renders markdown source into parse tree messages.

    Stateless between calls; every render builds fresh per-pass state.
    """

    def __init__(self, matcher: SearchMatcher = SearchMatcher.SMART_CASE) -> None:
        """Initialize renderer.

        Args:
            matcher: Matching mode for search queries
        """
        self._matcher = matcher

    @property
    def matcher(self) -> SearchMatcher:
        """Matching mode for search queries."""
        return self._matcher

    def render(
        self,
        source: str,
        *,
        modified: int | None = None,
        query: str | None = None,
        current: int | None = None,
    ) -> RenderResult:
        """Render a markdown document.

        Args:
            source: Markdown source text
            modified: Byte offset where modified content starts
            query: Search query to highlight
            current: Index of the focused match

        Returns:
            RenderResult with the message, plain text and matches

        Raises:
            InvalidQueryError: If the query is not a valid pattern
        """
        events = list(MarkdownEventSource(source))
        logger.debug(f"Rendering {len(source)} characters as {len(events)} events")

        index = PlainTextIndex()
        message, _ = render_parse_tree(events, modified=modified, result=index)
        if not query:
            return RenderResult(message=message, text=index)

        matches = find_matches(index, query, self._matcher)
        if not matches:
            return RenderResult(message=message, text=index)

        if current is not None and not 0 <= current < len(matches):
            logger.debug(f"Ignoring current match {current} out of {len(matches)} matches")
            current = None

        message, _ = render_parse_tree(
            events,
            modified=modified,
            tokenizer=MatchTokenizer(matches, current),
        )
        return RenderResult(message=message, text=index, matches=matches, current=current)
