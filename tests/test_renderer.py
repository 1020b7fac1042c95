"""Tests for the parse tree renderer."""

import pytest

from mdpreview.core.events import ByteRange
from mdpreview.core.renderer import ParseTreeRenderer
from mdpreview.core.search import InvalidQueryError, SearchMatcher

from tests.helpers import tree


@pytest.fixture
def renderer() -> ParseTreeRenderer:
    return ParseTreeRenderer()


class TestRender:
    """Tests for ParseTreeRenderer.render()."""

    def test__no_query__renders_plain_tree(self, renderer: ParseTreeRenderer) -> None:
        """Render markdown without highlighting."""
        result = renderer.render("# Title\n\nHello world\n")

        assert tree(result.message) == [
            {"t": "h", "level": 1, "c": ["Title"]},
            {"t": "p", "c": ["Hello world"]},
        ]
        assert result.text.text == "TitleHello world"
        assert result.matches == []
        assert result.current is None

    def test__query__highlights_matches(self, renderer: ParseTreeRenderer) -> None:
        """Wrap matched text in match nodes."""
        result = renderer.render("Hello world\n", query="world")

        assert tree(result.message) == [
            {"t": "p", "c": ["Hello ", {"t": "match", "c": ["world"]}]},
        ]
        assert result.matches == [ByteRange(6, 11)]

    def test__current__highlights_focused_match(self, renderer: ParseTreeRenderer) -> None:
        """Mark the focused match as match-current."""
        result = renderer.render("Hello world\n", query="o", current=1)

        assert tree(result.message) == [
            {
                "t": "p",
                "c": [
                    "Hell",
                    {"t": "match", "c": ["o"]},
                    " w",
                    {"t": "match-current", "c": ["o"]},
                    "rld",
                ],
            },
        ]
        assert result.current == 1

    def test__current_out_of_range__is_dropped(self, renderer: ParseTreeRenderer) -> None:
        """Ignore a focused match index past the last match."""
        result = renderer.render("Hello world\n", query="world", current=3)

        assert result.current is None
        assert "match-current" not in result.message

    def test__query_without_matches__renders_plain_tree(self, renderer: ParseTreeRenderer) -> None:
        """Render the same message as without a query."""
        result = renderer.render("Hello world\n", query="absent")

        assert result.message == renderer.render("Hello world\n").message
        assert result.matches == []

    def test__modified_and_query__are_combined(self, renderer: ParseTreeRenderer) -> None:
        """Place the modified marker and highlight matches in one tree."""
        result = renderer.render("Hello world\n", modified=6, query="world")

        assert tree(result.message) == [
            {"t": "p", "c": ["Hello ", {"t": "modified"}, {"t": "match", "c": ["world"]}]},
        ]

    def test__match_across_inline_tags__is_split(self, renderer: ParseTreeRenderer) -> None:
        """Highlight each text token covered by a match."""
        result = renderer.render("Hello *world*\n", query="o w")

        assert tree(result.message) == [
            {
                "t": "p",
                "c": [
                    "Hell",
                    {"t": "match", "c": ["o "]},
                    {"t": "em", "c": [{"t": "match", "c": ["w"]}, "orld"]},
                ],
            },
        ]

    def test__query__matches_decoded_entities(self, renderer: ParseTreeRenderer) -> None:
        """Search the decoded text rather than the character references."""
        result = renderer.render("a &amp; b\n", query="&")

        assert result.text.text == "a & b"
        assert result.matches == [ByteRange(2, 3)]
        assert tree(result.message) == [
            {"t": "p", "c": ["a ", {"t": "match", "c": ["&"]}, " b"]},
        ]
        assert renderer.render("a &amp; b\n", query="amp").matches == []

    def test__matcher__controls_case(self) -> None:
        """Use the configured matcher for queries."""
        renderer = ParseTreeRenderer(SearchMatcher.CASE_SENSITIVE)

        assert renderer.matcher is SearchMatcher.CASE_SENSITIVE
        assert renderer.render("Hello\n", query="hello").matches == []

    def test__invalid_regex__raises(self) -> None:
        """Propagate invalid regex queries."""
        renderer = ParseTreeRenderer(SearchMatcher.CASE_SENSITIVE_REGEX)

        with pytest.raises(InvalidQueryError):
            renderer.render("text\n", query="[")
