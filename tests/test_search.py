"""Tests for in-document search."""

import pytest

from mdpreview.core.events import ByteRange
from mdpreview.core.result import PlainTextIndex
from mdpreview.core.search import (
    InvalidQueryError,
    MatchTokenizer,
    SearchMatcher,
    compile_query,
    find_matches,
)
from mdpreview.core.tokenizer import TokenKind


def make_index(*segments: tuple[str, ByteRange]) -> PlainTextIndex:
    index = PlainTextIndex()
    for text, byte_range in segments:
        index.on_text(text, byte_range)
    return index


class TestCompileQuery:
    """Tests for compile_query()."""

    def test__smart_case_lowercase__ignores_case(self) -> None:
        """Match any case when the query is all lowercase."""
        pattern = compile_query("hello", SearchMatcher.SMART_CASE)

        assert pattern.search("Say HELLO")

    def test__smart_case_mixed_case__respects_case(self) -> None:
        """Match exact case when the query has an uppercase letter."""
        pattern = compile_query("Hello", SearchMatcher.SMART_CASE)

        assert pattern.search("Hello") is not None
        assert pattern.search("hello") is None

    def test__case_sensitive__respects_case(self) -> None:
        """Match exact case for lowercase queries too."""
        pattern = compile_query("hello", SearchMatcher.CASE_SENSITIVE)

        assert pattern.search("HELLO") is None
        assert pattern.search("hello") is not None

    def test__case_insensitive__ignores_case(self) -> None:
        """Match any case for mixed case queries too."""
        pattern = compile_query("Hello", SearchMatcher.CASE_INSENSITIVE)

        assert pattern.search("hELLO") is not None

    def test__plain_matchers__treat_query_literally(self) -> None:
        """Escape regex metacharacters outside regex mode."""
        pattern = compile_query("a.b", SearchMatcher.CASE_SENSITIVE)

        assert pattern.search("axb") is None
        assert pattern.search("a.b") is not None

    def test__regex__uses_pattern(self) -> None:
        """Interpret the query as a regular expression."""
        pattern = compile_query(r"a\d+", SearchMatcher.CASE_SENSITIVE_REGEX)

        assert pattern.search("xa42") is not None
        assert pattern.search("A42") is None

    def test__invalid_regex__raises(self) -> None:
        """Raise InvalidQueryError for patterns that do not compile."""
        with pytest.raises(InvalidQueryError, match="Invalid search pattern"):
            compile_query("(", SearchMatcher.CASE_SENSITIVE_REGEX)


class TestFindMatches:
    """Tests for find_matches()."""

    def test__match__maps_to_source_range(self) -> None:
        """Return source byte ranges of matches."""
        index = make_index(("Hello world", ByteRange(2, 13)))

        assert find_matches(index, "world", SearchMatcher.SMART_CASE) == [ByteRange(8, 13)]

    def test__repeated_matches__are_in_order(self) -> None:
        """Return every match in document order."""
        index = make_index(("ab ab", ByteRange(0, 5)), ("AB", ByteRange(9, 11)))

        assert find_matches(index, "ab", SearchMatcher.SMART_CASE) == [
            ByteRange(0, 2),
            ByteRange(3, 5),
            ByteRange(9, 11),
        ]

    def test__match_across_segments__spans_the_gap(self) -> None:
        """Return one range for a match crossing text tokens."""
        index = make_index(("Hello ", ByteRange(0, 6)), ("world", ByteRange(10, 15)))

        assert find_matches(index, "o w", SearchMatcher.SMART_CASE) == [ByteRange(4, 11)]

    def test__empty_query__has_no_matches(self) -> None:
        """Return no matches for an empty query."""
        index = make_index(("text", ByteRange(0, 4)))

        assert find_matches(index, "", SearchMatcher.CASE_SENSITIVE_REGEX) == []

    def test__zero_width_regex_matches__are_skipped(self) -> None:
        """Drop empty regex matches."""
        index = make_index(("bab", ByteRange(0, 3)))

        assert find_matches(index, "a*", SearchMatcher.CASE_SENSITIVE_REGEX) == [ByteRange(1, 2)]


class TestMatchTokenizer:
    """Tests for MatchTokenizer."""

    def test__text_before_match__is_normal_prefix(self) -> None:
        """Split off the text before a match."""
        tokenizer = MatchTokenizer([ByteRange(2, 4)])

        assert tokenizer.tokenize("abcdef", ByteRange(0, 6)) == (TokenKind.NORMAL, "ab")

    def test__text_at_match__is_match_token(self) -> None:
        """Return the matched part of the text."""
        tokenizer = MatchTokenizer([ByteRange(2, 4)])
        tokenizer.tokenize("abcdef", ByteRange(0, 6))

        assert tokenizer.tokenize("cdef", ByteRange(2, 6)) == (TokenKind.MATCH_OTHER, "cd")
        assert tokenizer.tokenize("ef", ByteRange(4, 6)) == (TokenKind.NORMAL, "ef")

    def test__current_match__is_match_current(self) -> None:
        """Distinguish the focused match from the others."""
        tokenizer = MatchTokenizer([ByteRange(0, 1), ByteRange(2, 3)], current=1)

        assert tokenizer.tokenize("abc", ByteRange(0, 3)) == (TokenKind.MATCH_OTHER, "a")
        assert tokenizer.tokenize("bc", ByteRange(1, 3)) == (TokenKind.NORMAL, "b")
        assert tokenizer.tokenize("c", ByteRange(2, 3)) == (TokenKind.MATCH_CURRENT, "c")

    def test__match_crossing_text_end__is_clipped(self) -> None:
        """Clip a match to the end of the current text."""
        tokenizer = MatchTokenizer([ByteRange(4, 11)])

        assert tokenizer.tokenize("o ", ByteRange(4, 6)) == (TokenKind.MATCH_OTHER, "o ")
        assert tokenizer.tokenize("world", ByteRange(10, 15)) == (TokenKind.MATCH_OTHER, "w")

    def test__no_matches__returns_whole_text(self) -> None:
        """Return text unchanged without matches."""
        tokenizer = MatchTokenizer([])

        assert tokenizer.tokenize("text", ByteRange(0, 4)) == (TokenKind.NORMAL, "text")

    def test__match_inside_character__still_makes_progress(self) -> None:
        """Return at least one character when a match starts mid-character."""
        tokenizer = MatchTokenizer([ByteRange(1, 2)])

        assert tokenizer.tokenize("éa", ByteRange(0, 3)) == (TokenKind.NORMAL, "é")
