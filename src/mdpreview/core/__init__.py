"""Markdown parse tree rendering core."""

from mdpreview.core.renderer import ParseTreeRenderer, RenderResult
from mdpreview.core.serializer import (
    ParseTreeSerializer,
    SinkWriteError,
    TokenizerError,
    render_parse_tree,
    write_parse_tree,
)
from mdpreview.core.source import MarkdownEventSource

__all__ = [
    "MarkdownEventSource",
    "ParseTreeRenderer",
    "ParseTreeSerializer",
    "RenderResult",
    "SinkWriteError",
    "TokenizerError",
    "render_parse_tree",
    "write_parse_tree",
]
