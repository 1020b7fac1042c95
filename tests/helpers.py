"""Helpers for building event streams and reading parse tree messages."""

import json
from typing import Any

from mdpreview.core.events import ByteRange, Event


def tree(message: str) -> list[Any]:
    """Decode a parse tree message and return its tree."""
    data = json.loads(message)
    assert data["kind"] == "parse_tree"
    return data["tree"]


def unranged(*events: Event) -> list[tuple[Event, ByteRange]]:
    """Pair events with empty ranges, for tests not involving positions."""
    return [(event, ByteRange(0, 0)) for event in events]
