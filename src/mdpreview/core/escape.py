"""JSON string literal escaping for parse tree text."""

# Two-character escapes. Remaining control characters and DEL use \u00xx;
# printable ASCII and all non-ASCII characters are written unchanged.
_SHORT_ESCAPES = {
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}

ESCAPE_TABLE: dict[int, str] = {code: f"\\u{code:04x}" for code in [*range(0x20), 0x7F]}
ESCAPE_TABLE.update({ord(char): escaped for char, escaped in _SHORT_ESCAPES.items()})


def escape_string(text: str) -> str:
    """Quote text as a JSON string literal.

    Args:
        text: Text slice to embed

    Returns:
        Double-quoted literal safe to write into the parse tree
    """
    return f'"{text.translate(ESCAPE_TABLE)}"'
