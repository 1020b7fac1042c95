"""mdpreview - markdown preview parse trees with search highlighting."""

__version__ = "0.1.0"
