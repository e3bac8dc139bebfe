"""Lexical state tracking for C-family source text.

Architecture:
lexer/
├── __init__.py          # Re-exports
├── core.py              # LexScanner, LexTracker, classify()
└── modes.py             # LexMode enum, LexState, delimiter constants

Usage:
    >>> from rastro.lexer import classify
    >>> classify('call("useLogger()")', 8).in_string
    True

"""

from rastro.lexer.core import LexScanner, LexTracker, classify
from rastro.lexer.modes import LexMode, LexState

__all__ = ["LexMode", "LexScanner", "LexState", "LexTracker", "classify"]
