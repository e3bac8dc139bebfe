"""Lexical modes, states and delimiter constants.

This module defines the finite state machine modes for the lexical
state tracker and the character constants that drive its transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class LexMode(Enum):
    """Lexical tracker modes.

    The tracker switches between modes while scanning forward:
    - NORMAL: Ordinary code, where calls and delimiters count
    - STRING: Inside a single- or double-quoted string
    - TEMPLATE: Inside a template literal (text or ${...} interpolation)
    - LINE_COMMENT: Inside a // comment, until the next newline
    - BLOCK_COMMENT: Inside a /* ... */ comment

    """

    NORMAL = auto()
    STRING = auto()
    TEMPLATE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()


# Quote characters that open a plain string
STRING_QUOTES = frozenset({'"', "'"})

# Quote character that opens a template literal
TEMPLATE_QUOTE = "`"

# Escape character checked by the one-character look-back
ESCAPE = "\\"

# Two-character delimiters
LINE_COMMENT_OPEN = "//"
BLOCK_COMMENT_OPEN = "/*"
BLOCK_COMMENT_CLOSE = "*/"
INTERPOLATION_OPEN = "${"
INTERPOLATION_CLOSE = "}"


@dataclass(frozen=True, slots=True)
class LexState:
    """Lexical state at a character offset.

    Attributes:
        mode: Current LexMode
        quote: Opening quote character (STRING only)
        depth: Interpolation depth (TEMPLATE only); 0 is template text,
            greater than 0 is inside ``${ ... }``

    Thread Safety:
        Frozen dataclass; states are shared freely between scanners.

    """

    mode: LexMode
    quote: str = ""
    depth: int = 0

    @classmethod
    def normal(cls) -> LexState:
        return _NORMAL

    @classmethod
    def string(cls, quote: str) -> LexState:
        return cls(LexMode.STRING, quote=quote)

    @classmethod
    def template(cls, depth: int = 0) -> LexState:
        if depth == 0:
            return _TEMPLATE_TEXT
        return cls(LexMode.TEMPLATE, depth=depth)

    @classmethod
    def line_comment(cls) -> LexState:
        return _LINE_COMMENT

    @classmethod
    def block_comment(cls) -> LexState:
        return _BLOCK_COMMENT

    @property
    def is_code(self) -> bool:
        """True when delimiters and identifiers at this offset are live code."""
        return self.mode is LexMode.NORMAL

    @property
    def in_string(self) -> bool:
        """True inside a quoted string or anywhere in a template literal."""
        return self.mode is LexMode.STRING or self.mode is LexMode.TEMPLATE

    @property
    def in_comment(self) -> bool:
        return self.mode is LexMode.LINE_COMMENT or self.mode is LexMode.BLOCK_COMMENT


# Shared singletons for the stateless modes
_NORMAL = LexState(LexMode.NORMAL)
_TEMPLATE_TEXT = LexState(LexMode.TEMPLATE)
_LINE_COMMENT = LexState(LexMode.LINE_COMMENT)
_BLOCK_COMMENT = LexState(LexMode.BLOCK_COMMENT)
