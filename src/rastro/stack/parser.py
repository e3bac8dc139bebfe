"""Stack-trace line parsing.

Normalizes the three stack-line conventions into one StackFrame:

    (a)     at Foo.bar (src/app.ts:12:4)     V8 / Node, also "at src/app.ts:12:4"
    (b) bar@src/app.ts:12:4                  Firefox / Safari
    (c) src/app.ts:12:4                      bare location

Shapes are tried in that order; a line matching none of them is dropped.

Thread Safety:
All functions are pure. StackFrame is frozen.

"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rastro.paths import extract_file_name

_V8_FRAME = re.compile(
    r"^\s*at\s+(?:(?P<function>.+?)\s+\()?"
    r"(?:(?P<path>.+?):(?P<line>\d+)(?::(?P<column>\d+))?|(?P<opaque>[^)]+))\)?$"
)
_AT_SIGN_FRAME = re.compile(r"^(?P<function>.*)@(?P<path>.+?):(?P<line>\d+):(?P<column>\d+)$")
_BARE_FRAME = re.compile(r"^(?P<path>.+?):(?P<line>\d+):(?P<column>\d+)$")


@dataclass(frozen=True, slots=True)
class StackFrame:
    """One parsed stack line.

    Attributes:
        function_name: Function as printed by the runtime
        file_path: Raw path or URL (None for native/opaque locations)
        line_number: 1-indexed line
        column_number: 1-indexed column
    """

    function_name: str | None = None
    file_path: str | None = None
    line_number: int | None = None
    column_number: int | None = None

    @property
    def file_name(self) -> str | None:
        return extract_file_name(self.file_path) if self.file_path else None

    def to_dict(self) -> dict[str, str | int | None]:
        return {
            "function_name": self.function_name,
            "file_path": self.file_path,
            "file_name": self.file_name,
            "line_number": self.line_number,
            "column_number": self.column_number,
        }


def _to_int(value: str | None) -> int | None:
    return int(value) if value else None


def parse_frame(line: str) -> StackFrame | None:
    """Parse one stack line.

    Args:
        line: Raw line of stack text

    Returns:
        StackFrame, or None if no known shape matches

    Examples:
        >>> parse_frame("    at Foo.bar (src/app.ts:12:4)")
        StackFrame(function_name='Foo.bar', file_path='src/app.ts', line_number=12, column_number=4)
        >>> parse_frame("bar@src/app.ts:12:4").function_name
        'bar'
    """
    line = line.rstrip("\r\n")

    match = _V8_FRAME.match(line)
    if match:
        path = match.group("path")
        return StackFrame(
            function_name=match.group("function") or None,
            file_path=path or None,
            line_number=_to_int(match.group("line")),
            column_number=_to_int(match.group("column")),
        )

    stripped = line.strip()
    match = _AT_SIGN_FRAME.match(stripped)
    if match:
        return StackFrame(
            function_name=match.group("function") or None,
            file_path=match.group("path"),
            line_number=int(match.group("line")),
            column_number=int(match.group("column")),
        )

    match = _BARE_FRAME.match(stripped)
    if match:
        return StackFrame(
            file_path=match.group("path"),
            line_number=int(match.group("line")),
            column_number=int(match.group("column")),
        )

    return None


def parse_stack(text: str | None) -> list[StackFrame]:
    """Parse every line of a stack trace, dropping unparsable lines."""
    if not text:
        return []
    frames: list[StackFrame] = []
    for line in text.splitlines():
        frame = parse_frame(line)
        if frame is not None:
            frames.append(frame)
    return frames


__all__ = ["StackFrame", "parse_frame", "parse_stack"]
