"""StringBuilder for O(n) string accumulation.

The edit applier streams untouched slices of the original buffer and the
inserted text into one builder, then joins once. Repeated slicing and
concatenation of the whole buffer per edit would be O(n·k).

Thread Safety:
StringBuilder instances are local to each apply_edits() call.
No shared mutable state.

"""

from __future__ import annotations


class StringBuilder:
    """Efficient string accumulator.

    Appends to a list, joins once at the end.

    Usage:
            >>> sb = StringBuilder()
            >>> sb.append("useLogger(")
            >>> sb.append("{ __source: ... }")
            >>> sb.append(")")
            >>> sb.build()
            'useLogger({ __source: ... })'

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        """Initialize empty StringBuilder."""
        self._parts: list[str] = []

    def append(self, s: str) -> StringBuilder:
        """Append a string to the builder.

        Args:
            s: String to append (empty strings are skipped)

        Returns:
            self for method chaining
        """
        if s:
            self._parts.append(s)
        return self

    def build(self) -> str:
        """Join all parts into final string."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Return number of parts (not total length)."""
        return len(self._parts)

    def __bool__(self) -> bool:
        """Return True if any parts have been appended."""
        return bool(self._parts)
