"""Forward-only lexical state machine for C-family source text.

Classifies character offsets as code, string, template, or comment without
tokenizing the source. One pass, no regex, no rewinds inside a scan.

Known limitations:
- Escapes are detected by a one-character look-back, so a quote preceded
  by an escaped backslash (``"a\\\\"``) does not close its string.
- Braces inside a ``${ ... }`` interpolation expression are not tracked;
  the first ``}`` closes the interpolation.
- Regex literals are not recognized.

Thread Safety:
Scanners and trackers are single-use per source buffer.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterator

from rastro.lexer.modes import (
    ESCAPE,
    INTERPOLATION_CLOSE,
    STRING_QUOTES,
    TEMPLATE_QUOTE,
    LexMode,
    LexState,
)


class LexScanner:
    """Explicit finite-state scanner over one source buffer.

    Each step consumes one delimiter: a single character, or one of the
    two-character openers/closers (``//``, ``/*``, ``*/``, ``${``).

    Usage:
            >>> scanner = LexScanner('a("x")')
            >>> scanner.advance_to(3).mode
            <LexMode.STRING: 2>

    """

    __slots__ = ("_source", "_source_len", "_pos", "_state")

    def __init__(
        self,
        source: str,
        start: int = 0,
        state: LexState | None = None,
    ) -> None:
        """Initialize scanner.

        Args:
            source: Full source buffer
            start: Offset to start scanning from
            state: Known-good state at ``start`` (NORMAL if omitted)
        """
        self._source = source
        self._source_len = len(source)
        self._pos = start
        self._state = state if state is not None else LexState.normal()

    @property
    def position(self) -> int:
        """Offset of the next unconsumed character."""
        return self._pos

    @property
    def state(self) -> LexState:
        """State after consuming everything before ``position``."""
        return self._state

    def advance_to(self, offset: int) -> LexState:
        """Consume characters until ``position >= offset``.

        A two-character delimiter straddling ``offset`` is consumed whole,
        so the returned state already reflects it.

        Returns:
            State after consuming ``source[:offset]``.
        """
        end = min(offset, self._source_len)
        while self._pos < end:
            self._step()
        return self._state

    def iter_states(self, stop: int | None = None) -> Iterator[tuple[int, LexState]]:
        """Yield ``(index, state_before)`` for every step until ``stop``.

        Indices covered by the second character of a two-character delimiter
        are skipped; they never hold code.
        """
        end = self._source_len if stop is None else min(stop, self._source_len)
        while self._pos < end:
            yield self._pos, self._state
            self._step()

    def _escaped(self, pos: int) -> bool:
        return pos > 0 and self._source[pos - 1] == ESCAPE

    def _step(self) -> None:
        source = self._source
        pos = self._pos
        char = source[pos]
        nxt = source[pos + 1] if pos + 1 < self._source_len else ""
        state = self._state
        mode = state.mode

        if mode is LexMode.NORMAL:
            if char == "/" and nxt == "/":
                self._state = LexState.line_comment()
                self._pos = pos + 2
                return
            if char == "/" and nxt == "*":
                self._state = LexState.block_comment()
                self._pos = pos + 2
                return
            if char in STRING_QUOTES:
                self._state = LexState.string(char)
            elif char == TEMPLATE_QUOTE:
                self._state = LexState.template(0)
            self._pos = pos + 1
            return

        if mode is LexMode.STRING:
            if char == state.quote and not self._escaped(pos):
                self._state = LexState.normal()
            self._pos = pos + 1
            return

        if mode is LexMode.TEMPLATE:
            if char == "$" and nxt == "{" and not self._escaped(pos):
                self._state = LexState.template(state.depth + 1)
                self._pos = pos + 2
                return
            if state.depth == 0:
                if char == TEMPLATE_QUOTE and not self._escaped(pos):
                    self._state = LexState.normal()
            elif char == INTERPOLATION_CLOSE:
                self._state = LexState.template(state.depth - 1)
            self._pos = pos + 1
            return

        if mode is LexMode.LINE_COMMENT:
            if char == "\n":
                self._state = LexState.normal()
            self._pos = pos + 1
            return

        # BLOCK_COMMENT
        if char == "*" and nxt == "/":
            self._state = LexState.normal()
            self._pos = pos + 2
            return
        self._pos = pos + 1


class LexTracker:
    """Memoizing wrapper for repeated classification of one buffer.

    Queries with increasing offsets reuse the running scanner (O(n) total).
    A query behind the scanner restarts from the nearest checkpoint, which
    gives the same answer as a fresh scan from offset 0.

    """

    __slots__ = ("_source", "_scanner", "_positions", "_states")

    def __init__(self, source: str) -> None:
        self._source = source
        self._scanner = LexScanner(source)
        self._positions: list[int] = [0]
        self._states: list[LexState] = [LexState.normal()]

    def state_at(self, offset: int) -> LexState:
        """Return the state after consuming ``source[:offset]``."""
        scanner = self._scanner
        if offset < scanner.position:
            idx = bisect_right(self._positions, offset) - 1
            scanner = LexScanner(self._source, self._positions[idx], self._states[idx])
            self._scanner = scanner
        elif scanner.position > self._positions[-1]:
            self._positions.append(scanner.position)
            self._states.append(scanner.state)
        return scanner.advance_to(offset)


def classify(
    source: str,
    offset: int,
    checkpoint: tuple[int, LexState] | None = None,
) -> LexState:
    """Classify a character offset.

    Args:
        source: Full source buffer
        offset: Offset to classify
        checkpoint: Optional known-good ``(offset, state)`` at or before
            ``offset`` to start from instead of offset 0

    Returns:
        LexState after consuming ``source[:offset]``.

    Example:
        >>> classify("// useLogger()", 5).mode
        <LexMode.LINE_COMMENT: 4>
    """
    if checkpoint is not None and checkpoint[0] <= offset:
        scanner = LexScanner(source, checkpoint[0], checkpoint[1])
    else:
        scanner = LexScanner(source)
    return scanner.advance_to(offset)
