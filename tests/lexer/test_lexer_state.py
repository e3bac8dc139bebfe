"""Tests for the lexical state machine.

Covers every transition of the scanner, the documented limitations, and
the equivalence of checkpointed/memoized queries with a fresh scan.
"""

from __future__ import annotations

import pytest

from rastro.lexer import LexMode, LexScanner, LexState, LexTracker, classify


class TestStringTransitions:
    """Quoted strings open on a quote and close on the same quote."""

    def test_double_quoted_string(self) -> None:
        """Offset inside a double-quoted string is classified as string."""
        state = classify('x = "a(b)"', 6)
        assert state.mode is LexMode.STRING
        assert state.quote == '"'
        assert state.in_string

    def test_single_quote_closes_string(self) -> None:
        """Code after the closing quote is normal again."""
        assert classify("a = 'q'; b", 9).is_code

    def test_other_quote_does_not_close(self) -> None:
        """A single quote inside a double-quoted string is text."""
        state = classify("\"it's\" + x", 4)
        assert state.mode is LexMode.STRING
        assert state.quote == '"'

    def test_escaped_quote_does_not_close(self) -> None:
        """A quote preceded by a backslash keeps the string open."""
        source = r'"a\"b"'
        assert classify(source, 4).in_string
        assert classify(source, 6).is_code

    def test_escaped_backslash_limitation(self) -> None:
        """The one-character look-back leaves "a\\\\" open (known limitation)."""
        source = '"a\\\\" + x'
        assert classify(source, 6).in_string


class TestTemplateTransitions:
    """Template literals with ${...} interpolation depth."""

    SOURCE = "`x ${y} z`"

    def test_template_text(self) -> None:
        """Template text has depth zero."""
        state = classify(self.SOURCE, 2)
        assert state.mode is LexMode.TEMPLATE
        assert state.depth == 0

    def test_interpolation_opens(self) -> None:
        """``${`` increments the depth."""
        assert classify(self.SOURCE, 5).depth == 1

    def test_interpolation_closes(self) -> None:
        """The interpolation's own ``}`` decrements the depth."""
        assert classify(self.SOURCE, 7) == LexState.template(0)

    def test_backtick_closes_template(self) -> None:
        """A backtick at depth zero returns to code."""
        assert classify(self.SOURCE, 10).is_code

    def test_escaped_interpolation_is_text(self) -> None:
        """``\\${`` does not open an interpolation."""
        assert classify("`\\${a}`", 5).depth == 0

    def test_inner_braces_limitation(self) -> None:
        """Braces inside an interpolation are not tracked (known limitation)."""
        source = "`${ {a: 1} }` + x"
        # The object's closing brace ends the interpolation early
        assert classify(source, 10) == LexState.template(0)


class TestCommentTransitions:
    """Line and block comments."""

    def test_line_comment_until_newline(self) -> None:
        """A line comment ends at the next newline."""
        source = "a // b\nc"
        assert classify(source, 5).mode is LexMode.LINE_COMMENT
        assert classify(source, 7).is_code

    def test_block_comment(self) -> None:
        """A block comment ends at ``*/``."""
        source = "a /* b */ c"
        assert classify(source, 5).mode is LexMode.BLOCK_COMMENT
        assert classify(source, 10).is_code

    def test_quote_in_comment_ignored(self) -> None:
        """Quotes inside comments do not open strings."""
        assert classify("// 'x\nuseLogger()", 6).is_code

    def test_comment_opener_in_string_ignored(self) -> None:
        """``//`` inside a string is text."""
        assert classify('"//" + y', 5).is_code

    @pytest.mark.parametrize(
        ("state", "in_comment"),
        [
            (LexState.line_comment(), True),
            (LexState.block_comment(), True),
            (LexState.normal(), False),
            (LexState.string("'"), False),
        ],
    )
    def test_in_comment_property(self, state: LexState, in_comment: bool) -> None:
        """in_comment covers both comment modes only."""
        assert state.in_comment is in_comment


class TestScanner:
    """LexScanner stepping behavior."""

    def test_two_character_delimiter_is_one_step(self) -> None:
        """The second character of ``//`` is never yielded."""
        indices = [index for index, _ in LexScanner("a//b").iter_states()]
        assert indices == [0, 1, 3]

    def test_states_are_before_each_character(self) -> None:
        """iter_states yields the state before consuming each character."""
        states = dict(LexScanner('"a"b').iter_states())
        assert states[0].is_code
        assert states[1].in_string
        assert states[2].in_string
        assert states[3].is_code

    def test_start_with_explicit_state(self) -> None:
        """A scanner can resume from a known state."""
        scanner = LexScanner('abc" + x', start=0, state=LexState.string('"'))
        assert scanner.advance_to(5).is_code

    def test_advance_past_end(self) -> None:
        """Advancing past the end stops at the buffer length."""
        scanner = LexScanner("'open")
        assert scanner.advance_to(100).in_string
        assert scanner.position == 5


class TestCheckpoints:
    """Memoized and checkpointed queries equal a fresh scan."""

    SOURCE = 'a("x") /* (y) */ `t ${u}` // z\nlogger.info("w")'

    def test_checkpoint_matches_fresh_scan(self) -> None:
        """classify() with a checkpoint gives the fresh-scan answer."""
        checkpoint = (7, classify(self.SOURCE, 7))
        for offset in range(7, len(self.SOURCE) + 1):
            assert classify(self.SOURCE, offset, checkpoint) == classify(self.SOURCE, offset)

    def test_tracker_out_of_order_queries(self) -> None:
        """LexTracker answers identically for any query order."""
        tracker = LexTracker(self.SOURCE)
        offsets = [30, 2, 45, 10, 10, 0, len(self.SOURCE), 18]
        for offset in offsets:
            assert tracker.state_at(offset) == classify(self.SOURCE, offset)
