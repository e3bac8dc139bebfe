"""Tests for stack-line parsing across the three conventions."""

from __future__ import annotations

import pytest

from rastro.stack import StackFrame, parse_frame, parse_stack


class TestV8Frames:
    """``at name (location)`` and ``at location``."""

    def test_named_frame(self) -> None:
        """The canonical V8 line."""
        assert parse_frame("    at Foo.bar (src/app.ts:12:4)") == StackFrame(
            function_name="Foo.bar",
            file_path="src/app.ts",
            line_number=12,
            column_number=4,
        )

    def test_anonymous_location(self) -> None:
        """A frame without a function name."""
        frame = parse_frame("    at src/app.ts:12:4")
        assert frame == StackFrame(None, "src/app.ts", 12, 4)

    def test_url_with_port(self) -> None:
        """Colons inside the URL do not confuse line and column."""
        frame = parse_frame("    at new Widget (http://localhost:3000/src/widget.js:10:5)")
        assert frame is not None
        assert frame.function_name == "new Widget"
        assert frame.file_path == "http://localhost:3000/src/widget.js"
        assert (frame.line_number, frame.column_number) == (10, 5)

    def test_missing_column(self) -> None:
        """A missing column is None, not a failure."""
        frame = parse_frame("    at render (src/a.ts:7)")
        assert frame == StackFrame("render", "src/a.ts", 7, None)

    @pytest.mark.parametrize(
        ("line", "function_name"),
        [
            ("    at foo (native)", "foo"),
            ("    at async Promise.all (index 0)", "async Promise.all"),
            ("    at <anonymous>", None),
        ],
    )
    def test_opaque_location(self, line: str, function_name: str | None) -> None:
        """Locations without a line number parse with no path."""
        frame = parse_frame(line)
        assert frame is not None
        assert frame.function_name == function_name
        assert frame.file_path is None
        assert frame.line_number is None


class TestOtherConventions:
    """Firefox/Safari and bare locations."""

    def test_at_sign_frame(self) -> None:
        """``name@path:line:col`` gives the same fields."""
        assert parse_frame("bar@src/app.ts:12:4") == StackFrame("bar", "src/app.ts", 12, 4)

    def test_at_sign_without_name(self) -> None:
        """An empty name before ``@`` is None."""
        assert parse_frame("@src/app.ts:1:2") == StackFrame(None, "src/app.ts", 1, 2)

    def test_at_sign_url(self) -> None:
        """URLs parse in the ``@`` convention too."""
        frame = parse_frame("render@http://localhost:5173/src/App.tsx?t=1:20:11")
        assert frame is not None
        assert frame.file_path == "http://localhost:5173/src/App.tsx?t=1"
        assert frame.file_name == "App.tsx"

    def test_bare_location(self) -> None:
        """A bare ``path:line:col`` has no function name."""
        assert parse_frame("src/app.ts:12:4") == StackFrame(None, "src/app.ts", 12, 4)

    @pytest.mark.parametrize("line", ["", "Error: boom", "    at", "just text"])
    def test_unparsable(self, line: str) -> None:
        """Lines matching no convention give None."""
        assert parse_frame(line) is None

    def test_carriage_return_stripped(self) -> None:
        """CRLF stack text parses like LF text."""
        assert parse_frame("bar@src/app.ts:12:4\r") == StackFrame("bar", "src/app.ts", 12, 4)


class TestParseStack:
    """Whole stack texts."""

    def test_drops_unparsable_lines(self) -> None:
        """Header and garbage lines are dropped, frames kept in order."""
        text = "\n".join(
            [
                "TypeError: nope",
                "    at Cart.render (src/Cart.tsx:8:3)",
                "",
                "??",
                "handler@src/app.ts:2:1",
            ]
        )
        frames = parse_stack(text)
        assert [f.function_name for f in frames] == ["Cart.render", "handler"]

    @pytest.mark.parametrize("text", ["", None])
    def test_no_text(self, text: str | None) -> None:
        """Missing stack text gives no frames."""
        assert parse_stack(text) == []

    def test_to_dict(self) -> None:
        """to_dict includes the derived file name."""
        frame = StackFrame("f", "/a/src/x.ts", 1, 2)
        assert frame.to_dict() == {
            "function_name": "f",
            "file_path": "/a/src/x.ts",
            "file_name": "x.ts",
            "line_number": 1,
            "column_number": 2,
        }
