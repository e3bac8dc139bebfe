"""Tests for runtime source-location resolution."""

from __future__ import annotations

import sys

import pytest

from rastro.location import SourceLocationRecord
from rastro.stack import (
    FrameFilter,
    SourceLocationResolver,
    capture_stack,
    derive_component_name,
    get_stack_trace,
    parse_frame,
    resolve,
)
from rastro.stack.capture import STACK_HEADER

STACK = "\n".join(
    [
        "Error: boom",
        "    at Logger.info (/app/node_modules/rastro/dist/index.js:10:5)",
        "    at Cart.render (/home/me/shop/src/components/Cart.tsx:42:7)",
        "    at handleClick (src/app.ts:12:4)",
        "    at processTicksAndRejections (node:internal/process/task_queues:95:5)",
    ]
)


def canned(text: str | None = STACK) -> SourceLocationResolver:
    return SourceLocationResolver(capture=lambda: text)


class TestResolveFromText:
    """Resolution over a fixed stack text."""

    def test_first_user_frame(self) -> None:
        """Library frames are skipped and the first user frame is described."""
        record = canned().resolve()
        assert record == SourceLocationRecord(
            file_path="src/components/Cart.tsx",
            file_name="Cart.tsx",
            line_number=42,
            column_number=7,
            function_name="Cart.render",
            component_name="Cart",
            full_path="/home/me/shop/src/components/Cart.tsx",
            provenance="resolved",
        )

    def test_skip_one_user_frame(self) -> None:
        """skip_frames counts user frames only."""
        record = canned().resolve(1)
        assert record.file_path == "src/app.ts"
        assert record.function_name == "handleClick"
        assert record.component_name is None

    @pytest.mark.parametrize("skip", [2, 10, -1])
    def test_skip_out_of_range(self, skip: int) -> None:
        """Skipping past the user frames, or a negative skip, gives the empty record."""
        record = canned().resolve(skip)
        assert record.is_empty
        assert record == SourceLocationRecord.empty()

    def test_explicit_text(self) -> None:
        """Text passed in is used instead of capturing."""
        record = canned(None).resolve(text=STACK)
        assert record.line_number == 42

    def test_user_frames_keep_raw_lines(self) -> None:
        """user_frames() pairs each frame with its original line."""
        frames = canned().user_frames()
        assert [frame.function_name for _, frame in frames] == ["Cart.render", "handleClick"]
        assert frames[1][0] == "    at handleClick (src/app.ts:12:4)"

    def test_custom_filter(self) -> None:
        """An empty pattern table keeps library frames."""
        resolver = SourceLocationResolver(capture=lambda: STACK, frame_filter=FrameFilter(()))
        record = resolver.resolve()
        assert record.function_name == "Logger.info"
        assert record.component_name == "Logger"

    def test_module_resolve_with_capture(self) -> None:
        """resolve() accepts an alternative stack source."""
        assert resolve(1, capture=lambda: STACK).line_number == 12


class TestCaptureFailures:
    """Nothing in resolution raises."""

    @pytest.mark.parametrize("text", [None, "", "Error\n    at <anonymous>", "garbage"])
    def test_no_user_frame(self, text: str | None) -> None:
        """Missing or frame-less stacks give the empty record."""
        assert canned(text).resolve().is_empty

    def test_capture_raises(self) -> None:
        """A failing capture degrades to the empty record."""

        def broken() -> str:
            raise RuntimeError("no stack here")

        resolver = SourceLocationResolver(capture=broken)
        assert resolver.resolve().is_empty
        assert resolver.stack_trace() == ""


class TestComponentName:
    """Component names derived from function names."""

    @pytest.mark.parametrize(
        ("function_name", "expected"),
        [
            ("Checkout.submit", "Checkout"),
            ("Checkout", "Checkout"),
            ("Cart2.render", "Cart2"),
            ("checkout", None),
            ("handleClick", None),
            ("new Widget", None),
            ("Object.<anonymous>", None),
            ("C", None),
            (None, None),
        ],
    )
    def test_derive(self, function_name: str | None, expected: str | None) -> None:
        """Capitalized owners become component names; internal names never do."""
        assert derive_component_name(function_name) == expected


class TestStackTrace:
    """Filtered stack text."""

    def test_user_lines_only(self) -> None:
        """Internal frames are dropped and lines are trimmed."""
        assert canned().stack_trace() == (
            "at Cart.render (/home/me/shop/src/components/Cart.tsx:42:7)\n"
            "at handleClick (src/app.ts:12:4)"
        )

    def test_skip(self) -> None:
        """Skipped user frames are left out."""
        assert canned().stack_trace(1) == "at handleClick (src/app.ts:12:4)"

    def test_module_helper(self) -> None:
        """get_stack_trace() accepts an alternative stack source."""
        assert get_stack_trace(capture=lambda: STACK).count("\n") == 1


class TestLiveStack:
    """Resolution against the interpreter's own stack."""

    def test_resolves_calling_test(self) -> None:
        """Library frames are skipped, so the test itself is the call site."""
        expected_line = sys._getframe().f_lineno + 1
        record = resolve()
        assert record.file_name == "test_resolver.py"
        assert record.line_number == expected_line
        assert record.function_name == "TestLiveStack.test_resolves_calling_test"
        assert record.component_name == "TestLiveStack"
        assert isinstance(record.column_number, int)
        assert record.full_path is not None
        assert record.full_path.endswith("test_resolver.py")

    def test_nested_helper_and_skip(self) -> None:
        """A user helper is a user frame; skipping one reaches its caller."""

        def helper() -> tuple[SourceLocationRecord, SourceLocationRecord]:
            return resolve(), resolve(1)

        own, caller = helper()
        assert own.function_name == "TestLiveStack.test_nested_helper_and_skip.<locals>.helper"
        assert caller.function_name == "TestLiveStack.test_nested_helper_and_skip"

    def test_live_stack_trace(self) -> None:
        """The live trace starts at this test."""
        first = get_stack_trace().splitlines()[0]
        assert first.startswith("at TestLiveStack.test_live_stack_trace (")


class TestCaptureStack:
    """Rendering interpreter frames as stack text."""

    def test_limit_one(self) -> None:
        """The header is followed by the caller's frame."""
        expected_line = sys._getframe().f_lineno + 1
        lines = capture_stack(limit=1).splitlines()
        assert lines[0] == STACK_HEADER
        assert len(lines) == 2
        frame = parse_frame(lines[1])
        assert frame is not None
        assert frame.function_name == "TestCaptureStack.test_limit_one"
        assert frame.file_name == "test_resolver.py"
        assert frame.line_number == expected_line

    def test_full_stack_parses(self) -> None:
        """Every rendered line parses back into a frame."""
        lines = capture_stack().splitlines()[1:]
        assert lines
        assert all(parse_frame(line) is not None for line in lines)
