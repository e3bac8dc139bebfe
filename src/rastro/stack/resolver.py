"""Runtime source-location resolution.

Captures a stack, parses every line, drops internal frames and turns the
first remaining frame (after ``skip_frames`` further user frames) into a
SourceLocationRecord. Nothing here raises: a failed or empty capture gives
the empty record.

The skip count must equal the number of non-internal wrapper layers between
the public logging call and the resolver. It is a named constant at each
call site (see rastro.logger.LOGGER_SKIP_FRAMES).

Thread Safety:
SourceLocationResolver holds only a capture callable and a FrameFilter.
Both defaults are stateless; safe to share across threads.

"""

from __future__ import annotations

import re
from collections.abc import Callable

from rastro.location import SourceLocationRecord
from rastro.paths import clean_file_path
from rastro.stack.capture import capture_stack
from rastro.stack.filters import DEFAULT_FILTER, FrameFilter
from rastro.stack.parser import StackFrame, parse_frame
from rastro.utils.logger import get_logger

logger = get_logger(__name__)

StackCapture = Callable[[], str | None]

_COMPONENT_PREFIX = re.compile(r"^([A-Z][A-Za-z0-9]*)\.")
_COMPONENT_NAME = re.compile(r"^[A-Z][A-Za-z0-9]*$")


def derive_component_name(
    function_name: str | None, frame_filter: FrameFilter = DEFAULT_FILTER
) -> str | None:
    """Derive a component/class name from a frame's function name.

    Examples:
        >>> derive_component_name("Checkout.submit")
        'Checkout'
        >>> derive_component_name("Checkout")
        'Checkout'
        >>> derive_component_name("Object.<anonymous>") is None
        True
    """
    if not function_name or frame_filter.is_internal_function_name(function_name):
        return None
    prefix = _COMPONENT_PREFIX.match(function_name)
    if prefix:
        return prefix.group(1)
    if _COMPONENT_NAME.match(function_name):
        return function_name
    return None


class SourceLocationResolver:
    """Stack capture plus frame filtering.

    Usage:
            >>> resolver = SourceLocationResolver(
            ...     capture=lambda: "Error\\n    at Cart.render (src/Cart.tsx:8:3)"
            ... )
            >>> resolver.resolve().format(verbose=True)
            'Cart.render @ src/Cart.tsx:8:3'

    """

    __slots__ = ("_capture", "_filter")

    def __init__(
        self,
        capture: StackCapture | None = None,
        frame_filter: FrameFilter | None = None,
    ) -> None:
        self._capture = capture or capture_stack
        self._filter = frame_filter or DEFAULT_FILTER

    @property
    def frame_filter(self) -> FrameFilter:
        return self._filter

    def _capture_text(self) -> str:
        try:
            return self._capture() or ""
        except Exception as e:
            logger.debug("Stack capture failed: %s", e)
            return ""

    def user_frames(self, text: str | None = None) -> list[tuple[str, StackFrame]]:
        """Parse stack text into (raw_line, frame) pairs of user frames.

        Args:
            text: Stack text; captured when omitted
        """
        if text is None:
            text = self._capture_text()
        frames: list[tuple[str, StackFrame]] = []
        for line in text.splitlines():
            frame = parse_frame(line)
            if frame is None or self._filter.is_internal(frame):
                continue
            frames.append((line, frame))
        return frames

    def record_for(self, frame: StackFrame) -> SourceLocationRecord:
        """Build the resolved record for one selected frame."""
        return SourceLocationRecord(
            file_path=clean_file_path(frame.file_path) if frame.file_path else None,
            file_name=frame.file_name,
            line_number=frame.line_number,
            column_number=frame.column_number,
            function_name=frame.function_name,
            component_name=derive_component_name(frame.function_name, self._filter),
            full_path=frame.file_path,
            provenance="resolved",
        )

    def resolve(self, skip_frames: int = 0, *, text: str | None = None) -> SourceLocationRecord:
        """Resolve the caller's source location.

        Args:
            skip_frames: Further user frames to skip after internal ones
            text: Stack text to resolve instead of capturing

        Returns:
            SourceLocationRecord, empty when no user frame remains
        """
        frames = self.user_frames(text)
        if skip_frames < 0 or skip_frames >= len(frames):
            return SourceLocationRecord.empty()
        _, frame = frames[skip_frames]
        return self.record_for(frame)

    def stack_trace(self, skip_frames: int = 0, *, text: str | None = None) -> str:
        """Render the user frames as trimmed stack lines, one per line."""
        frames = self.user_frames(text)
        return "\n".join(line.strip() for line, _ in frames[max(skip_frames, 0) :])


_DEFAULT_RESOLVER = SourceLocationResolver()


def resolve(skip_frames: int = 0, *, capture: StackCapture | None = None) -> SourceLocationRecord:
    """Resolve the caller's source location from the live stack.

    Args:
        skip_frames: Further user frames to skip (wrapper layers)
        capture: Alternative stack source (defaults to the interpreter stack)
    """
    resolver = _DEFAULT_RESOLVER if capture is None else SourceLocationResolver(capture)
    return resolver.resolve(skip_frames)


def get_stack_trace(skip_frames: int = 0, *, capture: StackCapture | None = None) -> str:
    """Render the caller's user frames as stack text."""
    resolver = _DEFAULT_RESOLVER if capture is None else SourceLocationResolver(capture)
    return resolver.stack_trace(skip_frames)


__all__ = [
    "SourceLocationResolver",
    "StackCapture",
    "derive_component_name",
    "get_stack_trace",
    "resolve",
]
