"""Runtime stack-location resolver.

Architecture:
stack/
├── __init__.py          # Re-exports
├── capture.py           # capture_stack(): interpreter stack as V8-style text
├── parser.py            # StackFrame, parse_frame(), parse_stack()
├── filters.py           # Internal-frame tables, FrameFilter
└── resolver.py          # SourceLocationResolver, resolve(), get_stack_trace()

Usage:
    >>> from rastro.stack import parse_frame
    >>> parse_frame("    at Foo.bar (src/app.ts:12:4)").line_number
    12

"""

from rastro.stack.capture import capture_stack
from rastro.stack.filters import (
    FILE_SKIP_PATTERNS,
    INTERNAL_FRAME_PATTERNS,
    INTERNAL_FUNCTION_PATTERNS,
    FrameFilter,
    InternalFramePattern,
    is_internal,
    is_internal_file,
    is_internal_function_name,
)
from rastro.stack.parser import StackFrame, parse_frame, parse_stack
from rastro.stack.resolver import (
    SourceLocationResolver,
    derive_component_name,
    get_stack_trace,
    resolve,
)

__all__ = [
    "FILE_SKIP_PATTERNS",
    "INTERNAL_FRAME_PATTERNS",
    "INTERNAL_FUNCTION_PATTERNS",
    "FrameFilter",
    "InternalFramePattern",
    "SourceLocationResolver",
    "StackFrame",
    "capture_stack",
    "derive_component_name",
    "get_stack_trace",
    "is_internal",
    "is_internal_file",
    "is_internal_function_name",
    "parse_frame",
    "parse_stack",
    "resolve",
]
