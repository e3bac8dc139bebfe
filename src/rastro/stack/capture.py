"""Live stack capture rendered as V8-style stack text.

The resolver works on stack *text* so that captured Python stacks and stack
text received from a browser or Node process go through the same parser and
filter. capture_stack() renders the interpreter stack in the ``at`` form:

    Error
        at Checkout.submit (/home/me/shop/src/checkout.py:42:9)
        at <module> (/home/me/shop/src/main.py:3:1)

Innermost frame first. Columns are 1-indexed and come from the code
object's position table when available.

Thread Safety:
Reads only the calling thread's frames.

"""

from __future__ import annotations

import sys
from itertools import islice
from types import FrameType

from rastro.stringbuilder import StringBuilder

STACK_HEADER = "Error"


def _column(frame: FrameType) -> int | None:
    if frame.f_lasti < 0:
        return None
    position = next(islice(frame.f_code.co_positions(), frame.f_lasti // 2, None), None)
    if position is None or position[2] is None:
        return None
    return position[2] + 1


def format_frame(frame: FrameType) -> str:
    """Render one interpreter frame as an ``at`` line."""
    code = frame.f_code
    location = code.co_filename
    if frame.f_lineno is not None:
        location += f":{frame.f_lineno}"
        column = _column(frame)
        if column is not None:
            location += f":{column}"
    return f"    at {code.co_qualname} ({location})"


def capture_stack(limit: int | None = None) -> str:
    """Capture the caller's stack as text.

    Args:
        limit: Maximum number of frames (None for all)

    Returns:
        Stack text starting with an ``Error`` header line.
    """
    sb = StringBuilder()
    sb.append(STACK_HEADER)
    frame: FrameType | None = sys._getframe(1)
    count = 0
    while frame is not None and (limit is None or count < limit):
        sb.append("\n")
        sb.append(format_frame(frame))
        frame = frame.f_back
        count += 1
    return sb.build()


__all__ = ["STACK_HEADER", "capture_stack", "format_frame"]
