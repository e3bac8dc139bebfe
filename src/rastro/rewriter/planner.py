"""Injection planning: which edit each monitored call receives.

The policy is a small table of enumerated branches, one function per call
kind:

| kind    | empty args        | has an object-literal arg   | other args                 |
|---------|-------------------|-----------------------------|----------------------------|
| HOOK    | replace with obj  | splice ``__source`` into it | append ``, obj``           |
| WRAPPER | untouched         | append ``, obj`` if 1 arg   | append ``, obj`` if 1 arg  |
| METHOD  | untouched         | pad to 2 args + append obj  | pad to 2 args + append obj |

where obj is ``{ __source: { fileName: "...", lineNumber: N } }``.

Known limitations (accepted, not errors):
- WRAPPER calls with two or more arguments are left untouched; an existing
  options object is not merged.
- METHOD calls that already have three or more arguments are left untouched.

Thread Safety:
All functions are pure.

"""

from __future__ import annotations

import json

from rastro.names import CallKind
from rastro.rewriter.arguments import ArgumentShape, ArgumentSpan
from rastro.rewriter.edits import Edit
from rastro.rewriter.locator import CallSite

# Placeholder used to pad logger method calls up to (message, data, meta)
PLACEHOLDER_ARGUMENT = "undefined"
METHOD_ARITY = 3


def source_property(file_name: str, line_number: int) -> str:
    """Render the ``__source`` property (no enclosing braces)."""
    return f"__source: {{ fileName: {json.dumps(file_name)}, lineNumber: {line_number} }}"


def source_object(file_name: str, line_number: int) -> str:
    """Render the full source-location object literal.

    Example:
        >>> source_object("app/page", 5)
        '{ __source: { fileName: "app/page", lineNumber: 5 } }'
    """
    return f"{{ {source_property(file_name, line_number)} }}"


def _append_arguments(span: ArgumentSpan, shape: ArgumentShape, arguments: list[str]) -> Edit:
    separator = " " if shape.has_trailing_comma else ", "
    return Edit.insert(span.close_paren_index, separator + ", ".join(arguments))


def _plan_hook(span: ArgumentSpan, shape: ArgumentShape, file_name: str, line: int) -> list[Edit]:
    if shape.is_empty:
        return [
            Edit.replace(
                span.open_paren_index + 1,
                span.close_paren_index,
                source_object(file_name, line),
            )
        ]

    # Only whole-argument objects are spliced into. Braces inside a larger
    # expression (an arrow body or a ternary) are left untouched and the
    # source object is appended as a new argument instead.
    target = shape.last_object if "{" in span.stripped else None
    if target is None:
        return [_append_arguments(span, shape, [source_object(file_name, line)])]

    if target.is_empty:
        return [
            Edit.replace(
                target.open_brace,
                target.close_brace + 1,
                source_object(file_name, line),
            )
        ]
    separator = " " if target.ends_with_comma else ", "
    return [Edit.insert(target.content_end, separator + source_property(file_name, line))]


def _plan_wrapper(
    span: ArgumentSpan, shape: ArgumentShape, file_name: str, line: int
) -> list[Edit]:
    if shape.argument_count != 1:
        return []
    return [_append_arguments(span, shape, [source_object(file_name, line)])]


def _plan_method(
    span: ArgumentSpan, shape: ArgumentShape, file_name: str, line: int
) -> list[Edit]:
    if shape.is_empty or shape.argument_count >= METHOD_ARITY:
        return []
    padding = [PLACEHOLDER_ARGUMENT] * (METHOD_ARITY - 1 - shape.argument_count)
    return [_append_arguments(span, shape, [*padding, source_object(file_name, line)])]


_PLANNERS = {
    CallKind.HOOK: _plan_hook,
    CallKind.WRAPPER: _plan_wrapper,
    CallKind.METHOD: _plan_method,
}


def plan_edits(site: CallSite, span: ArgumentSpan, file_name: str, line_number: int) -> list[Edit]:
    """Plan the edits for one call site.

    Args:
        site: Discovered call
        span: Its argument span (must be balanced)
        file_name: Path string to embed
        line_number: 1-indexed line of ``site.match_start``

    Returns:
        Edits in original-buffer offsets; empty when the call is left alone.
    """
    if not span.is_balanced:
        return []
    return _PLANNERS[site.kind](span, span.shape(), file_name, line_number)
