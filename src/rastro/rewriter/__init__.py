"""Compile-time call-site rewriter.

Architecture:
rewriter/
├── __init__.py          # Re-exports
├── core.py              # Rewriter, transform(), TransformResult
├── locator.py           # find_calls(): monitored call discovery
├── arguments.py         # find_argument_span(), argument-shape heuristics
├── planner.py           # plan_edits(): per-kind injection policy
└── edits.py             # Edit, apply_edits()

Usage:
    >>> from rastro.rewriter import transform
    >>> transform("withLogger(Button)", "src/Button.tsx").text
    'withLogger(Button, { __source: { fileName: "src/Button", lineNumber: 1 } })'

"""

from rastro.rewriter.arguments import (
    ArgumentShape,
    ArgumentSpan,
    ObjectArgument,
    analyze_arguments,
    find_argument_span,
)
from rastro.rewriter.core import Rewriter, TransformResult, transform
from rastro.rewriter.edits import Edit, apply_edits
from rastro.rewriter.locator import CallSite, compile_call_pattern, find_calls
from rastro.rewriter.planner import plan_edits, source_object

__all__ = [
    "ArgumentShape",
    "ArgumentSpan",
    "CallSite",
    "Edit",
    "ObjectArgument",
    "Rewriter",
    "TransformResult",
    "analyze_arguments",
    "apply_edits",
    "compile_call_pattern",
    "find_argument_span",
    "find_calls",
    "plan_edits",
    "source_object",
    "transform",
]
