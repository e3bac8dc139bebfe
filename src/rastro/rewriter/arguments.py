"""Argument-span resolution and argument-shape heuristics.

Given the opening parenthesis of a call, finds the matching closing
parenthesis and classifies the argument list's shape. This is not a parser:
the shape is derived from delimiter depth and top-level commas, skipping
anything the lexical tracker reports as string, template or comment.

Shape branches used by the planner:
- empty: nothing but whitespace between the parentheses
- top-level commas: commas at paren/bracket/brace depth zero
- trailing comma: last top-level comma followed only by whitespace or comments
- object-literal arguments: ``{ ... }`` spans that make up a whole argument

Thread Safety:
All functions are pure. ArgumentSpan and ArgumentShape are frozen;
ArgumentSpan memoizes its shape, and a concurrent first call only computes
it twice.

"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field

from rastro.lexer import LexScanner

_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


@dataclass(frozen=True, slots=True)
class ObjectArgument:
    """A top-level object literal that forms one whole argument.

    Offsets are absolute (original buffer).

    Attributes:
        open_brace: Offset of ``{``
        close_brace: Offset of the matching ``}``
        content_end: Offset just past the last non-whitespace character
            inside the braces (``open_brace + 1`` when empty)
        is_empty: Only whitespace between the braces
        ends_with_comma: Last non-whitespace character inside is ``,``
    """

    open_brace: int
    close_brace: int
    content_end: int
    is_empty: bool
    ends_with_comma: bool


@dataclass(frozen=True, slots=True)
class ArgumentShape:
    """Delimiter-level summary of an argument list.

    Attributes:
        is_empty: Nothing but whitespace and comments
        top_level_commas: Absolute offsets of commas at depth zero
        argument_count: Number of arguments (a trailing comma adds none)
        has_trailing_comma: Argument list ends with a top-level comma
        objects: Object-literal arguments, in source order
    """

    is_empty: bool
    top_level_commas: tuple[int, ...]
    argument_count: int
    has_trailing_comma: bool
    objects: tuple[ObjectArgument, ...]

    @property
    def last_object(self) -> ObjectArgument | None:
        return self.objects[-1] if self.objects else None


@dataclass(frozen=True, slots=True)
class ArgumentSpan:
    """Argument list of one call.

    Attributes:
        open_paren_index: Offset of ``(``
        close_paren_index: Offset of the matching ``)``, -1 if unbalanced
        text: Raw text between the parentheses (to end of buffer if unbalanced)
    """

    open_paren_index: int
    close_paren_index: int
    text: str
    _shape: ArgumentShape | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def is_balanced(self) -> bool:
        return self.close_paren_index != -1

    @property
    def stripped(self) -> str:
        return self.text.strip()

    def shape(self) -> ArgumentShape:
        """Classify the argument list (see module docstring). Computed once."""
        if self._shape is None:
            shape = analyze_arguments(self.text, base=self.open_paren_index + 1)
            object.__setattr__(self, "_shape", shape)
        return self._shape

    @property
    def is_empty(self) -> bool:
        return self.shape().is_empty

    @property
    def top_level_commas(self) -> tuple[int, ...]:
        return self.shape().top_level_commas

    @property
    def argument_count(self) -> int:
        return self.shape().argument_count

    @property
    def has_trailing_comma(self) -> bool:
        return self.shape().has_trailing_comma

    @property
    def last_object_argument(self) -> ObjectArgument | None:
        """Last whole-argument object literal, in absolute offsets."""
        return self.shape().last_object


def find_argument_span(source: str, open_paren_index: int) -> ArgumentSpan:
    """Find the parenthesis matching ``source[open_paren_index]``.

    Parentheses inside strings, templates and comments do not count.

    Args:
        source: Full source buffer
        open_paren_index: Offset of an opening parenthesis in code

    Returns:
        ArgumentSpan; ``close_paren_index`` is -1 if the buffer ends first.

    Example:
        >>> find_argument_span('f(a, ")", g(b))', 1).close_paren_index
        14
    """
    start = open_paren_index + 1
    scanner = LexScanner(source, start)
    depth = 1
    for index, state in scanner.iter_states():
        if not state.is_code:
            continue
        char = source[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return ArgumentSpan(open_paren_index, index, source[start:index])
    return ArgumentSpan(open_paren_index, -1, source[start:])


def analyze_arguments(text: str, base: int = 0) -> ArgumentShape:
    """Classify argument text.

    Args:
        text: Text between a call's parentheses
        base: Absolute offset of ``text[0]`` (added to reported offsets)

    Returns:
        ArgumentShape
    """
    commas: list[int] = []
    braces: list[tuple[int, int, int]] = []
    open_stack: list[tuple[str, int]] = []
    # Significant characters at depth zero, commas excluded
    top_level: list[int] = []
    # Last character that is neither whitespace nor comment
    last_significant = -1

    for index, state in LexScanner(text).iter_states():
        char = text[index]
        if state.in_comment or char.isspace():
            continue
        if not state.is_code:
            if not open_stack:
                top_level.append(index)
            last_significant = index
            continue
        if char == "/" and text[index + 1 : index + 2] in ("/", "*"):
            continue

        if not open_stack and char != ",":
            top_level.append(index)
        if char in _OPENERS:
            open_stack.append((char, index))
        elif char in _CLOSERS and open_stack:
            opener, opened_at = open_stack.pop()
            if opener == "{" and char == "}" and not open_stack:
                braces.append((opened_at, index, max(last_significant, opened_at)))
        elif char == "," and not open_stack:
            commas.append(index)
        last_significant = index

    if last_significant == -1:
        return ArgumentShape(
            is_empty=True,
            top_level_commas=(),
            argument_count=0,
            has_trailing_comma=False,
            objects=(),
        )

    trailing = bool(commas) and last_significant == commas[-1]
    argument_count = len(commas) + 1 - (1 if trailing else 0)

    objects: list[ObjectArgument] = []
    for opened_at, closed_at, inner_last in braces:
        segment_start = max((c + 1 for c in commas if c < opened_at), default=0)
        segment_end = min((c for c in commas if c > closed_at), default=len(text))
        marks = bisect_left(top_level, segment_end) - bisect_left(top_level, segment_start)
        if marks != 1:
            # Part of a larger expression (arrow body, call argument, ...)
            continue
        objects.append(
            ObjectArgument(
                open_brace=base + opened_at,
                close_brace=base + closed_at,
                content_end=base + inner_last + 1,
                is_empty=inner_last == opened_at,
                ends_with_comma=inner_last != opened_at and text[inner_last] == ",",
            )
        )

    return ArgumentShape(
        is_empty=False,
        top_level_commas=tuple(base + c for c in commas),
        argument_count=argument_count,
        has_trailing_comma=trailing,
        objects=tuple(objects),
    )
