"""Call-site discovery for monitored identifiers.

Finds textual invocations of monitored names (not definitions) outside
strings, templates and comments. Matching is textual, not scope-aware: a
variable or parameter named after a monitored identifier and followed by
``(`` is indistinguishable from a call.

Thread Safety:
Patterns are compiled per MonitoredNameSet and cached; the cache only holds
immutable compiled patterns. Each find_calls() call scans independently.

"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache

from rastro.lexer import LexTracker
from rastro.names import CallKind, MonitoredNameSet

# One level of generic/type-parameter nesting: useStateLogger<Map<K, V>>(...)
_GENERIC_SUFFIX = r"<(?:[^<>]|<[^<>]*>)*>"

_DEFINITION_KEYWORD = "function"


@dataclass(frozen=True, slots=True)
class CallSite:
    """One discovered invocation of a monitored identifier.

    Attributes:
        name: Matched name ("useLogger", "logger.info", ...)
        kind: Injection policy group
        match_start: Offset of the first character of the name
        match_end: Offset just past the opening parenthesis
        open_paren_index: Offset of the opening parenthesis
    """

    name: str
    kind: CallKind
    match_start: int
    match_end: int
    open_paren_index: int


def _alternation(names: frozenset[str]) -> str:
    # Longest first so withLoggerRef is tried before withLogger
    return "|".join(re.escape(name) for name in sorted(names, key=lambda n: (-len(n), n)))


@lru_cache(maxsize=32)
def compile_call_pattern(names: MonitoredNameSet) -> re.Pattern[str]:
    """Build the combined call pattern for a name set.

    Groups: ``method``, ``hook`` or ``wrapper`` (exactly one participates).
    """
    branches: list[str] = []
    if names.receivers and names.methods:
        branches.append(
            rf"(?P<method>(?:{_alternation(names.receivers)})\.(?:{_alternation(names.methods)}))"
        )
    if names.hooks:
        branches.append(rf"(?P<hook>{_alternation(names.hooks)})")
    if names.wrappers:
        branches.append(rf"(?P<wrapper>{_alternation(names.wrappers)})")
    if not branches:
        # Never matches
        return re.compile(r"(?!x)x")
    return re.compile(rf"\b(?:{'|'.join(branches)})(?:{_GENERIC_SUFFIX})?\s*\(")


def _is_identifier_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


def _is_definition(source: str, start: int) -> bool:
    """True when ``function`` plus whitespace immediately precedes ``start``."""
    pos = start
    while pos > 0 and source[pos - 1].isspace():
        pos -= 1
    if pos == start:
        return False
    keyword_start = pos - len(_DEFINITION_KEYWORD)
    if keyword_start < 0 or source[keyword_start:pos] != _DEFINITION_KEYWORD:
        return False
    return keyword_start == 0 or not _is_identifier_char(source[keyword_start - 1])


_KINDS = {"method": CallKind.METHOD, "hook": CallKind.HOOK, "wrapper": CallKind.WRAPPER}


def find_calls(
    source: str,
    names: MonitoredNameSet,
    tracker: LexTracker | None = None,
) -> Iterator[CallSite]:
    """Lazily yield monitored call sites in ascending offset order.

    Args:
        source: Full source buffer
        names: Monitored identifiers
        tracker: Optional shared LexTracker for this buffer

    Yields:
        CallSite for every call outside strings and comments that is not
        preceded by a function-definition keyword.

    Example:
        >>> from rastro.names import DEFAULT_NAMES
        >>> [c.name for c in find_calls('useLogger(); // logger.info("x")', DEFAULT_NAMES)]
        ['useLogger']
    """
    pattern = compile_call_pattern(names)
    tracker = tracker or LexTracker(source)

    for match in pattern.finditer(source):
        start = match.start()
        if not tracker.state_at(start).is_code:
            continue
        if _is_definition(source, start):
            continue

        group = match.lastgroup
        if group is None:
            continue
        yield CallSite(
            name=match.group(group),
            kind=_KINDS[group],
            match_start=start,
            match_end=match.end(),
            open_paren_index=match.end() - 1,
        )
