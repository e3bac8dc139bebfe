"""Compile-time call-site rewriter.

Injects ``__source`` attribution into monitored calls of one source file:

    useLogger()          ->  useLogger({ __source: { fileName: "app/page", lineNumber: 5 } })
    logger.info("hi")    ->  logger.info("hi", undefined, { __source: { ... } })
    withLogger(Button)   ->  withLogger(Button, { __source: { ... } })

One file at a time, no I/O, no state shared across calls. Malformed input
never raises: an unbalanced call is skipped and scanning continues.

Build-tool adapters decide which files to offer (see rastro.adapters);
this module only applies the two whole-file skip rules:
- fast pre-check: none of the monitored identifiers occurs as a substring
- self-declaration: the file declares a monitored hook (``function useLogger(``)

Thread Safety:
Rewriter holds only an immutable MonitoredNameSet (or reads the active
configuration's on every call) and compiled patterns. Safe to share across
threads.

"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from functools import lru_cache

from rastro.lexer import LexTracker
from rastro.config import get_config
from rastro.names import MonitoredNameSet
from rastro.paths import injection_path
from rastro.rewriter.arguments import find_argument_span
from rastro.rewriter.edits import Edit, apply_edits
from rastro.rewriter.locator import find_calls
from rastro.rewriter.planner import plan_edits
from rastro.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TransformResult:
    """Output of one transform.

    Attributes:
        text: Rewritten source (the input itself when unchanged)
        changed: True if at least one edit was applied
        edits: Applied edits in original-buffer offsets, in application order
    """

    text: str
    changed: bool
    edits: tuple[Edit, ...] = ()


@lru_cache(maxsize=32)
def _declaration_pattern(hooks: frozenset[str]) -> re.Pattern[str] | None:
    if not hooks:
        return None
    names = "|".join(re.escape(name) for name in sorted(hooks))
    return re.compile(rf"\bfunction\s+(?:{names})\s*[<(]")


class _LineIndex:
    """1-based line lookup by offset via newline positions."""

    __slots__ = ("_newlines",)

    def __init__(self, source: str) -> None:
        self._newlines = [i for i, char in enumerate(source) if char == "\n"]

    def line_of(self, offset: int) -> int:
        return bisect_right(self._newlines, offset - 1) + 1


class Rewriter:
    """Source-location injector for one MonitoredNameSet.

    Without explicit names the rewriter follows ``get_config().names``, so
    ``configure(names=...)`` changes what it monitors.

    Usage:
            >>> rewriter = Rewriter()
            >>> result = rewriter.transform('logger.info("hi")', "src/app.ts")
            >>> result.text
            'logger.info("hi", undefined, { __source: { fileName: "src/app", lineNumber: 1 } })'

    """

    __slots__ = ("_names",)

    def __init__(self, names: MonitoredNameSet | None = None) -> None:
        self._names = names

    @property
    def names(self) -> MonitoredNameSet:
        return self._names if self._names is not None else get_config().names

    def should_skip(self, source: str) -> bool:
        """Apply the whole-file skip rules."""
        names = self.names
        if not any(marker in source for marker in names.markers()):
            return True
        declaration = _declaration_pattern(names.hooks)
        return declaration is not None and declaration.search(source) is not None

    def plan(self, source: str, path: str) -> list[Edit]:
        """Compute every edit for ``source`` without applying them."""
        file_name = injection_path(path)
        tracker = LexTracker(source)
        lines = _LineIndex(source)

        edits: list[Edit] = []
        for site in find_calls(source, self.names, tracker):
            span = find_argument_span(source, site.open_paren_index)
            if not span.is_balanced:
                logger.debug(
                    "Unbalanced call %s at %s:%d, skipping",
                    site.name,
                    path,
                    lines.line_of(site.match_start),
                )
                continue
            edits.extend(plan_edits(site, span, file_name, lines.line_of(site.match_start)))
        return edits

    def transform(self, source: str, path: str) -> TransformResult:
        """Rewrite one file.

        Args:
            source: Full file text
            path: Logical path (module id) of the file

        Returns:
            TransformResult; ``changed`` is False when nothing was injected.
        """
        if self.should_skip(source):
            logger.debug("No monitored calls in %s", path)
            return TransformResult(text=source, changed=False)

        edits = self.plan(source, path)
        if not edits:
            return TransformResult(text=source, changed=False)

        text, applied = apply_edits(source, edits)
        return TransformResult(text=text, changed=bool(applied), edits=applied)


_DEFAULT_REWRITER = Rewriter()


def transform(source: str, path: str, *, names: MonitoredNameSet | None = None) -> TransformResult:
    """Rewrite one file with the given (or configured) monitored names.

    Example:
        >>> transform("useLogger()", "app/page.tsx").text
        'useLogger({ __source: { fileName: "app/page", lineNumber: 1 } })'
    """
    rewriter = _DEFAULT_REWRITER if names is None else Rewriter(names)
    return rewriter.transform(source, path)
