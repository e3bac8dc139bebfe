"""Internal-frame and internal-path filtering.

One ordered pattern table decides what counts as "not the user's code" for
both subsystems: the resolver drops matching stack frames, and build-tool
adapters skip matching files (with the extra file-scope table).

Tables:
- INTERNAL_FRAME_PATTERNS: library, framework, bundler and interpreter paths
- INTERNAL_FUNCTION_PATTERNS: runtime-internal function names
- FILE_SKIP_PATTERNS: whole files never offered to the rewriter

Thread Safety:
Tables are tuples of frozen patterns; FrameFilter holds only those tuples.
Safe to share across threads.

"""

from __future__ import annotations

import os
import re
import sysconfig
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rastro.errors import ConfigError
from rastro.stack.parser import StackFrame

PatternKind = Literal["substring", "regex", "prefix"]

_KINDS = ("substring", "regex", "prefix")

# Directory of this package; every frame below it is library code
PACKAGE_DIR = str(Path(__file__).parent.parent) + os.sep


@dataclass(frozen=True, slots=True)
class InternalFramePattern:
    """One rule of an internal-path table.

    Attributes:
        kind: "substring", "regex" (searched anywhere) or "prefix"
        pattern: Text or regular expression to match against a path
    """

    kind: PatternKind
    pattern: str

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ConfigError(f"unknown pattern kind {self.kind!r}", field="kind")
        if self.kind == "regex":
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ConfigError(f"invalid regex {self.pattern!r}: {e}", field="pattern") from e

    def matches(self, path: str) -> bool:
        if self.kind == "prefix":
            return path.startswith(self.pattern)
        if self.kind == "regex":
            return re.search(self.pattern, path) is not None
        return self.pattern in path


def _substrings(*patterns: str) -> tuple[InternalFramePattern, ...]:
    return tuple(InternalFramePattern("substring", pattern) for pattern in patterns)


INTERNAL_FRAME_PATTERNS: tuple[InternalFramePattern, ...] = (
    # This package
    InternalFramePattern("prefix", PACKAGE_DIR),
    # JS distribution and runtime modules of the library
    InternalFramePattern("regex", r"rastro[/\\]dist"),
    InternalFramePattern("regex", r"logger\.[cm]?[jt]s"),
    InternalFramePattern("regex", r"hooks\.[cm]?[jt]s"),
    *_substrings("sourceTracker", "decorators", "loggerUtils", "consoleOutput", "logProcessor"),
    # Framework and runtime markers
    *_substrings(
        "node_modules",
        "node:",
        "next-server",
        "next/dist",
        ".next/",
        "react-dom",
        "react/jsx",
        "async_hooks",
        "native code",
        "<anonymous>",
        "console.",
    ),
    # Python interpreter
    *_substrings("<frozen ", "site-packages", "dist-packages"),
    InternalFramePattern("prefix", sysconfig.get_paths()["stdlib"] + os.sep),
)

INTERNAL_FUNCTION_PATTERNS: tuple[str, ...] = (
    "react_stack",
    "react_internal",
    "Object.",
    "AsyncResource",
    "runInAsyncScope",
    "processTicksAndRejections",
    "nextTick",
    "node:",
    "anonymous",
    "eval",
)

FILE_SKIP_PATTERNS: tuple[InternalFramePattern, ...] = _substrings(
    "node_modules",
    "rastro/dist",
    "rastro\\dist",
    "hooks.esm",
    "hooks.js",
    ".next/",
)


class FrameFilter:
    """Internal-frame policy over a set of pattern tables.

    Example:
            >>> frame_filter = FrameFilter()
            >>> frame_filter.is_internal("/app/node_modules/react-dom/client.js")
            True
            >>> frame_filter.is_internal("src/app.ts")
            False

    """

    __slots__ = ("_patterns", "_function_patterns", "_file_patterns")

    def __init__(
        self,
        patterns: tuple[InternalFramePattern, ...] = INTERNAL_FRAME_PATTERNS,
        function_patterns: tuple[str, ...] = INTERNAL_FUNCTION_PATTERNS,
        file_patterns: tuple[InternalFramePattern, ...] = FILE_SKIP_PATTERNS,
    ) -> None:
        self._patterns = tuple(patterns)
        self._function_patterns = tuple(function_patterns)
        self._file_patterns = tuple(file_patterns)

    @property
    def patterns(self) -> tuple[InternalFramePattern, ...]:
        return self._patterns

    def first_match(self, path: str) -> InternalFramePattern | None:
        """Return the first rule matching ``path``, in table order."""
        for pattern in self._patterns:
            if pattern.matches(path):
                return pattern
        return None

    def is_internal(self, frame_or_path: StackFrame | str | None) -> bool:
        """Check a frame or path against the frame table.

        A frame without a path (or an empty path) is always internal.
        """
        path = frame_or_path.file_path if isinstance(frame_or_path, StackFrame) else frame_or_path
        if not path:
            return True
        return self.first_match(path) is not None

    def is_internal_function_name(self, name: str | None) -> bool:
        """Check whether a function name is runtime-internal or minified."""
        if not name:
            return True
        if len(name) == 1:
            return True
        return any(pattern in name for pattern in self._function_patterns)

    def is_internal_file(self, path: str) -> bool:
        """Check a source file against the file-scope skip table."""
        return any(pattern.matches(path) for pattern in self._file_patterns)


DEFAULT_FILTER = FrameFilter()


def is_internal(frame_or_path: StackFrame | str | None) -> bool:
    """Check a frame or path with the default tables."""
    return DEFAULT_FILTER.is_internal(frame_or_path)


def is_internal_function_name(name: str | None) -> bool:
    """Check a function name with the default tables."""
    return DEFAULT_FILTER.is_internal_function_name(name)


def is_internal_file(path: str) -> bool:
    """Check a source file with the default file-scope table."""
    return DEFAULT_FILTER.is_internal_file(path)


__all__ = [
    "DEFAULT_FILTER",
    "FILE_SKIP_PATTERNS",
    "INTERNAL_FRAME_PATTERNS",
    "INTERNAL_FUNCTION_PATTERNS",
    "PACKAGE_DIR",
    "FrameFilter",
    "InternalFramePattern",
    "is_internal",
    "is_internal_file",
    "is_internal_function_name",
]
