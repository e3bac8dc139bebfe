"""Source-location records attached to log entries.

Provides SourceLocationRecord, the single attribution shape produced by both
subsystems, and InjectedSource, the parsed form of the ``__source`` metadata
the rewriter injects into monitored calls.

Thread Safety:
Both records are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Literal

from rastro.paths import is_bundled_path, strip_extension

# Reserved metadata key carrying build-time attribution
SOURCE_KEY = "__source"

Provenance = Literal["injected", "resolved"]


@dataclass(frozen=True, slots=True)
class SourceLocationRecord:
    """Resolved attribution for one log call.

    All fields are optional; an all-None record means "no attribution".

    Attributes:
        file_path: Cleaned, project-relative path
        file_name: Last path segment
        line_number: 1-indexed line
        column_number: 1-indexed column
        function_name: Enclosing function as reported by the stack
        component_name: Component/class name derived from the function name
        full_path: Uncleaned path, for clickable source links
        provenance: "injected" (rewriter) or "resolved" (stack), None if empty

    Examples:
            >>> record = SourceLocationRecord(file_path="src/app.ts", line_number=12)
            >>> record.format()
            'src/app.ts:12'

    """

    file_path: str | None = None
    file_name: str | None = None
    line_number: int | None = None
    column_number: int | None = None
    function_name: str | None = None
    component_name: str | None = None
    full_path: str | None = None
    provenance: Provenance | None = None

    @classmethod
    def empty(cls) -> SourceLocationRecord:
        """Create the all-None record returned when attribution fails."""
        return _EMPTY

    @property
    def is_empty(self) -> bool:
        return self.file_path is None and self.line_number is None and self.function_name is None

    def with_injected(self, injected: InjectedSource) -> SourceLocationRecord:
        """Overlay injected fields; injected values win field by field.

        ``full_path`` is dropped when the injected file is not the resolved
        one, so link() never joins one file's path with another's line.
        """
        other_file = injected.file_name is not None and (
            self.file_path is None or strip_extension(self.file_path) != injected.file_name
        )
        return replace(
            self,
            full_path=None if other_file else self.full_path,
            file_path=injected.file_name or self.file_path,
            file_name=(
                injected.file_name.rsplit("/", 1)[-1] if injected.file_name else self.file_name
            ),
            line_number=(
                injected.line_number if injected.line_number is not None else self.line_number
            ),
            column_number=(
                injected.column_number
                if injected.column_number is not None
                else self.column_number
            ),
            provenance="injected",
        )

    def format(self, *, verbose: bool = False, development: bool = True) -> str:
        """Format for display next to a log message.

        Args:
            verbose: Include function name and column
            development: Show the cleaned path; otherwise only the file name

        Returns:
            String like "src/app.ts:12", "Foo.bar @ src/app.ts:12:4", or ""
        """
        if not self.file_path and not self.function_name:
            return ""

        parts: list[str] = []
        if verbose and self.function_name:
            parts.append(self.function_name)

        if self.file_path:
            path_part = self.file_path if development else (self.file_name or "")
            if self.line_number is not None:
                path_part += f":{self.line_number}"
                if verbose and self.column_number is not None:
                    path_part += f":{self.column_number}"
            parts.append(path_part)

        return " @ ".join(parts)

    def link(self) -> str:
        """Create an IDE/console-clickable "path:line:col" link.

        Bundled paths produce "" since they do not point at a real file.
        """
        if not self.full_path or is_bundled_path(self.full_path):
            return ""

        link = self.full_path
        if self.line_number is not None:
            link += f":{self.line_number}"
            if self.column_number is not None:
                link += f":{self.column_number}"
        return link

    def __str__(self) -> str:
        return self.format()


_EMPTY = SourceLocationRecord()


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


@dataclass(frozen=True, slots=True)
class InjectedSource:
    """Build-time attribution carried in ``__source`` metadata.

    Attributes:
        file_name: Path string embedded by the rewriter
        line_number: 1-indexed line of the call
        column_number: Optional column
    """

    file_name: str | None = None
    line_number: int | None = None
    column_number: int | None = None

    @property
    def is_complete(self) -> bool:
        """True when file and line are both present."""
        return bool(self.file_name) and self.line_number is not None

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any] | None) -> InjectedSource | None:
        """Parse the ``__source`` entry of a metadata mapping.

        Accepts ``fileName/lineNumber/columnNumber`` (rewriter output) and
        the short ``file/line/column`` spelling. Malformed values are
        ignored rather than raised.

        Returns:
            InjectedSource, or None if absent or carrying nothing usable.
        """
        if not metadata:
            return None
        raw = metadata.get(SOURCE_KEY)
        if not isinstance(raw, Mapping):
            return None

        file_name = raw.get("fileName", raw.get("file"))
        injected = cls(
            file_name=file_name if isinstance(file_name, str) and file_name else None,
            line_number=_as_int(raw.get("lineNumber", raw.get("line"))),
            column_number=_as_int(raw.get("columnNumber", raw.get("column"))),
        )
        if injected.file_name is None and injected.line_number is None:
            return None
        return injected


def strip_source(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy metadata without the reserved ``__source`` key."""
    if not metadata:
        return {}
    return {key: value for key, value in metadata.items() if key != SOURCE_KEY}


__all__ = [
    "SOURCE_KEY",
    "InjectedSource",
    "SourceLocationRecord",
    "strip_source",
]
