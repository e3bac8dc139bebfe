"""Log entries and the injected-vs-resolved attribution precedence.

create_log_entry() is where the two attribution subsystems meet:

1. ``__source`` in the context metadata (written by the rewriter) is parsed
   and stripped from the metadata the entry carries.
2. If it holds both a file and a line, the stack is never captured.
3. Otherwise the resolver supplies a record and injected fields overlay it
   field by field.
4. When the config disables source paths, neither is consulted; the
   injected value is still stripped.

Thread Safety:
LogContext and LogEntry are frozen. create_log_entry() reads the config
snapshot once and shares no state between calls.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from rastro.config import LogLevel, RastroConfig, get_config
from rastro.location import InjectedSource, SourceLocationRecord, strip_source
from rastro.stack.resolver import SourceLocationResolver


@dataclass(frozen=True, slots=True)
class LogContext:
    """Caller-supplied context for a log call.

    Attributes:
        component_name: Explicit component name (wins over derived ones)
        component_id: Optional component instance id
        tags: Free-form labels
        metadata: Extra key/value pairs; may carry ``__source``
    """

    component_name: str | None = None
    component_id: str | None = None
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def merged(self, other: LogContext | None) -> LogContext:
        """Combine with ``other``; its scalars win, tags and metadata merge."""
        if other is None:
            return self
        return LogContext(
            component_name=other.component_name or self.component_name,
            component_id=other.component_id or self.component_id,
            tags=tuple(dict.fromkeys((*self.tags, *other.tags))),
            metadata={**self.metadata, **other.metadata},
        )


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One structured log record.

    Attributes:
        timestamp: Creation time (UTC)
        level: Severity
        message: Log message
        data: Optional payload
        location: Attribution; empty when none was produced
        stack_trace: Filtered user stack for error entries
        tags: Context tags
        metadata: Context metadata without ``__source``
    """

    timestamp: datetime
    level: LogLevel
    message: str
    data: Any = None
    location: SourceLocationRecord = field(default_factory=SourceLocationRecord.empty)
    stack_trace: str | None = None
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def component_name(self) -> str | None:
        return self.location.component_name

    @property
    def function_name(self) -> str | None:
        return self.location.function_name

    @property
    def source_path(self) -> str | None:
        return self.location.file_path

    @property
    def line_number(self) -> int | None:
        return self.location.line_number

    @property
    def column_number(self) -> int | None:
        return self.location.column_number

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form (JSON-friendly apart from ``data``)."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
            "data": self.data,
            "component_name": self.component_name,
            "function_name": self.function_name,
            "source_path": self.source_path,
            "line_number": self.line_number,
            "column_number": self.column_number,
            "stack_trace": self.stack_trace,
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
        }


def attribute(
    injected: InjectedSource | None,
    resolver: SourceLocationResolver,
    skip_frames: int,
) -> SourceLocationRecord:
    """Pick the attribution for one call.

    A complete injected location is used as-is; otherwise the resolved record
    is overlaid with whatever the injected one carries.
    """
    if injected is not None and injected.is_complete:
        return SourceLocationRecord.empty().with_injected(injected)
    resolved = resolver.resolve(skip_frames)
    if injected is None:
        return resolved
    return resolved.with_injected(injected)


def _drop_internal_function(
    record: SourceLocationRecord, resolver: SourceLocationResolver
) -> SourceLocationRecord:
    if record.function_name and resolver.frame_filter.is_internal_function_name(
        record.function_name
    ):
        return replace(record, function_name=None)
    return record


def create_log_entry(
    level: LogLevel | str,
    message: str,
    data: Any = None,
    context: LogContext | None = None,
    *,
    skip_frames: int = 0,
    config: RastroConfig | None = None,
    resolver: SourceLocationResolver | None = None,
) -> LogEntry:
    """Build a LogEntry, attributing it to its call site.

    Args:
        level: Entry severity
        message: Log message
        data: Optional payload
        context: Component, tags and metadata (metadata may carry ``__source``)
        skip_frames: User frames between the public call and this function
        config: Config snapshot (defaults to the active one)
        resolver: Stack resolver (defaults to the live interpreter stack)

    Returns:
        LogEntry with ``__source`` stripped from its metadata
    """
    config = config or get_config()
    resolver = resolver or SourceLocationResolver()
    context = context or LogContext()
    level = LogLevel.parse(level)

    injected = InjectedSource.from_metadata(context.metadata)
    metadata = strip_source(context.metadata)
    if context.component_id:
        metadata["component_id"] = context.component_id

    location = SourceLocationRecord.empty()
    if config.should_include_source_path:
        location = _drop_internal_function(attribute(injected, resolver, skip_frames), resolver)
    if context.component_name:
        location = replace(location, component_name=context.component_name)

    stack_trace = None
    if level is LogLevel.ERROR and config.include_stack_trace:
        stack_trace = resolver.stack_trace(skip_frames)

    return LogEntry(
        timestamp=datetime.now(timezone.utc),
        level=level,
        message=message,
        data=data,
        location=location,
        stack_trace=stack_trace,
        tags=tuple(context.tags),
        metadata=metadata,
    )


__all__ = [
    "LogContext",
    "LogEntry",
    "LogLevel",
    "attribute",
    "create_log_entry",
]
