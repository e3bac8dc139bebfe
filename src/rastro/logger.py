"""Minimal runtime logger front-end.

Builds attributed LogEntry records and hands them to the standard library
``logging`` logger ``rastro.console``. Each record carries the entry as
``record.rastro_entry`` so handlers and formatters can use the structured
fields; rastro itself installs no handlers.

Rewritten call sites pass the injected location as the third argument:

    logger.info("saved", undefined, { __source: { fileName: "src/cart", lineNumber: 12 } })

which arrives here as ``meta={"__source": {...}}``.

Timers and counters (time/time_end/measure, count/count_reset) live in a
meter store shared by a logger and the children derived from it.

Thread Safety:
Logger instances are immutable; with_* methods return new loggers.
Emission reads the active config snapshot once per call. The shared meter
store guards its timers and counters with a lock.

"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from time import perf_counter
from typing import Any, TypeVar

from rastro.config import LogLevel, RastroConfig, get_config
from rastro.entry import LogContext, LogEntry, create_log_entry
from rastro.stack.resolver import SourceLocationResolver

# Non-internal frames between a Logger method and the user's call site.
# Every rastro frame is filtered as internal, so none need skipping.
LOGGER_SKIP_FRAMES = 0

CONSOLE_LOGGER_NAME = "rastro.console"

# Record attribute holding the LogEntry
ENTRY_ATTRIBUTE = "rastro_entry"

TRACE = logging.DEBUG - 5

T = TypeVar("T")

_STDLIB_LEVELS = {
    LogLevel.TRACE: TRACE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def render_message(entry: LogEntry, *, development: bool = True) -> str:
    """Plain-text message for the stdlib record."""
    location = entry.location.format(development=development)
    if not location:
        return entry.message
    return f"{entry.message} ({location})"


@dataclass(frozen=True, slots=True)
class PerformanceMeasurement:
    """One finished timer.

    Attributes:
        name: Timer label
        duration: Elapsed milliseconds
        start_time: perf_counter reading at start, in milliseconds
        end_time: perf_counter reading at end, in milliseconds
        metadata: Metadata given to time()
    """

    name: str
    duration: float
    start_time: float
    end_time: float
    metadata: Mapping[str, Any] | None = None


def _now_ms() -> float:
    return perf_counter() * 1000


class _Meters:
    """Timers and counters keyed by label."""

    __slots__ = ("_lock", "_timers", "_counters")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timers: dict[str, tuple[float, Mapping[str, Any] | None]] = {}
        self._counters: dict[str, int] = {}

    def start(self, label: str, metadata: Mapping[str, Any] | None) -> None:
        with self._lock:
            self._timers[label] = (_now_ms(), metadata)

    def stop(self, label: str) -> PerformanceMeasurement | None:
        end_time = _now_ms()
        with self._lock:
            timer = self._timers.pop(label, None)
        if timer is None:
            return None
        start_time, metadata = timer
        return PerformanceMeasurement(
            name=label,
            duration=end_time - start_time,
            start_time=start_time,
            end_time=end_time,
            metadata=metadata,
        )

    def increment(self, label: str) -> int:
        with self._lock:
            count = self._counters.get(label, 0) + 1
            self._counters[label] = count
        return count

    def reset(self, label: str) -> None:
        with self._lock:
            self._counters.pop(label, None)


class Logger:
    """Context-carrying logger.

    Usage:
            >>> log = Logger().for_component("Cart").with_tags("checkout")
            >>> entry = log.warn("Stock low", {"sku": "A-1"})

    """

    __slots__ = ("_context", "_config", "_resolver", "_sink", "_meters")

    def __init__(
        self,
        context: LogContext | None = None,
        *,
        config: RastroConfig | None = None,
        resolver: SourceLocationResolver | None = None,
        sink: logging.Logger | None = None,
    ) -> None:
        """Initialize logger.

        Args:
            context: Base context for every entry
            config: Fixed config snapshot (defaults to the active config per call)
            resolver: Stack resolver (defaults to the live interpreter stack)
            sink: Stdlib logger receiving records (defaults to rastro.console)
        """
        self._context = context or LogContext()
        self._config = config
        self._resolver = resolver or SourceLocationResolver()
        self._sink = sink or logging.getLogger(CONSOLE_LOGGER_NAME)
        self._meters = _Meters()

    @property
    def context(self) -> LogContext:
        return self._context

    def _child(self, context: LogContext) -> Logger:
        child = Logger(
            self._context.merged(context),
            config=self._config,
            resolver=self._resolver,
            sink=self._sink,
        )
        child._meters = self._meters
        return child

    def with_context(self, context: LogContext) -> Logger:
        """Create a child logger with ``context`` merged in."""
        return self._child(context)

    def for_component(self, component_name: str, component_id: str | None = None) -> Logger:
        """Create a child logger for one component instance."""
        return self._child(
            LogContext(
                component_name=component_name,
                component_id=component_id or f"{component_name}_{time.time_ns() // 1_000_000}",
            )
        )

    def with_tags(self, *tags: str) -> Logger:
        return self._child(LogContext(tags=tags))

    def with_metadata(self, metadata: Mapping[str, Any]) -> Logger:
        return self._child(LogContext(metadata=dict(metadata)))

    def log(
        self,
        level: LogLevel | str,
        message: str,
        data: Any = None,
        meta: Mapping[str, Any] | None = None,
    ) -> LogEntry | None:
        """Log at any level.

        Args:
            level: Severity
            message: Log message
            data: Optional payload
            meta: Per-call metadata; ``__source`` here is injected attribution

        Returns:
            The emitted entry, or None if gated by level, silence or filter
        """
        config = self._config or get_config()
        level = LogLevel.parse(level)
        if not config.should_log(level):
            return None

        context = self._context
        if isinstance(meta, Mapping) and meta:
            context = context.merged(LogContext(metadata=dict(meta)))

        entry = create_log_entry(
            level,
            message,
            data,
            context,
            skip_frames=LOGGER_SKIP_FRAMES,
            config=config,
            resolver=self._resolver,
        )
        if config.entry_filter is not None and not config.entry_filter(entry):
            return None
        if config.entry_transformer is not None:
            entry = config.entry_transformer(entry)

        self._sink.log(
            _STDLIB_LEVELS[entry.level],
            "%s",
            render_message(entry, development=config.is_development),
            extra={ENTRY_ATTRIBUTE: entry},
        )
        return entry

    def trace(
        self, message: str, data: Any = None, meta: Mapping[str, Any] | None = None
    ) -> LogEntry | None:
        return self.log(LogLevel.TRACE, message, data, meta)

    def debug(
        self, message: str, data: Any = None, meta: Mapping[str, Any] | None = None
    ) -> LogEntry | None:
        return self.log(LogLevel.DEBUG, message, data, meta)

    def info(
        self, message: str, data: Any = None, meta: Mapping[str, Any] | None = None
    ) -> LogEntry | None:
        return self.log(LogLevel.INFO, message, data, meta)

    def warn(
        self, message: str, data: Any = None, meta: Mapping[str, Any] | None = None
    ) -> LogEntry | None:
        return self.log(LogLevel.WARN, message, data, meta)

    def error(
        self, message: str, data: Any = None, meta: Mapping[str, Any] | None = None
    ) -> LogEntry | None:
        return self.log(LogLevel.ERROR, message, data, meta)

    def time(self, label: str, metadata: Mapping[str, Any] | None = None) -> None:
        """Start the timer ``label``, replacing a running one of the same name."""
        if not (self._config or get_config()).performance:
            return
        self._meters.start(label, metadata)

    def time_end(self, label: str) -> PerformanceMeasurement | None:
        """Stop the timer ``label`` and log its duration at debug level.

        Returns:
            The measurement, or None if timing is disabled or ``label`` was
            never started (the latter is logged as a warning)
        """
        if not (self._config or get_config()).performance:
            return None
        measurement = self._meters.stop(label)
        if measurement is None:
            self.warn(f'Timer "{label}" does not exist')
            return None
        self.debug(f"{label}: {measurement.duration:.2f}ms", measurement.metadata)
        return measurement

    def measure(self, label: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``fn(*args, **kwargs)`` under the timer ``label``.

        The timer is ended whether ``fn`` returns or raises.

        Example:
            >>> total = Logger().measure("sum", sum, [1, 2, 3])
            >>> total
            6
        """
        self.time(label)
        try:
            return fn(*args, **kwargs)
        finally:
            self.time_end(label)

    def count(self, label: str) -> int:
        """Increment the counter ``label``, log it at debug level, return it."""
        count = self._meters.increment(label)
        self.debug(f"{label}: {count}")
        return count

    def count_reset(self, label: str) -> None:
        self._meters.reset(label)

    def assert_(self, condition: Any, message: str, data: Any = None) -> LogEntry | None:
        """Log ``Assertion failed: <message>`` at error level if ``condition`` is falsy."""
        if condition:
            return None
        return self.error(f"Assertion failed: {message}", data)


logger = Logger()
"""Shared default logger."""


__all__ = [
    "CONSOLE_LOGGER_NAME",
    "ENTRY_ATTRIBUTE",
    "LOGGER_SKIP_FRAMES",
    "TRACE",
    "Logger",
    "PerformanceMeasurement",
    "logger",
    "render_message",
]
