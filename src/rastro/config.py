"""Runtime configuration for rastro.

A RastroConfig snapshot is frozen; the ConfigStore swaps whole snapshots.
Temporary overrides (tests, isolated request handling) go through a
ContextVar so they only affect the current thread or task.

Thread Safety:
    configure()/reset() replace the snapshot under a lock and notify
    subscribers outside it. override()/config_context() are context-local
    via ContextVar; other threads keep seeing the store's snapshot.

Usage:
    from rastro.config import configure, config_context, RastroConfig

    configure(level="debug", include_source_path=True)

    with config_context(RastroConfig(level="error", silent=True)):
        ...  # quiet here, restored afterwards

"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from rastro.errors import ConfigError
from rastro.names import DEFAULT_NAMES, MonitoredNameSet
from rastro.utils.logger import get_logger

if TYPE_CHECKING:
    from rastro.entry import LogEntry

logger = get_logger(__name__)

Environment = Literal["development", "production", "test"]
SourcePathMode = bool | Literal["auto"]

ENVIRONMENTS: tuple[str, ...] = ("development", "production", "test")

# Checked in order; the first variable holding a known environment wins
ENVIRONMENT_VARIABLES = ("RASTRO_ENV", "NODE_ENV")


class LogLevel(Enum):
    """Log severity, lowest first. SILENT disables output."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SILENT = "silent"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: LogLevel | str) -> LogLevel:
        """Coerce a level name (case-insensitive) to a LogLevel.

        Raises:
            ConfigError: If the name is not a known level
        """
        if isinstance(value, LogLevel):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(level.value for level in cls)
            raise ConfigError(
                f"unknown level {value!r} (expected one of {names})", field="level"
            ) from None


_SEVERITY = {level: index for index, level in enumerate(LogLevel)}


def detect_environment(environ: Mapping[str, str] | None = None) -> Environment:
    """Detect the environment from RASTRO_ENV, then NODE_ENV.

    Defaults to "production" so attribution stays off unless asked for.
    """
    environ = os.environ if environ is None else environ
    for variable in ENVIRONMENT_VARIABLES:
        value = environ.get(variable, "").strip().lower()
        if value in ENVIRONMENTS:
            return value  # type: ignore[return-value]
    return "production"


@dataclass(frozen=True, slots=True)
class RastroConfig:
    """Immutable runtime configuration.

    Attributes:
        environment: "development", "production" or "test"
        level: Minimum level emitted
        include_source_path: True, False, or "auto" (development only)
        include_stack_trace: Attach a filtered stack trace to error entries
        silent: Suppress all output
        names: Identifiers the rewriter monitors (read by Rewriter/transform
            when no explicit names are given)
        performance: Enable Logger.time/time_end measurements
        entry_filter: Optional predicate; entries it rejects are not emitted
        entry_transformer: Optional callback applied to each emitted entry

    Raises:
        ConfigError: On an unknown environment, level or source-path mode

    """

    environment: Environment = "production"
    level: LogLevel = LogLevel.WARN
    include_source_path: SourcePathMode = "auto"
    include_stack_trace: bool = False
    silent: bool = False
    names: MonitoredNameSet = DEFAULT_NAMES
    performance: bool = True
    entry_filter: Callable[[LogEntry], bool] | None = None
    entry_transformer: Callable[[LogEntry], LogEntry] | None = None

    def __post_init__(self) -> None:
        if self.environment not in ENVIRONMENTS:
            raise ConfigError(
                f"unknown environment {self.environment!r} "
                f"(expected one of {', '.join(ENVIRONMENTS)})",
                field="environment",
            )
        object.__setattr__(self, "level", LogLevel.parse(self.level))
        if self.include_source_path not in (True, False, "auto"):
            raise ConfigError(
                f"expected True, False or 'auto', got {self.include_source_path!r}",
                field="include_source_path",
            )
        if isinstance(self.names, Mapping):
            object.__setattr__(self, "names", MonitoredNameSet(**self.names))

    @classmethod
    def defaults(cls, environment: Environment | None = None) -> RastroConfig:
        """Environment-dependent defaults.

        Production logs warnings and up without stack traces; development
        and test log everything with stack traces on errors.
        """
        environment = environment or detect_environment()
        production = environment == "production"
        return cls(
            environment=environment,
            level=LogLevel.WARN if production else LogLevel.TRACE,
            include_stack_trace=not production,
        )

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> RastroConfig:
        """Create RastroConfig from dictionary.

        Only includes keys that are valid RastroConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = RastroConfig.from_dict({
            ...     "level": "debug",
            ...     "include_source_path": True,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.level
            <LogLevel.DEBUG: 'debug'>

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)

    def should_log(self, level: LogLevel | str) -> bool:
        """Check whether an entry at ``level`` passes the configured minimum."""
        if self.silent:
            return False
        target = LogLevel.parse(level)
        if target is LogLevel.SILENT:
            return False
        return target.severity >= self.level.severity

    @property
    def should_include_source_path(self) -> bool:
        if self.include_source_path == "auto":
            return self.environment == "development"
        return bool(self.include_source_path)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


ConfigSubscriber = Callable[[RastroConfig], None]

PRESETS: dict[str, dict[str, Any]] = {
    "development": {
        "environment": "development",
        "level": LogLevel.TRACE,
        "include_source_path": True,
        "include_stack_trace": True,
    },
    "production": {
        "environment": "production",
        "level": LogLevel.WARN,
        "include_source_path": False,
        "include_stack_trace": False,
    },
    "test": {
        "environment": "test",
        "level": LogLevel.ERROR,
        "silent": True,
    },
    "verbose": {
        "level": LogLevel.TRACE,
        "include_source_path": True,
        "include_stack_trace": True,
    },
    "minimal": {
        "level": LogLevel.INFO,
        "include_source_path": False,
    },
}


class ConfigStore:
    """Holder of the active RastroConfig snapshot.

    Usage:
            >>> store = ConfigStore(lambda: RastroConfig())
            >>> store.configure(level="debug").level
            <LogLevel.DEBUG: 'debug'>
            >>> store.reset().level
            <LogLevel.WARN: 'warn'>

    """

    __slots__ = ("_defaults", "_config", "_lock", "_subscribers", "_override")

    def __init__(self, defaults: Callable[[], RastroConfig] = RastroConfig.defaults) -> None:
        self._defaults = defaults
        self._config = defaults()
        self._lock = threading.Lock()
        self._subscribers: list[ConfigSubscriber] = []
        self._override: ContextVar[RastroConfig | None] = ContextVar(
            "rastro_config_override", default=None
        )

    def get(self) -> RastroConfig:
        """Active config: the context override if set, else the snapshot."""
        override = self._override.get()
        return override if override is not None else self._config

    def configure(self, **overrides: Any) -> RastroConfig:
        """Replace the snapshot with ``overrides`` applied, then notify.

        Raises:
            ConfigError: On an unknown field or invalid value
        """
        valid_fields = {f.name for f in fields(RastroConfig)}
        unknown = sorted(set(overrides) - valid_fields)
        if unknown:
            raise ConfigError(f"unknown option(s): {', '.join(unknown)}")

        with self._lock:
            self._config = replace(self._config, **overrides)
            config = self._config
            subscribers = list(self._subscribers)
        logger.debug("Configuration updated: %s", ", ".join(sorted(overrides)) or "(none)")
        self._notify(subscribers, config)
        return config

    def reset(self) -> RastroConfig:
        """Restore defaults, then notify."""
        with self._lock:
            self._config = self._defaults()
            config = self._config
            subscribers = list(self._subscribers)
        self._notify(subscribers, config)
        return config

    def subscribe(self, callback: ConfigSubscriber) -> Callable[[], None]:
        """Register a change callback.

        Returns:
            A function that removes the callback (idempotent)
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @contextmanager
    def override(self, config: RastroConfig) -> Iterator[RastroConfig]:
        """Use ``config`` for the current context only.

        Restores the previous override even if an exception is raised.
        """
        token = self._override.set(config)
        try:
            yield config
        finally:
            self._override.reset(token)

    @staticmethod
    def _notify(subscribers: list[ConfigSubscriber], config: RastroConfig) -> None:
        for subscriber in subscribers:
            subscriber(config)


# Module-level default store (reused, never recreated)
_DEFAULT_STORE = ConfigStore()


def get_config() -> RastroConfig:
    """Get the active configuration for this context."""
    return _DEFAULT_STORE.get()


def configure(**overrides: Any) -> RastroConfig:
    """Update the global configuration. See ConfigStore.configure()."""
    return _DEFAULT_STORE.configure(**overrides)


def reset_config() -> RastroConfig:
    """Restore environment-dependent defaults."""
    return _DEFAULT_STORE.reset()


def subscribe_to_config(callback: ConfigSubscriber) -> Callable[[], None]:
    """Register a callback run after every configure()/reset()."""
    return _DEFAULT_STORE.subscribe(callback)


@contextmanager
def config_context(config: RastroConfig) -> Iterator[RastroConfig]:
    """Context manager for temporary config changes.

    Example:
        >>> with config_context(RastroConfig(level="error")):
        ...     get_config().level
        <LogLevel.ERROR: 'error'>

    """
    with _DEFAULT_STORE.override(config) as active:
        yield active


def apply_preset(name: str) -> RastroConfig:
    """Apply a named preset from PRESETS on top of the current config.

    Raises:
        ConfigError: If the preset does not exist
    """
    try:
        preset = PRESETS[name]
    except KeyError:
        raise ConfigError(
            f"unknown preset {name!r} (expected one of {', '.join(PRESETS)})", field="preset"
        ) from None
    return configure(**preset)


__all__ = [
    "ENVIRONMENTS",
    "PRESETS",
    "ConfigStore",
    "Environment",
    "LogLevel",
    "RastroConfig",
    "apply_preset",
    "config_context",
    "configure",
    "detect_environment",
    "get_config",
    "reset_config",
    "subscribe_to_config",
]
