"""Monitored identifier groups for the call-site rewriter.

Three disjoint groups, each with its own injection policy:
- hooks: value-producing calls such as ``useLogger(...)``
- wrappers: component-wrapping calls such as ``withLogger(Component)``
- methods: ``<receiver>.<method>(...)`` calls on a small fixed set of
  receiver names, such as ``logger.info(...)``

Thread Safety:
MonitoredNameSet is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from rastro.errors import ConfigError


class CallKind(Enum):
    """Kind of monitored call, selecting the injection policy."""

    HOOK = auto()  # useLogger(...)
    WRAPPER = auto()  # withLogger(Component)
    METHOD = auto()  # logger.info(...)


DEFAULT_HOOKS = frozenset(
    {
        "useLogger",
        "useLifecycleLogger",
        "useRenderLogger",
        "usePropChangeLogger",
        "useStateLogger",
        "useEffectLogger",
        "useCallbackLogger",
        "useMemoLogger",
        "useTimer",
        "useConditionalLogger",
        "useWhyDidYouRender",
    }
)

DEFAULT_WRAPPERS = frozenset({"withLogger", "withLoggerRef"})

DEFAULT_RECEIVERS = frozenset({"logger", "log"})

DEFAULT_METHODS = frozenset({"trace", "debug", "info", "warn", "error", "log"})


def _is_identifier(name: str) -> bool:
    # JS identifiers may also contain "$"
    return bool(name) and name.replace("$", "_").isidentifier()


@dataclass(frozen=True, slots=True)
class MonitoredNameSet:
    """Immutable set of monitored identifiers.

    Attributes:
        hooks: Value-producing call names
        wrappers: Wrapping call names
        receivers: Receiver names for monitored method calls
        methods: Method names monitored on those receivers

    Raises:
        ConfigError: If a name is not an identifier or the hook and wrapper
            groups overlap.

    """

    hooks: frozenset[str] = DEFAULT_HOOKS
    wrappers: frozenset[str] = DEFAULT_WRAPPERS
    receivers: frozenset[str] = DEFAULT_RECEIVERS
    methods: frozenset[str] = DEFAULT_METHODS

    def __post_init__(self) -> None:
        for field_name in ("hooks", "wrappers", "receivers", "methods"):
            value = getattr(self, field_name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, field_name, frozenset(value))
            for name in getattr(self, field_name):
                if not _is_identifier(name):
                    raise ConfigError(f"not an identifier: {name!r}", field=field_name)
        overlap = self.hooks & self.wrappers
        if overlap:
            raise ConfigError(
                f"hook and wrapper groups overlap: {', '.join(sorted(overlap))}",
                field="wrappers",
            )

    def markers(self) -> tuple[str, ...]:
        """Substrings whose absence lets a whole file be skipped."""
        return (
            *sorted(self.hooks),
            *sorted(self.wrappers),
            *(f"{receiver}." for receiver in sorted(self.receivers)),
        )


DEFAULT_NAMES = MonitoredNameSet()
