"""Exception classes for rastro.

Neither the rewriter nor the runtime resolver raises under normal operation;
every failure there degrades to "no attribution". These exceptions cover the
configuration surface, which is validated eagerly at setup time.
"""

from __future__ import annotations


class RastroError(Exception):
    """Base exception for all rastro errors.

    Subclass this for specific error categories.
    """

    pass


class ConfigError(RastroError):
    """Invalid configuration value.

    Raised by RastroConfig validation, MonitoredNameSet construction and
    preset lookup.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize config error with the offending field.

        Args:
            message: Error description
            field: Name of the config field that failed validation (optional)
        """
        self.message = message
        self.field = field

        prefix = f"{field}: " if field else ""
        super().__init__(f"{prefix}{message}")
