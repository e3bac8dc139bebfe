"""
Rastro: source locations for log calls.

Stamps each log call with the file, line and enclosing function of its call
site. Two attribution paths produce the same SourceLocationRecord:

- build time: a call-site rewriter injects ``__source`` object literals
  into monitored JavaScript/TypeScript calls
- run time: a stack resolver parses captured stack text (V8, Firefox or bare
  locations) and picks the first frame outside library code

Injected locations always win over resolved ones.

Quick Start:
    >>> from rastro import transform
    >>> transform('logger.info("hi")', "src/app.ts").text
    'logger.info("hi", undefined, { __source: { fileName: "src/app", lineNumber: 1 } })'

    >>> from rastro import parse_frame
    >>> parse_frame("    at Foo.bar (src/app.ts:12:4)").function_name
    'Foo.bar'

    >>> from rastro import Logger, configure
    >>> _ = configure(environment="development", include_source_path=True)
    >>> entry = Logger().info("Saved")     # entry.location points here

Installation:
    pip install rastro              # zero runtime dependencies
"""

from rastro.config import (
    PRESETS,
    ConfigStore,
    LogLevel,
    RastroConfig,
    apply_preset,
    config_context,
    configure,
    get_config,
    reset_config,
    subscribe_to_config,
)
from rastro.entry import LogContext, LogEntry, create_log_entry
from rastro.errors import ConfigError, RastroError
from rastro.lexer import LexMode, LexState, classify
from rastro.location import SOURCE_KEY, InjectedSource, SourceLocationRecord
from rastro.logger import Logger, PerformanceMeasurement
from rastro.names import DEFAULT_NAMES, CallKind, MonitoredNameSet
from rastro.paths import clean_file_path, extract_file_name, injection_path, is_bundled_path
from rastro.rewriter import Rewriter, TransformResult, find_calls, transform
from rastro.stack import (
    FrameFilter,
    SourceLocationResolver,
    StackFrame,
    capture_stack,
    get_stack_trace,
    is_internal,
    parse_frame,
    parse_stack,
    resolve,
)

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022 - grouped by category
    "__version__",
    # Rewriter
    "CallKind",
    "DEFAULT_NAMES",
    "MonitoredNameSet",
    "Rewriter",
    "TransformResult",
    "find_calls",
    "transform",
    # Lexer
    "LexMode",
    "LexState",
    "classify",
    # Stack resolver
    "FrameFilter",
    "SourceLocationResolver",
    "StackFrame",
    "capture_stack",
    "get_stack_trace",
    "is_internal",
    "parse_frame",
    "parse_stack",
    "resolve",
    # Locations and paths
    "SOURCE_KEY",
    "InjectedSource",
    "SourceLocationRecord",
    "clean_file_path",
    "extract_file_name",
    "injection_path",
    "is_bundled_path",
    # Logging front-end
    "LogContext",
    "LogEntry",
    "LogLevel",
    "Logger",
    "PerformanceMeasurement",
    "create_log_entry",
    # Configuration
    "PRESETS",
    "ConfigStore",
    "RastroConfig",
    "apply_preset",
    "config_context",
    "configure",
    "get_config",
    "reset_config",
    "subscribe_to_config",
    # Errors
    "ConfigError",
    "RastroError",
]
