"""Build-tool adapter: which files to rewrite, and rewriting them on disk.

The rewriter core takes text and never decides which files it sees. This
module is that policy for file-based callers (the CLI, build hooks):

- include: module ids matching ``\\.[jt]sx?$``
- exclude: ``node_modules``, the library's own dist output, ``.next``
- plus the file-scope skip table from rastro.stack.filters

Thread Safety:
FileFilter is immutable. transform_file() touches only its own path.

"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from rastro.errors import ConfigError
from rastro.names import MonitoredNameSet
from rastro.rewriter import Rewriter, TransformResult
from rastro.stack.filters import is_internal_file
from rastro.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_INCLUDE = r"\.[jt]sx?$"
DEFAULT_EXCLUDE = r"node_modules|rastro/dist|\.next"


def _compile(pattern: str | re.Pattern[str] | None, field: str) -> re.Pattern[str] | None:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"invalid regex {pattern!r}: {e}", field=field) from e


@dataclass(frozen=True, slots=True)
class FileFilter:
    """Include/exclude policy for source files.

    Paths are matched in forward-slash form. ``None`` disables a pattern.

    Attributes:
        include: Files must match this to be rewritten
        exclude: Files (and directories) matching this are skipped

    Raises:
        ConfigError: If a pattern is not a valid regular expression

    """

    include: re.Pattern[str] | None = re.compile(DEFAULT_INCLUDE)
    exclude: re.Pattern[str] | None = re.compile(DEFAULT_EXCLUDE)

    def __post_init__(self) -> None:
        object.__setattr__(self, "include", _compile(self.include, "include"))
        object.__setattr__(self, "exclude", _compile(self.exclude, "exclude"))

    def accepts(self, path: str | os.PathLike[str]) -> bool:
        """Check whether a file should be offered to the rewriter.

        Example:
            >>> FileFilter().accepts("src/app/page.tsx")
            True
            >>> FileFilter().accepts("node_modules/react/index.js")
            False
        """
        normalized = os.fspath(path).replace("\\", "/")
        if self.exclude is not None and self.exclude.search(normalized):
            return False
        if self.include is not None and not self.include.search(normalized):
            return False
        return not is_internal_file(normalized)

    def prunes(self, directory: str | os.PathLike[str]) -> bool:
        """Check whether a whole directory can be skipped while walking."""
        if self.exclude is None:
            return False
        normalized = os.fspath(directory).replace("\\", "/").rstrip("/") + "/"
        return self.exclude.search(normalized) is not None


DEFAULT_FILE_FILTER = FileFilter()


def iter_source_files(
    root: str | os.PathLike[str], file_filter: FileFilter | None = None
) -> Iterator[Path]:
    """Yield accepted files under ``root`` in sorted order.

    A file ``root`` is yielded alone if accepted. Excluded directories are
    not descended into.
    """
    file_filter = file_filter or DEFAULT_FILE_FILTER
    root_path = Path(root)
    if root_path.is_file():
        if file_filter.accepts(root_path):
            yield root_path
        return

    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = sorted(d for d in dirnames if not file_filter.prunes(Path(dirpath, d)))
        for filename in sorted(filenames):
            path = Path(dirpath, filename)
            if file_filter.accepts(path):
                yield path


def transform_file(
    path: str | os.PathLike[str],
    *,
    write: bool = False,
    names: MonitoredNameSet | None = None,
    encoding: str = "utf-8",
) -> TransformResult:
    """Rewrite one file.

    Args:
        path: File to rewrite; its path is also the logical module id
        write: Write the result back when something changed
        names: Monitored identifiers (defaults to the configured set)
        encoding: File encoding

    Returns:
        TransformResult for the file

    Raises:
        OSError: If the file cannot be read or written
        UnicodeDecodeError: If the file is not valid in ``encoding``
    """
    file_path = Path(path)
    source = file_path.read_text(encoding=encoding)
    result = Rewriter(names).transform(source, file_path.as_posix())
    if result.changed:
        logger.debug("Injected %d location(s) into %s", len(result.edits), file_path)
        if write:
            file_path.write_text(result.text, encoding=encoding)
    return result


def transform_tree(
    root: str | os.PathLike[str],
    *,
    write: bool = False,
    file_filter: FileFilter | None = None,
    names: MonitoredNameSet | None = None,
) -> Iterator[tuple[Path, TransformResult]]:
    """Rewrite every accepted file under ``root``, lazily."""
    for path in iter_source_files(root, file_filter):
        yield path, transform_file(path, write=write, names=names)


__all__ = [
    "DEFAULT_EXCLUDE",
    "DEFAULT_FILE_FILTER",
    "DEFAULT_INCLUDE",
    "FileFilter",
    "iter_source_files",
    "transform_file",
    "transform_tree",
]
