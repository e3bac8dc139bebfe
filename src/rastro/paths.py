"""Path cleaning shared by the rewriter and the runtime resolver.

Turns raw module ids, URLs and bundler chunk paths into short,
project-relative display paths:

    /home/me/shop/src/components/Cart.tsx  ->  src/components/Cart.tsx
    /_next/static/chunks/app/docs/page.js  ->  app/docs/page
    file:///work/web/app/layout.tsx      ->  app/layout.tsx
    /_next/static/chunks/4f9a1c2e7b.js     ->  [bundled]

Thread Safety:
All functions are pure; compiled patterns are module-level constants.

"""

from __future__ import annotations

import re

# Directory segments that start a project-relative path, in priority order
PROJECT_ROOT_MARKERS = ("src", "app", "pages", "components")

# Placeholder for bundled paths with no recoverable source path
BUNDLED_PLACEHOLDER = "[bundled]"

_SOURCE_EXTENSION = re.compile(r"\.(?:js|ts|tsx|jsx|mjs|cjs)$")
_SEPARATORS = re.compile(r"[/\\]")

_HASHED_SEGMENT = re.compile(r"\.[a-f0-9]{6,}\.")
_CHUNK_ID = re.compile(r"^[a-f0-9]{8,}$")
_BUNDLED_MARKERS = (
    "/_next/",
    "/chunks/",
    "webpack://",
    "webpack-internal://",
    "turbopack://",
    "__turbopack__",
    ".hot-update.",
    "node_modules__pnpm",
    "node_modules__npm",
)

_BUNDLED_LABEL = re.compile(r"\[bundled:\s*([^\]]+)\]")
_TURBOPACK_ENCODED = re.compile(r"node_modules__(?:pnpm|npm)_[^_]+__(.+)")
_TURBOPACK_PROTOCOL = re.compile(r"turbopack://[^/]+/(.+?)(?:\?|$|:)")
_MARKER_RECOVERY = tuple(
    re.compile(rf"(?:^|/)({marker}/[^?]+)\.(?:js|ts|tsx|jsx)")
    for marker in ("app", "pages", "src", "components")
)
_CHUNK_NAME = re.compile(r"chunks/([^/.]+)")
_HEX_NAME = re.compile(r"^[a-f0-9_]+$", re.IGNORECASE)
_HEX_ONLY = re.compile(r"^[a-f0-9]+$")

_SCHEME_PREFIXES = (
    re.compile(r"^webpack://[^/]*"),
    re.compile(r"^webpack-internal:///"),
    re.compile(r"^file://"),
)


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0].split("#", 1)[0]


def strip_extension(path: str) -> str:
    """Remove a trailing JS/TS source extension."""
    return _SOURCE_EXTENSION.sub("", path)


def extract_file_name(path: str) -> str:
    """Return the last path segment without query string or fragment.

    Example:
        >>> extract_file_name("http://localhost:3000/src/app.ts?t=123")
        'app.ts'
    """
    return _strip_query(_SEPARATORS.split(path)[-1])


def is_bundled_path(path: str) -> bool:
    """Check whether a path looks like bundler output rather than source."""
    if path.startswith("[bundled"):
        return True
    if any(marker in path for marker in _BUNDLED_MARKERS):
        return True
    if _HASHED_SEGMENT.search(path):
        return True
    return bool(_CHUNK_ID.match(path.split("/")[-1]))


def _recover_bundled(path: str) -> str:
    label = _BUNDLED_LABEL.search(path)
    if label:
        return label.group(1)

    if "node_modules__pnpm" in path or "node_modules__npm" in path:
        encoded = _TURBOPACK_ENCODED.search(path)
        if encoded:
            extracted = strip_extension(encoded.group(1).replace("__", "/"))
            if extracted and not _HEX_ONLY.match(extracted):
                return extracted

    if "turbopack://" in path:
        protocol = _TURBOPACK_PROTOCOL.search(path)
        if protocol:
            extracted = strip_extension(protocol.group(1))
            if extracted:
                return extracted

    for pattern in _MARKER_RECOVERY:
        match = pattern.search(path)
        if match:
            return match.group(1)

    chunk = _CHUNK_NAME.search(path)
    if chunk and not _HEX_NAME.match(chunk.group(1)):
        return f"[bundled: {chunk.group(1)}]"

    return BUNDLED_PLACEHOLDER


def _collapse_to_marker(path: str) -> tuple[str, bool]:
    parts = _SEPARATORS.split(path)
    directories = parts[:-1]
    for marker in PROJECT_ROOT_MARKERS:
        if marker in directories:
            return "/".join(parts[directories.index(marker) :]), True
    return path, False


def clean_file_path(path: str | None) -> str:
    """Clean a path for display.

    Bundled paths try, in order: an explicit ``[bundled: X]`` label, a
    Turbopack-encoded path, a ``turbopack://`` path, then the ``app/``,
    ``pages/``, ``src/`` and ``components/`` markers; otherwise a bundled
    placeholder. Other paths lose URL scheme prefixes and everything before
    the first project-root directory. ``node_modules`` and ``node:`` paths
    clean to the empty string.

    Args:
        path: Raw path, URL or module id

    Returns:
        Cleaned display path ("" for empty input)

    Examples:
        >>> clean_file_path("/Users/me/shop/src/app.ts")
        'src/app.ts'
        >>> clean_file_path("/_next/static/chunks/0a1b2c3d4e.js")
        '[bundled]'
    """
    if not path:
        return ""

    cleaned = _strip_query(path)

    if is_bundled_path(cleaned):
        return _recover_bundled(cleaned)

    for prefix in _SCHEME_PREFIXES:
        cleaned = prefix.sub("", cleaned)

    if "node_modules" in cleaned or cleaned.startswith("node:"):
        return ""

    collapsed, _ = _collapse_to_marker(cleaned)
    return collapsed


def injection_path(path: str | None) -> str:
    """Path embedded by the rewriter into ``__source.fileName``.

    Same as clean_file_path() without the extension; when no project-root
    marker is found the last two segments are kept instead of the full
    absolute path.

    Example:
        >>> injection_path("app/page.tsx")
        'app/page'
    """
    if not path:
        return ""

    cleaned = clean_file_path(path)
    if not cleaned:
        # node_modules and node: paths clean to ""
        cleaned = _strip_query(path)

    if not is_bundled_path(_strip_query(path)):
        _, found = _collapse_to_marker(cleaned)
        if not found:
            parts = [part for part in _SEPARATORS.split(cleaned) if part]
            if len(parts) > 2:
                cleaned = "/".join(parts[-2:])

    return strip_extension(cleaned.replace("\\", "/"))
