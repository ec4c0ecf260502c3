"""Path normalization and grant pattern matching."""

from __future__ import annotations

import posixpath

WILDCARD = "*"


def normalize_path(path: str) -> str:
    """Normalize a remote path.

    - Ensures leading /
    - Resolves .. and . references
    - Removes double slashes
    - Removes trailing slash (except for root)

    Examples:
        normalize_path("docs") -> "/docs"
        normalize_path("/docs//a.txt") -> "/docs/a.txt"
        normalize_path("/docs/../b.txt") -> "/b.txt"
        normalize_path("/docs/") -> "/docs"
        normalize_path("") -> "/"
    """
    if not path:
        return "/"

    path = path.strip()

    if not path.startswith("/"):
        path = "/" + path

    path = posixpath.normpath(path)

    # normpath keeps a leading "//" (POSIX implementation-defined root)
    if path.startswith("//"):
        path = "/" + path.lstrip("/")

    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return path


def split_segments(path: str) -> list[str]:
    """Split a path into its non-empty segments.

    Examples:
        split_segments("/docs/a.txt") -> ["docs", "a.txt"]
        split_segments("/") -> []
    """
    path = normalize_path(path)
    return [part for part in path.split("/") if part]


def matches(pattern: str, path: str) -> bool:
    """Return True if grant *pattern* covers *path*.

    ``*`` covers every path.  Any other pattern covers the path itself and
    everything beneath it, compared segment by segment: ``/docs`` covers
    ``/docs/a.txt`` but not ``/docsx``.
    """
    if pattern.strip() == WILDCARD:
        return True

    pattern_parts = split_segments(pattern)
    path_parts = split_segments(path)
    if len(pattern_parts) > len(path_parts):
        return False
    return path_parts[: len(pattern_parts)] == pattern_parts


def join_remote_path(directory: str, name: str) -> str:
    """Join a directory and a file name into a normalized remote path.

    Examples:
        join_remote_path("/", "a.txt") -> "/a.txt"
        join_remote_path("/docs/", "a.txt") -> "/docs/a.txt"
    """
    return normalize_path(f"{directory}/{name}")


def parent_path(path: str) -> str:
    """Return the parent directory of *path* (root is its own parent)."""
    path = normalize_path(path)
    if path == "/":
        return "/"
    return path.rsplit("/", 1)[0] or "/"


def breadcrumbs(path: str) -> list[tuple[str, str]]:
    """Return ``(label, path)`` pairs from the root down to *path*.

    Examples:
        breadcrumbs("/docs/reports") ->
            [("Root", "/"), ("docs", "/docs"), ("reports", "/docs/reports")]
    """
    crumbs = [("Root", "/")]
    current = ""
    for part in split_segments(path):
        current = f"{current}/{part}"
        crumbs.append((part, current))
    return crumbs
