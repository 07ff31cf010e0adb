"""POSIX path helpers for test files and artifact locations."""

import posixpath
from pathlib import Path


def normalize(path: str) -> str:
    """Normalize ``path``, resolving ``.``/``..`` and keeping a trailing slash."""
    if not path:
        return "."

    trailing_separator = path.endswith("/")
    result = posixpath.normpath(path)

    # POSIX keeps a leading "//"; collapse it like any other separator run
    if result.startswith("//"):
        result = "/" + result.lstrip("/")

    if trailing_separator and result != "/":
        result += "/"

    return result


def join(*parts: str) -> str:
    """Join non-empty ``parts`` with ``/`` and normalize the result."""
    joined = "/".join(part for part in parts if part)
    if not joined:
        return "."
    return normalize(joined)


def display_path(path: str, cwd: Path | None = None) -> str:
    """Return ``path`` as a ``./``-prefixed path relative to ``cwd``."""
    base = str(cwd if cwd is not None else Path.cwd())
    absolute = path if path.startswith("/") else join(base, path)

    relative = posixpath.relpath(absolute, base)
    if relative.startswith(".."):
        return absolute
    return "./" + relative
