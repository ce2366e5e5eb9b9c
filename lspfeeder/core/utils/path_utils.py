"""Path utility functions for lspfeeder."""

import os
from pathlib import Path


def normalize_file_path(path: Path | str) -> str:
    """Resolve ``path`` to its canonical absolute form.

    Falls back to the raw path when resolution fails (dangling symlink
    loops, permission errors on a parent).
    """
    try:
        return os.path.realpath(path, strict=True)
    except (OSError, ValueError):
        return str(path)


def path_to_url(path: Path | str) -> str:
    """Canonical, URL-escaped key used in the diagnostics output file.

    Only spaces are escaped, matching what downstream readers expect.
    """
    return normalize_file_path(path).replace(" ", "%20")


def uri_from_path(path: Path | str) -> str:
    """``file://`` URI for an absolute path."""
    return Path(os.path.abspath(path)).as_uri()


def file_extension(path: Path | str) -> str:
    """Extension of the last path component without the leading dot."""
    return os.path.splitext(os.path.basename(str(path)))[1].lstrip(".")


def file_suffix(name: str) -> str | None:
    """Last ``.suffix`` of a name including the dot, or None."""
    _, dot, tail = name.rpartition(".")
    if not dot or not tail:
        return None
    return "." + tail


def is_within_root(path: str, root: Path | str) -> bool:
    """Plain string prefix check of ``path`` against ``root``."""
    return path.startswith(str(root))
