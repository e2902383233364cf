from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Path normalization, root-relative naming and directory housekeeping
shared by the tracer, the path remapper and the output writers.
"""

import logging
import os
import shutil
import stat
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def canonical_path(path: str) -> str:
    """Absolute, normalized form of a path used as the trace identity key."""
    return os.path.normpath(os.path.abspath(path))


def relative_posix(path: str, root_dir: str) -> str:
    """
    Express a path relative to the root directory with '/' separators.

    Args:
        path: Absolute file path.
        root_dir: Directory containing the root document.

    Returns:
        str: Root-relative path, possibly starting with '../'.
    """
    return os.path.relpath(path, root_dir).replace(os.sep, "/")


def escapes_root(rel_path: str) -> bool:
    """Check whether a root-relative path points outside the root directory."""
    return rel_path == ".." or rel_path.startswith("../") or os.path.isabs(rel_path)


def is_markdown(path: str, extensions: Sequence[str]) -> bool:
    """Check the file extension against the markdown extension list."""
    return os.path.splitext(path)[1].lower() in extensions


def is_executable(path: str) -> bool:
    """Check whether any execute permission bit is set on the file."""
    mode = os.stat(path).st_mode
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))

# -----------------------------------------------------------------------------
# DIRECTORY MANAGEMENT API
# -----------------------------------------------------------------------------

def ensure_parent_dir(path: str) -> None:
    """Create the parent directory hierarchy of a target file."""
    parent = os.path.dirname(os.path.abspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)


def clear_directory(path: str) -> bool:
    """
    Remove a previously generated output directory.

    Args:
        path: Directory to delete.

    Returns:
        bool: True if something was removed.
    """
    if not os.path.lexists(path):
        return False
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)
    logger.debug(f"Removed stale output: {path}")
    return True


def copy_file(source: str, destination: str) -> None:
    """Copy file content and permission bits, creating parents as needed."""
    ensure_parent_dir(destination)
    shutil.copy2(source, destination)


def write_text(destination: str, content: str) -> None:
    """Write text verbatim (no newline translation) as UTF-8."""
    ensure_parent_dir(destination)
    with open(destination, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def read_text(path: str, errors: str = "strict") -> str:
    """Read a UTF-8 text file verbatim (no newline translation)."""
    with open(path, "r", encoding="utf-8", errors=errors, newline="") as f:
        return f.read()
