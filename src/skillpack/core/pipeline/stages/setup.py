from __future__ import annotations

"""
Pipeline Setup Stage.

Resolves the root document and the output location before any work
begins, and guards output locations that would overwrite or delete the
sources being packaged.
"""

import logging
import os
from typing import Any, Dict, Iterable

from skillpack.domain.constants import (
    CONTAINER_SUFFIX,
    DEFAULT_COMBINED_DIR,
    DEFAULT_PACKAGE_NAME,
    FORMAT_COMBINED,
    FORMAT_CONTAINER,
)
from skillpack.domain.errors import OutputPathError, RootNotFoundError
from skillpack.infra.fs import canonical_path, normalize_path

logger = logging.getLogger(__name__)


def resolve_root(cfg: Dict[str, Any]) -> str:
    """
    Return the canonical root document path.

    Raises:
        RootNotFoundError: If the path is empty or not an existing file.
    """
    raw = cfg.get("root_path", "")
    if not raw:
        raise RootNotFoundError("(no root document given)")
    root = canonical_path(normalize_path(raw, os.getcwd()))
    if not os.path.isfile(root):
        raise RootNotFoundError(raw)
    return root


def default_output_path(root_path: str, output_format: str) -> str:
    """
    Derive the output location when none is given, relative to the CWD.

    Container: '<dir>.skill'. Combined: 'dist/'. Directory layouts:
    'dist/<dir>/'. '<dir>' is the name of the root document's directory.
    """
    name = os.path.basename(os.path.dirname(root_path)) or DEFAULT_PACKAGE_NAME
    if output_format == FORMAT_CONTAINER:
        return os.path.abspath(f"{name}{CONTAINER_SUFFIX}")
    if output_format == FORMAT_COMBINED:
        return os.path.abspath(DEFAULT_COMBINED_DIR)
    return os.path.abspath(os.path.join(DEFAULT_COMBINED_DIR, name))


def resolve_output_path(cfg: Dict[str, Any], root_path: str) -> str:
    """Explicit output path if configured, else the format default."""
    explicit = cfg.get("output_path", "")
    if explicit:
        return canonical_path(normalize_path(explicit, os.getcwd()))
    return default_output_path(root_path, cfg["output_format"])


def check_output_dir(output_dir: str, traced: Iterable[str]) -> None:
    """
    Refuse directory outputs that hold any traced source, root document included.

    Raises:
        OutputPathError: If writing or clearing there could touch sources.
    """
    out = canonical_path(output_dir)
    prefix = out.rstrip(os.sep) + os.sep
    inside = sorted(p for p in traced if p.startswith(prefix))
    if inside:
        raise OutputPathError(
            f"Output directory '{out}' contains packaged sources: {', '.join(inside)}"
        )


def check_output_file(output_file: str, traced: Iterable[str]) -> None:
    """
    Refuse a container path that is one of the traced source files.

    Raises:
        OutputPathError: If the container would overwrite a source.
    """
    out = canonical_path(output_file)
    if out in set(traced):
        raise OutputPathError(f"Output file '{out}' is one of the packaged sources")
    if os.path.isdir(out):
        raise OutputPathError(f"Output file '{out}' is an existing directory")
