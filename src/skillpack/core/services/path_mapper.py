from __future__ import annotations

"""
Destination Path Planning.

Computes where every non-root traced file lands in the output. The flat
plan maps each file to '<category>/<basename>' and fails if any two
sources share a destination; the preserve plan keeps root-relative paths
and fails if a file lives outside the root directory. All writer
strategies consume these plans, so collision detection exists once.
"""

import logging
import os
from typing import Dict, Iterable, List, Mapping

from skillpack.domain.constants import Category
from skillpack.domain.errors import DestinationCollisionError, PathEscapeError
from skillpack.domain.pack_models import TraceResult
from skillpack.infra.fs import escapes_root, relative_posix

logger = logging.getLogger(__name__)


def build_path_map(
        files: Iterable[str],
        categories: Mapping[str, Category],
        root_path: str,
) -> Dict[str, str]:
    """
    Map root-relative source paths to flat destinations.

    The destination multimap is built completely before any verdict, so
    the error reports every colliding destination with all its sources.

    Args:
        files: Absolute paths of traced files.
        categories: Category per non-root file.
        root_path: Absolute path of the root document (excluded).

    Returns:
        Dict[str, str]: e.g. {"docs/api.md": "references/api.md"}.

    Raises:
        DestinationCollisionError: If any destination has several sources.
    """
    root_dir = os.path.dirname(root_path)
    destinations: Dict[str, List[str]] = {}
    path_map: Dict[str, str] = {}

    for file in files:
        if file == root_path:
            continue
        rel_path = relative_posix(file, root_dir)
        dest = f"{categories[file].value}/{os.path.basename(file)}"
        destinations.setdefault(dest, []).append(rel_path)
        path_map[rel_path] = dest

    collisions = {dest: srcs for dest, srcs in destinations.items() if len(srcs) > 1}
    if collisions:
        logger.debug(f"{len(collisions)} flat destination(s) collide")
        raise DestinationCollisionError(collisions)

    return path_map


def build_preserve_map(files: Iterable[str], root_path: str) -> Dict[str, str]:
    """
    Map root-relative source paths onto themselves.

    Raises:
        PathEscapeError: Listing every file outside the root directory.
    """
    root_dir = os.path.dirname(root_path)
    path_map: Dict[str, str] = {}
    escaping: List[str] = []

    for file in files:
        if file == root_path:
            continue
        rel_path = relative_posix(file, root_dir)
        if escapes_root(rel_path):
            escaping.append(rel_path)
        path_map[rel_path] = rel_path

    if escaping:
        raise PathEscapeError(escaping)
    return path_map


def plan_destinations(trace: TraceResult, flatten: bool) -> Dict[str, str]:
    """Build the flat or preserve plan for a categorized trace."""
    if flatten:
        return build_path_map(trace.files, trace.categories, trace.root_path)
    return build_preserve_map(trace.files, trace.root_path)
