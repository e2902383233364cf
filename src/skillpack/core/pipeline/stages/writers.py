from __future__ import annotations

"""
Output Writer Strategies.

Three ways of materializing a categorized trace, all driven by a
destination plan from the path mapper:
1. Preserve layout: a directory tree mirroring root-relative paths.
2. Flat layout: category subdirectories plus the rewritten root document.
3. Container: one compressed file holding either plan.

The root document is always written from its validated text; every other
file is copied byte-for-byte.
"""

import logging
import os
from typing import Dict, Iterator, List, Tuple

from skillpack.domain.constants import Category
from skillpack.domain.pack_models import TraceResult
from skillpack.infra.archive import ArchiveWriter
from skillpack.infra.fs import copy_file, relative_posix, write_text

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# SHARED HELPERS
# -----------------------------------------------------------------------------

def iter_entries(trace: TraceResult, path_map: Dict[str, str]) -> Iterator[Tuple[str, str]]:
    """
    Yield (absolute source, destination) pairs for every non-root file.

    Pairs are ordered by destination so outputs are reproducible.
    """
    root_dir = trace.root_dir
    pairs = []
    for source in trace.non_root_files():
        rel_path = relative_posix(source, root_dir)
        pairs.append((source, path_map[rel_path]))
    yield from sorted(pairs, key=lambda pair: pair[1])


def root_destination(trace: TraceResult) -> str:
    """The root document always lands at the top of the output under its own name."""
    return os.path.basename(trace.root_path)

# -----------------------------------------------------------------------------
# STRATEGIES
# -----------------------------------------------------------------------------

def write_tree(
        trace: TraceResult,
        root_content: str,
        output_dir: str,
        path_map: Dict[str, str],
) -> List[str]:
    """
    Write a directory tree following a destination plan.

    Args:
        trace: Categorized trace.
        root_content: Text to write as the root document.
        output_dir: Target directory (created if needed).
        path_map: Root-relative source path to destination path.

    Returns:
        List[str]: Absolute paths of the files written.
    """
    os.makedirs(output_dir, exist_ok=True)

    written: List[str] = []
    root_dest = os.path.join(output_dir, root_destination(trace))
    write_text(root_dest, root_content)
    written.append(root_dest)
    logger.debug(f"  copying: {root_destination(trace)}")

    for source, dest in iter_entries(trace, path_map):
        dest_path = os.path.join(output_dir, *dest.split("/"))
        copy_file(source, dest_path)
        written.append(dest_path)
        logger.debug(f"  copying: {relative_posix(source, trace.root_dir)} -> {dest}")

    logger.info(f"Copied {len(written)} file(s) to {output_dir}")
    return written


def write_preserve(
        trace: TraceResult,
        root_content: str,
        output_dir: str,
        path_map: Dict[str, str],
) -> List[str]:
    """Mirror original root-relative paths into the output directory."""
    return write_tree(trace, root_content, output_dir, path_map)


def write_flat(
        trace: TraceResult,
        rewritten_content: str,
        output_dir: str,
        path_map: Dict[str, str],
) -> List[str]:
    """Write the flat layout: fixed category subdirectories plus the root document."""
    for category in Category:
        os.makedirs(os.path.join(output_dir, category.value), exist_ok=True)
    return write_tree(trace, rewritten_content, output_dir, path_map)


def write_container(
        trace: TraceResult,
        root_content: str,
        output_file: str,
        path_map: Dict[str, str],
) -> Tuple[List[str], int]:
    """
    Stream every entry into one compressed container.

    Returns only after the container has been closed and flushed.

    Returns:
        Tuple[List[str], int]: ([container path], container size in bytes).

    Raises:
        ContainerWriteError: If the container cannot be written.
    """
    with ArchiveWriter(output_file) as archive:
        archive.add_text(root_destination(trace), root_content)
        for source, dest in iter_entries(trace, path_map):
            archive.add_file(source, dest)

    size = archive.size
    logger.info(f"Packed {archive.entries} entries ({size} bytes) to {output_file}")
    return [output_file], size
