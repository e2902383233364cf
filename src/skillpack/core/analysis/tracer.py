from __future__ import annotations

"""
Reference Tracer.

Walks the file dependency graph rooted at the root document. Markdown
documents contribute their references, directories contribute everything
inside them, and every absolute path is processed at most once so cyclic
or repeated references terminate. Unresolvable references are collected
as warnings and never stop the walk.
"""

import logging
import os
from typing import List, Set, Tuple

from skillpack.core.analysis.reference_extractor import extract_references, resolve_reference
from skillpack.domain.constants import MARKDOWN_EXTENSIONS
from skillpack.domain.errors import RootNotFoundError
from skillpack.domain.pack_models import MissingReference, TraceResult
from skillpack.infra.fs import canonical_path, is_markdown, read_text, relative_posix

logger = logging.getLogger(__name__)


def trace_references(root_path: str) -> TraceResult:
    """
    Discover every file reachable from the root document.

    Depth-first walk over an explicit stack. The visited set lives only for
    the duration of this call.

    Args:
        root_path: Path to the root document.

    Returns:
        TraceResult: Traced files (root included) and missing references.
            Categories are left empty for the categorizer.

    Raises:
        RootNotFoundError: If the root document is not an existing file.
    """
    root = canonical_path(root_path)
    if not os.path.isfile(root):
        raise RootNotFoundError(root_path)

    root_dir = os.path.dirname(root)
    result = TraceResult(root_path=root)

    visited: Set[str] = set()
    visited_dirs: Set[str] = set()
    # (target, document or directory that led to it)
    stack: List[Tuple[str, str]] = [(root, root)]

    while stack:
        target, source = stack.pop()
        if target in visited:
            continue
        visited.add(target)

        if not os.path.exists(target):
            logger.debug(f"  ! missing {relative_posix(target, root_dir)}")
            result.errors.append(MissingReference(target=target, source=source))
            continue

        if os.path.isdir(target):
            # Symlinked directories may loop back onto an ancestor
            real = os.path.realpath(target)
            if real in visited_dirs:
                continue
            visited_dirs.add(real)
            entries = sorted(os.listdir(target), reverse=True)
            stack.extend((os.path.join(target, name), target) for name in entries)
            continue

        result.files.add(target)
        logger.debug(f"  + {relative_posix(target, root_dir)}")

        if is_markdown(target, MARKDOWN_EXTENSIONS):
            base_dir = os.path.dirname(target)
            refs = extract_references(read_text(target, errors="replace"))
            resolved = [canonical_path(resolve_reference(ref, base_dir)) for ref in refs]
            stack.extend((path, target) for path in reversed(resolved))

    logger.info(
        f"Traced {len(result.files)} file(s) from {os.path.basename(root)}"
        + (f", {len(result.errors)} missing reference(s)" if result.errors else "")
    )
    return result
