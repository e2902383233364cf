from __future__ import annotations

"""
Packaging Domain Data Models.

Defines the data structures exchanged between the tracer, the categorizer,
the packaging engine and the interface layer, plus factory functions for
the final run result.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from skillpack.domain.constants import Category
from skillpack.infra.fs import relative_posix

# -----------------------------------------------------------------------------
# TRACING MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class MissingReference:
    """
    Non-fatal record of a reference whose target does not exist.

    Attributes:
        target: Absolute path the reference resolved to.
        source: Absolute path of the document that carried the reference.
    """
    target: str
    source: str

    def __str__(self) -> str:
        return f"Reference not found: {self.target} (from {self.source})"


@dataclass
class TraceResult:
    """
    Output of a reference trace.

    The categorizer fills 'categories' in place once tracing is done.

    Attributes:
        root_path: Absolute path of the root document.
        files: Every traced file, root document included.
        errors: References that could not be resolved.
        categories: Category per traced file, root document excluded.
    """
    root_path: str
    files: Set[str] = field(default_factory=set)
    errors: List[MissingReference] = field(default_factory=list)
    categories: Dict[str, Category] = field(default_factory=dict)

    @property
    def root_dir(self) -> str:
        return os.path.dirname(self.root_path)

    def non_root_files(self) -> List[str]:
        """Return traced files other than the root document, sorted."""
        return sorted(f for f in self.files if f != self.root_path)


# -----------------------------------------------------------------------------
# RUN RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PackResult:
    """
    Unified result of a packaging run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        error_kind: Machine-readable failure kind (see domain.errors).
        root_path: Absolute path of the root document.
        output_format: Requested output layout.
        output_path: Absolute path of the main artifact (file or directory).
        dry_run: Whether writing was skipped.
        files: Root-relative paths of every traced file, sorted.
        categories: Root-relative path to category name.
        path_map: Flat destinations, only for flattening layouts.
        missing_references: Human-readable non-fatal warnings.
        artifacts: Paths of every artifact written.
        summary: Execution statistics.
    """
    ok: bool
    error: str
    error_kind: str

    root_path: str
    output_format: str
    output_path: str
    dry_run: bool

    files: List[str] = field(default_factory=list)
    categories: Dict[str, str] = field(default_factory=dict)
    path_map: Dict[str, str] = field(default_factory=dict)
    missing_references: List[str] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        error_kind: str,
        cfg: Dict[str, Any],
        root_path: str,
        output_path: str = "",
        trace: Optional[TraceResult] = None,
) -> PackResult:
    """
    Create a failed packaging result.

    Args:
        error: Detailed error description.
        error_kind: Failure kind identifier.
        cfg: Configuration of the failed run.
        root_path: Absolute root document path.
        output_path: Resolved output path, if known.
        trace: Partial trace, when tracing already happened.

    Returns:
        PackResult: An immutable error result.
    """
    files, categories, missing = _trace_views(trace)
    return PackResult(
        ok=False,
        error=error,
        error_kind=error_kind,
        root_path=root_path,
        output_format=cfg.get("output_format", ""),
        output_path=output_path,
        dry_run=bool(cfg.get("dry_run", False)),
        files=files,
        categories=categories,
        missing_references=missing,
    )


def create_success_result(
        cfg: Dict[str, Any],
        trace: TraceResult,
        output_path: str,
        path_map: Optional[Dict[str, str]] = None,
        artifacts: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> PackResult:
    """
    Create a successful packaging result.

    Args:
        cfg: Final configuration of the run.
        trace: Categorized trace.
        output_path: Absolute path of the main artifact.
        path_map: Flat destinations, if a flattening layout ran.
        artifacts: Paths written to disk.
        summary_extra: Execution statistics.

    Returns:
        PackResult: An immutable success result.
    """
    files, categories, missing = _trace_views(trace)
    return PackResult(
        ok=True,
        error="",
        error_kind="",
        root_path=trace.root_path,
        output_format=cfg.get("output_format", ""),
        output_path=output_path,
        dry_run=bool(cfg.get("dry_run", False)),
        files=files,
        categories=categories,
        path_map=dict(path_map or {}),
        missing_references=missing,
        artifacts=list(artifacts or []),
        summary=summary_extra or {},
    )


def _trace_views(trace: Optional[TraceResult]):
    """Project a trace into root-relative, JSON-friendly views."""
    if trace is None:
        return [], {}, []

    root_dir = trace.root_dir
    files = sorted(relative_posix(f, root_dir) for f in trace.files)
    categories = {
        relative_posix(f, root_dir): c.value
        for f, c in sorted(trace.categories.items())
    }
    missing = [str(m) for m in trace.errors]
    return files, categories, missing
