from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the packaging workflow:
1. Validates configuration and resolves the root document.
2. Traces every file referenced from the root document.
3. Categorizes traced files (scripts, references, assets).
4. Plans flat destinations for flattening layouts, failing on collisions.
5. Validates the root document header and the output locations.
6. Writes the requested layout(s).

Fatal errors surface as a failed PackResult before any write begins.
Missing references are warnings only. Both travel to the caller inside the
PackResult and are logged here at DEBUG, so front ends report them once.
"""

import logging
import os
from enum import Enum
from typing import Any, Dict, List, Optional

from skillpack.core.analysis.tracer import trace_references
from skillpack.core.pipeline.stages.setup import (
    check_output_dir,
    check_output_file,
    resolve_output_path,
    resolve_root,
)
from skillpack.core.pipeline.stages.validator import validate_config
from skillpack.core.pipeline.stages.writers import write_container, write_flat, write_preserve
from skillpack.core.processing.header import extract_name, validate_header
from skillpack.core.processing.rewriter import rewrite_root_content
from skillpack.core.services.categorizer import categorize
from skillpack.core.services.path_mapper import plan_destinations
from skillpack.domain.constants import (
    CONTAINER_SUFFIX,
    FORMAT_COMBINED,
    FORMAT_CONTAINER,
    FORMAT_FLAT,
    FORMAT_PRESERVE,
)
from skillpack.domain.errors import RootEncodingError, SkillpackError
from skillpack.domain.pack_models import (
    PackResult,
    TraceResult,
    create_error_result,
    create_success_result,
)
from skillpack.infra.classifier import ContentClassifier, get_classifier
from skillpack.infra.fs import clear_directory, read_text

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Lifecycle of a packaging run."""
    IDLE = "IDLE"
    TRACING = "TRACING"
    CATEGORIZING = "CATEGORIZING"
    PATH_MAPPING = "PATH_MAPPING"
    VALIDATING = "VALIDATING"
    WRITING = "WRITING"
    DONE = "DONE"


def run_pipeline(
        config: Optional[Dict[str, Any]],
        *,
        classifier: Optional[ContentClassifier] = None,
) -> PackResult:
    """
    Execute a full packaging run.

    Args:
        config: The configuration dictionary (raw or partial).
        classifier: Content classifier override; built from the
                    'classifier' setting when None.

    Returns:
        PackResult: Object containing status, traced files and artifacts.
    """
    logger.info("Packaging started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    root_path = cfg.get("root_path", "")
    output_path = ""
    trace: Optional[TraceResult] = None
    stage = PipelineStage.IDLE

    try:
        # ---------------------------------------------------------------------
        # 1) Root & Output Resolution
        # ---------------------------------------------------------------------
        root_path = resolve_root(cfg)
        output_path = resolve_output_path(cfg, root_path)
        output_format = cfg["output_format"]

        # ---------------------------------------------------------------------
        # 2) Tracing
        # ---------------------------------------------------------------------
        stage = _advance(stage, PipelineStage.TRACING)
        trace = trace_references(root_path)
        for missing in trace.errors:
            logger.debug(str(missing))

        # ---------------------------------------------------------------------
        # 3) Categorizing
        # ---------------------------------------------------------------------
        stage = _advance(stage, PipelineStage.CATEGORIZING)
        categorize(trace, classifier or get_classifier(cfg["classifier"]))

        # ---------------------------------------------------------------------
        # 4) Flat Path Mapping
        # ---------------------------------------------------------------------
        flat_map: Optional[Dict[str, str]] = None
        if _needs_flat_map(cfg):
            stage = _advance(stage, PipelineStage.PATH_MAPPING)
            flat_map = plan_destinations(trace, flatten=True)

        # ---------------------------------------------------------------------
        # 5) Validation Gate
        # ---------------------------------------------------------------------
        stage = _advance(stage, PipelineStage.VALIDATING)
        root_content = _read_root(root_path)
        validate_header(root_content)

        preserve_map: Optional[Dict[str, str]] = None
        if _needs_preserve_map(cfg):
            preserve_map = plan_destinations(trace, flatten=False)

        targets = _resolve_targets(cfg, output_path, root_content)
        _check_targets(targets, trace)

        if cfg["dry_run"]:
            logger.info("Dry run: skipping writes.")
            stage = _advance(stage, PipelineStage.DONE)
            return create_success_result(
                cfg, trace, output_path,
                path_map=flat_map,
                summary_extra=_summary(trace, [], 0, targets, dry_run=True),
            )

        # ---------------------------------------------------------------------
        # 6) Writing
        # ---------------------------------------------------------------------
        stage = _advance(stage, PipelineStage.WRITING)
        artifacts: List[str] = []
        container_bytes = 0

        if output_format == FORMAT_PRESERVE:
            artifacts += write_preserve(trace, root_content, targets["tree"], preserve_map or {})

        elif output_format == FORMAT_FLAT:
            rewritten = rewrite_root_content(root_content, flat_map or {})
            artifacts += write_flat(trace, rewritten, targets["tree"], flat_map or {})

        elif output_format == FORMAT_CONTAINER:
            if flat_map is not None:
                entries_map, content = flat_map, rewrite_root_content(root_content, flat_map)
            else:
                entries_map, content = preserve_map or {}, root_content
            written, container_bytes = write_container(trace, content, targets["container"], entries_map)
            artifacts += written

        elif output_format == FORMAT_COMBINED:
            if clear_directory(targets["tree"]):
                logger.info(f"Cleared stale output directory: {targets['tree']}")
            os.makedirs(output_path, exist_ok=True)
            written, container_bytes = write_container(
                trace, root_content, targets["container"], preserve_map or {}
            )
            artifacts += written
            rewritten = rewrite_root_content(root_content, flat_map or {})
            artifacts += write_flat(trace, rewritten, targets["tree"], flat_map or {})

        stage = _advance(stage, PipelineStage.DONE)

    except SkillpackError as e:
        logger.debug(f"Packaging aborted during {stage.value}: {e}")
        return create_error_result(str(e), e.kind, cfg, root_path, output_path, trace)

    logger.info("Packaging completed successfully.")
    return create_success_result(
        cfg, trace, output_path,
        path_map=flat_map,
        artifacts=artifacts,
        summary_extra=_summary(trace, artifacts, container_bytes, targets, dry_run=False),
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _advance(current: PipelineStage, nxt: PipelineStage) -> PipelineStage:
    logger.debug(f"Stage {current.value} -> {nxt.value}")
    return nxt


def _read_root(root_path: str) -> str:
    """
    Read the root document strictly, since it is rewritten and archived as UTF-8.

    Raises:
        RootEncodingError: If the document is not valid UTF-8.
    """
    try:
        return read_text(root_path)
    except UnicodeDecodeError as e:
        raise RootEncodingError(root_path, str(e)) from e


def _needs_flat_map(cfg: Dict[str, Any]) -> bool:
    fmt = cfg["output_format"]
    if fmt in (FORMAT_FLAT, FORMAT_COMBINED):
        return True
    return fmt == FORMAT_CONTAINER and cfg["container_layout"] == FORMAT_FLAT


def _needs_preserve_map(cfg: Dict[str, Any]) -> bool:
    fmt = cfg["output_format"]
    if fmt in (FORMAT_PRESERVE, FORMAT_COMBINED):
        return True
    return fmt == FORMAT_CONTAINER and cfg["container_layout"] == FORMAT_PRESERVE


def _resolve_targets(cfg: Dict[str, Any], output_path: str, root_content: str) -> Dict[str, str]:
    """
    Map output roles ('tree', 'container') to absolute paths.

    The combined layout names both outputs after the header's 'name' field.

    Raises:
        MissingNameError: If the combined layout is requested without a name.
    """
    fmt = cfg["output_format"]
    if fmt == FORMAT_CONTAINER:
        return {"container": output_path}
    if fmt == FORMAT_COMBINED:
        name = extract_name(root_content)
        return {
            "container": os.path.join(output_path, f"{name}{CONTAINER_SUFFIX}"),
            "tree": os.path.join(output_path, name),
        }
    return {"tree": output_path}


def _check_targets(targets: Dict[str, str], trace: TraceResult) -> None:
    if "tree" in targets:
        check_output_dir(targets["tree"], trace.files)
    if "container" in targets:
        check_output_file(targets["container"], trace.files)


def _summary(
        trace: TraceResult,
        artifacts: List[str],
        container_bytes: int,
        targets: Dict[str, str],
        *,
        dry_run: bool,
) -> Dict[str, Any]:
    return {
        "traced": len(trace.files),
        "missing": len(trace.errors),
        "written": len(artifacts),
        "container_bytes": container_bytes,
        "targets": dict(targets),
        "dry_run": dry_run,
    }
