from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration
resolution (defaults plus CLI overrides), pipeline execution and result
rendering.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from skillpack.core.pipeline.engine import run_pipeline
from skillpack.core.pipeline.stages.validator import validate_config
from skillpack.domain.config import get_default_config
from skillpack.domain.errors import RootNotFoundError
from skillpack.domain.pack_models import PackResult
from skillpack.infra.logging import LoggingConfig, configure_logging, get_logger, shutdown_logging
from skillpack.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_ROOT_NOT_FOUND = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    raw_conf = get_default_config()
    raw_conf.update(cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    log_level = "DEBUG" if clean_conf["verbose"] else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file), force=True)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    try:
        return _run(args, clean_conf)
    finally:
        shutdown_logging()


def _run(args, clean_conf: Dict[str, Any]) -> int:
    logger.info(f"Tracing references from {clean_conf['root_path']}...")
    try:
        result = run_pipeline(clean_conf)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.critical(f"Packaging failed: {e}", exc_info=True)
        return EXIT_FAILURE

    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_warnings(result)
        if result.dry_run and result.ok:
            _print_listing(result)
        else:
            _print_human_summary(result)

    if result.ok:
        return EXIT_OK
    if result.error_kind == RootNotFoundError.kind:
        return EXIT_ROOT_NOT_FOUND
    return EXIT_FAILURE

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_warnings(result: PackResult) -> None:
    """Missing references go to stderr and never affect the exit status."""
    if not result.missing_references:
        return
    print("\nWarnings:", file=sys.stderr)
    for warning in result.missing_references:
        print(f"  ! {warning}", file=sys.stderr)


def _print_listing(result: PackResult) -> None:
    """Dry-run view: every traced file with its category and flat destination."""
    print(f"\nFiles to include ({len(result.files)}):")
    for rel in result.files:
        category = result.categories.get(rel)
        dest = result.path_map.get(rel)
        line = f"  {rel}"
        if category:
            line += f"  [{category}]"
        if dest:
            line += f"  -> {dest}"
        print(line)


def _print_human_summary(result: PackResult) -> None:
    """Render the packaging outcome for a terminal."""
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary
    print(f"\nPacked {summary.get('traced', len(result.files))} files.")
    for role, path in sorted(summary.get("targets", {}).items()):
        print(f"  - {role}: {path}")
    if summary.get("container_bytes"):
        print(f"  - container size: {summary['container_bytes']:,} bytes")
    print(f"\nDone! Created {result.output_path}")


if __name__ == "__main__":
    sys.exit(main())
