from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the pipeline validator.
"""

import argparse
from typing import Any, Dict

from skillpack.domain.constants import CLASSIFIERS, CONTAINER_LAYOUTS, OUTPUT_FORMATS

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the skillpack CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="skillpack",
        description="Pack a skill document and every local file it references.",
        epilog=(
            "examples:\n"
            "  skillpack ./SKILL.md\n"
            "  skillpack ./SKILL.md -o dist/my-framework.skill\n"
            "  skillpack ./SKILL.md --format combined -o dist\n"
            "  skillpack ./SKILL.md --list"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # --- Path Management ---
    p.add_argument(
        "root_path",
        metavar="ROOT",
        help="Root document (usually SKILL.md).",
    )
    p.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        help="Output path (default depends on --format: <dir>.skill, dist/<dir>/ or dist/).",
    )

    # --- Output Shape ---
    p.add_argument(
        "-f", "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output layout (default: container).",
    )
    p.add_argument(
        "--container-layout",
        dest="container_layout",
        choices=CONTAINER_LAYOUTS,
        default=None,
        help="Entry names inside the container (default: preserve).",
    )
    p.add_argument(
        "--classifier",
        choices=CLASSIFIERS,
        default=None,
        help="Binary detection strategy (default: auto).",
    )

    # --- Runtime ---
    p.add_argument(
        "-l", "--list",
        dest="dry_run",
        action="store_true",
        help="List files that would be included (dry run).",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write a rotating diagnostic log to this file.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Overrides; options left unset are omitted.
    """
    overrides: Dict[str, Any] = {"root_path": args.root_path}

    for key in ("output_path", "output_format", "container_layout", "classifier"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value

    if args.dry_run:
        overrides["dry_run"] = True
    if args.verbose:
        overrides["verbose"] = True

    return overrides
