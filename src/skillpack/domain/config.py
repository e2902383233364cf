from __future__ import annotations

"""
Run Configuration Defaults.

The packager is driven by a plain configuration dictionary. This module
owns its default shape; validation and coercion live in the pipeline
validator stage.
"""

from typing import Any, Dict

from skillpack.domain.constants import FORMAT_CONTAINER, FORMAT_PRESERVE


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default run configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO Paths
        "root_path": "",
        "output_path": "",

        # Output Shape
        "output_format": FORMAT_CONTAINER,
        "container_layout": FORMAT_PRESERVE,

        # Content Classification
        "classifier": "auto",

        # Runtime
        "dry_run": False,
        "verbose": False,
    }
