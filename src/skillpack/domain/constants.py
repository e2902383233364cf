from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes the fixed vocabulary of the packager: the header allow-list,
the file categories used by the flat layout, the recognized output formats
and the markers used to spot markdown documents and external links.
"""

from enum import Enum
from typing import FrozenSet, Tuple

# -----------------------------------------------------------------------------
# ROOT DOCUMENT HEADER
# -----------------------------------------------------------------------------

ALLOWED_HEADER_FIELDS: Tuple[str, ...] = (
    "name",
    "description",
    "license",
    "allowed-tools",
    "compatibility",
    "metadata",
)

HEADER_DELIMITER = "---"
HEADER_CLOSERS: FrozenSet[str] = frozenset({"---", "..."})

# -----------------------------------------------------------------------------
# FILE CATEGORIES
# -----------------------------------------------------------------------------

class Category(str, Enum):
    """Bucket of a traced file. The value doubles as the flat-layout subdirectory."""
    SCRIPT = "scripts"
    REFERENCE = "references"
    ASSET = "assets"


# -----------------------------------------------------------------------------
# OUTPUT FORMATS
# -----------------------------------------------------------------------------

FORMAT_PRESERVE = "preserve"
FORMAT_FLAT = "flat"
FORMAT_CONTAINER = "container"
FORMAT_COMBINED = "combined"

OUTPUT_FORMATS: Tuple[str, ...] = (
    FORMAT_PRESERVE,
    FORMAT_FLAT,
    FORMAT_CONTAINER,
    FORMAT_COMBINED,
)

CONTAINER_LAYOUTS: Tuple[str, ...] = (FORMAT_PRESERVE, FORMAT_FLAT)
CLASSIFIERS: Tuple[str, ...] = ("auto", "file", "sniff")

CONTAINER_SUFFIX = ".skill"
DEFAULT_COMBINED_DIR = "dist"
DEFAULT_PACKAGE_NAME = "skill"

# -----------------------------------------------------------------------------
# MARKDOWN AND LINK MARKERS
# -----------------------------------------------------------------------------

MARKDOWN_EXTENSIONS: Tuple[str, ...] = (".md", ".markdown")

# Link targets whose URL scheme is at least this long are external
# (http:, mailto:, file:, vscode:, ...). Shorter ones are drive letters.
MIN_SCHEME_LENGTH = 2

BINARY_ENCODING = "binary"
