from __future__ import annotations

"""
Root Document Header Parser.

The root document may open with a YAML header block delimited by '---'
lines. Parsing yields either a validated field mapping or a structured
problem report, so the allow-list check can name every offending field
at once.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml

from skillpack.domain.constants import (
    ALLOWED_HEADER_FIELDS,
    HEADER_CLOSERS,
    HEADER_DELIMITER,
)
from skillpack.domain.errors import InvalidHeaderError, MissingNameError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PARSE RESULT (SUM TYPE)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedHeader:
    """
    A header that passed the allow-list check.

    Attributes:
        fields: Top-level field mapping (empty when there is no header).
        present: Whether the document carried a header block at all.
    """
    fields: Dict[str, Any] = field(default_factory=dict)
    present: bool = False


@dataclass(frozen=True)
class HeaderProblem:
    """
    A header that could not be accepted.

    Attributes:
        reason: Short description of the problem.
        invalid_fields: Every top-level field outside the allow-list.
    """
    reason: str
    invalid_fields: Tuple[str, ...] = ()


HeaderParseResult = Union[ParsedHeader, HeaderProblem]

# -----------------------------------------------------------------------------
# YAML LOADER
# -----------------------------------------------------------------------------

class _UniqueKeyLoader(yaml.SafeLoader):
    """Safe loader that refuses duplicate mapping keys."""


def _construct_unique_mapping(loader: _UniqueKeyLoader, node: yaml.MappingNode, deep: bool = False) -> Dict[Any, Any]:
    seen = set()
    for key_node, _ in node.value:
        key = loader.construct_object(key_node, deep=deep)
        try:
            duplicate = key in seen
        except TypeError:
            continue
        if duplicate:
            raise yaml.constructor.ConstructorError(
                None, None, f"duplicate key '{key}'", key_node.start_mark
            )
        seen.add(key)
    return loader.construct_mapping(node, deep=deep)


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_unique_mapping,
)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def split_header(content: str) -> Tuple[Optional[str], str]:
    """
    Separate a leading header block from the document body.

    Args:
        content: Raw document text.

    Returns:
        Tuple[Optional[str], str]: (header text or None, body text). An
        unterminated block is treated as body.
    """
    located = _locate_header(content)
    if located is None or located[1] is None:
        return None, content
    lines, close_idx = located
    header = "".join(lines[1:close_idx])
    body = "".join(lines[close_idx + 1:])
    return header, body


def parse_header(content: str, allowed: Sequence[str] = ALLOWED_HEADER_FIELDS) -> HeaderParseResult:
    """
    Parse and check the header block of a root document.

    Args:
        content: Raw document text.
        allowed: Permitted top-level field names.

    Returns:
        HeaderParseResult: ParsedHeader on success, HeaderProblem otherwise.
    """
    located = _locate_header(content)
    if located is None:
        return ParsedHeader()

    lines, close_idx = located
    if close_idx is None:
        return HeaderProblem(reason=f"header block opened with '{HEADER_DELIMITER}' is never closed")

    raw = "".join(lines[1:close_idx])
    try:
        data = yaml.load(raw, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as e:
        return HeaderProblem(reason=f"header is not valid YAML: {e}")

    if data is None:
        return ParsedHeader(fields={}, present=True)
    if not isinstance(data, dict):
        return HeaderProblem(reason=f"header must be a mapping, found {type(data).__name__}")

    invalid = [str(k) for k in data if str(k) not in allowed]
    if invalid:
        return HeaderProblem(reason="non-standard fields", invalid_fields=tuple(invalid))

    return ParsedHeader(fields={str(k): v for k, v in data.items()}, present=True)


def validate_header(content: str, allowed: Sequence[str] = ALLOWED_HEADER_FIELDS) -> Dict[str, Any]:
    """
    Enforce the header allow-list.

    Args:
        content: Raw document text.
        allowed: Permitted top-level field names.

    Returns:
        Dict[str, Any]: The header fields.

    Raises:
        InvalidHeaderError: Listing every offending field and the allow-list.
    """
    result = parse_header(content, allowed)
    if isinstance(result, HeaderProblem):
        logger.debug(f"Header rejected: {result.reason} {list(result.invalid_fields)}")
        raise InvalidHeaderError(allowed, result.invalid_fields, result.reason)
    return result.fields


def extract_name(content: str) -> str:
    """
    Return the header's 'name' field.

    Raises:
        InvalidHeaderError: If the header itself is invalid, or the name
                            cannot be used as a file name.
        MissingNameError: If there is no header or no non-empty name.
    """
    result = parse_header(content)
    if isinstance(result, HeaderProblem):
        raise InvalidHeaderError(ALLOWED_HEADER_FIELDS, result.invalid_fields, result.reason)
    if not result.present:
        raise MissingNameError("Root document is missing its header block")

    value = result.fields.get("name")
    name = str(value).strip() if value is not None else ""
    if not name:
        raise MissingNameError()
    if name in (".", "..") or "/" in name or "\\" in name:
        raise InvalidHeaderError(
            ALLOWED_HEADER_FIELDS,
            reason=f"'name' must be a plain file name, got '{name}'",
        )
    return name

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _locate_header(content: str) -> Optional[Tuple[List[str], Optional[int]]]:
    """
    Find the header delimiters.

    Returns:
        None when the document does not open with a delimiter, else the
        document lines and the index of the closing delimiter (None if
        the block is unterminated).
    """
    lines = content.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or lines[0].rstrip() != HEADER_DELIMITER:
        return None
    for idx in range(1, len(lines)):
        if lines[idx].rstrip() in HEADER_CLOSERS:
            return lines, idx
    return lines, None
