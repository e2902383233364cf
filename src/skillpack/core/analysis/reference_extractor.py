from __future__ import annotations

"""
Markdown Reference Extraction.

Tokenizes markdown with a CommonMark parser and collects the local file
targets it mentions: inline link and image targets, and the 'file='
parameter of fenced code block info strings. External URLs and pure
same-document fragments are never references.
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple
from urllib.parse import unquote, urlsplit

from markdown_it import MarkdownIt
from markdown_it.token import Token

from skillpack.core.processing.header import split_header
from skillpack.domain.constants import MIN_SCHEME_LENGTH

FILE_PARAM_RX = re.compile(r"(?:^|\s)file=(\S+)")

# -----------------------------------------------------------------------------
# REFERENCE MODEL
# -----------------------------------------------------------------------------

class ReferenceOrigin(str, Enum):
    """Syntax a reference was found in."""
    LINK = "link"
    IMAGE = "image"
    FILE_ANNOTATION = "file_annotation"


@dataclass(frozen=True)
class Reference:
    """
    A raw local path mentioned by a markdown document.

    Attributes:
        target: Path as authored, fragment removed and percent-decoded.
        origin: Syntax the path was found in.
    """
    target: str
    origin: ReferenceOrigin

# -----------------------------------------------------------------------------
# TARGET HELPERS
# -----------------------------------------------------------------------------

def is_local_target(target: Optional[str]) -> bool:
    """
    Decide whether a link target can name a local file.

    Args:
        target: Raw link target.

    Returns:
        bool: False for empty targets, same-document fragments,
              protocol-relative URLs and anything carrying a URL
              scheme (a single letter is a Windows drive, not a scheme).
    """
    if not target:
        return False
    t = target.strip()
    if not t or t.startswith("#") or t.startswith("//"):
        return False
    try:
        scheme = urlsplit(t).scheme
    except ValueError:
        # Malformed URL such as an unclosed IPv6 host
        return False
    return len(scheme) < MIN_SCHEME_LENGTH


def split_fragment(target: str) -> Tuple[str, str]:
    """
    Split a target at its first '#'.

    Returns:
        Tuple[str, str]: (path part, fragment including '#' or '').
    """
    path, sep, fragment = target.partition("#")
    return path, sep + fragment


def resolve_reference(ref: Reference, base_dir: str) -> str:
    """Resolve a reference against the directory of the document carrying it."""
    return os.path.normpath(os.path.join(base_dir, ref.target))

# -----------------------------------------------------------------------------
# EXTRACTION
# -----------------------------------------------------------------------------

_parser: Optional[MarkdownIt] = None


def _get_parser() -> MarkdownIt:
    global _parser
    if _parser is None:
        _parser = MarkdownIt("commonmark").enable("table")
    return _parser


def extract_references(content: str) -> List[Reference]:
    """
    Collect every local file reference of a markdown document.

    A leading header block is skipped so header values are never mistaken
    for body links.

    Args:
        content: Raw markdown text.

    Returns:
        List[Reference]: References in document order, duplicates kept.
    """
    _, body = split_header(content)
    tokens = _get_parser().parse(body)

    refs: List[Reference] = []
    for token in _walk(tokens):
        if token.type == "link_open":
            _collect(refs, token.attrGet("href"), ReferenceOrigin.LINK)
        elif token.type == "image":
            _collect(refs, token.attrGet("src"), ReferenceOrigin.IMAGE)
        elif token.type == "fence":
            match = FILE_PARAM_RX.search(token.info or "")
            if match:
                _collect(refs, match.group(1), ReferenceOrigin.FILE_ANNOTATION)
    return refs


def _walk(tokens: Iterable[Token]) -> Iterable[Token]:
    """Depth-first iteration over block tokens and their inline children."""
    for token in tokens:
        yield token
        if token.children:
            yield from _walk(token.children)


def _collect(refs: List[Reference], raw: object, origin: ReferenceOrigin) -> None:
    """Normalize a raw target and append it if it names a local path."""
    if not isinstance(raw, str) or not is_local_target(raw):
        return
    path, _ = split_fragment(raw.strip())
    if origin is not ReferenceOrigin.FILE_ANNOTATION:
        path = unquote(path)
    if path:
        refs.append(Reference(target=path, origin=origin))
