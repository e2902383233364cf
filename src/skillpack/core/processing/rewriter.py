from __future__ import annotations

"""
Root Document Content Rewriter.

Rewrites references inside the root document so they point at remapped
destinations. Three passes run over the raw text: inline link/image
targets (bare or '<...>' delimited, nested one bracket level deep so
linked images are covered), link reference definitions and fenced code
'file=' annotations. Targets absent from the map, external URLs and
same-document fragments are left byte-for-byte intact.
"""

import re
from typing import Mapping, Optional
from urllib.parse import quote, unquote

from skillpack.core.analysis.reference_extractor import is_local_target, split_fragment

_TARGET = r"(?P<target><[^<>\n]*>|[^)\s<][^)\s]*)"

LINK_RX = re.compile(
    r"\[(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)\]\(" + _TARGET + r"(?P<title>\s+[^)]*)?\)"
)
REF_DEF_RX = re.compile(
    r"^(?P<lead>[ ]{0,3}\[[^\[\]\n]+\]:[ \t]*)(?P<target><[^<>\n]*>|\S+)",
    re.MULTILINE,
)
FENCE_FILE_RX = re.compile(
    r"^(?P<lead>[ \t]*(?:`{3,}|~{3,})[ \t]*(?:[^\n`]*?[ \t])?)file=(?P<target>\S+)",
    re.MULTILINE,
)


def rewrite_root_content(content: str, path_map: Mapping[str, str]) -> str:
    """
    Rewrite mapped references in the root document text.

    Args:
        content: Raw root document text.
        path_map: Root-relative source path to new path,
                  e.g. {"docs/api.md": "references/api.md"}.

    Returns:
        str: Rewritten text. Applying it again with the same map is a
             no-op because the map keys are original paths.
    """
    if not path_map:
        return content

    def _link(match: "re.Match[str]") -> str:
        # Link text may hold an image whose own target needs rewriting
        text = LINK_RX.sub(_link, match.group("text"))
        target = _rewrite_delimited(match.group("target"), path_map) or match.group("target")
        title = match.group("title") or ""
        return f"[{text}]({target}{title})"

    def _ref_def(match: "re.Match[str]") -> str:
        new_target = _rewrite_delimited(match.group("target"), path_map)
        if new_target is None:
            return match.group(0)
        return f"{match.group('lead')}{new_target}"

    def _fence(match: "re.Match[str]") -> str:
        new_target = _rewrite_target(match.group("target"), path_map)
        if new_target is None:
            return match.group(0)
        return f"{match.group('lead')}file={new_target}"

    content = LINK_RX.sub(_link, content)
    content = REF_DEF_RX.sub(_ref_def, content)
    content = FENCE_FILE_RX.sub(_fence, content)
    return content


def lookup_target(raw_path: str, path_map: Mapping[str, str]) -> Optional[str]:
    """
    Look a raw path up in the map after stripping a leading './'.

    Percent-encoded targets are retried in decoded form; a hit is
    re-encoded so the rewritten link stays valid markdown.
    """
    normalized = raw_path[2:] if raw_path.startswith("./") else raw_path
    found = path_map.get(normalized)
    if found is None:
        decoded = unquote(normalized)
        if decoded != normalized:
            found = path_map.get(decoded)
            if found is not None:
                found = quote(found, safe="/")
    return found


def _rewrite_target(target: str, path_map: Mapping[str, str]) -> Optional[str]:
    """Return the substituted target with its fragment, or None if unmapped."""
    if not is_local_target(target):
        return None
    path, fragment = split_fragment(target)
    new_path = lookup_target(path, path_map)
    if new_path is None:
        return None
    return new_path + fragment


def _rewrite_delimited(target: str, path_map: Mapping[str, str]) -> Optional[str]:
    """Like _rewrite_target, keeping '<...>' delimiters around the new target."""
    if len(target) >= 2 and target.startswith("<") and target.endswith(">"):
        inner = _rewrite_target(target[1:-1], path_map)
        return None if inner is None else f"<{inner}>"
    return _rewrite_target(target, path_map)
