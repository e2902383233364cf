from __future__ import annotations

"""
Unit tests for Markdown Reference Extraction.

Verifies:
1. Inline links, images and fenced 'file=' annotations are collected.
2. External URLs and same-document fragments are ignored.
3. Fragments are stripped and percent-encoding is undone.
4. Header values are never mistaken for references.
"""

import os

import pytest

from skillpack.core.analysis.reference_extractor import (
    Reference,
    ReferenceOrigin,
    extract_references,
    is_local_target,
    resolve_reference,
    split_fragment,
)


def _targets(content: str):
    return [r.target for r in extract_references(content)]


@pytest.mark.parametrize("target", [
    "https://example.com/a.md",
    "HTTP://EXAMPLE.COM",
    "ftp://host/file",
    "mailto:someone@example.com",
    "tel:+123",
    "data:text/plain;base64,AAAA",
    "//cdn.example.com/x.js",
    "#section",
    "",
    None,
])
def test_is_local_target_rejects_non_local(target) -> None:
    """External schemes, fragments and empty targets are not local."""
    assert is_local_target(target) is False


@pytest.mark.parametrize("target", [
    "file:///etc/passwd",
    "ssh://git@host/repo",
    "vscode://file/x.md",
    "irc:chat",
    "http://[::1",
])
def test_is_local_target_rejects_any_url_scheme(target: str) -> None:
    assert is_local_target(target) is False


def test_is_local_target_accepts_relative_and_absolute_paths() -> None:
    assert is_local_target("C:/skills/a.md")
    assert is_local_target("docs/api.md")
    assert is_local_target("./a.md#x")
    assert is_local_target("../up.md")
    assert is_local_target("/abs/file.txt")


def test_split_fragment() -> None:
    assert split_fragment("a.md#sec") == ("a.md", "#sec")
    assert split_fragment("a.md") == ("a.md", "")
    assert split_fragment("a.md#x#y") == ("a.md", "#x#y")


def test_extracts_links_images_and_file_annotations() -> None:
    content = (
        "See [api](docs/api.md) and ![logo](img/logo.png).\n\n"
        "```ts file=src/helper.ts\ncode\n```\n"
    )
    refs = extract_references(content)

    assert refs == [
        Reference("docs/api.md", ReferenceOrigin.LINK),
        Reference("img/logo.png", ReferenceOrigin.IMAGE),
        Reference("src/helper.ts", ReferenceOrigin.FILE_ANNOTATION),
    ]


def test_external_and_fragment_targets_are_ignored() -> None:
    content = "[a](https://x.org/a.md) [b](#top) [c](mailto:me@x.org) [d](local.md)"
    assert _targets(content) == ["local.md"]


def test_fragment_is_stripped_before_resolution() -> None:
    assert _targets("[a](docs/api.md#usage)") == ["docs/api.md"]


def test_percent_encoded_targets_are_decoded() -> None:
    """The tokenizer percent-encodes non-ASCII targets; the path must be restored."""
    assert _targets("[a](docs/caf%C3%A9.md)") == ["docs/café.md"]
    assert _targets("[b](docs/café.md)") == ["docs/café.md"]


def test_duplicates_are_kept_in_document_order() -> None:
    assert _targets("[a](x.md) [b](y.md) [c](x.md)") == ["x.md", "y.md", "x.md"]


def test_links_inside_nested_blocks_are_found() -> None:
    content = "- item with [link](a.md)\n\n> quoted [other](b.md)\n\n| h |\n|---|\n| [c](c.md) |\n"
    assert _targets(content) == ["a.md", "b.md", "c.md"]


def test_fence_without_file_parameter_contributes_nothing() -> None:
    content = "```python\nprint('[x](not-a-link.md)')\n```\n"
    assert _targets(content) == []


def test_fence_file_parameter_only_annotation() -> None:
    assert _targets("~~~ file=scripts/run.sh\n~~~\n") == ["scripts/run.sh"]


def test_header_block_is_skipped() -> None:
    content = "---\nname: x\ndescription: '[not](header.md)'\n---\n[body](body.md)\n"
    assert _targets(content) == ["body.md"]


def test_resolve_reference_joins_and_normalizes(tmp_path) -> None:
    base = str(tmp_path / "docs")
    ref = Reference("../src/utils.ts", ReferenceOrigin.LINK)
    assert resolve_reference(ref, base) == os.path.normpath(str(tmp_path / "src" / "utils.ts"))


def test_reference_style_and_angle_bracket_links() -> None:
    content = "See [api][a] and [f](<docs/my file.md>).\n\n[a]: docs/api.md\n"
    assert _targets(content) == ["docs/api.md", "docs/my file.md"]


def test_scheme_urls_are_not_references() -> None:
    content = "[a](file:///tmp/x.md) [b](vscode://open) [c](local.md)"
    assert _targets(content) == ["local.md"]
