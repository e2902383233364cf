from __future__ import annotations

"""
Unit tests for the Reference Tracer.

Verifies:
1. Transitive discovery across markdown documents.
2. Termination on cyclic and repeated references.
3. Directory targets contribute every contained file.
4. Missing targets are collected as warnings without stopping the walk.
"""

import os
from pathlib import Path

import pytest

from skillpack.core.analysis.tracer import trace_references
from skillpack.domain.errors import RootNotFoundError


def _rel(result, root: Path):
    base = str(root.parent)
    return sorted(os.path.relpath(f, base).replace(os.sep, "/") for f in result.files)


def test_trace_reference_tree(skill_tree: Path) -> None:
    """The root, its direct references and nested references are all traced."""
    result = trace_references(str(skill_tree))

    assert _rel(result, skill_tree) == [
        "SKILL.md",
        "docs/api.md",
        "img/logo.png",
        "src/build.sh",
        "src/helper.ts",
        "src/utils.ts",
    ]
    assert result.errors == []
    assert result.categories == {}


def test_root_is_always_traced(tmp_path: Path, write_file) -> None:
    root = write_file(tmp_path / "SKILL.md", "# nothing referenced\n")
    result = trace_references(str(root))
    assert result.files == {str(root)}


def test_cycle_terminates(tmp_path: Path, write_file) -> None:
    """a -> b -> a and self references each produce one node."""
    root = write_file(tmp_path / "SKILL.md", "[a](a.md) [self](SKILL.md)")
    write_file(tmp_path / "a.md", "[b](b.md)")
    write_file(tmp_path / "b.md", "[a](a.md) [root](SKILL.md)")

    result = trace_references(str(root))

    assert _rel(result, root) == ["SKILL.md", "a.md", "b.md"]


def test_repeated_and_equivalent_paths_deduplicated(tmp_path: Path, write_file) -> None:
    root = write_file(tmp_path / "SKILL.md", "[x](x.txt) [y](./x.txt) [z](sub/../x.txt)")
    write_file(tmp_path / "x.txt", "data")

    result = trace_references(str(root))

    assert _rel(result, root) == ["SKILL.md", "x.txt"]


def test_directory_reference_includes_all_files(tmp_path: Path, write_file) -> None:
    """Files below a referenced directory are included, markdown ones are traced too."""
    root = write_file(tmp_path / "SKILL.md", "[lib](lib/) [again](lib/one.txt)")
    write_file(tmp_path / "lib" / "one.txt", "1")
    write_file(tmp_path / "lib" / "nested" / "two.txt", "2")
    write_file(tmp_path / "lib" / "guide.md", "[extra](../extra.txt)")
    write_file(tmp_path / "extra.txt", "e")

    result = trace_references(str(root))

    assert _rel(result, root) == [
        "SKILL.md",
        "extra.txt",
        "lib/guide.md",
        "lib/nested/two.txt",
        "lib/one.txt",
    ]


def test_missing_reference_is_warning_only(tmp_path: Path, write_file) -> None:
    root = write_file(tmp_path / "SKILL.md", "[gone](gone.md) [ok](ok.txt)")
    write_file(tmp_path / "ok.txt", "ok")

    result = trace_references(str(root))

    assert _rel(result, root) == ["SKILL.md", "ok.txt"]
    assert len(result.errors) == 1
    missing = result.errors[0]
    assert missing.target == str(tmp_path / "gone.md")
    assert missing.source == str(root)
    assert "Reference not found" in str(missing)


def test_missing_target_reported_once(tmp_path: Path, write_file) -> None:
    root = write_file(tmp_path / "SKILL.md", "[a](gone.md) [b](gone.md) [c](a.md)")
    write_file(tmp_path / "a.md", "[d](gone.md)")

    result = trace_references(str(root))

    assert len(result.errors) == 1


def test_non_markdown_files_are_not_scanned(tmp_path: Path, write_file) -> None:
    root = write_file(tmp_path / "SKILL.md", "[notes](notes.txt)")
    write_file(tmp_path / "notes.txt", "[hidden](hidden.md)")
    write_file(tmp_path / "hidden.md", "x")

    result = trace_references(str(root))

    assert _rel(result, root) == ["SKILL.md", "notes.txt"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinked_directory_loop_terminates(tmp_path: Path, write_file) -> None:
    root = write_file(tmp_path / "SKILL.md", "[d](d/)")
    write_file(tmp_path / "d" / "f.txt", "f")
    try:
        os.symlink(str(tmp_path / "d"), str(tmp_path / "d" / "loop"))
    except OSError:
        pytest.skip("cannot create symlinks")

    result = trace_references(str(root))

    assert str(tmp_path / "d" / "f.txt") in result.files


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(RootNotFoundError):
        trace_references(str(tmp_path / "nope.md"))


def test_directory_root_raises(tmp_path: Path) -> None:
    with pytest.raises(RootNotFoundError):
        trace_references(str(tmp_path))
