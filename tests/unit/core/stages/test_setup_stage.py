from __future__ import annotations

"""
Unit tests for the Pipeline Setup Stage.

Verifies root resolution, default output locations and the guards that
keep outputs from overwriting packaged sources.
"""

import os
from pathlib import Path

import pytest

from skillpack.core.pipeline.stages.setup import (
    check_output_dir,
    check_output_file,
    default_output_path,
    resolve_output_path,
    resolve_root,
)
from skillpack.domain.errors import OutputPathError, RootNotFoundError


def test_resolve_root_returns_absolute_path(skill_tree: Path) -> None:
    assert resolve_root({"root_path": str(skill_tree)}) == str(skill_tree)


@pytest.mark.parametrize("raw", ["", "does/not/exist.md"])
def test_resolve_root_missing(raw: str) -> None:
    with pytest.raises(RootNotFoundError):
        resolve_root({"root_path": raw})


def test_resolve_root_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(RootNotFoundError):
        resolve_root({"root_path": str(tmp_path)})


def test_default_output_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    root = str(tmp_path / "src" / "my-skill" / "SKILL.md")

    assert default_output_path(root, "container") == str(tmp_path / "my-skill.skill")
    assert default_output_path(root, "combined") == str(tmp_path / "dist")
    assert default_output_path(root, "flat") == str(tmp_path / "dist" / "my-skill")
    assert default_output_path(root, "preserve") == str(tmp_path / "dist" / "my-skill")


def test_explicit_output_path_wins(tmp_path: Path) -> None:
    cfg = {"output_path": str(tmp_path / "x" / ".." / "out.skill"), "output_format": "container"}
    assert resolve_output_path(cfg, str(tmp_path / "SKILL.md")) == str(tmp_path / "out.skill")


def test_check_output_dir_refuses_source_directory(skill_tree: Path) -> None:
    traced = {str(skill_tree), str(skill_tree.parent / "docs" / "api.md")}

    with pytest.raises(OutputPathError):
        check_output_dir(str(skill_tree.parent), traced)
    with pytest.raises(OutputPathError):
        check_output_dir(str(skill_tree.parent / "docs"), traced)

    check_output_dir(str(skill_tree.parent / "dist"), traced)
    check_output_dir(str(skill_tree.parent / "doc"), traced)


def test_check_output_file(tmp_path: Path, skill_tree: Path) -> None:
    traced = {str(skill_tree)}

    with pytest.raises(OutputPathError):
        check_output_file(str(skill_tree), traced)
    with pytest.raises(OutputPathError):
        check_output_file(str(tmp_path), traced)

    check_output_file(os.path.join(str(tmp_path), "new.skill"), traced)
