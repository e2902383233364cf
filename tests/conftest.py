from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A reference skill tree shared by unit, integration and e2e tests.
3. A fake content classifier so tests never depend on the 'file' utility.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from skillpack.infra.classifier import ContentClassifier  # noqa: E402

# Minimal PNG signature plus IHDR chunk start (contains NUL bytes)
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02"

SKILL_MD = """---
name: demo-skill
description: Demo skill used by the test-suite
---

# Demo

See the [API](docs/api.md#usage) and the [helper](./src/helper.ts "Helper").
Run [build](src/build.sh) first.

![logo](img/logo.png)

External: [site](https://example.com/docs.md) and [top](#demo).

```ts file=src/helper.ts
export const x = 1;
```
"""

API_MD = "# API\n\nUses [utils](../src/utils.ts).\n"


# -----------------------------------------------------------------------------
# Fake Collaborators
# -----------------------------------------------------------------------------
class FakeClassifier(ContentClassifier):
    """Deterministic classifier: paths ending in a binary suffix are 'binary'."""

    name = "fake"

    def __init__(self, binary_suffixes: Sequence[str] = (".png", ".bin")) -> None:
        self.binary_suffixes = tuple(binary_suffixes)
        self.calls = 0

    def classify(self, paths: Sequence[str]) -> Dict[str, str]:
        self.calls += 1
        return {
            p: "binary" if p.endswith(self.binary_suffixes) else "us-ascii"
            for p in paths
        }


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def write_file() -> Callable[..., Path]:
    """
    Return a helper writing text or bytes, creating parent directories.

    Returns:
        Callable: write(path, content, mode=None) -> path
    """
    def _write(path: Path, content: Any = "", mode: Optional[int] = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8", newline="")
        if mode is not None:
            os.chmod(path, mode)
        return path

    return _write


@pytest.fixture
def skill_tree(tmp_path: Path, write_file: Callable[..., Path]) -> Path:
    """
    Create the reference skill tree and return the root document path.

    Structure:
    /demo-skill
      SKILL.md
      /docs
        api.md        (links ../src/utils.ts)
      /src
        helper.ts
        utils.ts
        build.sh      (0755)
      /img
        logo.png
    """
    base = tmp_path / "demo-skill"
    root = write_file(base / "SKILL.md", SKILL_MD)
    write_file(base / "docs" / "api.md", API_MD)
    write_file(base / "src" / "helper.ts", "export const helper = () => 1;\n")
    write_file(base / "src" / "utils.ts", "export const utils = 2;\n")
    write_file(base / "src" / "build.sh", "#!/bin/sh\necho build\n", mode=0o755)
    write_file(base / "img" / "logo.png", PNG_BYTES)
    return root


@pytest.fixture
def fake_classifier() -> FakeClassifier:
    """Provide a classifier that never spawns processes."""
    return FakeClassifier()


@pytest.fixture
def base_config(skill_tree: Path, tmp_path: Path) -> Dict[str, Any]:
    """
    Return a complete run configuration pointing at the reference tree.

    Returns:
        Dict[str, Any]: Configuration with the sniffing classifier selected.
    """
    return {
        "root_path": str(skill_tree),
        "output_path": str(tmp_path / "out"),
        "output_format": "container",
        "container_layout": "preserve",
        "classifier": "sniff",
        "dry_run": False,
        "verbose": False,
    }
