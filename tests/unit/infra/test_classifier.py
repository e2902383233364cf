from __future__ import annotations

"""
Unit tests for the Content Encoding Classifier.

Verifies byte sniffing verdicts, the 'file' utility adapter (with the
subprocess mocked) and strategy selection.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from skillpack.domain.errors import ContentClassifierError
from skillpack.infra.classifier import (
    SNIFF_BYTES,
    FileCommandClassifier,
    SniffClassifier,
    get_classifier,
    sniff_encoding,
)


@pytest.mark.parametrize("content,expected", [
    (b"", "us-ascii"),
    (b"plain text\n", "us-ascii"),
    ("café\n".encode("utf-8"), "utf-8"),
    (b"\x89PNG\r\n\x1a\n\x00\x00", "binary"),
    (bytes([0x01, 0x02, 0x03, 0xff]) * 20, "binary"),
    (bytes(range(1, 32)) * 4, "us-ascii"),
    ("caf\xe9 au lait, d\xe9j\xe0 vu\n".encode("latin-1"), "unknown-8bit"),
])
def test_sniff_encoding(tmp_path: Path, content: bytes, expected: str) -> None:
    path = tmp_path / "sample"
    path.write_bytes(content)
    assert sniff_encoding(str(path)) == expected


def test_sniff_tolerates_multibyte_cut_at_boundary(tmp_path: Path) -> None:
    path = tmp_path / "long.txt"
    # 'é' is two bytes; place one so the sniff window splits it
    path.write_bytes(b"a" * (SNIFF_BYTES - 1) + "é".encode("utf-8") + b"tail")
    assert sniff_encoding(str(path)) == "utf-8"


def test_sniff_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ContentClassifierError):
        sniff_encoding(str(tmp_path / "missing"))


def test_sniff_classifier_batch(tmp_path: Path) -> None:
    a = tmp_path / "a.txt"
    b = tmp_path / "b.bin"
    a.write_text("hello", encoding="utf-8")
    b.write_bytes(b"\x00\x01")

    result = SniffClassifier().classify([str(a), str(b)])

    assert result == {str(a): "us-ascii", str(b): "binary"}


def test_file_command_single_batch_call() -> None:
    proc = MagicMock(stdout="us-ascii\nbinary\n")
    with patch("skillpack.infra.classifier.subprocess.run", return_value=proc) as run:
        result = FileCommandClassifier("file").classify(["a.txt", "b.png"])

    assert result == {"a.txt": "us-ascii", "b.png": "binary"}
    run.assert_called_once()
    cmd = run.call_args.args[0]
    assert cmd == ["file", "--mime-encoding", "-b", "--", "a.txt", "b.png"]


def test_file_command_empty_batch_spawns_nothing() -> None:
    with patch("skillpack.infra.classifier.subprocess.run") as run:
        assert FileCommandClassifier().classify([]) == {}
    run.assert_not_called()


def test_file_command_failure_raises() -> None:
    err = subprocess.CalledProcessError(1, ["file"])
    with patch("skillpack.infra.classifier.subprocess.run", side_effect=err):
        with pytest.raises(ContentClassifierError):
            FileCommandClassifier().classify(["a.txt"])


def test_file_command_short_output_raises() -> None:
    proc = MagicMock(stdout="us-ascii\n")
    with patch("skillpack.infra.classifier.subprocess.run", return_value=proc):
        with pytest.raises(ContentClassifierError):
            FileCommandClassifier().classify(["a.txt", "b.txt"])


def test_get_classifier_selection() -> None:
    assert isinstance(get_classifier("sniff"), SniffClassifier)
    assert isinstance(get_classifier("file"), FileCommandClassifier)

    with patch("skillpack.infra.classifier.shutil.which", return_value=None):
        assert isinstance(get_classifier("auto"), SniffClassifier)
    with patch("skillpack.infra.classifier.shutil.which", return_value="/usr/bin/file"):
        chosen = get_classifier("auto")
    assert isinstance(chosen, FileCommandClassifier)
    assert chosen.executable == "/usr/bin/file"
