from __future__ import annotations

"""
Content Encoding Classifier.

Answers, for a batch of file paths, which text encoding each file uses,
with the verdict 'binary' for non-text content. Two strategies exist:
the system 'file' utility (one process for the whole batch) and a
built-in byte sniffer used when the utility is unavailable.
"""

import logging
import shutil
import subprocess
from typing import Dict, Sequence

from skillpack.domain.constants import BINARY_ENCODING
from skillpack.domain.errors import ContentClassifierError

logger = logging.getLogger(__name__)

SNIFF_BYTES = 8192
CONTROL_RATIO_LIMIT = 0.30

# Bytes that commonly appear in text files
_TEXT_CONTROL = {0x07, 0x08, 0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x1B}

# -----------------------------------------------------------------------------
# STRATEGIES
# -----------------------------------------------------------------------------

class ContentClassifier:
    """Base interface: map each path of a batch to an encoding verdict."""

    name = "base"

    def classify(self, paths: Sequence[str]) -> Dict[str, str]:
        raise NotImplementedError


class FileCommandClassifier(ContentClassifier):
    """Batch query to 'file --mime-encoding -b'."""

    name = "file"

    def __init__(self, executable: str = "file") -> None:
        self.executable = executable

    def classify(self, paths: Sequence[str]) -> Dict[str, str]:
        if not paths:
            return {}

        cmd = [self.executable, "--mime-encoding", "-b", "--", *paths]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise ContentClassifierError(f"'{self.executable}' failed: {e}") from e

        lines = proc.stdout.rstrip("\n").split("\n")
        if len(lines) != len(paths):
            raise ContentClassifierError(
                f"'{self.executable}' returned {len(lines)} verdicts for {len(paths)} files"
            )
        return {path: line.strip() for path, line in zip(paths, lines)}


class SniffClassifier(ContentClassifier):
    """Inspect the leading bytes of each file."""

    name = "sniff"

    def classify(self, paths: Sequence[str]) -> Dict[str, str]:
        return {path: sniff_encoding(path) for path in paths}


def sniff_encoding(path: str) -> str:
    """
    Guess the encoding of a file from its first bytes.

    Args:
        path: File to inspect.

    Returns:
        str: 'us-ascii', 'utf-8', 'unknown-8bit' or 'binary'.
    """
    try:
        with open(path, "rb") as f:
            chunk = f.read(SNIFF_BYTES)
    except OSError as e:
        raise ContentClassifierError(f"Cannot read '{path}': {e}") from e

    if not chunk:
        return "us-ascii"
    if b"\x00" in chunk:
        return BINARY_ENCODING

    try:
        chunk.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multibyte sequence cut at the sniff boundary is still UTF-8
        if len(chunk) < SNIFF_BYTES or e.start < len(chunk) - 3:
            return _guess_8bit(chunk)
    return "us-ascii" if chunk.isascii() else "utf-8"


def _guess_8bit(chunk: bytes) -> str:
    control = sum(1 for b in chunk if b < 0x20 and b not in _TEXT_CONTROL)
    if control / len(chunk) > CONTROL_RATIO_LIMIT:
        return BINARY_ENCODING
    # High bytes without valid UTF-8 structure and few controls: legacy text
    high = sum(1 for b in chunk if b >= 0x80)
    if high / len(chunk) > CONTROL_RATIO_LIMIT:
        return BINARY_ENCODING
    return "unknown-8bit"

# -----------------------------------------------------------------------------
# FACTORY
# -----------------------------------------------------------------------------

def get_classifier(name: str = "auto") -> ContentClassifier:
    """
    Build the classifier selected by configuration.

    Args:
        name: 'file', 'sniff' or 'auto' (the 'file' utility when on PATH).

    Returns:
        ContentClassifier: Ready-to-use classifier.
    """
    if name == "sniff":
        return SniffClassifier()
    if name == "file":
        return FileCommandClassifier()

    executable = shutil.which("file")
    if executable:
        return FileCommandClassifier(executable)
    logger.debug("'file' utility not found on PATH, using byte sniffing.")
    return SniffClassifier()
