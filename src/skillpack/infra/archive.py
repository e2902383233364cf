from __future__ import annotations

"""
Compressed Container Writer.

Streams (name, content) entries into a single ZIP container. The write
is complete only once the context manager exits and the archive has
been closed and flushed. Any failure removes the partial container and
surfaces as ContainerWriteError; nothing is retried.
"""

import logging
import os
import time
import zipfile
from types import TracebackType
from typing import Optional, Type

from skillpack.domain.errors import ContainerWriteError
from skillpack.infra.fs import ensure_parent_dir

logger = logging.getLogger(__name__)

COMPRESSION = zipfile.ZIP_DEFLATED
COMPRESS_LEVEL = 9
TEXT_ENTRY_MODE = 0o644


class ArchiveWriter:
    """
    Context manager producing one compressed container.

    Usage:
        with ArchiveWriter(path) as archive:
            archive.add_text("SKILL.md", content)
            archive.add_file("/abs/docs/api.md", "docs/api.md")
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.entries = 0
        self._zip: Optional[zipfile.ZipFile] = None

    def __enter__(self) -> "ArchiveWriter":
        try:
            ensure_parent_dir(self.path)
            self._zip = zipfile.ZipFile(
                self.path, "w", compression=COMPRESSION, compresslevel=COMPRESS_LEVEL
            )
        except OSError as e:
            raise ContainerWriteError(self.path, str(e)) from e
        return self

    def add_file(self, source: str, name: str) -> None:
        """Store a file byte-for-byte, keeping its permission bits."""
        self._guard(lambda zf: zf.write(source, arcname=name))
        logger.debug(f"  packing: {name}")

    def add_text(self, name: str, text: str) -> None:
        """Store UTF-8 text under the given entry name."""
        info = zipfile.ZipInfo(name, date_time=time.localtime()[:6])
        info.compress_type = COMPRESSION
        info.external_attr = (0o100000 | TEXT_ENTRY_MODE) << 16
        self._guard(lambda zf: zf.writestr(info, text.encode("utf-8"), compresslevel=COMPRESS_LEVEL))
        logger.debug(f"  packing: {name}")

    def __exit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
    ) -> None:
        zf, self._zip = self._zip, None
        try:
            if zf is not None:
                zf.close()
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            self._discard()
            if exc is None:
                raise ContainerWriteError(self.path, str(e)) from e
            return
        if exc is not None:
            self._discard()

    @property
    def size(self) -> int:
        """Size in bytes of the finished container."""
        return os.path.getsize(self.path) if os.path.exists(self.path) else 0

    def _guard(self, action) -> None:
        if self._zip is None:
            raise ContainerWriteError(self.path, "archive is not open")
        try:
            action(self._zip)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            raise ContainerWriteError(self.path, str(e)) from e
        self.entries += 1

    def _discard(self) -> None:
        try:
            os.remove(self.path)
            logger.debug(f"Removed partial container: {self.path}")
        except OSError:
            pass
