from __future__ import annotations

"""
Packaging Error Taxonomy.

Every fatal condition of a packaging run is a subclass of SkillpackError.
Messages enumerate every contributing cause so a document can be fixed
after a single diagnostic run.
"""

from typing import Dict, List, Optional, Sequence


class SkillpackError(Exception):
    """Base class for all fatal packaging errors."""

    kind = "error"


class RootNotFoundError(SkillpackError):
    """The root document path does not exist or is not a file."""

    kind = "root_not_found"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Root document not found: {path}")


class InvalidHeaderError(SkillpackError):
    """The header block is malformed or carries fields outside the allow-list."""

    kind = "invalid_header"

    def __init__(
            self,
            allowed_fields: Sequence[str],
            invalid_fields: Optional[Sequence[str]] = None,
            reason: str = "",
    ) -> None:
        self.invalid_fields: List[str] = list(invalid_fields or [])
        self.allowed_fields: List[str] = list(allowed_fields)
        self.reason = reason

        if self.invalid_fields:
            msg = (
                f"Header contains non-standard fields: {', '.join(self.invalid_fields)}\n"
                f"Valid fields: {', '.join(self.allowed_fields)}"
            )
        else:
            msg = f"Header block is malformed: {reason}"
        super().__init__(msg)


class RootEncodingError(SkillpackError):
    """The root document cannot be decoded as UTF-8 text."""

    kind = "root_encoding"

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Root document is not valid UTF-8: {path} ({detail})")


class MissingNameError(SkillpackError):
    """A named output was requested but the header has no usable 'name' field."""

    kind = "missing_name"

    def __init__(self, detail: str = "Header is missing the required 'name' field") -> None:
        super().__init__(detail)


class DestinationCollisionError(SkillpackError):
    """Two or more sources flatten onto the same destination."""

    kind = "destination_collision"

    def __init__(self, collisions: Dict[str, List[str]]) -> None:
        self.collisions = {dest: sorted(srcs) for dest, srcs in sorted(collisions.items())}
        lines = [
            f"  {dest} <- {', '.join(srcs)}"
            for dest, srcs in self.collisions.items()
        ]
        super().__init__(
            "Flat layout collision, multiple files map to the same destination:\n"
            + "\n".join(lines)
        )


class PathEscapeError(SkillpackError):
    """Referenced files live outside the root directory and cannot keep their paths."""

    kind = "path_escape"

    def __init__(self, paths: Sequence[str]) -> None:
        self.paths = sorted(paths)
        super().__init__(
            "Cannot preserve layout for files outside the root directory:\n"
            + "\n".join(f"  {p}" for p in self.paths)
        )


class ContainerWriteError(SkillpackError):
    """The compressed container could not be written."""

    kind = "container_write"

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Failed to write container '{path}': {detail}")


class ContentClassifierError(SkillpackError):
    """The content classifier could not produce a verdict for the batch."""

    kind = "classifier"


class OutputPathError(SkillpackError):
    """The output location would overwrite or delete source files."""

    kind = "output_path"
