"""Exceptions raised while materializing a project.

Every error is terminal for the current invocation; the CLI prints the
message and exits non-zero.
"""

from __future__ import annotations

from pathlib import Path


class RenderError(Exception):
    """Base class for all materialization failures."""


class DestinationExistsError(RenderError):
    """Raised when the destination directory already exists."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"Directory {self.path} already exists, choose another project name"
        )


class AcquisitionError(RenderError):
    """Raised when the template archive cannot be downloaded."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to download template from {url}: {message}")


class ExtractionError(RenderError):
    """Raised when the archive is corrupt or cannot be written to disk."""


class PathTraversalError(RenderError):
    """Raised when an archive entry would be written outside the extraction root."""

    def __init__(self, entry: str, target: Path) -> None:
        self.entry = entry
        self.target = target
        super().__init__(f"Illegal file path in archive: {entry!r} resolves to {target}")


class RootNotFoundError(RenderError):
    """Raised when no scaffold root is found near the working directory."""

    def __init__(self, start: Path, markers: list[str]) -> None:
        self.start = Path(start)
        self.markers = list(markers)
        super().__init__(
            f"No scaffold root found at {self.start} or its parent "
            f"(expected: {', '.join(self.markers)})"
        )


class WalkError(RenderError):
    """Raised when copying the template tree fails."""
