"""
Core domain package.

This package contains the playlist pipeline itself (tag extraction, cover
thumbnails, grouping, ordering) and should stay independent of the CLI.

We intentionally keep exports minimal; consumers should usually import from the
specific module they need (e.g. `htmlplaylist.core.playlist`).
"""

from __future__ import annotations

from pathlib import Path

__all__: list[str] = [
    "CoreError",
    "ExtractionError",
    "ImageDecodeError",
    "OutputError",
]


class CoreError(Exception):
    """Base class for core-layer exceptions."""


class ExtractionError(CoreError):
    """
    Raised when tags cannot be read from a file.

    Per-file and non-fatal: the pipeline records the file as an issue and moves on.
    """

    def __init__(self, path: Path, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        if cause is None:
            detail = "unsupported or unreadable audio file"
        else:
            detail = f"{type(cause).__name__}: {cause}"
        super().__init__(f"{path}: {detail}")


class ImageDecodeError(CoreError):
    """Raised when embedded cover bytes cannot be decoded as an image."""


class OutputError(CoreError):
    """Raised when the output directory or one of its files cannot be written."""
