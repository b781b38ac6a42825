"""Exception types raised while resolving and retrieving media."""

from __future__ import annotations

from pathlib import Path


class TtdlError(RuntimeError):
    """Base error for every failure the download pipeline reports."""


class InvalidUrlError(TtdlError):
    """Raised when an input string is not a recognized platform URL."""


class FetchError(TtdlError):
    """Raised when an HTTP request fails or returns an unusable body."""


class BackupApiError(TtdlError):
    """Raised when the backup API answers with a non-success status."""


class MalformedResponseError(TtdlError):
    """Raised when a payload is missing fields a descriptor requires."""


class ResolutionFailedError(TtdlError):
    """Raised when no extraction strategy produced a media descriptor."""


class RetrievalFailedError(TtdlError):
    """Raised when persisting a descriptor's payload fails.

    ``saved_paths`` lists files already written before the failure, which
    are left on disk.
    """

    def __init__(self, message: str, *, saved_paths: list[Path] | None = None, total: int = 1) -> None:
        super().__init__(message)
        self.saved_paths = list(saved_paths or [])
        self.total = total

    @property
    def saved_count(self) -> int:
        return len(self.saved_paths)

    @property
    def is_partial(self) -> bool:
        return 0 < self.saved_count < self.total
