"""Exception types raised across folio."""

from __future__ import annotations


class FolioError(RuntimeError):
    """Base class for errors raised by folio itself."""


class ManifestError(FolioError):
    """Raised when a manifest file cannot be used."""

    def __init__(self, path: object, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class ManifestNotFoundError(ManifestError):
    """The manifest file does not exist."""

    def __init__(self, path: object) -> None:
        super().__init__(path, "manifest not found")


class ManifestParseError(ManifestError):
    """The manifest is not valid JSON or its root is not an array."""


class ResolutionError(FolioError):
    """A URL could not be turned into a manifest entry.

    Raised for unrecognised URL shapes and when the primary catalog record
    cannot be fetched.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason}: {url}")
        self.url = url
        self.reason = reason


class UnrecognizedUrlError(ResolutionError):
    """No detector recognises the URL."""

    def __init__(self, url: str) -> None:
        super().__init__(url, "Cannot determine document type from URL")


class NoTasksRegisteredError(FolioError):
    """No task names are available to build a pipeline from."""


class TaskSkipped(Exception):
    """Raised by a task that does not apply to the given inputs."""


__all__ = [
    "FolioError",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "NoTasksRegisteredError",
    "ResolutionError",
    "TaskSkipped",
    "UnrecognizedUrlError",
]
