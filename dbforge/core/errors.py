"""Error taxonomy for the staging pipeline.

Every error is fatal to a single resource only.  The orchestrator collects
them per resource and surfaces the first one observed.
"""

from __future__ import annotations

from pathlib import Path


class StagingError(RuntimeError):
    """Base class for all pipeline errors.

    Parameters
    ----------
    message:
        Human-readable description.
    resource:
        Name of the resource whose pipeline failed, if known.
    """

    def __init__(self, message: str, *, resource: str | None = None) -> None:
        super().__init__(message)
        self.resource = resource


class PathResolutionError(StagingError):
    """Raised when the resource directory cannot be resolved or created."""


class NetworkError(StagingError):
    """Raised on a transfer failure or a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, resource=resource)
        self.status_code = status_code


class FilesystemError(StagingError):
    """Raised when creating, writing, renaming or removing a file fails."""


class DigestMismatchError(StagingError):
    """Raised when a staged artifact does not hash to its expected digest."""

    def __init__(
        self,
        *,
        resource: str | None,
        path: Path,
        expected: str,
        actual: str,
    ) -> None:
        super().__init__(
            f"Checksum mismatch for {path.name}. Expected: {expected} Found: {actual}",
            resource=resource,
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class MissingPrecursorError(StagingError):
    """Raised when decompression is attempted before the compressed commit."""


class ConfigurationError(StagingError):
    """Raised when the catalog or settings are missing, unparseable or inconsistent."""


class InvalidTransitionError(StagingError):
    """Raised when an artifact would move between phases the state machine forbids."""
