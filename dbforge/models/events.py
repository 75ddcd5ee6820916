"""Progress events delivered to the UI collaborator.

Every event is a frozen Pydantic model tagged with an ``event_kind``.  The
channel is advisory: consumers must tolerate missed or reordered events.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from dbforge.models.phases import ArtifactKind


class ProgressKind(str, Enum):
    """The four progress event types."""

    DOWNLOAD = "download"
    HASH = "hash"
    DECOMPRESS = "decompress"
    STATUS = "status"


class ProgressEvent(BaseModel):
    """Base fields shared by all progress events."""

    model_config = ConfigDict(frozen=True)

    name: str  # resource name
    event_kind: ProgressKind
    emitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def completed(self) -> int:
        return 0

    @property
    def total(self) -> int:
        return 0

    @property
    def fraction(self) -> float | None:
        """Completed share of the work, or None when the total is unknown."""
        if self.total <= 0:
            return None
        return min(self.completed / self.total, 1.0)


class DownloadProgress(ProgressEvent):
    """Bytes received so far for a compressed artifact download."""

    event_kind: ProgressKind = ProgressKind.DOWNLOAD
    bytes_downloaded: int
    total_bytes: int = 0  # 0 when the server sent no Content-Length

    @property
    def completed(self) -> int:
        return self.bytes_downloaded

    @property
    def total(self) -> int:
        return self.total_bytes


class HashProgress(ProgressEvent):
    """Bytes digested so far while verifying a staged artifact."""

    event_kind: ProgressKind = ProgressKind.HASH
    artifact: ArtifactKind = ArtifactKind.COMPRESSED
    bytes_hashed: int
    total_bytes: int = 0

    @property
    def completed(self) -> int:
        return self.bytes_hashed

    @property
    def total(self) -> int:
        return self.total_bytes


class DecompressionProgress(ProgressEvent):
    """Compressed bytes consumed so far by the decompressor."""

    event_kind: ProgressKind = ProgressKind.DECOMPRESS
    compressed_bytes_read: int
    total_compressed_bytes: int = 0

    @property
    def completed(self) -> int:
        return self.compressed_bytes_read

    @property
    def total(self) -> int:
        return self.total_compressed_bytes


class StatusEvent(ProgressEvent):
    """A human-readable phase change for one artifact of a resource."""

    event_kind: ProgressKind = ProgressKind.STATUS
    artifact: ArtifactKind
    status: str  # e.g. "downloading", "verifying", "committed", "failed"
    message: str = ""
