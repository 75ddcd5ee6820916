"""Streaming SHA-256 digests with progress callbacks.

Artifacts can be several gigabytes, so hashing always reads in fixed-size
chunks and never holds a whole file in memory.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from dbforge.models.resources import DigestResult

DEFAULT_CHUNK_SIZE = 8192

# (bytes_processed_so_far, total_size_hint)
ProgressCallback = Callable[[int, int], None]


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


class StreamingDigest:
    """Incremental digest over a byte source.

    Parameters
    ----------
    algorithm:
        Any name accepted by :func:`hashlib.new`.
    chunk_size:
        Bytes read per iteration.
    """

    def __init__(
        self, algorithm: str = "sha256", chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def digest_stream(
        self,
        source: BinaryIO,
        total_hint: int = 0,
        progress: ProgressCallback | None = None,
    ) -> DigestResult:
        """Hash *source* until EOF, calling *progress* after every chunk.

        I/O errors raised by *source* propagate unchanged.
        """
        hasher = hashlib.new(self.algorithm)
        processed = 0
        while True:
            chunk = source.read(self.chunk_size)
            if not chunk:
                break
            hasher.update(chunk)
            processed += len(chunk)
            if progress is not None:
                progress(processed, total_hint)
        return DigestResult(
            algorithm=self.algorithm,
            hexdigest=hasher.hexdigest(),
            bytes_processed=processed,
        )

    def digest_file(
        self, path: Path, progress: ProgressCallback | None = None
    ) -> DigestResult:
        """Hash a file on disk, using its size as the progress total."""
        with open(path, "rb") as handle:
            total = path.stat().st_size
            return self.digest_stream(handle, total, progress)
