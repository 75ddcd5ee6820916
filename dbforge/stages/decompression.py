"""Decompression stager — gunzip, verify and commit the final artifact.

Reads the *committed* compressed artifact only.  Progress is reported in
compressed bytes consumed, because the decompressed size is not known in
advance.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
import os
import shutil
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO, ClassVar

from dbforge.core.errors import FilesystemError, MissingPrecursorError
from dbforge.core.staging import discard, probe_phase
from dbforge.models.events import DecompressionProgress
from dbforge.models.phases import ArtifactKind, PipelinePhase
from dbforge.stages.base import ArtifactStager

logger = logging.getLogger(__name__)


class CountingReader:
    """Read-only wrapper that counts the bytes pulled through it."""

    mode = "rb"

    def __init__(self, raw: BinaryIO, on_read: Callable[[int], None] | None = None) -> None:
        self._raw = raw
        self._on_read = on_read
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        data = self._raw.read(size)
        if data:
            self.bytes_read += len(data)
            if self._on_read is not None:
                self._on_read(self.bytes_read)
        return data

    def readable(self) -> bool:
        return True


class DecompressionStager(ArtifactStager):
    """Stage 2 of a resource: the decompressed artifact."""

    artifact_kind: ClassVar[ArtifactKind] = ArtifactKind.DECOMPRESSED

    def check_preconditions(self) -> None:
        descriptor = self.descriptor
        phase = probe_phase(descriptor.staged_compressed_path, descriptor.compressed_path)
        if phase is not PipelinePhase.COMMITTED:
            raise MissingPrecursorError(
                f"Cannot decompress {descriptor.name} because the compressed file "
                f"is not committed (phase: {phase.value})",
                resource=descriptor.name,
            )

    async def write_staged(self, staged_path: Path) -> None:
        await asyncio.to_thread(self._decompress, staged_path)

    def _decompress(self, staged_path: Path) -> None:
        name = self.descriptor.name
        source = self.descriptor.compressed_path
        logger.info("Decompressing %s into %s", source.name, staged_path.name)
        try:
            total = source.stat().st_size

            def report(read: int) -> None:
                self.emit(DecompressionProgress(
                    name=name,
                    compressed_bytes_read=read,
                    total_compressed_bytes=total,
                ))

            with open(source, "rb") as raw, open(staged_path, "wb") as out:
                counting = CountingReader(raw, report)
                with gzip.GzipFile(fileobj=counting, mode="rb") as decoder:
                    shutil.copyfileobj(decoder, out, self.chunk_size)
                out.flush()
                os.fsync(out.fileno())
        except (OSError, EOFError, zlib.error) as exc:
            # gzip.BadGzipFile is an OSError; a truncated stream is an EOFError.
            discard(staged_path, resource=name)
            raise FilesystemError(f"Error decompressing {name}: {exc}", resource=name) from exc
