"""Abstract artifact stager with an enforced lifecycle.

Every concrete stager inherits from ``ArtifactStager`` and implements only
``write_staged()`` (and optionally ``check_preconditions()``).  The
``run()`` wrapper is **not overridable**: it routes every artifact through
the shared stage-then-commit routine:

    probe -> (verify staged | check_preconditions -> write_staged -> verify)
        -> commit

so both stagers share one state machine and one verification rule.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from pathlib import Path
from typing import ClassVar, final

from dbforge.core.errors import DigestMismatchError, FilesystemError
from dbforge.core.hasher import DEFAULT_CHUNK_SIZE, StreamingDigest
from dbforge.core.staging import stage_then_commit
from dbforge.models.events import HashProgress, ProgressEvent, StatusEvent
from dbforge.models.phases import ArtifactKind, StageOutcome
from dbforge.models.resources import ResourceDescriptor
from dbforge.routing.sinks import NullProgressSink, ProgressSink

logger = logging.getLogger(__name__)


class ArtifactStager(abc.ABC):
    """Brings one artifact of one resource to the COMMITTED phase.

    Parameters
    ----------
    descriptor:
        The resource being staged.
    sink:
        Receives progress events.  Defaults to a sink that drops them.
    digest:
        Hasher used for verification.
    chunk_size:
        Block size for file copies.
    """

    artifact_kind: ClassVar[ArtifactKind]

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        *,
        sink: ProgressSink | None = None,
        digest: StreamingDigest | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.descriptor = descriptor
        self.sink: ProgressSink = sink or NullProgressSink()
        self.digest = digest or StreamingDigest(chunk_size=chunk_size)
        self.chunk_size = chunk_size

    # ------------------------------------------------------------------
    # Subclass interface
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def write_staged(self, staged_path: Path) -> None:
        """Write the artifact's complete content to *staged_path*.

        Implementations remove their own partial output before raising.
        """
        ...

    def check_preconditions(self) -> None:
        """Raise before any write if the artifact cannot be produced yet."""
        return None

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def final_path(self) -> Path:
        return self.descriptor.committed_path(self.artifact_kind)

    @property
    def staged_path(self) -> Path:
        return self.descriptor.staged_path(self.artifact_kind)

    @property
    def expected_digest(self) -> str:
        return self.descriptor.expected_digest(self.artifact_kind)

    # ------------------------------------------------------------------
    # Lifecycle (NOT overridable)
    # ------------------------------------------------------------------

    @final
    async def run(self) -> StageOutcome:
        """Stage and commit the artifact.  **Do not override.**"""
        name = self.descriptor.name
        verify_fn = self._verify if self.expected_digest else None
        if verify_fn is None:
            logger.debug(
                "%s [%s]: no checksum configured; committing without verification",
                name, self.artifact_kind.value,
            )

        outcome = await stage_then_commit(
            self._write,
            verify_fn,
            self.staged_path,
            self.final_path,
            resource=name,
            observer=self._on_transition,
        )
        logger.info("%s [%s] %s", name, self.artifact_kind.value, outcome.value)
        return outcome

    @final
    async def _write(self, staged_path: Path) -> None:
        self.check_preconditions()
        try:
            staged_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot create {staged_path.parent}: {exc}",
                resource=self.descriptor.name,
            ) from exc
        await self.write_staged(staged_path)

    @final
    async def _verify(self, staged_path: Path) -> None:
        name = self.descriptor.name
        kind = self.artifact_kind

        def report(hashed: int, total: int) -> None:
            self.emit(HashProgress(
                name=name, artifact=kind, bytes_hashed=hashed, total_bytes=total,
            ))

        try:
            result = await asyncio.to_thread(
                self.digest.digest_file, staged_path, report
            )
        except OSError as exc:
            raise FilesystemError(
                f"Error computing {kind.value} checksum for {name}: {exc}",
                resource=name,
            ) from exc

        if not result.matches(self.expected_digest):
            raise DigestMismatchError(
                resource=name,
                path=staged_path,
                expected=self.expected_digest,
                actual=result.hexdigest,
            )
        logger.info("%s [%s] checksum OK", name, kind.value)

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    @final
    def emit(self, event: ProgressEvent) -> None:
        """Deliver *event* to the sink; a failing sink never aborts staging."""
        try:
            self.sink.on_progress(event)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Progress sink %s raised for %s: %s",
                getattr(self.sink, "sink_name", type(self.sink).__name__),
                event.name,
                exc,
            )

    def _on_transition(self, status: str, message: str) -> None:
        self.emit(StatusEvent(
            name=self.descriptor.name,
            artifact=self.artifact_kind,
            status=status,
            message=message,
        ))

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} resource={self.descriptor.name!r} "
            f"artifact={self.artifact_kind.value}>"
        )
