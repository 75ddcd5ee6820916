"""Stage-then-commit: the shared state machine behind both stagers.

An artifact is written to ``<final>_unchecked``, verified there, and only
then renamed onto its final path.  A reader polling the final path sees
either the previous state or a fully verified file, never a partial one.

Phases are re-derived from the filesystem every time the routine starts:

    STAGED    -> verify -> COMMITTED            (resume, nothing written)
    STAGED    -> verify fails -> discard -> ABSENT
    ABSENT    -> write -> STAGED -> verify -> COMMITTED
    COMMITTED -> trusted as-is (not re-hashed)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from dbforge.core.errors import (
    DigestMismatchError,
    FilesystemError,
    InvalidTransitionError,
)
from dbforge.models.phases import VALID_TRANSITIONS, PipelinePhase, StageOutcome

logger = logging.getLogger(__name__)

WriteFn = Callable[[Path], Awaitable[None]]
# Raises DigestMismatchError when the staged file is wrong.
VerifyFn = Callable[[Path], Awaitable[None]]
# (status, message): advisory notifications for progress sinks.
TransitionObserver = Callable[[str, str], None]


def probe_phase(staged_path: Path, final_path: Path) -> PipelinePhase:
    """Derive an artifact's phase from what exists on disk right now.

    A staged file takes precedence over a committed one: it means a
    previous run stopped between writing and committing.
    """
    if staged_path.exists():
        return PipelinePhase.STAGED
    if final_path.exists():
        return PipelinePhase.COMMITTED
    return PipelinePhase.ABSENT


def check_transition(
    current: PipelinePhase,
    target: PipelinePhase,
    *,
    resource: str | None = None,
) -> PipelinePhase:
    """Validate a phase change against ``VALID_TRANSITIONS`` and return *target*.

    Raises
    ------
    InvalidTransitionError
        If *target* is not reachable from *current*.
    """
    allowed = VALID_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidTransitionError(
            f"Cannot move {resource or 'artifact'} from {current.value} to {target.value}. "
            f"Allowed: {sorted(p.value for p in allowed)}",
            resource=resource,
        )
    logger.debug("%s: %s -> %s", resource or "artifact", current.value, target.value)
    return target


def _fsync_directory(directory: Path) -> None:
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def commit(staged_path: Path, final_path: Path, *, resource: str | None = None) -> None:
    """Atomically promote a verified staged file onto its final path."""
    try:
        os.replace(staged_path, final_path)
        _fsync_directory(final_path.parent)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to rename {staged_path} to {final_path}: {exc}",
            resource=resource,
        ) from exc
    logger.info("Committed %s", final_path)


def discard(staged_path: Path, *, resource: str | None = None) -> None:
    """Remove a staged file so the next attempt starts clean."""
    try:
        staged_path.unlink(missing_ok=True)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to remove {staged_path}: {exc}", resource=resource
        ) from exc


async def stage_then_commit(
    write_fn: WriteFn,
    verify_fn: VerifyFn | None,
    staged_path: Path,
    final_path: Path,
    *,
    resource: str | None = None,
    observer: TransitionObserver | None = None,
) -> StageOutcome:
    """Bring one artifact to COMMITTED, writing it only if necessary.

    Parameters
    ----------
    write_fn:
        Produces the artifact's full content at the path it is given.
    verify_fn:
        Checks the staged file; ``None`` commits without hashing.
    staged_path, final_path:
        Where the artifact is written and where it is promoted to.
    resource:
        Resource name attached to raised errors.
    observer:
        Receives ``(status, message)`` on every phase change.
    """

    def notify(status: str, message: str = "") -> None:
        if observer is not None:
            observer(status, message)

    phase = probe_phase(staged_path, final_path)

    if phase is PipelinePhase.COMMITTED:
        logger.debug("Skipping re-check: %s is already committed", final_path)
        notify("committed", "previously verified")
        return StageOutcome.ALREADY_COMMITTED

    if phase is PipelinePhase.STAGED:
        notify("verifying", f"re-verifying {staged_path.name}")
        try:
            if verify_fn is not None:
                await verify_fn(staged_path)
        except DigestMismatchError as exc:
            logger.warning(
                "Staged file %s failed verification (%s); discarding",
                staged_path, exc.actual,
            )
            notify("discarded", str(exc))
            phase = check_transition(phase, PipelinePhase.ABSENT, resource=resource)
            await asyncio.to_thread(discard, staged_path, resource=resource)
        else:
            check_transition(phase, PipelinePhase.COMMITTED, resource=resource)
            await asyncio.to_thread(commit, staged_path, final_path, resource=resource)
            notify("committed", "resumed from staged file")
            return StageOutcome.RESUMED

    # ABSENT: produce the artifact from scratch.
    notify("writing", f"writing {staged_path.name}")
    await write_fn(staged_path)
    # The writer must leave a staged file behind.
    phase = check_transition(
        phase, probe_phase(staged_path, final_path), resource=resource
    )

    if verify_fn is not None:
        notify("verifying", f"verifying {staged_path.name}")
        try:
            await verify_fn(staged_path)
        except DigestMismatchError as exc:
            notify("failed", str(exc))
            check_transition(phase, PipelinePhase.ABSENT, resource=resource)
            await asyncio.to_thread(discard, staged_path, resource=resource)
            raise

    check_transition(phase, PipelinePhase.COMMITTED, resource=resource)
    await asyncio.to_thread(commit, staged_path, final_path, resource=resource)
    notify("committed", "written and committed")
    return StageOutcome.WRITTEN
