"""Artifact phase models — the per-artifact staging state machine."""

from __future__ import annotations

from enum import Enum

# Reserved suffix for files that are written but not yet verified.
STAGED_SUFFIX = "_unchecked"


class PipelinePhase(str, Enum):
    """On-disk state of a single artifact, derived by probing the filesystem."""

    COMMITTED = "committed"
    STAGED = "staged"
    ABSENT = "absent"


class ArtifactKind(str, Enum):
    """Which form of a resource an artifact holds."""

    COMPRESSED = "compressed"
    DECOMPRESSED = "decompressed"


class StageOutcome(str, Enum):
    """How a stager left an artifact at the end of a run."""

    ALREADY_COMMITTED = "already_committed"  # trusted, not re-hashed
    RESUMED = "resumed"  # staged file verified and promoted, nothing written
    WRITTEN = "written"  # downloaded or decompressed, then committed


# Phase transitions the staging routine may perform within one run.
# COMMITTED is terminal for the run.
VALID_TRANSITIONS: dict[PipelinePhase, set[PipelinePhase]] = {
    PipelinePhase.ABSENT: {PipelinePhase.STAGED},
    PipelinePhase.STAGED: {PipelinePhase.COMMITTED, PipelinePhase.ABSENT},
    PipelinePhase.COMMITTED: set(),
}
