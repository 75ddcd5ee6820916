"""Run result models — per-resource outcomes and the aggregate run report."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from dbforge.models.phases import ArtifactKind, PipelinePhase, StageOutcome


class ResourceResult(BaseModel):
    """What one resource pipeline achieved in a run.

    ``exception`` keeps the original error object for re-raising; it is
    excluded from serialization.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    compressed: StageOutcome | None = None
    decompressed: StageOutcome | None = None
    error_type: str = ""
    error_message: str = ""
    exception: Exception | None = Field(default=None, exclude=True, repr=False)
    finished_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def succeeded(self) -> bool:
        return self.exception is None and not self.error_type


class RunReport(BaseModel):
    """Aggregate outcome of one orchestrator run.

    ``results`` is in completion order, so the first failure in the list
    is the first error observed during the run.
    """

    model_config = ConfigDict(frozen=True)

    results: list[ResourceResult] = []
    started_at: datetime
    finished_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def succeeded(self) -> bool:
        return all(r.succeeded for r in self.results)

    @property
    def failures(self) -> list[ResourceResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def first_error(self) -> Exception | None:
        for result in self.results:
            if result.exception is not None:
                return result.exception
        return None

    def get(self, name: str) -> ResourceResult | None:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def count(self, outcome: StageOutcome) -> int:
        """Number of artifacts (of either kind) that ended with *outcome*."""
        total = 0
        for r in self.results:
            total += int(r.compressed == outcome) + int(r.decompressed == outcome)
        return total

    def raise_for_failure(self) -> None:
        """Re-raise the first observed error, if any resource failed."""
        error = self.first_error
        if error is not None:
            raise error


class ArtifactStatus(BaseModel):
    """Point-in-time on-disk state of one artifact."""

    model_config = ConfigDict(frozen=True)

    kind: ArtifactKind
    phase: PipelinePhase
    committed_size: int | None = None
    staged_size: int | None = None


class ResourceStatus(BaseModel):
    """Point-in-time on-disk state of one resource."""

    model_config = ConfigDict(frozen=True)

    name: str
    compressed: ArtifactStatus
    decompressed: ArtifactStatus | None = None

    @property
    def ready(self) -> bool:
        """True when the artifact the downstream tool reads is committed."""
        target = self.decompressed or self.compressed
        return target.phase is PipelinePhase.COMMITTED


class CatalogSnapshot(BaseModel):
    """Status of every resource in a catalog at one moment."""

    model_config = ConfigDict(frozen=True)

    resource_dir: str
    resources: list[ResourceStatus] = []
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def all_ready(self) -> bool:
        return all(r.ready for r in self.resources)


class AuditFinding(BaseModel):
    """Result of re-hashing one committed artifact."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ArtifactKind
    path: str
    verdict: str  # "ok" | "mismatch" | "missing" | "unverifiable"
    expected: str = ""
    actual: str = ""
