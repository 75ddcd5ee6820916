"""dbforge data models — all Pydantic v2, all frozen (immutable)."""

from dbforge.models.events import (
    DecompressionProgress,
    DownloadProgress,
    HashProgress,
    ProgressEvent,
    ProgressKind,
    StatusEvent,
)
from dbforge.models.phases import (
    STAGED_SUFFIX,
    VALID_TRANSITIONS,
    ArtifactKind,
    PipelinePhase,
    StageOutcome,
)
from dbforge.models.reports import (
    ArtifactStatus,
    AuditFinding,
    CatalogSnapshot,
    ResourceResult,
    ResourceStatus,
    RunReport,
)
from dbforge.models.resources import DigestResult, ResourceDescriptor, staged_path_for

__all__ = [
    # phases
    "STAGED_SUFFIX",
    "VALID_TRANSITIONS",
    "ArtifactKind",
    "PipelinePhase",
    "StageOutcome",
    # resources
    "DigestResult",
    "ResourceDescriptor",
    "staged_path_for",
    # events
    "ProgressKind",
    "ProgressEvent",
    "DownloadProgress",
    "HashProgress",
    "DecompressionProgress",
    "StatusEvent",
    # reports
    "ResourceResult",
    "RunReport",
    "ArtifactStatus",
    "ResourceStatus",
    "CatalogSnapshot",
    "AuditFinding",
]
