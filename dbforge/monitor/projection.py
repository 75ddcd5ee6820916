"""StatusProjection — pure read-only view over the resource directory.

The projection does not compute truth; it probes the filesystem on every
call and reports what is there.  It never writes, renames or hashes.
"""

from __future__ import annotations

from pathlib import Path

from dbforge.core.catalog import ResourceCatalog
from dbforge.core.staging import probe_phase
from dbforge.models.phases import ArtifactKind
from dbforge.models.reports import ArtifactStatus, CatalogSnapshot, ResourceStatus
from dbforge.models.resources import ResourceDescriptor


def _size(path: Path) -> int | None:
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return None


def artifact_status(descriptor: ResourceDescriptor, kind: ArtifactKind) -> ArtifactStatus:
    """Probe one artifact of one resource."""
    staged = descriptor.staged_path(kind)
    final = descriptor.committed_path(kind)
    return ArtifactStatus(
        kind=kind,
        phase=probe_phase(staged, final),
        committed_size=_size(final),
        staged_size=_size(staged),
    )


class StatusProjection:
    """Computes ``CatalogSnapshot`` models from the filesystem.

    Parameters
    ----------
    catalog:
        The resources to report on.
    """

    def __init__(self, catalog: ResourceCatalog) -> None:
        self._catalog = catalog

    def resource_status(self, descriptor: ResourceDescriptor) -> ResourceStatus:
        decompressed = None
        if descriptor.requires_decompression:
            decompressed = artifact_status(descriptor, ArtifactKind.DECOMPRESSED)
        return ResourceStatus(
            name=descriptor.name,
            compressed=artifact_status(descriptor, ArtifactKind.COMPRESSED),
            decompressed=decompressed,
        )

    def snapshot(self) -> CatalogSnapshot:
        """Probe every resource in the catalog right now."""
        resource_dir = self._catalog.resource_dir
        return CatalogSnapshot(
            resource_dir=str(resource_dir) if resource_dir is not None else "",
            resources=[self.resource_status(d) for d in self._catalog],
        )
