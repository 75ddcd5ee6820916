"""Opt-in deep verification of committed artifacts.

The staging pipeline trusts committed files without re-hashing them, to
avoid digesting several gigabytes on every start.  ``audit_committed``
is the explicit, on-demand check.  It only reads; it never deletes or
rewrites anything, so a mismatch is left for the operator to resolve.
"""

from __future__ import annotations

import logging

from dbforge.core.catalog import ResourceCatalog
from dbforge.core.errors import FilesystemError
from dbforge.core.hasher import StreamingDigest
from dbforge.models.events import HashProgress
from dbforge.models.phases import ArtifactKind
from dbforge.models.reports import AuditFinding
from dbforge.routing.dispatcher import ProgressDispatcher
from dbforge.routing.sinks import NullProgressSink, ProgressSink

logger = logging.getLogger(__name__)


def audit_committed(
    catalog: ResourceCatalog,
    *,
    digest: StreamingDigest | None = None,
    sink: ProgressSink | None = None,
) -> list[AuditFinding]:
    """Re-hash every committed artifact that has an expected digest.

    Verdicts
    --------
    ``ok``            committed file hashes to the expected digest.
    ``mismatch``      committed file hashes to something else.
    ``missing``       no committed file on disk.
    ``unverifiable``  no expected digest configured.
    """
    digest = digest or StreamingDigest()
    sink = ProgressDispatcher([sink]) if sink is not None else NullProgressSink()
    findings: list[AuditFinding] = []

    for descriptor in catalog:
        kinds = [ArtifactKind.COMPRESSED]
        if descriptor.requires_decompression:
            kinds.append(ArtifactKind.DECOMPRESSED)

        for kind in kinds:
            path = descriptor.committed_path(kind)
            expected = descriptor.expected_digest(kind)
            base = {"name": descriptor.name, "kind": kind, "path": str(path), "expected": expected}

            if not path.is_file():
                findings.append(AuditFinding(verdict="missing", **base))
                continue
            if not expected:
                findings.append(AuditFinding(verdict="unverifiable", **base))
                continue

            def report(hashed: int, total: int, _name=descriptor.name, _kind=kind) -> None:
                sink.on_progress(HashProgress(
                    name=_name, artifact=_kind, bytes_hashed=hashed, total_bytes=total,
                ))

            try:
                result = digest.digest_file(path, report)
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot read {path} for audit: {exc}", resource=descriptor.name
                ) from exc
            verdict = "ok" if result.matches(expected) else "mismatch"
            if verdict == "mismatch":
                logger.warning(
                    "Committed %s for %s does not match: expected %s, found %s",
                    kind.value, descriptor.name, expected, result.hexdigest,
                )
            findings.append(AuditFinding(verdict=verdict, actual=result.hexdigest, **base))

    return findings
