"""Pipeline orchestrator — stages every catalog resource concurrently.

Each resource runs as one asyncio task: the integrity stager, then (when the
resource is compressed) the decompression stager.  Tasks share nothing but
the injected HTTP client and progress sink.  A failing resource does not
stop its siblings; everything committed stays on disk so the next run
resumes where this one stopped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import AsyncIterator

import httpx

from dbforge.config import StagerConfig
from dbforge.core.catalog import ResourceCatalog
from dbforge.core.hasher import StreamingDigest
from dbforge.core.http_client import build_http_client
from dbforge.core.errors import StagingError
from dbforge.models.phases import StageOutcome
from dbforge.models.reports import ResourceResult, RunReport
from dbforge.models.resources import ResourceDescriptor
from dbforge.routing.sinks import NullProgressSink, ProgressSink
from dbforge.stages.decompression import DecompressionStager
from dbforge.stages.integrity import IntegrityStager

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs the per-resource staging pipeline across a whole catalog.

    Parameters
    ----------
    catalog:
        The resources to stage.
    config:
        Runtime settings.  Defaults are used if not provided.
    client:
        HTTP client shared by every task.  An injected client is left open
        for its owner; otherwise one is built and closed per run.
    sink:
        Receives progress events from every task, possibly concurrently.
    """

    def __init__(
        self,
        catalog: ResourceCatalog,
        *,
        config: StagerConfig | None = None,
        client: httpx.AsyncClient | None = None,
        sink: ProgressSink | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or StagerConfig()
        self.sink: ProgressSink = sink or NullProgressSink()
        self._client = client
        self._digest = StreamingDigest(chunk_size=self.config.chunk_size)

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> RunReport:
        """Stage every resource and return the aggregate report.

        Never raises for per-resource failures; call
        ``report.raise_for_failure()`` to surface the first one.
        """
        started_at = datetime.now(timezone.utc)
        results: list[ResourceResult] = []
        limit = self.config.max_concurrent_resources
        semaphore = asyncio.Semaphore(limit) if limit > 0 else None

        async with self._http_client() as client:

            async def run_one(descriptor: ResourceDescriptor) -> None:
                if semaphore is None:
                    result = await self.stage_resource(descriptor, client)
                else:
                    async with semaphore:
                        result = await self.stage_resource(descriptor, client)
                # Appended on completion, so list order is observation order.
                results.append(result)

            logger.info("Staging %d resources", len(self.catalog))
            await asyncio.gather(*(run_one(d) for d in self.catalog))

        report = RunReport(results=results, started_at=started_at)
        if report.succeeded:
            logger.info("All %d resources committed", len(results))
        else:
            logger.error(
                "%d of %d resources failed; first error: %s",
                len(report.failures), len(results), report.first_error,
            )
        return report

    async def run_or_raise(self) -> RunReport:
        """Like ``run()``, but raise the first observed error on failure."""
        report = await self.run()
        report.raise_for_failure()
        return report

    async def stage_resource(
        self, descriptor: ResourceDescriptor, client: httpx.AsyncClient
    ) -> ResourceResult:
        """Run both stagers for one resource, capturing any failure."""
        name = descriptor.name
        compressed: StageOutcome | None = None
        decompressed: StageOutcome | None = None
        try:
            compressed = await IntegrityStager(
                descriptor,
                client,
                sink=self.sink,
                digest=self._digest,
                chunk_size=self.config.chunk_size,
            ).run()
            if descriptor.requires_decompression:
                decompressed = await DecompressionStager(
                    descriptor,
                    sink=self.sink,
                    digest=self._digest,
                    chunk_size=self.config.chunk_size,
                ).run()
        except StagingError as exc:
            logger.error("Resource %s failed: %s", name, exc)
            return self._failed(name, exc, compressed, decompressed)
        except Exception as exc:
            logger.exception("Resource %s failed unexpectedly", name)
            return self._failed(name, exc, compressed, decompressed)
        return ResourceResult(name=name, compressed=compressed, decompressed=decompressed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _failed(
        name: str,
        exc: Exception,
        compressed: StageOutcome | None,
        decompressed: StageOutcome | None,
    ) -> ResourceResult:
        return ResourceResult(
            name=name,
            compressed=compressed,
            decompressed=decompressed,
            error_type=type(exc).__name__,
            error_message=str(exc),
            exception=exc,
        )

    @contextlib.asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with build_http_client(self.config) as client:
            yield client
