"""Integrity stager — download, verify and commit the compressed artifact.

The body is streamed straight into ``<name>_unchecked`` with a progress
event after every received chunk.  Raw (undecoded) bytes are written so the
file on disk is byte-identical to what the server holds.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import BinaryIO, ClassVar

import httpx

from dbforge.core.errors import FilesystemError, NetworkError, StagingError
from dbforge.core.http_client import GZIP_CONTENT_TYPE
from dbforge.core.staging import discard
from dbforge.models.events import DownloadProgress
from dbforge.models.phases import ArtifactKind
from dbforge.models.resources import ResourceDescriptor
from dbforge.stages.base import ArtifactStager

logger = logging.getLogger(__name__)


def _content_length(response: httpx.Response) -> int:
    try:
        return max(int(response.headers.get("Content-Length", 0) or 0), 0)
    except ValueError:
        return 0


def _flush_and_sync(handle: BinaryIO) -> None:
    handle.flush()
    os.fsync(handle.fileno())


class IntegrityStager(ArtifactStager):
    """Stage 1 of a resource: the compressed artifact.

    Parameters
    ----------
    descriptor:
        The resource to download.
    client:
        Shared async HTTP client for the run.
    """

    artifact_kind: ClassVar[ArtifactKind] = ArtifactKind.COMPRESSED

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        client: httpx.AsyncClient,
        **kwargs,
    ) -> None:
        super().__init__(descriptor, **kwargs)
        self.client = client

    async def write_staged(self, staged_path: Path) -> None:
        name = self.descriptor.name
        url = self.descriptor.source_url
        logger.info("Downloading %s from %s", name, url)
        headers = {
            "Content-Type": GZIP_CONTENT_TYPE,
            "Accept-Encoding": "identity",
        }
        try:
            async with self.client.stream("GET", url, headers=headers) as response:
                if not response.is_success:
                    raise NetworkError(
                        f"Failed to download {name}. HTTP Status: {response.status_code}",
                        resource=name,
                        status_code=response.status_code,
                    )
                await self._stream_body(response, staged_path)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            await asyncio.to_thread(discard, staged_path, resource=name)
            raise NetworkError(f"Failed to download {name}: {exc}", resource=name) from exc
        except StagingError:
            await asyncio.to_thread(discard, staged_path, resource=name)
            raise

    async def _stream_body(self, response: httpx.Response, staged_path: Path) -> None:
        name = self.descriptor.name
        total = _content_length(response)
        downloaded = 0
        try:
            handle = await asyncio.to_thread(open, staged_path, "wb")
        except OSError as exc:
            raise FilesystemError(f"Cannot create {staged_path}: {exc}", resource=name) from exc

        try:
            async for chunk in response.aiter_raw():
                if not chunk:
                    continue
                await asyncio.to_thread(handle.write, chunk)
                downloaded += len(chunk)
                self.emit(DownloadProgress(
                    name=name, bytes_downloaded=downloaded, total_bytes=total,
                ))
            await asyncio.to_thread(_flush_and_sync, handle)
        except OSError as exc:
            raise FilesystemError(
                f"Failed to write chunk for {name}: {exc}", resource=name
            ) from exc
        finally:
            handle.close()

        if total and downloaded != total:
            raise NetworkError(
                f"Truncated download for {name}: expected {total} bytes, got {downloaded}",
                resource=name,
            )
        logger.info("Downloaded %s (%d bytes)", name, downloaded)
