"""Shared test fixtures for dbforge."""

from __future__ import annotations

import gzip
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from dbforge.core.hasher import sha256_hex
from dbforge.models.events import ProgressEvent, ProgressKind, StatusEvent
from dbforge.models.resources import ResourceDescriptor

# 40 KB of low-entropy data: compresses well, spans several read chunks.
SAMPLE_PAYLOAD = b"ACGTTGCA" * 5_000


def gzip_bytes(data: bytes) -> bytes:
    """Deterministic gzip encoding (fixed mtime)."""
    return gzip.compress(data, mtime=0)


# ---------------------------------------------------------------------------
# Fake HTTP origin
# ---------------------------------------------------------------------------


class FakeRemote:
    """In-memory HTTP origin served through ``httpx.MockTransport``.

    Records every request so tests can assert on network activity.
    """

    BASE_URL = "https://mirror.test"

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def url_for(self, name: str) -> str:
        return f"{self.BASE_URL}/{name}"

    def serve(
        self,
        name: str,
        body: bytes,
        *,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> str:
        url = self.url_for(name)
        response_headers = {"Content-Length": str(len(body)), **(headers or {})}
        self.routes[url] = lambda request: httpx.Response(
            status_code, stream=httpx.ByteStream(body), headers=response_headers
        )
        return url

    def fail(self, name: str, exc: Exception) -> str:
        """Make requests for *name* raise *exc* inside the transport."""
        url = self.url_for(name)

        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self.routes[url] = _raise
        return url

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, content=b"not found")
        return route(request)

    def request_count(self, name: str | None = None) -> int:
        if name is None:
            return len(self.requests)
        url = self.url_for(name)
        return sum(1 for r in self.requests if str(r.url) == url)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


# ---------------------------------------------------------------------------
# Recording sink
# ---------------------------------------------------------------------------


class RecordingSink:
    """Keeps every progress event it receives, in delivery order."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    @property
    def sink_name(self) -> str:
        return "recording"

    def on_progress(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: ProgressKind, name: str | None = None) -> list[ProgressEvent]:
        return [
            e for e in self.events
            if e.event_kind is kind and (name is None or e.name == name)
        ]

    def statuses(self, name: str | None = None) -> list[str]:
        return [
            e.status for e in self.events
            if isinstance(e, StatusEvent) and (name is None or e.name == name)
        ]


class ExplodingSink:
    """A sink that always raises."""

    @property
    def sink_name(self) -> str:
        return "exploding"

    def on_progress(self, event: ProgressEvent) -> None:
        raise RuntimeError("sink exploded")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def resource_dir(tmp_path: Path) -> Path:
    """Provide an existing, empty resource directory."""
    path = tmp_path / "resources"
    path.mkdir()
    return path


@pytest.fixture
def remote() -> FakeRemote:
    """Provide a fresh fake HTTP origin."""
    return FakeRemote()


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a sink that records every event."""
    return RecordingSink()


@pytest.fixture
def make_resource(resource_dir: Path, remote: FakeRemote) -> Callable[..., ResourceDescriptor]:
    """Factory: serve a resource from the fake origin and describe it.

    ``body`` overrides what the origin serves (to simulate corruption)
    while the digests still describe the genuine content.
    """

    def _make(
        name: str = "sample.db.gz",
        payload: bytes = SAMPLE_PAYLOAD,
        *,
        requires_decompression: bool = True,
        verified: bool = True,
        serve: bool = True,
        body: bytes | None = None,
    ) -> ResourceDescriptor:
        compressed = gzip_bytes(payload) if requires_decompression else payload
        if serve:
            url = remote.serve(name, compressed if body is None else body)
        else:
            url = remote.url_for(name)
        final_name = name[: -len(".gz")] if requires_decompression else name
        return ResourceDescriptor(
            name=name,
            source_url=url,
            compressed_digest=sha256_hex(compressed) if verified else "",
            decompressed_digest=(
                sha256_hex(payload) if verified and requires_decompression else ""
            ),
            requires_decompression=requires_decompression,
            compressed_path=resource_dir / name,
            final_path=resource_dir / final_name,
        )

    return _make


@pytest.fixture
def exploding_sink() -> ExplodingSink:
    """Provide a sink that raises on every event."""
    return ExplodingSink()


@pytest.fixture
def payload() -> bytes:
    """The default decompressed payload served by ``make_resource``."""
    return SAMPLE_PAYLOAD
