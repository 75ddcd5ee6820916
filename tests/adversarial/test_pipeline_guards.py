"""Adversarial tests — configuration and precondition guards.

These tests verify that:
1. Catalog entries can never share a committed or staged path
2. Decompression without a committed compressed artifact writes nothing
3. Skip-verification mode never invokes the hasher
4. A misbehaving progress consumer cannot break a run
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from dbforge.core.catalog import ResourceCatalog
from dbforge.core.errors import ConfigurationError, MissingPrecursorError
from dbforge.core.hasher import StreamingDigest
from dbforge.core.orchestrator import Orchestrator
from dbforge.models.phases import StageOutcome
from dbforge.models.resources import ResourceDescriptor
from dbforge.stages.decompression import DecompressionStager
from dbforge.stages.integrity import IntegrityStager


class _ForbiddenDigest(StreamingDigest):
    """A hasher that fails the test if it is ever used."""

    def digest_stream(self, *args, **kwargs):
        raise AssertionError("hasher must not run in skip-verification mode")


class TestPathCollisions:
    def test_two_entries_sharing_a_final_path(self, make_resource, resource_dir: Path):
        a = make_resource("a.gz", serve=False)
        b = make_resource("b.gz", serve=False).model_copy(
            update={"final_path": a.final_path}
        )
        with pytest.raises(ConfigurationError, match="both use"):
            ResourceCatalog([a, b])

    def test_final_path_aliasing_a_staged_path(self, make_resource, resource_dir: Path):
        a = make_resource("a.gz", serve=False)
        b = make_resource("b.gz", serve=False).model_copy(
            update={"final_path": a.staged_final_path}
        )
        with pytest.raises(ConfigurationError):
            ResourceCatalog([a, b])

    def test_resource_name_cannot_use_staged_suffix(self, resource_dir: Path):
        with pytest.raises(ValidationError):
            ResourceDescriptor(
                name="db.gz_unchecked",
                source_url="https://mirror.test/db.gz_unchecked",
                compressed_path=resource_dir / "db.gz_unchecked",
                final_path=resource_dir / "db",
            )

    def test_resource_name_cannot_escape_directory(self, resource_dir: Path):
        with pytest.raises(ConfigurationError):
            ResourceCatalog.from_records(
                [{"name": "../escape.gz", "source_url": "https://mirror.test/x"}],
                resource_dir,
            )

    def test_final_name_cannot_alias_another_entry(self, resource_dir: Path):
        records = [
            {
                "name": "b.kdb",
                "source_url": "https://mirror.test/b.kdb",
                "requires_decompression": False,
            },
            {
                "name": "a.gz",
                "source_url": "https://mirror.test/a.gz",
                "final_name": f"../{resource_dir.name}/b.kdb",
            },
        ]
        with pytest.raises(ConfigurationError, match="final_name"):
            ResourceCatalog.from_records(records, resource_dir)

    def test_final_name_cannot_escape_directory(self, resource_dir: Path):
        records = [
            {
                "name": "a.gz",
                "source_url": "https://mirror.test/a.gz",
                "final_name": "../../escaped",
            }
        ]
        with pytest.raises(ConfigurationError, match="plain file name"):
            ResourceCatalog.from_records(records, resource_dir)
        assert not (resource_dir.parent.parent / "escaped").exists()

    def test_unnormalized_paths_still_collide(self, make_resource, resource_dir: Path):
        (resource_dir / "sub").mkdir()
        a = make_resource("a.gz", serve=False)
        b = make_resource("b.gz", serve=False).model_copy(
            update={"final_path": resource_dir / "sub" / ".." / a.final_path.name}
        )
        with pytest.raises(ConfigurationError, match="both use"):
            ResourceCatalog([a, b])


class TestDecompressionPrecondition:
    @pytest.mark.asyncio
    async def test_no_partial_writes(self, make_resource, resource_dir: Path):
        descriptor = make_resource(serve=False)
        with pytest.raises(MissingPrecursorError):
            await DecompressionStager(descriptor).run()
        assert list(resource_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_failed_download_stops_decompression(self, make_resource, remote, resource_dir):
        descriptor = make_resource(serve=False)
        async with remote.client() as client:
            report = await Orchestrator(ResourceCatalog([descriptor]), client=client).run()

        result = report.get(descriptor.name)
        assert result.error_type == "NetworkError"
        assert result.decompressed is None
        assert list(resource_dir.iterdir()) == []


class TestSkipVerification:
    @pytest.mark.asyncio
    async def test_hasher_never_runs(self, make_resource, remote, payload):
        descriptor = make_resource(verified=False)
        digest = _ForbiddenDigest()

        async with remote.client() as client:
            compressed = await IntegrityStager(descriptor, client, digest=digest).run()
        decompressed = await DecompressionStager(descriptor, digest=digest).run()

        assert compressed is StageOutcome.WRITTEN
        assert decompressed is StageOutcome.WRITTEN
        assert descriptor.final_path.read_bytes() == payload

    @pytest.mark.asyncio
    async def test_unverified_content_is_committed_as_served(self, make_resource, remote):
        descriptor = make_resource("blob.bin", requires_decompression=False, verified=False)
        remote.serve(descriptor.name, b"whatever the server says")

        async with remote.client() as client:
            await IntegrityStager(descriptor, client, digest=_ForbiddenDigest()).run()

        assert descriptor.final_path.read_bytes() == b"whatever the server says"


class TestHostileProgressConsumers:
    @pytest.mark.asyncio
    async def test_raising_sink_does_not_fail_run(self, make_resource, remote, exploding_sink):
        catalog = ResourceCatalog([make_resource("a.db.gz"), make_resource("b.db.gz")])
        async with remote.client() as client:
            report = await Orchestrator(catalog, client=client, sink=exploding_sink).run()
        assert report.succeeded
