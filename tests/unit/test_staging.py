"""Unit tests for stage_then_commit — the shared write/verify/commit routine."""

from __future__ import annotations

from pathlib import Path

import pytest

from dbforge.core.errors import DigestMismatchError, FilesystemError, InvalidTransitionError
from dbforge.core.staging import (
    check_transition,
    commit,
    discard,
    probe_phase,
    stage_then_commit,
)
from dbforge.models.phases import PipelinePhase, StageOutcome


class _Harness:
    """Write and verify callables that record how often they ran."""

    def __init__(self, content: bytes = b"good", expected: bytes = b"good") -> None:
        self.content = content
        self.expected = expected
        self.writes = 0
        self.verifies = 0
        self.statuses: list[str] = []

    async def write(self, path: Path) -> None:
        self.writes += 1
        path.write_bytes(self.content)

    async def verify(self, path: Path) -> None:
        self.verifies += 1
        actual = path.read_bytes()
        if actual != self.expected:
            raise DigestMismatchError(
                resource="r", path=path, expected="expected", actual="actual"
            )

    def observe(self, status: str, message: str) -> None:
        self.statuses.append(status)


@pytest.fixture
def paths(tmp_path: Path) -> tuple[Path, Path]:
    return tmp_path / "artifact_unchecked", tmp_path / "artifact"


# ---------------------------------------------------------------------------
# Phase probing
# ---------------------------------------------------------------------------


class TestProbePhase:
    def test_absent(self, paths):
        staged, final = paths
        assert probe_phase(staged, final) is PipelinePhase.ABSENT

    def test_committed(self, paths):
        staged, final = paths
        final.write_bytes(b"x")
        assert probe_phase(staged, final) is PipelinePhase.COMMITTED

    def test_staged_takes_precedence(self, paths):
        staged, final = paths
        staged.write_bytes(b"x")
        final.write_bytes(b"y")
        assert probe_phase(staged, final) is PipelinePhase.STAGED


# ---------------------------------------------------------------------------
# stage_then_commit
# ---------------------------------------------------------------------------


class TestStageThenCommit:
    @pytest.mark.asyncio
    async def test_absent_writes_verifies_commits(self, paths):
        staged, final = paths
        h = _Harness()
        outcome = await stage_then_commit(h.write, h.verify, staged, final, observer=h.observe)
        assert outcome is StageOutcome.WRITTEN
        assert final.read_bytes() == b"good"
        assert not staged.exists()
        assert (h.writes, h.verifies) == (1, 1)
        assert h.statuses == ["writing", "verifying", "committed"]

    @pytest.mark.asyncio
    async def test_committed_is_trusted(self, paths):
        staged, final = paths
        final.write_bytes(b"whatever is on disk")
        h = _Harness()
        outcome = await stage_then_commit(h.write, h.verify, staged, final)
        assert outcome is StageOutcome.ALREADY_COMMITTED
        assert (h.writes, h.verifies) == (0, 0)
        assert final.read_bytes() == b"whatever is on disk"

    @pytest.mark.asyncio
    async def test_valid_staged_file_is_promoted(self, paths):
        staged, final = paths
        staged.write_bytes(b"good")
        h = _Harness()
        outcome = await stage_then_commit(h.write, h.verify, staged, final)
        assert outcome is StageOutcome.RESUMED
        assert h.writes == 0
        assert final.read_bytes() == b"good"
        assert not staged.exists()

    @pytest.mark.asyncio
    async def test_corrupt_staged_file_is_rewritten(self, paths):
        staged, final = paths
        staged.write_bytes(b"corrupt")
        h = _Harness()
        outcome = await stage_then_commit(h.write, h.verify, staged, final, observer=h.observe)
        assert outcome is StageOutcome.WRITTEN
        assert final.read_bytes() == b"good"
        assert (h.writes, h.verifies) == (1, 2)
        assert h.statuses[:2] == ["verifying", "discarded"]
        assert h.statuses[-1] == "committed"

    @pytest.mark.asyncio
    async def test_fresh_mismatch_discards_and_raises(self, paths):
        staged, final = paths
        h = _Harness(content=b"bad")
        with pytest.raises(DigestMismatchError):
            await stage_then_commit(h.write, h.verify, staged, final, observer=h.observe)
        assert not staged.exists()
        assert not final.exists()
        assert h.statuses[-1] == "failed"

    @pytest.mark.asyncio
    async def test_no_verifier_commits_unhashed(self, paths):
        staged, final = paths
        h = _Harness(content=b"anything")
        outcome = await stage_then_commit(h.write, None, staged, final)
        assert outcome is StageOutcome.WRITTEN
        assert h.verifies == 0
        assert final.read_bytes() == b"anything"

    @pytest.mark.asyncio
    async def test_unverified_staged_file_is_promoted(self, paths):
        staged, final = paths
        staged.write_bytes(b"leftover")
        h = _Harness()
        outcome = await stage_then_commit(h.write, None, staged, final)
        assert outcome is StageOutcome.RESUMED
        assert h.writes == 0

    @pytest.mark.asyncio
    async def test_write_failure_leaves_final_absent(self, paths):
        staged, final = paths

        async def failing_write(path: Path) -> None:
            path.write_bytes(b"partial")
            raise FilesystemError("disk full", resource="r")

        with pytest.raises(FilesystemError):
            await stage_then_commit(failing_write, None, staged, final)
        assert not final.exists()

    @pytest.mark.asyncio
    async def test_writer_that_leaves_no_staged_file_is_rejected(self, paths):
        staged, final = paths
        h = _Harness()

        async def silent_write(path: Path) -> None:
            h.writes += 1

        with pytest.raises(InvalidTransitionError, match="from absent to absent"):
            await stage_then_commit(silent_write, h.verify, staged, final, resource="r")
        assert h.writes == 1
        assert h.verifies == 0
        assert not final.exists()

    @pytest.mark.asyncio
    async def test_writer_that_commits_itself_is_rejected(self, paths):
        staged, final = paths

        async def direct_write(path: Path) -> None:
            final.write_bytes(b"unverified")

        with pytest.raises(InvalidTransitionError, match="from absent to committed"):
            await stage_then_commit(direct_write, None, staged, final, resource="r")


# ---------------------------------------------------------------------------
# Phase transitions
# ---------------------------------------------------------------------------


class TestCheckTransition:
    @pytest.mark.parametrize(
        "current, target",
        [
            (PipelinePhase.ABSENT, PipelinePhase.STAGED),
            (PipelinePhase.STAGED, PipelinePhase.COMMITTED),
            (PipelinePhase.STAGED, PipelinePhase.ABSENT),
        ],
    )
    def test_allowed(self, current, target):
        assert check_transition(current, target) is target

    @pytest.mark.parametrize(
        "current, target",
        [
            (PipelinePhase.ABSENT, PipelinePhase.COMMITTED),
            (PipelinePhase.COMMITTED, PipelinePhase.STAGED),
            (PipelinePhase.COMMITTED, PipelinePhase.ABSENT),
        ],
    )
    def test_forbidden(self, current, target):
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_transition(current, target, resource="db.gz")
        assert exc_info.value.resource == "db.gz"


# ---------------------------------------------------------------------------
# commit / discard
# ---------------------------------------------------------------------------


class TestCommitAndDiscard:
    def test_commit_replaces_atomically(self, paths):
        staged, final = paths
        staged.write_bytes(b"new")
        final.write_bytes(b"old")
        commit(staged, final)
        assert final.read_bytes() == b"new"
        assert not staged.exists()

    def test_commit_missing_staged_file(self, paths):
        staged, final = paths
        with pytest.raises(FilesystemError, match="Failed to rename"):
            commit(staged, final, resource="r")

    def test_discard_is_idempotent(self, paths):
        staged, _ = paths
        staged.write_bytes(b"x")
        discard(staged)
        discard(staged)
        assert not staged.exists()
