"""Resource descriptor and digest models (immutable)."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from dbforge.models.phases import STAGED_SUFFIX, ArtifactKind

_HEX_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


def staged_path_for(path: Path) -> Path:
    """Return the reserved staging path for a committed path."""
    return path.with_name(path.name + STAGED_SUFFIX)


def check_plain_file_name(value: str, label: str = "file name") -> str:
    """Return *value* if it names a file directly inside the resource directory."""
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise ValueError(f"{label} must be a plain file name, got {value!r}")
    if value.endswith(STAGED_SUFFIX):
        raise ValueError(f"{label} must not end with {STAGED_SUFFIX!r}")
    return value


class ResourceDescriptor(BaseModel):
    """A named remote dataset and the local paths it is staged into.

    An empty digest disables verification for that artifact.  When
    ``requires_decompression`` is False the final path is the committed
    compressed path itself.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    source_url: str
    compressed_digest: str = ""
    decompressed_digest: str = ""
    requires_decompression: bool = True
    compressed_path: Path
    final_path: Path

    @field_validator("name")
    @classmethod
    def _plain_file_name(cls, value: str) -> str:
        return check_plain_file_name(value, "resource name")

    @field_validator("compressed_digest", "decompressed_digest")
    @classmethod
    def _normalize_digest(cls, value: str) -> str:
        value = value.strip().lower()
        if value and not _HEX_DIGEST_RE.match(value):
            raise ValueError(f"expected a 64-character SHA-256 hex digest, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_paths(self) -> ResourceDescriptor:
        if self.requires_decompression and self.final_path == self.compressed_path:
            raise ValueError(
                f"{self.name}: final path must differ from the compressed path "
                "when decompression is required"
            )
        if not self.requires_decompression and self.final_path != self.compressed_path:
            raise ValueError(
                f"{self.name}: final path must equal the compressed path "
                "when no decompression is required"
            )
        return self

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def staged_compressed_path(self) -> Path:
        return staged_path_for(self.compressed_path)

    @property
    def staged_final_path(self) -> Path:
        return staged_path_for(self.final_path)

    def committed_path(self, kind: ArtifactKind) -> Path:
        if kind is ArtifactKind.COMPRESSED:
            return self.compressed_path
        return self.final_path

    def staged_path(self, kind: ArtifactKind) -> Path:
        return staged_path_for(self.committed_path(kind))

    def expected_digest(self, kind: ArtifactKind) -> str:
        if kind is ArtifactKind.COMPRESSED:
            return self.compressed_digest
        return self.decompressed_digest

    def owned_paths(self) -> set[Path]:
        """Every committed and staged path this resource may touch, resolved."""
        paths = {self.compressed_path, self.staged_compressed_path}
        if self.requires_decompression:
            paths |= {self.final_path, self.staged_final_path}
        return {path.resolve() for path in paths}


class DigestResult(BaseModel):
    """Outcome of hashing a byte stream."""

    model_config = ConfigDict(frozen=True)

    algorithm: str = "sha256"
    hexdigest: str
    bytes_processed: int = 0

    def matches(self, expected: str) -> bool:
        """Compare against an expected hex digest, case-insensitively."""
        return self.hexdigest == expected.strip().lower()

    def __str__(self) -> str:
        return self.hexdigest
