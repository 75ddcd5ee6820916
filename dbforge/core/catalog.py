"""Resource catalog — the descriptors that drive a staging run.

The catalog is either the built-in list of classification databases or a
TOML file of ``[[resources]]`` tables::

    [[resources]]
    name = "database.kdb.gz"
    source_url = "https://pr2.poleshift.cloud/database.kdb.gz"
    compressed_digest = "d01c9903..."
    decompressed_digest = "b1b5322a..."
    requires_decompression = true
    final_name = "database.kdb"        # optional, defaults to name minus .gz

Validation runs once at startup: names and final names are plain file names,
names are unique, and no two resources share any committed or staged path
(compared after resolving).
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from dbforge.core.errors import ConfigurationError, PathResolutionError
from dbforge.models.resources import ResourceDescriptor, check_plain_file_name

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pr2.poleshift.cloud"


class CatalogRecord(BaseModel):
    """One catalog entry as written in a catalog file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    source_url: str
    compressed_digest: str = ""
    decompressed_digest: str = ""
    requires_decompression: bool = True
    final_name: str | None = None

    @field_validator("final_name")
    @classmethod
    def _plain_final_name(cls, value: str | None) -> str | None:
        if not value:
            return None
        return check_plain_file_name(value, "final_name")

    def final_file_name(self) -> str:
        if not self.requires_decompression:
            return self.name
        if self.final_name:
            return self.final_name
        if self.name.endswith(".gz") and len(self.name) > 3:
            return self.name[: -len(".gz")]
        raise ConfigurationError(
            f"Cannot derive a decompressed file name for {self.name!r}; "
            "set final_name explicitly",
            resource=self.name,
        )

    def to_descriptor(self, resource_dir: Path) -> ResourceDescriptor:
        final_name = self.final_file_name()
        try:
            return ResourceDescriptor(
                name=self.name,
                source_url=self.source_url,
                compressed_digest=self.compressed_digest,
                decompressed_digest=self.decompressed_digest,
                requires_decompression=self.requires_decompression,
                compressed_path=resource_dir / self.name,
                final_path=resource_dir / final_name,
            )
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid catalog entry {self.name!r}: {exc}", resource=self.name
            ) from exc


# The KrakenUniq database files the classifier reads.
DEFAULT_RECORDS: list[dict[str, Any]] = [
    {
        "name": "database.kdb.gz",
        "source_url": f"{DEFAULT_BASE_URL}/database.kdb.gz",
        "compressed_digest": "d01c990394bb7dd3e55ec3bcffd82f20194b4045bec88d503fbb9db5da9254c8",
        "decompressed_digest": "b1b5322ad305ea92da0c9e22fea04b848271812e11a4b2b63adf176ff8b584de",
        "requires_decompression": True,
    },
    {
        "name": "database.kdb.counts.gz",
        "source_url": f"{DEFAULT_BASE_URL}/database.kdb.counts.gz",
        "compressed_digest": "a66bcb659953a9793e75d62ec07fe99fcc1ee9c6d408f6d0b588caaf6afa4991",
        "decompressed_digest": "7823e77c3bc89539c9c0f104c9cc728e16b60b4f6bc8718a2d072ff951f217b7",
        "requires_decompression": True,
    },
    {
        "name": "database.idx.gz",
        "source_url": f"{DEFAULT_BASE_URL}/database.idx.gz",
        "compressed_digest": "ecb678053d571f3fad38a67f15b72e10bd820f54d4c97fa4be919a5eba075395",
        "decompressed_digest": "64eeb6e6cc4684f6b196bd17713103fb242768d1dafec471e395cc6489584e83",
        "requires_decompression": True,
    },
    {
        "name": "taxDB.gz",
        "source_url": f"{DEFAULT_BASE_URL}/taxDB.gz",
        "compressed_digest": "0b0bde984ccce9d903d91c05306ed209901858adc73f0b8ca460a8333c372959",
        "decompressed_digest": "1a067cb6c1a512e27bc131ced0e39d72b688bd4eccf31b51e9d08468638edd1a",
        "requires_decompression": True,
    },
]


def resolve_resource_dir(path: Path | str, *, create: bool = True) -> Path:
    """Resolve the resource directory to an absolute path, creating it if asked."""
    try:
        resolved = Path(path).expanduser().resolve()
        if resolved.exists() and not resolved.is_dir():
            raise PathResolutionError(f"Resource path {resolved} is not a directory")
        if create:
            resolved.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PathResolutionError(
            f"Failed to create resource directory {path}: {exc}"
        ) from exc
    return resolved


def validate_catalog(descriptors: Iterable[ResourceDescriptor]) -> None:
    """Reject duplicate names and any path shared between two resources."""
    seen_names: set[str] = set()
    owners: dict[Path, str] = {}
    for descriptor in descriptors:
        if descriptor.name in seen_names:
            raise ConfigurationError(
                f"Duplicate resource name {descriptor.name!r} in catalog",
                resource=descriptor.name,
            )
        seen_names.add(descriptor.name)
        for path in sorted(descriptor.owned_paths()):
            owner = owners.get(path)
            if owner is not None:
                raise ConfigurationError(
                    f"Resources {owner!r} and {descriptor.name!r} both use {path}",
                    resource=descriptor.name,
                )
            owners[path] = descriptor.name


class ResourceCatalog:
    """Validated, immutable sequence of resource descriptors.

    Parameters
    ----------
    descriptors:
        The resources to stage.  Validated on construction.
    resource_dir:
        Directory the descriptors were resolved against, if any.
    """

    def __init__(
        self,
        descriptors: Iterable[ResourceDescriptor],
        *,
        resource_dir: Path | None = None,
    ) -> None:
        self._descriptors = tuple(descriptors)
        validate_catalog(self._descriptors)
        self.resource_dir = resource_dir

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls, records: Iterable[Mapping[str, Any]], resource_dir: Path
    ) -> ResourceCatalog:
        """Build a catalog from plain mappings, resolved against *resource_dir*."""
        descriptors = []
        for index, raw in enumerate(records):
            try:
                record = CatalogRecord.model_validate(raw)
            except ValidationError as exc:
                raise ConfigurationError(
                    f"Invalid catalog record #{index}: {exc}"
                ) from exc
            descriptors.append(record.to_descriptor(resource_dir))
        return cls(descriptors, resource_dir=resource_dir)

    @classmethod
    def default(cls, resource_dir: Path) -> ResourceCatalog:
        """The built-in catalog of classification databases."""
        return cls.from_records(DEFAULT_RECORDS, resource_dir)

    @classmethod
    def load(cls, path: Path, resource_dir: Path) -> ResourceCatalog:
        """Load a TOML catalog file.  A missing file is a startup error."""
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(f"Catalog file not found: {path}")
        try:
            with open(path, "rb") as handle:
                data = tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to parse catalog {path}: {exc}") from exc

        records = data.get("resources")
        if not isinstance(records, list) or not records:
            raise ConfigurationError(
                f"Catalog {path} must define at least one [[resources]] table"
            )
        catalog = cls.from_records(records, resource_dir)
        logger.info("Loaded %d resources from %s", len(catalog), path)
        return catalog

    @classmethod
    def from_config(cls, config: Any, *, create: bool = True) -> ResourceCatalog:
        """Resolve the resource directory and load the configured catalog.

        Read-only callers pass ``create=False`` so a missing directory is
        left missing.
        """
        resource_dir = resolve_resource_dir(config.resource_dir, create=create)
        if config.catalog_path is not None:
            return cls.load(config.catalog_path, resource_dir)
        return cls.default(resource_dir)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._descriptors]

    def get(self, name: str) -> ResourceDescriptor:
        """Return the descriptor named *name*.  Raises ``KeyError`` if absent."""
        for descriptor in self._descriptors:
            if descriptor.name == name:
                return descriptor
        raise KeyError(f"Unknown resource {name!r}. Known: {self.names}")


def list_resource_files(resource_dir: Path) -> list[str]:
    """Return the sorted file names present in the resource directory."""
    resource_dir = Path(resource_dir)
    if not resource_dir.is_dir():
        raise PathResolutionError(f"Resource directory does not exist: {resource_dir}")
    try:
        return sorted(entry.name for entry in resource_dir.iterdir() if entry.is_file())
    except OSError as exc:
        raise PathResolutionError(f"Failed to list {resource_dir}: {exc}") from exc
