"""dbforge stagers — one per artifact kind, run in order for each resource.

Usage::

    from dbforge.stages import IntegrityStager, DecompressionStager

    await IntegrityStager(descriptor, client, sink=sink).run()
    if descriptor.requires_decompression:
        await DecompressionStager(descriptor, sink=sink).run()
"""

from __future__ import annotations

from dbforge.stages.base import ArtifactStager
from dbforge.stages.decompression import CountingReader, DecompressionStager
from dbforge.stages.integrity import IntegrityStager

__all__ = [
    "ArtifactStager",
    "IntegrityStager",
    "DecompressionStager",
    "CountingReader",
]
