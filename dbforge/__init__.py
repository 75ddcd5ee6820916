"""dbforge: verified acquisition and staging of reference databases.

Downloads compressed resources over HTTP, verifies them against expected
SHA-256 digests, decompresses them, and publishes each artifact with an
atomic rename.  Staged files carry an ``_unchecked`` suffix until they
are verified, so an interrupted run resumes where it stopped and a
completed run does no work at all.
"""

__version__ = "0.1.0"
__description__ = "Verified download, staging and decompression of reference databases"

from dbforge.core.catalog import ResourceCatalog
from dbforge.core.orchestrator import Orchestrator
from dbforge.cli.app import app as cli

__all__ = ["Orchestrator", "ResourceCatalog", "cli", "__version__"]
