"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and DBFORGE_* environment variables.  CLI options
override individual fields with ``model_copy(update=...)``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StagerConfig(BaseSettings):
    """Staging pipeline configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DBFORGE_RESOURCE_DIR=/opt/poleshift/resources
        export DBFORGE_CATALOG_PATH=/etc/poleshift/catalog.toml
        export DBFORGE_LOG_LEVEL=DEBUG

    Or via .env file::

        DBFORGE_MAX_CONCURRENT_RESOURCES=2
        DBFORGE_PROGRESS_LOG_PATH=/tmp/dbforge-progress.jsonl
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DBFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    debug: bool = False

    # Storage
    resource_dir: Path = Path(".dbforge/resources")
    catalog_path: Path | None = None  # None -> built-in catalog

    # Streaming
    chunk_size: int = Field(default=8192, gt=0)

    # HTTP
    http_timeout_seconds: float = Field(default=60.0, gt=0)
    follow_redirects: bool = True
    user_agent: str = "dbforge/0.1.0"

    # Scheduling: 0 runs every resource at once
    max_concurrent_resources: int = Field(default=0, ge=0)

    # Progress transport for the desktop UI
    progress_log_path: Path | None = None
    progress_log_interval_bytes: int = Field(default=1024 * 1024, ge=0)


# Module-level singleton, import as `from dbforge.config import config`
config = StagerConfig()
