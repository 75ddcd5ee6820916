"""Tests for StagerConfig — env-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from dbforge.config import StagerConfig


class TestStagerConfig:
    def test_defaults(self):
        config = StagerConfig()
        assert config.log_level == "INFO"
        assert config.chunk_size == 8192
        assert config.max_concurrent_resources == 0
        assert config.follow_redirects is True
        assert config.progress_log_interval_bytes == 1024 * 1024

    def test_default_paths(self):
        config = StagerConfig()
        assert config.resource_dir == Path(".dbforge/resources")
        assert config.catalog_path is None
        assert config.progress_log_path is None

    def test_unknown_env_vars_are_ignored(self, monkeypatch):
        monkeypatch.setenv("DBFORGE_ENVIRONMENT", "production")
        config = StagerConfig()
        assert "environment" not in StagerConfig.model_fields
        assert not hasattr(config, "environment")

    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("DBFORGE_RESOURCE_DIR", str(tmp_path))
        monkeypatch.setenv("DBFORGE_CHUNK_SIZE", "65536")
        monkeypatch.setenv("DBFORGE_MAX_CONCURRENT_RESOURCES", "2")
        config = StagerConfig()
        assert config.resource_dir == tmp_path
        assert config.chunk_size == 65536
        assert config.max_concurrent_resources == 2

    @pytest.mark.parametrize(
        "field, value",
        [
            ("chunk_size", 0),
            ("http_timeout_seconds", 0),
            ("max_concurrent_resources", -1),
            ("progress_log_interval_bytes", -1),
        ],
    )
    def test_invalid_values_rejected(self, field: str, value):
        with pytest.raises(ValidationError):
            StagerConfig(**{field: value})

    def test_model_copy_override(self, tmp_path: Path):
        config = StagerConfig().model_copy(update={"resource_dir": tmp_path})
        assert config.resource_dir == tmp_path
