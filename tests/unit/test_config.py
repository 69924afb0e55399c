"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from minidb.infrastructure.config import Config, ServerConfig, StorageConfig, get_config


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.storage.data_dir == Path("storage")
        assert config.storage.sync_mode == "fsync"
        assert config.server.port == 8000
        assert config.server.metrics_port == 8001
        assert config.observability.log_format == "json"
        assert config.observability.otel_service_name == "minidb"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        """Nested settings come from MINIDB_<SECTION>__<FIELD>."""
        monkeypatch.setenv("MINIDB_STORAGE__DATA_DIR", str(temp_dir / "env"))
        monkeypatch.setenv("MINIDB_STORAGE__SYNC_MODE", "none")
        monkeypatch.setenv("MINIDB_SERVER__PORT", "9100")

        config = Config()

        assert config.storage.data_dir == temp_dir / "env"
        assert config.storage.sync_mode == "none"
        assert config.server.port == 9100

    def test_ensure_directories(self, temp_dir: Path) -> None:
        """Test that ensure_directories creates the data directory."""
        config = Config(storage=StorageConfig(data_dir=temp_dir / "data"))

        config.ensure_directories()

        assert config.storage.data_dir.exists()

    def test_invalid_sync_mode(self) -> None:
        with pytest.raises(ValueError):
            StorageConfig(sync_mode="fdatasync")  # type: ignore

    def test_invalid_port(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(port=0)


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        """Test that get_config returns the same instance."""
        monkeypatch.setenv("MINIDB_STORAGE__DATA_DIR", str(temp_dir / "cached"))
        get_config.cache_clear()
        try:
            config1 = get_config()
            config2 = get_config()
            assert config1 is config2
            assert config1.storage.data_dir.exists()
        finally:
            get_config.cache_clear()
