"""Tests for settings and logging configuration."""

import pytest
from pydantic import ValidationError

from neo_uploads.config import (
    MIB,
    AzureBackendSettings,
    LoggingConfig,
    StrategyKind,
    UploadStoreSettings,
)


class TestUploadStoreSettings:
    """Test defaults, environment loading and validation."""

    def test_defaults(self):
        settings = UploadStoreSettings()

        assert settings.blob_prefix == "uploads"
        assert settings.default_strategy == StrategyKind.STAGED
        assert settings.default_chunk_size == 4 * MIB
        assert settings.max_chunk_size == 100 * MIB
        assert settings.hide_until_complete is False
        assert settings.metadata_prefix == "upload_"
        assert settings.user_metadata_prefix == "upload_meta_"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("NEO_UPLOADS_DEFAULT_STRATEGY", "append")
        monkeypatch.setenv("NEO_UPLOADS_STAGED_THRESHOLD_BYTES", "1048576")
        monkeypatch.setenv("NEO_UPLOADS_HIDE_UNTIL_COMPLETE", "true")

        settings = UploadStoreSettings()

        assert settings.default_strategy == StrategyKind.APPEND
        assert settings.staged_threshold_bytes == MIB
        assert settings.hide_until_complete is True

    def test_blob_prefix_slashes_stripped(self):
        assert UploadStoreSettings(blob_prefix="/tus/files/").blob_prefix == "tus/files"

    def test_metadata_prefixes_lowercased(self):
        settings = UploadStoreSettings(metadata_prefix="Tus_", user_metadata_prefix="TUS_META_")

        assert settings.metadata_prefix == "tus_"
        assert settings.user_metadata_prefix == "tus_meta_"

    @pytest.mark.parametrize("overrides", [
        {"max_chunk_size": 101 * MIB},
        {"default_chunk_size": 0},
        {"default_chunk_size": 8 * MIB, "max_chunk_size": 4 * MIB},
        {"small_upload_threshold": 200 * MIB},
        {"metadata_prefix": "1x_"},
        {"metadata_prefix": "up-load_"},
        {"user_metadata_prefix": "meta_"},
        {"user_metadata_prefix": "upload_"},
        {"staged_threshold_bytes": -1},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            UploadStoreSettings(**overrides)


class TestAzureBackendSettings:
    """Test Azure backend settings."""

    def test_connection_string_is_secret(self, monkeypatch):
        monkeypatch.setenv("NEO_UPLOADS_AZURE_CONNECTION_STRING", "AccountKey=secret")

        settings = AzureBackendSettings()

        assert settings.connection_string.get_secret_value() == "AccountKey=secret"
        assert "secret" not in repr(settings)

    @pytest.mark.parametrize("container_name", ["Uploads", "up_loads", "ab"])
    def test_invalid_container_name(self, container_name):
        with pytest.raises(ValidationError):
            AzureBackendSettings(container_name=container_name)


class TestLoggingConfig:
    """Test logging configuration built from the environment."""

    def test_normal_verbosity_logs_warnings(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("LOG_VERBOSITY", "NORMAL")

        config = LoggingConfig.build_config()

        assert config["root"]["level"] == "WARNING"
        assert config["loggers"]["azure"]["level"] == "ERROR"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_VERBOSITY", "QUIET")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = LoggingConfig.build_config()

        assert config["root"]["level"] == "DEBUG"
        assert config["loggers"]["neo_uploads.features.uploads.strategies"]["level"] == "DEBUG"

    def test_unknown_verbosity_falls_back_to_warning(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("LOG_VERBOSITY", "chatty")

        assert LoggingConfig.build_config()["root"]["level"] == "WARNING"
