"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from aws_build.config import Settings, get_settings, print_settings_json


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.rust_version == "stable"
        assert settings.container_cmd is None
        assert settings.relabel is None
        assert settings.strip is False
        assert settings.tmp_dir is None
        assert settings.log_level == "INFO"

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "AWS_BUILD_RUST_VERSION": "1.45.2",
                "AWS_BUILD_CONTAINER_CMD": "podman",
                "AWS_BUILD_RELABEL": "unshared",
                "AWS_BUILD_STRIP": "true",
                "AWS_BUILD_LOG_LEVEL": "DEBUG",
            },
        ):
            settings = Settings(_env_file=None)
            assert settings.rust_version == "1.45.2"
            assert settings.container_cmd == "podman"
            assert settings.relabel == "unshared"
            assert settings.strip is True
            assert settings.log_level == "DEBUG"

    def test_tmp_dir_from_env(self, tmp_path: Path) -> None:
        """Temp dir should be configurable via env."""
        with patch.dict(os.environ, {"AWS_BUILD_TMP_DIR": str(tmp_path)}):
            settings = Settings(_env_file=None)
            assert settings.tmp_dir == tmp_path

    def test_invalid_container_cmd_rejected(self) -> None:
        """Unknown container commands should fail validation."""
        with patch.dict(os.environ, {"AWS_BUILD_CONTAINER_CMD": "lxc"}):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_empty_rust_version_rejected(self) -> None:
        """An empty Rust version is not a toolchain."""
        with pytest.raises(ValidationError):
            Settings(rust_version="")


class TestGetSettings:
    """Test get_settings function."""

    def test_returns_settings_instance(self) -> None:
        """get_settings should return a Settings instance."""
        assert isinstance(get_settings(), Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_returns_valid_json(self) -> None:
        """Output should be valid JSON with every field."""
        data = json.loads(print_settings_json(Settings(_env_file=None)))

        assert set(data) == {
            "rust_version",
            "container_cmd",
            "relabel",
            "strip",
            "tmp_dir",
            "log_level",
        }

    def test_uses_given_settings(self) -> None:
        """Explicit settings should be rendered."""
        settings = Settings(rust_version="nightly", strip=True)
        data = json.loads(print_settings_json(settings))

        assert data["rust_version"] == "nightly"
        assert data["strip"] is True
