"""
Unit tests for receiver_common.config.
"""

import logging
from pathlib import Path

import pytest

from receiver_common.config import VERBOSE, Settings, get_log_level, parse_bool
from receiver_common.errors import ConfigurationError


class TestSettings:
    """Test suite for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({"RECEIVER_REPO_OWNER": "owner"})

        assert settings.repo_owner == "owner"
        assert settings.use_ssh is True
        assert settings.github_host == "github.com"
        assert settings.clone_root == "repos"
        assert settings.static_root == "sites"
        assert settings.builder == "./builder.sh"
        assert settings.log_level == "info"
        assert settings.port == 8000

    def test_reads_environment(self, tmp_path):
        settings = Settings.from_env(
            {
                "RECEIVER_REPO_OWNER": "owner",
                "RECEIVER_USE_SSH": "false",
                "RECEIVER_CLONE_ROOT": str(tmp_path / "repos"),
                "RECEIVER_STATIC_ROOT": str(tmp_path / "sites"),
                "RECEIVER_BUILDER": "/usr/local/bin/build-site",
                "RECEIVER_LOG_LEVEL": "debug",
                "RECEIVER_PORT": "9000",
            }
        )

        assert settings.use_ssh is False
        assert settings.builder == "/usr/local/bin/build-site"
        assert settings.log_level == "debug"
        assert settings.port == 9000
        assert settings.resolved_clone_root == str((tmp_path / "repos").resolve())

    def test_roots_are_resolved(self):
        settings = Settings(repo_owner="owner", clone_root="repos", static_root="out/sites")

        assert settings.resolved_clone_root == str(Path("repos").resolve())
        assert settings.resolved_static_root == str(Path("out/sites").resolve())

    def test_missing_owner(self):
        with pytest.raises(ConfigurationError, match="RECEIVER_REPO_OWNER"):
            Settings.from_env({})

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError, match="RECEIVER_PORT"):
            Settings.from_env({"RECEIVER_REPO_OWNER": "owner", "RECEIVER_PORT": "http"})

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError, match="log level"):
            Settings.from_env({"RECEIVER_REPO_OWNER": "owner", "RECEIVER_LOG_LEVEL": "loud"})


class TestHelpers:
    """Test suite for configuration helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [("true", True), ("TRUE", True), ("1", True), ("false", False), ("no", False)],
    )
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected

    def test_parse_bool_default(self):
        assert parse_bool(None, default=True) is True
        assert parse_bool("", default=False) is False

    def test_log_levels(self):
        assert get_log_level("debug") == logging.DEBUG
        assert get_log_level("verbose") == VERBOSE
        assert get_log_level("INFO") == logging.INFO
        assert get_log_level("error") == logging.ERROR
        assert get_log_level("silent") > logging.CRITICAL
        assert logging.getLevelName(VERBOSE) == "VERBOSE"
