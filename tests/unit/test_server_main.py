"""
Unit tests for the receiver server entrypoint.
"""

from unittest.mock import patch

import pytest

from receiver_common.errors import ConfigurationError
from receiver_server import app as app_module
from receiver_server.__main__ import load_settings, main, parse_args


@pytest.fixture(autouse=True)
def reset_app_settings():
    yield
    app_module.settings = None
    app_module.coordinator = None


class TestLoadSettings:
    """Test suite for load_settings."""

    def test_environment_only(self):
        settings = load_settings(parse_args([]), {"RECEIVER_REPO_OWNER": "owner"})

        assert settings.repo_owner == "owner"
        assert settings.port == 8000

    def test_arguments_override_environment(self):
        args = parse_args(
            ["--repo-owner", "cli-owner", "--port", "9000", "--builder", "/bin/build", "--log-level", "debug"]
        )

        settings = load_settings(args, {"RECEIVER_REPO_OWNER": "env-owner", "RECEIVER_PORT": "8080"})

        assert settings.repo_owner == "cli-owner"
        assert settings.port == 9000
        assert settings.builder == "/bin/build"
        assert settings.log_level == "debug"

    def test_missing_owner(self):
        with pytest.raises(ConfigurationError):
            load_settings(parse_args([]), {})


class TestMain:
    """Test suite for main."""

    def test_missing_owner_exits_with_error(self):
        with patch.dict("os.environ", {}, clear=True):
            assert main([]) == 1

    def test_runs_uvicorn(self):
        with patch.dict("os.environ", {"RECEIVER_REPO_OWNER": "owner"}, clear=True):
            with patch("receiver_server.__main__.uvicorn.run") as mock_run:
                assert main(["--port", "9001", "--log-level", "error"]) == 0

        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == 9001
        assert app_module.settings.repo_owner == "owner"
