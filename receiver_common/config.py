"""
Receiver configuration loaded from the environment.

Environment variables:
    RECEIVER_REPO_OWNER: Expected repository owner (required)
    RECEIVER_USE_SSH: Clone over SSH when "true" (default: true)
    RECEIVER_GITHUB_HOST: Expected host of repository URLs (default: github.com)
    RECEIVER_CLONE_ROOT: Directory repositories are cloned into (default: ./repos)
    RECEIVER_STATIC_ROOT: Directory built sites are written to (default: ./sites)
    RECEIVER_BUILDER: Build command invoked per job (default: ./builder.sh)
    RECEIVER_LOG_LEVEL: silent, error, info, verbose or debug (default: info)
    RECEIVER_HOST: Address the server listens on (default: 0.0.0.0)
    RECEIVER_PORT: Port the server listens on (default: 8000)
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

# Between DEBUG and INFO: queueing and abort decisions
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_LEVELS = {
    "silent": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "info": logging.INFO,
    "verbose": VERBOSE,
    "debug": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a "true"/"false" style environment value."""
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_log_level(name: str) -> int:
    """
    Map a receiver log level name to a logging level.

    Raises:
        ConfigurationError: If the name is unknown
    """
    try:
        return LOG_LEVELS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Invalid log level {name!r}, expected one of: {', '.join(LOG_LEVELS)}"
        ) from None


def configure_logging(level_name: str) -> None:
    """Configure root logging for an entrypoint."""
    logging.basicConfig(level=get_log_level(level_name), format=LOG_FORMAT, force=True)


@dataclass(frozen=True)
class Settings:
    """Read-only configuration for validation and builder invocation."""

    repo_owner: str
    use_ssh: bool = True
    github_host: str = "github.com"
    clone_root: str = "repos"
    static_root: str = "sites"
    builder: str = "./builder.sh"
    log_level: str = "info"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def resolved_clone_root(self) -> str:
        return str(Path(self.clone_root).resolve())

    @property
    def resolved_static_root(self) -> str:
        return str(Path(self.static_root).resolve())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ConfigurationError: If RECEIVER_REPO_OWNER is missing or a value
                cannot be parsed
        """
        if environ is None:
            environ = os.environ

        repo_owner = environ.get("RECEIVER_REPO_OWNER", "")
        if not repo_owner:
            raise ConfigurationError("missing RECEIVER_REPO_OWNER environment variable")

        port_value = environ.get("RECEIVER_PORT", "8000")
        try:
            port = int(port_value)
        except ValueError:
            raise ConfigurationError(f"Invalid RECEIVER_PORT={port_value!r}") from None

        log_level = environ.get("RECEIVER_LOG_LEVEL", "info")
        get_log_level(log_level)

        return cls(
            repo_owner=repo_owner,
            use_ssh=parse_bool(environ.get("RECEIVER_USE_SSH"), default=True),
            github_host=environ.get("RECEIVER_GITHUB_HOST", "github.com"),
            clone_root=environ.get("RECEIVER_CLONE_ROOT", "repos"),
            static_root=environ.get("RECEIVER_STATIC_ROOT", "sites"),
            builder=environ.get("RECEIVER_BUILDER", "./builder.sh"),
            log_level=log_level,
            host=environ.get("RECEIVER_HOST", "0.0.0.0"),
            port=port,
        )
