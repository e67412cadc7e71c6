"""
Standalone entrypoint for running the push receiver.

Usage:
    python -m receiver_server [OPTIONS]
    push-receiver [OPTIONS]  (after pip install)

Environment Variables:
    RECEIVER_REPO_OWNER: Expected repository owner (required)
    RECEIVER_USE_SSH: Clone over SSH when "true" (default: true)
    RECEIVER_CLONE_ROOT: Clone root directory (default: ./repos)
    RECEIVER_STATIC_ROOT: Static output root directory (default: ./sites)
    RECEIVER_BUILDER: Build command (default: ./builder.sh)
    RECEIVER_LOG_LEVEL: silent, error, info, verbose or debug (default: info)
    RECEIVER_HOST / RECEIVER_PORT: Listen address (default: 0.0.0.0:8000)
"""

import argparse
import dataclasses
import logging
import os
import sys

import uvicorn

from receiver_common.config import LOG_LEVELS, Settings, configure_logging
from receiver_common.errors import ConfigurationError

from . import app as app_module

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Push receiver - build GitHub repositories on push",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Note: Command-line arguments override environment variables.

Examples:
  # Build repositories owned by "my-org", cloning over HTTPS
  RECEIVER_USE_SSH=false push-receiver --repo-owner my-org

  # Use a custom builder and port
  push-receiver --repo-owner my-org --builder /opt/site/build.sh --port 9000

  # Enable debug logging
  push-receiver --log-level debug
        """,
    )

    parser.add_argument("--host", type=str, default=None, help="Listen address (default: RECEIVER_HOST env or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: RECEIVER_PORT env or 8000)")
    parser.add_argument(
        "--repo-owner",
        type=str,
        default=None,
        help="Expected repository owner (default: RECEIVER_REPO_OWNER env)",
    )
    parser.add_argument(
        "--builder",
        type=str,
        default=None,
        help="Build command run for each job (default: RECEIVER_BUILDER env or ./builder.sh)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=list(LOG_LEVELS),
        help="Logging level (default: RECEIVER_LOG_LEVEL env or info)",
    )

    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace, environ: dict[str, str] | None = None) -> Settings:
    """
    Build settings from the environment, then apply command-line overrides.

    Raises:
        ConfigurationError: If required settings are missing
    """
    env = dict(os.environ if environ is None else environ)
    if args.repo_owner:
        env["RECEIVER_REPO_OWNER"] = args.repo_owner
    settings = Settings.from_env(env)

    overrides = {
        name: value
        for name, value in (
            ("host", args.host),
            ("port", args.port),
            ("builder", args.builder),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    return dataclasses.replace(settings, **overrides)


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for the receiver.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    try:
        settings = load_settings(args)
    except ConfigurationError as e:
        configure_logging("error")
        logger.error(str(e))
        return 1

    configure_logging(settings.log_level)
    app_module.settings = settings

    logger.info(f"listening on http://{settings.host}:{settings.port}/")
    try:
        uvicorn.run(
            app_module.app,
            host=settings.host,
            port=settings.port,
            log_config=None,
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
