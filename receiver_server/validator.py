"""
Validation of GitHub push event payloads.

Validation is pure: it reads only the payload and the receiver settings and
performs no network or filesystem access. Each failed check raises
ValidationError with a distinct reason.
"""

import re
from typing import Any
from urllib.parse import urlsplit

from receiver_common.config import Settings
from receiver_common.errors import ValidationError
from receiver_common.models import PushEvent

# scp-like SSH form: user@host:owner/repo.git
SCP_URL_PATTERN = re.compile(r"^(?P<user>[^@/:]+)@(?P<host>[^:/]+):(?P<path>.+)$")


def strip_suffix(suffix: str, value: str) -> str:
    """Remove suffix from the end of value if present."""
    if suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value


def split_repo_path(path: str, url: Any) -> tuple[str, str]:
    """
    Split a URL path into owner and repository name.

    Raises:
        ValidationError: If the path is not exactly two non-empty segments
    """
    parts = path.lstrip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise ValidationError(f"bad repository url: {url}")
    return parts[0], parts[1]


def parse_https_url(url: Any, expected_host: str) -> tuple[str, str]:
    """
    Check an HTTPS repository URL and return (owner, name).

    Raises:
        ValidationError: If the URL is not https://<expected_host>/owner/name
    """
    message = f"bad repository url: {url}"
    if not isinstance(url, str) or not url:
        raise ValidationError(message)
    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname
    except ValueError:
        raise ValidationError(message) from None

    if parsed.scheme != "https" or hostname != expected_host.lower():
        raise ValidationError(message)
    return split_repo_path(parsed.path, url)


def parse_ssh_url(url: Any, expected_host: str) -> tuple[str, str]:
    """
    Check an SSH repository URL and return (owner, name).

    Accepts git@host:owner/repo.git and ssh://git@host/owner/repo.git. A
    trailing .git is removed from the repository name.

    Raises:
        ValidationError: If the URL is not a git@<expected_host> URL
    """
    message = f"bad repository url: {url}"
    if not isinstance(url, str) or not url:
        raise ValidationError(message)

    match = SCP_URL_PATTERN.match(url)
    if match:
        user, hostname, path = match.group("user"), match.group("host"), match.group("path")
    else:
        try:
            parsed = urlsplit(url)
            hostname = parsed.hostname
        except ValueError:
            raise ValidationError(message) from None
        if parsed.scheme != "ssh":
            raise ValidationError(message)
        user, path = parsed.username, parsed.path

    if user != "git" or (hostname or "").lower() != expected_host.lower():
        raise ValidationError(message)

    owner, name = split_repo_path(path, url)
    return owner, strip_suffix(".git", name)


def is_nonempty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def validate_push(payload: Any, settings: Settings) -> PushEvent:
    """
    Validate a push event payload.

    Args:
        payload: Decoded JSON body of the push event
        settings: Receiver settings (expected owner, transport, host)

    Returns:
        The validated PushEvent

    Raises:
        ValidationError: With one of the reasons "no repository",
            "bad repository url: <value>", "bad repo owner", "bad repo name",
            "no master", "no ref" or "no after"
    """
    if not isinstance(payload, dict):
        raise ValidationError("no repository")
    repository = payload.get("repository")
    if not isinstance(repository, dict):
        raise ValidationError("no repository")

    if settings.use_ssh:
        owner, name = parse_ssh_url(repository.get("ssh_url"), settings.github_host)
    else:
        owner, name = parse_https_url(repository.get("url"), settings.github_host)

    if owner != settings.repo_owner:
        raise ValidationError("bad repo owner")
    if name != repository.get("name"):
        raise ValidationError("bad repo name")

    # Confirm the remaining details are present
    if not is_nonempty_string(repository.get("master_branch")):
        raise ValidationError("no master")
    if not is_nonempty_string(payload.get("ref")):
        raise ValidationError("no ref")
    if not is_nonempty_string(payload.get("after")):
        raise ValidationError("no after")

    return PushEvent.from_dict(payload, owner=owner)


def ssh_url_from_https(https_url: str) -> str:
    """
    Convert an HTTPS clone URL to an SSH clone URL.

    Push events from older webhooks do not include the SSH clone URL, so it is
    derived from the HTTPS one: https://host/owner/repo -> git@host:owner/repo
    """
    parsed = urlsplit(https_url)
    return f"git@{parsed.hostname}:{parsed.path.lstrip('/')}"
