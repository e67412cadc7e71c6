from typing import Any

import requests

from receiver_server.validator import ssh_url_from_https

DEFAULT_SERVER_URL = "http://localhost:8000"


def build_push_payload(
    owner: str,
    repo: str,
    sha: str,
    branch: str = "master",
    ref: str | None = None,
    host: str = "github.com",
) -> dict[str, Any]:
    """
    Build a GitHub-style push event payload.

    Args:
        owner: Repository owner
        repo: Repository name
        sha: Commit the ref was pushed to
        branch: Default branch of the repository
        ref: Pushed ref (default: refs/heads/<branch>)
        host: Repository host

    Returns:
        Payload dictionary with the fields the receiver validates
    """
    url = f"https://{host}/{owner}/{repo}"
    return {
        "ref": ref or f"refs/heads/{branch}",
        "after": sha,
        "repository": {
            "name": repo,
            "url": url,
            "ssh_url": ssh_url_from_https(url) + ".git",
            "master_branch": branch,
        },
    }


def send_event(
    event: str,
    payload: dict[str, Any] | None = None,
    server_url: str = DEFAULT_SERVER_URL,
) -> tuple[int, dict[str, Any]]:
    """
    Send a webhook event to the receiver.

    Args:
        event: Value of the X-GitHub-Event header ("push", "ping", ...)
        payload: JSON body
        server_url: Base URL of the receiver

    Returns:
        Tuple of (status_code, response body)

    Raises:
        RuntimeError: If the receiver cannot be reached
    """
    try:
        response = requests.post(
            f"{server_url}/",
            json=payload or {},
            headers={"X-GitHub-Event": event},
            timeout=30,
        )
        return response.status_code, response.json()
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error sending event to receiver: {e}")


def list_jobs(server_url: str = DEFAULT_SERVER_URL) -> list[dict[str, Any]]:
    """
    List the receiver's running, pending and recent jobs.

    Raises:
        RuntimeError: If the request fails
    """
    try:
        response = requests.get(f"{server_url}/jobs", timeout=30)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error listing jobs: {e}")


def get_job(job_id: str, server_url: str = DEFAULT_SERVER_URL) -> dict[str, Any] | None:
    """
    Get one job including its output tail.

    Returns:
        Job dictionary, or None if the receiver does not know the job

    Raises:
        RuntimeError: If the request fails
    """
    try:
        response = requests.get(f"{server_url}/jobs/{job_id}", timeout=30)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error getting job {job_id}: {e}")
