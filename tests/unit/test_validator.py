"""
Unit tests for receiver_server.validator.

Each check of the push validation must fail with its own reason.
"""

import pytest

from receiver_common.config import Settings
from receiver_common.errors import ValidationError
from receiver_server.validator import (
    parse_ssh_url,
    ssh_url_from_https,
    validate_push,
)

HTTPS = Settings(repo_owner="owner", use_ssh=False)
SSH = Settings(repo_owner="owner", use_ssh=True)


def make_push(**repository_overrides):
    repository = {
        "url": "https://github.com/owner/repo",
        "ssh_url": "git@github.com:owner/repo.git",
        "name": "repo",
        "master_branch": "master",
    }
    repository.update(repository_overrides)
    return {"after": "sha1", "ref": "refs/heads/master", "repository": repository}


def without(mapping, key):
    return {k: v for k, v in mapping.items() if k != key}


class TestValidatePush:
    """Test suite for validate_push."""

    def test_valid_https_push(self):
        push = validate_push(make_push(), HTTPS)

        assert push.after == "sha1"
        assert push.ref == "refs/heads/master"
        assert push.repository.name == "repo"
        assert push.repository.owner == "owner"

    def test_valid_ssh_push(self):
        push = validate_push(make_push(), SSH)

        assert push.repository.ssh_url == "git@github.com:owner/repo.git"
        assert push.repository.owner == "owner"

    def test_missing_repository(self):
        with pytest.raises(ValidationError, match="no repository"):
            validate_push(without(make_push(), "repository"), HTTPS)

    @pytest.mark.parametrize("settings", [HTTPS, SSH])
    def test_empty_repository(self, settings):
        push = dict(make_push(), repository={})

        with pytest.raises(ValidationError) as exc_info:
            validate_push(push, settings)

        assert exc_info.value.reason == "bad repository url: None"

    def test_payload_not_an_object(self):
        with pytest.raises(ValidationError, match="no repository"):
            validate_push(["not", "a", "push"], HTTPS)

    def test_missing_after(self):
        with pytest.raises(ValidationError, match="no after"):
            validate_push(without(make_push(), "after"), HTTPS)

    def test_empty_after(self):
        with pytest.raises(ValidationError, match="no after"):
            validate_push(dict(make_push(), after=""), HTTPS)

    def test_missing_ref(self):
        with pytest.raises(ValidationError, match="no ref"):
            validate_push(without(make_push(), "ref"), HTTPS)

    def test_missing_master_branch(self):
        push = make_push()
        push["repository"] = without(push["repository"], "master_branch")

        with pytest.raises(ValidationError, match="no master"):
            validate_push(push, HTTPS)

    def test_non_string_master_branch(self):
        with pytest.raises(ValidationError, match="no master"):
            validate_push(make_push(master_branch=42), HTTPS)

    def test_missing_repository_url(self):
        push = make_push()
        push["repository"] = without(push["repository"], "url")

        with pytest.raises(ValidationError) as exc_info:
            validate_push(push, HTTPS)

        assert exc_info.value.reason == "bad repository url: None"

    def test_missing_repository_name(self):
        push = make_push()
        push["repository"] = without(push["repository"], "name")

        with pytest.raises(ValidationError, match="bad repo name"):
            validate_push(push, HTTPS)

    def test_mismatched_repository_name(self):
        with pytest.raises(ValidationError, match="bad repo name"):
            validate_push(make_push(name="not-repo"), HTTPS)

    @pytest.mark.parametrize(
        "url",
        [
            "http://github.com/owner/repo",
            "https://example.com/owner/repo",
            "https://github.com/owner",
            "https://github.com/owner/repo/tree/master",
            "https://github.com//repo",
            "not a url",
        ],
    )
    def test_bad_https_url(self, url):
        with pytest.raises(ValidationError) as exc_info:
            validate_push(make_push(url=url), HTTPS)

        assert exc_info.value.reason == f"bad repository url: {url}"

    @pytest.mark.parametrize(
        "ssh_url",
        [
            "foo@github.com:owner/repo",
            "git@example.com:owner/repo.git",
            "https://github.com/owner/repo",
            "git@github.com:repo.git",
        ],
    )
    def test_bad_ssh_url(self, ssh_url):
        with pytest.raises(ValidationError) as exc_info:
            validate_push(make_push(ssh_url=ssh_url), SSH)

        assert exc_info.value.reason == f"bad repository url: {ssh_url}"

    def test_bad_owner_https(self):
        with pytest.raises(ValidationError, match="bad repo owner"):
            validate_push(make_push(url="https://github.com/foo/repo"), HTTPS)

    def test_bad_owner_ssh(self):
        with pytest.raises(ValidationError, match="bad repo owner"):
            validate_push(make_push(ssh_url="git@github.com:foo/repo.git"), SSH)

    def test_owner_checked_before_name(self):
        with pytest.raises(ValidationError, match="bad repo owner"):
            validate_push(make_push(url="https://github.com/foo/other", name="repo"), HTTPS)

    def test_custom_host(self):
        settings = Settings(repo_owner="owner", use_ssh=False, github_host="git.example.com")

        push = validate_push(make_push(url="https://git.example.com/owner/repo"), settings)

        assert push.repository.name == "repo"

    def test_https_mode_ignores_ssh_url(self):
        push = validate_push(make_push(ssh_url="nonsense"), HTTPS)

        assert push.repository.ssh_url == "nonsense"


class TestUrlHelpers:
    """Test suite for URL parsing helpers."""

    def test_parse_scp_style_url(self):
        assert parse_ssh_url("git@github.com:owner/repo.git", "github.com") == ("owner", "repo")

    def test_parse_ssh_scheme_url(self):
        assert parse_ssh_url("ssh://git@github.com/owner/repo.git", "github.com") == ("owner", "repo")

    def test_parse_ssh_url_without_suffix(self):
        assert parse_ssh_url("git@github.com:owner/repo", "github.com") == ("owner", "repo")

    def test_ssh_url_from_https(self):
        assert ssh_url_from_https("https://github.com/owner/repo") == "git@github.com:owner/repo"
