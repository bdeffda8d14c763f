"""
Tests for forge clients: repository normalization, error mapping, URL parsing.

HTTP is faked at urllib.request.urlopen, nothing leaves the machine.

Run with:
    pytest tests/test_vcs.py -v
"""

import io
import json
import urllib.error

import pytest

from smart_commits.vcs import (
    BitbucketClient,
    GitHubClient,
    GitLabClient,
    InvalidRepositoryDataError,
    RepositoryData,
    VCSError,
    VCSErrorKind,
    VCSProvider,
    VCSService,
    build_vcs_service,
    extract_project_id,
    parse_repository_url,
)

GITHUB_REPO = {
    "id": 42,
    "name": "widgets",
    "full_name": "octo/widgets",
    "html_url": "https://github.com/octo/widgets",
    "ssh_url": "git@github.com:octo/widgets.git",
    "clone_url": "https://github.com/octo/widgets.git",
    "private": True,
    "default_branch": "main",
    "owner": {"id": 7, "login": "octo", "type": "User", "html_url": "https://github.com/octo"},
    "description": "Widget factory",
}

GITLAB_GROUP_PROJECT = {
    "id": 99,
    "name": "api",
    "path_with_namespace": "acme/api",
    "web_url": "https://gitlab.com/acme/api",
    "ssh_url_to_repo": "git@gitlab.com:acme/api.git",
    "http_url_to_repo": "https://gitlab.com/acme/api.git",
    "visibility": "internal",
    "default_branch": "develop",
    "namespace": {"id": 5, "path": "acme", "kind": "group", "web_url": "https://gitlab.com/acme"},
    "last_activity_at": "2024-01-02T00:00:00Z",
}

BITBUCKET_REPO = {
    "uuid": "{repo-uuid}",
    "name": "infra",
    "full_name": "team/infra",
    "is_private": False,
    "links": {
        "html": {"href": "https://bitbucket.org/team/infra"},
        "clone": [
            {"name": "https", "href": "https://bitbucket.org/team/infra.git"},
            {"name": "ssh", "href": "git@bitbucket.org:team/infra.git"},
        ],
    },
    "owner": {
        "uuid": "{owner-uuid}",
        "display_name": "Team",
        "type": "team",
        "links": {"html": {"href": "https://bitbucket.org/team"}},
    },
}


class FakeResponse:
    def __init__(self, status, body, headers=None):
        self.status = status
        self._body = body.encode("utf-8")
        self.headers = headers or {}

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


@pytest.fixture
def http(monkeypatch):
    """Queue canned answers for urlopen; returns the list of sent requests."""
    for var in ("GITHUB_API_URL", "GITLAB_API_URL", "SC_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    sent = []
    answers = []

    def fake_urlopen(req, timeout=None):
        sent.append(req)
        status, body, headers = answers.pop(0)
        if isinstance(status, Exception):
            raise status
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "error", headers, io.BytesIO(body.encode("utf-8")))
        return FakeResponse(status, body, headers)

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

    def queue(status, body="", headers=None):
        if not isinstance(body, str):
            body = json.dumps(body)
        answers.append((status, body, headers or {}))

    queue.sent = sent
    return queue


# ---------------------------------------------------------------------------
# RepositoryData
# ---------------------------------------------------------------------------

class TestRepositoryData:

    def test_from_github(self):
        repo = RepositoryData.from_api_response(GITHUB_REPO, VCSProvider.GITHUB)

        assert repo.id == "42"
        assert repo.full_name == "octo/widgets"
        assert repo.private is True
        assert repo.owner_name == "octo"
        assert repo.owner_type == "User"
        assert repo.preferred_clone_url() == "https://github.com/octo/widgets.git"
        assert repo.preferred_clone_url(use_ssh=True) == "git@github.com:octo/widgets.git"

    def test_from_gitlab_group_namespace(self):
        repo = RepositoryData.from_api_response(GITLAB_GROUP_PROJECT, VCSProvider.GITLAB)

        assert repo.owner_name == "acme"
        assert repo.owner_type == "group"
        assert repo.private is True
        assert repo.default_branch == "develop"
        assert repo.updated_at == "2024-01-02T00:00:00Z"

    def test_from_bitbucket(self):
        repo = RepositoryData.from_api_response(BITBUCKET_REPO, VCSProvider.BITBUCKET)

        assert repo.id == "{repo-uuid}"
        assert repo.ssh_url == "git@bitbucket.org:team/infra.git"
        assert repo.default_branch == "master"
        assert repo.owner_name == "Team"

    def test_missing_field_raises(self):
        data = dict(GITHUB_REPO)
        del data["clone_url"]
        with pytest.raises(InvalidRepositoryDataError, match="GitHub"):
            RepositoryData.from_api_response(data, VCSProvider.GITHUB)

    def test_missing_owner_field_rejected(self):
        with pytest.raises(InvalidRepositoryDataError, match="owner field: url"):
            RepositoryData(
                id="1", name="x", full_name="a/x", url="u", ssh_url="s", clone_url="c",
                private=False, default_branch="main", owner={"id": "1", "name": "a", "type": "User"},
            )

    def test_empty_default_branch_rejected(self):
        with pytest.raises(InvalidRepositoryDataError):
            RepositoryData(
                id="1", name="x", full_name="a/x", url="u", ssh_url="s", clone_url="c",
                private=False, default_branch="",
                owner={"id": "1", "name": "a", "type": "User", "url": "u"},
            )


# ---------------------------------------------------------------------------
# VCSError
# ---------------------------------------------------------------------------

class TestVCSError:

    def test_not_found_flags(self):
        err = VCSError.repository_not_found(VCSProvider.GITLAB, "acme/api")
        assert err.is_not_found_error
        assert not err.is_authentication_error
        assert err.status == 404
        assert str(err) == "[GitLab] Repository not found: acme/api"

    def test_auth_flags(self):
        err = VCSError.authentication_failed(VCSProvider.GITHUB, 403)
        assert err.is_authentication_error
        assert err.status == 403

    def test_unsupported_provider_by_name(self):
        err = VCSError.unsupported_provider("sourceforge")
        assert err.kind is VCSErrorKind.UNSUPPORTED_PROVIDER
        assert err.provider is None
        assert err.status == 400


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

class TestGitHubClient:

    def test_get_repository(self, http):
        http(200, GITHUB_REPO)
        repo = GitHubClient(token="t0k").get_repository("octo/widgets")

        req = http.sent[0]
        assert repo.name == "widgets"
        assert req.full_url == "https://api.github.com/repos/octo/widgets"
        assert req.get_header("Authorization") == "Bearer t0k"

    def test_create_in_organization(self, http):
        http(201, GITHUB_REPO)
        GitHubClient(token="t").create_repository("widgets", {"organization": "octo", "private": False})

        req = http.sent[0]
        assert req.full_url.endswith("/orgs/octo/repos")
        assert req.get_method() == "POST"
        assert json.loads(req.data) == {"name": "widgets", "description": "", "private": False, "auto_init": False}

    def test_not_found(self, http):
        http(404, {"message": "Not Found"})
        with pytest.raises(VCSError) as exc:
            GitHubClient(token="t").get_repository("octo/missing")
        assert exc.value.is_not_found_error

    def test_unauthorized(self, http):
        http(401, {"message": "Bad credentials"})
        with pytest.raises(VCSError) as exc:
            GitHubClient(token="bad").get_user_info()
        assert exc.value.is_authentication_error

    def test_rate_limited_reads_retry_after(self, http):
        http(429, "", {"Retry-After": "12"})
        with pytest.raises(VCSError) as exc:
            GitHubClient(token="t").get_repositories()
        assert exc.value.kind is VCSErrorKind.RATE_LIMITED
        assert exc.value.retry_after == 12

    def test_server_error_carries_message(self, http):
        http(500, {"message": "upstream exploded"})
        with pytest.raises(VCSError) as exc:
            GitHubClient(token="t").get_user_info()
        assert exc.value.status == 500
        assert "upstream exploded" in str(exc.value)

    def test_connection_failure(self, http):
        http(urllib.error.URLError("refused"))
        with pytest.raises(VCSError) as exc:
            GitHubClient(token="t").get_user_info()
        assert exc.value.kind is VCSErrorKind.CONNECTION_FAILED


class TestGitLabClient:

    @pytest.mark.parametrize("url, expected", [
        ("https://gitlab.com/acme/api.git", "acme/api"),
        ("git@gitlab.com:acme/api.git", "acme/api"),
        ("https://gitlab.com/acme/api", "acme/api"),
        ("12345", "12345"),
    ])
    def test_extract_project_id(self, url, expected):
        assert extract_project_id(url) == expected

    def test_get_repository_encodes_path(self, http):
        http(200, GITLAB_GROUP_PROJECT)
        GitLabClient(token="t").get_repository("git@gitlab.com:acme/api.git")
        assert http.sent[0].full_url == "https://gitlab.com/api/v4/projects/acme%2Fapi"

    def test_create_sets_visibility(self, http):
        http(201, GITLAB_GROUP_PROJECT)
        GitLabClient(token="t").create_repository("api", {"private": True})
        assert json.loads(http.sent[0].data)["visibility"] == "private"


class TestBitbucketClient:

    def test_parse_repository_url(self):
        assert parse_repository_url("git@bitbucket.org:team/infra.git") == ("team", "infra")
        assert parse_repository_url("https://bitbucket.org/team/infra") == ("team", "infra")

    def test_parse_repository_url_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_repository_url("not a url")

    def test_basic_auth_and_listing(self, http):
        http(200, {"values": [BITBUCKET_REPO]})
        repos = BitbucketClient(username="me", app_password="pw").get_repositories(per_page=5)

        req = http.sent[0]
        assert [r.full_name for r in repos] == ["team/infra"]
        assert req.get_header("Authorization") == "Basic bWU6cHc="
        assert "pagelen=5" in req.full_url


# ---------------------------------------------------------------------------
# VCSService
# ---------------------------------------------------------------------------

class TestVCSService:

    def test_repository_exists(self, http):
        http(200, GITHUB_REPO)
        http(404, {"message": "Not Found"})
        service = VCSService({VCSProvider.GITHUB: GitHubClient(token="t")})

        assert service.repository_exists(VCSProvider.GITHUB, "octo/widgets") is True
        assert service.repository_exists(VCSProvider.GITHUB, "octo/nope") is False

    def test_repository_exists_propagates_auth_errors(self, http):
        http(401, {})
        service = VCSService({VCSProvider.GITHUB: GitHubClient(token="t")})
        with pytest.raises(VCSError):
            service.repository_exists(VCSProvider.GITHUB, "octo/widgets")

    def test_default_branch(self, http):
        http(200, GITLAB_GROUP_PROJECT)
        service = VCSService({VCSProvider.GITLAB: GitLabClient(token="t")})
        assert service.get_default_branch(VCSProvider.GITLAB, "acme/api") == "develop"

    def test_unconfigured_provider(self):
        service = VCSService({})
        assert not service.is_provider_supported(VCSProvider.GITHUB)
        with pytest.raises(VCSError) as exc:
            service.get_user_info(VCSProvider.GITHUB)
        assert exc.value.kind is VCSErrorKind.UNSUPPORTED_PROVIDER

    def test_test_connection_false_on_failure(self, http):
        http(401, {})
        service = VCSService({VCSProvider.GITHUB: GitHubClient(token="t")})
        assert service.test_connection(VCSProvider.GITHUB) is False

    def test_build_from_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "gh")
        monkeypatch.delenv("GITLAB_TOKEN", raising=False)
        monkeypatch.setenv("BITBUCKET_USERNAME", "me")
        monkeypatch.delenv("BITBUCKET_APP_PASSWORD", raising=False)

        service = build_vcs_service()
        assert service.available_providers() == [VCSProvider.GITHUB]
