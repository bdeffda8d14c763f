"""Bitbucket Cloud REST API Client"""

import base64
import os
import re

from smart_commits.vcs.base import RepositoryData, VCSProvider
from smart_commits.vcs.http import HTTPVCSClient

REPOSITORY_URL_RE = re.compile(r'^(?:https?://[^/]+/|git@[^:]+:)([^/]+)/([^/]+?)(?:\.git)?$')


def parse_repository_url(url: str) -> tuple[str, str]:
    """Split a Bitbucket remote URL into (workspace, repo_slug)."""
    match = REPOSITORY_URL_RE.match(url)
    if not match:
        raise ValueError(f"Invalid Bitbucket repository URL: {url}")
    return match.group(1), match.group(2)


class BitbucketClient(HTTPVCSClient):
    """Bitbucket client. Requires BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD env vars."""

    provider = VCSProvider.BITBUCKET
    BASE_URL = "https://api.bitbucket.org/2.0"

    def __init__(self, username: str | None = None, app_password: str | None = None, base_url: str | None = None):
        super().__init__(base_url)
        self.username = username or os.environ.get("BITBUCKET_USERNAME", "")
        self.app_password = app_password or os.environ.get("BITBUCKET_APP_PASSWORD", "")

    def _headers(self) -> dict[str, str]:
        credentials = base64.b64encode(f"{self.username}:{self.app_password}".encode('utf-8')).decode('ascii')
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Basic {credentials}",
        }

    def create_repository(self, name: str, options: dict | None = None) -> RepositoryData:
        options = dict(options or {})
        workspace = options.pop('workspace', None) or self.username
        options.pop('auto_init', None)
        payload = {
            'name': name,
            'scm': 'git',
            'is_private': options.pop('private', True),
            'description': options.pop('description', ''),
            'fork_policy': options.pop('fork_policy', 'allow_forks'),
            **options,
        }
        slug = name.lower().replace(' ', '-')
        data = self._request("POST", f"/repositories/{workspace}/{slug}", payload)
        return RepositoryData.from_api_response(data, self.provider)

    def get_repositories(self, per_page: int = HTTPVCSClient.DEFAULT_PER_PAGE, page: int = 1) -> list[RepositoryData]:
        params = {'pagelen': per_page, 'page': page, 'sort': '-updated_on'}
        data = self._request("GET", f"/repositories/{self.username}", params=params)
        return [RepositoryData.from_api_response(repo, self.provider) for repo in data.get('values', [])]

    def get_repository(self, identifier: str) -> RepositoryData:
        """identifier is "workspace/repo_slug" or a remote URL."""
        if '://' in identifier or identifier.startswith('git@'):
            workspace, slug = parse_repository_url(identifier)
        else:
            workspace, _, slug = identifier.partition('/')
        data = self._request("GET", f"/repositories/{workspace}/{slug}", identifier=f"{workspace}/{slug}")
        return RepositoryData.from_api_response(data, self.provider)

    def get_user_info(self) -> dict:
        return self._request("GET", "/user")
