"""GitHub REST API Client"""

import os

from smart_commits.vcs.base import RepositoryData, VCSProvider
from smart_commits.vcs.http import HTTPVCSClient


class GitHubClient(HTTPVCSClient):
    """GitHub client. Requires GITHUB_TOKEN env var."""

    provider = VCSProvider.GITHUB
    BASE_URL = "https://api.github.com"
    API_VERSION = "2022-11-28"

    def __init__(self, token: str | None = None, base_url: str | None = None):
        super().__init__(base_url or os.environ.get("GITHUB_API_URL"))
        self.token = token or os.environ.get("GITHUB_TOKEN", "")

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": self.API_VERSION,
            "Content-Type": "application/json",
        }

    def create_repository(self, name: str, options: dict | None = None) -> RepositoryData:
        options = dict(options or {})
        organization = options.pop('organization', None)
        payload = {
            'name': name,
            'description': options.pop('description', ''),
            'private': options.pop('private', True),
            'auto_init': options.pop('auto_init', False),
            **options,
        }
        path = f"/orgs/{organization}/repos" if organization else "/user/repos"
        data = self._request("POST", path, payload)
        return RepositoryData.from_api_response(data, self.provider)

    def get_repositories(self, per_page: int = HTTPVCSClient.DEFAULT_PER_PAGE, page: int = 1) -> list[RepositoryData]:
        params = {'per_page': per_page, 'page': page, 'sort': 'updated', 'direction': 'desc'}
        data = self._request("GET", "/user/repos", params=params)
        return [RepositoryData.from_api_response(repo, self.provider) for repo in data]

    def get_repository(self, identifier: str) -> RepositoryData:
        """identifier is "owner/repo"."""
        data = self._request("GET", f"/repos/{identifier}", identifier=identifier)
        return RepositoryData.from_api_response(data, self.provider)

    def get_user_info(self) -> dict:
        return self._request("GET", "/user")

    def list_organizations(self) -> list[dict]:
        return self._request("GET", "/user/orgs")
