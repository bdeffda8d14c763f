"""GitLab REST API Client"""

import os
import re
import urllib.parse

from smart_commits.vcs.base import RepositoryData, VCSProvider
from smart_commits.vcs.http import HTTPVCSClient

PROJECT_URL_RE = re.compile(r'^(?:https?://[^/]+/|git@[^:]+:)([^/]+/[^/]+?)(?:\.git)?$')


def extract_project_id(url: str) -> str:
    """Turn an HTTPS or SSH remote URL into "namespace/project"; other input is returned as is."""
    match = PROJECT_URL_RE.match(url)
    return match.group(1) if match else url


class GitLabClient(HTTPVCSClient):
    """GitLab client. Requires GITLAB_TOKEN env var."""

    provider = VCSProvider.GITLAB
    BASE_URL = "https://gitlab.com/api/v4"
    DEFAULT_BRANCH = "main"

    def __init__(self, token: str | None = None, base_url: str | None = None):
        super().__init__(base_url or os.environ.get("GITLAB_API_URL"))
        self.token = token or os.environ.get("GITLAB_TOKEN", "")

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    def create_repository(self, name: str, options: dict | None = None) -> RepositoryData:
        options = dict(options or {})
        payload = {
            'name': name,
            'description': options.pop('description', ''),
            'visibility': 'private' if options.pop('private', False) else 'public',
            'initialize_with_readme': options.pop('auto_init', False),
            'default_branch': options.pop('default_branch', self.DEFAULT_BRANCH),
            **options,
        }
        data = self._request("POST", "/projects", payload)
        return RepositoryData.from_api_response(data, self.provider)

    def get_repositories(self, per_page: int = HTTPVCSClient.DEFAULT_PER_PAGE, page: int = 1) -> list[RepositoryData]:
        params = {'per_page': per_page, 'page': page, 'order_by': 'last_activity_at', 'sort': 'desc', 'membership': 'true'}
        data = self._request("GET", "/projects", params=params)
        return [RepositoryData.from_api_response(repo, self.provider) for repo in data]

    def get_repository(self, identifier: str) -> RepositoryData:
        """identifier is a numeric id, "namespace/project" or a remote URL."""
        project_id = extract_project_id(identifier)
        encoded = urllib.parse.quote(project_id, safe='')
        data = self._request("GET", f"/projects/{encoded}", identifier=project_id)
        return RepositoryData.from_api_response(data, self.provider)

    def get_user_info(self) -> dict:
        return self._request("GET", "/user")
