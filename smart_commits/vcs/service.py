"""VCS Service - Dispatches forge operations to configured providers."""

import logging
import os
from typing import Mapping

from smart_commits.vcs.base import RepositoryData, VCSClient, VCSError, VCSProvider

logger = logging.getLogger(__name__)


class VCSService:
    """Routes forge requests to one of an explicit set of clients."""

    def __init__(self, clients: Mapping[VCSProvider, VCSClient]):
        self._clients = dict(clients)

    def client(self, provider: VCSProvider) -> VCSClient:
        if provider not in self._clients:
            raise VCSError.unsupported_provider(provider)
        return self._clients[provider]

    def create_repository(self, provider: VCSProvider, name: str, options: dict | None = None) -> RepositoryData:
        logger.debug("Creating repository %s on %s", name, provider.value)
        return self.client(provider).create_repository(name, options)

    def get_repositories(self, provider: VCSProvider, per_page: int = 30, page: int = 1) -> list[RepositoryData]:
        return self.client(provider).get_repositories(per_page, page)

    def get_repository(self, provider: VCSProvider, identifier: str) -> RepositoryData:
        return self.client(provider).get_repository(identifier)

    def get_user_info(self, provider: VCSProvider) -> dict:
        return self.client(provider).get_user_info()

    def repository_exists(self, provider: VCSProvider, identifier: str) -> bool:
        try:
            self.get_repository(provider, identifier)
        except VCSError as e:
            if e.is_not_found_error:
                return False
            raise
        return True

    def get_default_branch(self, provider: VCSProvider, identifier: str) -> str:
        return self.get_repository(provider, identifier).default_branch

    def test_connection(self, provider: VCSProvider) -> bool:
        try:
            self.get_user_info(provider)
        except VCSError as e:
            logger.warning("Connection test failed: %s", e)
            return False
        return True

    def available_providers(self) -> list[VCSProvider]:
        return list(self._clients)

    def is_provider_supported(self, provider: VCSProvider) -> bool:
        return provider in self._clients


def build_vcs_service() -> VCSService:
    """Build clients for every forge that has credentials in the environment."""
    from smart_commits.vcs.bitbucket import BitbucketClient
    from smart_commits.vcs.github import GitHubClient
    from smart_commits.vcs.gitlab import GitLabClient

    clients: dict[VCSProvider, VCSClient] = {}
    if os.environ.get("GITHUB_TOKEN"):
        clients[VCSProvider.GITHUB] = GitHubClient()
    if os.environ.get("GITLAB_TOKEN"):
        clients[VCSProvider.GITLAB] = GitLabClient()
    if os.environ.get("BITBUCKET_USERNAME") and os.environ.get("BITBUCKET_APP_PASSWORD"):
        clients[VCSProvider.BITBUCKET] = BitbucketClient()

    logger.debug("Configured forges: %s", ", ".join(p.value for p in clients) or "none")
    return VCSService(clients)
