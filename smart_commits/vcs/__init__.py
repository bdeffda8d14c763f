"""Hosted Git Forge Package"""

from smart_commits.vcs.base import (
    InvalidRepositoryDataError,
    RepositoryData,
    VCSClient,
    VCSError,
    VCSErrorKind,
    VCSProvider,
)
from smart_commits.vcs.bitbucket import BitbucketClient, parse_repository_url
from smart_commits.vcs.github import GitHubClient
from smart_commits.vcs.gitlab import GitLabClient, extract_project_id
from smart_commits.vcs.service import VCSService, build_vcs_service

__all__ = [
    "BitbucketClient",
    "GitHubClient",
    "GitLabClient",
    "InvalidRepositoryDataError",
    "RepositoryData",
    "VCSClient",
    "VCSError",
    "VCSErrorKind",
    "VCSProvider",
    "VCSService",
    "build_vcs_service",
    "extract_project_id",
    "parse_repository_url",
]
