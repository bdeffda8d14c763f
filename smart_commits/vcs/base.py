"""VCS Base Classes - Forge providers, repository data and errors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

OWNER_FIELDS = ('id', 'name', 'type', 'url')


class VCSProvider(str, Enum):
    """Supported hosted git forges."""
    GITHUB = 'github'
    GITLAB = 'gitlab'
    BITBUCKET = 'bitbucket'

    @property
    def display_name(self) -> str:
        return {
            VCSProvider.GITHUB: 'GitHub',
            VCSProvider.GITLAB: 'GitLab',
            VCSProvider.BITBUCKET: 'Bitbucket',
        }[self]


class VCSErrorKind(str, Enum):
    API_REQUEST_FAILED = 'api_request_failed'
    REPOSITORY_NOT_FOUND = 'repository_not_found'
    AUTHENTICATION_FAILED = 'authentication_failed'
    UNSUPPORTED_PROVIDER = 'unsupported_provider'
    RATE_LIMITED = 'rate_limited'
    CONNECTION_FAILED = 'connection_failed'


class VCSError(Exception):
    """Raised when a forge API call fails."""

    def __init__(self, message: str, kind: VCSErrorKind = VCSErrorKind.API_REQUEST_FAILED,
                 provider: VCSProvider | None = None, status: int | None = None,
                 retry_after: int | None = None, body: str = ""):
        self.kind = kind
        self.provider = provider
        self.status = status
        self.retry_after = retry_after
        self.body = body
        prefix = f"[{provider.display_name}] " if provider else ""
        super().__init__(f"{prefix}{message}")

    @classmethod
    def api_request_failed(cls, provider: VCSProvider, status: int, body: str = "") -> 'VCSError':
        return cls(f"API request failed with status {status}. Response: {body[:500]}",
                   VCSErrorKind.API_REQUEST_FAILED, provider, status=status, body=body)

    @classmethod
    def repository_not_found(cls, provider: VCSProvider, identifier: str) -> 'VCSError':
        return cls(f"Repository not found: {identifier}", VCSErrorKind.REPOSITORY_NOT_FOUND, provider, status=404)

    @classmethod
    def authentication_failed(cls, provider: VCSProvider, status: int = 401) -> 'VCSError':
        return cls("Authentication failed. Please check your credentials.",
                   VCSErrorKind.AUTHENTICATION_FAILED, provider, status=status)

    @classmethod
    def unsupported_provider(cls, provider: VCSProvider | str) -> 'VCSError':
        name = provider.value if isinstance(provider, VCSProvider) else provider
        return cls(f"Provider '{name}' is not supported", VCSErrorKind.UNSUPPORTED_PROVIDER,
                   provider if isinstance(provider, VCSProvider) else None, status=400)

    @classmethod
    def rate_limited(cls, provider: VCSProvider, retry_after: int = 0) -> 'VCSError':
        message = f"Rate limited. Try again in {retry_after} seconds." if retry_after > 0 else "Rate limit exceeded."
        return cls(message, VCSErrorKind.RATE_LIMITED, provider, status=429, retry_after=retry_after)

    @classmethod
    def connection_failed(cls, provider: VCSProvider, details: str) -> 'VCSError':
        return cls(details, VCSErrorKind.CONNECTION_FAILED, provider)

    @property
    def is_authentication_error(self) -> bool:
        return self.kind is VCSErrorKind.AUTHENTICATION_FAILED

    @property
    def is_not_found_error(self) -> bool:
        return self.kind is VCSErrorKind.REPOSITORY_NOT_FOUND


class InvalidRepositoryDataError(ValueError):
    """Raised when a forge response cannot be turned into RepositoryData."""
    pass


@dataclass(frozen=True)
class RepositoryData:
    """A hosted repository, normalized across forges."""
    id: str
    name: str
    full_name: str
    url: str
    ssh_url: str
    clone_url: str
    private: bool
    default_branch: str
    owner: dict[str, str] = field(default_factory=dict)
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self):
        for key in OWNER_FIELDS:
            if key not in self.owner:
                raise InvalidRepositoryDataError(f"Missing owner field: {key}")
        if not self.default_branch:
            raise InvalidRepositoryDataError("Default branch cannot be empty")

    @classmethod
    def from_api_response(cls, data: dict[str, Any], provider: VCSProvider) -> 'RepositoryData':
        """Build from the JSON body a forge returns for a repository."""
        parsers = {
            VCSProvider.GITHUB: cls._from_github,
            VCSProvider.GITLAB: cls._from_gitlab,
            VCSProvider.BITBUCKET: cls._from_bitbucket,
        }
        if provider not in parsers:
            raise InvalidRepositoryDataError(f"Unsupported provider: {provider}")
        try:
            return parsers[provider](data)
        except (KeyError, IndexError, TypeError) as e:
            raise InvalidRepositoryDataError(f"Missing field in {provider.display_name} response: {e}") from e

    @classmethod
    def _from_github(cls, data: dict) -> 'RepositoryData':
        owner = data['owner']
        return cls(
            id=str(data['id']),
            name=data['name'],
            full_name=data['full_name'],
            url=data['html_url'],
            ssh_url=data['ssh_url'],
            clone_url=data['clone_url'],
            private=bool(data['private']),
            default_branch=data['default_branch'],
            owner={'id': str(owner['id']), 'name': owner['login'], 'type': owner['type'], 'url': owner['html_url']},
            description=data.get('description'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
        )

    @classmethod
    def _from_gitlab(cls, data: dict) -> 'RepositoryData':
        # Group-owned projects have no "owner"; fall back to the namespace
        owner = data.get('owner') or data['namespace']
        return cls(
            id=str(data['id']),
            name=data['name'],
            full_name=data['path_with_namespace'],
            url=data['web_url'],
            ssh_url=data['ssh_url_to_repo'],
            clone_url=data['http_url_to_repo'],
            private=data['visibility'] != 'public',
            default_branch=data['default_branch'],
            owner={
                'id': str(owner['id']),
                'name': owner.get('username') or owner['path'],
                'type': owner.get('kind', 'user'),
                'url': owner['web_url'],
            },
            description=data.get('description'),
            created_at=data.get('created_at'),
            updated_at=data.get('last_activity_at'),
        )

    @classmethod
    def _from_bitbucket(cls, data: dict) -> 'RepositoryData':
        links = data['links']
        clone = {link['name']: link['href'] for link in links['clone']}
        owner = data['owner']
        return cls(
            id=data['uuid'],
            name=data['name'],
            full_name=data['full_name'],
            url=links['html']['href'],
            ssh_url=clone.get('ssh', ''),
            clone_url=clone.get('https', ''),
            private=bool(data['is_private']),
            default_branch=(data.get('mainbranch') or {}).get('name') or 'master',
            owner={
                'id': owner['uuid'],
                'name': owner.get('username') or owner['display_name'],
                'type': owner['type'],
                'url': owner['links']['html']['href'],
            },
            description=data.get('description'),
            created_at=data.get('created_on'),
            updated_at=data.get('updated_on'),
        )

    @property
    def owner_id(self) -> str:
        return self.owner['id']

    @property
    def owner_name(self) -> str:
        return self.owner['name']

    @property
    def owner_type(self) -> str:
        return self.owner['type']

    def preferred_clone_url(self, use_ssh: bool = False) -> str:
        return self.ssh_url if use_ssh else self.clone_url


class VCSClient(ABC):
    """Abstract base for forge API clients."""

    provider: VCSProvider
    DEFAULT_PER_PAGE = 30

    @abstractmethod
    def create_repository(self, name: str, options: dict | None = None) -> RepositoryData:
        pass

    @abstractmethod
    def get_repositories(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> list[RepositoryData]:
        pass

    @abstractmethod
    def get_repository(self, identifier: str) -> RepositoryData:
        pass

    @abstractmethod
    def get_user_info(self) -> dict:
        pass
