"""LLM Base Classes and Shared Code"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


SYSTEM_PROMPT = """You are a senior software engineer specialized in writing precise, informative git commit messages following the Conventional Commits specification.

Your expertise:
- Deep understanding of conventional commit format (type, scope, subject, body)
- Ability to identify the PRIMARY purpose of a change from a diff
- Writing for future developers who will read git log at 2am debugging production

Your standards:
- Every word earns its place, no filler
- The diff shows WHAT; you explain WHY
- Specific verbs over vague ones (never "update", "change", "modify")
- Imperative mood ("add feature", not "added feature")
- Breaking changes are marked with ! after the type/scope"""


class AIProvider(str, Enum):
    """Supported LLM backends."""
    OPENAI = 'openai'
    OPENROUTER = 'openrouter'
    ANTHROPIC = 'anthropic'
    LOCAL = 'local'

    @property
    def display_name(self) -> str:
        return {
            AIProvider.OPENAI: 'OpenAI',
            AIProvider.OPENROUTER: 'OpenRouter',
            AIProvider.ANTHROPIC: 'Anthropic',
            AIProvider.LOCAL: 'Local LLM (Ollama)',
        }[self]

    @property
    def requires_api_key(self) -> bool:
        return self is not AIProvider.LOCAL


class ErrorKind(str, Enum):
    """What went wrong talking to a provider."""
    API_REQUEST_FAILED = 'api_request_failed'
    INVALID_RESPONSE = 'invalid_response'
    RATE_LIMITED = 'rate_limited'
    UNSUPPORTED_MODEL = 'unsupported_model'
    UNSUPPORTED_PROVIDER = 'unsupported_provider'
    NOT_CONFIGURED = 'not_configured'
    CONNECTION_FAILED = 'connection_failed'


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """Raised when LLM operations fail.

    Carries the provider and request context so callers can branch on
    ``kind`` or ``status`` instead of parsing the message.
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.API_REQUEST_FAILED,
                 provider: AIProvider | None = None, status: int | None = None,
                 retry_after: int | None = None, body: str = ""):
        self.kind = kind
        self.provider = provider
        self.status = status
        self.retry_after = retry_after
        self.body = body
        prefix = f"[{provider.value}] " if provider else ""
        super().__init__(f"{prefix}{message}")

    @classmethod
    def api_request_failed(cls, provider: AIProvider, status: int, body: str = "") -> 'LLMError':
        return cls(f"API request failed with status {status}. Response: {body[:500]}",
                   ErrorKind.API_REQUEST_FAILED, provider, status=status, body=body)

    @classmethod
    def invalid_response(cls, provider: AIProvider, details: str = "") -> 'LLMError':
        return cls(f"Invalid API response format. {details}".strip(), ErrorKind.INVALID_RESPONSE, provider)

    @classmethod
    def rate_limited(cls, provider: AIProvider, retry_after: int = 0) -> 'LLMError':
        message = f"Rate limited. Try again in {retry_after} seconds." if retry_after > 0 else "Rate limit exceeded."
        return cls(message, ErrorKind.RATE_LIMITED, provider, status=429, retry_after=retry_after)

    @classmethod
    def unsupported_model(cls, provider: AIProvider, model: str, hint: str = "") -> 'LLMError':
        message = f"Model '{model}' is not supported by {provider.display_name}"
        return cls(f"{message}. {hint}" if hint else message,
                   ErrorKind.UNSUPPORTED_MODEL, provider, status=404)

    @classmethod
    def unsupported_provider(cls, provider: AIProvider | str) -> 'LLMError':
        name = provider.value if isinstance(provider, AIProvider) else provider
        return cls(f"Provider '{name}' is not available",
                   ErrorKind.UNSUPPORTED_PROVIDER, provider if isinstance(provider, AIProvider) else None)

    @classmethod
    def not_configured(cls, provider: AIProvider, instructions: str) -> 'LLMError':
        return cls(instructions, ErrorKind.NOT_CONFIGURED, provider)

    @classmethod
    def connection_failed(cls, provider: AIProvider, details: str) -> 'LLMError':
        return cls(details, ErrorKind.CONNECTION_FAILED, provider)


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    provider: AIProvider
    DEFAULT_MODEL: str = ""

    model: str

    @abstractmethod
    def generate(self, prompt: str, model: str | None = None) -> LLMResponse:
        pass

    def available_models(self) -> list[str]:
        return [self.DEFAULT_MODEL]

    @property
    @abstractmethod
    def name(self) -> str:
        pass
