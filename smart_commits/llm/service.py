"""AI Service - Dispatches generation requests to configured providers."""

import logging
from typing import Mapping

from smart_commits.llm.base import AIProvider, ErrorKind, LLMClient, LLMError, LLMResponse

logger = logging.getLogger(__name__)

AUTO_DETECT_ORDER = [AIProvider.LOCAL, AIProvider.ANTHROPIC, AIProvider.OPENAI, AIProvider.OPENROUTER]

CONNECTION_TEST_PROMPT = "Reply with the single word: ok"


class AIService:
    """Routes requests to one of an explicit set of LLM clients."""

    def __init__(self, clients: Mapping[AIProvider, LLMClient]):
        self._clients = dict(clients)

    @property
    def providers(self) -> list[AIProvider]:
        return list(self._clients)

    def client(self, provider: AIProvider | None = None) -> LLMClient:
        if provider is None:
            if not self._clients:
                raise LLMError.unsupported_provider("none")
            return next(iter(self._clients.values()))
        if provider not in self._clients:
            raise LLMError.unsupported_provider(provider)
        return self._clients[provider]

    def generate(self, prompt: str, provider: AIProvider | None = None, model: str | None = None) -> LLMResponse:
        client = self.client(provider)
        logger.debug("Generating with %s (model=%s, prompt=%d chars)", client.name, model or client.model, len(prompt))
        return client.generate(prompt, model=model)

    def available_models(self, provider: AIProvider | None = None) -> list[str]:
        return self.client(provider).available_models()

    def default_model(self, provider: AIProvider | None = None) -> str:
        return self.client(provider).model

    def test_connection(self, provider: AIProvider | None = None) -> bool:
        try:
            self.generate(CONNECTION_TEST_PROMPT, provider)
        except LLMError as e:
            logger.warning("Connection test failed: %s", e)
            return False
        return True


def create_client(provider: AIProvider, model: str | None = None) -> LLMClient:
    """Construct the client for a single provider."""
    if provider is AIProvider.LOCAL:
        from smart_commits.llm.ollama import OllamaClient
        return OllamaClient(model=model)
    if provider is AIProvider.ANTHROPIC:
        from smart_commits.llm.claude import ClaudeClient
        return ClaudeClient(model=model)
    if provider is AIProvider.OPENAI:
        from smart_commits.llm.openai import OpenAIClient
        return OpenAIClient(model=model)
    if provider is AIProvider.OPENROUTER:
        from smart_commits.llm.openai import OpenRouterClient
        return OpenRouterClient(model=model)
    raise LLMError.unsupported_provider(provider)


def build_ai_service(provider: str = "auto", model: str | None = None) -> tuple[AIService, AIProvider]:
    """Build a service holding the requested provider, or the first that works."""
    if provider != "auto":
        try:
            chosen = AIProvider(provider)
        except ValueError:
            raise LLMError.unsupported_provider(provider)
        return AIService({chosen: create_client(chosen, model)}), chosen

    for candidate in AUTO_DETECT_ORDER:
        try:
            client = create_client(candidate, model)
        except LLMError as e:
            logger.debug("Skipping %s: %s", candidate.value, e)
            continue
        return AIService({candidate: client}), candidate

    raise LLMError(
        "No LLM provider available.\n\n"
        "Option 1 - Use Ollama (free, local):\n"
        "  1. Install: https://ollama.ai\n"
        "  2. Start: ollama serve\n"
        "  3. Pull: ollama pull mistral:7b\n\n"
        "Option 2 - Use a hosted API:\n"
        "  export ANTHROPIC_API_KEY='your-key-here'\n"
        "  export OPENAI_API_KEY='your-key-here'\n"
        "  export OPENROUTER_API_KEY='your-key-here'",
        kind=ErrorKind.NOT_CONFIGURED,
    )
