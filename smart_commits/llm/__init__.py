"""LLM Client Package"""

from smart_commits.llm.base import AIProvider, ErrorKind, LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT
from smart_commits.llm.claude import ClaudeClient
from smart_commits.llm.ollama import OllamaClient
from smart_commits.llm.openai import OpenAIClient, OpenRouterClient
from smart_commits.llm.service import AIService, AUTO_DETECT_ORDER, build_ai_service, create_client


__all__ = [
    "AIProvider",
    "AIService",
    "AUTO_DETECT_ORDER",
    "ErrorKind",
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "ClaudeClient",
    "OllamaClient",
    "OpenAIClient",
    "OpenRouterClient",
    "SYSTEM_PROMPT",
    "build_ai_service",
    "create_client",
]
