"""Claude (Anthropic) LLM Client"""

import os

from smart_commits.llm.base import AIProvider, LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT


class ClaudeClient(LLMClient):
    """Claude API client. Requires ANTHROPIC_API_KEY env var."""

    provider = AIProvider.ANTHROPIC
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MODELS = [
        "claude-sonnet-4-20250514",
        "claude-opus-4-20250514",
        "claude-3-5-haiku-latest",
    ]
    MAX_TOKENS = 1000
    TEMPERATURE = 0.4

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model or os.environ.get("ANTHROPIC_MODEL") or self.DEFAULT_MODEL

        if not self.api_key:
            raise LLMError.not_configured(
                self.provider,
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )

        try:
            from anthropic import Anthropic
            self._client = Anthropic(api_key=self.api_key, max_retries=0)
        except ImportError:
            raise LLMError.not_configured(
                self.provider,
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def available_models(self) -> list[str]:
        return list(self.MODELS)

    def generate(self, prompt: str, model: str | None = None) -> LLMResponse:
        from anthropic import APIConnectionError, APIStatusError, AuthenticationError, NotFoundError, RateLimitError

        model = model or self.model
        try:
            response = self._client.messages.create(
                model=model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}]
            )
        except AuthenticationError:
            raise LLMError.not_configured(self.provider, "Invalid API key. Check your ANTHROPIC_API_KEY.")
        except RateLimitError as e:
            retry_after = e.response.headers.get("retry-after", "0")
            raise LLMError.rate_limited(self.provider, int(retry_after) if retry_after.isdigit() else 0)
        except NotFoundError:
            raise LLMError.unsupported_model(self.provider, model)
        except APIStatusError as e:
            raise LLMError.api_request_failed(self.provider, e.status_code, str(e.message))
        except APIConnectionError as e:
            raise LLMError.connection_failed(self.provider, f"Could not reach the Anthropic API: {e}")

        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text.strip()
                break

        if not content:
            raise LLMError.invalid_response(self.provider, "Missing text in response")

        return LLMResponse(
            content=content,
            model=model,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens
        )
