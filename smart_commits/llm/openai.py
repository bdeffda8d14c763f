"""OpenAI-compatible LLM Client (OpenAI and OpenRouter)"""

import os

from smart_commits.llm.base import AIProvider, LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT


class OpenAIClient(LLMClient):
    """Chat-completions client. Requires OPENAI_API_KEY env var."""

    provider = AIProvider.OPENAI
    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]
    API_KEY_ENV = "OPENAI_API_KEY"
    BASE_URL_ENV = "OPENAI_API_URL"
    MODEL_ENV = "OPENAI_MODEL"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.4
    TIMEOUT = 60

    def __init__(self, api_key: str | None = None, model: str | None = None, base_url: str | None = None):
        self.api_key = api_key or os.environ.get(self.API_KEY_ENV)
        self.model = model or os.environ.get(self.MODEL_ENV) or self.DEFAULT_MODEL
        self.base_url = base_url or os.environ.get(self.BASE_URL_ENV) or self.DEFAULT_BASE_URL

        if not self.api_key:
            raise LLMError.not_configured(
                self.provider,
                f"No API key found. Set {self.API_KEY_ENV} environment variable:\n"
                f"  export {self.API_KEY_ENV}='your-key-here'"
            )

        try:
            from openai import OpenAI
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.TIMEOUT,
                max_retries=0,
                default_headers=self._extra_headers(),
            )
        except ImportError:
            raise LLMError.not_configured(
                self.provider,
                "OpenAI SDK not installed. Run:\n"
                "  pip install openai"
            )

    def _extra_headers(self) -> dict[str, str]:
        return {}

    @property
    def name(self) -> str:
        return f"{self.provider.display_name} ({self.model})"

    def available_models(self) -> list[str]:
        return list(self.MODELS)

    def generate(self, prompt: str, model: str | None = None) -> LLMResponse:
        from openai import APIConnectionError, APIStatusError, AuthenticationError, NotFoundError, RateLimitError

        model = model or self.model
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
            )
        except AuthenticationError:
            raise LLMError.not_configured(self.provider, f"Invalid API key. Check your {self.API_KEY_ENV}.")
        except RateLimitError as e:
            retry_after = e.response.headers.get("retry-after", "0")
            raise LLMError.rate_limited(self.provider, int(retry_after) if retry_after.isdigit() else 0)
        except NotFoundError:
            raise LLMError.unsupported_model(self.provider, model)
        except APIStatusError as e:
            raise LLMError.api_request_failed(self.provider, e.status_code, str(e.message))
        except APIConnectionError as e:
            raise LLMError.connection_failed(self.provider, f"Could not reach {self.base_url}: {e}")

        if not response.choices or not response.choices[0].message.content:
            raise LLMError.invalid_response(self.provider, "Missing content in response")

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content.strip(),
            model=model,
            tokens_used=usage.total_tokens if usage else 0,
        )


class OpenRouterClient(OpenAIClient):
    """OpenRouter speaks the OpenAI protocol. Requires OPENROUTER_API_KEY."""

    provider = AIProvider.OPENROUTER
    DEFAULT_MODEL = "openai/gpt-4o-mini"
    DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
    MODELS = ["openai/gpt-4o-mini", "anthropic/claude-sonnet-4", "meta-llama/llama-3.1-70b-instruct"]
    API_KEY_ENV = "OPENROUTER_API_KEY"
    BASE_URL_ENV = "OPENROUTER_API_URL"
    MODEL_ENV = "OPENROUTER_MODEL"

    def _extra_headers(self) -> dict[str, str]:
        return {"X-Title": "smart-commits"}
