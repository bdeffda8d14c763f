"""
Tests for the SDK-backed clients (OpenAI, OpenRouter, Claude) with their HTTP client swapped out.

Run with:
    pytest tests/test_sdk_clients.py -v
"""

from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from smart_commits.llm import AIProvider, ClaudeClient, ErrorKind, LLMError, OpenAIClient, OpenRouterClient


def status_response(status, url, headers=None):
    return httpx.Response(status, headers=headers or {}, request=httpx.Request("POST", url))


class Recorder:
    """Callable standing in for `create`; returns or raises the queued result."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def chat_completion(content, total_tokens=9):
    choices = [SimpleNamespace(message=SimpleNamespace(content=content))] if content is not None else []
    return SimpleNamespace(choices=choices, usage=SimpleNamespace(total_tokens=total_tokens))


# ---------------------------------------------------------------------------
# OpenAI / OpenRouter
# ---------------------------------------------------------------------------

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


@pytest.fixture
def openai_env(monkeypatch):
    for name in ("OPENAI_API_KEY", "OPENAI_API_URL", "OPENAI_MODEL",
                 "OPENROUTER_API_KEY", "OPENROUTER_API_URL", "OPENROUTER_MODEL"):
        monkeypatch.delenv(name, raising=False)


def openai_client(result, **kwargs):
    client = OpenAIClient(api_key="sk-test", **kwargs)
    create = Recorder(result)
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client, create


class TestOpenAIClient:

    def test_missing_key_is_not_configured(self, openai_env):
        with pytest.raises(LLMError) as exc:
            OpenAIClient()
        assert exc.value.kind is ErrorKind.NOT_CONFIGURED
        assert "OPENAI_API_KEY" in str(exc.value)

    def test_generate(self, openai_env):
        client, create = openai_client(chat_completion("  feat(api): add pagination \n", total_tokens=42))
        response = client.generate("describe this diff")

        assert response.content == "feat(api): add pagination"
        assert response.tokens_used == 42
        assert response.model == "gpt-4o-mini"
        assert create.calls[0]["messages"][1] == {"role": "user", "content": "describe this diff"}
        assert create.calls[0]["model"] == "gpt-4o-mini"

    def test_model_override(self, openai_env):
        client, create = openai_client(chat_completion("fix: x"))
        assert client.generate("p", model="gpt-4o").model == "gpt-4o"
        assert create.calls[0]["model"] == "gpt-4o"

    def test_rate_limit_carries_retry_after(self, openai_env):
        error = openai.RateLimitError(
            "slow down", response=status_response(429, OPENAI_URL, {"retry-after": "30"}), body=None,
        )
        client, _ = openai_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.RATE_LIMITED
        assert exc.value.retry_after == 30

    def test_rate_limit_without_header(self, openai_env):
        error = openai.RateLimitError("slow down", response=status_response(429, OPENAI_URL), body=None)
        client, _ = openai_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.retry_after == 0

    def test_unknown_model(self, openai_env):
        error = openai.NotFoundError("no such model", response=status_response(404, OPENAI_URL), body=None)
        client, _ = openai_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p", model="gpt-9")
        assert exc.value.kind is ErrorKind.UNSUPPORTED_MODEL
        assert "gpt-9" in str(exc.value)

    def test_bad_key(self, openai_env):
        error = openai.AuthenticationError("bad key", response=status_response(401, OPENAI_URL), body=None)
        client, _ = openai_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.NOT_CONFIGURED

    def test_server_error_keeps_status(self, openai_env):
        error = openai.InternalServerError("upstream broke", response=status_response(500, OPENAI_URL), body=None)
        client, _ = openai_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.API_REQUEST_FAILED
        assert exc.value.status == 500

    def test_connection_error(self, openai_env):
        error = openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL))
        client, _ = openai_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.CONNECTION_FAILED
        assert "https://api.openai.com/v1" in str(exc.value)

    @pytest.mark.parametrize("content", [None, ""])
    def test_empty_answer_is_invalid_response(self, openai_env, content):
        client, _ = openai_client(chat_completion(content))

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.INVALID_RESPONSE

    def test_sdk_retries_disabled(self, openai_env):
        assert OpenAIClient(api_key="sk-test")._client.max_retries == 0


class TestOpenRouterClient:

    def test_base_url_and_title_header(self, openai_env):
        client = OpenRouterClient(api_key="or-test")

        assert client.provider is AIProvider.OPENROUTER
        assert client.model == "openai/gpt-4o-mini"
        assert str(client._client.base_url).startswith("https://openrouter.ai/api/v1")
        assert client._client.default_headers["X-Title"] == "smart-commits"

    def test_key_from_environment(self, openai_env, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "or-env")
        assert OpenRouterClient().api_key == "or-env"

    def test_errors_tagged_with_openrouter(self, openai_env):
        client = OpenRouterClient(api_key="or-test")
        client._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
            create=Recorder(chat_completion(None)),
        )))

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.provider is AIProvider.OPENROUTER
        assert str(exc.value).startswith("[openrouter]")


# ---------------------------------------------------------------------------
# Claude
# ---------------------------------------------------------------------------

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def claude_client(result):
    client = ClaudeClient(api_key="sk-ant-test")
    create = Recorder(result)
    client._client = SimpleNamespace(messages=SimpleNamespace(create=create))
    return client, create


def claude_message(*blocks, input_tokens=10, output_tokens=5):
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


@pytest.fixture
def claude_env(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_MODEL", raising=False)


class TestClaudeClient:

    def test_missing_key_is_not_configured(self, claude_env):
        with pytest.raises(LLMError) as exc:
            ClaudeClient()
        assert exc.value.kind is ErrorKind.NOT_CONFIGURED

    def test_generate_uses_first_text_block(self, claude_env):
        client, create = claude_client(claude_message(
            SimpleNamespace(type="thinking", thinking="..."),
            SimpleNamespace(type="text", text=" refactor(db): split query builder \n"),
        ))
        response = client.generate("describe this diff")

        assert response.content == "refactor(db): split query builder"
        assert response.tokens_used == 15
        assert create.calls[0]["messages"] == [{"role": "user", "content": "describe this diff"}]
        assert create.calls[0]["system"]

    def test_no_text_is_invalid_response(self, claude_env):
        client, _ = claude_client(claude_message())

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.INVALID_RESPONSE

    def test_rate_limit_carries_retry_after(self, claude_env):
        error = anthropic.RateLimitError(
            "slow down", response=status_response(429, ANTHROPIC_URL, {"retry-after": "12"}), body=None,
        )
        client, _ = claude_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.RATE_LIMITED
        assert exc.value.retry_after == 12

    def test_unknown_model(self, claude_env):
        error = anthropic.NotFoundError("not found", response=status_response(404, ANTHROPIC_URL), body=None)
        client, _ = claude_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p", model="claude-9")
        assert exc.value.kind is ErrorKind.UNSUPPORTED_MODEL
        assert "claude-9" in str(exc.value)

    def test_overloaded_keeps_status(self, claude_env):
        error = anthropic.InternalServerError("overloaded", response=status_response(529, ANTHROPIC_URL), body=None)
        client, _ = claude_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.API_REQUEST_FAILED
        assert exc.value.status == 529

    def test_connection_error(self, claude_env):
        error = anthropic.APIConnectionError(request=httpx.Request("POST", ANTHROPIC_URL))
        client, _ = claude_client(error)

        with pytest.raises(LLMError) as exc:
            client.generate("p")
        assert exc.value.kind is ErrorKind.CONNECTION_FAILED

    def test_sdk_retries_disabled(self, claude_env):
        assert ClaudeClient(api_key="sk-ant-test")._client.max_retries == 0
