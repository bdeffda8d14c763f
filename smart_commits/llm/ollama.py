"""Ollama LLM Client for Local Models"""

import os
import json
import http.client
import socket
import urllib.request
import urllib.error

from smart_commits.llm.base import AIProvider, LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    provider = AIProvider.LOCAL
    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # 5 minutes for CPU inference

    def __init__(self, model: str | None = None, host: str | None = None):
        self.model = model or self.DEFAULT_MODEL
        self.host = (host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)).rstrip('/')
        self.timeout = int(os.environ.get("SC_TIMEOUT", self.DEFAULT_TIMEOUT))
        self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _verify_connection(self) -> None:
        """Check if Ollama is running and accessible."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=5):
                pass
        except (urllib.error.URLError, OSError):
            raise LLMError.connection_failed(self.provider, "Ollama not running. Start with: ollama serve")

    def _get_json(self, path: str) -> dict:
        req = urllib.request.Request(f"{self.host}{path}")
        with urllib.request.urlopen(req, timeout=5) as response:
            return json.loads(response.read().decode('utf-8'))

    def available_models(self) -> list[str]:
        try:
            data = self._get_json("/api/tags")
        except (urllib.error.URLError, OSError, json.JSONDecodeError):
            return [self.DEFAULT_MODEL]
        return [m.get('name', '') for m in data.get('models', [])] or [self.DEFAULT_MODEL]

    def is_model_loaded(self) -> bool:
        """Check if the model is currently loaded in memory."""
        try:
            data = self._get_json("/api/ps")
        except (urllib.error.URLError, OSError, json.JSONDecodeError):
            return False
        loaded_models = [m.get('name', '') for m in data.get('models', [])]
        return any(self.model in m or m in self.model for m in loaded_models)

    def warmup(self) -> bool:
        """Pre-load the model with a tiny request. Returns True once loaded."""
        if self.is_model_loaded():
            return True

        payload = {
            "model": self.model,
            "prompt": "hi",
            "stream": False,
            "options": {"num_predict": 1},
            "keep_alive": "10m",
        }

        try:
            self._post("/api/generate", payload)
        except (urllib.error.URLError, OSError, json.JSONDecodeError):
            return False
        return self.is_model_loaded()

    def _post(self, path: str, payload: dict) -> dict:
        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(f"{self.host}{path}", data=data, headers={"Content-Type": "application/json"})

        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def generate(self, prompt: str, model: str | None = None) -> LLMResponse:
        """Call Ollama's generate API once."""
        model = model or self.model
        payload = {
            "model": model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "stream": False,
            "keep_alive": "10m",
            "options": {
                "temperature": 0.4,
                "num_predict": 1000,
            }
        }

        try:
            result = self._post("/api/generate", payload)
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise LLMError.unsupported_model(self.provider, model, hint=f"Run: ollama pull {model}")
            raise LLMError.api_request_failed(self.provider, e.code, str(e.reason))
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise LLMError.connection_failed(self.provider, f"Request timed out after {self.timeout}s. Try:\n  - Pre-load model: smart-commit --warmup\n  - Increase timeout: set SC_TIMEOUT=600")
            if "Connection refused" in str(e):
                raise LLMError.connection_failed(self.provider, "Ollama not running. Start with: ollama serve")
            raise LLMError.connection_failed(self.provider, f"Ollama request failed: {e}")
        except socket.timeout:
            raise LLMError.connection_failed(self.provider, f"Request timed out after {self.timeout}s. Try:\n  - Pre-load model: smart-commit --warmup\n  - Increase timeout: set SC_TIMEOUT=600")
        except json.JSONDecodeError:
            raise LLMError.invalid_response(self.provider, "Ollama returned invalid JSON. Try a different model or simpler change.")
        except http.client.HTTPException as e:
            raise LLMError.connection_failed(self.provider, f"Incomplete response from Ollama: {e}. The model may have run out of memory.")
        except OSError as e:
            raise LLMError.connection_failed(self.provider, f"Connection to Ollama lost: {e}. Check that 'ollama serve' is still running.")

        if "response" not in result:
            raise LLMError.invalid_response(self.provider, "Missing response in Ollama output")

        return LLMResponse(
            content=result["response"].strip(),
            model=model,
            tokens_used=result.get("eval_count", 0)
        )
