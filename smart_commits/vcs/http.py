"""JSON-over-HTTP plumbing shared by the forge clients."""

import json
import logging
import os
import socket
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field

from smart_commits.vcs.base import VCSClient, VCSError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass
class HTTPResponse:
    status: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    def json(self):
        return json.loads(self.body) if self.body else {}

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HTTPVCSClient(VCSClient):
    """Forge client that talks JSON to a REST API with a single attempt per call."""

    BASE_URL = ""

    def __init__(self, base_url: str | None = None):
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.timeout = int(os.environ.get("SC_TIMEOUT", DEFAULT_TIMEOUT))

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "Content-Type": "application/json"}

    def _url(self, path: str, params: dict | None = None) -> str:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        return url

    def _send(self, method: str, path: str, payload: dict | None = None, params: dict | None = None) -> HTTPResponse:
        url = self._url(path, params)
        data = json.dumps(payload).encode('utf-8') if payload is not None else None
        req = urllib.request.Request(url, data=data, headers=self._headers(), method=method)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                result = HTTPResponse(response.status, response.read().decode('utf-8'), dict(response.headers))
        except urllib.error.HTTPError as e:
            result = HTTPResponse(e.code, e.read().decode('utf-8', errors='replace'), dict(e.headers or {}))
        except (urllib.error.URLError, socket.timeout, OSError) as e:
            raise VCSError.connection_failed(self.provider, f"Could not reach {self.base_url}: {e}")

        logger.debug("%s %s -> %d", method, url, result.status)
        return result

    def _request(self, method: str, path: str, payload: dict | None = None,
                 params: dict | None = None, identifier: str = ""):
        """Send a request and return the decoded JSON body, or raise VCSError."""
        response = self._send(method, path, payload, params)
        if not response.ok:
            self._raise_for_status(response, identifier)
        try:
            return response.json()
        except json.JSONDecodeError:
            raise VCSError.api_request_failed(self.provider, response.status, "Invalid JSON in response")

    def _raise_for_status(self, response: HTTPResponse, identifier: str = "") -> None:
        status = response.status
        if status in (401, 403):
            raise VCSError.authentication_failed(self.provider, status)
        if status == 404 and identifier:
            raise VCSError.repository_not_found(self.provider, identifier)
        if status == 429:
            retry_after = _header(response.headers, 'Retry-After', '60')
            raise VCSError.rate_limited(self.provider, int(retry_after) if retry_after.isdigit() else 60)

        try:
            message = response.json().get('message') or response.body
        except (json.JSONDecodeError, AttributeError):
            message = response.body
        raise VCSError.api_request_failed(self.provider, status, str(message))


def _header(headers: dict[str, str], name: str, default: str = "") -> str:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return default
