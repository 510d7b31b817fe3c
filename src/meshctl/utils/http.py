"""HTTP helper for talking to a Meshery server.

Wraps a lazily created ``httpx.Client`` that carries the auth cookies of the
current context. Transport, status and decode failures surface as
``APIError`` so callers only deal with one exception type.
"""

import logging
from typing import Any

import httpx

from .errors import APIError, ServerUnreachableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_PING_TIMEOUT = 3.0
VERSION_PATH = "/api/system/version"


class HTTPClient:
    """Synchronous client bound to one Meshery base URL."""

    def __init__(
        self,
        base_url: str,
        cookies: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        ping_timeout: float = DEFAULT_PING_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._cookies = cookies or {}
        self._timeout = timeout
        self._ping_timeout = ping_timeout
        self._client: httpx.Client | None = None

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Lazy-initialize the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                cookies=self._cookies,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and return the response, raising APIError on failure."""
        url = self.url(path)
        logger.debug(f"{method} {url} params={kwargs.get('params')}")
        try:
            response = self._get_client().request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                message = f"{method} {url} | HTTP {status} | authentication failed, check the token of the current context"
            else:
                body = (e.response.text or "").strip()
                message = " | ".join(part for part in (f"{method} {url}", f"HTTP {status}", body) if part)
            raise APIError(message, status_code=status) from e
        except httpx.RequestError as e:
            raise APIError(f"{method} {url} failed: {e}") from e
        return response

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = self.request("GET", path, params=params)
        return self._decode(response)

    def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        response = self.request("POST", path, json=payload)
        if not response.content:
            return {}
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"unable to decode response from {response.request.url}: {e}") from e

    def is_server_running(self) -> None:
        """Raise ServerUnreachableError unless something answers at the base URL.

        Any HTTP status counts as reachable; only transport failures do not.
        """
        try:
            self._get_client().get(self.base_url, timeout=self._ping_timeout)
        except httpx.RequestError as e:
            logger.debug(f"Reachability check failed for {self.base_url}: {e}")
            raise ServerUnreachableError(
                f"Meshery server is not reachable at {self.base_url}. "
                "Start the server or switch to a context with a running server."
            ) from e

    def get_server_version(self) -> str | None:
        """Return the server's build version (e.g. ``v0.7.2``)."""
        data = self.get_json(VERSION_PATH)
        if not isinstance(data, dict):
            return None
        build = data.get("build")
        if build is None or build == "":
            return None
        if not isinstance(build, str):
            raise APIError(f"unexpected version response from {self.url(VERSION_PATH)}: build is {build!r}")
        return build
