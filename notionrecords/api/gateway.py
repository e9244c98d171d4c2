"""
HTTP gateway for notionrecords.

This module performs the JSON POST calls against the private API and replays
successful responses from the response cache when a cache key is given.
"""

import httpx
import json
import logging
from typing import Any, Dict, Optional

from ..cache import ResponseCache
from ..errors import RemoteRequestFailed


class RequestGateway:
    """
    Executes named remote operations, optionally through the response cache.
    """

    def __init__(self, base_url: str, token: str, cache: ResponseCache,
                 timeout: float = 30.0, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the gateway.

        Args:
            base_url: The API base URL; operation names are resolved against it
            token: Session credential sent as the token_v2 cookie
            cache: Response cache used by execute()
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not base_url.endswith("/"):
            base_url += "/"

        self.base_url = base_url
        self.cache = cache
        self.client = httpx.Client(
            base_url=base_url,
            cookies={"token_v2": token},
            headers={"Content-Type": "application/json; charset=utf-8"},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        self.client.close()

    def execute(self, cache_key: str, operation: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute an operation, returning a cached response when one is available.

        Args:
            cache_key: Key the response is cached under
            operation: Remote operation name, e.g. "loadPageChunk"
            body: JSON request body

        Returns:
            The decoded JSON response

        Raises:
            RemoteRequestFailed: If the request fails or the response is not JSON
        """
        return self.cache.get(cache_key, lambda: self.post(operation, body))

    def post(self, operation: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        POST a JSON body to an operation without consulting the cache.

        Args:
            operation: Remote operation name
            body: JSON request body; an empty body is sent as {}

        Returns:
            The decoded JSON response (an empty dict for an empty body)

        Raises:
            RemoteRequestFailed: If the request fails or the response is not JSON
        """
        content = json.dumps(body) if body else "{}"

        try:
            response = self.client.post(operation, content=content)
            logging.debug(f"POST {operation} -> {response.status_code}")
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logging.error(f"{operation} returned HTTP {e.response.status_code}")
            raise RemoteRequestFailed(operation, str(e), e.response.status_code) from e
        except httpx.RequestError as e:
            logging.error(f"Failed to reach {operation}: {e}")
            raise RemoteRequestFailed(operation, f"Failed to connect: {e}") from e

        if not response.content.strip():
            return {}

        try:
            result = response.json()
        except ValueError as e:
            raise RemoteRequestFailed(operation, f"Response is not JSON: {e}", response.status_code) from e

        if not isinstance(result, dict):
            raise RemoteRequestFailed(operation, "Response is not a JSON object", response.status_code)

        return result
