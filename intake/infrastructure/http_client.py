"""HTTP Client for shared connection management.

This module provides a managed httpx.AsyncClient for reusing
HTTP connections across source connectors.
"""

from typing import Any

import httpx

from intake.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "intake-pipeline/0.1 (+https://github.com)"


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Create once at process start, inject into connectors, close at shutdown.

    Example:
        >>> http_client = HTTPClient()
        >>> response = await http_client.get("https://hn.algolia.com/api/v1/search")
        >>> await http_client.close()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            user_agent: User-Agent header sent with every request
        """
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )
        logger.info(
            "HTTP client initialized",
            timeout=timeout,
            max_connections=max_connections,
            max_keepalive=max_keepalive_connections,
        )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send GET request."""
        return await self._client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send POST request."""
        return await self._client.post(url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        logger.info("HTTP client closed")


__all__ = ["HTTPClient"]
