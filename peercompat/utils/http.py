"""
HTTP client utilities for peercompat.

This module provides an asynchronous HTTP client with optional rate
limiting, a bound on concurrent requests and uniform error mapping.
Requests are never retried: a failed lookup is reported to the caller
as a :class:`NetworkError` on the first failure.
"""

from __future__ import annotations

import time
import httpx
import asyncio
from typing import Any, Dict, Optional, cast

from peercompat.utils.logger import get_logger
from peercompat.__version__ import __version__
from peercompat.exceptions import NetworkError
from peercompat.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_CONCURRENCY,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with rate limiting and concurrency control.

    Args:
        timeout: Request timeout in seconds.
        rate_limit_delay: Minimum delay (seconds) between requests.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests.

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json(
        ...         "https://www.npmpeer.dev/find",
        ...         params={"package": "react", "version": "18.2.0", "dep": "sass"},
        ...     )
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self.timeout = timeout
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._last_request_time: float = 0.0
        self._rate_limit_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _rate_limit(self) -> None:
        """Enforce a minimum delay between outgoing requests."""
        if self.rate_limit_delay <= 0:
            return

        async with self._rate_limit_lock:
            now = time.time()
            elapsed = now - self._last_request_time

            if elapsed < self.rate_limit_delay:
                delay = self.rate_limit_delay - elapsed
                self._last_request_time = now + delay
                await asyncio.sleep(delay)
            else:
                self._last_request_time = now

    async def request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute a single HTTP request.

        Raises:
            NetworkError: Timeout, transport failure or a non-2xx status.
        """
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        await self._rate_limit()

        try:
            async with self._semaphore:
                response = await self._client.request(method, clean_url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Request timeout: %s", clean_url)
            raise NetworkError(
                f"Request timed out after {self.timeout}s: {clean_url}",
                url=clean_url,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Network error for %s: %s", clean_url, exc)
            raise NetworkError(
                f"Request failed: {exc}",
                url=clean_url,
            ) from exc

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"HTTP {response.status_code} error for {clean_url}",
                url=clean_url,
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self.request("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Fetch a URL and parse the response as a JSON object."""
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                status_code=response.status_code,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}",
                url=url,
                status_code=response.status_code,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)
