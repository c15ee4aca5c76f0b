"""
HTTP client utilities for catalogkeeper.

This module provides an asynchronous HTTP client with retry logic,
rate limiting and concurrency control, used to download Maven repository
metadata.
"""

from __future__ import annotations

import time
import httpx
import random
import asyncio
from typing import Any, Optional, Tuple

from catalogkeeper.utils.logger import get_logger
from catalogkeeper.__version__ import __version__
from catalogkeeper.exceptions import NetworkError, RepositoryError
from catalogkeeper.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

#: Maximum number of consecutive 429 answers tolerated for one request.
MAX_RATE_LIMIT_RETRIES = 5


class HTTPClient:
    """Asynchronous HTTP client with retries, rate limiting, and concurrency control.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Maximum number of retry attempts on timeouts,
            connection errors and 5xx answers.
        rate_limit_delay: Minimum delay (seconds) between requests.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests.

    Example:
        >>> async with HTTPClient() as client:
        ...     xml = await client.get_text(
        ...         "https://repo.maven.apache.org/maven2/junit/junit/maven-metadata.xml"
        ...     )
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._next_request_at: float = 0.0
        self._rate_limit_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _rate_limit(self) -> None:
        """Space outgoing requests at least ``rate_limit_delay`` seconds apart."""
        if self.rate_limit_delay <= 0:
            return

        async with self._rate_limit_lock:
            now = time.monotonic()
            wait = self._next_request_at - now
            self._next_request_at = max(now, self._next_request_at) + self.rate_limit_delay
            if wait > 0:
                await asyncio.sleep(wait)

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transient failures with exponential backoff.

        Timeouts, connection errors and 5xx answers are retried.  A 429
        answer waits for ``Retry-After`` and consumes one attempt.

        Raises:
            RepositoryError: The resource does not exist (404).
            NetworkError: Any other client error, or retries exhausted.
        """
        client = await self._ensure_client()
        attempts = self.max_retries + 1
        rate_limited = 0
        failure: Optional[Exception] = None

        for attempt in range(attempts):
            await self._rate_limit()
            try:
                async with self._semaphore:
                    response = await client.request(method, url, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                failure = exc
                logger.warning(
                    "%s on attempt %d/%d: %s",
                    type(exc).__name__,
                    attempt + 1,
                    attempts,
                    url,
                )
            else:
                if response.status_code == 429:
                    rate_limited += 1
                    await self._wait_for_rate_limit(response, url, rate_limited)
                    continue
                if response.status_code < 500:
                    return self._checked(response, url)
                failure = httpx.HTTPStatusError(
                    f"Server error {response.status_code}",
                    request=response.request,
                    response=response,
                )
                logger.warning(
                    "HTTP %d on attempt %d/%d: %s",
                    response.status_code,
                    attempt + 1,
                    attempts,
                    url,
                )

            if attempt + 1 < attempts:
                delay = _backoff(attempt)
                logger.debug("Retrying %s in %.2fs", url, delay)
                await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {attempts} attempts: {url}",
            url=url,
        ) from failure

    async def _wait_for_rate_limit(
        self, response: httpx.Response, url: str, count: int
    ) -> None:
        if count > MAX_RATE_LIMIT_RETRIES:
            raise NetworkError(
                f"Rate limit exceeded after {MAX_RATE_LIMIT_RETRIES} retries",
                url=url,
                status_code=429,
            )
        retry_after = int(response.headers.get("Retry-After", "1"))
        logger.warning(
            "Rate limited by %s, waiting %ds (%d/%d)",
            url,
            retry_after,
            count,
            MAX_RATE_LIMIT_RETRIES,
        )
        await asyncio.sleep(retry_after)

    @staticmethod
    def _checked(response: httpx.Response, url: str) -> httpx.Response:
        """Map 4xx answers to catalogkeeper errors; pass anything else through."""
        status = response.status_code
        if status == 404:
            raise RepositoryError(f"Resource not found: {url}", url=url, status_code=404)
        if status >= 400:
            raise NetworkError(
                f"HTTP {status} error for {url}",
                url=url,
                status_code=status,
                response_body=response.text,
            )
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_text(
        self,
        url: str,
        *,
        auth: Optional[Tuple[str, str]] = None,
    ) -> str:
        """Fetch a URL and return its body as text.

        Args:
            url: Resource to download.
            auth: Optional HTTP Basic ``(user, password)`` credentials.
        """
        if auth is None:
            response = await self.get(url)
        else:
            response = await self.get(url, auth=httpx.BasicAuth(*auth))
        return response.text


def _backoff(attempt: int) -> float:
    """Exponential delay with a little jitter."""
    return (2**attempt) + random.uniform(0.0, 0.3)
