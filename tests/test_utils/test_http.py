from __future__ import annotations

from typing import Dict, Generator, Optional
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from catalogkeeper.__version__ import __version__
from catalogkeeper.exceptions import NetworkError, RepositoryError
from catalogkeeper.utils.http import MAX_RATE_LIMIT_RETRIES, HTTPClient

URL = "https://repo.example.com/junit/junit/maven-metadata.xml"


def _response(
    status_code: int, text: str = "", headers: Optional[Dict[str, str]] = None
) -> httpx.Response:
    return httpx.Response(
        status_code,
        text=text,
        headers=headers,
        request=httpx.Request("GET", URL),
    )


@pytest.fixture
def mock_request() -> Generator[AsyncMock, None, None]:
    """Patch the underlying httpx request.

    Yields:
        AsyncMock: Stand-in for ``httpx.AsyncClient.request``.
    """
    with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as request:
        yield request


@pytest.fixture
def no_sleep() -> Generator[AsyncMock, None, None]:
    """Make retry backoff instantaneous."""
    with patch("catalogkeeper.utils.http.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization and configuration."""

    def test_default_values(self) -> None:
        """Defaults come from the package constants.

        The user agent names the tool and its version so that repository
        operators can identify the traffic.
        """
        client = HTTPClient()

        assert client.timeout == 30
        assert client.max_retries == 3
        assert client.rate_limit_delay == 0.0
        assert client.verify_ssl is True
        assert "catalogkeeper" in client.user_agent
        assert __version__ in client.user_agent
        assert client._client is None

    def test_custom_values(self) -> None:
        client = HTTPClient(
            timeout=5,
            max_retries=0,
            rate_limit_delay=0.5,
            verify_ssl=False,
            user_agent="custom/1.0",
            max_concurrency=2,
        )

        assert client.timeout == 5
        assert client.max_retries == 0
        assert client.user_agent == "custom/1.0"
        assert client.max_concurrency == 2


@pytest.mark.unit
class TestHTTPClientLifecycle:
    """Tests for client creation and cleanup."""

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        client = HTTPClient()

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_closes_on_exception(self) -> None:
        client = HTTPClient()

        with pytest.raises(RuntimeError):
            async with client:
                raise RuntimeError("boom")

        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        client = HTTPClient()

        await client.close()
        await client.close()

        assert client._client is None

    @pytest.mark.asyncio
    async def test_ensure_client_creates_once(self) -> None:
        client = HTTPClient()

        await client._ensure_client()
        first = client._client
        await client._ensure_client()

        assert client._client is first
        await client.close()


@pytest.mark.unit
class TestRequestWithRetry:
    """Tests for HTTPClient._request_with_retry."""

    @pytest.mark.asyncio
    async def test_success(self, mock_request: AsyncMock) -> None:
        mock_request.return_value = _response(200, "<metadata/>")

        async with HTTPClient(max_retries=1) as client:
            response = await client._request_with_retry("GET", URL)

        assert response.status_code == 200
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_404_raises_repository_error_without_retry(
        self, mock_request: AsyncMock
    ) -> None:
        """A missing artifact is not transient; it fails fast."""
        mock_request.return_value = _response(404)

        async with HTTPClient(max_retries=3) as client:
            with pytest.raises(RepositoryError) as exc_info:
                await client._request_with_retry("GET", URL)

        assert exc_info.value.details["status_code"] == 404
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_client_error_raises_network_error(
        self, mock_request: AsyncMock
    ) -> None:
        mock_request.return_value = _response(401, "unauthorized")

        async with HTTPClient(max_retries=3) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client._request_with_retry("GET", URL)

        assert not isinstance(exc_info.value, RepositoryError)
        assert exc_info.value.details["status_code"] == 401
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(
        self, mock_request: AsyncMock, no_sleep: AsyncMock
    ) -> None:
        mock_request.side_effect = [_response(503), _response(200, "ok")]

        async with HTTPClient(max_retries=2) as client:
            response = await client._request_with_retry("GET", URL)

        assert response.text == "ok"
        assert mock_request.call_count == 2
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_exhausted(
        self, mock_request: AsyncMock, no_sleep: AsyncMock
    ) -> None:
        mock_request.side_effect = httpx.ConnectError("refused")

        async with HTTPClient(max_retries=2) as client:
            with pytest.raises(NetworkError, match="after 3 attempts"):
                await client._request_with_retry("GET", URL)

        assert mock_request.call_count == 3
        # No backoff after the last attempt
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_timeout_is_retried(
        self, mock_request: AsyncMock, no_sleep: AsyncMock
    ) -> None:
        mock_request.side_effect = [httpx.ReadTimeout("slow"), _response(200)]

        async with HTTPClient(max_retries=1) as client:
            response = await client._request_with_retry("GET", URL)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_rate_limit_honours_retry_after(
        self, mock_request: AsyncMock, no_sleep: AsyncMock
    ) -> None:
        mock_request.side_effect = [
            _response(429, headers={"Retry-After": "7"}),
            _response(200),
        ]

        async with HTTPClient(max_retries=1) as client:
            response = await client._request_with_retry("GET", URL)

        assert response.status_code == 200
        no_sleep.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_rate_limit_gives_up(
        self, mock_request: AsyncMock, no_sleep: AsyncMock
    ) -> None:
        mock_request.return_value = _response(429)

        async with HTTPClient(max_retries=10) as client:
            with pytest.raises(NetworkError, match="Rate limit exceeded"):
                await client._request_with_retry("GET", URL)

        assert mock_request.call_count == MAX_RATE_LIMIT_RETRIES + 1


@pytest.mark.unit
class TestGetText:
    """Tests for HTTPClient.get_text."""

    @pytest.mark.asyncio
    async def test_returns_body(self, mock_request: AsyncMock) -> None:
        mock_request.return_value = _response(200, "<metadata/>")

        async with HTTPClient() as client:
            text = await client.get_text(URL)

        assert text == "<metadata/>"
        mock_request.assert_awaited_once_with("GET", URL)

    @pytest.mark.asyncio
    async def test_basic_auth(self, mock_request: AsyncMock) -> None:
        mock_request.return_value = _response(200, "<metadata/>")

        async with HTTPClient() as client:
            await client.get_text(URL, auth=("ci", "secret"))

        auth = mock_request.await_args.kwargs["auth"]
        assert isinstance(auth, httpx.BasicAuth)


@pytest.mark.unit
class TestRateLimitDelay:
    """Tests for the minimum delay between requests."""

    @pytest.mark.asyncio
    async def test_no_delay_by_default(self, no_sleep: AsyncMock) -> None:
        await HTTPClient()._rate_limit()

        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enforces_delay(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(rate_limit_delay=1.0)

        await client._rate_limit()
        await client._rate_limit()

        assert no_sleep.await_count == 1
        assert 0 < no_sleep.await_args.args[0] <= 1.0
