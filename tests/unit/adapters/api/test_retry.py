"""
Tests unitaires de request_with_retry.

Ces tests verifient:
- RateLimitError capture le header Retry-After
- Les 429 et erreurs de transport sont relances
- Les autres erreurs HTTP remontent immediatement
"""

import httpx
import pytest
import respx

from mediatheque.adapters.api.retry import (
    RateLimitError,
    _parse_retry_after,
    request_with_retry,
)

URL = "https://api.example.test/resource"


class TestRateLimitError:
    def test_stores_retry_after(self) -> None:
        error = RateLimitError(retry_after=60)
        assert error.retry_after == 60
        assert "60" in str(error)

    def test_without_retry_after(self) -> None:
        assert RateLimitError().retry_after is None


class TestParseRetryAfter:
    @pytest.mark.parametrize(
        "value, expected",
        [("3", 3.0), ("0.5", 0.5), ("-2", 0.0), (None, None), ("", None), ("demain", None)],
    )
    def test_values(self, value, expected) -> None:
        assert _parse_retry_after(value) == expected


class TestRequestWithRetry:
    """Tests de request_with_retry()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_first_try(self) -> None:
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "GET", URL)

        assert response.json() == {"ok": True}
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_429_is_retried(self) -> None:
        route = respx.get(URL).mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "0"}),
                httpx.Response(429, headers={"Retry-After": "0"}),
                httpx.Response(200, json={"ok": True}),
            ]
        )

        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "GET", URL, max_attempts=3)

        assert response.status_code == 200
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_429_exhausted_raises_rate_limit_error(self) -> None:
        route = respx.get(URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "0"})
        )

        async with httpx.AsyncClient() as client:
            with pytest.raises(RateLimitError):
                await request_with_retry(client, "GET", URL, max_attempts=2)

        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_is_retried(self) -> None:
        route = respx.get(URL).mock(
            side_effect=[httpx.ConnectError("refused"), httpx.Response(200)]
        )

        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "GET", URL, max_attempts=2, max_wait=1)

        assert response.status_code == 200
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_is_not_retried(self) -> None:
        route = respx.get(URL).mock(return_value=httpx.Response(500))

        async with httpx.AsyncClient() as client:
            with pytest.raises(httpx.HTTPStatusError):
                await request_with_retry(client, "GET", URL)

        assert route.call_count == 1
