"""Tests for RetryingTransport - retry, backoff, and rate-limit handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from modtrack.forges._retrying_transport import RetryingTransport, _retry_after

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_response(status_code: int = 200, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status_code=status_code, headers=headers or {})


def _make_request(method: str = "GET") -> httpx.Request:
    return httpx.Request(method, "https://api.github.com/repos/owner/SuperMod/releases/latest")


def _inner(*side_effect: object) -> AsyncMock:
    inner = AsyncMock(spec=httpx.AsyncBaseTransport)
    inner.handle_async_request.side_effect = list(side_effect)
    return inner


# ---------------------------------------------------------------------------
# Successful requests
# ---------------------------------------------------------------------------


class TestSuccessfulRequests:
    @pytest.mark.asyncio
    async def test_returns_successful_response(self) -> None:
        inner = _inner(_make_response(200))

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 1

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self) -> None:
        inner = _inner(_make_response(404))

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 404
        assert inner.handle_async_request.call_count == 1


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


class TestTransportErrors:
    @pytest.mark.asyncio
    @patch("modtrack.forges._retrying_transport.RetryingTransport._backoff", new_callable=AsyncMock)
    async def test_retries_get_then_succeeds(self, mock_backoff: AsyncMock) -> None:
        inner = _inner(httpx.TransportError("connection reset"), _make_response(200))
        request = _make_request()

        response = await RetryingTransport(transport=inner, max_retries=2).handle_async_request(request)

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 2
        mock_backoff.assert_awaited_once_with(request, 0)

    @pytest.mark.asyncio
    @patch("modtrack.forges._retrying_transport.RetryingTransport._backoff", new_callable=AsyncMock)
    async def test_gives_up_after_max_retries(self, mock_backoff: AsyncMock) -> None:
        inner = _inner(*(httpx.TransportError("down") for _ in range(3)))

        with pytest.raises(httpx.TransportError):
            await RetryingTransport(transport=inner, max_retries=2).handle_async_request(_make_request())

        assert inner.handle_async_request.call_count == 3
        assert mock_backoff.await_count == 2

    @pytest.mark.asyncio
    @patch("modtrack.forges._retrying_transport.RetryingTransport._backoff", new_callable=AsyncMock)
    async def test_non_idempotent_methods_are_sent_once(self, mock_backoff: AsyncMock) -> None:
        inner = _inner(httpx.TransportError("connection reset"))

        with pytest.raises(httpx.TransportError):
            await RetryingTransport(transport=inner).handle_async_request(_make_request("POST"))

        assert inner.handle_async_request.call_count == 1
        mock_backoff.assert_not_awaited()


# ---------------------------------------------------------------------------
# Transient statuses
# ---------------------------------------------------------------------------


class TestTransientStatuses:
    @pytest.mark.asyncio
    @patch("modtrack.forges._retrying_transport.RetryingTransport._backoff", new_callable=AsyncMock)
    async def test_retries_service_unavailable(self, mock_backoff: AsyncMock) -> None:
        inner = _inner(_make_response(503, {"Retry-After": "0"}), _make_response(200))

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 2
        assert mock_backoff.await_count == 1

    @pytest.mark.asyncio
    @patch("modtrack.forges._retrying_transport.RetryingTransport._backoff", new_callable=AsyncMock)
    async def test_returns_last_transient_response_when_exhausted(self, mock_backoff: AsyncMock) -> None:
        inner = _inner(_make_response(502, {"Retry-After": "0"}), _make_response(502, {"Retry-After": "0"}))

        response = await RetryingTransport(transport=inner, max_retries=1).handle_async_request(_make_request())

        assert response.status_code == 502
        assert inner.handle_async_request.call_count == 2

    @pytest.mark.asyncio
    @patch("modtrack.forges._retrying_transport.RetryingTransport._backoff", new_callable=AsyncMock)
    @patch("modtrack.forges._retrying_transport.RetryingTransport._pause", new_callable=AsyncMock)
    async def test_too_many_requests_pauses_for_retry_after(
        self, mock_pause: AsyncMock, mock_backoff: AsyncMock
    ) -> None:
        inner = _inner(_make_response(429, {"Retry-After": "2"}), _make_response(200))

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 200
        mock_pause.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_pause_releases_waiters_when_elapsed(self) -> None:
        transport = RetryingTransport(transport=_inner())

        await transport._pause(0.01)

        assert transport._resume.is_set()


class TestRetryAfter:
    @pytest.mark.parametrize(
        ("headers", "expected"),
        [({}, 1.0), ({"Retry-After": "3"}, 3.0), ({"Retry-After": "-5"}, 0.0), ({"Retry-After": "soon"}, 1.0)],
    )
    def test_parses_header(self, headers: dict[str, str], expected: float) -> None:
        assert _retry_after(_make_response(429, headers)) == expected
