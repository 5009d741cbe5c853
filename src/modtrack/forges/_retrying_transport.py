"""httpx transport that retries idempotent forge requests."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Retries GET/HEAD requests on transport errors and transient statuses.

    A 429 pauses every request sharing this transport until ``Retry-After``
    has elapsed, so parallel checks against one forge back off together.
    Other methods are sent once.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        *,
        max_retries: int = 3,
        max_backoff: float = 4.0,
    ) -> None:
        self._inner = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._max_backoff = max_backoff

        self._pause_lock = asyncio.Lock()
        self._resume = asyncio.Event()
        self._resume.set()
        self._paused_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        retries = self._max_retries if request.method in _IDEMPOTENT_METHODS else 0
        attempt = 0
        while True:
            await self._resume.wait()
            try:
                response = await self._inner.handle_async_request(request)
            except httpx.TransportError:
                if attempt >= retries:
                    raise
                await self._backoff(request, attempt)
                attempt += 1
                continue

            if response.status_code not in _TRANSIENT_STATUSES or attempt >= retries:
                return response

            retry_after = _retry_after(response)
            await response.aclose()
            if response.status_code == 429:
                await self._pause(retry_after)
            elif retry_after > 0:
                await asyncio.sleep(retry_after)
            await self._backoff(request, attempt)
            attempt += 1

    async def aclose(self) -> None:
        await self._inner.aclose()

    async def _pause(self, seconds: float) -> None:
        async with self._pause_lock:
            until = time.monotonic() + seconds
            if until <= self._paused_until:
                return
            self._paused_until = until
            self._resume.clear()

        await asyncio.sleep(max(0.0, self._paused_until - time.monotonic()))

        async with self._pause_lock:
            if time.monotonic() >= self._paused_until:
                self._resume.set()

    async def _backoff(self, request: httpx.Request, attempt: int) -> None:
        seconds = min(self._max_backoff, float(2**attempt)) + random.uniform(0.0, 0.25)
        _LOG.warning("Retrying %s %s (attempt %d)", request.method, request.url.host, attempt + 2)
        await asyncio.sleep(seconds)


def _retry_after(response: httpx.Response) -> float:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return 1.0
    try:
        return max(0.0, float(raw))
    except ValueError:
        return 1.0
