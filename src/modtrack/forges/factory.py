"""Factory for the configured forge client."""

from __future__ import annotations

import httpx

from modtrack.auth.factory import create_token_resolver
from modtrack.contracts.config import ModTrackConfig
from modtrack.contracts.forge import ForgeClient
from modtrack.forges.http import HttpForgeClient


def create_forge_client(config: ModTrackConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> ForgeClient:
    """Create the forge client for *config*.

    The returned client is an async context manager::

        async with create_forge_client(config) as client:
            lookup = await client.fetch_latest_release(project)
    """
    return HttpForgeClient(
        token_resolver=create_token_resolver(config),
        cache_ttl=config.release_cache_ttl,
        timeout=config.check_timeout,
        transport=transport,
    )
