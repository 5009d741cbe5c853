"""Environment token resolver."""

from __future__ import annotations

import os

from modtrack.auth.base import TokenResolver

TOKEN_ENV_VARS = ("MODTRACK_GITHUB_TOKEN", "GITHUB_TOKEN")


class EnvTokenResolver(TokenResolver):
    """Reads the first non-empty token from ``MODTRACK_GITHUB_TOKEN`` or ``GITHUB_TOKEN``."""

    async def resolve(self) -> str | None:
        for name in TOKEN_ENV_VARS:
            token = (os.getenv(name) or "").strip()
            if token:
                return token
        return None
