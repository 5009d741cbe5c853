"""Auth resolver interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TokenResolver(ABC):
    @abstractmethod
    async def resolve(self) -> str | None:
        """Return a GitHub API token, or ``None`` to send anonymous requests."""
