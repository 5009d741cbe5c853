"""Token resolver factory."""

from __future__ import annotations

from modtrack.auth.base import TokenResolver
from modtrack.auth.resolvers.env import EnvTokenResolver
from modtrack.auth.resolvers.static import StaticTokenResolver
from modtrack.contracts.config import ModTrackConfig
from modtrack.contracts.exceptions import ConfigError

AUTH_MODES = frozenset({"env", "token", "none"})


def create_token_resolver(config: ModTrackConfig) -> TokenResolver | None:
    """Build the resolver for ``config.auth``; ``"none"`` means anonymous requests."""
    if config.auth not in AUTH_MODES:
        raise ConfigError(f"Unknown auth mode: {config.auth}")
    if config.auth == "none":
        return None
    if config.auth == "env":
        return EnvTokenResolver()
    return StaticTokenResolver(token=config.token or "")
