"""Concrete token resolvers."""

from modtrack.auth.resolvers.env import EnvTokenResolver
from modtrack.auth.resolvers.static import StaticTokenResolver

__all__ = ["EnvTokenResolver", "StaticTokenResolver"]
