"""Forge clients."""

from modtrack.forges.factory import create_forge_client
from modtrack.forges.http import HttpForgeClient

__all__ = ["HttpForgeClient", "create_forge_client"]
