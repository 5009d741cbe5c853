"""Auth module public exports."""

from modtrack.auth.base import TokenResolver
from modtrack.auth.factory import create_token_resolver

__all__ = ["TokenResolver", "create_token_resolver"]
