"""Exception hierarchy for modtrack.

All modtrack exceptions inherit from :class:`ModTrackError`, so callers can
catch any library error with one ``except`` clause while still handling
specific failure modes.
"""

from __future__ import annotations

DEFAULT_AUTH_HINT = "Add a GitHub token (MODTRACK_GITHUB_TOKEN) or refresh the stored token to raise API limits."


class ModTrackError(Exception):
    """Base exception for all modtrack errors."""


class ConfigError(ModTrackError):
    """Configuration loading or validation failure."""


class ValidationError(ModTrackError):
    """Empty or malformed input, rejected before any I/O."""


class ForgeError(ModTrackError):
    """Base failure talking to a git forge."""


class NetworkError(ForgeError):
    """Transient transport or server failure."""


class AuthenticationError(ForgeError):
    """Rate-limit or credential failure.

    Attributes:
        hint: Remediation hint shown next to the error.
        reset_at: Unix time at which the API quota resets, when the forge said.
    """

    def __init__(self, message: str = "", *, hint: str = DEFAULT_AUTH_HINT, reset_at: int | None = None) -> None:
        super().__init__(message)
        self.hint = hint
        self.reset_at = reset_at

    def __str__(self) -> str:
        base = super().__str__()
        if not self.hint or self.hint in base:
            return base
        return f"{base} {self.hint}".strip()


class NotFoundError(ForgeError):
    """Missing remote resource or unknown local id."""


class ConflictError(ModTrackError):
    """Install target already holds files that an install would overwrite.

    Attributes:
        details: Human-readable description of the conflicting files.
    """

    def __init__(self, details: str = "") -> None:
        self.details = details.strip() or "Existing files were found in the destination folder."
        super().__init__(f"install conflict: {self.details}")


class InstallError(ModTrackError):
    """Installer failure other than a conflict."""
