"""Remediation hints for forge and install errors."""

from __future__ import annotations

from modtrack.contracts.exceptions import DEFAULT_AUTH_HINT

TLS_HINT = "TLS handshake failed. Check the system clock and any HTTPS-intercepting proxy or antivirus."
TIMEOUT_HINT = "The request timed out. Check your connection and try again."
DNS_HINT = "The host could not be resolved. Check your DNS settings or network connection."
NOT_FOUND_HINT = "The repository or release was not found. Check the URL and that the project publishes releases."
FALLBACK_HINT = "Check logs for details."

_RATE_LIMIT_MARKERS = ("rate limit", "rate-limit", "403", "429", "credential", "token", "unauthorized", "401")


def is_rate_limited(text: str | None) -> bool:
    lowered = (text or "").lower()
    return any(marker in lowered for marker in ("rate limit", "rate-limit", "403", "429"))


def classify_error_hint(text: str | None) -> str:
    lowered = (text or "").lower()
    if any(marker in lowered for marker in _RATE_LIMIT_MARKERS):
        return DEFAULT_AUTH_HINT
    if "tls" in lowered or "ssl" in lowered or "certificate" in lowered:
        return TLS_HINT
    if "timed out" in lowered or "timeout" in lowered:
        return TIMEOUT_HINT
    if "dns" in lowered or "name or service not known" in lowered or "resolve" in lowered:
        return DNS_HINT
    if "not found" in lowered or "404" in lowered:
        return NOT_FOUND_HINT
    return FALLBACK_HINT
