from __future__ import annotations

import pytest

from modtrack.contracts.exceptions import DEFAULT_AUTH_HINT
from modtrack.engine.hints import (
    DNS_HINT,
    FALLBACK_HINT,
    NOT_FOUND_HINT,
    TIMEOUT_HINT,
    TLS_HINT,
    classify_error_hint,
    is_rate_limited,
)


@pytest.mark.parametrize(
    ("text", "hint"),
    [
        ("GitHub API rate-limited or forbidden (HTTP 403, remaining 0, reset 1700000000).", DEFAULT_AUTH_HINT),
        ("HTTP 401 Unauthorized", DEFAULT_AUTH_HINT),
        ("SSL: CERTIFICATE_VERIFY_FAILED", TLS_HINT),
        ("Timed out after 30.0s checking owner/mod", TIMEOUT_HINT),
        ("[Errno -2] Name or service not known", DNS_HINT),
        ("GitHub repo/release not found for owner/mod (no latest release?)", NOT_FOUND_HINT),
        ("something odd happened", FALLBACK_HINT),
        (None, FALLBACK_HINT),
    ],
)
def test_classify_error_hint(text: str | None, hint: str) -> None:
    assert classify_error_hint(text) == hint


def test_is_rate_limited_ignores_credential_errors() -> None:
    assert is_rate_limited("HTTP 429 Too Many Requests")
    assert not is_rate_limited("invalid token")
    assert not is_rate_limited(None)
