"""Property-based tests for secret redaction.

No webhook token or known credential may survive sanitization, however
it is embedded in surrounding text.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from sizechecker.utils.sanitization import (
    REDACTED,
    sanitize_exception,
    sanitize_url,
)

TOKEN_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


@st.composite
def webhook_urls(draw: st.DrawFn) -> tuple[str, str]:
    """Generate webhook URLs together with their secret token."""
    webhook_id = draw(st.integers(min_value=1, max_value=10**6))
    token = draw(st.text(alphabet=TOKEN_ALPHABET, min_size=12, max_size=80))
    host = draw(st.sampled_from(["discord.com", "discordapp.com", "chat.example.org"]))
    return f"https://{host}/api/webhooks/{webhook_id}/{token}", token


# Disjoint from TOKEN_ALPHABET so generated context can never contain a token
surrounding_text = st.text(alphabet=" .,:;!()[]@'\"", max_size=30)


@given(webhook_urls(), surrounding_text, surrounding_text)
def test_webhook_token_never_survives(url_and_token: tuple[str, str], prefix: str, suffix: str) -> None:
    url, token = url_and_token
    sanitized = sanitize_url(f"{prefix} {url} {suffix}")

    assert token not in sanitized
    assert REDACTED in sanitized


@given(webhook_urls())
def test_exception_text_is_sanitized(url_and_token: tuple[str, str]) -> None:
    url, token = url_and_token
    assert token not in sanitize_exception(ConnectionError(f"cannot reach {url}"))


@given(st.text(alphabet=TOKEN_ALPHABET, min_size=12, max_size=40), surrounding_text)
def test_literal_secret_never_survives(secret: str, context: str) -> None:
    assert secret not in sanitize_url(f"{context}{secret}{context}", secrets=(secret,))
