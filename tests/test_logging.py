"""Tests for core/logging.py."""

from dynidp.core.logging import REDACTED, redact_secrets


def test_redacts_sensitive_keys():
    event = redact_secrets(
        None,
        "info",
        {"event": "Provider saved", "scheme": "s1", "client_secret": "shh", "state": "abc"},
    )
    assert event["client_secret"] == REDACTED
    assert event["state"] == REDACTED
    assert event["scheme"] == "s1"


def test_empty_secret_left_as_is():
    event = redact_secrets(None, "info", {"event": "x", "client_secret": None})
    assert event["client_secret"] is None
