"""
Tests for log redaction.
"""

from trainerhub.logging import redact_secrets


def test_secret_keys_are_redacted():
    event = redact_secrets(None, "info", {
        "event": "User logged out",
        "refresh_token": "abc123",
        "Password": "hunter2",
        "user_id": "42",
    })

    assert event["refresh_token"] == "[redacted]"
    assert event["Password"] == "[redacted]"
    assert event["user_id"] == "42"
    assert event["event"] == "User logged out"
