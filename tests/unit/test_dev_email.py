"""
Unit tests for DevEmailAdapter.

Tests cover:
1. Structured send() with EmailMessage
2. Status is SKIPPED
3. Email storage for test assertions
4. Forced failures
"""

import logging

import pytest

from invitable.adapters.dev_email import DevEmailAdapter
from invitable.core.ports.email import EmailAddress, EmailMessage, EmailStatus


def _message(**overrides) -> EmailMessage:
    fields = {
        "recipient": EmailAddress("user@example.com", "User"),
        "subject": "Hello",
        "body_html": "<p>Hi</p>",
        "body_text": "Hi",
    }
    fields.update(overrides)
    return EmailMessage(**fields)


class TestDevEmailAdapterSend:
    def test_returns_skipped_status(self) -> None:
        result = DevEmailAdapter().send(_message())

        assert result.status == EmailStatus.SKIPPED
        assert result.ok is True
        assert result.message_id is not None
        assert result.message_id.startswith("dev-")

    def test_stores_email(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send(_message())

        assert adapter.email_count == 1
        last = adapter.get_last_email()
        assert last is not None
        assert last.recipient == '"User" <user@example.com>'
        assert last.subject == "Hello"

    def test_default_sender_used(self) -> None:
        adapter = DevEmailAdapter(default_sender=EmailAddress("noreply@example.com"))
        adapter.send(_message())

        last = adapter.get_last_email()
        assert last is not None
        assert last.sender == "noreply@example.com"

    def test_logs_email(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="invitable.adapters.dev_email"):
            DevEmailAdapter().send(_message())

        assert "EMAIL (dev)" in caplog.text
        assert "Subject=Hello" in caplog.text

    def test_fail_with(self) -> None:
        adapter = DevEmailAdapter(fail_with="smtp down")
        result = adapter.send(_message())

        assert result.status == EmailStatus.FAILED
        assert result.ok is False
        assert result.error == "smtp down"
        assert adapter.email_count == 0


class TestDevEmailAdapterHelpers:
    def test_get_emails_to_and_clear(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send(_message(recipient=EmailAddress("a@example.com")))
        adapter.send(_message(recipient=EmailAddress("b@example.com")))

        assert len(adapter.get_emails_to("a@example.com")) == 1

        adapter.clear()
        assert adapter.email_count == 0
        assert adapter.get_last_email() is None


class TestEmailMessage:
    def test_requires_subject(self) -> None:
        with pytest.raises(ValueError, match="Subject"):
            _message(subject="")

    def test_requires_a_body(self) -> None:
        with pytest.raises(ValueError, match="body"):
            _message(body_html="", body_text="")

    def test_address_formatting_escapes_quotes(self) -> None:
        assert str(EmailAddress("x@example.com", 'A "B"')) == '"A \\"B\\"" <x@example.com>'
