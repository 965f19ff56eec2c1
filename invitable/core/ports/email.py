"""
Email Adapter Interface.

Protocol-based interface for sending transactional emails.
Used by the invitation notifier to deliver invitation instructions.

Key requirements:
- Support HTML and plain text body
- Stateless send operation
- Never raise on delivery problems; report them in EmailResult

Implementation strategies:
1. DevEmailAdapter: Logs emails to console (dev/test)
2. SMTP or provider API adapters (not shipped)

All strategies implement the same EmailPort interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address with optional display name.

    Examples:
        EmailAddress("invitee@example.com")
        EmailAddress("noreply@example.com", "Invitable")
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        """Format as RFC 5322 address."""
        if self.name:
            safe_name = self.name.replace('"', '\\"')
            return f'"{safe_name}" <{self.email}>'
        return self.email


@dataclass(frozen=True)
class EmailMessage:
    """Email message to be sent."""

    recipient: EmailAddress
    subject: str
    body_html: str
    body_text: str
    sender: EmailAddress | None = None  # None = adapter default

    def __post_init__(self) -> None:
        if not self.recipient.email:
            raise ValueError("Recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.body_html and not self.body_text:
            raise ValueError("At least one of body_html or body_text is required")


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    recipient: str = ""

    @property
    def ok(self) -> bool:
        return self.status != EmailStatus.FAILED

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(status=EmailStatus.FAILED, recipient=recipient, error=error)


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations must not raise on delivery problems; a failed
    status is returned instead.
    """

    def send(self, message: EmailMessage) -> EmailResult:
        """
        Send an email message.

        Args:
            message: Complete email message

        Returns:
            EmailResult with send outcome
        """
        ...


# --- Constants ---

DEFAULT_INVITATION_SUBJECT = "You have been invited to {site_name}"
