"""
Shared port interfaces.

Protocol definitions for collaborators that live outside the
functional core (email delivery).
"""

from .email import (
    EmailAddress,
    EmailMessage,
    EmailPort,
    EmailResult,
    EmailStatus,
)

__all__ = [
    "EmailAddress",
    "EmailMessage",
    "EmailPort",
    "EmailResult",
    "EmailStatus",
]
