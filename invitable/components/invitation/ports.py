"""
Invitation component ports.

Protocol interfaces for invitation lifecycle dependencies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from invitable.domain.entities import Account


class AccountRepoPort(Protocol):
    """
    Account repository interface.

    The repository owns validation and atomicity of single-record
    writes. A failed save leaves the in-memory account mutated; the
    caller is responsible for rolling it back.
    """

    def save(self, account: Account) -> bool:
        """Persist all fields of the account. Returns False on failure."""
        ...

    def is_persisted(self, account: Account) -> bool:
        """Whether the account exists in the store."""
        ...

    def get_by_id(self, account_id: UUID) -> Account | None: ...

    def get_by_email(self, email: str) -> Account | None: ...

    def get_by_invitation_token(self, token: str) -> Account | None: ...


class InvitationNotifierPort(Protocol):
    """
    Delivers invitation instructions to the invitee.

    Delivery failures are the notifier's own concern and must not be
    raised back into the lifecycle.
    """

    def send_invitation(self, account: Account, token: str) -> None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
