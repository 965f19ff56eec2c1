"""
Invitation component models.

Data models for invitation issuance and redemption.

State machine:
    uninvited -> invited -> redeeming (transient) -> accepted
    redeeming -> invited     (redemption save failed, rolled back)
    invited   -> uninvited   (issuance save failed, rolled back)
    accepted  -> invited     (fresh issuance restarts the cycle)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .ports import InvitationNotifierPort


class InvitationState(Enum):
    """Where an account sits in the invitation lifecycle."""

    UNINVITED = "uninvited"
    INVITED = "invited"
    REDEEMING = "redeeming"
    ACCEPTED = "accepted"


# --- Configuration ---


@dataclass(frozen=True)
class InvitationConfig:
    """
    Invitation configuration.

    Built once at process start from rules.yaml and passed into the
    lifecycle; tests construct their own.
    """

    # None or zero means invitations never expire.
    accept_invitation_within: timedelta | None = None
    notifier: InvitationNotifierPort | None = None

    @property
    def expires(self) -> bool:
        return bool(self.accept_invitation_within)


DEFAULT_CONFIG = InvitationConfig()


# --- Input Models ---


@dataclass(frozen=True)
class IssueInvitationInput:
    """Input for inviting an email address."""

    email: str
    invited_by: UUID | None = None
    skip_invitation: bool = False
    display_name: str | None = None
    require_confirmation: bool = False


@dataclass(frozen=True)
class AcceptInvitationInput:
    """Input for redeeming an invitation token."""

    token: str


@dataclass(frozen=True)
class InvitationStatusInput:
    email: str


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class IssueInvitationOutput:
    success: bool
    account_id: UUID | None = None
    token: str | None = None
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class AcceptInvitationOutput:
    """
    Output from redemption.

    `success` mirrors the lifecycle's boolean, which only reflects the
    validity precondition. `persisted` reports whether the redemption
    was actually stored.
    """

    success: bool
    account_id: UUID | None = None
    persisted: bool = False
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class InvitationStatusOutput:
    success: bool
    state: InvitationState | None = None
    expired: bool = False
    due_at: datetime | None = None
    invited_by: UUID | None = None
    errors: list[ValidationError] = field(default_factory=list)
