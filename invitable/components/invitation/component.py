"""
Invitation component (request handlers).

Functional entry points around InvitationLifecycle: inviting an email
address, redeeming a token and reporting invitation status.

Key behaviors:
- Emails are trimmed and lower-cased before lookup
- Inviting an unknown email creates the account record
- Inviting a known email re-issues (old token stops working)
- Redemption reports both the lifecycle's answer and whether the
  acceptance was persisted
"""

from __future__ import annotations

import re

from invitable.domain.entities import Account, ConfirmationState

from ._impl import InvitationLifecycle
from .models import (
    AcceptInvitationInput,
    AcceptInvitationOutput,
    InvitationStatusInput,
    InvitationStatusOutput,
    IssueInvitationInput,
    IssueInvitationOutput,
    ValidationError,
)
from .ports import AccountRepoPort

# RFC 5322 simplified
EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)


def normalize_email(email: str) -> str:
    return email.strip().lower() if email else ""


def validate_email(email: str) -> list[ValidationError]:
    """Validate an already normalized email address."""
    if not email:
        return [ValidationError("EMPTY_EMAIL", "Email address is required", "email")]
    if len(email) > 254:
        return [ValidationError("EMAIL_TOO_LONG", "Email address is too long", "email")]
    if not EMAIL_REGEX.match(email):
        return [ValidationError("INVALID_FORMAT", "Invalid email format", "email")]
    return []


# --- Run Handlers ---


def run_issue(
    inp: IssueInvitationInput,
    repo: AccountRepoPort,
    lifecycle: InvitationLifecycle,
) -> IssueInvitationOutput:
    """Invite an email address, creating its account if needed."""
    email = normalize_email(inp.email)
    errors = validate_email(email)
    if errors:
        return IssueInvitationOutput(success=False, errors=errors)

    account = repo.get_by_email(email)
    if account is None:
        account = Account(email=email, display_name=inp.display_name)
        if inp.require_confirmation:
            account.confirmation = ConfirmationState()
    elif inp.display_name:
        account.display_name = inp.display_name

    if not lifecycle.invite(
        account,
        invited_by=inp.invited_by,
        skip_invitation=inp.skip_invitation,
    ):
        return IssueInvitationOutput(
            success=False,
            errors=[ValidationError("SAVE_FAILED", "Invitation could not be saved", None)],
        )

    return IssueInvitationOutput(
        success=True,
        account_id=account.id,
        token=account.invitation_token,
    )


def run_accept(
    inp: AcceptInvitationInput,
    repo: AccountRepoPort,
    lifecycle: InvitationLifecycle,
) -> AcceptInvitationOutput:
    """Redeem an invitation token."""
    token = inp.token.strip() if inp.token else ""
    if not token:
        return AcceptInvitationOutput(
            success=False,
            errors=[ValidationError("MISSING_TOKEN", "Invitation token is required", "token")],
        )

    account = repo.get_by_invitation_token(token)
    if account is None:
        return AcceptInvitationOutput(
            success=False,
            errors=[ValidationError("INVALID_TOKEN", "Invalid invitation token", "token")],
        )

    if not lifecycle.invitation_period_valid(account):
        return AcceptInvitationOutput(
            success=False,
            account_id=account.id,
            errors=[ValidationError("INVITATION_EXPIRED", "Invitation has expired", "token")],
        )

    accepted = lifecycle.accept_invitation(account)
    persisted = accepted and lifecycle.invitation_accepted(account)
    errors: list[ValidationError] = []
    if accepted and not persisted:
        errors.append(ValidationError("SAVE_FAILED", "Acceptance could not be saved", None))

    return AcceptInvitationOutput(
        success=accepted,
        account_id=account.id,
        persisted=persisted,
        errors=errors,
    )


def run_status(
    inp: InvitationStatusInput,
    repo: AccountRepoPort,
    lifecycle: InvitationLifecycle,
) -> InvitationStatusOutput:
    email = normalize_email(inp.email)
    account = repo.get_by_email(email) if email else None
    if account is None:
        return InvitationStatusOutput(
            success=False,
            errors=[ValidationError("NOT_FOUND", "No account for this email", "email")],
        )

    state = lifecycle.state(account)
    return InvitationStatusOutput(
        success=True,
        state=state,
        expired=lifecycle.invited_to_sign_up(account)
        and not lifecycle.invitation_period_valid(account),
        due_at=lifecycle.invitation_due_at(account),
        invited_by=account.invited_by,
    )


def run(
    inp: IssueInvitationInput | AcceptInvitationInput | InvitationStatusInput,
    *,
    repo: AccountRepoPort,
    lifecycle: InvitationLifecycle,
) -> IssueInvitationOutput | AcceptInvitationOutput | InvitationStatusOutput:
    if isinstance(inp, IssueInvitationInput):
        return run_issue(inp, repo, lifecycle)
    elif isinstance(inp, AcceptInvitationInput):
        return run_accept(inp, repo, lifecycle)
    elif isinstance(inp, InvitationStatusInput):
        return run_status(inp, repo, lifecycle)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
