"""
InvitationLifecycle - invitation token state machine.

Issues single-use, time-bounded invitation tokens for accounts and
redeems them, rolling the account back when persistence fails.

Key behaviors:
- Re-issuing overwrites the token, implicitly revoking the old one
- Issuance save failure clears all issuance fields
- Redemption save failure restores the token and clears acceptance
  (and the confirmation it applied, if any)
- Expiry is a pure time comparison against the configured window

Invariants:
- invitation_token is set iff an invitation is issued and unredeemed
- invitation_accepted_at is only kept after a persisted redemption
- A redeemed token is never restored once its save succeeded
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

from invitable.domain.entities import Account

from .models import DEFAULT_CONFIG, InvitationConfig, InvitationState
from .ports import AccountRepoPort, TimePort

logger = logging.getLogger(__name__)


def generate_invitation_token() -> str:
    """Random UUID4 rendered as text (122 bits from the OS CSPRNG)."""
    return str(uuid4())


def invitation_reference_time(account: Account) -> datetime | None:
    return account.invitation_created_at or account.invitation_sent_at


def created_by_invite(account: Account) -> bool:
    """Whether the account was created by an invitation, whatever its status."""
    return account.invitation_created_at is not None


def invitation_accepted(account: Account) -> bool:
    """Whether the invitation was accepted (False while it is being accepted)."""
    return not account.redemption.accepting and account.invitation_accepted_at is not None


def invitation_period_valid(
    account: Account,
    config: InvitationConfig,
    now: datetime,
) -> bool:
    """
    Check whether the invitation is still inside the acceptance window.

    Examples (window / invited):
        1 day  / now         -> True
        5 days / 4 days ago  -> True
        5 days / 5 days ago  -> False
        unset  / any time    -> True
    """
    invited_at = invitation_reference_time(account)
    if invited_at is None:
        return False
    if not config.expires:
        return True
    return now - invited_at < config.accept_invitation_within


def invitation_due_at(account: Account, config: InvitationConfig) -> datetime | None:
    """Deadline for accepting the invitation, None if it never expires."""
    if not config.expires:
        return None
    invited_at = invitation_reference_time(account)
    if invited_at is None:
        return None
    return invited_at + config.accept_invitation_within


def confirmation_required_for_invited(account: Account) -> bool:
    confirmation = account.confirmation
    return confirmation is not None and confirmation.confirmation_required()


class InvitationLifecycle:
    """
    Invitation lifecycle service.

    Operates on an explicit Account reference; persistence, delivery and
    time are injected.
    """

    def __init__(
        self,
        repo: AccountRepoPort,
        config: InvitationConfig | None = None,
        time_port: TimePort | None = None,
    ) -> None:
        self._repo = repo
        self._config = config or DEFAULT_CONFIG
        self._time_port = time_port

    def _now(self) -> datetime:
        if self._time_port:
            return self._time_port.now_utc()
        return datetime.now(UTC)

    # --- Predicates ---

    def accepting_invitation(self, account: Account) -> bool:
        return account.redemption.accepting

    def created_by_invite(self, account: Account) -> bool:
        return created_by_invite(account)

    def invited_to_sign_up(self, account: Account) -> bool:
        """Whether the account holds an open invitation (or is redeeming one)."""
        if account.redemption.accepting:
            return True
        return self._repo.is_persisted(account) and account.invitation_token is not None

    def invitation_accepted(self, account: Account) -> bool:
        return invitation_accepted(account)

    def accepted_or_not_invited(self, account: Account) -> bool:
        return self.invitation_accepted(account) or not self.invited_to_sign_up(account)

    def invitation_taken(self, account: Account) -> bool:
        return not self.invited_to_sign_up(account)

    def blocked_from_invitation(self, account: Account) -> bool:
        """Invited accounts may not sign in until the invitation is accepted."""
        return self.invited_to_sign_up(account)

    def invitation_period_valid(self, account: Account) -> bool:
        return invitation_period_valid(account, self._config, self._now())

    def valid_invitation(self, account: Account) -> bool:
        """Whether the account holds an invitation that can be accepted now."""
        return self.invited_to_sign_up(account) and self.invitation_period_valid(account)

    def invitation_due_at(self, account: Account) -> datetime | None:
        return invitation_due_at(account, self._config)

    def state(self, account: Account) -> InvitationState:
        if account.redemption.accepting:
            return InvitationState.REDEEMING
        if self.invited_to_sign_up(account):
            return InvitationState.INVITED
        if self.invitation_accepted(account):
            return InvitationState.ACCEPTED
        return InvitationState.UNINVITED

    # --- Issuance ---

    def invite(
        self,
        account: Account,
        invited_by: UUID | None = None,
        skip_invitation: bool = False,
    ) -> bool:
        """
        Issue a fresh invitation token and send it.

        Any unredeemed token is overwritten. Returns False (after rolling
        the issuance fields back) when the account could not be saved.
        """
        now = self._now()
        account.invitation_created_at = now
        if not skip_invitation:
            account.invitation_sent_at = now
        account.invited_by = invited_by
        account.invitation_token = generate_invitation_token()

        saved = False
        try:
            saved = self._repo.save(account)
        finally:
            if not saved:
                logger.warning("Invitation for account %s not saved, rolling back", account.id)
                self.rollback_invitation(account)
        if not saved:
            return False

        logger.info("Invitation issued for account %s", account.id)

        token = account.invitation_token
        notifier = self._config.notifier
        if token is None or notifier is None:
            # Saved but nothing to deliver; still reported as issued.
            logger.info("No notifier configured, invitation for %s not sent", account.id)
            return True

        if not skip_invitation:
            notifier.send_invitation(account, token)
        return True

    def rollback_invitation(self, account: Account) -> None:
        account.invitation_token = None
        account.invitation_created_at = None
        account.invited_by = None
        account.invitation_sent_at = None

    # --- Redemption ---

    def _begin_acceptance(self, account: Account) -> bool:
        context = account.redemption
        context.accepting = True
        token = account.invitation_token
        if token is None:
            context.accepting = False
            return False
        context.token_snapshot = token

        now = self._now()
        account.invitation_accepted_at = now
        account.invitation_token = None
        confirmation = account.confirmation
        if confirmation is not None and confirmation_required_for_invited(account):
            confirmation.confirmed_at = now
            context.confirmation_applied = True
        else:
            context.confirmation_applied = False
        return True

    def accept_invitation(self, account: Account) -> bool:
        """
        Accept the invitation held by the account and save it.

        Returns True whenever the invitation was valid, even if the save
        failed and the acceptance was rolled back; check the account (or
        use run_accept) for the persisted outcome.
        """
        if not self.valid_invitation(account):
            return False
        if not self._begin_acceptance(account):
            return False

        persisted = False
        try:
            persisted = self._repo.save(account) and self._repo.is_persisted(account)
        finally:
            if not persisted:
                logger.warning("Acceptance for account %s not saved, rolling back", account.id)
                self.rollback_accepted_invitation(account)
            account.redemption.accepting = False

        if persisted:
            logger.info("Invitation accepted for account %s", account.id)
        return True

    def rollback_accepted_invitation(self, account: Account) -> None:
        context = account.redemption
        account.invitation_token = context.token_snapshot
        account.invitation_accepted_at = None
        if context.confirmation_applied and account.confirmation is not None:
            account.confirmation.confirmed_at = None
