import sqlite3
from datetime import timedelta
from uuid import uuid4

from invitable.adapters.sqlite.repos import SQLiteAccountRepo
from invitable.components.invitation import (
    AcceptInvitationInput,
    InvitationConfig,
    InvitationLifecycle,
    InvitationState,
    InvitationStatusInput,
    IssueInvitationInput,
    run_accept,
    run_issue,
    run_status,
)
from invitable.domain.entities import Account


class FlakyAccountRepo(SQLiteAccountRepo):
    """SQLite repo whose saves can be switched off."""

    fail = False

    def save(self, account: Account) -> bool:
        if self.fail:
            return False
        return super().save(account)


def test_invitation_creation_and_acceptance(test_ctx, email_adapter):
    ctx = test_ctx
    inviter = uuid4()

    issued = run_issue(
        IssueInvitationInput(
            email="new@test.com",
            invited_by=inviter,
            display_name="New Member",
            require_confirmation=ctx.rules.invitations.require_confirmation,
        ),
        ctx.account_repo,
        ctx.lifecycle,
    )
    assert issued.success
    token = issued.token
    assert token is not None

    # Invitation email carries the token
    sent = email_adapter.get_last_email()
    assert sent is not None
    assert "new@test.com" in sent.recipient
    assert f"invitation_token={token}" in sent.body_text

    status = run_status(InvitationStatusInput(email="new@test.com"), ctx.account_repo, ctx.lifecycle)
    assert status.state == InvitationState.INVITED
    assert status.invited_by == inviter

    accepted = run_accept(AcceptInvitationInput(token=token), ctx.account_repo, ctx.lifecycle)
    assert accepted.success
    assert accepted.persisted

    account = ctx.account_repo.get_by_email("new@test.com")
    assert account is not None
    assert account.invitation_token is None
    assert account.invitation_accepted_at == ctx.clock.now_utc()
    assert account.confirmation is not None
    assert account.confirmation.confirmed_at == account.invitation_accepted_at

    # Token is single-use
    again = run_accept(AcceptInvitationInput(token=token), ctx.account_repo, ctx.lifecycle)
    assert not again.success
    assert again.errors[0].code == "INVALID_TOKEN"


def test_reinvite_revokes_previous_token(test_ctx, email_adapter):
    ctx = test_ctx
    first = run_issue(IssueInvitationInput(email="re@test.com"), ctx.account_repo, ctx.lifecycle)
    second = run_issue(IssueInvitationInput(email="re@test.com"), ctx.account_repo, ctx.lifecycle)

    assert first.account_id == second.account_id
    assert email_adapter.email_count == 2

    stale = run_accept(AcceptInvitationInput(token=first.token), ctx.account_repo, ctx.lifecycle)
    assert stale.errors[0].code == "INVALID_TOKEN"

    fresh = run_accept(AcceptInvitationInput(token=second.token), ctx.account_repo, ctx.lifecycle)
    assert fresh.persisted


def test_expired_invitation(db_path, time_port):
    repo = SQLiteAccountRepo(db_path)
    lifecycle = InvitationLifecycle(
        repo,
        InvitationConfig(accept_invitation_within=timedelta(days=5)),
        time_port=time_port,
    )
    issued = run_issue(IssueInvitationInput(email="late@test.com"), repo, lifecycle)

    time_port.advance(timedelta(days=5))
    result = run_accept(AcceptInvitationInput(token=issued.token), repo, lifecycle)

    assert result.errors[0].code == "INVITATION_EXPIRED"
    account = repo.get_by_email("late@test.com")
    assert account is not None
    assert account.invitation_token == issued.token


def test_failed_acceptance_is_rolled_back(db_path, time_port):
    repo = FlakyAccountRepo(db_path)
    lifecycle = InvitationLifecycle(repo, time_port=time_port)
    account = Account(email="flaky@test.com")
    assert lifecycle.invite(account)
    token = account.invitation_token

    repo.fail = True
    assert lifecycle.accept_invitation(account) is True

    assert account.invitation_token == token
    assert account.invitation_accepted_at is None
    stored = repo.get_by_email("flaky@test.com")
    assert stored is not None
    assert stored.invitation_token == token
    assert stored.invitation_accepted_at is None


def test_skip_invitation_sends_nothing(test_ctx, email_adapter):
    result = run_issue(
        IssueInvitationInput(email="quiet@test.com", skip_invitation=True),
        test_ctx.account_repo,
        test_ctx.lifecycle,
    )

    assert result.success
    assert email_adapter.email_count == 0
    account = test_ctx.account_repo.get_by_email("quiet@test.com")
    assert account is not None
    assert account.invitation_sent_at is None


def test_issue_against_unmigrated_db_rolls_back(tmp_path, time_port):
    lifecycle = InvitationLifecycle(
        SQLiteAccountRepo(str(tmp_path / "unmigrated.db")), time_port=time_port
    )
    account = Account(email="nowhere@test.com")

    assert lifecycle.invite(account, invited_by=uuid4()) is False

    assert account.invitation_token is None
    assert account.invitation_created_at is None
    assert account.invitation_sent_at is None
    assert account.invited_by is None


def test_acceptance_on_locked_db_rolls_back(db_path, time_port):
    repo = SQLiteAccountRepo(db_path, timeout=0.05)
    lifecycle = InvitationLifecycle(repo, time_port=time_port)
    account = Account(email="locked@test.com")
    assert lifecycle.invite(account)
    token = account.invitation_token

    locker = sqlite3.connect(db_path, isolation_level=None)
    try:
        locker.execute("BEGIN IMMEDIATE")
        assert lifecycle.accept_invitation(account) is True
    finally:
        locker.close()

    assert lifecycle.accepting_invitation(account) is False
    assert lifecycle.state(account) == InvitationState.INVITED
    assert account.invitation_token == token
    assert account.invitation_accepted_at is None
    stored = repo.get_by_email("locked@test.com")
    assert stored is not None
    assert stored.invitation_token == token
