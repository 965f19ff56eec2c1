from __future__ import annotations

from dataclasses import dataclass

from invitable.adapters.clock import SystemClock
from invitable.adapters.dev_email import DevEmailAdapter
from invitable.adapters.notifier import EmailInvitationNotifier
from invitable.adapters.sqlite.repos import SQLiteAccountRepo
from invitable.app_shell.config import build_invitation_config
from invitable.components.invitation import AccountRepoPort, InvitationLifecycle, TimePort
from invitable.core.ports.email import EmailAddress, EmailPort
from invitable.rules.models import Rules


@dataclass
class ServiceContext:
    account_repo: AccountRepoPort
    email: EmailPort
    lifecycle: InvitationLifecycle
    rules: Rules
    clock: TimePort

    @classmethod
    def create(
        cls,
        rules: Rules,
        db_path: str | None = None,
        email: EmailPort | None = None,
        clock: TimePort | None = None,
    ) -> ServiceContext:
        account_repo = SQLiteAccountRepo(db_path or rules.storage.db_path)
        clock = clock or SystemClock()

        email_cfg = rules.email
        sender = EmailAddress(email_cfg.sender_email, email_cfg.sender_name)
        email = email or DevEmailAdapter(default_sender=sender)
        notifier = EmailInvitationNotifier(
            email,
            site_name=email_cfg.site_name,
            base_url=email_cfg.base_url,
            accept_path=email_cfg.accept_path,
            sender=sender,
            subject=email_cfg.subject,
        )

        lifecycle = InvitationLifecycle(
            account_repo,
            build_invitation_config(rules, notifier),
            time_port=clock,
        )

        return cls(
            account_repo=account_repo,
            email=email,
            lifecycle=lifecycle,
            rules=rules,
            clock=clock,
        )
