"""
Email invitation notifier.

Implements InvitationNotifierPort on top of an EmailPort: renders the
invitation instructions (with the accept link) and hands them to the
email adapter. Delivery failures are logged and swallowed here so the
lifecycle never sees them.
"""

from __future__ import annotations

import html
import logging
from urllib.parse import urlencode

from invitable.core.ports.email import (
    DEFAULT_INVITATION_SUBJECT,
    EmailAddress,
    EmailMessage,
    EmailPort,
)
from invitable.domain.entities import Account

logger = logging.getLogger(__name__)


def build_accept_url(
    base_url: str,
    token: str,
    path: str = "/invitations/accept",
) -> str:
    """
    Build the invitation acceptance URL for email.

    Args:
        base_url: Site base URL
        token: Invitation token
        path: URL path of the acceptance endpoint

    Returns:
        Full acceptance URL
    """
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'invitation_token': token})}"


class EmailInvitationNotifier:
    def __init__(
        self,
        email: EmailPort,
        *,
        site_name: str,
        base_url: str,
        accept_path: str = "/invitations/accept",
        sender: EmailAddress | None = None,
        subject: str = DEFAULT_INVITATION_SUBJECT,
    ) -> None:
        self._email = email
        self._site_name = site_name
        self._base_url = base_url
        self._accept_path = accept_path
        self._sender = sender
        self._subject = subject

    def render(self, account: Account, token: str) -> EmailMessage:
        url = build_accept_url(self._base_url, token, self._accept_path)
        greeting = f"Hello {account.display_name}," if account.display_name else "Hello,"
        body_text = (
            f"{greeting}\n\n"
            f"Someone has invited you to {self._site_name}. "
            f"You can accept the invitation through the link below.\n\n"
            f"{url}\n\n"
            "If you don't want to accept the invitation, please ignore this email. "
            "Your account won't be created until you access the link above."
        )
        body_html = (
            f"<p>{html.escape(greeting)}</p>"
            f"<p>Someone has invited you to {html.escape(self._site_name)}. "
            "You can accept the invitation through the link below.</p>"
            f'<p><a href="{html.escape(url)}">Accept invitation</a></p>'
            "<p>If you don't want to accept the invitation, please ignore this email. "
            "Your account won't be created until you access the link above.</p>"
        )
        return EmailMessage(
            recipient=EmailAddress(account.email, account.display_name),
            subject=self._subject.format(site_name=self._site_name),
            body_html=body_html,
            body_text=body_text,
            sender=self._sender,
        )

    def send_invitation(self, account: Account, token: str) -> None:
        try:
            message = self.render(account, token)
        except (KeyError, IndexError, ValueError) as e:
            logger.warning("Invitation email for account %s not rendered: %s", account.id, e)
            return
        result = self._email.send(message)
        if not result.ok:
            logger.warning(
                "Invitation email to %s failed: %s", result.recipient, result.error
            )
