import logging
import os
import sys
from datetime import timedelta

from invitable.components.invitation import InvitationConfig, InvitationNotifierPort
from invitable.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]

    if missing:
        print(
            f"CRITICAL: Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)

    logger.debug("Configuration validated.")


def build_invitation_config(
    rules: Rules,
    notifier: InvitationNotifierPort | None = None,
) -> InvitationConfig:
    """Freeze the invitation settings for the lifetime of the process."""
    days = rules.invitations.accept_invitation_within_days
    return InvitationConfig(
        accept_invitation_within=timedelta(days=days) if days else None,
        notifier=notifier if rules.invitations.notify else None,
    )
