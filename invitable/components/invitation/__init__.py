"""
Invitation component - invitation issuance and redemption.
"""

from ._impl import (
    InvitationLifecycle,
    generate_invitation_token,
    invitation_due_at,
    invitation_period_valid,
)
from .component import (
    run,
    run_accept,
    run_issue,
    run_status,
)
from .models import (
    AcceptInvitationInput,
    AcceptInvitationOutput,
    InvitationConfig,
    InvitationState,
    InvitationStatusInput,
    InvitationStatusOutput,
    IssueInvitationInput,
    IssueInvitationOutput,
    ValidationError,
)
from .ports import AccountRepoPort, InvitationNotifierPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_issue",
    "run_accept",
    "run_status",
    # Lifecycle
    "InvitationLifecycle",
    "generate_invitation_token",
    "invitation_due_at",
    "invitation_period_valid",
    # Input models
    "IssueInvitationInput",
    "AcceptInvitationInput",
    "InvitationStatusInput",
    # Output models
    "IssueInvitationOutput",
    "AcceptInvitationOutput",
    "InvitationStatusOutput",
    "InvitationConfig",
    "InvitationState",
    "ValidationError",
    # Ports
    "AccountRepoPort",
    "InvitationNotifierPort",
    "TimePort",
]
