from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Confirmation ---


class ConfirmationState(BaseModel):
    """Email-ownership confirmation carried by accounts that require it."""

    required: bool = True
    confirmed_at: datetime | None = None

    def confirmation_required(self) -> bool:
        return self.required and self.confirmed_at is None


# --- Accounts ---


class RedemptionContext(BaseModel):
    # Only meaningful while an acceptance is in flight; never persisted.
    accepting: bool = False
    token_snapshot: str | None = None
    confirmation_applied: bool = False


class Account(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    display_name: str | None = None

    invitation_token: str | None = None
    invitation_created_at: datetime | None = None
    invitation_sent_at: datetime | None = None
    invitation_accepted_at: datetime | None = None
    invited_by: UUID | None = None

    confirmation: ConfirmationState | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    redemption: RedemptionContext = Field(default_factory=RedemptionContext, exclude=True)
