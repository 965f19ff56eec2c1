from string import Formatter

from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class InvitationRules(BaseModel):
    # 0 means invitations never expire
    accept_invitation_within_days: int = Field(default=0, ge=0)
    notify: bool = True
    require_confirmation: bool = False


class EmailRules(BaseModel):
    site_name: str
    base_url: str
    accept_path: str = "/invitations/accept"
    sender_email: str
    sender_name: str | None = None
    subject: str = "You have been invited to {site_name}"

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        """Subject must be non-empty and may only reference {site_name}."""
        if not v.strip():
            raise ValueError("Subject is required")
        try:
            fields = {name for _, name, _, _ in Formatter().parse(v) if name is not None}
        except ValueError as e:
            raise ValueError(f"Invalid subject template: {e}") from e
        unknown = fields - {"site_name"}
        if unknown:
            raise ValueError(f"Unknown subject placeholders: {sorted(unknown)}")
        return v


class StorageRules(BaseModel):
    db_path: str = "invitable.db"


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    invitations: InvitationRules = Field(default_factory=InvitationRules)
    email: EmailRules
    storage: StorageRules = Field(default_factory=StorageRules)
    ops: OpsRules = Field(default_factory=OpsRules)
