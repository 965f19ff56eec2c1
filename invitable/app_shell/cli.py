import argparse
import logging
import sys
from pathlib import Path
from uuid import UUID

from invitable.adapters.sqlite.migrator import SQLiteMigrator
from invitable.app_shell.config import validate_ops_rules
from invitable.app_shell.context import ServiceContext
from invitable.components.invitation import (
    AcceptInvitationInput,
    InvitationStatusInput,
    IssueInvitationInput,
    ValidationError,
    run_accept,
    run_issue,
    run_status,
)
from invitable.rules.loader import load_rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_context(rules_path: Path) -> ServiceContext:
    try:
        rules = load_rules(rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Could not load rules: %s", e)
        sys.exit(1)

    validate_ops_rules(rules)
    return ServiceContext.create(rules)


def _fail(errors: list[ValidationError]) -> int:
    for err in errors:
        logger.error("%s: %s", err.code, err.message)
    return 1


def handle_migrate(ctx: ServiceContext, args: argparse.Namespace) -> int:
    applied = SQLiteMigrator(ctx.rules.storage.db_path).run_migrations()
    print(f"Applied {len(applied)} migration(s).")
    return 0


def handle_invite(ctx: ServiceContext, args: argparse.Namespace) -> int:
    inp = IssueInvitationInput(
        email=args.email,
        invited_by=args.invited_by,
        skip_invitation=args.skip_email,
        display_name=args.name,
        require_confirmation=ctx.rules.invitations.require_confirmation,
    )
    result = run_issue(inp, ctx.account_repo, ctx.lifecycle)
    if not result.success:
        return _fail(result.errors)

    print(f"Invitation issued for {args.email}.")
    print(f"Token: {result.token}")
    return 0


def handle_accept(ctx: ServiceContext, args: argparse.Namespace) -> int:
    result = run_accept(AcceptInvitationInput(token=args.token), ctx.account_repo, ctx.lifecycle)
    if not result.success or not result.persisted:
        return _fail(result.errors)

    print("Invitation accepted.")
    return 0


def handle_status(ctx: ServiceContext, args: argparse.Namespace) -> int:
    result = run_status(InvitationStatusInput(email=args.email), ctx.account_repo, ctx.lifecycle)
    if not result.success or result.state is None:
        return _fail(result.errors)

    print(f"State: {result.state.value}")
    if result.expired:
        print("Invitation expired.")
    if result.due_at:
        print(f"Due at: {result.due_at.isoformat()}")
    if result.invited_by:
        print(f"Invited by: {result.invited_by}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Invitable CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Create or upgrade the account database")

    # invite
    invite_parser = subparsers.add_parser("invite", help="Invite an email address")
    invite_parser.add_argument("email", help="Email address to invite")
    invite_parser.add_argument("--invited-by", type=UUID, help="Account id of the inviter")
    invite_parser.add_argument("--name", help="Display name of the invitee")
    invite_parser.add_argument(
        "--skip-email", action="store_true", help="Issue the token without sending it"
    )

    # accept
    accept_parser = subparsers.add_parser("accept", help="Accept an invitation")
    accept_parser.add_argument("token", help="Invitation token")

    # status
    status_parser = subparsers.add_parser("status", help="Show invitation status")
    status_parser.add_argument("email", help="Email address of the account")

    return parser


HANDLERS = {
    "migrate": handle_migrate,
    "invite": handle_invite,
    "accept": handle_accept,
    "status": handle_status,
}


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    ctx = get_context(Path(args.rules))
    return HANDLERS[args.command](ctx, args)


if __name__ == "__main__":
    sys.exit(main())
