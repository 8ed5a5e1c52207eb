"""CLI entrypoint for the standup dashboard.

Stands in for the dashboard's settings panel and views: credentials are written to
the encrypted local vault, and data commands call the internal API layer with the
vault's credentials attached.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from standup_dashboard import __version__
from standup_dashboard.client.api import DashboardApiClient, DashboardApiError
from standup_dashboard.config import DashboardSettings
from standup_dashboard.logging import configure_logging
from standup_dashboard.members.context import team_context_lines
from standup_dashboard.members.filter import MemberFilterResolver
from standup_dashboard.vault.credentials import SelectedTeam
from standup_dashboard.vault.session import VaultSession, anonymous_user_key
from standup_dashboard.vault.storage import JsonFileStorage

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A user-facing failure (printed, exit code 1)."""


def _mask(value: str) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return f"****{value[-4:]}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="standup",
        description="Team status from Linear and GitHub, with an encrypted local credential vault",
    )
    parser.add_argument(
        "--version", action="version", version=f"standup-dashboard {__version__}"
    )
    parser.add_argument(
        "--user",
        default=None,
        help=(
            "User id the vault key is derived from "
            "(defaults to STANDUP_USER_ID or an anonymous id)"
        ),
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    configure = subparsers.add_parser("configure", help="Store GitHub / Linear credentials")
    configure.add_argument("--github-token", default=None, help="GitHub personal access token")
    configure.add_argument("--github-org", default=None, help="GitHub organization login")
    configure.add_argument("--linear-api-key", default=None, help="Linear API key")

    subparsers.add_parser("show-config", help="Show stored settings (secrets masked)")

    select_team = subparsers.add_parser("select-team", help="Select the Linear team to report on")
    select_team.add_argument("--id", dest="team_id", default=None, help="Linear team id")
    select_team.add_argument("--name", dest="team_name", default=None, help="Team display name")
    select_team.add_argument("--clear", action="store_true", help="Clear the selected team")

    toggle = subparsers.add_parser(
        "toggle-member", help="Include/exclude a team member in team-wide views"
    )
    toggle.add_argument("member_id", help="Linear user id of the member")

    subparsers.add_parser("clear-filter", help="Show all team members again")
    subparsers.add_parser("teams", help="List Linear teams")
    subparsers.add_parser("team", help="Show the selected team's member status")
    subparsers.add_parser("risks", help="Show overdue, stale and unassigned work")
    subparsers.add_parser("context", help="Print the team scoping context for the assistant")

    find_user = subparsers.add_parser("find-user", help="Find a person's GitHub login")
    find_user.add_argument("--email", default=None)
    find_user.add_argument("--name", default=None)

    serve = subparsers.add_parser("serve", help="Run the internal API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


async def _require_team(session: VaultSession) -> SelectedTeam:
    team = await session.credentials.get_selected_team()
    if team is None:
        raise CommandError("No team selected. Run 'standup select-team --id ... --name ...' first.")
    return team


async def _run(args: argparse.Namespace, session: VaultSession, settings: DashboardSettings) -> int:
    credentials = session.credentials

    if args.command == "configure":
        saved: list[str] = []
        if args.github_token is not None:
            await credentials.set_github_token(args.github_token)
            saved.append("GitHub token")
        if args.github_org is not None:
            await credentials.set_github_org(args.github_org)
            saved.append("GitHub org")
        if args.linear_api_key is not None:
            await credentials.set_linear_api_key(args.linear_api_key)
            saved.append("Linear API key")
        if not saved:
            raise CommandError("Nothing to save; pass at least one credential option.")
        logger.info("Credentials updated", extra={"fields": saved})
        print(f"Saved: {', '.join(saved)}")
        return 0

    if args.command == "show-config":
        team = await credentials.get_selected_team()
        member_ids = await credentials.get_filtered_members()
        print(f"GitHub token:   {_mask(await credentials.get_github_token())}")
        print(f"GitHub org:     {await credentials.get_github_org() or '(not set)'}")
        print(f"Linear API key: {_mask(await credentials.get_linear_api_key())}")
        print(f"Selected team:  {f'{team.name} ({team.id})' if team else '(none)'}")
        print(
            "Member filter:  "
            + ("all members" if member_ids is None else f"{len(member_ids)} member(s)")
        )
        return 0

    if args.command == "select-team":
        if args.clear:
            await credentials.set_selected_team(None)
            print("Cleared selected team")
            return 0
        if not args.team_id or not args.team_name:
            raise CommandError("--id and --name are required (or use --clear)")
        await credentials.set_selected_team(SelectedTeam(id=args.team_id, name=args.team_name))
        print(f"Selected team {args.team_name}")
        return 0

    if args.command == "clear-filter":
        await credentials.set_filtered_members(None)
        print("Showing all team members")
        return 0

    api = DashboardApiClient(headers=session.headers, base_url=settings.api_root)
    try:
        resolver = MemberFilterResolver(credentials=credentials, fetch_team=api.fetch_team_members)

        if args.command == "teams":
            for team_ref in await api.list_teams():
                print(f"{team_ref.key:<8} {team_ref.name}  ({team_ref.id})")
            return 0

        if args.command == "toggle-member":
            team = await _require_team(session)
            members = await api.fetch_team_members(team.id)
            roster_ids = [m.linearUserId for m in members]
            if args.member_id not in roster_ids:
                raise CommandError(f"{args.member_id} is not a member of {team.name}")
            updated = await resolver.toggle_member(args.member_id, roster_ids)
            print("Showing all members" if updated is None else f"Showing {len(updated)} member(s)")
            return 0

        if args.command == "team":
            team = await _require_team(session)
            await resolver.load()
            roster = await api.fetch_team(team.id)
            members = resolver.apply(roster.members)
            print(f"{roster.teamName}: {len(members)} member(s)")
            for m in members:
                top = f"  - {m.topIssue}" if m.topIssue else ""
                print(f"  {m.status:<9} {m.name} ({m.inProgressIssues} in progress){top}")
            return 0

        if args.command == "risks":
            team = await _require_team(session)
            report = await api.fetch_risk_report(team.id)
            print(f"{report.teamName}: {report.totalRisks} risk(s) as of {report.generatedAt}")
            for section in report.sections:
                print(f"[{section.severity}] {section.category}")
                for item in section.items:
                    who = f" @{item.assignee}" if item.assignee else ""
                    print(f"  {item.identifier} {item.title}{who}: {item.reason}")
            return 0

        if args.command == "context":
            team = await credentials.get_selected_team()
            names = await resolver.resolve_filtered_names(team.id) if team else None
            for line in team_context_lines(team, names):
                print(f"- {line}")
            return 0

        if args.command == "find-user":
            if not args.email and not args.name:
                raise CommandError("--email or --name is required")
            result = await api.find_github_user(email=args.email, name=args.name)
            print(json.dumps(result, indent=2))
            return 0
    finally:
        api.close()

    logger.error("Unknown command", extra={"command": args.command})
    return 2


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = DashboardSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "serve":
        import uvicorn

        from standup_dashboard.server.app import create_app

        # log_config=None keeps the JSON handlers installed above.
        uvicorn.run(
            create_app(),
            host=args.host,
            port=args.port,
            log_config=None,
            log_level=settings.log_level.lower(),
        )
        return 0

    storage = JsonFileStorage(settings.storage_path)
    user_id = args.user or settings.user_id or anonymous_user_key(storage)
    session = VaultSession(storage=storage)

    async def run() -> int:
        await session.sign_in(user_id)
        return await _run(args, session, settings)

    try:
        return asyncio.run(run())
    except (CommandError, DashboardApiError) as e:
        print(str(e), file=sys.stderr)
        return 1
    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
