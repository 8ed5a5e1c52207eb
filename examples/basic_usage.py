#!/usr/bin/env python3
"""Programmatic team risk report example.

This demonstrates using the dashboard components directly:

* load settings from `.env`
* read the Linear API key from the encrypted local vault
* build the risk report for one team

The team id is passed as an argument (not read from the vault).
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime

from standup_dashboard.config import DashboardSettings
from standup_dashboard.linear.client import LinearClient
from standup_dashboard.linear.service import LinearDashboardService
from standup_dashboard.logging import configure_logging
from standup_dashboard.vault.session import VaultSession, anonymous_user_key
from standup_dashboard.vault.storage import JsonFileStorage


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a team risk report (programmatic example).")
    parser.add_argument("--team-id", required=True, help="Linear team id")
    parser.add_argument("--user", default=None, help="User id the vault key is derived from")
    return parser.parse_args(argv)


async def _linear_api_key(session: VaultSession, user_id: str) -> str:
    await session.sign_in(user_id)
    return await session.credentials.get_linear_api_key()


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = DashboardSettings()
    configure_logging(settings.log_level)

    storage = JsonFileStorage(settings.storage_path)
    session = VaultSession(storage=storage)
    user_id = args.user or settings.user_id or anonymous_user_key(storage)

    api_key = asyncio.run(_linear_api_key(session, user_id))
    if not api_key:
        print("No Linear API key stored. Run 'standup configure --linear-api-key ...' first.")
        return 1

    client = LinearClient(api_key=api_key)
    try:
        report = LinearDashboardService(client).risk_report(
            args.team_id, now=datetime.now(tz=UTC)
        )
    finally:
        client.close()

    print(f"{report.teamName}: {report.totalRisks} risk(s)")
    for section in report.sections:
        print(f"[{section.severity}] {section.category}: {len(section.items)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
