"""Consumer of the internal API layer.

Every request goes through :meth:`HeaderInjector.get_token_headers`, which waits for
the vault to be ready, so credentials are never read from an undecryptable store.
Blocking HTTP calls run in worker threads to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from standup_dashboard.risk.models import CycleSummary, RiskReport, TeamMember, TeamRef, TeamRoster
from standup_dashboard.vault.headers import HeaderInjector

logger = logging.getLogger(__name__)


class DashboardApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DashboardApiClient:
    def __init__(
        self,
        *,
        headers: HeaderInjector,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._headers = headers
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        headers = await self._headers.get_token_headers()
        url = f"{self._base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            resp = await asyncio.to_thread(
                self._session.get, url, params=query, headers=headers, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise DashboardApiError(f"Request failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise DashboardApiError(
                f"Malformed JSON response ({resp.status_code})", resp.status_code
            ) from e

        if isinstance(payload, dict) and payload.get("error"):
            raise DashboardApiError(str(payload["error"]), resp.status_code)
        if not resp.ok:
            raise DashboardApiError(f"Request failed ({resp.status_code})", resp.status_code)
        return payload

    async def list_teams(self) -> list[TeamRef]:
        payload = await self.get_json("/api/linear/team")
        return [TeamRef.model_validate(t) for t in payload or []]

    async def fetch_team(self, team_id: str) -> TeamRoster:
        payload = await self.get_json("/api/linear/team", {"id": team_id})
        return TeamRoster.model_validate(payload)

    async def fetch_team_members(self, team_id: str) -> list[TeamMember]:
        return (await self.fetch_team(team_id)).members

    async def fetch_risk_report(self, team_id: str) -> RiskReport:
        payload = await self.get_json("/api/linear/risks", {"teamId": team_id})
        return RiskReport.model_validate(payload)

    async def fetch_user_issues(self, user_id: str) -> list[dict[str, Any]]:
        return list(await self.get_json("/api/linear/issues", {"userId": user_id}) or [])

    async def fetch_cycle(
        self, *, cycle_id: str | None = None, team_id: str | None = None
    ) -> CycleSummary:
        payload = await self.get_json("/api/linear/cycle", {"id": cycle_id, "teamId": team_id})
        return CycleSummary.model_validate(payload)

    async def fetch_pull_requests(
        self,
        *,
        author: str | None = None,
        since: str | None = None,
        until: str | None = None,
        repo: str | None = None,
    ) -> list[dict[str, Any]]:
        payload = await self.get_json(
            "/api/github/prs", {"author": author, "since": since, "until": until, "repo": repo}
        )
        return list(payload or [])

    async def find_github_user(
        self, *, email: str | None = None, name: str | None = None
    ) -> dict[str, Any]:
        return dict(await self.get_json("/api/github/find-user", {"email": email, "name": name}))

    def close(self) -> None:
        self._session.close()
