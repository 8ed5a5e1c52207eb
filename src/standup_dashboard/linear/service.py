"""Dashboard views over Linear data.

Raw GraphQL nodes are converted to :class:`IssueSignal` here and every status or risk
decision is delegated to :mod:`standup_dashboard.risk.engine`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from standup_dashboard.linear.client import LinearApiError, LinearClient
from standup_dashboard.linear.queries import (
    ACTIVE_CYCLE_QUERY,
    CYCLE_QUERY,
    SEARCH_ISSUES_QUERY,
    TEAM_MEMBERS_QUERY,
    TEAM_RISKS_QUERY,
    TEAMS_LIST_QUERY,
    USER_ISSUES_QUERY,
)
from standup_dashboard.risk.engine import (
    build_cycle_summary,
    build_risk_report,
    parse_timestamp,
    summarize_member,
)
from standup_dashboard.risk.models import (
    CycleSummary,
    IssueSignal,
    RiskReport,
    TeamMember,
    TeamRef,
    TeamRoster,
)

logger = logging.getLogger(__name__)

SEARCH_DEFAULT_LIMIT = 20
SEARCH_MAX_LIMIT = 50


def _nodes(container: Any) -> list[dict[str, Any]]:
    if not isinstance(container, dict):
        return []
    nodes = container.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, dict)]


def _due_date(node: dict[str, Any]) -> datetime | None:
    """The issue's due date; a missing or unparsable value means "no due date"."""

    due = node.get("dueDate")
    if not isinstance(due, str) or not due:
        return None
    try:
        return parse_timestamp(due)
    except ValueError:
        logger.warning(
            "Ignoring unparsable due date",
            extra={"identifier": node.get("identifier"), "due_date": due},
        )
        return None


def issue_signal_from_node(
    node: dict[str, Any], *, assignee_name: str | None = None
) -> IssueSignal:
    """Build an :class:`IssueSignal` from a Linear issue node.

    ``assignee_name`` overrides the node's assignee (used for a member's own issues,
    which are fetched without an assignee field).
    """

    state = node.get("state") or {}
    if assignee_name is None:
        assignee = node.get("assignee")
        if isinstance(assignee, dict):
            assignee_name = assignee.get("displayName") or assignee.get("name") or ""

    return IssueSignal(
        identifier=str(node.get("identifier") or node.get("id") or ""),
        title=str(node.get("title") or ""),
        url=str(node.get("url") or ""),
        updated_at=parse_timestamp(str(node["updatedAt"])),
        state_type=str(state.get("type") or "other"),
        due_date=_due_date(node),
        assignee_name=assignee_name,
    )


class LinearDashboardService:
    def __init__(self, client: LinearClient) -> None:
        self._client = client

    def list_teams(self) -> list[TeamRef]:
        data = self._client.query(TEAMS_LIST_QUERY)
        return [TeamRef.model_validate(n) for n in _nodes(data.get("teams"))]

    def team_roster(self, team_id: str, *, now: datetime) -> TeamRoster:
        data = self._client.query(TEAM_MEMBERS_QUERY, {"teamId": team_id})
        team = data.get("team")
        if not isinstance(team, dict):
            raise LinearApiError("Team not found")

        members: list[TeamMember] = []
        for user in _nodes(team.get("members")):
            if not user.get("active"):
                continue
            name = user.get("displayName") or user.get("name") or ""
            issues = [
                issue_signal_from_node(n, assignee_name=name)
                for n in _nodes(user.get("assignedIssues"))
            ]
            summary = summarize_member(issues, now)
            members.append(
                TeamMember(
                    linearUserId=str(user["id"]),
                    name=name,
                    email=user.get("email") or None,
                    avatar=user.get("avatarUrl") or None,
                    inProgressIssues=summary.in_progress_issues,
                    status=summary.status,
                    topIssue=summary.top_issue,
                )
            )

        logger.debug(
            "Built team roster", extra={"team_id": team_id, "member_count": len(members)}
        )
        return TeamRoster(
            teamId=str(team.get("id", team_id)),
            teamName=str(team.get("name", "")),
            members=members,
        )

    def risk_report(self, team_id: str, *, now: datetime) -> RiskReport:
        data = self._client.query(TEAM_RISKS_QUERY, {"teamId": team_id})
        team = data.get("team")
        if not isinstance(team, dict):
            raise LinearApiError("Team not found")
        # The query only returns open issues.
        issues = [issue_signal_from_node(n) for n in _nodes(team.get("issues"))]
        return build_risk_report(str(team.get("name", "")), issues, now)

    def user_issues(self, user_id: str) -> list[dict[str, Any]]:
        data = self._client.query(USER_ISSUES_QUERY, {"userId": user_id})
        user = data.get("user")
        if not isinstance(user, dict):
            raise LinearApiError("User not found")
        return _nodes(user.get("assignedIssues"))

    def cycle_summary(
        self, *, now: datetime, cycle_id: str | None = None, team_id: str | None = None
    ) -> CycleSummary | None:
        """Summary of ``cycle_id``, or of the team's active cycle (``None`` if there is none)."""

        if cycle_id:
            cycle = self._client.query(CYCLE_QUERY, {"cycleId": cycle_id}).get("cycle")
            if not isinstance(cycle, dict):
                raise LinearApiError("Cycle not found")
        elif team_id:
            team = self._client.query(ACTIVE_CYCLE_QUERY, {"teamId": team_id}).get("team")
            if not isinstance(team, dict):
                raise LinearApiError("Team not found")
            cycle = team.get("activeCycle")
            if not isinstance(cycle, dict):
                return None
        else:
            raise ValueError("cycle_id or team_id is required")

        return build_cycle_summary(
            cycle_id=str(cycle["id"]),
            name=cycle.get("name"),
            number=cycle.get("number"),
            starts_at=parse_timestamp(str(cycle["startsAt"])),
            ends_at=parse_timestamp(str(cycle["endsAt"])),
            issues=[issue_signal_from_node(n) for n in _nodes(cycle.get("issues"))],
            now=now,
        )

    def search_issues(
        self, term: str, *, first: int = SEARCH_DEFAULT_LIMIT
    ) -> list[dict[str, Any]]:
        first = max(1, min(first, SEARCH_MAX_LIMIT))
        data = self._client.query(SEARCH_ISSUES_QUERY, {"term": term, "first": first})

        results: list[dict[str, Any]] = []
        for n in _nodes(data.get("searchIssues")):
            state = n.get("state") or {}
            assignee = n.get("assignee") or {}
            results.append(
                {
                    "identifier": n.get("identifier"),
                    "title": n.get("title"),
                    "url": n.get("url"),
                    "priority": n.get("priorityLabel"),
                    "status": state.get("name") or "Unknown",
                    "statusType": state.get("type") or "unknown",
                    "assignee": assignee.get("name"),
                    "labelIds": n.get("labelIds") or [],
                    "updatedAt": n.get("updatedAt"),
                    "createdAt": n.get("createdAt"),
                }
            )
        return results
