"""Dashboard-facing REST API.

All routes are mounted under ``/api``. Credentials come from request headers
(``x-linear-api-key``, ``x-github-token``, ``x-github-org``); the server never stores
them. Responses carry private ``Cache-Control`` headers so browsers and proxies may
reuse them briefly.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import APIRouter, Header, HTTPException, Query, Request, Response

from standup_dashboard import __version__
from standup_dashboard.github.client import GitHubClient, PullRequestDetail, PullRequestSummary
from standup_dashboard.github.matcher import GitHubUserMatcher
from standup_dashboard.linear.client import LinearClient
from standup_dashboard.linear.service import SEARCH_DEFAULT_LIMIT, LinearDashboardService
from standup_dashboard.server.config import ServerSettings

router = APIRouter()


def _settings(request: Request) -> ServerSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ServerSettings):
        raise HTTPException(status_code=500, detail="Server settings not configured")
    return settings


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _cache(response: Response, max_age: int) -> None:
    response.headers["Cache-Control"] = f"private, max-age={max_age}"


def _linear_client(settings: ServerSettings, api_key: str) -> LinearClient:
    return LinearClient(
        api_key=api_key,
        api_url=settings.linear_api_url,
        timeout=settings.request_timeout_seconds,
    )


def _github_client(settings: ServerSettings, token: str) -> GitHubClient:
    return GitHubClient(
        token=token,
        base_url=settings.github_base_url,
        timeout=settings.request_timeout_seconds,
    )


def _require_linear_key(value: str | None) -> str:
    if not value:
        raise HTTPException(status_code=401, detail="Linear API key not provided")
    return value


def _require_github_token(value: str | None) -> str:
    if not value:
        raise HTTPException(status_code=401, detail="GitHub token not provided")
    return value


def _pr_summary_payload(pr: PullRequestSummary) -> dict[str, Any]:
    return {
        "number": pr.number,
        "title": pr.title,
        "state": pr.state,
        "url": pr.url,
        "repo": pr.repo,
        "labels": [asdict(lbl) for lbl in pr.labels],
        "createdAt": pr.created_at,
        "updatedAt": pr.updated_at,
        "mergedAt": pr.merged_at,
        "author": pr.author,
        "authorAvatar": pr.author_avatar,
    }


def _pr_detail_payload(pr: PullRequestDetail) -> dict[str, Any]:
    return {
        "number": pr.number,
        "title": pr.title,
        "body": pr.body,
        "state": pr.state,
        "url": pr.url,
        "repo": pr.repo,
        "additions": pr.additions,
        "deletions": pr.deletions,
        "changedFiles": pr.changed_files,
        "head": pr.head,
        "base": pr.base,
        "labels": [asdict(lbl) for lbl in pr.labels],
        "createdAt": pr.created_at,
        "updatedAt": pr.updated_at,
        "mergedAt": pr.merged_at,
        "author": pr.author,
        "authorAvatar": pr.author_avatar,
        "draft": pr.draft,
    }


@router.get("/health")
def health() -> dict[str, object]:
    return {"status": "ok", "version": __version__}


@router.get("/linear/team")
def linear_team(
    request: Request,
    response: Response,
    team_id: str | None = Query(default=None, alias="id"),
    x_linear_api_key: str | None = Header(default=None),
) -> Any:
    client = _linear_client(_settings(request), _require_linear_key(x_linear_api_key))
    try:
        service = LinearDashboardService(client)
        if not team_id:
            _cache(response, 300)
            return [t.model_dump(mode="json") for t in service.list_teams()]

        roster = service.team_roster(team_id, now=_utc_now())
        _cache(response, 120)
        return roster.model_dump(mode="json")
    finally:
        client.close()


@router.get("/linear/risks")
def linear_risks(
    request: Request,
    response: Response,
    team_id: str | None = Query(default=None, alias="teamId"),
    x_linear_api_key: str | None = Header(default=None),
) -> dict[str, object]:
    api_key = _require_linear_key(x_linear_api_key)
    if not team_id:
        raise HTTPException(status_code=400, detail="teamId is required")

    client = _linear_client(_settings(request), api_key)
    try:
        report = LinearDashboardService(client).risk_report(team_id, now=_utc_now())
    finally:
        client.close()
    _cache(response, 120)
    return report.model_dump(mode="json")


@router.get("/linear/issues")
def linear_issues(
    request: Request,
    response: Response,
    user_id: str | None = Query(default=None, alias="userId"),
    x_linear_api_key: str | None = Header(default=None),
) -> list[dict[str, Any]]:
    api_key = _require_linear_key(x_linear_api_key)
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")

    client = _linear_client(_settings(request), api_key)
    try:
        issues = LinearDashboardService(client).user_issues(user_id)
    finally:
        client.close()
    _cache(response, 120)
    return issues


@router.get("/linear/cycle")
def linear_cycle(
    request: Request,
    response: Response,
    cycle_id: str | None = Query(default=None, alias="id"),
    team_id: str | None = Query(default=None, alias="teamId"),
    x_linear_api_key: str | None = Header(default=None),
) -> dict[str, object]:
    api_key = _require_linear_key(x_linear_api_key)
    if not cycle_id and not team_id:
        raise HTTPException(status_code=400, detail="teamId or id is required")

    client = _linear_client(_settings(request), api_key)
    try:
        summary = LinearDashboardService(client).cycle_summary(
            now=_utc_now(), cycle_id=cycle_id, team_id=team_id
        )
    finally:
        client.close()
    if summary is None:
        raise HTTPException(status_code=404, detail="No active cycle found")
    _cache(response, 120)
    return summary.model_dump(mode="json")


@router.get("/linear/search")
def linear_search(
    request: Request,
    response: Response,
    query: str | None = Query(default=None),
    first: int = Query(default=SEARCH_DEFAULT_LIMIT, ge=1),
    x_linear_api_key: str | None = Header(default=None),
) -> list[dict[str, Any]]:
    api_key = _require_linear_key(x_linear_api_key)
    if not query:
        raise HTTPException(status_code=400, detail="query is required")

    client = _linear_client(_settings(request), api_key)
    try:
        results = LinearDashboardService(client).search_issues(query, first=first)
    finally:
        client.close()
    _cache(response, 60)
    return results


@router.get("/github/prs")
def github_prs(
    request: Request,
    response: Response,
    since: str | None = Query(default=None),
    until: str | None = Query(default=None),
    repo: str | None = Query(default=None),
    owner: str | None = Query(default=None),
    number: int | None = Query(default=None),
    author: str | None = Query(default=None),
    x_github_token: str | None = Header(default=None),
) -> Any:
    client = _github_client(_settings(request), _require_github_token(x_github_token))
    try:
        if owner and repo and number:
            detail = client.get_pull_request(owner=owner, repo=repo, number=number)
            if detail is None:
                raise HTTPException(status_code=404, detail="PR not found")
            _cache(response, 300)
            return _pr_detail_payload(detail)

        since = since or (_utc_now() - timedelta(days=1)).date().isoformat()
        prs = client.search_pull_requests(author=author, since=since, until=until, repo=repo)
        _cache(response, 120)
        return [_pr_summary_payload(pr) for pr in prs]
    finally:
        client.close()


@router.get("/github/find-user")
async def github_find_user(
    request: Request,
    response: Response,
    email: str | None = Query(default=None),
    name: str | None = Query(default=None),
    x_github_token: str | None = Header(default=None),
    x_github_org: str | None = Header(default=None),
) -> dict[str, object]:
    token = _require_github_token(x_github_token)
    if not email and not name:
        raise HTTPException(status_code=400, detail="email or name is required")

    client = _github_client(_settings(request), token)
    try:
        result = await GitHubUserMatcher(client).match(
            email=email, name=name, org=x_github_org or ""
        )
    finally:
        client.close()

    _cache(response, 600 if result.users else 300)
    return {
        "users": [{"login": u.login, "avatar": u.avatar, "name": u.name} for u in result.users],
        "bestMatch": result.best_match,
        "matchedBy": result.matched_by,
    }
