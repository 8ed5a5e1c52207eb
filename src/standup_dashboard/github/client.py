"""GitHub API client for the dashboard.

REST calls go through a ``requests.Session`` with bearer auth; typed lookups that
PyGithub already models (authenticated user, pull request detail) go through
PyGithub. A client is built per request from the caller's token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import quote

import requests
from github import Auth, Github, GithubException, UnknownObjectException

logger = logging.getLogger(__name__)

ORG_MEMBERS_PAGE_SIZE = 100
EMAIL_SEARCH_LIMIT = 3
NAME_SEARCH_LIMIT = 5
PR_SEARCH_LIMIT = 20


@dataclass(frozen=True, slots=True)
class GitHubUser:
    login: str
    avatar: str | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Label:
    name: str
    color: str


@dataclass(frozen=True, slots=True)
class PullRequestSummary:
    number: int
    title: str
    state: str
    url: str
    repo: str
    created_at: str
    updated_at: str
    merged_at: str | None
    author: str | None
    author_avatar: str | None
    labels: list[Label] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PullRequestDetail:
    number: int
    title: str
    body: str | None
    state: str
    url: str
    repo: str
    additions: int
    deletions: int
    changed_files: int
    head: str | None
    base: str | None
    created_at: str | None
    updated_at: str | None
    merged_at: str | None
    author: str | None
    author_avatar: str | None
    draft: bool
    labels: list[Label] = field(default_factory=list)


def _pr_state(*, merged: bool, draft: bool, state: str) -> str:
    if merged:
        return "merged"
    if draft:
        return "draft"
    return state


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def _users_from_search(payload: Any) -> list[GitHubUser]:
    items = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []
    users: list[GitHubUser] = []
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get("login"), str):
            continue
        users.append(
            GitHubUser(
                login=item["login"],
                avatar=item.get("avatar_url"),
                name=item.get("name") or None,
            )
        )
    return users


class GitHubClient:
    """Small wrapper for the GitHub calls the dashboard needs."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        session: requests.Session | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "standup-dashboard",
            }
        )
        self._github = github_api or Github(auth=Auth.Token(token), base_url=base_url)

    def _url(self, path: str) -> str:
        return f"{self._rest_base_url}/{path.lstrip('/')}"

    def _get(self, path: str, params: dict[str, Any] | None = None) -> requests.Response:
        return self._session.get(self._url(path), params=params, timeout=self._timeout)

    def search_users_by_email(self, email: str) -> list[GitHubUser]:
        resp = self._get(
            "/search/users",
            params={"q": f"{email} in:email type:user", "per_page": EMAIL_SEARCH_LIMIT},
        )
        resp.raise_for_status()
        return _users_from_search(resp.json())

    def search_users_by_name(
        self, name: str, *, limit: int = NAME_SEARCH_LIMIT
    ) -> list[GitHubUser]:
        resp = self._get("/search/users", params={"q": f"{name} type:user", "per_page": limit})
        resp.raise_for_status()
        return _users_from_search(resp.json())[:limit]

    def list_org_members(self, org: str) -> list[GitHubUser]:
        """All members of ``org``.

        Pagination stops at the first short, empty, non-list or failed page; members
        collected before a failure are still returned.
        """

        members: list[GitHubUser] = []
        page = 1
        while True:
            try:
                resp = self._get(
                    f"/orgs/{quote(org, safe='')}/members",
                    params={"per_page": ORG_MEMBERS_PAGE_SIZE, "page": page},
                )
            except requests.RequestException:
                logger.warning(
                    "Org member page request failed; keeping partial results",
                    extra={"org": org, "page": page},
                    exc_info=True,
                )
                break
            if not resp.ok:
                logger.warning(
                    "Org member page returned an error; keeping partial results",
                    extra={"org": org, "page": page, "status": resp.status_code},
                )
                break
            try:
                batch = resp.json()
            except ValueError:
                logger.warning(
                    "Org member page is not JSON; keeping partial results",
                    extra={"org": org, "page": page},
                )
                break
            if not isinstance(batch, list) or not batch:
                break
            members.extend(
                GitHubUser(login=m["login"], avatar=m.get("avatar_url"))
                for m in batch
                if isinstance(m, dict) and isinstance(m.get("login"), str)
            )
            if len(batch) < ORG_MEMBERS_PAGE_SIZE:
                break
            page += 1
        return members

    def get_user_display_name(self, login: str) -> str | None:
        try:
            resp = self._get(f"/users/{quote(login, safe='')}")
        except requests.RequestException:
            return None
        if not resp.ok:
            return None
        try:
            data = resp.json()
        except ValueError:
            return None
        name = data.get("name") if isinstance(data, dict) else None
        return name if isinstance(name, str) and name.strip() else None

    def get_authenticated_login(self) -> str:
        return self._github.get_user().login

    def search_pull_requests(
        self,
        *,
        author: str | None,
        since: str,
        until: str | None = None,
        repo: str | None = None,
    ) -> list[PullRequestSummary]:
        """Pull requests by ``author`` (token owner when omitted) updated in a range."""

        login = author or self.get_authenticated_login()
        date_range = f"{since}..{until}" if until else f">={since}"
        query = f"author:{login} is:pr updated:{date_range}"
        if repo:
            query += f" repo:{repo}"

        resp = self._get(
            "/search/issues",
            params={"q": query, "sort": "updated", "order": "desc", "per_page": PR_SEARCH_LIMIT},
        )
        resp.raise_for_status()
        payload = resp.json()
        items = payload.get("items") if isinstance(payload, dict) else None

        prs: list[PullRequestSummary] = []
        for item in items or []:
            if not isinstance(item, dict):
                continue
            repo_path = "/".join(str(item.get("repository_url", "")).split("/")[-2:])
            merged_at = (item.get("pull_request") or {}).get("merged_at")
            user = item.get("user") or {}
            prs.append(
                PullRequestSummary(
                    number=int(item.get("number", 0)),
                    title=str(item.get("title", "")),
                    state=_pr_state(
                        merged=bool(merged_at),
                        draft=bool(item.get("draft")),
                        state=str(item.get("state", "")),
                    ),
                    url=str(item.get("html_url", "")),
                    repo=repo_path,
                    created_at=str(item.get("created_at", "")),
                    updated_at=str(item.get("updated_at", "")),
                    merged_at=merged_at,
                    author=user.get("login"),
                    author_avatar=user.get("avatar_url"),
                    labels=[
                        Label(name=str(lbl.get("name", "")), color=str(lbl.get("color", "")))
                        for lbl in item.get("labels") or []
                        if isinstance(lbl, dict)
                    ],
                )
            )
        return prs

    def get_pull_request(self, *, owner: str, repo: str, number: int) -> PullRequestDetail | None:
        try:
            pr = self._github.get_repo(f"{owner}/{repo}").get_pull(number)
        except UnknownObjectException:
            return None
        except GithubException as e:
            if e.status == 404:
                return None
            raise

        return PullRequestDetail(
            number=pr.number,
            title=pr.title,
            body=pr.body,
            state=_pr_state(merged=pr.merged, draft=pr.draft, state=pr.state),
            url=pr.html_url,
            repo=f"{owner}/{repo}",
            additions=pr.additions,
            deletions=pr.deletions,
            changed_files=pr.changed_files,
            head=pr.head.ref if pr.head else None,
            base=pr.base.ref if pr.base else None,
            created_at=_iso(pr.created_at),
            updated_at=_iso(pr.updated_at),
            merged_at=_iso(pr.merged_at),
            author=pr.user.login if pr.user else None,
            author_avatar=pr.user.avatar_url if pr.user else None,
            draft=bool(pr.draft),
            labels=[Label(name=lbl.name, color=lbl.color) for lbl in pr.labels],
        )

    def close(self) -> None:
        self._session.close()
        self._github.close()
