"""Best-effort mapping from a person (email and/or display name) to GitHub logins.

Strategies run in order and the first one that produces results wins:

1. email search (most reliable; short-circuits everything else)
2. org-scoped name matching (only with an org and a name)
3. global name search (only with a name)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal, Protocol

import requests
from github import GithubException

from standup_dashboard.github.client import NAME_SEARCH_LIMIT, GitHubUser

logger = logging.getLogger(__name__)

MatchedBy = Literal["email", "org", "name"]

ORG_MATCH_LIMIT = 5


class GitHubUserDirectory(Protocol):
    def search_users_by_email(self, email: str) -> list[GitHubUser]: ...

    def list_org_members(self, org: str) -> list[GitHubUser]: ...

    def get_user_display_name(self, login: str) -> str | None: ...

    def search_users_by_name(self, name: str, *, limit: int = ...) -> list[GitHubUser]: ...


@dataclass(frozen=True, slots=True)
class UserMatch:
    users: list[GitHubUser] = field(default_factory=list)
    matched_by: MatchedBy | None = None

    @property
    def best_match(self) -> str | None:
        return self.users[0].login if self.users else None


def name_score(query: str, target: str) -> int:
    """Score 0..100 for how well ``target`` matches the ``query`` name."""

    q = query.lower().strip()
    t = target.lower().strip()
    if t == q:
        return 100
    if q in t:
        return 80

    q_words = q.split()
    t_words = t.split()
    if not q_words:
        return 0
    matched = sum(1 for qw in q_words if any(qw in tw or tw in qw for tw in t_words))
    if matched == 0:
        return 0
    # Half-up rounding, not banker's rounding.
    return int(matched / len(q_words) * 60 + 0.5)


class GitHubUserMatcher:
    def __init__(self, directory: GitHubUserDirectory, *, max_concurrency: int = 8) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._directory = directory
        self._max_concurrency = max_concurrency

    async def match(
        self, *, email: str | None = None, name: str | None = None, org: str = ""
    ) -> UserMatch:
        if email:
            users = await self._attempt("email", self._directory.search_users_by_email, email)
            if users:
                return UserMatch(users=users, matched_by="email")

        if name and org:
            users = await self._match_in_org(name, org)
            if users:
                return UserMatch(users=users, matched_by="org")

        if name:
            users = await self._attempt("name", self._directory.search_users_by_name, name)
            if users:
                return UserMatch(users=users[:NAME_SEARCH_LIMIT], matched_by="name")

        return UserMatch()

    async def _attempt(
        self, strategy: str, call: Callable[[str], list[GitHubUser]], arg: str
    ) -> list[GitHubUser]:
        try:
            return await asyncio.to_thread(call, arg)
        except (requests.RequestException, GithubException):
            logger.warning(
                "GitHub user lookup failed; trying next strategy",
                extra={"strategy": strategy},
                exc_info=True,
            )
            return []

    async def _match_in_org(self, name: str, org: str) -> list[GitHubUser]:
        members = await self._attempt("org", self._directory.list_org_members, org)
        if not members:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def with_display_name(member: GitHubUser) -> GitHubUser:
            async with semaphore:
                try:
                    display = await asyncio.to_thread(
                        self._directory.get_user_display_name, member.login
                    )
                except (requests.RequestException, GithubException):
                    # Score this member on the login alone.
                    logger.warning(
                        "GitHub profile lookup failed",
                        extra={"login": member.login},
                        exc_info=True,
                    )
                    display = None
            return GitHubUser(login=member.login, avatar=member.avatar, name=display)

        # Join before scoring so the ranking never depends on arrival order.
        named = await asyncio.gather(*(with_display_name(m) for m in members))

        scored = [
            (max(name_score(name, m.name or ""), name_score(name, m.login)), m) for m in named
        ]
        ranked = sorted((pair for pair in scored if pair[0] > 0), key=lambda p: p[0], reverse=True)
        return [m for _score, m in ranked[:ORG_MATCH_LIMIT]]
