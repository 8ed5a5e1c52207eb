"""GitHub access for the dashboard."""

from __future__ import annotations

__all__ = ["GitHubClient", "GitHubUserMatcher", "UserMatch", "name_score"]

from standup_dashboard.github.client import GitHubClient
from standup_dashboard.github.matcher import GitHubUserMatcher, UserMatch, name_score
