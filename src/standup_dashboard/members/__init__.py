"""Team member filtering."""

from __future__ import annotations

__all__ = ["MemberFilterResolver", "next_filter", "team_context_lines"]

from standup_dashboard.members.context import team_context_lines
from standup_dashboard.members.filter import MemberFilterResolver, next_filter
