"""Team scoping lines handed to the assistant layer as conversation context."""

from __future__ import annotations

from collections.abc import Sequence

from standup_dashboard.vault.credentials import SelectedTeam


def team_context_lines(
    team: SelectedTeam | None, filtered_member_names: Sequence[str] | None
) -> list[str]:
    lines: list[str] = []
    if team is None:
        lines.append("If the user asks about a team, list the available teams first.")
    else:
        lines.append(
            f'The user\'s selected team is "{team.name}" (ID: {team.id}). '
            "Use this team by default for team-related requests."
        )
    if filtered_member_names:
        lines.append(
            "The user has filtered to these team members: "
            f"{', '.join(filtered_member_names)}. "
            "Focus on these people for team queries and reports."
        )
    return lines
