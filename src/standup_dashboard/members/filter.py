"""Member filter resolution.

The stored filter is an optional set of Linear user ids scoping team-wide views.
``None`` means "everyone", which keeps newly added team members visible by default;
that is why a filter that grows back to the full roster collapses to ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence

from standup_dashboard.risk.models import TeamMember
from standup_dashboard.vault.credentials import CredentialStore

logger = logging.getLogger(__name__)

TeamFetcher = Callable[[str], Awaitable[list[TeamMember]]]


def next_filter(
    current: Iterable[str] | None, member_id: str, roster_ids: Sequence[str]
) -> list[str] | None:
    """Toggle ``member_id`` in the filter and return the value to persist."""

    selected = set(roster_ids) if current is None else set(current)
    if member_id in selected:
        selected.remove(member_id)
    else:
        selected.add(member_id)

    if set(roster_ids) <= selected:
        return None
    # Keep roster order so the stored value is stable.
    ordered = [mid for mid in roster_ids if mid in selected]
    ordered.extend(sorted(selected.difference(roster_ids)))
    return ordered


class MemberFilterResolver:
    def __init__(self, *, credentials: CredentialStore, fetch_team: TeamFetcher) -> None:
        self._credentials = credentials
        self._fetch_team = fetch_team
        self._loaded: frozenset[str] | None = None

    async def load(self) -> frozenset[str] | None:
        ids = await self._credentials.get_filtered_members()
        self._loaded = None if ids is None else frozenset(ids)
        return self._loaded

    def filtered_id_set(self) -> frozenset[str] | None:
        """The filter as of the last :meth:`load`; ``None`` means all members."""

        return self._loaded

    def apply(self, members: Iterable[TeamMember]) -> list[TeamMember]:
        member_list = list(members)
        if self._loaded is None:
            return member_list
        return [m for m in member_list if m.linearUserId in self._loaded]

    async def resolve_filtered_names(self, team_id: str) -> list[str] | None:
        ids = await self._credentials.get_filtered_members()
        if ids is None:
            return None
        try:
            members = await self._fetch_team(team_id)
        except Exception:
            # Fail open: no filter rather than an empty team.
            logger.warning(
                "Team fetch failed; ignoring member filter",
                extra={"team_id": team_id},
                exc_info=True,
            )
            return None
        id_set = set(ids)
        return [m.name for m in members if m.linearUserId in id_set]

    async def toggle_member(self, member_id: str, roster_ids: Sequence[str]) -> list[str] | None:
        current = await self._credentials.get_filtered_members()
        updated = next_filter(current, member_id, roster_ids)
        await self._credentials.set_filtered_members(updated)
        self._loaded = None if updated is None else frozenset(updated)
        logger.info(
            "Member filter updated",
            extra={"member_id": member_id, "filtered": updated is not None},
        )
        return updated

    async def clear(self) -> None:
        await self._credentials.set_filtered_members(None)
        self._loaded = None
