"""Inputs and outputs of the risk/status derivation.

Engine inputs are plain frozen dataclasses. Payloads that leave the process through
the API use pydantic models with the camelCase field names the dashboard consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

PersonStatus = Literal["on-track", "at-risk", "idle"]
CycleItemStatus = Literal["done", "in-progress", "not-started"]

STARTED = "started"
COMPLETED = "completed"
CANCELED = "canceled"
CLOSED_STATE_TYPES = frozenset({COMPLETED, CANCELED})


@dataclass(frozen=True, slots=True)
class IssueSignal:
    """The fields of a tracked issue that risk classification looks at."""

    identifier: str
    title: str
    url: str
    updated_at: datetime
    state_type: str = "other"
    due_date: datetime | None = None
    assignee_name: str | None = None

    @property
    def is_started(self) -> bool:
        return self.state_type == STARTED

    @property
    def is_closed(self) -> bool:
        return self.state_type in CLOSED_STATE_TYPES

    @property
    def has_assignee(self) -> bool:
        return self.assignee_name is not None


@dataclass(frozen=True, slots=True)
class RiskFlags:
    """Independent (non-exclusive) risk flags for one issue."""

    overdue: bool
    stale: bool
    unassigned: bool

    @property
    def any(self) -> bool:
        return self.overdue or self.stale or self.unassigned


@dataclass(frozen=True, slots=True)
class MemberSummary:
    in_progress_issues: int
    status: PersonStatus
    top_issue: str | None


class RiskItem(BaseModel):
    identifier: str
    title: str
    assignee: str | None = None
    reason: str
    daysSinceUpdate: int | None = None
    url: str | None = None


class RiskSection(BaseModel):
    category: Literal["overdue", "stale", "unassigned"]
    severity: Literal["high", "medium"]
    items: list[RiskItem]


class RiskReport(BaseModel):
    teamName: str
    generatedAt: str
    sections: list[RiskSection]
    totalRisks: int


class TeamMember(BaseModel):
    linearUserId: str
    name: str
    email: str | None = None
    avatar: str | None = None
    inProgressIssues: int = 0
    status: PersonStatus = "idle"
    topIssue: str | None = None


class TeamRoster(BaseModel):
    teamId: str
    teamName: str
    members: list[TeamMember]


class TeamRef(BaseModel):
    id: str
    name: str
    key: str


class CycleItem(BaseModel):
    identifier: str
    title: str
    status: CycleItemStatus
    assignee: str | None = None
    isAtRisk: bool | None = None
    url: str | None = None


class CycleSummary(BaseModel):
    cycleId: str
    cycleName: str
    dateRange: str
    totalItems: int
    completedItems: int
    items: list[CycleItem]
