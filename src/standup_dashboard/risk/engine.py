"""Deterministic classification of issues and people.

Every rule takes an explicit ``now`` so results never depend on wall-clock time.
This module is the only place the overdue/stale/idle rules live; the API routes and
any other consumer call into it.

Two stale thresholds exist and both are kept literally:

==========================================  ==================  ============
Context                                     Comparator          Threshold
==========================================  ==================  ============
Risk report "stale" bucket                  whole days ``>=``   3 (inclusive)
Person / team status, cycle at-risk flag    fractional ``>``    3 (exclusive)
==========================================  ==================  ============

They disagree at exactly three days; harmonizing them is a product decision.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, date, datetime

from standup_dashboard.risk.models import (
    COMPLETED,
    CycleItem,
    CycleItemStatus,
    CycleSummary,
    IssueSignal,
    MemberSummary,
    PersonStatus,
    RiskFlags,
    RiskItem,
    RiskReport,
    RiskSection,
)

DAY_MS = 86_400_000
STALE_DAYS = 3


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp or a bare ``YYYY-MM-DD`` date (UTC midnight)."""

    text = value.strip()
    if len(text) == 10:
        d = date.fromisoformat(text)
        return datetime(d.year, d.month, d.day, tzinfo=UTC)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _elapsed_ms(since: datetime, now: datetime) -> float:
    return (now - since).total_seconds() * 1000


def days_since_update(issue: IssueSignal, now: datetime) -> int:
    """Whole days since the last update (floor), as displayed in reports."""

    return int(_elapsed_ms(issue.updated_at, now) // DAY_MS)


def is_overdue(issue: IssueSignal, now: datetime) -> bool:
    return issue.due_date is not None and issue.due_date < now


def is_stale_for_report(issue: IssueSignal, now: datetime) -> bool:
    return issue.is_started and days_since_update(issue, now) >= STALE_DAYS


def is_stale_for_status(issue: IssueSignal, now: datetime) -> bool:
    return issue.is_started and _elapsed_ms(issue.updated_at, now) / DAY_MS > STALE_DAYS


def classify_issue_risk(
    issue: IssueSignal, now: datetime, *, skip_closed: bool = True
) -> RiskFlags:
    """Classify one issue for the risk report.

    Args:
        issue: The issue to classify.
        now: Reference time.
        skip_closed: When true (default), completed/canceled issues carry no flags.
            When false, ``overdue`` is evaluated regardless of state, matching a
            listing whose input has already been filtered to open issues.
    """

    if skip_closed and issue.is_closed:
        return RiskFlags(overdue=False, stale=False, unassigned=False)
    return RiskFlags(
        overdue=is_overdue(issue, now),
        stale=is_stale_for_report(issue, now),
        unassigned=not issue.has_assignee,
    )


def classify_person_status(issues: Iterable[IssueSignal], now: datetime) -> PersonStatus:
    in_progress = [i for i in issues if i.is_started]
    if not in_progress:
        return "idle"
    if any(is_overdue(i, now) or is_stale_for_status(i, now) for i in in_progress):
        return "at-risk"
    return "on-track"


def summarize_member(issues: Iterable[IssueSignal], now: datetime) -> MemberSummary:
    issue_list = list(issues)
    started = [i for i in issue_list if i.is_started]
    return MemberSummary(
        in_progress_issues=len(started),
        status=classify_person_status(issue_list, now),
        top_issue=started[0].title if started else None,
    )


def _short_date(value: datetime) -> str:
    return f"{value:%b} {value.day}"


def _generated_at(now: datetime) -> str:
    hour = now.hour % 12 or 12
    return f"{_short_date(now)}, {hour}:{now:%M} {now:%p}"


def build_risk_report(team_name: str, issues: Iterable[IssueSignal], now: datetime) -> RiskReport:
    """Bucket open issues into overdue / stale / unassigned sections.

    ``issues`` is expected to contain open issues only. One issue may land in
    several buckets. Section order is fixed and empty sections are omitted.
    """

    overdue: list[RiskItem] = []
    stale: list[RiskItem] = []
    unassigned: list[RiskItem] = []

    for issue in issues:
        flags = classify_issue_risk(issue, now, skip_closed=False)
        days = days_since_update(issue, now)

        if flags.overdue and issue.due_date is not None:
            overdue.append(
                RiskItem(
                    identifier=issue.identifier,
                    title=issue.title,
                    assignee=issue.assignee_name,
                    reason=f"Due {_short_date(issue.due_date)}",
                    daysSinceUpdate=days,
                    url=issue.url,
                )
            )
        if flags.stale:
            stale.append(
                RiskItem(
                    identifier=issue.identifier,
                    title=issue.title,
                    assignee=issue.assignee_name,
                    reason=f"No updates in {days} days",
                    daysSinceUpdate=days,
                    url=issue.url,
                )
            )
        if flags.unassigned:
            unassigned.append(
                RiskItem(
                    identifier=issue.identifier,
                    title=issue.title,
                    reason="No assignee",
                    url=issue.url,
                )
            )

    sections: list[RiskSection] = []
    if overdue:
        sections.append(RiskSection(category="overdue", severity="high", items=overdue))
    if stale:
        sections.append(RiskSection(category="stale", severity="medium", items=stale))
    if unassigned:
        sections.append(RiskSection(category="unassigned", severity="medium", items=unassigned))

    return RiskReport(
        teamName=team_name,
        generatedAt=_generated_at(now),
        sections=sections,
        totalRisks=len(overdue) + len(stale) + len(unassigned),
    )


def classify_cycle_item(issue: IssueSignal, now: datetime) -> CycleItem:
    status: CycleItemStatus = "not-started"
    if issue.state_type == COMPLETED:
        status = "done"
    elif issue.is_started:
        status = "in-progress"

    at_risk = status != "done" and (is_overdue(issue, now) or is_stale_for_status(issue, now))
    return CycleItem(
        identifier=issue.identifier,
        title=issue.title,
        status=status,
        assignee=issue.assignee_name or None,
        isAtRisk=at_risk or None,
        url=issue.url,
    )


def build_cycle_summary(
    *,
    cycle_id: str,
    name: str | None,
    number: int | None,
    starts_at: datetime,
    ends_at: datetime,
    issues: Iterable[IssueSignal],
    now: datetime,
) -> CycleSummary:
    items = [classify_cycle_item(issue, now) for issue in issues]
    return CycleSummary(
        cycleId=cycle_id,
        cycleName=name or f"Cycle {number}",
        dateRange=f"{_short_date(starts_at)} – {_short_date(ends_at)}",
        totalItems=len(items),
        completedItems=len([i for i in items if i.status == "done"]),
        items=items,
    )
