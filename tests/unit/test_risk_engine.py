"""Unit tests for issue risk flags, person status and report assembly."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from standup_dashboard.risk.engine import (
    build_cycle_summary,
    build_risk_report,
    classify_cycle_item,
    classify_issue_risk,
    classify_person_status,
    days_since_update,
    is_stale_for_report,
    is_stale_for_status,
    parse_timestamp,
    summarize_member,
)
from standup_dashboard.risk.models import IssueSignal

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def _issue(
    identifier: str = "ENG-1",
    *,
    state: str = "started",
    updated_days: float = 0.0,
    due: datetime | None = None,
    assignee: str | None = "Ann",
    title: str | None = None,
) -> IssueSignal:
    return IssueSignal(
        identifier=identifier,
        title=title or f"Issue {identifier}",
        url=f"https://linear.app/acme/issue/{identifier}",
        updated_at=NOW - timedelta(days=updated_days),
        state_type=state,
        due_date=due,
        assignee_name=assignee,
    )


def test_parse_timestamp_accepts_dates_and_datetimes() -> None:
    assert parse_timestamp("2025-03-09") == datetime(2025, 3, 9, tzinfo=UTC)
    assert parse_timestamp("2025-03-09T10:30:00.000Z") == datetime(
        2025, 3, 9, 10, 30, tzinfo=UTC
    )
    assert parse_timestamp("2025-03-09T10:30:00") == datetime(2025, 3, 9, 10, 30, tzinfo=UTC)


def test_days_since_update_floors() -> None:
    assert days_since_update(_issue(updated_days=3.9), NOW) == 3
    assert days_since_update(_issue(updated_days=0.2), NOW) == 0


@pytest.mark.parametrize(
    ("updated_days", "report_stale", "status_stale"),
    [
        (2.9, False, False),
        (3.0, True, False),
        (3.5, True, True),
        (10.0, True, True),
    ],
)
def test_stale_thresholds(updated_days: float, report_stale: bool, status_stale: bool) -> None:
    issue = _issue(updated_days=updated_days)

    assert is_stale_for_report(issue, NOW) is report_stale
    assert is_stale_for_status(issue, NOW) is status_stale


def test_only_started_issues_go_stale() -> None:
    issue = _issue(state="unstarted", updated_days=30)

    assert is_stale_for_report(issue, NOW) is False
    assert is_stale_for_status(issue, NOW) is False


def test_issue_flags_are_independent() -> None:
    issue = _issue(updated_days=5, due=NOW - timedelta(days=1), assignee=None)

    flags = classify_issue_risk(issue, NOW)

    assert (flags.overdue, flags.stale, flags.unassigned) == (True, True, True)
    assert flags.any


def test_due_in_future_is_not_overdue() -> None:
    flags = classify_issue_risk(_issue(due=NOW + timedelta(hours=1)), NOW)

    assert flags.overdue is False
    assert flags.any is False


def test_closed_issues_carry_no_flags_unless_asked() -> None:
    done = _issue(state="completed", due=NOW - timedelta(days=2), assignee=None)

    assert classify_issue_risk(done, NOW).any is False
    assert classify_issue_risk(done, NOW, skip_closed=False).overdue is True


def test_person_is_idle_without_started_work() -> None:
    issues = [_issue(state="unstarted", due=NOW - timedelta(days=5))]

    assert classify_person_status(issues, NOW) == "idle"
    assert classify_person_status([], NOW) == "idle"


@pytest.mark.parametrize(
    ("issues", "expected"),
    [
        ([_issue(updated_days=1)], "on-track"),
        ([_issue(updated_days=3.0)], "on-track"),
        ([_issue(updated_days=1), _issue("ENG-2", updated_days=3.5)], "at-risk"),
        ([_issue(updated_days=0, due=NOW - timedelta(days=1))], "at-risk"),
        (
            [_issue(updated_days=0), _issue("ENG-2", state="unstarted", updated_days=40)],
            "on-track",
        ),
    ],
)
def test_person_status(issues: list[IssueSignal], expected: str) -> None:
    assert classify_person_status(issues, NOW) == expected


def test_summarize_member_uses_first_started_issue() -> None:
    summary = summarize_member(
        [
            _issue("ENG-1", state="unstarted", title="Later"),
            _issue("ENG-2", title="Auth refactor"),
            _issue("ENG-3", title="Billing"),
        ],
        NOW,
    )

    assert summary.in_progress_issues == 2
    assert summary.status == "on-track"
    assert summary.top_issue == "Auth refactor"


def test_risk_report_buckets_in_fixed_order() -> None:
    issues = [
        _issue("ENG-1", updated_days=5, due=datetime(2025, 3, 9, tzinfo=UTC), assignee=None),
        _issue("ENG-2", state="unstarted", assignee=None),
        _issue("ENG-3", updated_days=1),
    ]

    report = build_risk_report("Core", issues, NOW)

    assert report.teamName == "Core"
    assert report.generatedAt == "Mar 10, 12:00 PM"
    assert [s.category for s in report.sections] == ["overdue", "stale", "unassigned"]
    assert [s.severity for s in report.sections] == ["high", "medium", "medium"]

    overdue, stale, unassigned = report.sections
    assert [i.identifier for i in overdue.items] == ["ENG-1"]
    assert overdue.items[0].reason == "Due Mar 9"
    assert overdue.items[0].daysSinceUpdate == 5
    assert stale.items[0].reason == "No updates in 5 days"
    assert [i.identifier for i in unassigned.items] == ["ENG-1", "ENG-2"]
    assert unassigned.items[0].reason == "No assignee"
    assert unassigned.items[0].daysSinceUpdate is None
    assert report.totalRisks == 4


def test_risk_report_omits_empty_sections() -> None:
    report = build_risk_report("Core", [_issue(updated_days=3.2)], NOW)

    assert [s.category for s in report.sections] == ["stale"]
    assert report.sections[0].items[0].reason == "No updates in 3 days"
    assert build_risk_report("Core", [], NOW).sections == []


def test_cycle_items() -> None:
    done = classify_cycle_item(_issue(state="completed", due=NOW - timedelta(days=3)), NOW)
    stale = classify_cycle_item(_issue(updated_days=4), NOW)
    fresh = classify_cycle_item(_issue(state="unstarted", assignee=None), NOW)

    assert (done.status, done.isAtRisk) == ("done", None)
    assert (stale.status, stale.isAtRisk) == ("in-progress", True)
    assert (fresh.status, fresh.isAtRisk, fresh.assignee) == ("not-started", None, None)


def test_cycle_summary() -> None:
    summary = build_cycle_summary(
        cycle_id="c1",
        name=None,
        number=7,
        starts_at=datetime(2025, 3, 3, tzinfo=UTC),
        ends_at=datetime(2025, 3, 17, tzinfo=UTC),
        issues=[_issue(state="completed"), _issue("ENG-2")],
        now=NOW,
    )

    assert summary.cycleName == "Cycle 7"
    assert summary.dateRange == "Mar 3 – Mar 17"
    assert (summary.totalItems, summary.completedItems) == (2, 1)
