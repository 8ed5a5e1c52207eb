"""Risk and status derivation."""

from __future__ import annotations

__all__ = [
    "IssueSignal",
    "RiskFlags",
    "build_risk_report",
    "classify_issue_risk",
    "classify_person_status",
]

from standup_dashboard.risk.engine import (
    build_risk_report,
    classify_issue_risk,
    classify_person_status,
)
from standup_dashboard.risk.models import IssueSignal, RiskFlags
