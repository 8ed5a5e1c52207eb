"""Linear access for the dashboard."""

from __future__ import annotations

__all__ = ["LinearApiError", "LinearClient", "LinearDashboardService"]

from standup_dashboard.linear.client import LinearApiError, LinearClient
from standup_dashboard.linear.service import LinearDashboardService
