"""Consumers of the internal API layer."""

from __future__ import annotations

__all__ = ["DashboardApiClient", "DashboardApiError", "JsonResource", "LatestRequestGuard"]

from standup_dashboard.client.api import DashboardApiClient, DashboardApiError
from standup_dashboard.client.fetch import JsonResource, LatestRequestGuard
