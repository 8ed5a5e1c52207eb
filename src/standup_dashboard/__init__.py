"""Standup Dashboard.

Answers "how is the team doing?" from Linear and GitHub data:
- an encrypted, per-user local credential vault
- header injection for every outbound API call
- deterministic risk/status derivation for issues and people
"""

__version__ = "0.1.0"

from standup_dashboard.config import DashboardSettings

__all__ = ["__version__", "DashboardSettings"]
