"""FastAPI internal API layer for the standup dashboard.

Design intent:
- Keep business logic in `standup_dashboard.risk`, `.linear` and `.github`
- Keep server-specific concerns (routing, CORS, error rendering) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from standup_dashboard.server.app import create_app
