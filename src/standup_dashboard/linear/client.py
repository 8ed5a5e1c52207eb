"""Minimal Linear GraphQL client."""

from __future__ import annotations

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)

LINEAR_API_URL = "https://api.linear.app/graphql"


class LinearApiError(Exception):
    """Raised when a Linear request fails or returns GraphQL errors."""


class LinearClient:
    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = LINEAR_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise LinearApiError("Linear API key not provided")
        self._api_url = api_url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {"Content-Type": "application/json", "Authorization": api_key}
        )

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        resp = self._session.post(
            self._api_url,
            json={"query": query, "variables": variables},
            timeout=self._timeout,
        )
        if not resp.ok:
            raise LinearApiError(f"Linear API error {resp.status_code}: {resp.text}")

        payload = resp.json()
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            first = errors[0] if isinstance(errors[0], dict) else {}
            raise LinearApiError(str(first.get("message") or "Linear API returned an error"))

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise LinearApiError("Linear API returned no data")
        return data

    def close(self) -> None:
        self._session.close()
