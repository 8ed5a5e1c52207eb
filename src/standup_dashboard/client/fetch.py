"""Latest-wins loading of API resources.

A :class:`JsonResource` backs one piece of view state (a roster, a risk report). When
its inputs change a new load starts; responses from superseded loads are dropped
instead of overwriting newer state. The network call itself is not cancelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from standup_dashboard.client.api import DashboardApiClient, DashboardApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestRequestGuard:
    """Generation counter; only the most recent generation may commit."""

    def __init__(self) -> None:
        self._generation = 0

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def cancel(self) -> None:
        self._generation += 1

    def is_current(self, generation: int) -> bool:
        return generation == self._generation


@dataclass
class FetchResult(Generic[T]):
    data: T | None = None
    error: str | None = None


class JsonResource:
    def __init__(self, client: DashboardApiClient) -> None:
        self._client = client
        self._guard = LatestRequestGuard()
        self.result: FetchResult[Any] = FetchResult()

    def cancel(self) -> None:
        """Drop whatever load is in flight (e.g. the view moved on)."""

        self._guard.cancel()

    async def load(
        self, path: str | None, params: dict[str, Any] | None = None
    ) -> FetchResult[Any]:
        """Fetch ``path`` and commit the outcome if no newer load started meanwhile.

        A ``None`` path skips the fetch and leaves the current state untouched.
        """

        if path is None:
            return self.result

        generation = self._guard.begin()
        self.result = FetchResult()

        try:
            data = await self._client.get_json(path, params)
        except DashboardApiError as e:
            if self._guard.is_current(generation):
                self.result = FetchResult(error=e.message)
            return self.result

        if not self._guard.is_current(generation):
            logger.debug("Dropping stale response", extra={"path": path})
            return self.result

        self.result = FetchResult(data=data)
        return self.result
