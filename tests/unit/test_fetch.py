"""Unit tests for the API consumer and latest-wins resource loading."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from standup_dashboard.client.api import DashboardApiClient, DashboardApiError
from standup_dashboard.client.fetch import JsonResource, LatestRequestGuard


class ControlledClient:
    """Stand-in API client whose responses are resolved by the test."""

    def __init__(self) -> None:
        self.pending: list[asyncio.Future[Any]] = []

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


def _response(*, ok: bool = True, status_code: int = 200, payload: Any = None) -> Mock:
    resp = Mock(ok=ok, status_code=status_code)
    resp.json.return_value = payload
    return resp


def _api(open_session, session: Mock) -> DashboardApiClient:
    vault_session = open_session("alice")
    asyncio.run(vault_session.credentials.set_linear_api_key("lin_key"))
    return DashboardApiClient(
        headers=vault_session.headers, base_url="http://localhost:8000/", session=session
    )


def test_guard_only_latest_generation_is_current() -> None:
    guard = LatestRequestGuard()

    first = guard.begin()
    second = guard.begin()

    assert not guard.is_current(first)
    assert guard.is_current(second)
    guard.cancel()
    assert not guard.is_current(second)


def test_stale_response_is_dropped() -> None:
    async def scenario() -> JsonResource:
        client = ControlledClient()
        resource = JsonResource(client)  # type: ignore[arg-type]

        old = asyncio.create_task(resource.load("/api/linear/team", {"id": "t1"}))
        await asyncio.sleep(0)
        new = asyncio.create_task(resource.load("/api/linear/team", {"id": "t2"}))
        await asyncio.sleep(0)

        client.pending[1].set_result({"teamName": "Growth"})
        await new
        client.pending[0].set_result({"teamName": "Core"})
        await old
        return resource

    resource = asyncio.run(scenario())

    assert resource.result.data == {"teamName": "Growth"}
    assert resource.result.error is None


def test_cancelled_load_does_not_commit() -> None:
    async def scenario() -> JsonResource:
        client = ControlledClient()
        resource = JsonResource(client)  # type: ignore[arg-type]

        task = asyncio.create_task(resource.load("/api/linear/risks"))
        await asyncio.sleep(0)
        resource.cancel()
        client.pending[0].set_result({"totalRisks": 1})
        await task
        return resource

    resource = asyncio.run(scenario())

    assert resource.result.data is None


def test_errors_are_committed_as_state() -> None:
    async def scenario() -> JsonResource:
        client = ControlledClient()
        resource = JsonResource(client)  # type: ignore[arg-type]

        task = asyncio.create_task(resource.load("/api/linear/risks"))
        await asyncio.sleep(0)
        client.pending[0].set_exception(DashboardApiError("teamId is required", 400))
        await task
        return resource

    resource = asyncio.run(scenario())

    assert resource.result.data is None
    assert resource.result.error == "teamId is required"


def test_missing_path_skips_fetch() -> None:
    resource = JsonResource(ControlledClient())  # type: ignore[arg-type]

    result = asyncio.run(resource.load(None))

    assert result.data is None
    assert result.error is None


def test_get_json_injects_headers_and_drops_empty_params(open_session) -> None:
    session = Mock()
    session.get.return_value = _response(payload=[{"id": "t1", "name": "Core", "key": "ENG"}])
    api = _api(open_session, session)

    teams = asyncio.run(api.list_teams())

    assert [t.name for t in teams] == ["Core"]
    args, kwargs = session.get.call_args
    assert args == ("http://localhost:8000/api/linear/team",)
    assert kwargs["headers"] == {"x-linear-api-key": "lin_key"}
    assert kwargs["params"] == {}

    session.get.return_value = _response(
        payload={
            "cycleId": "c1",
            "cycleName": "Cycle 1",
            "dateRange": "Mar 3 – Mar 17",
            "totalItems": 0,
            "completedItems": 0,
            "items": [],
        }
    )
    asyncio.run(api.fetch_cycle(team_id="t1"))
    assert session.get.call_args.kwargs["params"] == {"teamId": "t1"}


def test_get_json_surfaces_error_payloads(open_session) -> None:
    session = Mock()
    session.get.return_value = _response(
        ok=False, status_code=401, payload={"error": "Linear API key not provided"}
    )
    api = _api(open_session, session)

    with pytest.raises(DashboardApiError) as exc_info:
        asyncio.run(api.fetch_risk_report("t1"))

    assert exc_info.value.message == "Linear API key not provided"
    assert exc_info.value.status_code == 401


def test_get_json_wraps_transport_and_decode_failures(open_session) -> None:
    session = Mock()
    session.get.side_effect = requests.ConnectionError("refused")
    api = _api(open_session, session)

    with pytest.raises(DashboardApiError, match="Request failed"):
        asyncio.run(api.get_json("/api/health"))

    bad = _response(status_code=502)
    bad.json.side_effect = ValueError("not json")
    session.get.side_effect = None
    session.get.return_value = bad

    with pytest.raises(DashboardApiError, match="Malformed JSON"):
        asyncio.run(api.get_json("/api/health"))
