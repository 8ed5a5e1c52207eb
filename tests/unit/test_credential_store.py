"""Unit tests for namespaced credential storage and header injection."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from standup_dashboard.vault.credentials import (
    FILTERED_MEMBERS_FIELD,
    GITHUB_TOKEN_FIELD,
    SELECTED_TEAM_FIELD,
    SelectedTeam,
    storage_key,
)
from standup_dashboard.vault.headers import (
    GITHUB_ORG_HEADER,
    GITHUB_TOKEN_HEADER,
    LINEAR_API_KEY_HEADER,
)
from standup_dashboard.vault.session import (
    ANONYMOUS_USER_KEY,
    VaultSession,
    anonymous_user_key,
)
from standup_dashboard.vault.storage import JsonFileStorage, MemoryStorage


def test_fields_are_stored_encrypted_under_user_namespace(storage, open_session) -> None:
    session = open_session("alice")

    asyncio.run(session.credentials.set_github_token("ghp_alice"))

    key = storage_key(GITHUB_TOKEN_FIELD, "alice")
    assert key == "user-github-token::alice"
    assert key in storage
    assert "ghp_alice" not in storage.get(key)
    assert asyncio.run(session.credentials.get_github_token()) == "ghp_alice"


def test_users_sharing_storage_are_isolated(storage, open_session) -> None:
    alice = open_session("alice")
    bob = open_session("bob")

    asyncio.run(alice.credentials.set_linear_api_key("lin_alice"))

    assert asyncio.run(bob.credentials.get_linear_api_key()) == ""
    # Even a record copied into bob's namespace stays unreadable to him.
    storage.set(
        "user-linear-api-key::bob", storage.get("user-linear-api-key::alice") or ""
    )
    assert asyncio.run(bob.credentials.get_linear_api_key()) == ""
    assert asyncio.run(alice.credentials.get_linear_api_key()) == "lin_alice"


def test_clearing_structured_fields_removes_the_key(storage, open_session) -> None:
    session = open_session("alice")
    credentials = session.credentials

    asyncio.run(credentials.set_selected_team(SelectedTeam(id="t1", name="Core")))
    asyncio.run(credentials.set_filtered_members(["u1", "u2"]))

    assert asyncio.run(credentials.get_selected_team()) == SelectedTeam(id="t1", name="Core")
    assert asyncio.run(credentials.get_filtered_members()) == ["u1", "u2"]

    asyncio.run(credentials.set_selected_team(None))
    asyncio.run(credentials.set_filtered_members(None))

    assert storage_key(SELECTED_TEAM_FIELD, "alice") not in storage
    assert storage_key(FILTERED_MEMBERS_FIELD, "alice") not in storage
    assert asyncio.run(credentials.get_selected_team()) is None
    assert asyncio.run(credentials.get_filtered_members()) is None


def test_empty_member_filter_is_distinct_from_no_filter(open_session) -> None:
    credentials = open_session("alice").credentials

    asyncio.run(credentials.set_filtered_members([]))

    assert asyncio.run(credentials.get_filtered_members()) == []


def test_corrupted_structured_value_reads_as_absent(storage, open_session) -> None:
    session = open_session("alice")
    key = storage_key(SELECTED_TEAM_FIELD, "alice")

    storage.set(key, session.vault.encrypt("not json"))
    assert asyncio.run(session.credentials.get_selected_team()) is None

    storage.set(key, session.vault.encrypt('{"id": "t1"}'))
    assert asyncio.run(session.credentials.get_selected_team()) is None

    storage.set(key, "garbage-without-delimiter")
    assert asyncio.run(session.credentials.get_selected_team()) is None


def test_headers_only_include_configured_credentials(open_session) -> None:
    session = open_session("alice")

    assert asyncio.run(session.headers.get_token_headers()) == {}

    asyncio.run(session.credentials.set_linear_api_key("lin_key"))
    asyncio.run(session.credentials.set_github_org(""))

    headers = asyncio.run(session.headers.get_token_headers())
    assert headers == {LINEAR_API_KEY_HEADER: "lin_key"}

    asyncio.run(session.credentials.set_github_token("ghp_token"))
    asyncio.run(session.credentials.set_github_org("acme"))

    headers = asyncio.run(session.headers.get_token_headers())
    assert headers == {
        GITHUB_TOKEN_HEADER: "ghp_token",
        LINEAR_API_KEY_HEADER: "lin_key",
        GITHUB_ORG_HEADER: "acme",
    }


def test_reads_wait_for_vault_readiness(storage) -> None:
    async def scenario() -> dict[str, str]:
        session = VaultSession(storage=storage)
        pending = asyncio.create_task(session.headers.get_token_headers())
        await asyncio.sleep(0)
        assert not pending.done()

        await session.sign_in("alice")
        await session.credentials.set_github_token("ghp_late")
        return await asyncio.wait_for(pending, timeout=5)

    headers = asyncio.run(scenario())
    assert headers == {GITHUB_TOKEN_HEADER: "ghp_late"}


def test_anonymous_user_key_is_stable() -> None:
    storage = MemoryStorage()

    first = anonymous_user_key(storage)

    assert first.startswith("anon-")
    assert storage.get(ANONYMOUS_USER_KEY) == first
    assert anonymous_user_key(storage) == first


def test_json_file_storage_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "storage.json"
    JsonFileStorage(path).set("a", "1")

    reopened = JsonFileStorage(path)
    assert reopened.get("a") == "1"
    assert "a" in reopened
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}

    reopened.remove("a")
    assert reopened.get("a") is None
    reopened.remove("missing")


def test_json_file_storage_treats_invalid_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get("a") is None

    storage.set("a", "1")
    assert storage.get("a") == "1"
    assert path.with_name("storage.json.corrupt").read_text(encoding="utf-8") == "{not json"


@pytest.mark.parametrize(
    "content",
    [b"\xff\xfe{garbage", b'["not", "an", "object"]'],
)
def test_json_file_storage_survives_undecodable_file(tmp_path: Path, content: bytes) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(content)
    storage = JsonFileStorage(path)

    assert storage.get("a") is None
    assert "a" not in storage

    storage.set("a", "1")

    assert storage.get("a") == "1"
    assert storage.quarantine_path.read_bytes() == content


def test_credential_reads_survive_undecodable_storage_file(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(b"\xff\xfe{garbage")
    session = VaultSession(storage=JsonFileStorage(path))
    asyncio.run(session.sign_in("alice"))

    assert asyncio.run(session.credentials.get_github_token()) == ""
    assert asyncio.run(session.headers.get_token_headers()) == {}
