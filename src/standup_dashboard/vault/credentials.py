"""Encrypted, per-user credential persistence.

Every field is its own encrypted record stored under ``"<field-name>::<userId>"`` so
that several users can share one storage file without collisions or leakage, and so
that reading one field never requires decrypting another.

Structured fields (selected team, member filter) are JSON inside the ciphertext.
Clearing them removes the storage key entirely; an absent key reads back as
``None`` ("nothing selected" / "no filter").
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from standup_dashboard.vault.crypto import CryptoVault
from standup_dashboard.vault.storage import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

GITHUB_TOKEN_FIELD = "user-github-token"
LINEAR_API_KEY_FIELD = "user-linear-api-key"
GITHUB_ORG_FIELD = "user-github-org"
SELECTED_TEAM_FIELD = "user-selected-team"
FILTERED_MEMBERS_FIELD = "user-filtered-members"


class SelectedTeam(BaseModel):
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Decoded(Generic[T]):
    """Outcome of decoding a structured vault value."""

    ok: bool
    value: T | None = None
    error: str | None = None


_SELECTED_TEAM = TypeAdapter(SelectedTeam)
_MEMBER_IDS = TypeAdapter(list[str])


def decode_json(text: str, adapter: TypeAdapter[T]) -> Decoded[T]:
    if not text:
        return Decoded(ok=False, error="empty")
    try:
        return Decoded(ok=True, value=adapter.validate_json(text))
    except ValidationError as e:
        return Decoded(ok=False, error=f"{e.error_count()} validation error(s)")


def storage_key(field: str, user_id: str) -> str:
    return f"{field}::{user_id}"


class CredentialStore:
    """Async accessors for the credential record of the vault's user."""

    def __init__(self, *, vault: CryptoVault, storage: KeyValueStorage) -> None:
        self._vault = vault
        self._storage = storage

    async def _key(self, field: str) -> str:
        await self._vault.wait_ready()
        user_id = self._vault.user_id
        if user_id is None:
            raise RuntimeError("vault signalled readiness without a user id")
        return storage_key(field, user_id)

    async def _read(self, field: str) -> str:
        key = await self._key(field)
        return self._vault.decrypt(self._storage.get(key) or "")

    async def _write(self, field: str, plaintext: str) -> None:
        key = await self._key(field)
        self._storage.set(key, self._vault.encrypt(plaintext))

    async def _remove(self, field: str) -> None:
        key = await self._key(field)
        self._storage.remove(key)

    async def _read_structured(self, field: str, adapter: TypeAdapter[T]) -> T | None:
        decoded = decode_json(await self._read(field), adapter)
        if not decoded.ok:
            if decoded.error != "empty":
                logger.warning(
                    "Discarding unreadable credential field",
                    extra={"field": field, "reason": decoded.error},
                )
            return None
        return decoded.value

    async def get_github_token(self) -> str:
        return await self._read(GITHUB_TOKEN_FIELD)

    async def set_github_token(self, value: str) -> None:
        await self._write(GITHUB_TOKEN_FIELD, value)

    async def get_linear_api_key(self) -> str:
        return await self._read(LINEAR_API_KEY_FIELD)

    async def set_linear_api_key(self, value: str) -> None:
        await self._write(LINEAR_API_KEY_FIELD, value)

    async def get_github_org(self) -> str:
        return await self._read(GITHUB_ORG_FIELD)

    async def set_github_org(self, value: str) -> None:
        await self._write(GITHUB_ORG_FIELD, value)

    async def get_selected_team(self) -> SelectedTeam | None:
        return await self._read_structured(SELECTED_TEAM_FIELD, _SELECTED_TEAM)

    async def set_selected_team(self, team: SelectedTeam | None) -> None:
        if team is None:
            await self._remove(SELECTED_TEAM_FIELD)
            return
        await self._write(SELECTED_TEAM_FIELD, team.model_dump_json())

    async def get_filtered_members(self) -> list[str] | None:
        return await self._read_structured(FILTERED_MEMBERS_FIELD, _MEMBER_IDS)

    async def set_filtered_members(self, member_ids: list[str] | None) -> None:
        if member_ids is None:
            await self._remove(FILTERED_MEMBERS_FIELD)
            return
        await self._write(FILTERED_MEMBERS_FIELD, _MEMBER_IDS.dump_json(member_ids).decode())
