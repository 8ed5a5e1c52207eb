"""Session-scoped wiring of the vault components.

A :class:`VaultSession` is created by whatever owns the user's session (the CLI, a
test, a long-running consumer) and handed to everything that needs credentials.
Nothing in the vault is process-global.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from standup_dashboard.vault.credentials import CredentialStore
from standup_dashboard.vault.crypto import CryptoVault
from standup_dashboard.vault.headers import HeaderInjector
from standup_dashboard.vault.storage import KeyValueStorage

ANONYMOUS_USER_KEY = "standup-anonymous-user-key"


def anonymous_user_key(storage: KeyValueStorage) -> str:
    """Return a stable anonymous user id, creating and persisting one if needed."""

    stored = storage.get(ANONYMOUS_USER_KEY)
    if stored:
        return stored
    key = f"anon-{uuid.uuid4()}"
    storage.set(ANONYMOUS_USER_KEY, key)
    return key


@dataclass
class VaultSession:
    storage: KeyValueStorage
    vault: CryptoVault = field(default_factory=CryptoVault)
    credentials: CredentialStore = field(init=False)
    headers: HeaderInjector = field(init=False)

    def __post_init__(self) -> None:
        self.credentials = CredentialStore(vault=self.vault, storage=self.storage)
        self.headers = HeaderInjector(self.credentials)

    async def sign_in(self, user_id: str) -> None:
        await self.vault.initialize(user_id)
