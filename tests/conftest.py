"""Test configuration and fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from standup_dashboard.vault.session import VaultSession
from standup_dashboard.vault.storage import MemoryStorage


@pytest.fixture
def storage() -> MemoryStorage:
    """Provide an empty in-memory key-value store."""
    return MemoryStorage()


@pytest.fixture
def now() -> datetime:
    """A fixed reference time for risk classification."""
    return datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def open_session(storage: MemoryStorage) -> Callable[[str], VaultSession]:
    """Return a factory for vault sessions signed in against the shared storage."""

    def factory(user_id: str) -> VaultSession:
        session = VaultSession(storage=storage)
        asyncio.run(session.sign_in(user_id))
        return session

    return factory
