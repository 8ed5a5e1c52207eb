"""Encrypted local credential vault."""

from __future__ import annotations

__all__ = [
    "CredentialStore",
    "CryptoVault",
    "HeaderInjector",
    "JsonFileStorage",
    "MemoryStorage",
    "SelectedTeam",
    "VaultSession",
]

from standup_dashboard.vault.credentials import CredentialStore, SelectedTeam
from standup_dashboard.vault.crypto import CryptoVault
from standup_dashboard.vault.headers import HeaderInjector
from standup_dashboard.vault.session import VaultSession
from standup_dashboard.vault.storage import JsonFileStorage, MemoryStorage
