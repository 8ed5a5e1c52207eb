"""Per-user key derivation and authenticated encryption of small strings.

Security model:
- AES-256-GCM for authenticated encryption
- PBKDF2-HMAC-SHA256 (100,000 iterations) derives the key from the user id and a
  fixed application-wide salt
- the key is only ever held in memory; storage sees `<iv-b64>:<ciphertext-b64>`

Failure policy is fail-closed: a missing key, a malformed record, a wrong key or a
tampered tag all produce an empty string instead of an exception, so corrupted
local storage degrades to "not configured".
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

KDF_SALT = b"standup-dashboard-token-salt"
KDF_ITERATIONS = 100_000
KEY_SIZE = 32
NONCE_SIZE = 12
RECORD_DELIMITER = ":"


class VaultError(Exception):
    """Base class for vault usage errors."""


class VaultAlreadyInitialized(VaultError):
    """Raised when a vault bound to one user is re-initialized for another."""


def derive_key(user_id: str) -> bytes:
    """Derive the 256-bit vault key for ``user_id``. Deterministic per user."""

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=KDF_SALT,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(user_id.encode("utf-8"))


class ReadinessSignal:
    """One-shot barrier: resolves once, releases every current and future waiter."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    def fire(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        if self._event.is_set():
            return
        await self._event.wait()


class CryptoVault:
    """Holds the derived key for one user session."""

    def __init__(self) -> None:
        self._user_id: str | None = None
        self._key: bytes | None = None
        self._ready = ReadinessSignal()

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set

    async def initialize(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id is required")
        if self._user_id is not None:
            if self._user_id == user_id:
                return
            raise VaultAlreadyInitialized(
                "Vault is already bound to another user; open a new session instead"
            )

        # PBKDF2 is deliberately slow; keep it off the event loop.
        key = await asyncio.to_thread(derive_key, user_id)
        if self._user_id is not None:
            # Lost a race with a concurrent initialize() call.
            if self._user_id != user_id:
                raise VaultAlreadyInitialized(
                    "Vault is already bound to another user; open a new session instead"
                )
            return

        self._user_id = user_id
        self._key = key
        logger.debug("Vault key derived")
        self._ready.fire()

    async def wait_ready(self) -> None:
        await self._ready.wait()

    def encrypt(self, plaintext: str) -> str:
        if self._key is None:
            return ""
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(self._key).encrypt(nonce, plaintext.encode("utf-8"), None)
        iv_b64 = base64.b64encode(nonce).decode("ascii")
        ct_b64 = base64.b64encode(ciphertext).decode("ascii")
        return f"{iv_b64}{RECORD_DELIMITER}{ct_b64}"

    def decrypt(self, record: str) -> str:
        if self._key is None or not record:
            return ""

        iv_b64, sep, ct_b64 = record.partition(RECORD_DELIMITER)
        if not sep or not iv_b64 or not ct_b64:
            return ""

        try:
            nonce = base64.b64decode(iv_b64, validate=True)
            ciphertext = base64.b64decode(ct_b64, validate=True)
            plaintext = AESGCM(self._key).decrypt(nonce, ciphertext, None)
            return plaintext.decode("utf-8")
        except (binascii.Error, ValueError, InvalidTag):
            # Corrupted record or wrong key.
            logger.debug("Discarding undecryptable vault record")
            return ""
