"""Local key-value storage backends for encrypted credential records.

These play the role browser localStorage plays for a web dashboard: a flat,
string-to-string, per-machine store. Values written here are already encrypted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def __contains__(self, key: object) -> bool: ...


class MemoryStorage:
    """In-process storage (tests, ephemeral sessions)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """JSON-object file backed storage.

    The whole file is re-read on every access so that several processes (CLI
    invocations, a long-running consumer) observe each other's writes. An
    unreadable file reads as empty; before the next write replaces it, the old
    content is moved aside to ``<name>.corrupt``.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def quarantine_path(self) -> Path:
        return self._path.with_name(self._path.name + ".corrupt")

    def _read(self) -> dict[str, str] | None:
        """Current items, or ``None`` when the file exists but cannot be used."""

        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning(
                "Local storage file is unreadable; treating as empty",
                extra={"path": str(self._path)},
                exc_info=True,
            )
            return None
        if not isinstance(raw, dict):
            logger.warning(
                "Local storage file is not a JSON object; treating as empty",
                extra={"path": str(self._path)},
            )
            return None
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _load(self) -> dict[str, str]:
        return self._read() or {}

    def _load_for_write(self) -> dict[str, str]:
        items = self._read()
        if items is None:
            logger.warning(
                "Moving unreadable local storage file aside before writing",
                extra={"path": str(self._path), "moved_to": str(self.quarantine_path)},
            )
            self._path.replace(self.quarantine_path)
            return {}
        return items

    def _save(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(items, indent=2, sort_keys=True, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        items = self._load_for_write()
        items[key] = value
        self._save(items)

    def remove(self, key: str) -> None:
        items = self._load_for_write()
        if key in items:
            del items[key]
            self._save(items)

    def __contains__(self, key: object) -> bool:
        return key in self._load()
