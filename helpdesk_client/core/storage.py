"""File-backed key/value store playing the role of browser local storage."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from helpdesk_client.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
SIDEBAR_PINNED_KEY = "sidebar:pinned"


class LocalStorage:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings.storage_path

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable local storage %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, key: str, default: str | None = None) -> str | None:
        value = self._read().get(key)
        return default if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class MemoryStorage(LocalStorage):
    """In-process storage for tests and one-shot scripts."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.path = Path("<memory>")
        self._data: dict[str, Any] = dict(initial or {})

    def _read(self) -> dict[str, Any]:
        return dict(self._data)

    def _write(self, data: dict[str, Any]) -> None:
        self._data = dict(data)
