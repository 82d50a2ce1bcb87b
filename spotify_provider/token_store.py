import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

DEFAULT_STORE_PATH = os.path.join("data", "spotify_store.json")

TOKEN_KEY = "token"
CODE_VERIFIER_KEY = "codeVerifier"


class TokenStore(ABC):
    """Async get/set-by-key persistence that outlives a browser redirect."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    async def set_item(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._items: Dict[str, Any] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[Any]:
        return self._items.get(key)

    async def set_item(self, key: str, value: Any) -> None:
        self._items[key] = value


class JsonFileTokenStore(TokenStore):
    """All keys live in one JSON object on disk; writes replace the file atomically.

    Read/write failures propagate to the caller.
    """

    def __init__(self, path: str = DEFAULT_STORE_PATH):
        self.path = path

    async def get_item(self, key: str) -> Optional[Any]:
        items = await asyncio.to_thread(self._read_all)
        return items.get(key)

    async def set_item(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    def _set_sync(self, key: str, value: Any) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}

        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise RuntimeError(f"Token store file {self.path} is invalid; expected a JSON object.")
        return raw

    def _write_all(self, items: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=f"{os.path.basename(self.path)}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
