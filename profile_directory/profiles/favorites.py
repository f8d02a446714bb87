"""Favorites kept in a local key/value storage, independent of the store."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

import orjson

from profile_directory.config import Settings
from profile_directory.errors import FavoritesStorageError

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """String key/value storage with browser ``localStorage`` semantics."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Forget ``key``; absent keys are ignored."""


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """Storage persisted as a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise FavoritesStorageError(f"Cannot read {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise FavoritesStorageError(f"Corrupt storage file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise FavoritesStorageError(f"Corrupt storage file {self.path}: expected an object")
        return {str(key): str(value) for key, value in data.items()}

    def _write_all(self, items: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(orjson.dumps(items))
        except OSError as exc:
            raise FavoritesStorageError(f"Cannot write {self.path}: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)


class FavoritesRepository:
    """Read-parse-modify-write access to the favorite profile ids."""

    def __init__(self, storage: KeyValueStorage, key: str = "favoriteProfiles") -> None:
        self.storage = storage
        self.key = key

    @classmethod
    def from_settings(cls, settings: Settings) -> "FavoritesRepository":
        if settings.favorites_storage_path is not None:
            storage: KeyValueStorage = JsonFileStorage(settings.favorites_storage_path)
        else:
            storage = MemoryStorage()
        return cls(storage, settings.favorites_storage_key)

    def ids(self) -> List[int]:
        """Favorite ids in insertion order; stale ids are kept."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise FavoritesStorageError(f"Favorites under {self.key!r} are not JSON") from exc
        if not isinstance(data, list):
            raise FavoritesStorageError(f"Favorites under {self.key!r} are not a list")

        ids: List[int] = []
        for item in data:
            # bool is an int subclass
            if isinstance(item, int) and not isinstance(item, bool):
                ids.append(item)
            else:
                logger.warning(f"Ignoring non-integer favorite entry: {item!r}")
        return ids

    def contains(self, profile_id: int) -> bool:
        return profile_id in self.ids()

    def toggle(self, profile_id: int) -> bool:
        """Add or remove ``profile_id``; returns True when it is now a favorite."""
        ids = self.ids()
        if profile_id in ids:
            ids = [item for item in ids if item != profile_id]
            is_favorite = False
        else:
            ids.append(profile_id)
            is_favorite = True
        self.storage.set_item(self.key, orjson.dumps(ids).decode())
        logger.debug(f"Favorite {profile_id} -> {is_favorite}")
        return is_favorite
