import json
import logging
import os
from typing import Any, Dict, Optional, Protocol

from conectajob.core.config import Settings
from conectajob.db.mongo import MongoStorage

logger = logging.getLogger(__name__)

KEY_PREFIX = "conectajob_"

STORAGE_KEYS = {
    "USERS": KEY_PREFIX + "users",
    "PROJECTS": KEY_PREFIX + "projects",
    "CATEGORIES": KEY_PREFIX + "categories",
    "CURRENT_USER": KEY_PREFIX + "current_user",
}


class Storage(Protocol):
    """
    Durable key-value store of JSON-compatible values.
    Whole collections are written under one key; there is no partial update.
    """

    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process store, mainly for tests. Values are copied through JSON on the way in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """
    Keeps every key in a single JSON document on disk.
    The file is rewritten in full on each save.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write_all(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def load(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def save(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def build_storage(settings: Settings) -> Storage:
    """Picks the storage backend named in the settings."""
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage; data will not survive a restart")
        return MemoryStorage()
    if settings.storage_backend == "json":
        logger.info("Using JSON file storage at %s", settings.storage_path)
        return JsonFileStorage(settings.storage_path)
    if settings.storage_backend == "mongo":
        logger.info("Using MongoDB storage, collection '%s'", settings.state_collection)
        return MongoStorage(collection_name=settings.state_collection)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
