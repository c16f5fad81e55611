"""
Key-value store abstraction for persisted registry state.

Supports an in-memory store (tests), a local JSON file (single device)
and Redis (optional shared backend).
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from vetblood.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract base class for string key-value backends.

    Values are opaque strings; callers own serialization. Backends raise
    StorageError on I/O failures and leave recovery to the caller.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Store key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Args:
            key: Store key
            value: String value to store
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            bool: True if the key existed
        """
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """List stored keys starting with prefix, sorted."""
        pass


class MemoryStore(KeyValueStore):
    """Process-local dictionary store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class LocalJSONStore(KeyValueStore):
    """JSON file-based store for a single device.

    The whole map is read and rewritten on every operation, mirroring the
    browser local storage the registry was designed around.
    """

    def __init__(self, path: str = "donor_data/store.json"):
        """
        Initialize local JSON storage.

        Args:
            path: Location of the JSON file holding every key
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read store file {self.path}: {e}", details={"path": str(self.path)})

        if not isinstance(data, dict):
            raise StorageError(f"Store file {self.path} does not contain an object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        # Write to a sibling temp file first so a crash never truncates the store
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write store file {self.path}: {e}", details={"path": str(self.path)})

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        self._write_all(data)
        logger.info(f"Deleted key {key} from {self.path}")
        return True

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self._read_all() if k.startswith(prefix))


class RedisStore(KeyValueStore):
    """Redis-backed store."""

    def __init__(self, redis_url: str, key_prefix: str = "vetblood:"):
        """
        Initialize Redis storage.

        Args:
            redis_url: Redis connection URL
            key_prefix: Namespace prepended to every key
        """
        import redis

        self.redis_client = redis.from_url(redis_url, decode_responses=True)
        self.key_prefix = key_prefix
        # Fail fast so the backend factory can fall back to local storage
        self.redis_client.ping()

    def _get_redis_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.redis_client.get(self._get_redis_key(key))
        except Exception as e:
            raise StorageError(f"Failed to read {key} from Redis: {e}")
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.redis_client.set(self._get_redis_key(key), value)
        except Exception as e:
            raise StorageError(f"Failed to write {key} to Redis: {e}")

    def delete(self, key: str) -> bool:
        try:
            return bool(self.redis_client.delete(self._get_redis_key(key)))
        except Exception as e:
            raise StorageError(f"Failed to delete {key} from Redis: {e}")

    def keys(self, prefix: str = "") -> List[str]:
        try:
            raw_keys = self.redis_client.keys(f"{self.key_prefix}{prefix}*")
        except Exception as e:
            raise StorageError(f"Failed to list keys in Redis: {e}")
        names = []
        for raw in raw_keys:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            names.append(raw[len(self.key_prefix):])
        return sorted(names)
