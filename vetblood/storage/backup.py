"""
Backup blob storage.

The registry only needs to read and write a whole text blob at a named path;
the local filesystem implementation writes into a documents directory.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from vetblood.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class BackupStorage(ABC):
    """Abstract base class for backup blob backends."""

    @abstractmethod
    def write_blob(self, name: str, content: str) -> str:
        """
        Write a text blob, replacing any previous content.

        Args:
            name: File name of the blob
            content: Text to store

        Returns:
            str: Path where the blob was stored
        """
        pass

    @abstractmethod
    def read_blob(self, name: str) -> Optional[str]:
        """
        Read a text blob.

        Returns:
            The stored text, or None if no blob exists under that name
        """
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        pass


class LocalBackupStorage(BackupStorage):
    """Local filesystem backup storage."""

    def __init__(self, base_path: str = "documents"):
        """
        Initialize local backup storage.

        Args:
            base_path: Directory holding backup files
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        # Only plain file names are accepted
        return self.base_path / Path(name).name

    def write_blob(self, name: str, content: str) -> str:
        path = self._path(name)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to write backup {path}: {e}", details={"path": str(path)})
        logger.info(f"Wrote backup file {path}")
        return str(path)

    def read_blob(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read backup {path}: {e}", details={"path": str(path)})

    def exists(self, name: str) -> bool:
        return self._path(name).exists()


class MemoryBackupStorage(BackupStorage):
    """In-memory backup storage used in tests."""

    def __init__(self):
        self.blobs: Dict[str, str] = {}

    def write_blob(self, name: str, content: str) -> str:
        self.blobs[name] = content
        return name

    def read_blob(self, name: str) -> Optional[str]:
        return self.blobs.get(name)

    def exists(self, name: str) -> bool:
        return name in self.blobs
