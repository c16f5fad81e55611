"""
Persistence layer: key-value backends, the donor store facade and backup blobs.
"""

from .backup import BackupStorage, LocalBackupStorage, MemoryBackupStorage
from .donor_store import DonorStore
from .kv_store import KeyValueStore, LocalJSONStore, MemoryStore, RedisStore

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "LocalJSONStore",
    "RedisStore",
    "DonorStore",
    "BackupStorage",
    "LocalBackupStorage",
    "MemoryBackupStorage",
]
