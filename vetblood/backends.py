"""
Backend selection for the key-value store and backup storage.

Chooses between the local JSON file (default), Redis and an in-memory store
from settings, falling back to local storage when Redis is unavailable.
"""
import logging
from typing import Optional, Tuple

from dotenv import load_dotenv

from vetblood.config.settings import Settings, settings
from vetblood.services.donor_service import DonorService
from vetblood.storage.backup import BackupStorage, LocalBackupStorage
from vetblood.storage.donor_store import DonorStore
from vetblood.storage.kv_store import KeyValueStore, LocalJSONStore, MemoryStore, RedisStore

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_backends(app_settings: Optional[Settings] = None) -> Tuple[KeyValueStore, BackupStorage]:
    """
    Get the key-value store and backup storage configured in settings.

    Args:
        app_settings: Settings to use, defaults to the module settings

    Returns:
        Tuple of (KeyValueStore, BackupStorage) instances
    """
    app_settings = app_settings or settings
    backend = app_settings.STORE_BACKEND

    if backend == "redis" and app_settings.REDIS_URL:
        logger.info("Using Redis store backend")
        try:
            store: KeyValueStore = RedisStore(app_settings.REDIS_URL, app_settings.REDIS_KEY_PREFIX)
        except Exception as e:
            logger.error(f"Failed to initialize Redis store: {e}")
            logger.info("Falling back to local JSON store")
            store = LocalJSONStore(app_settings.STORE_PATH)
    elif backend == "memory":
        logger.info("Using in-memory store backend")
        store = MemoryStore()
    else:
        if backend == "redis":
            logger.warning("STORE_BACKEND is redis but REDIS_URL is not set")
        logger.info("Using local JSON store backend")
        store = LocalJSONStore(app_settings.STORE_PATH)

    backup = LocalBackupStorage(app_settings.BACKUP_DIR)
    return store, backup


def build_donor_service(app_settings: Optional[Settings] = None) -> DonorService:
    """Wire a DonorService to the configured backends."""
    app_settings = app_settings or settings
    store, backup = get_backends(app_settings)
    donor_store = DonorStore(store, default_location=app_settings.DEFAULT_ACTIVE_LOCATION)
    return DonorService(
        donor_store,
        backup_storage=backup,
        auto_backup=app_settings.AUTO_BACKUP,
        backup_filename=app_settings.BACKUP_FILENAME,
    )
