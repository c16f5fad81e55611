"""Application configuration management using Pydantic settings."""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from vetblood.constants import BACKUP_FILENAME, DEFAULT_ACTIVE_LOCATION


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Veterinary Blood Donor Registry"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: Optional[str] = None  # overrides DEBUG when set, e.g. WARNING
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    QUIET_LOGGERS: List[str] = ["redis", "openpyxl", "urllib3.connectionpool"]

    # Key-value store
    STORE_BACKEND: str = "local"  # local, redis or memory
    STORE_PATH: str = "donor_data/store.json"
    REDIS_URL: Optional[str] = None
    REDIS_KEY_PREFIX: str = "vetblood:"

    # Backup file
    BACKUP_DIR: str = "documents"
    BACKUP_FILENAME: str = BACKUP_FILENAME
    AUTO_BACKUP: bool = True

    # UI defaults
    DEFAULT_ACTIVE_LOCATION: str = DEFAULT_ACTIVE_LOCATION

    # Spreadsheet ingestion
    HEADER_SCAN_ROWS: int = 15

    # Define a model_config to load from a .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def __init__(self, **values):
        """Initialize settings with computed values."""
        super().__init__(**values)
        self.STORE_BACKEND = self.STORE_BACKEND.strip().lower()
        if self.LOG_LEVEL:
            self.LOG_LEVEL = self.LOG_LEVEL.strip().upper()
        if self.HEADER_SCAN_ROWS < 1:
            self.HEADER_SCAN_ROWS = 1


settings = Settings()
