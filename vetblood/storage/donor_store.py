"""
Donor store facade over a key-value backend.

Every method is fail-soft: read failures are logged and answered with a
default, write failures are logged and reported as False.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Set

from vetblood.constants import DEFAULT_ACTIVE_LOCATION, STORAGE_KEYS
from vetblood.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class DonorStore:
    """Typed access to the persisted donor registry keys."""

    def __init__(self, kv_store: KeyValueStore, default_location: str = DEFAULT_ACTIVE_LOCATION):
        """
        Initialize the donor store.

        Args:
            kv_store: Backend holding the raw values
            default_location: Active location reported when none was saved
        """
        self.kv_store = kv_store
        self.default_location = default_location

    # Raw helpers

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.kv_store.get(key)
        except Exception as e:
            logger.error(f"Error reading {key} from store: {e}")
            return None

    def _write(self, key: str, value: str) -> bool:
        try:
            self.kv_store.set(key, value)
            return True
        except Exception as e:
            logger.error(f"Error saving {key} to store: {e}")
            return False

    def _read_json(self, key: str) -> Any:
        raw = self._read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error(f"Stored value for {key} is not valid JSON: {e}")
            return None

    def _write_json(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Could not serialize {key}: {e}")
            return False
        return self._write(key, payload)

    # Donors

    def get_donors(self) -> List[Dict[str, Any]]:
        """Return the persisted donor collection, or [] when missing or unreadable."""
        donors = self._read_json(STORAGE_KEYS["ANIMAL_DONORS"])
        if not isinstance(donors, list):
            if donors is not None:
                logger.warning("Stored donor collection is not a list; ignoring it")
            return []
        return donors

    def save_donors(self, donors: List[Dict[str, Any]]) -> bool:
        if not isinstance(donors, list):
            logger.warning(f"save_donors expected a list, got {type(donors).__name__}")
            return False
        saved = self._write_json(STORAGE_KEYS["ANIMAL_DONORS"], donors)
        if saved:
            logger.debug(f"Saved {len(donors)} donors")
        return saved

    # Form memory

    def get_last_location(self) -> str:
        return self._read(STORAGE_KEYS["LAST_LOCATION"]) or ""

    def save_last_location(self, location: str) -> bool:
        return self._write(STORAGE_KEYS["LAST_LOCATION"], location or "")

    def get_last_date(self) -> str:
        return self._read(STORAGE_KEYS["LAST_DATE"]) or ""

    def save_last_date(self, date_str: str) -> bool:
        return self._write(STORAGE_KEYS["LAST_DATE"], date_str or "")

    def get_active_location(self) -> str:
        return self._read(STORAGE_KEYS["ACTIVE_LOCATION"]) or self.default_location

    def save_active_location(self, location: str) -> bool:
        return self._write(STORAGE_KEYS["ACTIVE_LOCATION"], location or "")

    # Suppressed highlights

    def get_removed_highlights(self) -> Set[str]:
        """Return the set of highlight keys the user dismissed."""
        keys = self._read_json(STORAGE_KEYS["REMOVED_HIGHLIGHTS"])
        if not isinstance(keys, list):
            return set()
        return {str(k) for k in keys}

    def save_removed_highlights(self, keys: Set[str]) -> bool:
        return self._write_json(STORAGE_KEYS["REMOVED_HIGHLIGHTS"], sorted(keys))

    # Donor currently being edited

    def get_editing_donor(self) -> Optional[Dict[str, Any]]:
        donor = self._read_json(STORAGE_KEYS["EDITING_DONOR"])
        return donor if isinstance(donor, dict) else None

    def save_editing_donor(self, donor: Dict[str, Any]) -> bool:
        return self._write_json(STORAGE_KEYS["EDITING_DONOR"], donor)

    def remove_editing_donor(self) -> bool:
        try:
            self.kv_store.delete(STORAGE_KEYS["EDITING_DONOR"])
            return True
        except Exception as e:
            logger.error(f"Error removing editing donor: {e}")
            return False
