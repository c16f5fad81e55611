"""
Donor registry service.

Each operation is a whole-collection read-modify-write cycle against the
donor store. Only one process writes at a time; the last write wins.
"""

import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from vetblood.constants import BACKUP_FILENAME
from vetblood.models.donor import DonorRecord
from vetblood.services import eligibility
from vetblood.services.deduplication import remove_exact_duplicates
from vetblood.services.eligibility import highlight_key, parse_donor_date
from vetblood.services.identity import normalize_donors
from vetblood.services.merge import merge_donors
from vetblood.services.validation import sanitize_donor, validate_donor_form
from vetblood.storage.backup import BackupStorage
from vetblood.storage.donor_store import DonorStore
from vetblood.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class DonorService:
    """Operations behind the donor form, location tables and dashboard."""

    def __init__(
        self,
        donor_store: DonorStore,
        backup_storage: Optional[BackupStorage] = None,
        auto_backup: bool = True,
        backup_filename: str = BACKUP_FILENAME,
    ):
        """
        Initialize the donor service.

        Args:
            donor_store: Facade over the persisted registry
            backup_storage: Where backup files are written, optional
            auto_backup: Write a backup silently after every submission
            backup_filename: Name of the backup file
        """
        self.donor_store = donor_store
        self.backup_storage = backup_storage
        self.auto_backup = auto_backup
        self.backup_filename = backup_filename

    def _records(self) -> List[Dict[str, Any]]:
        """Stored donors, skipping entries that are not objects."""
        return [d for d in self.donor_store.get_donors() if isinstance(d, dict)]

    # Form submission

    def submit_donor(self, form: Dict[str, Any]) -> Tuple[bool, Dict[str, str]]:
        """
        Validate and store a donor form.

        A record with an existing id replaces the stored record with that id;
        otherwise the record gets an id and is appended.

        Args:
            form: Form values keyed by camelCase field name

        Returns:
            Tuple of (success, field errors)
        """
        is_valid, errors = validate_donor_form(form)
        if not is_valid:
            logger.info(f"Donor form rejected: {sorted(errors)}")
            return False, errors

        sanitized = sanitize_donor(form)
        try:
            record = DonorRecord.model_validate(sanitized).to_record()
        except ValidationError as e:
            logger.warning(f"Donor form could not be converted: {e}")
            return False, {"form": str(e)}

        current = self.donor_store.get_donors()
        merged = merge_donors(current, [record])
        if not self.donor_store.save_donors(merged):
            return False, {"form": "Failed to save donor"}

        self.donor_store.save_last_location(record.get("location", ""))
        self.donor_store.save_last_date(record.get("date", ""))
        self.donor_store.remove_editing_donor()

        if self.auto_backup:
            self.backup_to_file()

        return True, {}

    # Editing handoff between the table and the form

    def start_editing(self, donor: Dict[str, Any]) -> bool:
        return self.donor_store.save_editing_donor(donor)

    def take_editing_donor(self) -> Optional[Dict[str, Any]]:
        """Return the donor queued for editing and clear the slot."""
        donor = self.donor_store.get_editing_donor()
        if donor is not None:
            self.donor_store.remove_editing_donor()
        return donor

    # Import, backup and restore

    def import_json(self, content: Union[str, bytes, List[Any]]) -> Tuple[bool, str]:
        """
        Merge an imported JSON array into the stored donors.

        Returns:
            Tuple of (success, message)
        """
        if isinstance(content, (str, bytes)):
            try:
                content = json.loads(content)
            except ValueError as e:
                logger.warning(f"Import file is not valid JSON: {e}")
                return False, "Error reading file"

        if not isinstance(content, list):
            return False, "Invalid file format - expected JSON array"

        merged = merge_donors(self.donor_store.get_donors(), content)
        if not self.donor_store.save_donors(merged):
            return False, "Failed to save imported donors"

        logger.info(f"Imported {len(content)} donor records")
        return True, f"Imported {len(content)} records"

    def backup_to_file(self) -> bool:
        """Write the stored donors to the backup file."""
        if self.backup_storage is None:
            logger.debug("No backup storage configured")
            return False

        donors = self.donor_store.get_donors()
        if not donors:
            logger.warning("No donor data to back up")
            return False

        try:
            self.backup_storage.write_blob(self.backup_filename, json.dumps(donors, ensure_ascii=False))
            return True
        except StorageError as e:
            logger.error(f"Backup failed: {e}")
            return False

    def restore_from_backup(self, confirmed: bool = False) -> bool:
        """
        Replace every stored donor with the backup file contents.

        Restoring is destructive, so nothing happens unless confirmed is True.
        """
        if not confirmed:
            logger.info("Restore not confirmed; stored donors unchanged")
            return False
        if self.backup_storage is None:
            logger.error("No backup storage configured")
            return False

        try:
            raw = self.backup_storage.read_blob(self.backup_filename)
        except StorageError as e:
            logger.error(f"Restore failed: {e}")
            return False
        if raw is None:
            logger.error(f"Backup file {self.backup_filename} not found")
            return False

        try:
            parsed = json.loads(raw)
        except ValueError as e:
            logger.error(f"Backup file is not valid JSON: {e}")
            return False
        if not isinstance(parsed, list):
            logger.error("Backup file does not contain a donor list")
            return False

        restored = merge_donors([], parsed, replace=True)
        logger.info(f"Restoring {len(restored)} donors from backup")
        return self.donor_store.save_donors(restored)

    def cleanup_stored_donors(self) -> int:
        """
        Give every stored donor an id and drop exact duplicates.

        Returns:
            Number of records removed, 0 when the cleaned collection could not be saved
        """
        current = self.donor_store.get_donors()
        cleaned = remove_exact_duplicates(normalize_donors(current))
        if not self.donor_store.save_donors(cleaned):
            return 0
        return len(current) - len(cleaned)

    def delete_donor(self, donor: Dict[str, Any]) -> bool:
        """Permanently delete the first stored record equal to donor."""
        donors = self.donor_store.get_donors()
        for i, record in enumerate(donors):
            if record == donor:
                del donors[i]
                return self.donor_store.save_donors(donors)
        logger.warning(f"Donor to delete not found: {donor.get('animalName')}")
        return False

    # Eligibility

    def mark_as_donated(self, donor: Dict[str, Any], today: Optional[date] = None) -> int:
        donors = self.donor_store.get_donors()
        updated = eligibility.mark_as_donated(donors, donor, today)
        if updated and not self.donor_store.save_donors(donors):
            return 0
        return updated

    def suppress_highlight(self, donor: Union[Dict[str, Any], str]) -> bool:
        key = donor if isinstance(donor, str) else highlight_key(donor)
        suppressed = self.donor_store.get_removed_highlights()
        suppressed.add(key)
        return self.donor_store.save_removed_highlights(suppressed)

    def clear_suppressed_highlights(self) -> bool:
        return self.donor_store.save_removed_highlights(set())

    def highlighted_donors(
        self, location: Optional[str] = None, today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        donors = self._records()
        if location is not None:
            donors = [d for d in donors if d.get("location") == location]
        return eligibility.highlighted_donors(
            donors, self.donor_store.get_removed_highlights(), today
        )

    def upcoming_donors(
        self, location: Optional[str] = None, today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        return eligibility.upcoming_donors(self.donor_store.get_donors(), today, location)

    # Location tables

    def animal_types(self) -> List[str]:
        """Distinct animal types in first-seen spelling, compared case-insensitively."""
        types: Dict[str, str] = {}
        for donor in self._records():
            animal_type = str(donor.get("animalType") or "").strip()
            if animal_type and animal_type.lower() not in types:
                types[animal_type.lower()] = animal_type
        return list(types.values())

    def donors_for_location(
        self,
        location: Optional[str] = None,
        animal_type: str = "",
        search: str = "",
    ) -> List[Dict[str, Any]]:
        """
        Donors at one location, newest first.

        Args:
            location: Collection site, defaults to the active location
            animal_type: Species filter, case-insensitive
            search: Substring of the animal name, case-insensitive
        """
        location = location if location is not None else self.donor_store.get_active_location()
        animal_type = animal_type.strip().lower()
        search = search.lower()

        def newest_first(donor: Dict[str, Any]) -> date:
            return parse_donor_date(donor.get("date")) or date.min

        result = []
        for donor in sorted(self._records(), key=newest_first, reverse=True):
            if donor.get("location") != location:
                continue
            if animal_type and str(donor.get("animalType") or "").strip().lower() != animal_type:
                continue
            name = donor.get("animalName")
            if search and search not in (name.lower() if isinstance(name, str) else ""):
                continue
            result.append(donor)
        return result

    # Private owners

    def private_owner_donors(self) -> List[Dict[str, Any]]:
        return [d for d in self._records() if d.get("isPrivateOwner")]

    def _private_owner_index(self, donors: List[Dict[str, Any]], donor: Dict[str, Any]) -> int:
        for i, record in enumerate(donors):
            if (
                isinstance(record, dict)
                and record.get("isPrivateOwner")
                and record.get("ownerName") == donor.get("ownerName")
                and record.get("animalName") == donor.get("animalName")
            ):
                return i
        return -1

    def update_private_owner(self, donor: Dict[str, Any], changes: Dict[str, Any]) -> bool:
        """Apply changes to the first private-owner record with the donor's owner and animal name."""
        donors = self.donor_store.get_donors()
        index = self._private_owner_index(donors, donor)
        if index == -1:
            return False
        donors[index] = {**donors[index], **changes}
        return self.donor_store.save_donors(donors)

    def delete_private_owner(self, donor: Dict[str, Any]) -> bool:
        donors = self.donor_store.get_donors()
        index = self._private_owner_index(donors, donor)
        if index == -1:
            return False
        del donors[index]
        return self.donor_store.save_donors(donors)
