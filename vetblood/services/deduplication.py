"""
Deduplication service for donor records.

Two records are duplicates when every clinical field matches exactly. The
identity key, owner contact details and the private-owner flag are not part
of the comparison.
"""

import json
import logging
from typing import Any, Dict, List

from vetblood.constants import FINGERPRINT_FIELDS

logger = logging.getLogger(__name__)


class DeduplicationService:
    """Service for removing exact duplicate donor records."""

    @staticmethod
    def fingerprint(record: Any) -> str:
        """
        Canonical JSON of the clinical fields present in a record.

        Fields absent from the record are omitted, so a record missing a field
        and one holding an empty string for it have different fingerprints.
        """
        if not isinstance(record, dict):
            return ""

        subset = {field: record[field] for field in FINGERPRINT_FIELDS if field in record}
        try:
            return json.dumps(subset, ensure_ascii=False)
        except (TypeError, ValueError):
            return json.dumps(subset, ensure_ascii=False, default=str, sort_keys=True)

    @staticmethod
    def remove_exact_duplicates(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Drop records whose fingerprint was already seen.

        Args:
            records: Donor records in stored order

        Returns:
            Records in original order, keeping the first of each duplicate group
        """
        seen = set()
        unique = []

        for record in records:
            key = DeduplicationService.fingerprint(record)
            if key in seen:
                continue
            seen.add(key)
            unique.append(record)

        removed = len(records) - len(unique)
        if removed:
            logger.info(f"Removed {removed} exact duplicate donor records")

        return unique


fingerprint = DeduplicationService.fingerprint
remove_exact_duplicates = DeduplicationService.remove_exact_duplicates
