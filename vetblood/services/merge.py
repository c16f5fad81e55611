"""
Merge of incoming donor records into the stored collection.
"""

import logging
from typing import Any, Dict, List

from vetblood.services.deduplication import remove_exact_duplicates
from vetblood.services.identity import normalize_donors

logger = logging.getLogger(__name__)


def merge_donors(
    current: List[Dict[str, Any]], incoming: List[Dict[str, Any]], replace: bool = False
) -> List[Dict[str, Any]]:
    """
    Merge incoming donor records with the current collection.

    Args:
        current: Stored donor records
        incoming: Records from an import, backup or form submission
        replace: Discard current and keep only incoming (restore)

    Returns:
        Normalized, deduplicated donor list
    """
    if replace:
        result = remove_exact_duplicates(normalize_donors(incoming))
        logger.info(f"Replaced donor collection with {len(result)} records")
        return result

    merged = normalize_donors(current)
    position_by_id = {record["id"]: i for i, record in enumerate(merged)}

    updated = 0
    added = 0
    for record in normalize_donors(incoming):
        record_id = record["id"]
        if record_id in position_by_id:
            merged[position_by_id[record_id]] = record
            updated += 1
        else:
            position_by_id[record_id] = len(merged)
            merged.append(record)
            added += 1

    result = remove_exact_duplicates(merged)
    logger.info(f"Merge complete: {len(result)} donors (updated {updated}, added {added})")
    return result
