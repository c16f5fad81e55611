"""
Donor identity assignment.

Records without an id get one here: a deterministic name-based key for
animals that have a usable name, or a random key for anonymous cats.
"""

import logging
import re
import uuid
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# Latin or Hebrew letter
_LETTER_RE = re.compile(r"[A-Za-z\u0590-\u05FF]")


def is_meaningful_name(name: Any) -> bool:
    """
    Check whether an animal name can identify an animal.

    A meaningful name contains at least one Latin or Hebrew letter and is not
    made only of digits.

    Args:
        name: Candidate animal name

    Returns:
        True if the name is meaningful
    """
    if not isinstance(name, str):
        return False
    stripped = name.strip()
    if not stripped or stripped.isdigit():
        return False
    return bool(_LETTER_RE.search(stripped))


def generate_donor_id(record: Dict[str, Any]) -> str:
    """
    Build the identity key for a record that has none.

    Two different animals sharing a name and owner get the same key; callers
    accept that collision.
    """
    is_cat = str(record.get("animalType") or "").lower() == "cat"
    if is_cat and not is_meaningful_name(record.get("animalName")):
        return str(uuid.uuid4())

    animal_name = str(record.get("animalName") or "").strip().lower()
    owner_name = str(record.get("ownerName") or "").strip().lower()
    return f"{animal_name}_{owner_name}"


def normalize_donors(records: Any) -> List[Dict[str, Any]]:
    """
    Ensure every donor record carries a non-empty id.

    Args:
        records: List of raw donor records

    Returns:
        List of records with ids; existing ids are left untouched
    """
    if not isinstance(records, list):
        logger.warning(f"normalize_donors expected a list, got {type(records).__name__}")
        return []

    normalized = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning(f"Replacing non-object donor entry: {record!r}")
            normalized.append({"id": str(uuid.uuid4())})
            continue

        if record.get("id"):
            normalized.append(record)
            continue

        normalized.append({**record, "id": generate_donor_id(record)})

    return normalized
