"""
Donation eligibility and highlighting.

An animal becomes eligible to donate again DONATION_INTERVAL_DAYS after its
last donation. Two views are derived from that date:

- Highlighting flags an animal from HIGHLIGHT_DAYS_BEFORE days before it
  becomes eligible until HIGHLIGHT_DAYS_AFTER days after.
- The upcoming list shows animals whose last donation is between 90 and
  90 + UPCOMING_WINDOW_DAYS days old.

The two windows are not the same range; both are kept as the clinic uses them.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from vetblood.constants import (
    DONATION_INTERVAL_DAYS,
    HIGHLIGHT_DAYS_AFTER,
    HIGHLIGHT_DAYS_BEFORE,
    UPCOMING_WINDOW_DAYS,
)
from vetblood.services.identity import is_meaningful_name
from vetblood.utils.parsing import parse_date as parse_donor_date

logger = logging.getLogger(__name__)

HIGHLIGHTABLE_TYPES = ("dog", "cat")


def highlight_key(record: Dict[str, Any]) -> str:
    """Key used to suppress a record's highlight: its id, else name and date."""
    if record.get("id"):
        return str(record["id"])
    return f"{record.get('animalName', '')}_{record.get('date', '')}"


def next_eligible_date(record: Dict[str, Any]) -> Optional[date]:
    donation_date = parse_donor_date(record.get("date"))
    if donation_date is None:
        return None
    return donation_date + timedelta(days=DONATION_INTERVAL_DAYS)


def is_animal_highlighted(
    record: Dict[str, Any], suppressed: Iterable[str] = (), today: Optional[date] = None
) -> bool:
    """
    Check whether a donor should be highlighted as due to donate.

    Args:
        record: Donor record
        suppressed: Highlight keys the user dismissed
        today: Reference date, defaults to the current date

    Returns:
        True if today is within [-7, +14] days of the next eligible date
    """
    if not isinstance(record, dict):
        return False
    if str(record.get("animalType") or "").strip().lower() not in HIGHLIGHTABLE_TYPES:
        return False
    if not is_meaningful_name(record.get("animalName")):
        return False

    next_date = next_eligible_date(record)
    if next_date is None:
        return False

    today = today or date.today()
    diff = (today - next_date).days
    if not -HIGHLIGHT_DAYS_BEFORE <= diff <= HIGHLIGHT_DAYS_AFTER:
        return False

    return highlight_key(record) not in set(suppressed)


def highlighted_donors(
    records: List[Dict[str, Any]], suppressed: Iterable[str] = (), today: Optional[date] = None
) -> List[Dict[str, Any]]:
    suppressed = set(suppressed)
    return [r for r in records if is_animal_highlighted(r, suppressed, today)]


def upcoming_donors(
    records: List[Dict[str, Any]],
    today: Optional[date] = None,
    location: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    List animals whose latest donation is 90 to 97 days old.

    Only the latest record per (animalName, location) pair is considered.
    Records missing a name or location, or with an unparseable date, are
    skipped.

    Args:
        records: Donor records
        today: Reference date, defaults to the current date
        location: Restrict to one collection site

    Returns:
        Latest record of each due animal
    """
    today = today or date.today()

    latest: Dict[Tuple[str, str], Tuple[date, Dict[str, Any]]] = {}
    for record in records:
        if not isinstance(record, dict):
            continue
        name = record.get("animalName")
        site = record.get("location")
        if not name or not site:
            continue
        if location is not None and site != location:
            continue
        donation_date = parse_donor_date(record.get("date"))
        if donation_date is None:
            continue

        pair = (name, site)
        if pair not in latest or donation_date > latest[pair][0]:
            latest[pair] = (donation_date, record)

    due = []
    for donation_date, record in latest.values():
        age_days = (today - donation_date).days
        if DONATION_INTERVAL_DAYS <= age_days <= DONATION_INTERVAL_DAYS + UPCOMING_WINDOW_DAYS:
            due.append(record)
    return due


def mark_as_donated(
    records: List[Dict[str, Any]], donor: Dict[str, Any], today: Optional[date] = None
) -> int:
    """
    Record a new donation for an animal.

    Every record matching the donor's animalName, location and date is moved
    to today, with next set to today + 90 days. Records are changed in place.

    Returns:
        Number of records updated
    """
    today = today or date.today()
    next_date = today + timedelta(days=DONATION_INTERVAL_DAYS)

    updated = 0
    for record in records:
        if not isinstance(record, dict):
            continue
        if (
            record.get("animalName") == donor.get("animalName")
            and record.get("location") == donor.get("location")
            and record.get("date") == donor.get("date")
        ):
            record["date"] = today.isoformat()
            record["next"] = next_date.isoformat()
            updated += 1

    if updated:
        logger.info(f"Marked {donor.get('animalName')} as donated on {today.isoformat()}")
    else:
        logger.warning(f"No donor matched {donor.get('animalName')} at {donor.get('location')}")
    return updated
