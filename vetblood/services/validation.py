"""
Validation utilities for donor records.

This module contains the checks applied to form submissions and imported
records, and the sanitizer run before a record is stored.
"""

import re
from typing import Any, Dict, List, Tuple

from vetblood.constants import (
    BLOOD_TYPES,
    LEGACY_DOG_BLOOD_TYPES,
    NUMERIC_DONOR_FIELDS,
    TEXT_DONOR_FIELDS,
)
from vetblood.services.identity import is_meaningful_name
from vetblood.utils.parsing import format_number, is_blank, parse_date, parse_number

VALID_ANIMAL_TYPES = ["dog", "cat", "rabbit", "bird", "other"]

# Markup fragments removed from free-text fields
_SCRIPT_TAG_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)


def is_valid_phone(phone: Any) -> bool:
    """Israeli phone numbers have 9 or 10 digits once punctuation is removed."""
    if not phone:
        return False
    digits = re.sub(r"[^0-9]", "", str(phone))
    return 9 <= len(digits) <= 10


def is_valid_date(value: Any) -> bool:
    return parse_date(value) is not None


def is_valid_age(age: Any) -> bool:
    if is_blank(age):
        return True
    number = parse_number(age)
    return number is not None and 0 < number < 50


def is_valid_weight(weight: Any) -> bool:
    if is_blank(weight):
        return True
    number = parse_number(weight)
    return number is not None and 0 < number < 200


def is_valid_pcv(pcv: Any) -> bool:
    if is_blank(pcv):
        return True
    number = parse_number(pcv)
    return number is not None and 10 <= number <= 80


def is_valid_animal_type(animal_type: Any) -> bool:
    if not isinstance(animal_type, str) or not animal_type.strip():
        return False
    return animal_type.strip().lower() in VALID_ANIMAL_TYPES


def is_valid_blood_type(blood_type: Any, animal_type: Any) -> bool:
    """
    Check a blood type against the animal's species.

    Dogs accept both the full DEA 1.1 names and the short legacy spellings.
    Species other than dog and cat accept any blood type.
    """
    if is_blank(blood_type):
        return True
    species = str(animal_type or "").strip().lower()
    if species == "dog":
        return blood_type in BLOOD_TYPES["DOG"] + LEGACY_DOG_BLOOD_TYPES
    if species == "cat":
        return blood_type in BLOOD_TYPES["CAT"]
    return True


def validate_donor_form(form: Dict[str, Any]) -> Tuple[bool, Dict[str, str]]:
    """
    Validate a donor form submission.

    Args:
        form: Form values keyed by camelCase field name

    Returns:
        Tuple of (is_valid, errors) where errors maps field name to a
        Hebrew message for display next to the field
    """
    errors: Dict[str, str] = {}

    animal_name = form.get("animalName")
    if is_blank(animal_name):
        errors["animalName"] = "שם הבעל חי נדרש"
    elif not is_meaningful_name(animal_name):
        errors["animalName"] = "שם הבעל חי חייב להכיל אותיות"

    if is_blank(form.get("location")):
        errors["location"] = "מיקום נדרש"

    if is_blank(form.get("date")):
        errors["date"] = "תאריך נדרש"
    elif not is_valid_date(form.get("date")):
        errors["date"] = "תאריך לא תקין"

    if is_blank(form.get("animalType")):
        errors["animalType"] = "סוג בעל חי נדרש"

    if not is_valid_age(form.get("age")):
        errors["age"] = "גיל לא תקין"

    if not is_valid_weight(form.get("weight")):
        errors["weight"] = "משקל לא תקין"

    if not is_valid_pcv(form.get("pcv")):
        errors["pcv"] = "ערך PCV לא תקין (10-80)"

    if not is_valid_blood_type(form.get("bloodType"), form.get("animalType")):
        errors["bloodType"] = "סוג דם לא תקין לסוג הבעל חי"

    return len(errors) == 0, errors


def validate_donor(donor: Any) -> Tuple[bool, List[str]]:
    """
    Validate a donor record before import.

    Returns:
        Tuple of (is_valid, errors)
    """
    errors: List[str] = []

    if not isinstance(donor, dict):
        return False, ["Donor must be an object"]

    if is_blank(donor.get("animalName")):
        errors.append("Animal name is required")

    if is_blank(donor.get("animalType")):
        errors.append("Animal type is required")

    if is_blank(donor.get("location")):
        errors.append("Location is required")

    if is_blank(donor.get("date")):
        errors.append("Date is required")
    elif not is_valid_date(donor.get("date")):
        errors.append("Date must be in valid format")

    for field in NUMERIC_DONOR_FIELDS:
        value = donor.get(field)
        if is_blank(value):
            continue
        number = parse_number(value)
        if number is None or number < 0:
            errors.append(f"{field} must be a positive number")

    return len(errors) == 0, errors


def sanitize_text(value: Any) -> str:
    text = str(value)
    text = _SCRIPT_TAG_RE.sub("", text)
    text = _JS_PROTOCOL_RE.sub("", text)
    text = _EVENT_HANDLER_RE.sub("", text)
    return text.strip()


def sanitize_donor(donor: Any) -> Dict[str, Any]:
    """
    Clean a donor record for storage.

    Text fields lose script fragments and surrounding whitespace, numeric
    fields are canonicalized (unparseable values become ""), invalid dates
    become "", isPrivateOwner is coerced to bool. The id and next date are
    preserved.

    Args:
        donor: Raw donor record

    Returns:
        A new sanitized record, {} for non-dict input
    """
    if not isinstance(donor, dict):
        return {}

    sanitized: Dict[str, Any] = {}

    for field in TEXT_DONOR_FIELDS:
        value = donor.get(field)
        sanitized[field] = "" if value is None else sanitize_text(value)

    for field in NUMERIC_DONOR_FIELDS:
        value = donor.get(field)
        if is_blank(value):
            sanitized[field] = ""
            continue
        number = parse_number(value)
        sanitized[field] = "" if number is None else format_number(number)

    date_value = donor.get("date")
    sanitized["date"] = date_value if date_value and is_valid_date(date_value) else ""

    flag = donor.get("isPrivateOwner")
    if isinstance(flag, str):
        flag = flag.strip().lower() in ("true", "1", "yes", "on")
    sanitized["isPrivateOwner"] = bool(flag)

    if donor.get("id"):
        sanitized["id"] = str(donor["id"])
    if donor.get("next"):
        sanitized["next"] = str(donor["next"])

    return sanitized
