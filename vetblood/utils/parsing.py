"""
Date and number parsing shared by donor records and spreadsheet rows.
"""
import math
import re
from datetime import date, datetime
from typing import Any, Optional

import dateutil.parser

_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_CURRENCY_RE = re.compile(r"[,₪$\s]")


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from a record or spreadsheet cell.

    ISO dates (optionally followed by a time) are read year-first, DD/MM/YYYY
    day-first, and anything else goes to dateutil with day-first ordering.

    Args:
        value: String, date or datetime

    Returns:
        The parsed date, or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()

    # dateutil reads 2024-01-05 as May 1st when dayfirst is set
    iso = _ISO_PREFIX_RE.match(text)
    if iso:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        except ValueError:
            return None

    try:
        return datetime.strptime(text, "%d/%m/%Y").date()
    except ValueError:
        pass

    try:
        return dateutil.parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError):
        return None


def parse_number(value: Any) -> Optional[float]:
    """
    Parse the leading number of a value.

    Args:
        value: Number or string such as "12", "4.5kg"

    Returns:
        The parsed float, or None if the value does not start with a number
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return float(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        return None
    return float(match.group(0))


def to_number(value: Any) -> float:
    """Parse a spreadsheet amount, ignoring thousands separators and currency signs; 0 when not numeric."""
    if isinstance(value, str):
        value = _CURRENCY_RE.sub("", value)
    number = parse_number(value)
    return number if number is not None else 0.0


def format_number(number: float) -> str:
    """Render a number without a trailing .0 for whole values."""
    if float(number).is_integer():
        return str(int(number))
    return str(number)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()
