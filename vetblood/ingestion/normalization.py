"""
Normalization of mapped product rows.
"""
import re
from typing import Any, Dict, List, Optional, Tuple

from vetblood.models.ingestion import IngestedRow
from vetblood.utils.parsing import format_number, is_blank, parse_date, to_number

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_date(value: Any) -> Optional[str]:
    """ISO date string for a cell value, or None when it cannot be parsed."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def normalize_month(value: Any) -> Optional[str]:
    """YYYY-MM for a cell value, or None when it cannot be parsed."""
    parsed = parse_date(value)
    return f"{parsed.year}-{parsed.month:02d}" if parsed else None


def normalize_product_name(name: Any) -> str:
    """Collapse whitespace and capitalize the first letter of each word."""
    if not isinstance(name, str):
        return ""
    collapsed = _WHITESPACE_RE.sub(" ", name.strip()).lower()
    return " ".join(word[:1].upper() + word[1:] for word in collapsed.split(" "))


def row_key(row: IngestedRow) -> str:
    return (
        f"{row.date or ''}_{row.product_name.lower()}_"
        f"{format_number(row.quantity)}_{format_number(row.price)}"
    )


def normalize_row(row: Dict[str, Any]) -> IngestedRow:
    """
    Normalize one mapped row.

    An unparseable date yields date and month None; the row itself is kept.
    The total is taken from a non-blank total cell, otherwise quantity * price.
    """
    iso_date = normalize_date(row.get("date"))
    quantity = to_number(row.get("quantity"))
    price = to_number(row.get("price"))

    total_cell = row.get("total")
    total = to_number(total_cell) if not is_blank(total_cell) else quantity * price

    normalized = IngestedRow(
        date=iso_date,
        month=iso_date[:7] if iso_date else None,
        product_name=normalize_product_name(row.get("productName")),
        quantity=quantity,
        price=price,
        total=total,
    )
    normalized.key = row_key(normalized)
    return normalized


def deduplicate_rows(rows: List[IngestedRow]) -> Tuple[List[IngestedRow], int]:
    """
    Drop rows whose deduplication key was already seen.

    Returns:
        Tuple of (unique rows in original order, number removed)
    """
    seen = set()
    unique = []
    for row in rows:
        if row.key in seen:
            continue
        seen.add(row.key)
        unique.append(row)
    return unique, len(rows) - len(unique)
