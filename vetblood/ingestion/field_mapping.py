"""
Mapping of raw spreadsheet headers onto the canonical product row fields.
"""
import logging
from typing import Any, Dict, Iterable, List

from vetblood.models.ingestion import SchemaValidation

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["date", "productName", "quantity", "price"]
OPTIONAL_FIELDS = ["month", "total"]

# Known header spellings per canonical field, checked in this order
FIELD_MAPPINGS: Dict[str, List[str]] = {
    "date": ["date", "תאריך", "datum", "fecha", "data"],
    "month": ["month", "חודש", "mes", "mois"],
    "productName": ["productName", "product", "מוצר", "שם מוצר", "item", "name"],
    "quantity": ["quantity", "כמות", "qty", "amount", "count"],
    "price": ["price", "מחיר", "cost", "unitPrice", "pricePerUnit"],
    "total": ["total", "סה״כ", "סה\"כ", "totalPrice", "totalCost", "sum"],
}

HEBREW_LABELS = {
    "date": "תאריך",
    "month": "חודש",
    "productName": "מוצר",
    "quantity": "כמות",
    "price": "מחיר",
    "total": "סה״כ",
}

TOTAL_MARKERS = ("total", "סה״כ", "סה\"כ")


def _substring_allowed(canonical: str, column: str) -> bool:
    lowered = column.lower()
    if canonical == "price" and any(marker in lowered for marker in TOTAL_MARKERS):
        return False
    if canonical == "total" and lowered.strip() == "price":
        return False
    return True


def map_field_names(columns: Iterable[str]) -> Dict[str, str]:
    """
    Map raw column names to canonical field names.

    Exact case-insensitive matches are assigned for every canonical field
    first; substring matches then fill the remaining fields from columns that
    are still unclaimed. A column mentioning a total never becomes the price,
    and a column named exactly "price" never becomes the total.

    Args:
        columns: Raw column names in sheet order

    Returns:
        Dictionary of raw column name to canonical field name
    """
    columns = [str(c) for c in columns]
    field_map: Dict[str, str] = {}

    for canonical, variations in FIELD_MAPPINGS.items():
        lowered = [v.lower() for v in variations]
        for column in columns:
            if column in field_map:
                continue
            if column.strip().lower() in lowered:
                field_map[column] = canonical
                break

    for canonical, variations in FIELD_MAPPINGS.items():
        if canonical in field_map.values():
            continue
        for column in columns:
            if column in field_map or not _substring_allowed(canonical, column):
                continue
            if any(v.lower() in column.lower() for v in variations):
                field_map[column] = canonical
                break

    # Columns already carrying a required canonical name keep it
    for column in columns:
        if column in REQUIRED_FIELDS and column not in field_map and column not in field_map.values():
            field_map[column] = column

    logger.debug(f"Field mapping: {field_map}")
    return field_map


def apply_field_mapping(rows: List[Dict[str, Any]], field_map: Dict[str, str]) -> List[Dict[str, Any]]:
    """Rename the keys of every row; unmapped columns keep their names."""
    return [{field_map.get(key, key): value for key, value in row.items()} for row in rows]


def validate_schema(rows: List[Dict[str, Any]]) -> SchemaValidation:
    """Check that the mapped rows carry every required canonical field."""
    if not rows:
        return SchemaValidation(
            is_valid=False, missing_fields=list(REQUIRED_FIELDS), errors=["No data found"]
        )

    available = list(rows[0].keys())
    missing = [field for field in REQUIRED_FIELDS if field not in available]
    errors = [f"Missing required fields: {', '.join(missing)}"] if missing else []
    return SchemaValidation(
        is_valid=not missing, missing_fields=missing, errors=errors, available_fields=available
    )
