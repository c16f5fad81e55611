"""
Spreadsheet ingestion pipeline.

Reads an uploaded file, maps its headers onto the canonical product fields,
validates, normalizes and deduplicates its rows and summarizes the result.
Every failure is returned as an unsuccessful IngestionResult.
"""
import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from vetblood.config.settings import settings
from vetblood.ingestion.field_mapping import apply_field_mapping, map_field_names, validate_schema
from vetblood.ingestion.normalization import deduplicate_rows, normalize_row
from vetblood.ingestion.readers import Content, read_rows
from vetblood.models.ingestion import (
    IngestedRow,
    IngestionResult,
    IngestionSummary,
    MonthlyProductSummary,
    ProductSummary,
)
from vetblood.utils.exceptions import IngestionError, SchemaMappingError

logger = logging.getLogger(__name__)

# Header keywords used to locate the header row of a spreadsheet
PRODUCT_HEADER_GROUPS = [
    ("date", "תאריך"),
    ("product", "מוצר", "name", "שם"),
    ("quantity", "qty", "כמות"),
    ("price", "מחיר", "total", "סה״כ"),
]


def process_records(file_name: str, records: List[Dict[str, Any]]) -> IngestionResult:
    """
    Run already-parsed rows through mapping, validation and normalization.

    Raises:
        SchemaMappingError: If required columns are missing after mapping
    """
    columns = list(records[0].keys()) if records else []
    field_map = map_field_names(columns)
    mapped = apply_field_mapping(records, field_map)

    validation = validate_schema(mapped)
    if not validation.is_valid:
        raise SchemaMappingError(validation.missing_fields, details={"file_name": file_name})

    normalized = [normalize_row(row) for row in mapped]
    unique, removed = deduplicate_rows(normalized)

    invalid_dates = sum(1 for row in unique if row.date is None)
    if invalid_dates:
        logger.warning(f"{file_name}: {invalid_dates} rows have an unreadable date")

    summary = IngestionSummary(
        file_name=file_name,
        record_count=len(unique),
        duplicates_removed=removed,
        total_quantity=sum(row.quantity for row in unique),
        total_revenue=sum(row.total for row in unique),
        unique_products=len({row.product_name for row in unique}),
        months_spanned=len({row.month for row in unique if row.month}),
        field_mapping=field_map,
    )
    return IngestionResult(success=True, data=unique, summary=summary, validation=validation)


def ingest(
    name: str,
    content: Content,
    header_scan_rows: Optional[int] = None,
) -> IngestionResult:
    """
    Ingest an uploaded CSV, Excel or JSON file.

    Args:
        name: File name, used to pick the reader
        content: Raw file content
        header_scan_rows: Leading spreadsheet rows searched for the header

    Returns:
        IngestionResult; on failure success is False, error holds the message
        and no rows are returned
    """
    scan_rows = header_scan_rows or settings.HEADER_SCAN_ROWS
    try:
        records = read_rows(name, content, PRODUCT_HEADER_GROUPS, scan_rows)
        result = process_records(name, records)
    except IngestionError as e:
        logger.warning(f"Ingestion of {name} failed: {e}")
        return IngestionResult(success=False, error=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error ingesting {name}: {e}")
        return IngestionResult(success=False, error=str(e))

    logger.info(
        f"Ingested {name}: {result.summary.record_count} rows, "
        f"{result.summary.duplicates_removed} duplicates removed"
    )
    return result


def _rows_frame(rows: List[IngestedRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "product_name": row.product_name,
                "month": row.month,
                "quantity": row.quantity,
                "total": row.total,
            }
            for row in rows
        ],
        columns=["product_name", "month", "quantity", "total"],
    )


def summarize_by_product_month(rows: List[IngestedRow]) -> List[MonthlyProductSummary]:
    """
    Quantity and revenue per (product, month).

    Rows without a month are left out. Results are sorted by month, then
    product name.
    """
    df = _rows_frame(rows)
    df = df[df["month"].notna()]
    if df.empty:
        return []

    grouped = (
        df.groupby(["product_name", "month"], sort=False)
        .agg(
            total_quantity=("quantity", "sum"),
            total_revenue=("total", "sum"),
            record_count=("quantity", "size"),
        )
        .reset_index()
        .sort_values(["month", "product_name"])
    )
    return [
        MonthlyProductSummary(
            product_name=rec["product_name"],
            month=rec["month"],
            total_quantity=float(rec["total_quantity"]),
            total_revenue=float(rec["total_revenue"]),
            record_count=int(rec["record_count"]),
        )
        for rec in grouped.to_dict("records")
    ]


def summarize_by_product(rows: List[IngestedRow]) -> List[ProductSummary]:
    """Quantity and revenue per product across all rows, highest revenue first."""
    df = _rows_frame(rows)
    if df.empty:
        return []

    grouped = (
        df.groupby("product_name", sort=False)
        .agg(
            total_quantity=("quantity", "sum"),
            total_revenue=("total", "sum"),
            record_count=("quantity", "size"),
        )
        .reset_index()
        .sort_values("total_revenue", ascending=False, kind="stable")
    )
    return [
        ProductSummary(
            product_name=rec["product_name"],
            total_quantity=float(rec["total_quantity"]),
            total_revenue=float(rec["total_revenue"]),
            record_count=int(rec["record_count"]),
        )
        for rec in grouped.to_dict("records")
    ]
