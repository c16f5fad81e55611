"""
Spreadsheet, CSV and JSON ingestion for the consumables panels.
"""

from .consumables import ConsumablesPanel, extract_month_from_filename, find_column_value, parse_file
from .field_mapping import map_field_names, validate_schema
from .pipeline import ingest, summarize_by_product, summarize_by_product_month
from .readers import find_header_row, read_rows

__all__ = [
    "ConsumablesPanel",
    "extract_month_from_filename",
    "find_column_value",
    "find_header_row",
    "ingest",
    "map_field_names",
    "parse_file",
    "read_rows",
    "summarize_by_product",
    "summarize_by_product_month",
    "validate_schema",
]
