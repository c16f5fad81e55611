"""
Data models for donor records, pivots and spreadsheet ingestion.
"""

from .consumables import SalesProductSummary, SalesRecord, SalesSummary, UsageRecord, UsageSummary
from .donor import DonorRecord
from .ingestion import (
    DoseRecord,
    IngestedRow,
    IngestionResult,
    IngestionSummary,
    ItemCellsAnalysis,
    MedicineAnalysis,
    MonthlyProductSummary,
    ParsedFile,
    ProductSummary,
    SchemaValidation,
)
from .pivot import LocationDetail, PivotRow

__all__ = [
    "DonorRecord",
    "PivotRow",
    "LocationDetail",
    "IngestedRow",
    "IngestionResult",
    "IngestionSummary",
    "MonthlyProductSummary",
    "ParsedFile",
    "DoseRecord",
    "MedicineAnalysis",
    "ItemCellsAnalysis",
    "ProductSummary",
    "SchemaValidation",
    "UsageRecord",
    "SalesRecord",
    "UsageSummary",
    "SalesProductSummary",
    "SalesSummary",
]
