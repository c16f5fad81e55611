"""Spreadsheet ingestion data models."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IngestedRow(BaseModel):
    """A normalized product row from an uploaded file."""

    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = Field(None, description="ISO date, None when unparseable")
    month: Optional[str] = Field(None, description="YYYY-MM derived from date")
    product_name: str = Field("", alias="productName")
    quantity: float = 0.0
    price: float = 0.0
    total: float = 0.0
    key: str = Field("", description="Composite deduplication key")


class SchemaValidation(BaseModel):
    """Outcome of checking mapped columns against the required fields."""

    is_valid: bool
    missing_fields: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    available_fields: List[str] = Field(default_factory=list)


class IngestionSummary(BaseModel):
    """Totals describing one ingested file."""

    file_name: str
    record_count: int = 0
    duplicates_removed: int = 0
    total_quantity: float = 0.0
    total_revenue: float = 0.0
    unique_products: int = 0
    months_spanned: int = 0
    field_mapping: Dict[str, str] = Field(default_factory=dict)


class IngestionResult(BaseModel):
    """Result of running a file through the ingestion pipeline."""

    success: bool
    data: List[IngestedRow] = Field(default_factory=list)
    summary: Optional[IngestionSummary] = None
    validation: Optional[SchemaValidation] = None
    error: Optional[str] = None


class ParsedFile(BaseModel):
    """Transient in-memory representation of an uploaded file."""

    name: str
    size: int = 0
    file_type: str = Field(..., description="csv, excel or json")
    content_type: str = Field("unknown", description="medicine, itemcells, basic or unknown")
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    record_count: int = 0
    upload_date: datetime = Field(default_factory=datetime.now)


class MonthlyProductSummary(BaseModel):
    """Quantity and revenue for one product within one month."""

    product_name: str
    month: str
    total_quantity: float = 0.0
    total_revenue: float = 0.0
    record_count: int = 0


class ProductSummary(BaseModel):
    """Quantity and revenue for one product across all months."""

    product_name: str
    total_quantity: float = 0.0
    total_revenue: float = 0.0
    record_count: int = 0


class DoseRecord(BaseModel):
    """One administered dose found in a medicine file."""

    drug: str = "Unknown"
    dose: Optional[float] = None
    unit: str = ""
    month: Optional[str] = Field(None, description="YYYY-MM of the administration date")
    raw_data: Dict[str, Any] = Field(default_factory=dict)


class MedicineAnalysis(BaseModel):
    """External versus internal doses in a medicine file."""

    file_name: str
    external_doses: List[DoseRecord] = Field(default_factory=list)
    internal_doses: List[DoseRecord] = Field(default_factory=list)
    dose_types: List[str] = Field(default_factory=list)
    months: List[str] = Field(default_factory=list)


class ItemCellsAnalysis(BaseModel):
    """Quantities per item type and month in an inventory file."""

    file_name: str
    items_by_month: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    dose_types: List[str] = Field(default_factory=list)
    months: List[str] = Field(default_factory=list)
    totals_by_type: Dict[str, float] = Field(default_factory=dict)
