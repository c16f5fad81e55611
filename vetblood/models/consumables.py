"""Consumables usage and sales models."""
from typing import List

from pydantic import BaseModel, Field


class UsageRecord(BaseModel):
    """One medicine/blood-product usage line."""

    product_name: str
    product_type: str = ""
    quantity: float = 0.0
    source: str = ""
    month_year: str = Field("", description="MM/YYYY taken from the file name")


class SalesRecord(BaseModel):
    """One product sales line."""

    product_name: str
    quantity: float = 0.0
    total_amount: float = 0.0
    month_year: str = Field("", description="MM/YYYY taken from the file name")


class UsageSummary(BaseModel):
    """Usage totals grouped by product type (or name when no type is given)."""

    product_type: str
    total_quantity: float = 0.0


class SalesProductSummary(BaseModel):
    """Sales totals for one product."""

    product_name: str
    total_quantity: float = 0.0
    total_revenue: float = 0.0


class SalesSummary(BaseModel):
    """Per-product sales totals plus the monthly grand total."""

    products: List[SalesProductSummary] = Field(default_factory=list)
    grand_total: float = 0.0
