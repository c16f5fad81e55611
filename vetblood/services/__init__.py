"""
Service layer for the donor registry.

This package contains the business logic behind identity assignment,
deduplication, eligibility, merging, pivots and the monthly data panels.
"""

from .deduplication import DeduplicationService, remove_exact_duplicates
from .donor_service import DonorService
from .eligibility import is_animal_highlighted, mark_as_donated, upcoming_donors
from .identity import is_meaningful_name, normalize_donors
from .merge import merge_donors
from .monthly_data import ExternalCellsLedger, MonthlyDataManager
from .pivot import build_pivot, format_month, month_details

__all__ = [
    "DeduplicationService",
    "DonorService",
    "ExternalCellsLedger",
    "MonthlyDataManager",
    "build_pivot",
    "format_month",
    "is_animal_highlighted",
    "is_meaningful_name",
    "mark_as_donated",
    "merge_donors",
    "month_details",
    "normalize_donors",
    "remove_exact_duplicates",
    "upcoming_donors",
]
