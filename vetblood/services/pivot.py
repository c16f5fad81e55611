"""
Monthly donation pivot.

Rows are months (newest first); columns are collection locations split by
species. Only donations marked as given count toward the cells, but every
month and location present in the data gets a row or column.
"""

import calendar
import logging
from typing import Any, Dict, List

import pandas as pd

from vetblood.constants import DONATED_YES_VALUES
from vetblood.models.pivot import LocationDetail, PivotRow

logger = logging.getLogger(__name__)

SPECIES = ("Dog", "Cat")


def month_key(date_str: Any) -> str:
    """
    Month key YYYY-MM for a donor date.

    ISO dates are cut to their first seven characters; DD/MM/YYYY dates are
    rebuilt. Any other non-empty string is returned unchanged.
    """
    if not date_str or not isinstance(date_str, str):
        return ""
    if "-" in date_str:
        return date_str[:7]
    if "/" in date_str:
        parts = date_str.split("/")
        if len(parts) == 3:
            _, month, year = parts
            return f"{year}-{month.zfill(2)}"
    return date_str


def format_month(key: str) -> str:
    """Render a month key as e.g. 'January 2024'."""
    try:
        year, month = key.split("-")
        return f"{calendar.month_name[int(month)]} {int(year)}"
    except (ValueError, IndexError, AttributeError):
        return key


def is_donated_yes(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return value.strip().lower() in DONATED_YES_VALUES


def _prepare_frame(donors: List[Dict[str, Any]]) -> pd.DataFrame:
    records = [d for d in donors if isinstance(d, dict)]
    df = pd.DataFrame(
        {
            "month": [month_key(d.get("date")) for d in records],
            "location": [d.get("location") or "" for d in records],
            "species": [str(d.get("animalType") or "").strip().lower() for d in records],
            "donated": [is_donated_yes(d.get("donated")) for d in records],
        },
        columns=["month", "location", "species", "donated"],
    )
    return df


def _counts(df: pd.DataFrame) -> Dict[tuple, int]:
    if df.empty:
        return {}
    given = df[df["donated"].astype(bool)]
    if given.empty:
        return {}
    return given.groupby(["month", "location", "species"]).size().to_dict()


def pivot_locations(df: pd.DataFrame) -> List[str]:
    """Distinct non-empty locations in first-seen order."""
    return [loc for loc in df["location"].drop_duplicates().tolist() if loc]


def build_pivot(donors: List[Dict[str, Any]]) -> List[PivotRow]:
    """
    Build the month by location/species donation pivot.

    Args:
        donors: Donor records

    Returns:
        One PivotRow per month, sorted newest first
    """
    if not donors:
        return []

    df = _prepare_frame(donors)
    if df.empty:
        return []

    locations = pivot_locations(df)
    months = sorted({m for m in df["month"].tolist() if m}, reverse=True)
    counts = _counts(df)

    rows = []
    for month in months:
        cells: Dict[str, Dict[str, int]] = {}
        for location in locations:
            cells[location] = {
                species: int(counts.get((month, location, species.lower()), 0))
                for species in SPECIES
            }
        total_dog = sum(c["Dog"] for c in cells.values())
        total_cat = sum(c["Cat"] for c in cells.values())
        rows.append(
            PivotRow(
                month=month,
                counts=cells,
                total_dog=total_dog,
                total_cat=total_cat,
                total=total_dog + total_cat,
            )
        )

    logger.debug(f"Built pivot with {len(rows)} months and {len(locations)} locations")
    return rows


def month_details(donors: List[Dict[str, Any]], month: str) -> List[LocationDetail]:
    """
    Per-location drill-down for one month.

    Returns:
        Locations with at least one donation, sorted by total descending
    """
    if not donors:
        return []

    df = _prepare_frame(donors)
    counts = _counts(df)

    details = []
    for location in pivot_locations(df):
        dog = int(counts.get((month, location, "dog"), 0))
        cat = int(counts.get((month, location, "cat"), 0))
        if dog > 0 or cat > 0:
            details.append(LocationDetail(location=location, dog=dog, cat=cat, total=dog + cat))

    return sorted(details, key=lambda d: d.total, reverse=True)
