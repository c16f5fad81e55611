"""Monthly pivot data models."""
from typing import Dict

from pydantic import BaseModel, Field


class PivotRow(BaseModel):
    """Affirmative donation counts for one month."""

    month: str = Field(..., description="Month key YYYY-MM")
    counts: Dict[str, Dict[str, int]] = Field(
        default_factory=dict, description="location -> species (Dog/Cat) -> count"
    )
    total_dog: int = 0
    total_cat: int = 0
    total: int = 0

    def cell(self, location: str, species: str) -> int:
        """Count for one location/species cell, zero when absent."""
        return self.counts.get(location, {}).get(species, 0)


class LocationDetail(BaseModel):
    """Drill-down line for a single month and location."""

    location: str
    dog: int = 0
    cat: int = 0
    total: int = 0
