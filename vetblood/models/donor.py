"""Donor data models."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vetblood.constants import BLOOD_TYPES, LEGACY_DOG_BLOOD_TYPES


class DonorRecord(BaseModel):
    """One logged animal blood donation visit.

    Persisted records are plain JSON objects with camelCase keys; this model
    is the typed view used when a form submission is committed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(None, description="Stable identity key")
    date: str = Field("", description="ISO YYYY-MM-DD or DD/MM/YYYY")
    location: str = Field("", description="Collection site")
    animal_name: str = Field("", alias="animalName")
    owner_name: str = Field("", alias="ownerName")
    owner_phone: str = Field("", alias="ownerPhone")
    age: str = ""
    weight: str = ""
    gender: str = ""
    animal_type: str = Field("", alias="animalType")
    blood_type: str = Field("", alias="bloodType")
    fiv: str = ""
    felv: str = ""
    pcv: str = ""
    hct: str = ""
    wbc: str = ""
    plt: str = ""
    packed_cell: str = Field("", alias="packedCell")
    slide_findings: str = Field("", alias="slideFindings")
    donated: str = ""
    volume: str = ""
    notes: str = ""
    is_private_owner: bool = Field(False, alias="isPrivateOwner")
    next: Optional[str] = Field(None, description="Next eligible donation date")

    @field_validator(
        "date",
        "location",
        "animal_name",
        "owner_name",
        "owner_phone",
        "age",
        "weight",
        "gender",
        "animal_type",
        "blood_type",
        "fiv",
        "felv",
        "pcv",
        "hct",
        "wbc",
        "plt",
        "packed_cell",
        "slide_findings",
        "donated",
        "volume",
        "notes",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Imported records may carry numbers or nulls where the form writes strings."""
        if v is None:
            return ""
        return str(v)

    @field_validator("is_private_owner", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes", "on")
        return bool(v)

    @model_validator(mode="after")
    def reset_incompatible_species_fields(self) -> "DonorRecord":
        """Blood type and FIV/FeLV only make sense for the selected species."""
        species = self.animal_type.strip().lower()
        if species == "dog":
            allowed = BLOOD_TYPES["DOG"] + LEGACY_DOG_BLOOD_TYPES
            if self.blood_type and self.blood_type not in allowed:
                self.blood_type = ""
            self.fiv = ""
            self.felv = ""
        elif species == "cat":
            if self.blood_type and self.blood_type not in BLOOD_TYPES["CAT"]:
                self.blood_type = ""
        return self

    @property
    def is_cat(self) -> bool:
        return self.animal_type.strip().lower() == "cat"

    @property
    def highlight_key(self) -> str:
        return self.id or f"{self.animal_name}_{self.date}"

    def to_record(self) -> Dict[str, Any]:
        """Serialize back to the persisted camelCase shape."""
        return self.model_dump(by_alias=True, exclude_none=True)
