"""Donor entry form state."""

from typing import Any, Dict, Optional

from vetblood.storage.donor_store import DonorStore

DEFAULT_FORM: Dict[str, Any] = {
    "date": "",
    "location": "",
    "animalName": "",
    "ownerName": "",
    "ownerPhone": "",
    "age": "",
    "weight": "",
    "gender": "",
    "animalType": "",
    "bloodType": "",
    "fiv": "",
    "felv": "",
    "pcv": "",
    "hct": "",
    "wbc": "",
    "plt": "",
    "packedCell": "",
    "slideFindings": "",
    "donated": "",
    "volume": "",
    "notes": "",
    "isPrivateOwner": False,
}

# Fields that only make sense for a given species
SPECIES_DEPENDENT_FIELDS = ("bloodType", "fiv", "felv")


def new_form(donor_store: Optional[DonorStore] = None) -> Dict[str, Any]:
    """
    Blank form prefilled with the last used location and date.

    Args:
        donor_store: Store remembering the previous entry, optional

    Returns:
        A fresh form dict
    """
    form = dict(DEFAULT_FORM)
    if donor_store is not None:
        form["location"] = donor_store.get_last_location()
        form["date"] = donor_store.get_last_date()
    return form


def update_form_field(
    form: Dict[str, Any], name: str, value: Any, donor_store: Optional[DonorStore] = None
) -> Dict[str, Any]:
    """
    Apply one field change and return the new form.

    Changing the animal type clears the species-dependent fields. Location
    and date changes are remembered for the next blank form.
    """
    updated = {**form, name: value}
    if name == "animalType":
        for field in SPECIES_DEPENDENT_FIELDS:
            updated[field] = ""

    if donor_store is not None:
        if name == "location":
            donor_store.save_last_location(value)
        elif name == "date":
            donor_store.save_last_date(value)

    return updated
