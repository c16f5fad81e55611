"""
Unit tests for donor form state.
"""

from vetblood.services.donor_form import DEFAULT_FORM, new_form, update_form_field


class TestNewForm:
    """Test blank form creation."""

    def test_blank_without_store(self):
        form = new_form()

        assert form == DEFAULT_FORM
        assert form is not DEFAULT_FORM

    def test_prefilled_from_last_entry(self, donor_store):
        donor_store.save_last_location("חולון")
        donor_store.save_last_date("2024-03-01")

        form = new_form(donor_store)

        assert form["location"] == "חולון"
        assert form["date"] == "2024-03-01"
        assert form["animalName"] == ""


class TestUpdateFormField:
    """Test single field updates."""

    def test_species_change_resets_dependent_fields(self, dog_form):
        """Test that switching species clears blood type and infection status."""
        dog_form["fiv"] = "Negative"
        updated = update_form_field(dog_form, "animalType", "Cat")

        assert updated["animalType"] == "Cat"
        assert updated["bloodType"] == ""
        assert updated["fiv"] == ""
        assert updated["felv"] == ""
        assert updated["weight"] == "32.5"

    def test_original_not_mutated(self, dog_form):
        update_form_field(dog_form, "animalType", "Cat")
        assert dog_form["bloodType"] == "DEA 1.1 Negative"

    def test_location_and_date_remembered(self, dog_form, donor_store):
        update_form_field(dog_form, "location", "פתחיה", donor_store)
        update_form_field(dog_form, "date", "2024-04-01", donor_store)

        assert donor_store.get_last_location() == "פתחיה"
        assert donor_store.get_last_date() == "2024-04-01"

    def test_other_fields_not_remembered(self, dog_form, donor_store):
        update_form_field(dog_form, "animalName", "Bolt", donor_store)

        assert donor_store.get_last_location() == ""
