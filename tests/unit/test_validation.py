"""
Unit tests for donor validation and sanitization.
"""

import pytest

from vetblood.services.validation import (
    is_valid_blood_type,
    is_valid_phone,
    sanitize_donor,
    sanitize_text,
    validate_donor,
    validate_donor_form,
)


class TestValidateDonorForm:
    """Test form validation messages."""

    def test_valid_form(self, dog_form):
        assert validate_donor_form(dog_form) == (True, {})

    def test_required_fields(self):
        """Test that an empty form reports every required field."""
        is_valid, errors = validate_donor_form({})

        assert is_valid is False
        assert errors == {
            "animalName": "שם הבעל חי נדרש",
            "location": "מיקום נדרש",
            "date": "תאריך נדרש",
            "animalType": "סוג בעל חי נדרש",
        }

    def test_numeric_name(self, dog_form):
        dog_form["animalName"] = "1234"
        _, errors = validate_donor_form(dog_form)
        assert errors == {"animalName": "שם הבעל חי חייב להכיל אותיות"}

    def test_invalid_date(self, dog_form):
        dog_form["date"] = "not a date"
        _, errors = validate_donor_form(dog_form)
        assert errors == {"date": "תאריך לא תקין"}

    @pytest.mark.parametrize(
        "field, value",
        [("age", "60"), ("age", "0"), ("weight", "250"), ("weight", "-1"), ("pcv", "5"), ("pcv", "81")],
    )
    def test_out_of_range(self, dog_form, field, value):
        dog_form[field] = value
        _, errors = validate_donor_form(dog_form)
        assert list(errors) == [field]

    def test_pcv_bounds_inclusive(self, dog_form):
        dog_form["pcv"] = "80"
        assert validate_donor_form(dog_form)[0] is True
        dog_form["pcv"] = "10"
        assert validate_donor_form(dog_form)[0] is True

    def test_blood_type_for_species(self, dog_form):
        dog_form["animalType"] = "Cat"
        _, errors = validate_donor_form(dog_form)
        assert errors == {"bloodType": "סוג דם לא תקין לסוג הבעל חי"}


class TestIsValidBloodType:
    """Test species-aware blood types."""

    @pytest.mark.parametrize("blood_type", ["DEA 1.1 Positive", "DEA 1.1 Negative", "DEA 1.1+", "DEA 1.2-"])
    def test_dog_types(self, blood_type):
        assert is_valid_blood_type(blood_type, "Dog") is True

    def test_cat_rejects_dog_type(self):
        assert is_valid_blood_type("DEA 1.1+", "cat") is False
        assert is_valid_blood_type("AB", "cat") is True

    def test_blank_and_other_species(self):
        assert is_valid_blood_type("", "Dog") is True
        assert is_valid_blood_type("anything", "Rabbit") is True


class TestIsValidPhone:
    """Test phone validation."""

    @pytest.mark.parametrize("phone", ["050-1234567", "03 123 4567", "0501234567"])
    def test_valid(self, phone):
        assert is_valid_phone(phone) is True

    @pytest.mark.parametrize("phone", ["", None, "1234", "050-12345678"])
    def test_invalid(self, phone):
        assert is_valid_phone(phone) is False


class TestValidateDonor:
    """Test record validation for imports."""

    def test_valid(self, dog_form):
        assert validate_donor(dog_form) == (True, [])

    def test_not_a_dict(self):
        assert validate_donor("Rex") == (False, ["Donor must be an object"])

    def test_missing_fields(self):
        is_valid, errors = validate_donor({"date": "31/02/2024"})

        assert is_valid is False
        assert "Animal name is required" in errors
        assert "Animal type is required" in errors
        assert "Location is required" in errors
        assert "Date must be in valid format" in errors

    def test_negative_number(self, dog_form):
        dog_form["weight"] = "-3"
        assert validate_donor(dog_form) == (False, ["weight must be a positive number"])


class TestSanitize:
    """Test record sanitization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("<script>alert(1)</script>calm", "calm"),
            ("javascript:alert(1)", "alert(1)"),
            ("<img onerror=x>", "<img x>"),
            ("  plain  ", "plain"),
        ],
    )
    def test_sanitize_text(self, raw, expected):
        assert sanitize_text(raw) == expected

    def test_numeric_fields_canonicalized(self, dog_form):
        dog_form.update({"weight": "32.50", "age": "abc", "volume": 450})
        result = sanitize_donor(dog_form)

        assert result["weight"] == "32.5"
        assert result["age"] == ""
        assert result["volume"] == "450"

    def test_invalid_date_cleared(self, dog_form):
        dog_form["date"] = "never"
        assert sanitize_donor(dog_form)["date"] == ""

    def test_private_owner_flag(self, dog_form):
        dog_form["isPrivateOwner"] = "true"
        assert sanitize_donor(dog_form)["isPrivateOwner"] is True
        dog_form["isPrivateOwner"] = "no"
        assert sanitize_donor(dog_form)["isPrivateOwner"] is False

    def test_id_and_next_kept(self, dog_form):
        dog_form.update({"id": "rex_dana", "next": "2024-05-30"})
        result = sanitize_donor(dog_form)

        assert result["id"] == "rex_dana"
        assert result["next"] == "2024-05-30"

    def test_none_text_becomes_empty(self, dog_form):
        dog_form["notes"] = None
        assert sanitize_donor(dog_form)["notes"] == ""

    def test_non_dict(self):
        assert sanitize_donor(["Rex"]) == {}
