"""
Unit tests for donation eligibility, highlighting and the upcoming list.
"""

from datetime import timedelta

import pytest

from vetblood.services.eligibility import (
    highlight_key,
    highlighted_donors,
    is_animal_highlighted,
    mark_as_donated,
    next_eligible_date,
    upcoming_donors,
)


@pytest.fixture
def donated(today):
    """Build a donor record whose last donation was a number of days before today."""

    def _build(days_ago, **overrides):
        record = {
            "id": "rex_dana",
            "animalName": "Rex",
            "animalType": "Dog",
            "location": "רחובות",
            "date": (today - timedelta(days=days_ago)).isoformat(),
        }
        record.update(overrides)
        return record

    return _build


class TestHighlightKey:
    """Test the suppression key."""

    def test_uses_id(self):
        assert highlight_key({"id": "rex_dana", "animalName": "Rex", "date": "2024-01-01"}) == "rex_dana"

    def test_falls_back_to_name_and_date(self):
        assert highlight_key({"animalName": "Rex", "date": "2024-01-01"}) == "Rex_2024-01-01"


class TestIsAnimalHighlighted:
    """Test the highlight window around the next eligible date."""

    @pytest.mark.parametrize("days_ago", [83, 90, 97, 104])
    def test_inside_window(self, donated, today, days_ago):
        """Test that diffs from -7 to +14 days are highlighted."""
        assert is_animal_highlighted(donated(days_ago), today=today) is True

    @pytest.mark.parametrize("days_ago", [10, 82, 105, 200])
    def test_outside_window(self, donated, today, days_ago):
        assert is_animal_highlighted(donated(days_ago), today=today) is False

    def test_cat_highlighted(self, donated, today):
        assert is_animal_highlighted(donated(90, animalType="cat"), today=today) is True

    def test_other_species_not_highlighted(self, donated, today):
        assert is_animal_highlighted(donated(90, animalType="Rabbit"), today=today) is False

    def test_numeric_name_not_highlighted(self, donated, today):
        assert is_animal_highlighted(donated(90, animalName="123"), today=today) is False

    def test_unparseable_date_not_highlighted(self, donated, today):
        assert is_animal_highlighted(donated(90, date="soon"), today=today) is False

    def test_day_first_date(self, donated, today):
        """Test that DD/MM/YYYY dates are understood."""
        record = donated(90)
        record["date"] = (today - timedelta(days=90)).strftime("%d/%m/%Y")
        assert is_animal_highlighted(record, today=today) is True

    def test_suppressed_by_id(self, donated, today):
        assert is_animal_highlighted(donated(90), suppressed={"rex_dana"}, today=today) is False

    def test_suppressed_by_name_and_date(self, donated, today):
        record = donated(90, id="")
        key = f"Rex_{record['date']}"
        assert is_animal_highlighted(record, suppressed=[key], today=today) is False

    def test_non_dict(self, today):
        assert is_animal_highlighted("Rex", today=today) is False


class TestNextEligibleDate:
    """Test the next eligible date."""

    def test_ninety_days_after(self, donated, today):
        assert next_eligible_date(donated(0)) == today + timedelta(days=90)

    def test_invalid_date(self):
        assert next_eligible_date({"date": ""}) is None


class TestHighlightedDonors:
    """Test filtering a collection by highlight."""

    def test_filters_and_suppresses(self, donated, today):
        due = donated(90)
        due_other = donated(95, id="bolt_noa", animalName="Bolt")
        not_due = donated(20, id="luna_avi", animalName="Luna")

        result = highlighted_donors([due, due_other, not_due], suppressed={"bolt_noa"}, today=today)

        assert result == [due]


class TestUpcomingDonors:
    """Test the upcoming donations list."""

    @pytest.mark.parametrize("days_ago", [90, 93, 97])
    def test_inside_window(self, donated, today, days_ago):
        assert len(upcoming_donors([donated(days_ago)], today=today)) == 1

    @pytest.mark.parametrize("days_ago", [85, 89, 98, 104])
    def test_outside_window(self, donated, today, days_ago):
        assert upcoming_donors([donated(days_ago)], today=today) == []

    def test_windows_differ(self, donated, today):
        """Test that a highlighted animal is not necessarily upcoming."""
        record = donated(85)
        assert is_animal_highlighted(record, today=today) is True
        assert upcoming_donors([record], today=today) == []

    def test_latest_record_per_animal_and_location(self, donated, today):
        """Test that only the newest visit of each animal at a site counts."""
        old = donated(200)
        recent = donated(92)
        assert upcoming_donors([old, recent], today=today) == [recent]

        newer = donated(10)
        assert upcoming_donors([old, recent, newer], today=today) == []

    def test_same_animal_at_two_locations(self, donated, today):
        here = donated(92)
        there = donated(10, location="חולון")
        assert upcoming_donors([here, there], today=today) == [here]

    def test_missing_location_skipped(self, donated, today):
        assert upcoming_donors([donated(92, location="")], today=today) == []

    def test_location_filter(self, donated, today):
        here = donated(92)
        there = donated(92, animalName="Bolt", location="חולון")
        assert upcoming_donors([here, there], today=today, location="חולון") == [there]


class TestMarkAsDonated:
    """Test recording a new donation."""

    def test_updates_matching_records(self, donated, today):
        """Test that every matching record moves to today."""
        first = donated(95)
        copy = dict(first, notes="duplicate visit")
        other = donated(95, animalName="Bolt")
        records = [first, copy, other]

        count = mark_as_donated(records, dict(first), today=today)

        assert count == 2
        assert first["date"] == today.isoformat()
        assert first["next"] == (today + timedelta(days=90)).isoformat()
        assert copy["date"] == today.isoformat()
        assert other["date"] == (today - timedelta(days=95)).isoformat()
        assert "next" not in other

    def test_no_match(self, donated, today, caplog):
        records = [donated(95)]
        assert mark_as_donated(records, donated(95, location="חולון"), today=today) == 0
        assert "No donor matched" in caplog.text
