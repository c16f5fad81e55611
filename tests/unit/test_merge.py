"""
Unit tests for merging donor collections.
"""

from vetblood.services.merge import merge_donors


def _dog(name, owner, date="2024-01-15", **extra):
    record = {"animalName": name, "ownerName": owner, "animalType": "Dog", "date": date, "location": "רחובות"}
    record.update(extra)
    return record


class TestMergeDonors:
    """Test merge_donors upsert semantics."""

    def test_new_ids_appended(self, sample_donors):
        incoming = [_dog("Luna", "Avi")]
        result = merge_donors(sample_donors, incoming)

        assert [r["id"] for r in result] == ["rex_dana", "mitzi_avi", "bolt_noa", "luna_avi"]

    def test_existing_id_replaced_in_place(self, sample_donors):
        """Test that an incoming record with a known id keeps its position."""
        updated = dict(sample_donors[0], weight="33")
        result = merge_donors(sample_donors, [updated])

        assert len(result) == 3
        assert result[0]["id"] == "rex_dana"
        assert result[0]["weight"] == "33"

    def test_derived_id_matches_stored_record(self, sample_donors):
        """Test that an import without ids updates the stored animal."""
        result = merge_donors(sample_donors, [_dog("Rex", "Dana", date="2024-05-01")])

        assert len(result) == 3
        assert result[0]["date"] == "2024-05-01"

    def test_later_record_with_same_id_wins(self):
        incoming = [_dog("Rex", "Dana", date="2024-01-01"), _dog("Rex", "Dana", date="2024-04-01")]
        result = merge_donors([], incoming)

        assert len(result) == 1
        assert result[0]["date"] == "2024-04-01"

    def test_exact_duplicates_removed(self):
        """Test that records differing only in owner collapse to one."""
        current = [_dog("Rex", "Dana")]
        incoming = [_dog("Rex", "Dana's brother")]
        result = merge_donors(current, incoming)

        assert len(result) == 1
        assert result[0]["id"] == "rex_dana"

    def test_merge_with_nothing_normalizes(self):
        current = [_dog("Rex", "Dana"), _dog("Rex", "Dana")]
        result = merge_donors(current, [])

        assert result == [dict(_dog("Rex", "Dana"), id="rex_dana")]

    def test_idempotent(self, sample_donors):
        incoming = [_dog("Luna", "Avi"), dict(sample_donors[1], notes="checked")]
        once = merge_donors(sample_donors, incoming)
        twice = merge_donors(once, incoming)

        assert twice == once

    def test_replace_discards_current(self, sample_donors):
        """Test that replace keeps only the normalized incoming records."""
        incoming = [_dog("Luna", "Avi"), _dog("Luna", "Avi")]
        result = merge_donors(sample_donors, incoming, replace=True)

        assert result == [dict(_dog("Luna", "Avi"), id="luna_avi")]

    def test_inputs_not_mutated(self, sample_donors):
        incoming = [_dog("Luna", "Avi")]
        snapshot = [dict(r) for r in sample_donors]
        merge_donors(sample_donors, incoming)

        assert sample_donors == snapshot
        assert "id" not in incoming[0]
