"""
Unit tests for the monthly data panels.
"""

from datetime import date
from unittest.mock import patch

import pytest

from vetblood.services.monthly_data import ExternalCellsLedger, MonthlyDataManager
from vetblood.storage.kv_store import LocalJSONStore
from vetblood.utils.exceptions import IngestionError, StorageError

EXTERNAL_ROWS = [
    {"D": "דם מלא חיצוני", "G": "2", "H": "x"},
    {"D": "דם מלא חיצוני", "G": "3", "H": "x"},
    {"D": "פלסמה חיצוני", "G": "1", "H": "x"},
    {"D": "Antibiotic", "G": "9", "H": "x"},
]
SALES_ROWS = [
    {"A": "Plasma", "B": "2", "F": "100.5"},
    {"A": "Plasma", "B": "1", "F": "50"},
    {"A": "Blood Bag", "B": "1", "F": ""},
]


@pytest.fixture
def manager(memory_store):
    return MonthlyDataManager(memory_store)


@pytest.fixture
def ledger(memory_store):
    return ExternalCellsLedger(memory_store)


@pytest.fixture
def corrupt_store(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    return LocalJSONStore(str(path))


class TestDetectDataType:
    """Test export type detection."""

    def test_external(self):
        assert MonthlyDataManager.detect_data_type(EXTERNAL_ROWS) == "external"

    def test_sales(self):
        assert MonthlyDataManager.detect_data_type(SALES_ROWS) == "sales"

    @pytest.mark.parametrize("rows", [[], [{"D": "Antibiotic", "G": "1", "H": "x"}], {"A": 1}, ["x"]])
    def test_unknown(self, rows):
        assert MonthlyDataManager.detect_data_type(rows) is None


class TestMonthlyDataManager:
    """Test storing and summarizing monthly uploads."""

    def test_external_summary(self):
        result = MonthlyDataManager.process_external_data(EXTERNAL_ROWS)

        assert result["summary"] == [
            {"type": "דם מלא חיצוני", "totalQuantity": 5},
            {"type": "פלסמה חיצוני", "totalQuantity": 1},
        ]
        assert result["totalItems"] == 6
        assert result["rawData"] == EXTERNAL_ROWS

    def test_sales_summary(self):
        result = MonthlyDataManager.process_sales_data(SALES_ROWS)

        assert result["summary"] == [{"type": "Plasma", "totalQuantity": 3, "totalAmount": 150.5}]
        assert result["totalAmount"] == 150.5

    def test_upload_and_load(self, manager, memory_store):
        """Test that uploads are stored under one key per month and type."""
        assert manager.upload("2024-05", EXTERNAL_ROWS) == "external"
        assert manager.upload("2024-05", SALES_ROWS) == "sales"
        manager.upload("2023-12", SALES_ROWS)

        assert memory_store.keys("monthly_data_") == [
            "monthly_data_2023-12_sales",
            "monthly_data_2024-05_external",
            "monthly_data_2024-05_sales",
        ]
        data = manager.load_all()
        assert set(data) == {"2024-05", "2023-12"}
        assert data["2024-05"]["external"]["totalItems"] == 6

    def test_upload_requires_month(self, manager):
        with pytest.raises(IngestionError, match="Please select a month first"):
            manager.upload("", SALES_ROWS)

    def test_upload_requires_array(self, manager):
        with pytest.raises(IngestionError, match="expected an array"):
            manager.upload("2024-05", {"A": "x"})

    def test_upload_unrecognized(self, manager):
        with pytest.raises(IngestionError, match="Could not detect data type"):
            manager.upload("2024-05", [{"Z": "1"}])

    def test_delete(self, manager):
        manager.upload("2024-05", SALES_ROWS)

        assert manager.delete("2024-05", "sales") is True
        assert manager.load_all() == {}

    def test_corrupt_entry_skipped(self, manager, memory_store):
        memory_store.set("monthly_data_2024-05_sales", "{broken")
        assert manager.load_all() == {}

    def test_yearly_summary(self, manager):
        manager.upload("2024-05", EXTERNAL_ROWS)
        manager.upload("2024-05", SALES_ROWS)
        manager.upload("2024-06", SALES_ROWS)

        summary = manager.yearly_summary()

        assert summary["2024"]["external"] == {"totalItems": 6, "typeCount": 2}
        assert summary["2024"]["sales"]["totalQuantity"] == 6
        assert summary["2024"]["sales"]["totalAmount"] == 301.0

    def test_month_options(self, today):
        options = MonthlyDataManager.month_options(today)

        assert len(options) == 48
        assert options[0] == {"value": "2025-12", "label": "December 2025"}
        assert options[-1]["value"] == "2022-01"


class TestExternalCellsLedger:
    """Test the external blood product ledger."""

    def test_save_coerces_values(self, ledger):
        counts = ledger.save_month("2024-03", {"wholeBloodDog": "3", "plasmaCat": "abc", "pcDog": "1.5"})

        assert counts["wholeBloodDog"] == 3
        assert counts["plasmaCat"] == 0
        assert counts["pcDog"] == 1.5
        assert counts["wholeBloodCat"] == 0
        assert ledger.get_month("2024-03") == counts

    def test_save_requires_month(self, ledger):
        with pytest.raises(IngestionError):
            ledger.save_month("", {})

    def test_unsaved_month_blank(self, ledger):
        assert set(ledger.get_month("2024-01").values()) == {""}

    def test_generate_months(self):
        months = ExternalCellsLedger.generate_months(date(2024, 6, 1))

        assert months[0] == {"key": "2024-01", "name": "January 2024"}
        assert months[-1]["key"] == "2025-06"
        assert len(months) == 18

    def test_chart_rows(self, ledger, today):
        ledger.save_month("2024-04", {"wholeBloodDog": 2, "plasmaDog": 1})
        ledger.save_month("2024-02", {"wholeBloodCat": 1})
        ledger.save_month("2019-01", {"wholeBloodCat": 5})

        rows = ledger.chart_rows(today)

        assert [r["monthKey"] for r in rows] == ["2024-02", "2024-04"]
        assert rows[1]["total"] == 3
        assert rows[1]["month"] == "April 2024"


class TestUnreadableStore:
    """Test that storage failures are logged and answered with defaults."""

    def test_load_all_empty(self, corrupt_store):
        assert MonthlyDataManager(corrupt_store).load_all() == {}
        assert MonthlyDataManager(corrupt_store).yearly_summary() == {}

    def test_upload_reports_failure(self, corrupt_store):
        assert MonthlyDataManager(corrupt_store).upload("2024-05", SALES_ROWS) is None

    def test_delete_reports_failure(self, corrupt_store):
        assert MonthlyDataManager(corrupt_store).delete("2024-05", "sales") is False

    def test_ledger_reads_blank(self, corrupt_store, today):
        ledger = ExternalCellsLedger(corrupt_store)

        assert set(ledger.get_month("2024-01").values()) == {""}
        assert ledger.chart_rows(today) == []

    def test_ledger_save_reports_failure(self, corrupt_store):
        assert ExternalCellsLedger(corrupt_store).save_month("2024-01", {"wholeBloodDog": 1}) is None

    def test_ledger_not_overwritten_after_failed_read(self, ledger, memory_store):
        """Test that a failed read does not replace the other saved months."""
        ledger.save_month("2024-01", {"wholeBloodDog": 4})
        stored = memory_store.get("external_cells_data")

        with patch.object(memory_store, "get", side_effect=StorageError("disk gone")):
            assert ledger.save_month("2024-02", {"plasmaCat": 1}) is None

        assert memory_store.get("external_cells_data") == stored
        assert ledger.get_month("2024-01")["wholeBloodDog"] == 4
