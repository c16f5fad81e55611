"""
Monthly data panels.

MonthlyDataManager keeps per-month usage and sales summaries uploaded as
column-letter JSON exports (A, B, D, F, G, H keys). ExternalCellsLedger keeps
hand-entered monthly counts of external blood products.
"""

import calendar
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from vetblood.constants import EXTERNAL_CELL_PRODUCTS, MONTHLY_DATA_PREFIX, STORAGE_KEYS
from vetblood.storage.kv_store import KeyValueStore
from vetblood.utils.exceptions import IngestionError
from vetblood.utils.parsing import parse_number

logger = logging.getLogger(__name__)

EXTERNAL_KEYWORD = "חיצוני"
LEDGER_START = (2024, 1)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _parse_int(value: Any) -> int:
    number = parse_number(value)
    return int(number) if number is not None else 0


def _add_months(year: int, month: int, count: int):
    index = year * 12 + (month - 1) + count
    return index // 12, index % 12 + 1


def _month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


class MonthlyDataManager:
    """Per-month external usage and sales summaries."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def detect_data_type(rows: Any) -> Optional[str]:
        """
        Guess what kind of export a JSON array is from its first row.

        Returns:
            'external', 'sales' or None
        """
        if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
            return None

        first = rows[0]
        if first.get("D") and first.get("G") and first.get("H"):
            if EXTERNAL_KEYWORD in _text(first.get("D")):
                return "external"

        if first.get("A") and first.get("B") and first.get("F"):
            return "sales"

        return None

    @staticmethod
    def process_external_data(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Sum quantity (G) per external product description (D)."""
        summary: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            description = _text(row.get("D"))
            if EXTERNAL_KEYWORD not in description:
                continue
            product_type = description.strip()
            entry = summary.setdefault(product_type, {"type": product_type, "totalQuantity": 0})
            entry["totalQuantity"] += _parse_int(row.get("G"))

        items = list(summary.values())
        return {
            "rawData": rows,
            "summary": items,
            "totalItems": sum(item["totalQuantity"] for item in items),
        }

    @staticmethod
    def process_sales_data(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Sum quantity (B) and amount (F) per product (A)."""
        summary: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            if not (row.get("A") and row.get("B") and row.get("F")):
                continue
            product_type = str(row["A"]).strip()
            entry = summary.setdefault(
                product_type, {"type": product_type, "totalQuantity": 0, "totalAmount": 0.0}
            )
            entry["totalQuantity"] += _parse_int(row.get("B"))
            entry["totalAmount"] += parse_number(row.get("F")) or 0.0

        items = list(summary.values())
        return {
            "rawData": rows,
            "summary": items,
            "totalQuantity": sum(item["totalQuantity"] for item in items),
            "totalAmount": sum(item["totalAmount"] for item in items),
        }

    @staticmethod
    def storage_key(month: str, data_type: str) -> str:
        return f"{MONTHLY_DATA_PREFIX}{month}_{data_type}"

    def upload(self, month: str, rows: Any) -> Optional[str]:
        """
        Detect, summarize and store one month's export.

        Args:
            month: Month key YYYY-MM
            rows: Parsed JSON array

        Returns:
            The detected data type, or None when the store could not be written

        Raises:
            IngestionError: If no month is given or the rows are not recognized
        """
        if not month:
            raise IngestionError("Please select a month first")
        if not isinstance(rows, list):
            raise IngestionError("Invalid JSON format - expected an array")

        data_type = self.detect_data_type(rows)
        if data_type is None:
            raise IngestionError(
                "Could not detect data type. Please ensure JSON has the correct structure."
            )

        if data_type == "external":
            processed = self.process_external_data(rows)
        else:
            processed = self.process_sales_data(rows)

        key = self.storage_key(month, data_type)
        try:
            self.store.set(key, json.dumps(processed, ensure_ascii=False))
        except Exception as e:
            logger.error(f"Error saving monthly data {key}: {e}")
            return None
        logger.info(f"Stored {data_type} data for {month}")
        return data_type

    def load_all(self) -> Dict[str, Dict[str, Any]]:
        """All stored summaries keyed by month then data type."""
        data: Dict[str, Dict[str, Any]] = {}
        try:
            keys = self.store.keys(MONTHLY_DATA_PREFIX)
        except Exception as e:
            logger.error(f"Error listing monthly data: {e}")
            return {}
        for key in keys:
            parts = key[len(MONTHLY_DATA_PREFIX):].rsplit("_", 1)
            if len(parts) != 2:
                continue
            month, data_type = parts
            try:
                value = json.loads(self.store.get(key) or "null")
            except Exception as e:
                logger.error(f"Error loading monthly data {key}: {e}")
                continue
            if value is not None:
                data.setdefault(month, {})[data_type] = value
        return data

    def delete(self, month: str, data_type: str) -> bool:
        key = self.storage_key(month, data_type)
        try:
            return self.store.delete(key)
        except Exception as e:
            logger.error(f"Error deleting monthly data {key}: {e}")
            return False

    def yearly_summary(self) -> Dict[str, Dict[str, Dict[str, float]]]:
        """Totals per year across every stored month."""
        summary: Dict[str, Dict[str, Dict[str, float]]] = {}
        for month, types in self.load_all().items():
            year = month.split("-")[0]
            totals = summary.setdefault(
                year,
                {
                    "external": {"totalItems": 0, "typeCount": 0},
                    "sales": {"totalQuantity": 0, "totalAmount": 0.0, "typeCount": 0},
                },
            )
            external = types.get("external")
            if external:
                totals["external"]["totalItems"] += external.get("totalItems", 0)
                totals["external"]["typeCount"] += len(external.get("summary", []))
            sales = types.get("sales")
            if sales:
                totals["sales"]["totalQuantity"] += sales.get("totalQuantity", 0)
                totals["sales"]["totalAmount"] += sales.get("totalAmount", 0.0)
                totals["sales"]["typeCount"] += len(sales.get("summary", []))
        return summary

    @staticmethod
    def month_options(today: Optional[date] = None) -> List[Dict[str, str]]:
        """Months from two years back to next year, newest first."""
        today = today or date.today()
        options = []
        for year in range(today.year - 2, today.year + 2):
            for month in range(1, 13):
                options.append({"value": f"{year}-{month:02d}", "label": _month_label(year, month)})
        options.reverse()
        return options


class ExternalCellsLedger:
    """Monthly counts of external blood products sold."""

    PRODUCT_KEYS = [key for key, _ in EXTERNAL_CELL_PRODUCTS]

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _read(self) -> Optional[Dict[str, Dict[str, int]]]:
        try:
            raw = self.store.get(STORAGE_KEYS["EXTERNAL_CELLS_DATA"])
            data = json.loads(raw) if raw else {}
        except Exception as e:
            logger.error(f"Error reading external cells data: {e}")
            return None
        return data if isinstance(data, dict) else {}

    def load(self) -> Dict[str, Dict[str, int]]:
        return self._read() or {}

    def save_month(self, month: str, values: Dict[str, Any]) -> Optional[Dict[str, int]]:
        """
        Store one month's counts; missing or non-numeric values become 0.

        Returns:
            The stored counts, or None when the ledger could not be read or written

        Raises:
            IngestionError: If no month is given
        """
        if not month:
            raise IngestionError("Please select a month first")

        counts = {}
        for key in self.PRODUCT_KEYS:
            number = parse_number(values.get(key)) or 0.0
            counts[key] = int(number) if number.is_integer() else number

        # An unreadable ledger is left alone so other months are not overwritten
        data = self._read()
        if data is None:
            return None
        data[month] = counts
        try:
            self.store.set(STORAGE_KEYS["EXTERNAL_CELLS_DATA"], json.dumps(data))
        except Exception as e:
            logger.error(f"Error saving external cells data for {month}: {e}")
            return None
        return counts

    def get_month(self, month: str) -> Dict[str, Any]:
        """Stored counts for a month, or blank values when none were saved."""
        return self.load().get(month) or {key: "" for key in self.PRODUCT_KEYS}

    @staticmethod
    def generate_months(today: Optional[date] = None) -> List[Dict[str, str]]:
        """Months from January 2024 until twelve months after the current one."""
        today = today or date.today()
        end = (today.year + 1, today.month)
        months = []
        year, month = LEDGER_START
        while (year, month) <= end:
            months.append({"key": f"{year}-{month:02d}", "name": _month_label(year, month)})
            year, month = _add_months(year, month, 1)
        return months

    def chart_rows(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Saved months in calendar order, each with its total."""
        data = self.load()
        rows = []
        for month in self.generate_months(today):
            counts = data.get(month["key"])
            if not counts:
                continue
            row = {"month": month["name"], "monthKey": month["key"]}
            row.update({key: counts.get(key, 0) for key in self.PRODUCT_KEYS})
            row["total"] = sum(counts.get(key, 0) for key in self.PRODUCT_KEYS)
            rows.append(row)
        return sorted(rows, key=lambda r: r["monthKey"])
