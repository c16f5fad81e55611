"""
Consumables panels: medicine usage and item sales files.

These files come straight out of the clinic management system, so columns
are found by probing a prioritized list of candidate header names instead of
the full canonical field mapping.
"""
import logging
import re
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from vetblood.ingestion.readers import Content, file_type_for, read_rows
from vetblood.models.consumables import (
    SalesProductSummary,
    SalesRecord,
    SalesSummary,
    UsageRecord,
    UsageSummary,
)
from vetblood.models.ingestion import DoseRecord, ItemCellsAnalysis, MedicineAnalysis, ParsedFile
from vetblood.utils.exceptions import IngestionBusyError
from vetblood.utils.parsing import is_blank, parse_date, parse_number, to_number

logger = logging.getLogger(__name__)

EXTERNAL_PRODUCT_KEYWORD = "חיצונ"
EXTERNAL_SOURCE = "חיצוני"

# Candidate header names per logical column, most specific first
USAGE_PRODUCT_CANDIDATES = ["Medicine", "medicine", "מוצר", "תרופה", "שם", "שם מוצר", "Product Name"]
USAGE_QUANTITY_CANDIDATES = [
    "Quantity (units)",
    "Quantity",
    "quantity",
    "כמות",
    "כמות (יחידות)",
    "Amount",
]
USAGE_TYPE_CANDIDATES = ["Type", "type", "סוג", "סוג מנה", "Product Type"]
USAGE_SOURCE_CANDIDATES = ["מקור", "Source", "source"]

SALES_NAME_CANDIDATES = ["Name", "name", "שם", "מוצר", "שם מוצר", "Product Name"]
SALES_QUANTITY_CANDIDATES = ["Quantity", "quantity", "כמות", "כמות שנמכרה"]
SALES_TOTAL_CANDIDATES = [
    "Total incl. VAT",
    "Total",
    "total",
    "סה״כ",
    "סה״כ כולל מע״מ",
    "סכום כללי",
    "Price",
]

USAGE_HEADER_GROUPS = ["Medicine", "Quantity", "מקור", "שם", "כמות"]
SALES_HEADER_GROUPS = ["Name", "Quantity", "Total"]

MEDICINE_KEYWORDS = [
    "dose",
    "dosage",
    "medicine",
    "medication",
    "drug",
    "treatment",
    "external",
    "internal",
    "route",
    "administration",
]
ITEM_CELLS_KEYWORDS = ["item", "cell", "inventory", "stock", "quantity", "unit", "batch", "lot"]

# Columns read by the comparison analyses
MEDICINE_DATE_FIELDS = ["date", "timestamp", "created", "administered"]
ROUTE_FIELDS = ["route", "administration", "method", "location", "type"]
EXTERNAL_ROUTE_KEYWORDS = ("external", "topical", "skin")
INTERNAL_ROUTE_KEYWORDS = ("internal", "oral", "injection", "iv")
DOSE_FIELDS = ["dose", "dosage", "amount", "quantity", "volume"]
DRUG_FIELDS = ["drug", "medicine", "medication", "treatment", "name"]
ITEM_DATE_FIELDS = ["date", "timestamp", "month", "period"]
ITEM_TYPE_FIELDS = ["item", "type", "category", "dose_type", "drug"]
ITEM_QUANTITY_FIELDS = ["quantity", "count", "amount", "total"]

SPECIES_KEYWORDS = {"cat": "חתול", "dog": "כלב"}

_FILENAME_DATE_RE = re.compile(r"(\d{2})-(\d{2})-(\d{4})")
_DOSE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([a-zA-Z]*)")


def find_column_value(row: Dict[str, Any], candidates: Sequence[str]) -> Optional[Any]:
    """
    Return the first non-empty value among the candidate columns.

    Candidates are tried in order by exact case-insensitive header match,
    then by substring match in either direction.

    Args:
        row: Row keyed by raw header name
        candidates: Header names, most preferred first

    Returns:
        The cell value, or None if no candidate column has a value
    """
    headers = [(key, str(key).strip().lower()) for key in row if str(key).strip()]

    for candidate in candidates:
        wanted = candidate.lower()
        for key, lowered in headers:
            if lowered == wanted and not is_blank(row[key]):
                return row[key]

    for candidate in candidates:
        wanted = candidate.lower()
        for key, lowered in headers:
            # Single-letter headers (column-letter exports) would match almost any name
            reverse = len(lowered) > 1 and lowered in wanted
            if (wanted in lowered or reverse) and not is_blank(row[key]):
                return row[key]

    return None


def extract_month_from_filename(name: str) -> Optional[str]:
    """
    Month of a report from its file name.

    Medicine_usage_01-07-2025_-_31-07-2025.xlsx gives "07/2025"; the first
    DD-MM-YYYY date in the name wins.
    """
    match = _FILENAME_DATE_RE.search(name or "")
    if not match:
        return None
    _, month, year = match.groups()
    return f"{month}/{year}"


def _text(value: Any) -> str:
    return "" if is_blank(value) else str(value).strip()


def process_usage_rows(
    rows: List[Dict[str, Any]],
    month_year: str = "",
    keyword: Optional[str] = EXTERNAL_PRODUCT_KEYWORD,
) -> List[UsageRecord]:
    """
    Extract usage lines with a positive quantity.

    Args:
        rows: Raw usage rows
        month_year: MM/YYYY stamped on every record
        keyword: Keep only products whose name contains it; None keeps all

    Returns:
        Usage records
    """
    records = []
    for row in rows:
        product_name = _text(find_column_value(row, USAGE_PRODUCT_CANDIDATES))
        quantity = to_number(find_column_value(row, USAGE_QUANTITY_CANDIDATES))
        if not product_name or quantity <= 0:
            continue
        if keyword and keyword not in product_name:
            continue
        records.append(
            UsageRecord(
                product_name=product_name,
                product_type=_text(find_column_value(row, USAGE_TYPE_CANDIDATES)),
                quantity=quantity,
                source=_text(find_column_value(row, USAGE_SOURCE_CANDIDATES)),
                month_year=month_year,
            )
        )
    return records


def process_sales_rows(rows: List[Dict[str, Any]], month_year: str = "") -> List[SalesRecord]:
    """Extract named sales lines with a positive quantity."""
    records = []
    for row in rows:
        product_name = _text(find_column_value(row, SALES_NAME_CANDIDATES))
        quantity = to_number(find_column_value(row, SALES_QUANTITY_CANDIDATES))
        if not product_name or quantity <= 0:
            continue
        records.append(
            SalesRecord(
                product_name=product_name,
                quantity=quantity,
                total_amount=to_number(find_column_value(row, SALES_TOTAL_CANDIDATES)),
                month_year=month_year,
            )
        )
    return records


def usage_summary(records: List[UsageRecord]) -> List[UsageSummary]:
    """Total quantity per product type, or per product name when the type is blank."""
    groups: Dict[str, UsageSummary] = {}
    for record in records:
        key = record.product_type or record.product_name
        if key not in groups:
            groups[key] = UsageSummary(product_type=key)
        groups[key].total_quantity += record.quantity
    return list(groups.values())


def sales_summary(records: List[SalesRecord]) -> SalesSummary:
    groups: Dict[str, SalesProductSummary] = {}
    for record in records:
        if record.product_name not in groups:
            groups[record.product_name] = SalesProductSummary(product_name=record.product_name)
        groups[record.product_name].total_quantity += record.quantity
        groups[record.product_name].total_revenue += record.total_amount
    products = list(groups.values())
    return SalesSummary(products=products, grand_total=sum(p.total_revenue for p in products))


def count_external_usage(records: List[UsageRecord]) -> int:
    return sum(1 for record in records if record.source == EXTERNAL_SOURCE)


def detect_file_content_type(rows: List[Dict[str, Any]]) -> str:
    """
    Classify a file from the headers of its first row.

    Returns:
        'medicine', 'itemcells', 'basic', or 'unknown' for an empty file
    """
    if not rows or not isinstance(rows[0], dict):
        return "unknown"

    headers = [str(h).lower() for h in rows[0]]
    if any(keyword in header for keyword in MEDICINE_KEYWORDS for header in headers):
        return "medicine"
    if any(keyword in header for keyword in ITEM_CELLS_KEYWORDS for header in headers):
        return "itemcells"
    return "basic"


def parse_file(name: str, content: Content) -> ParsedFile:
    """
    Read an uploaded file for side-by-side comparison.

    Raises:
        UnsupportedFormatError: For unsupported extensions
        FileParseError: For malformed content
    """
    rows = read_rows(name, content)
    return ParsedFile(
        name=name,
        size=len(content),
        file_type=file_type_for(name),
        content_type=detect_file_content_type(rows),
        rows=rows,
        record_count=len(rows),
    )


def _field_value(row: Dict[str, Any], fields: Sequence[str]) -> Optional[Any]:
    """First non-empty value among the named columns, matched case-insensitively."""
    lowered = {str(key).strip().lower(): key for key in row}
    for field in fields:
        key = lowered.get(field)
        if key is not None and not is_blank(row[key]):
            return row[key]
    return None


def _row_month(row: Dict[str, Any], fields: Sequence[str]) -> Optional[str]:
    for field in fields:
        parsed = parse_date(_field_value(row, [field]))
        if parsed is not None:
            return f"{parsed.year:04d}-{parsed.month:02d}"
    return None


def _route(row: Dict[str, Any]) -> Optional[str]:
    """'external', 'internal' or None; an external route in any column wins."""
    is_external = False
    is_internal = False
    for field in ROUTE_FIELDS:
        value = _field_value(row, [field])
        if value is None:
            continue
        text = str(value).lower()
        if any(keyword in text for keyword in EXTERNAL_ROUTE_KEYWORDS):
            is_external = True
        elif any(keyword in text for keyword in INTERNAL_ROUTE_KEYWORDS):
            is_internal = True
    if is_external:
        return "external"
    if is_internal:
        return "internal"
    return None


def analyze_medicine_rows(parsed_file: ParsedFile) -> MedicineAnalysis:
    """
    Split the doses of a medicine file into external and internal ones.

    Rows whose route columns name neither kind are left out of both lists
    but still contribute their drug name and month.
    """
    analysis = MedicineAnalysis(file_name=parsed_file.name)
    months = set()

    for row in parsed_file.rows:
        month = _row_month(row, MEDICINE_DATE_FIELDS)
        if month:
            months.add(month)

        dose_value = None
        dose_unit = ""
        for field in DOSE_FIELDS:
            value = _field_value(row, [field])
            match = _DOSE_RE.search(str(value)) if value is not None else None
            if match:
                dose_value = float(match.group(1))
                dose_unit = match.group(2)
                break

        drug = _field_value(row, DRUG_FIELDS)
        drug_name = str(drug) if drug is not None else "Unknown"
        if drug is not None and drug_name not in analysis.dose_types:
            analysis.dose_types.append(drug_name)

        record = DoseRecord(drug=drug_name, dose=dose_value, unit=dose_unit, month=month, raw_data=row)
        route = _route(row)
        if route == "external":
            analysis.external_doses.append(record)
        elif route == "internal":
            analysis.internal_doses.append(record)

    analysis.months = sorted(months)
    return analysis


def analyze_item_cells_rows(parsed_file: ParsedFile) -> ItemCellsAnalysis:
    """Total quantity per item type, overall and per month."""
    analysis = ItemCellsAnalysis(file_name=parsed_file.name)
    months = set()

    for row in parsed_file.rows:
        month = _row_month(row, ITEM_DATE_FIELDS)
        if month:
            months.add(month)

        item = _field_value(row, ITEM_TYPE_FIELDS)
        item_type = str(item) if item is not None else "Unknown"
        if item is not None and item_type not in analysis.dose_types:
            analysis.dose_types.append(item_type)

        quantity = 0.0
        for field in ITEM_QUANTITY_FIELDS:
            number = parse_number(_field_value(row, [field]))
            if number is not None:
                quantity = number
                break

        if month:
            per_month = analysis.items_by_month.setdefault(month, {})
            per_month[item_type] = per_month.get(item_type, 0.0) + quantity
        analysis.totals_by_type[item_type] = analysis.totals_by_type.get(item_type, 0.0) + quantity

    analysis.months = sorted(months)
    return analysis


def analyze_parsed_file(parsed_file: ParsedFile) -> Optional[Union[MedicineAnalysis, ItemCellsAnalysis]]:
    """Run the analysis matching the file's content type; None for basic or unknown files."""
    if parsed_file.content_type == "medicine":
        return analyze_medicine_rows(parsed_file)
    if parsed_file.content_type == "itemcells":
        return analyze_item_cells_rows(parsed_file)
    return None


def count_units_by_species(records: List[UsageRecord]) -> Dict[str, int]:
    """Blood units per species, by the species named in the product name."""
    return {
        species: sum(1 for record in records if keyword in record.product_name)
        for species, keyword in SPECIES_KEYWORDS.items()
    }


class ConsumablesPanel:
    """
    Panel-local usage and sales collections.

    Loads are serialized per panel; a load started while another is running
    raises IngestionBusyError.
    """

    def __init__(self, usage_keyword: Optional[str] = EXTERNAL_PRODUCT_KEYWORD):
        self.usage_keyword = usage_keyword
        self.usage_records: List[UsageRecord] = []
        self.sales_records: List[SalesRecord] = []
        self.usage_month: Optional[str] = None
        self.sales_month: Optional[str] = None
        self._lock = threading.Lock()

    @contextmanager
    def _loading(self, name: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise IngestionBusyError(
                f"Another file is still loading; {name} was not loaded", details={"file_name": name}
            )
        try:
            yield
        finally:
            self._lock.release()

    def load_usage_file(self, name: str, content: Content, append: bool = False) -> int:
        """
        Load a medicine usage file.

        Args:
            name: File name, also the source of the report month
            content: Raw file content
            append: Add to the loaded records instead of replacing them

        Returns:
            Number of records added
        """
        with self._loading(name):
            rows = read_rows(name, content, USAGE_HEADER_GROUPS)
            month_year = extract_month_from_filename(name) or ""
            records = process_usage_rows(rows, month_year, self.usage_keyword)
            self.usage_records = self.usage_records + records if append else records
            self.usage_month = month_year or None
            logger.info(f"Loaded {len(records)} usage records from {name}")
            return len(records)

    def load_sales_file(self, name: str, content: Content, append: bool = False) -> int:
        """Load an item sales file; see load_usage_file."""
        with self._loading(name):
            rows = read_rows(name, content, SALES_HEADER_GROUPS)
            month_year = extract_month_from_filename(name) or ""
            records = process_sales_rows(rows, month_year)
            self.sales_records = self.sales_records + records if append else records
            self.sales_month = month_year or None
            logger.info(f"Loaded {len(records)} sales records from {name}")
            return len(records)

    @property
    def external_usage_count(self) -> int:
        return count_external_usage(self.usage_records)

    def usage_summary(self) -> List[UsageSummary]:
        return usage_summary(self.usage_records)

    def sales_summary(self) -> SalesSummary:
        return sales_summary(self.sales_records)

    def units_by_species(self) -> Dict[str, int]:
        return count_units_by_species(self.usage_records)
