"""
File readers for uploaded spreadsheets.

Every reader returns a list of row dictionaries keyed by header name.
"""
import io
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from vetblood.utils.exceptions import FileParseError, UnsupportedFormatError
from vetblood.utils.parsing import is_blank

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = [".csv", ".xlsx", ".xls", ".json"]

# Encodings tried in order when decoding CSV bytes
CSV_ENCODINGS = ["utf-8-sig", "utf-8", "cp1255", "latin-1"]

DEFAULT_HEADER_SCAN_ROWS = 15

HeaderGroup = Union[str, Sequence[str]]
Content = Union[bytes, str]


def file_extension(name: str) -> str:
    return Path(name).suffix.lower()


def file_type_for(name: str) -> str:
    """Map a file name to csv, excel or json."""
    extension = file_extension(name)
    if extension == ".csv":
        return "csv"
    if extension in (".xlsx", ".xls"):
        return "excel"
    if extension == ".json":
        return "json"
    raise UnsupportedFormatError(
        f"פורמט לא נתמך: {name}. Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}",
        details={"file_name": name, "extension": extension},
    )


def decode_text(content: Content) -> str:
    """
    Decode uploaded bytes, trying each known encoding in turn.

    Raises:
        FileParseError: If no encoding can decode the content
    """
    if isinstance(content, str):
        return content

    for encoding in CSV_ENCODINGS:
        try:
            text = content.decode(encoding)
            logger.debug(f"Decoded file with encoding: {encoding}")
            return text
        except UnicodeDecodeError:
            logger.debug(f"Failed to decode with encoding: {encoding}")
            continue

    raise FileParseError(f"Could not read file with any of the attempted encodings: {CSV_ENCODINGS}")


def _clean_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    return value


def _is_blank_row(values: Sequence[Any]) -> bool:
    return all(is_blank(v) for v in values)


def read_csv(content: Content) -> List[Dict[str, Any]]:
    """
    Parse CSV content with a header row, skipping blank lines.

    Raises:
        FileParseError: If the content is not valid CSV
    """
    text = decode_text(content)
    if not text.strip():
        return []

    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise FileParseError(f"CSV parsing error: {e}")

    rows = df.to_dict("records")
    return [row for row in rows if not _is_blank_row(list(row.values()))]


def read_excel_grid(content: bytes) -> List[List[Any]]:
    """
    Read the first sheet of a workbook as a grid of cell values.

    Raises:
        FileParseError: If the workbook cannot be read
    """
    if isinstance(content, str):
        raise FileParseError("Spreadsheet content must be bytes")

    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object)
    except Exception as e:
        raise FileParseError(f"Spreadsheet parsing error: {e}")

    return [[_clean_cell(v) for v in row] for row in df.values.tolist()]


def find_header_row(
    grid: List[List[Any]],
    expected_groups: Sequence[HeaderGroup],
    scan_rows: int = DEFAULT_HEADER_SCAN_ROWS,
) -> int:
    """
    Find the header row of a sheet that starts with title or notes rows.

    A row qualifies when at least half of the expected groups appear among its
    non-empty cells, case-insensitively, as substrings. A group is a keyword
    or a sequence of alternative keywords.

    Args:
        grid: Sheet rows as lists of cell values
        expected_groups: Keywords expected in the header
        scan_rows: How many leading rows to inspect

    Returns:
        Index of the first qualifying row, or 0 when none qualifies
    """
    if not expected_groups:
        return 0

    needed = math.ceil(len(expected_groups) / 2)
    for index, row in enumerate(grid[:scan_rows]):
        cells = [str(cell).strip().lower() for cell in row if not is_blank(cell)]
        if not cells:
            continue

        matches = 0
        for group in expected_groups:
            alternatives = [group] if isinstance(group, str) else list(group)
            if any(alt.lower() in cell for alt in alternatives for cell in cells):
                matches += 1

        if matches >= needed:
            return index

    return 0


def grid_to_records(grid: List[List[Any]], header_index: int = 0) -> List[Dict[str, Any]]:
    """Turn a grid into row dictionaries using the given header row."""
    if not grid or header_index >= len(grid):
        return []

    headers = []
    for position, cell in enumerate(grid[header_index]):
        name = str(cell).strip() if not is_blank(cell) else ""
        headers.append(name or f"Unnamed: {position}")

    records = []
    for row in grid[header_index + 1 :]:
        if _is_blank_row(row):
            continue
        records.append({header: row[i] if i < len(row) else "" for i, header in enumerate(headers)})
    return records


def read_excel(
    content: bytes,
    expected_groups: Optional[Sequence[HeaderGroup]] = None,
    scan_rows: int = DEFAULT_HEADER_SCAN_ROWS,
) -> List[Dict[str, Any]]:
    grid = read_excel_grid(content)
    header_index = find_header_row(grid, expected_groups, scan_rows) if expected_groups else 0
    if header_index:
        logger.info(f"Detected header row at index {header_index}")
    return grid_to_records(grid, header_index)


def read_json(content: Content) -> List[Dict[str, Any]]:
    """
    Parse a JSON array of row objects.

    Raises:
        FileParseError: If the content is not a JSON array of objects
    """
    try:
        data = json.loads(decode_text(content))
    except ValueError as e:
        raise FileParseError(f"Invalid JSON: {e}")

    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise FileParseError("JSON file must contain an array of objects")
    return data


def read_rows(
    name: str,
    content: Content,
    expected_groups: Optional[Sequence[HeaderGroup]] = None,
    scan_rows: int = DEFAULT_HEADER_SCAN_ROWS,
) -> List[Dict[str, Any]]:
    """
    Read an uploaded file into row dictionaries, dispatching on its extension.

    Args:
        name: File name, used for its extension
        content: Raw file content
        expected_groups: Header keywords used to locate the header row in spreadsheets
        scan_rows: How many leading spreadsheet rows to inspect for the header

    Raises:
        UnsupportedFormatError: For extensions other than csv, xlsx, xls and json
        FileParseError: For malformed content
    """
    file_type = file_type_for(name)
    if file_type == "csv":
        return read_csv(content)
    if file_type == "excel":
        return read_excel(content, expected_groups, scan_rows)
    return read_json(content)
