"""
Spreadsheet ingestion: reads the first sheet of an upload and extracts company names.
"""
import csv
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..core.exceptions import IngestionError, SchemaError
from ..core.logging import logger


EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES | CSV_SUFFIXES

COMPANY_KEYWORD = "company"


@dataclass
class SheetData:
    header: List[Any] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _read_excel(path: Path) -> SheetData:
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise IngestionError(f"Could not read workbook: {e}", details={"path": str(path)}) from e

    try:
        worksheet = workbook.worksheets[0]
        rows = [list(row) for row in worksheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if not rows:
        return SheetData()
    return SheetData(header=rows[0], rows=rows[1:])


def _read_csv(path: Path) -> SheetData:
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as fp:
            rows = [row for row in csv.reader(fp)]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise IngestionError(f"Could not read CSV: {e}", details={"path": str(path)}) from e

    if not rows:
        return SheetData()
    return SheetData(header=rows[0], rows=rows[1:])


def read_sheet(path: Path) -> SheetData:
    """Read the header and data rows of the first sheet of a tabular file."""
    path = Path(path)
    if not path.exists():
        raise IngestionError(f"Source file not found: {path}", details={"path": str(path)})

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return _read_excel(path)
    if suffix in CSV_SUFFIXES:
        return _read_csv(path)
    raise IngestionError(
        f"Unsupported file type: {suffix or 'none'}",
        details={"path": str(path), "supported": sorted(SUPPORTED_SUFFIXES)}
    )


def find_company_column(header: List[Any]) -> Optional[int]:
    """Index of the first header cell mentioning "company", or None."""
    for index, cell in enumerate(header):
        if cell is not None and COMPANY_KEYWORD in str(cell).lower():
            return index
    return None


def ingest(source_path) -> List[str]:
    """
    Extract company names from the first sheet of a source file.

    Args:
        source_path: Path to an .xlsx/.xlsm workbook or a .csv file

    Returns:
        Company names in row order, empty cells skipped

    Raises:
        SchemaError: If no header cell contains "company"
        IngestionError: If the file cannot be read
    """
    sheet = read_sheet(Path(source_path))

    column = find_company_column(sheet.header)
    if column is None:
        raise SchemaError(str(source_path))

    companies: List[str] = []
    for row in sheet.rows:
        if column >= len(row):
            continue
        name = _stringify(row[column])
        if name:
            companies.append(name)

    logger.info(f"Ingested {len(companies)} companies from {source_path} (column {column + 1})")
    return companies
