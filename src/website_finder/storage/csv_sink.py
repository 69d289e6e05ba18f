"""
Incremental CSV sink for resolved company websites.
"""
import csv
import io
import os
import re
from enum import Enum
from pathlib import Path
from typing import Optional

from ..core.exceptions import PersistenceError
from ..core.logging import logger


CSV_HEADER = "Company,Website\n"

_EMERGENCY_COMPANY = re.compile(r"[^\w\s]")
_EMERGENCY_WEBSITE = re.compile(r"[^\w\s:./\\-]")


class AppendOutcome(str, Enum):
    """How a row ended up in the file."""
    OK = "ok"
    DEGRADED = "degraded"
    DROPPED = "dropped"


def encode_row(company: str, website: str) -> str:
    """Both fields double-quoted, embedded quotes doubled."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([company or "", website or ""])
    return buffer.getvalue()


def encode_row_degraded(company: str, website: str) -> str:
    """Strip everything but word characters, whitespace and URL punctuation."""
    safe_company = _EMERGENCY_COMPANY.sub(" ", company or "").replace('"', "")
    safe_website = _EMERGENCY_WEBSITE.sub("", website or "").replace('"', "")
    return f'"{safe_company}","{safe_website}"\n'


class CsvSink:
    """
    Append-only CSV writer that persists every row before returning.

    Each row is flushed and fsynced so a crash loses at most the row being
    written. A row that cannot be encoded is retried once with a degraded
    encoding before being dropped.
    """

    def __init__(self, path):
        self.path = Path(path)
        self.rows_written = 0
        self.rows_degraded = 0
        self.rows_dropped = 0

    def open(self) -> "CsvSink":
        """Create or truncate the file and write the header."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(CSV_HEADER)
            f.flush()
            os.fsync(f.fileno())
        logger.info(f"Opened CSV sink at {self.path}")
        return self

    def _write_line(self, line: str) -> None:
        try:
            data = line.encode("utf-8")
            with open(self.path, "ab") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, UnicodeError) as e:
            raise PersistenceError(
                f"Could not append row to {self.path}: {e}",
                details={"path": str(self.path)}
            ) from e

    def append_row(self, company: str, website: Optional[str]) -> AppendOutcome:
        """Append one row; never raises."""
        try:
            self._write_line(encode_row(company, website or ""))
            self.rows_written += 1
            return AppendOutcome.OK
        except PersistenceError as e:
            logger.error(f"Error writing to CSV for {company!r}: {e.message}")

        try:
            self._write_line(encode_row_degraded(company, website or ""))
            self.rows_written += 1
            self.rows_degraded += 1
            logger.warning(f"Wrote degraded CSV row for {company!r}")
            return AppendOutcome.DEGRADED
        except PersistenceError as e:
            self.rows_dropped += 1
            logger.error(f"Failed final attempt to write {company!r} to CSV: {e.message}")
            return AppendOutcome.DROPPED
