"""
Storage for uploaded source spreadsheets.
"""
import time
from pathlib import Path
from typing import Optional

from ..core.config import settings
from ..core.exceptions import InvalidUploadError
from ..core.logging import logger
from ..ingest.spreadsheet import SUPPORTED_SUFFIXES


class UploadStorage:
    """
    Saves uploaded files under the upload directory.

    Stored names are prefixed with the upload time in milliseconds so two
    uploads of the same file never overwrite each other.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save(self, content: bytes, filename: str) -> Path:
        """
        Save an uploaded file.

        Args:
            content: The binary content of the file.
            filename: Original filename.

        Returns:
            Path to the saved file.

        Raises:
            InvalidUploadError: If the name or type is not acceptable
        """
        safe_name = Path(filename or "").name
        if not safe_name:
            raise InvalidUploadError("Uploaded file must have a filename")

        suffix = Path(safe_name).suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise InvalidUploadError(
                f"Unsupported file type: {suffix or 'none'}",
                details={"filename": safe_name, "supported": sorted(SUPPORTED_SUFFIXES)}
            )

        target_path = self.base_dir / f"{int(time.time() * 1000)}-{safe_name}"
        with open(target_path, "wb") as f:
            f.write(content)

        logger.info(f"Saved uploaded file {safe_name} to {target_path}")
        return target_path
