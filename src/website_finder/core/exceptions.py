"""Error taxonomy for ingestion, resolution, persistence and job control."""
from typing import Any, Dict, Optional


class WebsiteFinderError(Exception):
    """Base exception for all service errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# ==================== Job-level (fatal) ====================

class IngestionError(WebsiteFinderError):
    """Source file could not be turned into a company list."""


class SchemaError(IngestionError):
    """Source file has no usable company column."""

    def __init__(self, path: str):
        super().__init__(
            "no company column",
            details={"path": path}
        )


# ==================== Item-level (recoverable) ====================

class ResolutionError(WebsiteFinderError):
    """A single company could not be resolved to a website."""


class NavigationError(ResolutionError):
    """Search page navigation failed or timed out."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Navigation failed for URL: {url}",
            details={"url": url, "reason": reason}
        )


class SelectorTimeout(ResolutionError):
    """None of the result selectors appeared in time."""

    def __init__(self, selectors, timeout_ms: int):
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for {', '.join(selectors)}",
            details={"selectors": list(selectors), "timeout_ms": timeout_ms}
        )


class PersistenceError(WebsiteFinderError):
    """A result row could not be written to the CSV sink."""


# ==================== Job control ====================

class JobControlError(WebsiteFinderError):
    """Base exception for job control requests, carries an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        if status_code is not None:
            self.status_code = status_code


class JobNotFoundError(JobControlError):
    """Raised when a job id is unknown."""

    status_code = 404

    def __init__(self, job_id: str):
        super().__init__(
            f"Job not found: {job_id}",
            details={"job_id": job_id}
        )


class AlreadyProcessingError(JobControlError):
    """Raised when a start request hits a job that is already running."""

    status_code = 409

    def __init__(self, job_id: str):
        super().__init__(
            "Job is already processing",
            details={"job_id": job_id}
        )


class OutputNotReadyError(JobControlError):
    """Raised when results are requested before a downloadable CSV exists."""

    status_code = 409

    def __init__(self, job_id: str, status: str):
        super().__init__(
            "Result file is not available",
            details={"job_id": job_id, "status": status}
        )


class InvalidUploadError(JobControlError):
    """Raised for uploads that cannot be accepted."""

    status_code = 400
