"""In-memory job records."""
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class JobStatus(str, Enum):
    """Job status enumeration."""
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    STOPPED = "stopped"
    ERROR = "error"


TERMINAL_STATUSES = {JobStatus.COMPLETED, JobStatus.STOPPED, JobStatus.ERROR}


@dataclass
class CompanyResult:
    """One resolved row."""

    company: str
    website: str
    processing_time_ms: int
    succeeded: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class Job:
    """
    A website lookup job for one uploaded source.

    The engine running the job mutates it in place while holding ``lock``;
    ``should_stop`` is the only field other callers may touch.
    """

    id: str
    source_path: str
    file_name: str
    status: JobStatus = JobStatus.UPLOADED
    companies: List[str] = field(default_factory=list)
    ingested: bool = False
    results: List[CompanyResult] = field(default_factory=list)
    processed: int = 0
    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    progress: int = 0
    current_company: str = ""
    company_processing_times: List[int] = field(default_factory=list)
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    processing_speed: float = 0.0
    last_speed_calc: Optional[float] = None
    output_path: Optional[str] = None
    error: Optional[str] = None
    epoch: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    should_stop: threading.Event = field(default_factory=threading.Event, repr=False)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def begin_epoch(self, now: float) -> None:
        """Reset counters and telemetry for a fresh processing attempt."""
        self.status = JobStatus.PROCESSING
        self.epoch += 1
        self.should_stop.clear()
        self.results = []
        self.processed = 0
        self.success_count = 0
        self.failure_count = 0
        self.progress = 0
        self.current_company = ""
        self.company_processing_times = []
        self.start_time = now
        self.end_time = None
        self.processing_speed = 0.0
        self.last_speed_calc = now
        self.output_path = None
        self.error = None
