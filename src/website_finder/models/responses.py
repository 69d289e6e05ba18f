"""API response schemas."""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from .job import JobStatus


class CompanyResultModel(BaseModel):
    """Serialized company result."""
    company: str
    website: str
    processing_time_ms: int
    succeeded: bool


class JobResponse(BaseModel):
    """Response schema for job creation and control requests."""
    job_id: str
    status: JobStatus
    message: str
    file_name: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class JobSnapshot(BaseModel):
    """Point-in-time view of a job, safe to hand to other tasks."""
    job_id: str
    file_name: str
    status: JobStatus
    epoch: int = 0
    progress: int = Field(0, ge=0, le=100)
    current_company: str = ""
    processed: int = 0
    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    success_ratio: float = 0.0
    avg_processing_time_ms: float = 0.0
    total_duration_sec: float = 0.0
    eta: Optional[float] = None
    processing_speed: float = 0.0
    recent_results: List[CompanyResultModel] = Field(default_factory=list)
    output_available: bool = False
    error: Optional[str] = None
    created_at: Optional[datetime] = None


class JobListResponse(BaseModel):
    """Response schema for the job listing."""
    jobs: List[JobSnapshot]
    total: int
