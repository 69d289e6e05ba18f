"""
In-memory job registry.

Owns every Job record for the lifetime of the service instance that created
it. Jobs are never persisted; a restart starts with an empty registry.
"""
import threading
import time
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..core.exceptions import AlreadyProcessingError, JobNotFoundError
from ..core.logging import logger
from ..models.job import Job, JobStatus
from ..models.responses import CompanyResultModel, JobSnapshot
from . import telemetry


RECENT_RESULTS_LIMIT = 10


class JobRegistry:
    """
    Thread-safe store of job records keyed by job id.

    The registry lock guards the mapping; each job's own lock guards its
    fields, so distinct jobs never contend with each other.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.RLock()
        self.clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def create(self, source_path: str, file_name: Optional[str] = None) -> Job:
        """Register a new job in the ``uploaded`` state."""
        job = Job(
            id=str(uuid.uuid4()),
            source_path=str(source_path),
            file_name=file_name or Path(source_path).name,
        )
        with self._lock:
            self._jobs[job.id] = job
        logger.info(f"Created job {job.id} for {job.file_name}")
        return job

    def get(self, job_id: str) -> Job:
        """
        Get a job by id.

        Raises:
            JobNotFoundError: If the id is unknown
        """
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def list_jobs(self) -> List[Job]:
        """All jobs, oldest first."""
        with self._lock:
            jobs = list(self._jobs.values())
        return sorted(jobs, key=lambda job: job.created_at)

    def begin_epoch(self, job_id: str) -> Job:
        """
        Move a job into ``processing`` and reset it for a new epoch.

        Raises:
            JobNotFoundError: If the id is unknown
            AlreadyProcessingError: If the job is already processing
        """
        job = self.get(job_id)
        with job.lock:
            if job.status == JobStatus.PROCESSING:
                raise AlreadyProcessingError(job_id)
            job.begin_epoch(self.clock())
            epoch = job.epoch
        logger.info(f"Job {job_id} entering processing (epoch {epoch})")
        return job

    def request_stop(self, job_id: str) -> Job:
        """
        Ask a job to stop at its next iteration boundary.

        Raises:
            JobNotFoundError: If the id is unknown
        """
        job = self.get(job_id)
        job.should_stop.set()
        logger.info(f"Stop requested for job {job_id} (status={job.status.value})")
        return job

    def snapshot(self, job_id: str) -> JobSnapshot:
        """Consistent copy of a job's status and telemetry."""
        job = self.get(job_id)
        return self.snapshot_job(job)

    def snapshot_job(self, job: Job) -> JobSnapshot:
        with job.lock:
            recent = job.results[-RECENT_RESULTS_LIMIT:]
            output_available = (
                job.status in (JobStatus.COMPLETED, JobStatus.STOPPED)
                and bool(job.output_path)
                and Path(job.output_path).exists()
            )
            return JobSnapshot(
                job_id=job.id,
                file_name=job.file_name,
                status=job.status,
                epoch=job.epoch,
                progress=job.progress,
                current_company=job.current_company,
                processed=job.processed,
                total=job.total,
                success_count=job.success_count,
                failure_count=job.failure_count,
                success_ratio=round(telemetry.success_ratio(job), 2),
                avg_processing_time_ms=round(telemetry.average_processing_time_ms(job), 2),
                total_duration_sec=round(telemetry.total_duration_sec(job, self.clock()), 3),
                eta=telemetry.eta_seconds(job),
                processing_speed=job.processing_speed,
                recent_results=[CompanyResultModel(**result.to_dict()) for result in recent],
                output_available=output_available,
                error=job.error,
                created_at=job.created_at,
            )
