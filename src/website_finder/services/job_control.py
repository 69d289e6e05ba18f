"""
Job control service: the operations exposed to the HTTP layer and CLI.
"""
import asyncio
from pathlib import Path
from typing import Dict, List, Optional

from ..core.exceptions import OutputNotReadyError
from ..core.logging import logger
from ..models.job import Job, JobStatus
from ..models.responses import JobSnapshot
from ..pipeline.engine import JobEngine
from .job_registry import JobRegistry


class JobControlService:
    """
    Creates, starts, stops and reports on jobs.

    Each started epoch runs as its own asyncio task; the service holds it until
    the epoch ends so shutdown can wait for in-flight items.
    """

    def __init__(self, registry: Optional[JobRegistry] = None, engine: Optional[JobEngine] = None):
        self.registry = registry or JobRegistry()
        self.engine = engine or JobEngine()
        self._tasks: Dict[str, asyncio.Task] = {}

    def create_job(self, source_path, file_name: Optional[str] = None) -> str:
        """Register an uploaded source and return its job id."""
        return self.registry.create(str(source_path), file_name).id

    async def start_processing(self, job_id: str) -> Job:
        """
        Start a new processing epoch in the background.

        Raises:
            JobNotFoundError: If the id is unknown
            AlreadyProcessingError: If the job is already processing
        """
        job = self.registry.begin_epoch(job_id)
        task = asyncio.create_task(self._run(job), name=f"job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda done: self._forget_task(job_id, done))
        return job

    def _forget_task(self, job_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _run(self, job: Job) -> None:
        try:
            await self.engine.run(job)
        except asyncio.CancelledError:
            with job.lock:
                job.status = JobStatus.STOPPED
                job.end_time = self.registry.clock()
            logger.warning(f"Job {job.id} task was cancelled")
            raise

    def request_stop(self, job_id: str) -> Job:
        """
        Ask a job to stop after its current item.

        Raises:
            JobNotFoundError: If the id is unknown
        """
        return self.registry.request_stop(job_id)

    def get_status(self, job_id: str) -> JobSnapshot:
        """
        Raises:
            JobNotFoundError: If the id is unknown
        """
        return self.registry.snapshot(job_id)

    def list_jobs(self) -> List[JobSnapshot]:
        return [self.registry.snapshot_job(job) for job in self.registry.list_jobs()]

    def get_output_path(self, job_id: str) -> Path:
        """
        Location of the result CSV of a finished or stopped epoch.

        Raises:
            JobNotFoundError: If the id is unknown
            OutputNotReadyError: If no downloadable CSV exists yet
        """
        job = self.registry.get(job_id)
        with job.lock:
            status = job.status
            output_path = job.output_path
        if status not in (JobStatus.COMPLETED, JobStatus.STOPPED) or not output_path:
            raise OutputNotReadyError(job_id, status.value)
        path = Path(output_path)
        if not path.exists():
            raise OutputNotReadyError(job_id, status.value)
        return path

    async def wait(self, job_id: str) -> JobSnapshot:
        """Wait for the current epoch of a job to finish."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return self.get_status(job_id)

    async def shutdown(self) -> None:
        """Ask every running job to stop and wait for the tasks to settle."""
        pending = [task for task in self._tasks.values() if not task.done()]
        if not pending:
            return
        logger.info(f"Stopping {len(pending)} running job(s)")
        for job in self.registry.list_jobs():
            if job.status == JobStatus.PROCESSING:
                job.should_stop.set()
        await asyncio.gather(*pending, return_exceptions=True)
