"""
FastAPI routes for job control: start, stop, status and result download.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse

from ...core.logging import logger
from ...models.responses import JobListResponse, JobResponse, JobSnapshot
from ...services.job_control import JobControlService
from ..dependencies import get_job_control


router = APIRouter()


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs"
)
async def list_jobs(
    control: JobControlService = Depends(get_job_control)
) -> JobListResponse:
    """List all jobs known to this service instance."""
    jobs = control.list_jobs()
    return JobListResponse(jobs=jobs, total=len(jobs))


@router.get(
    "/{job_id}",
    response_model=JobSnapshot,
    summary="Get job status",
    description="Status, progress, telemetry and the ten most recent results of a job"
)
async def get_job_status(
    job_id: str,
    control: JobControlService = Depends(get_job_control)
) -> JobSnapshot:
    """
    Get the status of a job.

    Returns:
    - Status and progress
    - Success/failure counts, speed and ETA
    - The last 10 results
    - Error message (if failed)
    """
    return control.get_status(job_id)


@router.post(
    "/{job_id}/start",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start processing a job",
    description="Start a new processing epoch; fails with 409 while the job is processing"
)
async def start_job(
    job_id: str,
    control: JobControlService = Depends(get_job_control)
) -> JobResponse:
    """Start (or restart) processing of an uploaded job."""
    job = await control.start_processing(job_id)
    logger.info(f"Processing started for job {job_id}")

    return JobResponse(
        job_id=job.id,
        status=job.status,
        message=f"Processing started (epoch {job.epoch})",
        file_name=job.file_name,
    )


@router.post(
    "/{job_id}/stop",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Stop a job",
    description="Request the job to stop after the company currently being resolved"
)
async def stop_job(
    job_id: str,
    control: JobControlService = Depends(get_job_control)
) -> JobResponse:
    """Request cancellation of a running job."""
    job = control.request_stop(job_id)

    return JobResponse(
        job_id=job.id,
        status=job.status,
        message="Stop requested",
        file_name=job.file_name,
    )


@router.get(
    "/{job_id}/download",
    response_class=FileResponse,
    summary="Download results",
    description="Download the result CSV of a completed or stopped job"
)
async def download_results(
    job_id: str,
    control: JobControlService = Depends(get_job_control)
) -> FileResponse:
    """Download the Company,Website CSV."""
    path = control.get_output_path(job_id)
    return FileResponse(path, media_type="text/csv", filename=path.name)
