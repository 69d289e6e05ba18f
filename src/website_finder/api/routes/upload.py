"""
API endpoints for spreadsheet uploads.
"""
from fastapi import APIRouter, Depends, File, UploadFile, status

from ...core.logging import logger
from ...models.job import JobStatus
from ...models.responses import JobResponse
from ...services.job_control import JobControlService
from ...storage.uploads import UploadStorage
from ..dependencies import get_job_control, get_upload_storage

router = APIRouter()


@router.post(
    "/upload",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a company spreadsheet",
    description="Store a spreadsheet and register a job for it; processing starts with POST /jobs/{job_id}/start"
)
async def upload_file(
    file: UploadFile = File(...),
    control: JobControlService = Depends(get_job_control),
    storage: UploadStorage = Depends(get_upload_storage),
) -> JobResponse:
    """
    Upload an .xlsx, .xlsm or .csv file with a "Company" column.

    Returns the id of the created job.
    """
    try:
        content = await file.read()
        saved_path = storage.save(content, file.filename)
    finally:
        await file.close()

    job_id = control.create_job(saved_path, file_name=file.filename)
    logger.info(f"Upload accepted: {file.filename} -> job {job_id}")

    return JobResponse(
        job_id=job_id,
        status=JobStatus.UPLOADED,
        message="File uploaded",
        file_name=file.filename,
    )
