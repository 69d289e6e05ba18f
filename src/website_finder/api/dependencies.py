"""FastAPI dependencies."""
from fastapi import Request

from ..services.job_control import JobControlService
from ..storage.uploads import UploadStorage


def get_job_control(request: Request) -> JobControlService:
    """Job control service owned by the running application."""
    return request.app.state.job_control


def get_upload_storage(request: Request) -> UploadStorage:
    """Upload storage owned by the running application."""
    return request.app.state.upload_storage
