"""Health check endpoints."""
from fastapi import APIRouter, Depends
from typing import Dict, Any
import time

from ...core.config import settings
from ...services.job_control import JobControlService
from ...models.job import JobStatus
from ..dependencies import get_job_control


router = APIRouter()


@router.get("/health", summary="Basic health check")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.APP_VERSION,
        "service": settings.APP_NAME
    }


@router.get("/health/detailed", summary="Detailed health check")
async def detailed_health_check(
    control: JobControlService = Depends(get_job_control)
) -> Dict[str, Any]:
    """Health check with job counts and effective configuration."""
    jobs = control.list_jobs()
    by_status = {status.value: 0 for status in JobStatus}
    for job in jobs:
        by_status[job.status.value] += 1

    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.APP_VERSION,
        "service": settings.APP_NAME,
        "jobs": by_status,
        "configuration": {
            "debug": settings.DEBUG,
            "navigation_timeout_ms": settings.NAVIGATION_TIMEOUT_MS,
            "selector_timeout_ms": settings.SELECTOR_TIMEOUT_MS,
            "inter_item_delay_ms": settings.INTER_ITEM_DELAY_MS,
            "headless": settings.BROWSER_HEADLESS
        }
    }
