"""Custom exception handlers."""
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import JobControlError
from ..core.logging import logger


async def job_control_exception_handler(request: Request, exc: JobControlError):
    """Handle job control errors."""
    logger.warning(
        f"Job control error: {exc.message}",
        extra={"path": str(request.url), "method": request.method}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "type": "job_error",
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with proper logging."""
    logger.warning(
        f"HTTP error: {exc.status_code} - {exc.detail}",
        extra={"path": str(request.url), "method": request.method}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "type": "http_error"
        }
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": "internal_error"
        }
    )


# Exception handler registry
exception_handlers = {
    JobControlError: job_control_exception_handler,
    HTTPException: http_exception_handler,
    Exception: unhandled_exception_handler,
}
