"""
FastAPI application for the company website finder.
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from ..core.config import settings
from ..core.logging import logger
from ..services.job_control import JobControlService
from ..storage.uploads import UploadStorage
from .exceptions import exception_handlers
from .routes import health, jobs, upload


def create_app(
    job_control: Optional[JobControlService] = None,
    upload_storage: Optional[UploadStorage] = None,
) -> FastAPI:
    """Build the application; the job registry lives as long as the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan context manager."""
        logger.info("Starting Company Website Finder API")
        yield
        await app.state.job_control.shutdown()
        logger.info("Shutting down Company Website Finder API")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Resolve company names from a spreadsheet to their official websites",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        exception_handlers=exception_handlers,
    )

    app.state.job_control = job_control or JobControlService()
    app.state.upload_storage = upload_storage or UploadStorage()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        upload.router,
        prefix=settings.API_V1_PREFIX,
        tags=["upload"]
    )

    app.include_router(
        jobs.router,
        prefix=f"{settings.API_V1_PREFIX}/jobs",
        tags=["jobs"]
    )

    app.include_router(
        health.router,
        tags=["health"]
    )

    # Root endpoint
    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": "Resolve company names from a spreadsheet to their official websites",
            "docs": "/docs",
            "health": "/health"
        }

    return app


app = create_app()
