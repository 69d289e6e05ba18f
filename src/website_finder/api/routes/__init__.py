"""API route handlers."""

from . import (
    health,
    jobs,
    upload,
)

__all__ = [
    "health",
    "jobs",
    "upload",
]
