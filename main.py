"""Main entry point for the Company Website Finder."""

import os
import uvicorn

from website_finder.core.config import settings
from website_finder.core.logging import logger


def main():
    """Run the Company Website Finder API server."""
    logger.info("Starting Company Website Finder API server")

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))

    # Jobs live in process memory, so a single worker is required
    dev_mode = os.environ.get("DEV_MODE", "0") == "1" or os.environ.get("UVICORN_RELOAD", "0") == "1"
    if dev_mode:
        logger.info("Running in DEV MODE with auto-reload enabled")

    uvicorn.run(
        "website_finder.api.main:app",
        host=host,
        port=port,
        reload=dev_mode,
        reload_dirs=["src"] if dev_mode else None,
        workers=1,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
