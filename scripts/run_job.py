#!/usr/bin/env python3
"""
Resolve the companies of one spreadsheet from the command line.

Runs a single job without the HTTP layer and prints where the CSV was written.
Ctrl+C requests a stop after the company currently being resolved.
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from website_finder.core.logging import logger
from website_finder.crawler.fetcher import PageFetcher
from website_finder.models.job import JobStatus
from website_finder.pipeline.engine import JobEngine
from website_finder.services.job_control import JobControlService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Find company websites for a spreadsheet")
    parser.add_argument("source", type=Path, help="Spreadsheet (.xlsx, .xlsm or .csv) with a Company column")
    parser.add_argument("--results-dir", default=None, help="Directory for the result CSV")
    parser.add_argument("--delay-ms", type=int, default=None, help="Delay between companies")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    return parser.parse_args(argv)


async def run(args) -> int:
    engine = JobEngine(
        fetcher=PageFetcher(headless=not args.headed),
        results_dir=args.results_dir,
        inter_item_delay_ms=args.delay_ms,
    )
    control = JobControlService(engine=engine)
    job_id = control.create_job(args.source)

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, control.request_stop, job_id)
    except NotImplementedError:
        pass  # Windows event loops

    await control.start_processing(job_id)
    snapshot = await control.wait(job_id)

    logger.info(
        f"Job {job_id}: {snapshot.status.value}, {snapshot.processed}/{snapshot.total} processed, "
        f"{snapshot.success_count} websites found ({snapshot.success_ratio:.1f}%)"
    )
    if snapshot.status == JobStatus.ERROR:
        logger.error(f"Job failed: {snapshot.error}")
        return 1

    print(control.get_output_path(job_id))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run(parse_args())))
