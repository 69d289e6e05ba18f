"""
Job engine: drives one processing epoch of a website lookup job.
"""
import asyncio
import math
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from ..core.config import settings
from ..core.exceptions import IngestionError
from ..core.logging import logger
from ..crawler.fetcher import PageFetcher
from ..crawler.resolver import LinkResolver
from ..ingest.spreadsheet import ingest
from ..models.job import CompanyResult, Job, JobStatus
from ..services.telemetry import TelemetryTracker
from ..storage.csv_sink import AppendOutcome, CsvSink


def build_output_path(results_dir, file_name: str, now: Optional[datetime] = None) -> Path:
    """
    Unique CSV path for one epoch: ``<stem>_<timestamp>_<random>.csv``.
    """
    now = now or datetime.now(timezone.utc)
    stem = Path(file_name).stem or "companies"
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    suffix = secrets.token_hex(4)
    return Path(results_dir) / f"{stem}_{stamp}_{suffix}.csv"


class JobEngine:
    """
    Orchestrator for a single job epoch.

    Steps:
    1. Ingest the company list (once per job; later epochs reuse it)
    2. Open a fresh CSV sink
    3. Acquire a browser session, released on every exit path
    4. Resolve companies one at a time, checking for a stop request before each
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        resolver: Optional[LinkResolver] = None,
        results_dir: Optional[str] = None,
        inter_item_delay_ms: Optional[int] = None,
        recalc_every: Optional[int] = None,
        recalc_seconds: Optional[float] = None,
        ingest_fn: Callable[[str], List[str]] = ingest,
        clock: Callable[[], float] = time.time,
    ):
        self.fetcher = fetcher or PageFetcher()
        self.resolver = resolver or LinkResolver()
        self.results_dir = Path(results_dir or settings.RESULTS_DIR)
        self.inter_item_delay_ms = (
            settings.INTER_ITEM_DELAY_MS if inter_item_delay_ms is None else inter_item_delay_ms
        )
        self.recalc_every = recalc_every
        self.recalc_seconds = recalc_seconds
        self.ingest_fn = ingest_fn
        self.clock = clock

    async def run(self, job: Job) -> Job:
        """
        Run one epoch of a job that has already been moved to ``processing``.

        Never raises; failures end the job in the ``error`` state.
        """
        logger.info(f"Starting job {job.id} epoch {job.epoch} for {job.file_name}")
        tracker = TelemetryTracker(
            job,
            recalc_every=self.recalc_every,
            recalc_seconds=self.recalc_seconds,
            clock=self.clock,
        )

        try:
            await self._load_companies(job)
            sink = self._open_sink(job)

            async with self.fetcher.acquire_session() as session:
                await self._process_companies(job, session, sink, tracker)

        except IngestionError as e:
            logger.error(f"Ingestion failed for job {job.id}: {e.message}")
            self._finish(job, JobStatus.ERROR, tracker, error=e.message)
        except Exception as e:
            logger.error(f"Error processing job {job.id}: {e}", exc_info=True)
            self._finish(job, JobStatus.ERROR, tracker, error=str(e) or e.__class__.__name__)

        logger.info(
            f"Job {job.id} finished with status {job.status.value}: "
            f"{job.processed}/{job.total} processed, {job.success_count} found"
        )
        return job

    async def _load_companies(self, job: Job) -> None:
        if job.ingested:
            with job.lock:
                job.total = len(job.companies)
            return

        companies = await asyncio.to_thread(self.ingest_fn, job.source_path)
        with job.lock:
            job.companies = list(companies)
            job.total = len(job.companies)
            job.ingested = True

    def _open_sink(self, job: Job) -> CsvSink:
        output_path = build_output_path(self.results_dir, job.file_name)
        sink = CsvSink(output_path).open()
        with job.lock:
            job.output_path = str(output_path)
        return sink

    async def _process_companies(self, job: Job, session, sink: CsvSink, tracker: TelemetryTracker) -> None:
        companies = job.companies
        total = len(companies)
        delay = self.inter_item_delay_ms / 1000

        for index, company in enumerate(companies):
            if job.should_stop.is_set():
                logger.info(f"Job {job.id} stopped before item {index + 1}/{total}")
                self._finish(job, JobStatus.STOPPED, tracker)
                return

            with job.lock:
                job.current_company = company
                job.progress = math.floor((index + 1) / total * 100)

            started = time.perf_counter()
            result = await self.resolver.resolve(company, session)
            duration_ms = int((time.perf_counter() - started) * 1000)

            with job.lock:
                tracker.record(duration_ms, result.succeeded)
                job.results.append(
                    CompanyResult(
                        company=company,
                        website=result.website,
                        processing_time_ms=duration_ms,
                        succeeded=result.succeeded,
                    )
                )
                job.processed = index + 1

            outcome = sink.append_row(company, result.website)
            if outcome is AppendOutcome.DROPPED:
                logger.warning(f"Row for '{company}' was not written to {sink.path}")

            with job.lock:
                tracker.maybe_recompute()

            if delay > 0 and index < total - 1:
                await asyncio.sleep(delay)

        self._finish(job, JobStatus.COMPLETED, tracker)

    def _finish(self, job: Job, status: JobStatus, tracker: TelemetryTracker, error: Optional[str] = None) -> None:
        with job.lock:
            if status != JobStatus.ERROR:
                tracker.maybe_recompute(force=True)
            if status == JobStatus.COMPLETED:
                job.progress = 100
            job.status = status
            job.error = error
            job.end_time = self.clock()
