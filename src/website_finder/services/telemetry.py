"""
Per-job throughput telemetry: counters, rolling speed and ETA.
"""
import time
from typing import Callable, Optional

from ..core.config import settings
from ..models.job import Job


def average_processing_time_ms(job: Job) -> float:
    """Arithmetic mean of per-item durations."""
    times = job.company_processing_times
    if not times:
        return 0.0
    return sum(times) / len(times)


def success_ratio(job: Job) -> float:
    """Percentage of processed items that produced a website."""
    if job.processed == 0:
        return 0.0
    return job.success_count / job.processed * 100


def eta_seconds(job: Job) -> Optional[float]:
    """Seconds remaining at the last computed speed, None while unknown."""
    if job.processing_speed <= 0:
        return None
    return (job.total - job.processed) / job.processing_speed


def total_duration_sec(job: Job, now: Optional[float] = None) -> float:
    """Elapsed epoch time; frozen once the job reaches a terminal state."""
    if job.start_time is None:
        return 0.0
    end = job.end_time if job.end_time is not None else (now if now is not None else time.time())
    return max(0.0, end - job.start_time)


class TelemetryTracker:
    """
    Maintains the telemetry fields of one job.

    The speed estimate is only refreshed every ``recalc_every`` items or when
    ``recalc_seconds`` passed since the last refresh, so readers may observe a
    slightly stale value.
    """

    def __init__(
        self,
        job: Job,
        recalc_every: Optional[int] = None,
        recalc_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.job = job
        self.recalc_every = recalc_every or settings.SPEED_RECALC_EVERY
        self.recalc_seconds = settings.SPEED_RECALC_SECONDS if recalc_seconds is None else recalc_seconds
        self.clock = clock

    def record(self, duration_ms: int, succeeded: bool) -> None:
        """Account for one resolved item."""
        job = self.job
        job.company_processing_times.append(int(duration_ms))
        if succeeded:
            job.success_count += 1
        else:
            job.failure_count += 1

    def should_recompute(self, now: float) -> bool:
        job = self.job
        if job.processed > 0 and job.processed % self.recalc_every == 0:
            return True
        if job.last_speed_calc is None:
            return True
        return now - job.last_speed_calc >= self.recalc_seconds

    def recompute_speed(self, now: float) -> None:
        job = self.job
        elapsed = now - job.start_time if job.start_time is not None else 0.0
        job.processing_speed = job.processed / elapsed if elapsed > 0 else 0.0
        job.last_speed_calc = now

    def maybe_recompute(self, force: bool = False) -> bool:
        """Refresh the speed estimate if the throttle allows it."""
        now = self.clock()
        if force or self.should_recompute(now):
            self.recompute_speed(now)
            return True
        return False
