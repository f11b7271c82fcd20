"""
Interval scheduler service using APScheduler.
Drives the periodic project reload.
"""
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.base import JobLookupError
from typing import Callable, Dict, Optional
import logging

logger = logging.getLogger(__name__)

_scheduler: Optional[AsyncIOScheduler] = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the singleton scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(timezone="UTC")
    return _scheduler


def start_scheduler(scheduler: Optional[AsyncIOScheduler] = None):
    """Start the scheduler if not already running. Must run inside the event loop."""
    scheduler = scheduler or get_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("[Scheduler] Started")


def shutdown_scheduler(scheduler: Optional[AsyncIOScheduler] = None):
    """Shutdown the scheduler gracefully."""
    global _scheduler
    scheduler = scheduler or get_scheduler()
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("[Scheduler] Shutdown")
    if scheduler is _scheduler:
        _scheduler = None


def register_interval_job(
    job_id: str,
    seconds: int,
    callback: Callable,
    scheduler: Optional[AsyncIOScheduler] = None,
    **kwargs
) -> str:
    """
    Register a job that fires every `seconds` seconds.

    Overlapping runs are allowed through to the callback, which is expected
    to guard itself (SiteSession.load_projects drops overlapping calls).

    Args:
        job_id: Unique identifier for the job
        seconds: Fixed interval, must be > 0
        callback: Async function to call when job fires
        scheduler: Scheduler to use (default: the singleton)
        **kwargs: Additional arguments passed to the callback

    Returns:
        The job_id
    """
    if seconds <= 0:
        raise ValueError("Interval must be greater than zero")

    scheduler = scheduler or get_scheduler()
    scheduler.add_job(
        callback,
        trigger=IntervalTrigger(seconds=seconds, timezone="UTC"),
        id=job_id,
        replace_existing=True,
        max_instances=2,
        coalesce=True,
        kwargs=kwargs
    )

    logger.info(f"[Scheduler] Registered interval job: {job_id} every {seconds}s")
    return job_id


def remove_job(job_id: str, scheduler: Optional[AsyncIOScheduler] = None) -> bool:
    """
    Remove a job from the scheduler.

    Returns:
        True if job was removed, False if not found
    """
    scheduler = scheduler or get_scheduler()
    try:
        scheduler.remove_job(job_id)
        logger.info(f"[Scheduler] Removed job: {job_id}")
        return True
    except JobLookupError:
        logger.warning(f"[Scheduler] Job not found: {job_id}")
        return False


def get_job_info(job_id: str, scheduler: Optional[AsyncIOScheduler] = None) -> Optional[Dict]:
    """Get information about a scheduled job."""
    scheduler = scheduler or get_scheduler()
    job = scheduler.get_job(job_id)
    if job:
        return {
            "id": job.id,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger)
        }
    return None
