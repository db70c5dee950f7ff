"""Scheduler for the effective-today checks.

Two jobs keep the clock current: a periodic check and a one-shot check armed
for the next cutoff crossing, re-armed each time it fires. The debounced
remote save is scheduled on the same scheduler by the sync service.
"""

import contextlib
import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from countdown.core.config import constants
from countdown.services.clock import CutoffClock


logger = logging.getLogger(__name__)


# One-shot jobs must still run after the loop was blocked past their run date
JOB_DEFAULTS = {"coalesce": True, "misfire_grace_time": None}


def create_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler(job_defaults=JOB_DEFAULTS)


async def check_effective_today(clock: CutoffClock) -> None:
    """Periodic job: re-evaluate effective today."""
    try:
        await clock.check()
    except Exception as e:
        logger.error(f"Error in effective today check: {e}")


async def on_cutoff_crossing(scheduler: AsyncIOScheduler, clock: CutoffClock) -> None:
    """One-shot job at the cutoff: advance effective today and arm the next crossing."""
    logger.info("Cutoff crossing reached")
    try:
        await clock.check()
    except Exception as e:
        logger.error(f"Error in cutoff crossing check: {e}")
    finally:
        arm_cutoff_job(scheduler, clock)


def arm_cutoff_job(scheduler: AsyncIOScheduler, clock: CutoffClock) -> None:
    """Schedule the one-shot check at the next cutoff crossing."""
    run_date = clock.next_crossing()
    scheduler.add_job(
        on_cutoff_crossing,
        trigger=DateTrigger(run_date=run_date),
        args=[scheduler, clock],
        id=constants.JOB_CUTOFF_CROSSING,
        name="Advance Effective Today At Cutoff",
        replace_existing=True,
        misfire_grace_time=None,
        coalesce=True,
    )
    logger.info(f"Scheduled cutoff check at {run_date.isoformat()}")


def start_scheduler(scheduler: AsyncIOScheduler, clock: CutoffClock, *, check_seconds: int) -> None:
    """Register the clock jobs and start the scheduler.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        check_effective_today,
        trigger=IntervalTrigger(seconds=check_seconds),
        args=[clock],
        id=constants.JOB_CLOCK_CHECK,
        name="Check Effective Today",
        replace_existing=True,
    )
    logger.info(f"Scheduled effective today check: every {check_seconds}s")

    arm_cutoff_job(scheduler, clock)

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Cancel all timers and stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    logger.info("Stopping scheduler")
    for job_id in (constants.JOB_CLOCK_CHECK, constants.JOB_CUTOFF_CROSSING, constants.JOB_REMOTE_SAVE):
        with contextlib.suppress(JobLookupError):
            scheduler.remove_job(job_id)
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")
