"""
Scheduled tasks for the POS bridge.

The full stock sync runs daily inside the FastAPI process to correct any
drift left by missed stock webhooks.
"""

import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from pos_bridge.core.config import Settings, get_settings
from pos_bridge.dependencies import get_reconciliation_locks, get_sync_log
from pos_bridge.services.epos.jobs import run_full_sync_job

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None

FULL_SYNC_JOB_ID = "epos_full_sync"


async def full_sync_task():
    """Task to reconcile all stock from ePOS Now"""
    try:
        logger.info("=== SCHEDULED FULL SYNC STARTING ===")
        result = await run_full_sync_job(
            get_settings(),
            get_sync_log(),
            locks=get_reconciliation_locks()
        )
        logger.info(f"Scheduled full sync finished: {result.to_dict()}")
    except Exception as e:
        logger.exception(f"Error in scheduled full sync task: {str(e)}")


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now()}")


def create_scheduler(settings: Optional[Settings] = None) -> AsyncIOScheduler:
    """Create and configure the scheduler"""
    global scheduler

    if scheduler is not None:
        return scheduler

    settings = settings or get_settings()
    scheduler = AsyncIOScheduler()
    scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    if settings.FULL_SYNC_SCHEDULE_ENABLED:
        scheduler.add_job(
            full_sync_task,
            CronTrigger(hour=settings.FULL_SYNC_CRON_HOUR, minute=settings.FULL_SYNC_CRON_MINUTE),
            id=FULL_SYNC_JOB_ID,
            name="ePOS Now Full Stock Sync",
            replace_existing=True,
            max_instances=1,  # Only one sync at a time
            misfire_grace_time=3600
        )
        logger.info(
            f"Full sync scheduled daily at {settings.FULL_SYNC_CRON_HOUR:02d}:{settings.FULL_SYNC_CRON_MINUTE:02d}"
        )
    else:
        logger.info("Scheduled full sync is disabled. Set FULL_SYNC_SCHEDULE_ENABLED=true to enable")

    return scheduler


async def start_scheduler():
    """Start the scheduler"""
    global scheduler

    if scheduler is None:
        scheduler = create_scheduler()

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started successfully")

        for job in scheduler.get_jobs():
            logger.info(f"  - {job.name}: {job.trigger}")


async def stop_scheduler():
    """Stop the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped successfully")
    scheduler = None
