"""APScheduler setup for periodic tasks."""

import datetime
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


def create_scheduler(ingest, interval_minutes: int) -> AsyncIOScheduler:
    """Create the scheduler with the location retention sweep.

    The sweep runs once at startup and then every ``interval_minutes``.
    """
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        ingest.prune,
        "interval",
        minutes=interval_minutes,
        id="prune_locations",
        name="Delete expired location samples",
        max_instances=1,
        next_run_time=datetime.datetime.now(datetime.timezone.utc),
    )

    logger.info("Location cleanup scheduled every %d minutes", interval_minutes)
    return scheduler
