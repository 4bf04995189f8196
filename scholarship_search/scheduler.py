"""
Periodic triggering of the import run.

Wraps an APScheduler scheduler holding at most one import job. Changing
the schedule always clears the existing job first; "never" leaves it
cleared.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from scholarship_search.config import NEVER, SCHEDULE_INTERVALS, validate_schedule
from scholarship_search.utils import get_logger


logger = get_logger("scheduler")

FETCH_JOB_ID = "scholarship_search_fetch"


class ImportScheduler:
    """
    Registers the fetch callback at one of the fixed intervals.

    Usage:
        scheduler = ImportScheduler(run_callback)
        scheduler.apply_schedule("daily")
        scheduler.next_run_time()
        scheduler.start()   # blocks for BlockingScheduler
    """

    def __init__(self, callback: Callable[[], None],
                 scheduler: Optional[BaseScheduler] = None):
        self.callback = callback
        self.scheduler = scheduler or BlockingScheduler(timezone=timezone.utc)
        self.schedule_name = NEVER

    def apply_schedule(self, name: str) -> None:
        """
        Replace the import job according to a schedule name.

        Raises:
            ConfigError: If the name is not a known schedule.
        """
        name = validate_schedule(name)
        self.clear()
        self.schedule_name = name

        if name == NEVER:
            logger.info("Import schedule cleared")
            return

        self.scheduler.add_job(
            self.callback,
            trigger=IntervalTrigger(seconds=SCHEDULE_INTERVALS[name], timezone=timezone.utc),
            id=FETCH_JOB_ID,
            name="Scholarship import",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info(f"Import scheduled: {name} (every {SCHEDULE_INTERVALS[name]}s)")

    def clear(self) -> None:
        if self.scheduler.get_job(FETCH_JOB_ID) is not None:
            self.scheduler.remove_job(FETCH_JOB_ID)
        self.schedule_name = NEVER

    def next_run_time(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """When the import job fires next, or None if unscheduled."""
        job = self.scheduler.get_job(FETCH_JOB_ID)
        if job is None:
            return None
        now = now or datetime.now(timezone.utc)
        return job.trigger.get_next_fire_time(None, now)

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
