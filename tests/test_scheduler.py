"""
Tests for the scheduler module.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from scholarship_search.config import ConfigError
from scholarship_search.scheduler import FETCH_JOB_ID, ImportScheduler


@pytest.fixture
def import_scheduler():
    scheduler = ImportScheduler(Mock(), scheduler=BackgroundScheduler(timezone=timezone.utc))
    yield scheduler
    scheduler.shutdown()


class TestImportScheduler:
    """Tests for registering the import job."""

    def test_apply_registers_job(self, import_scheduler):
        import_scheduler.apply_schedule("daily")

        assert import_scheduler.scheduler.get_job(FETCH_JOB_ID) is not None
        assert import_scheduler.schedule_name == "daily"

    def test_next_run_time(self, import_scheduler):
        now = datetime.now(timezone.utc)
        import_scheduler.apply_schedule("hourly")

        next_run = import_scheduler.next_run_time(now)

        assert next_run is not None
        assert now < next_run <= now + timedelta(hours=1, seconds=5)

    def test_never_clears(self, import_scheduler):
        import_scheduler.apply_schedule("weekly")
        import_scheduler.apply_schedule("never")

        assert import_scheduler.scheduler.get_job(FETCH_JOB_ID) is None
        assert import_scheduler.next_run_time() is None

    def test_change_replaces_job(self, import_scheduler):
        import_scheduler.apply_schedule("hourly")
        import_scheduler.apply_schedule("weekly")

        jobs = import_scheduler.scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].trigger.interval == timedelta(weeks=1)

    def test_unknown_schedule(self, import_scheduler):
        with pytest.raises(ConfigError):
            import_scheduler.apply_schedule("fortnightly")

    def test_clear_without_job(self, import_scheduler):
        import_scheduler.clear()

        assert import_scheduler.next_run_time() is None
