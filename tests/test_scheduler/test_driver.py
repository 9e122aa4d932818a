"""Tests for the reminder scheduler driver."""

from dataclasses import replace
from datetime import datetime

import pytest
from apscheduler.triggers.cron import CronTrigger

from booklend.reminders.schemas import SweepResult
from booklend.scheduler import SWEEP_JOB_ID, ReminderScheduler


class FakeEngine:
    """Engine stand-in counting sweeps."""

    def __init__(self, errors=None):
        self.calls = 0
        self.errors = list(errors or [])

    def run_sweep(self):
        self.calls += 1
        return SweepResult(started_at=datetime(2024, 3, 15, 8, 0), errors=self.errors)


class FakeScheduler:
    """Records jobs instead of running them."""

    def __init__(self):
        self.jobs = []
        self.running = False
        self.shutdown_calls = []

    def add_job(self, func, **kwargs):
        self.jobs.append((func, kwargs))

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.shutdown_calls.append(wait)
        self.running = False


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def driver(engine, config, fake_scheduler):
    return ReminderScheduler(engine, replace(config, sweep_hour=6, sweep_minute=30), fake_scheduler)


class TestSchedule:
    """Tests for job registration."""

    def test_daily_cron_job(self, driver, fake_scheduler):
        """The sweep runs daily at the configured UTC time, one at a time."""
        driver.schedule()

        func, kwargs = fake_scheduler.jobs[0]
        assert kwargs["id"] == SWEEP_JOB_ID
        assert kwargs["max_instances"] == 1
        assert kwargs["coalesce"] is True
        assert kwargs["replace_existing"] is True
        trigger = kwargs["trigger"]
        assert isinstance(trigger, CronTrigger)
        fields = {f.name: str(f) for f in trigger.fields}
        assert fields["hour"] == "6"
        assert fields["minute"] == "30"

    def test_job_runs_sweep(self, driver, engine, fake_scheduler):
        """The registered job triggers a sweep."""
        driver.schedule()
        func, _ = fake_scheduler.jobs[0]

        func()

        assert engine.calls == 1

    def test_job_tolerates_sweep_errors(self, config, fake_scheduler):
        """A sweep with errors does not raise out of the job."""
        engine = FakeEngine(errors=["overdue: boom"])
        driver = ReminderScheduler(engine, config, fake_scheduler)
        driver.schedule()

        fake_scheduler.jobs[0][0]()

        assert engine.calls == 1


class TestStart:
    """Tests for starting the driver."""

    def test_startup_run(self, driver, engine, fake_scheduler):
        """A startup sweep runs before the scheduler starts."""
        driver.start(run_on_startup=True)

        assert engine.calls == 1
        assert fake_scheduler.running
        assert len(fake_scheduler.jobs) == 1

    def test_no_startup_run(self, driver, engine, fake_scheduler):
        """The startup sweep can be disabled."""
        driver.start(run_on_startup=False)

        assert engine.calls == 0
        assert fake_scheduler.running

    def test_startup_run_from_config(self, engine, config, fake_scheduler):
        """Without an explicit flag the config decides."""
        driver = ReminderScheduler(engine, replace(config, sweep_on_startup=False), fake_scheduler)

        driver.start()

        assert engine.calls == 0

    def test_run_now(self, driver, engine):
        """The operator trigger runs one sweep and returns its summary."""
        result = driver.run_now()

        assert isinstance(result, SweepResult)
        assert engine.calls == 1

    def test_shutdown(self, driver, fake_scheduler):
        """Shutdown stops a running scheduler only."""
        driver.shutdown()
        assert fake_scheduler.shutdown_calls == []

        driver.start(run_on_startup=False)
        driver.shutdown(wait=False)
        assert fake_scheduler.shutdown_calls == [False]
