"""Cron-style driver that triggers reminder sweeps.

Owns no state of its own; it only decides when ``run_sweep`` is called.
"""

from typing import Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import Config
from ..reminders.engine import ReminderEngine
from ..reminders.schemas import SweepResult
from ..utils.logging import get_logger

logger = get_logger(__name__)

SWEEP_JOB_ID = "reminder_sweep"


class ReminderScheduler:
    """Runs the reminder sweep daily and, optionally, once at startup."""

    def __init__(
        self,
        engine: ReminderEngine,
        config: Config,
        scheduler: Optional[BaseScheduler] = None,
    ):
        """Initialize the driver.

        Args:
            engine: Engine whose sweep is triggered
            config: Supplies sweep time and the startup-run flag
            scheduler: APScheduler instance; a BlockingScheduler in UTC by default
        """
        self.engine = engine
        self.config = config
        self.scheduler = scheduler or BlockingScheduler(timezone="UTC")

    def _run_job(self) -> None:
        result = self.engine.run_sweep()
        if result.errors:
            logger.warning("Scheduled sweep finished with %d error(s)", len(result.errors))

    def schedule(self) -> None:
        """Register the daily sweep job."""
        # One sweep at a time; missed runs collapse into a single catch-up run.
        self.scheduler.add_job(
            self._run_job,
            trigger=CronTrigger(
                hour=self.config.sweep_hour,
                minute=self.config.sweep_minute,
                timezone="UTC",
            ),
            id=SWEEP_JOB_ID,
            name="Lending reminder sweep",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info(
            "Reminder sweep scheduled daily at %02d:%02d UTC",
            self.config.sweep_hour,
            self.config.sweep_minute,
        )

    def start(self, run_on_startup: Optional[bool] = None) -> None:
        """Schedule the job, optionally sweep once now, then start the scheduler.

        With the default BlockingScheduler this call blocks until shutdown.
        """
        if run_on_startup is None:
            run_on_startup = self.config.sweep_on_startup

        self.schedule()
        if run_on_startup:
            logger.info("Running startup reminder sweep")
            self.run_now()
        self.scheduler.start()

    def run_now(self) -> SweepResult:
        """Operator trigger: run one sweep synchronously."""
        return self.engine.run_sweep()

    def shutdown(self, wait: bool = True) -> None:
        """Stop the scheduler if it is running."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
